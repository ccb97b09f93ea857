import os
from dotenv import load_dotenv

load_dotenv()


def env_flag_disabled(value: str) -> bool:
    """True for the values that switch an optional setting off ('', 0, false, none)."""
    return value.strip().lower() in ('', '0', 'false', 'none')


class Config:
    # Upstream trading engine API (read-only, GET only)
    API_BASE_URL = os.getenv('DASHBOARD_API_URL', 'http://localhost:8000/api').rstrip('/')
    API_TIMEOUT = float(os.getenv('DASHBOARD_API_TIMEOUT', '10'))  # seconds per request

    # Web Dashboard (aiohttp)
    WEB_DASHBOARD_HOST = os.getenv('WEB_DASHBOARD_HOST', '0.0.0.0')
    WEB_DASHBOARD_PORT = int(os.getenv('WEB_DASHBOARD_PORT', '3000'))

    # Circuit breaker and system pages refresh on this interval
    POLL_INTERVAL_SECONDS = float(os.getenv('POLL_INTERVAL_SECONDS', '30'))

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
    LOG_FILE = os.getenv('LOG_FILE', 'dashboard.log')

    # Per-page fetch sizes
    OVERVIEW_TRADES_LIMIT = 3
    TRADES_PAGE_LIMIT = 100
    SIGNALS_PAGE_LIMIT = 100
    CYCLES_PAGE_LIMIT = 20
    MDSE_EVENTS_HOURS = 24
    MDSE_TRADES_LIMIT = 20
    EXECUTION_QUALITY_LIMIT = 50
    MARKET_SNAPSHOTS_LIMIT = 20

    @classmethod
    def validate(cls):
        """Validate that the configuration can start a server"""
        if not cls.API_BASE_URL.startswith(('http://', 'https://')):
            raise ValueError(f"DASHBOARD_API_URL must be an http(s) URL, got {cls.API_BASE_URL!r}")
        if not 1 <= cls.WEB_DASHBOARD_PORT <= 65535:
            raise ValueError(f"WEB_DASHBOARD_PORT out of range: {cls.WEB_DASHBOARD_PORT}")
        if cls.POLL_INTERVAL_SECONDS <= 0:
            raise ValueError("POLL_INTERVAL_SECONDS must be positive")
        if cls.API_TIMEOUT <= 0:
            raise ValueError("DASHBOARD_API_TIMEOUT must be positive")
