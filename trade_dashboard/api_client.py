import logging
from typing import Dict, List, Optional

import requests

from .config import Config
from .models import (
    AnalysisCycle, CircuitBreakerState, ExecutionQuality, MarketSnapshot,
    MdseDetectorScore, MdseEvent, MdseTrade, PerformanceSummary, PortfolioState,
    Signal, SystemHealth, SystemInfo, SystemMetrics, Trade, TradeSummary,
    as_list,
)
from .polling import CancelToken

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Upstream API failure. `status` is None when no HTTP response was received."""

    def __init__(self, status: Optional[int], reason: str):
        self.status = status
        self.reason = reason
        if status is None:
            message = f"API error: {reason}"
        else:
            message = f"API error: {status} {reason}".rstrip()
        super().__init__(message)


class DashboardApiClient:
    """Read-only client for the trading engine's JSON API"""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        self.base_url = (base_url or Config.API_BASE_URL).rstrip('/')
        self.timeout = timeout if timeout is not None else Config.API_TIMEOUT
        self.session = session or requests.Session()

    def close(self):
        self.session.close()

    def _get(self, path: str, params: Optional[Dict] = None,
             cancel: Optional[CancelToken] = None):
        """GET a path under the base URL and return the decoded JSON body"""
        if cancel is not None:
            cancel.raise_if_cancelled()

        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.warning(f"GET {path} failed: {e}")
            raise ApiError(None, str(e)) from e

        # The caller stopped caring while the request was in flight
        if cancel is not None:
            cancel.raise_if_cancelled()

        if not response.ok:
            logger.warning(f"GET {path} returned {response.status_code} {response.reason}")
            raise ApiError(response.status_code, response.reason or '')

        try:
            return response.json()
        except ValueError as e:
            logger.warning(f"GET {path} returned a non-JSON body")
            raise ApiError(response.status_code, 'invalid JSON') from e

    # Trades
    def get_trades(self, symbol: Optional[str] = None, limit: int = 50,
                   cancel: Optional[CancelToken] = None) -> List[Trade]:
        params = {'limit': limit}
        if symbol:
            params['symbol'] = symbol
        return as_list(self._get('/trades', params=params, cancel=cancel), Trade)

    def get_trade_summary(self, cancel: Optional[CancelToken] = None) -> TradeSummary:
        return TradeSummary.from_dict(self._get('/trades/summary', cancel=cancel))

    # Signals and analysis cycles
    def get_signals(self, symbol: Optional[str] = None, limit: int = 50,
                    cancel: Optional[CancelToken] = None) -> List[Signal]:
        params = {'limit': limit}
        if symbol:
            params['symbol'] = symbol
        return as_list(self._get('/signals', params=params, cancel=cancel), Signal)

    def get_analysis_cycles(self, limit: int = 50,
                            cancel: Optional[CancelToken] = None) -> List[AnalysisCycle]:
        return as_list(self._get('/cycles', params={'limit': limit}, cancel=cancel), AnalysisCycle)

    # Portfolio and circuit breaker
    def get_portfolio_state(self, cancel: Optional[CancelToken] = None) -> PortfolioState:
        return PortfolioState.from_dict(self._get('/portfolio/state', cancel=cancel))

    def get_circuit_breaker_state(self, cancel: Optional[CancelToken] = None) -> CircuitBreakerState:
        return CircuitBreakerState.from_dict(self._get('/cb/state', cancel=cancel))

    # MDSE detectors
    def get_mdse_scores(self, cancel: Optional[CancelToken] = None) -> List[MdseDetectorScore]:
        return as_list(self._get('/mdse/scores', cancel=cancel), MdseDetectorScore)

    def get_mdse_events(self, hours: int = 24,
                        cancel: Optional[CancelToken] = None) -> List[MdseEvent]:
        return as_list(self._get('/mdse/events', params={'hours': hours}, cancel=cancel), MdseEvent)

    def get_mdse_trades(self, limit: int = 20,
                        cancel: Optional[CancelToken] = None) -> List[MdseTrade]:
        return as_list(self._get('/mdse/trades', params={'limit': limit}, cancel=cancel), MdseTrade)

    # System
    def get_system_health(self, cancel: Optional[CancelToken] = None) -> SystemHealth:
        return SystemHealth.from_dict(self._get('/system/health', cancel=cancel))

    def get_system_metrics(self, cancel: Optional[CancelToken] = None) -> SystemMetrics:
        return SystemMetrics.from_dict(self._get('/system/metrics', cancel=cancel))

    def get_system_info(self, cancel: Optional[CancelToken] = None) -> SystemInfo:
        return SystemInfo.from_dict(self._get('/system/info', cancel=cancel))

    # Performance
    def get_performance_summary(self, cancel: Optional[CancelToken] = None) -> PerformanceSummary:
        return PerformanceSummary.from_dict(self._get('/performance/summary', cancel=cancel))

    def get_execution_quality(self, limit: int = 50,
                              cancel: Optional[CancelToken] = None) -> List[ExecutionQuality]:
        response = self._get('/performance/execution-quality', params={'limit': limit}, cancel=cancel)
        return as_list(response, ExecutionQuality)

    def get_market_snapshots(self, limit: int = 20,
                             cancel: Optional[CancelToken] = None) -> List[MarketSnapshot]:
        response = self._get('/performance/market-snapshots', params={'limit': limit}, cancel=cancel)
        return as_list(response, MarketSnapshot)
