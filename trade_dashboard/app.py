"""
Command-line entry point: `trade-dashboard [--host H] [--port P] [--api-url URL] [--log-level LEVEL]`
"""
import argparse
import logging
import sys

from .api_client import DashboardApiClient
from .config import Config
from .logger import setup_logging
from .web_dashboard import WebDashboard

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(description='Read-only monitoring dashboard for the trading engine API')
    parser.add_argument('--host', default=None,
                        help=f'Interface to bind (default: {Config.WEB_DASHBOARD_HOST})')
    parser.add_argument('--port', '-p', type=int, default=None,
                        help=f'Port to listen on (default: {Config.WEB_DASHBOARD_PORT})')
    parser.add_argument('--api-url', default=None,
                        help=f'Trading engine API base URL (default: {Config.API_BASE_URL})')
    parser.add_argument('--log-level', default=None,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help=f'Logging level (default: {Config.LOG_LEVEL})')
    return parser


def apply_overrides(args):
    """Command-line flags take precedence over the environment"""
    if args.host:
        Config.WEB_DASHBOARD_HOST = args.host
    if args.port is not None:
        Config.WEB_DASHBOARD_PORT = args.port
    if args.api_url:
        Config.API_BASE_URL = args.api_url.rstrip('/')
    if args.log_level:
        Config.LOG_LEVEL = args.log_level


def main(argv=None):
    args = build_parser().parse_args(argv)
    apply_overrides(args)
    setup_logging()

    try:
        Config.validate()
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    client = DashboardApiClient(Config.API_BASE_URL, Config.API_TIMEOUT)
    dashboard = WebDashboard(client)
    try:
        dashboard.run()
    except OSError:
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
