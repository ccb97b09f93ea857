"""
Pytest configuration and shared fixtures for dashboard tests.

Two canned API states are provided: a healthy engine with one of everything,
and an engine that answers every optional field with null.
"""
import copy

import pytest

from trade_dashboard.api_client import DashboardApiClient

API_BASE = 'http://engine.test/api'


DEFAULT_RESPONSES = {
    '/trades': [
        {
            'id': 1,
            'symbol': 'BTC/USDT',
            'side': 'BUY',
            'entry_price': 100000,
            'exit_price': 100500,
            'quantity': 0.1,
            'pnl': 50,
            'pnl_pct': 0.5,
            'fees': 1,
            'entry_time': '2026-01-01T00:00:00Z',
            'exit_time': '2026-01-01T01:00:00Z',
            'exit_reason': 'tp',
            'strategy': 'trend',
            'cycle_id': 1,
            'created_at': '2026-01-01',
        },
    ],
    '/trades/summary': {
        'total_trades': 1,
        'winning_trades': 1,
        'losing_trades': 0,
        'win_rate': 1,
        'total_pnl': 50,
        'profit_factor': 2,
    },
    '/signals': [
        {
            'id': 1,
            'timestamp': '2026-01-01T00:00:00Z',
            'symbol': 'BTC/USDT',
            'action': 'buy',
            'score': 0.8,
            'confidence': 75,
            'executed': 1,
            'skip_reason': None,
            'strategy_type': 'trend',
            'cycle_id': 1,
            'created_at': '2026-01-01',
        },
    ],
    '/portfolio/state': {
        'data': {
            'last_updated': '2026-01-01T00:00:00Z',
            'total_equity': 10000,
            'strategies': {
                'btc_usdt': {
                    'symbol': 'BTC/USDT',
                    'strategy': 'trend',
                    'allocation_pct': 50,
                    'equity': 5000,
                    'initial_equity': 4500,
                },
            },
        },
    },
    '/cb/state': {
        'data': {
            'status': 'NORMAL',
            'recent_events': [],
        },
    },
    '/cycles': [],
    '/mdse/scores': [
        {
            'detector_name': 'detector-a',
            'win_rate': 61,
            'avg_pnl': 12.5,
            'weight': 0.5,
            'sample_count': 10,
        },
    ],
    '/mdse/events': [
        {
            'id': 1,
            'detector': 'detector-a',
            'symbol': 'BTC/USDT',
            'direction': 'long',
            'confidence': 80,
            'timestamp': '2026-01-01T00:00:00Z',
        },
    ],
    '/mdse/trades': [
        {
            'event_id': 1,
            'symbol': 'BTC/USDT',
            'direction': 'long',
            'entry_price': 100000,
            'exit_price': 100100,
            'pnl': 10,
            'position_size': 0.1,
        },
    ],
    '/system/health': {
        'status': 'OK',
        'uptime_seconds': 3600,
        'pid': 1234,
    },
    '/system/metrics': {
        'memory_mb': 123.4,
        'cpu_percent': 12.3,
        'ws_connected': True,
        'last_fr_fetch': '2026-01-01T00:00:00Z',
        'open_positions': 1,
    },
    '/system/info': {
        'python_version': '3.10',
        'platform': 'linux',
        'db_path': 'data/trades.db',
        'api_version': '1.0.0',
    },
    '/performance/summary': {
        'total_trades': 1,
        'winning_trades': 1,
        'losing_trades': 0,
        'win_rate': 1,
        'total_pnl': 50,
        'profit_factor': 2,
        'avg_slippage': 0.05,
    },
    '/performance/execution-quality': [
        {
            'trade_id': 1,
            'expected_price': 100000,
            'actual_price': 100010,
            'slippage_pct': 0.01,
            'api_latency_ms': 120,
            'timestamp': '2026-01-01T00:00:00Z',
        },
    ],
    '/performance/market-snapshots': [
        {
            'id': 1,
            'timestamp': '2026-01-01T00:00:00Z',
            'symbol': 'BTC/USDT',
            'price': 100000,
            'volume': 1000,
            'rsi': 50,
            'adx': 25,
            'macd': 10,
            'cycle_id': 1,
        },
    ],
}


NULL_RESPONSES = {
    '/trades': [],
    '/trades/summary': {
        'total_trades': 0,
        'winning_trades': None,
        'losing_trades': None,
        'win_rate': None,
        'total_pnl': None,
        'profit_factor': None,
    },
    '/signals': [],
    '/portfolio/state': {'data': {}},
    '/cb/state': {'data': {'status': 'inactive'}},
    '/cycles': [],
    '/mdse/scores': [],
    '/mdse/events': [],
    '/mdse/trades': [],
    '/system/health': {'status': 'unreachable'},
    '/system/metrics': {
        'memory_mb': None,
        'cpu_percent': None,
        'ws_connected': None,
        'last_fr_fetch': None,
        'open_positions': None,
    },
    '/system/info': {
        'python_version': '3.10',
        'platform': 'linux',
        'db_path': 'data/trades.db',
        'api_version': '1.0.0',
    },
    '/performance/summary': {
        'total_trades': 0,
        'winning_trades': None,
        'losing_trades': None,
        'win_rate': None,
        'total_pnl': None,
        'profit_factor': None,
        'avg_slippage': None,
    },
    '/performance/execution-quality': [],
    '/performance/market-snapshots': [
        {
            'id': 1,
            'timestamp': '2026-01-01T00:00:00Z',
            'symbol': 'BTC/USDT',
            'price': None,
            'volume': None,
            'rsi': None,
            'adx': None,
            'macd': None,
            'cycle_id': 1,
        },
    ],
}


@pytest.fixture
def default_responses():
    return copy.deepcopy(DEFAULT_RESPONSES)


@pytest.fixture
def null_responses():
    return copy.deepcopy(NULL_RESPONSES)


@pytest.fixture
def api_client():
    client = DashboardApiClient(API_BASE, timeout=5)
    yield client
    client.close()


@pytest.fixture
def mock_api(requests_mock):
    """Register canned JSON responses by API path; returns the installer."""
    def install(responses):
        for path, payload in responses.items():
            requests_mock.get(f"{API_BASE}{path}", json=payload)
        return requests_mock
    return install
