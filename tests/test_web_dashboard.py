"""
Tests for the aiohttp application: routing, navigation, SSE refresh and the
error boundary.
"""
import asyncio
import json

import pytest

from trade_dashboard.layout import NAV_ITEMS
from trade_dashboard import web_dashboard
from trade_dashboard.web_dashboard import WebDashboard

from conftest import API_BASE

HEADINGS = {
    '/': 'Dashboard',
    '/trades': 'Trade History',
    '/signals': 'Signals',
    '/portfolio': 'Strategy Allocations',
    '/performance': 'Performance',
    '/circuit-breaker': 'Circuit Breaker',
    '/mdse': 'MDSE Detector Status',
    '/system': 'System',
}


class BrokenClient:
    """Client whose every call fails with a non-API error"""
    base_url = 'http://broken.test/api'

    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise RuntimeError('renderer exploded')
        return fail

    def close(self):
        pass


@pytest.fixture
def dashboard(api_client):
    return WebDashboard(api_client, poll_interval=0.05)


async def read_event(resp):
    """Return the JSON payload of the next SSE message"""
    while True:
        line = await resp.content.readline()
        assert line, 'stream closed'
        line = line.decode().strip()
        if line.startswith('data: '):
            return json.loads(line[len('data: '):])


@pytest.mark.parametrize('path,marker', sorted(HEADINGS.items()))
async def test_routes_render(aiohttp_client, dashboard, mock_api, default_responses, path, marker):
    mock_api(default_responses)
    client = await aiohttp_client(dashboard._create_app())
    resp = await client.get(path)
    assert resp.status == 200
    assert resp.content_type == 'text/html'
    html = await resp.text()
    assert marker in html
    assert 'Crypto Trading Dashboard' in html
    for href, label in NAV_ITEMS:
        assert f'href="{href}"' in html
        assert label in html
    assert f'<a href="{path}" class="active">' in html


async def test_null_responses_render(aiohttp_client, dashboard, mock_api, null_responses):
    mock_api(null_responses)
    client = await aiohttp_client(dashboard._create_app())
    for path in HEADINGS:
        resp = await client.get(path)
        assert resp.status == 200
        html = await resp.text()
        assert 'NaN' not in html
        assert 'Something went wrong' not in html


async def test_api_failure_is_page_error(aiohttp_client, dashboard, requests_mock):
    requests_mock.get(f"{API_BASE}/trades", status_code=500, reason='Internal Server Error')
    requests_mock.get(f"{API_BASE}/trades/summary", json={})
    client = await aiohttp_client(dashboard._create_app())
    resp = await client.get('/trades')
    assert resp.status == 200
    html = await resp.text()
    assert 'Error: API error: 500 Internal Server Error' in html


async def test_polled_page_ships_stream(aiohttp_client, dashboard, mock_api, default_responses):
    mock_api(default_responses)
    client = await aiohttp_client(dashboard._create_app())
    resp = await client.get('/circuit-breaker')
    html = await resp.text()
    assert 'data-stream="/stream/circuit-breaker"' in html
    assert 'class="skeleton"' in html


async def test_circuit_breaker_stream(aiohttp_client, dashboard, mock_api, default_responses):
    mock_api(default_responses)
    client = await aiohttp_client(dashboard._create_app())
    resp = await client.get('/stream/circuit-breaker')
    assert resp.status == 200
    assert resp.headers['Content-Type'].startswith('text/event-stream')
    first = await read_event(resp)
    assert 'All systems operational. Trading is active.' in first['html']
    second = await read_event(resp)
    assert second == first
    resp.close()


async def test_system_stream_keeps_data_on_error(aiohttp_client, dashboard, mock_api, requests_mock,
                                                 default_responses):
    mock_api(default_responses)
    client = await aiohttp_client(dashboard._create_app())
    resp = await client.get('/stream/system')
    first = await read_event(resp)
    assert 'All systems operational' in first['html']

    requests_mock.get(f"{API_BASE}/system/health", status_code=503, reason='Service Unavailable')
    while True:
        event = await read_event(resp)
        if 'Failed to load system status' in event['html']:
            break
    assert 'API error: 503 Service Unavailable' in event['html']
    assert 'data/trades.db' in event['html']
    resp.close()


async def test_error_boundary(aiohttp_client):
    dashboard = WebDashboard(BrokenClient())
    client = await aiohttp_client(dashboard._create_app())
    resp = await client.get('/signals')
    assert resp.status == 500
    html = await resp.text()
    assert 'Something went wrong' in html
    assert 'renderer exploded' in html
    assert 'Reload page' in html
    assert 'Crypto Trading' in html


async def test_stream_render_failure_shows_recovery(aiohttp_client, dashboard, mock_api, default_responses,
                                                    monkeypatch):
    def explode(state):
        raise RuntimeError('render failed')

    monkeypatch.setattr(web_dashboard, 'render_circuit_breaker', explode)
    mock_api(default_responses)
    client = await aiohttp_client(dashboard._create_app())
    resp = await client.get('/stream/circuit-breaker')
    event = await asyncio.wait_for(read_event(resp), timeout=2)
    assert 'Something went wrong' in event['html']
    assert 'render failed' in event['html']
    assert 'Reload page' in event['html']
    assert '<nav' not in event['html']
    resp.close()


async def test_stream_load_failure_shows_recovery(aiohttp_client):
    dashboard = WebDashboard(BrokenClient(), poll_interval=0.05)
    client = await aiohttp_client(dashboard._create_app())
    resp = await client.get('/stream/system')
    event = await asyncio.wait_for(read_event(resp), timeout=2)
    assert 'Something went wrong' in event['html']
    assert 'renderer exploded' in event['html']
    assert 'Reload page' in event['html']
    resp.close()


async def test_unknown_route_is_404(aiohttp_client, dashboard):
    client = await aiohttp_client(dashboard._create_app())
    resp = await client.get('/nope')
    assert resp.status == 404
    assert 'Something went wrong' not in await resp.text()


async def test_reload_is_identical(aiohttp_client, dashboard, mock_api, default_responses):
    mock_api(default_responses)
    client = await aiohttp_client(dashboard._create_app())
    for path in HEADINGS:
        first = await (await client.get(path)).text()
        second = await (await client.get(path)).text()
        assert first == second
