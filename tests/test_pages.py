"""
Tests for the page renderers: every state renders, null data never leaks
"None"/"NaN" into the page, and rendering is deterministic.
"""
import pytest

from trade_dashboard.models import (
    CircuitBreakerEvent, CircuitBreakerState, CircuitBreakerStatus, MdseDetectorScore, MdseEvent, MdseTrade,
    PortfolioState, SystemHealth, SystemInfo, SystemMetrics, Trade, TradeSummary,
)
from trade_dashboard.pages import (
    render_circuit_breaker, render_mdse, render_overview, render_performance,
    render_portfolio, render_signals, render_system, render_trades,
)
from trade_dashboard.views import (
    CircuitBreakerData, MdseData, OverviewData, SystemData, TradesData, ViewState,
    load_circuit_breaker, load_mdse, load_overview, load_performance, load_portfolio,
    load_signals, load_system, load_trades,
)

PAGES = [
    (load_overview, render_overview),
    (load_trades, render_trades),
    (load_signals, render_signals),
    (load_portfolio, render_portfolio),
    (load_performance, render_performance),
    (load_circuit_breaker, render_circuit_breaker),
    (load_mdse, render_mdse),
    (load_system, render_system),
]


def ready(api_client, loader):
    return ViewState().resolve(loader(api_client))


def assert_no_leaks(html):
    for token in ('None', 'NaN', 'null', 'undefined'):
        assert token not in html


class TestLoadingAndErrors:
    @pytest.mark.parametrize('renderer,text', [
        (render_overview, 'Loading dashboard...'),
        (render_trades, 'Loading trades...'),
        (render_signals, 'Loading signals...'),
        (render_portfolio, 'Loading portfolio...'),
        (render_performance, 'Loading performance data...'),
        (render_mdse, 'Loading MDSE data...'),
    ])
    def test_loading_text(self, renderer, text):
        assert text in renderer(ViewState())

    @pytest.mark.parametrize('renderer', [render_circuit_breaker, render_system])
    def test_polled_pages_show_skeleton(self, renderer):
        html = renderer(ViewState())
        assert 'class="skeleton"' in html

    def test_page_error(self):
        html = render_trades(ViewState().fail('API error: 500 Internal Server Error'))
        assert 'Error: API error: 500 Internal Server Error' in html

    @pytest.mark.parametrize('renderer', [render_overview, render_portfolio])
    def test_error_hint(self, renderer):
        html = renderer(ViewState().fail('API error: refused'))
        assert 'Make sure the API server is running' in html

    def test_circuit_breaker_error(self):
        html = render_circuit_breaker(ViewState().fail('API error: 503 Service Unavailable'))
        assert 'Failed to load circuit breaker state' in html
        assert 'API error: 503 Service Unavailable' in html
        assert 'State Transitions' in html

    def test_circuit_breaker_error_keeps_events(self):
        data = CircuitBreakerData(state=CircuitBreakerState(
            status=CircuitBreakerStatus.WARNING,
            recent_events=[CircuitBreakerEvent(CircuitBreakerStatus.WARNING, 'Loss streak', None)],
        ))
        html = render_circuit_breaker(ViewState().resolve(data).fail('API error: timeout'))
        assert 'Failed to load circuit breaker state' in html
        assert 'Loss streak' in html

    def test_system_error(self):
        html = render_system(ViewState().fail('API error: 500 Internal Server Error'))
        assert 'Failed to load system status' in html
        assert 'Disconnected' in html


class TestPopulated:
    def test_every_page_renders_default_data(self, api_client, mock_api, default_responses):
        mock_api(default_responses)
        for loader, renderer in PAGES:
            html = renderer(ready(api_client, loader))
            assert_no_leaks(html)

    def test_overview(self, api_client, mock_api, default_responses):
        mock_api(default_responses)
        html = render_overview(ready(api_client, load_overview))
        assert '<h1>Dashboard</h1>' in html
        assert 'Total Balance' in html
        assert '$0.00' in html
        assert 'NORMAL' in html
        assert 'Recent Trades' in html
        assert '+$50.00' in html
        assert 'Jan 01, 00:00' in html

    def test_trades(self, api_client, mock_api, default_responses):
        mock_api(default_responses)
        html = render_trades(ready(api_client, load_trades))
        assert 'Trade History' in html
        assert '1 trades' in html
        assert '100,000.00' in html
        assert '+50.00' in html
        assert '100.0%' in html
        assert 'data-detail="trade-detail-0"' in html
        assert '<template id="trade-detail-0">' in html
        assert 'Exit Reason' in html

    def test_signals(self, api_client, mock_api, default_responses):
        mock_api(default_responses)
        html = render_signals(ready(api_client, load_signals))
        assert '<h1>Signals</h1>' in html
        assert 'Execution Rate' in html
        assert '100.0%' in html
        assert '75.0%' in html
        assert '0.800' in html
        assert 'BUY' in html
        assert '&#10003;' in html
        assert 'No analysis cycles recorded' in html

    def test_portfolio(self, api_client, mock_api, default_responses):
        mock_api(default_responses)
        html = render_portfolio(ready(api_client, load_portfolio))
        assert '<h1>' not in html
        assert 'Strategy Allocations' in html
        assert '$10,000.00' in html
        assert '+$500.00' in html
        assert '+11.11' in html
        assert '50.0%' in html
        assert '2026-01-01 00:00:00' in html

    def test_performance(self, api_client, mock_api, default_responses):
        mock_api(default_responses)
        html = render_performance(ready(api_client, load_performance))
        assert '<h1>Performance</h1>' in html
        assert '+50.00' in html
        assert '100.0%' in html
        assert '2.00' in html
        assert '0.050%' in html
        assert 'Execution Quality' in html
        assert '0.010%' in html
        assert 'Market Snapshots' in html
        assert '50.0' in html
        assert '10.0000' in html

    def test_circuit_breaker(self, api_client, mock_api, default_responses):
        mock_api(default_responses)
        html = render_circuit_breaker(ready(api_client, load_circuit_breaker))
        assert '<h1>Circuit Breaker</h1>' in html
        assert 'All systems operational. Trading is active.' in html
        assert 'Gradual recovery over 12 hours' in html
        assert 'No circuit breaker events recorded' in html

    def test_circuit_breaker_events(self):
        data = CircuitBreakerData(state=CircuitBreakerState(
            status=CircuitBreakerStatus.PAUSED,
            recent_events=[
                CircuitBreakerEvent(CircuitBreakerStatus.PAUSED, 'Drawdown 8%', '2026-01-02T10:00:00Z'),
                CircuitBreakerEvent(),
            ],
        ))
        html = render_circuit_breaker(ViewState().resolve(data))
        assert 'Positions reduced by 50% and new trades halted.' in html
        assert 'Drawdown 8%' in html
        assert '2026-01-02 10:00:00' in html
        assert 'State change' in html

    def test_mdse(self, api_client, mock_api, default_responses):
        mock_api(default_responses)
        html = render_mdse(ready(api_client, load_mdse))
        assert 'MDSE Detector Status' in html
        assert 'detector-a' in html
        assert '61.0%' in html
        assert '+12.50' in html
        assert 'Recent Events (24h)' in html
        assert '1 events' in html
        assert 'width:80%' in html
        assert '#1' in html
        assert '0.1000' in html
        assert 'data-detail-title="MDSE Trade Details"' in html

    def test_detector_card_band_colors_border_only(self):
        data = MdseData(scores=[
            MdseDetectorScore(detector_name='strong', win_rate=61, weight=1.5, sample_count=40),
            MdseDetectorScore(detector_name='weak', win_rate=20, weight=0.5, sample_count=12),
            MdseDetectorScore(detector_name='middling', win_rate=40),
        ])
        html = render_mdse(ViewState().resolve(data))
        assert 'class="card band-good"' in html
        assert 'class="card band-bad"' in html
        assert 'class="card band-neutral"' in html
        for band in ('good', 'bad', 'neutral'):
            assert f'class="card {band}"' not in html
        assert '<span class="v good">61.0%</span>' in html
        assert '<span class="v">1.50</span>' in html

    def test_mdse_detail_uses_related_event(self):
        data = MdseData(
            scores=[],
            events=[MdseEvent(id=4, detector='breakout', confidence=72.5, timestamp='2026-01-01T08:30:00Z')],
            trades=[MdseTrade(event_id=4, symbol='ETH/USDT', direction='short', entry_price=3000,
                              position_size=1.25, pnl=-3.5)],
        )
        html = render_mdse(ViewState().resolve(data))
        assert 'breakout' in html
        assert '72.5%' in html
        assert '08:30:00' in html
        assert '-3.50' in html
        assert 'SHORT' in html

    def test_system(self, api_client, mock_api, default_responses):
        mock_api(default_responses)
        html = render_system(ready(api_client, load_system))
        assert '<h1>System</h1>' in html
        assert 'All systems operational' in html
        assert '1h 0m' in html
        assert '1234' in html
        assert '123.4' in html
        assert 'Connected' in html
        assert 'data/trades.db' in html


class TestNullData:
    def test_every_page_renders_null_data(self, api_client, mock_api, null_responses):
        mock_api(null_responses)
        for loader, renderer in PAGES:
            html = renderer(ready(api_client, loader))
            assert_no_leaks(html)

    def test_fallback_strings(self, api_client, mock_api, null_responses):
        mock_api(null_responses)
        pages = {renderer.__name__: renderer(ready(api_client, loader)) for loader, renderer in PAGES}
        assert 'No trades yet' in pages['render_overview']
        assert 'No trades found' in pages['render_trades']
        assert 'No signals found' in pages['render_signals']
        assert 'No strategy data available' in pages['render_portfolio']
        assert 'N/A' in pages['render_portfolio']
        assert 'No circuit breaker events recorded' in pages['render_circuit_breaker']
        assert 'No detector scores available' in pages['render_mdse']
        assert 'No events in the last 24 hours' in pages['render_mdse']
        assert 'No MDSE trades found' in pages['render_mdse']
        assert 'Health monitor not running (API-only mode)' in pages['render_system']
        assert 'Disconnected' in pages['render_system']
        assert 'No execution data' in pages['render_performance']
        assert '—' in pages['render_performance']

    def test_unknown_cb_status_displays_normal(self, api_client, mock_api, null_responses):
        mock_api(null_responses)
        assert 'NORMAL' in render_overview(ready(api_client, load_overview))
        html = render_circuit_breaker(ready(api_client, load_circuit_breaker))
        assert 'NORMAL' in html
        assert 'inactive' not in html

    def test_sparse_records(self):
        overview = OverviewData(
            portfolio=PortfolioState(),
            circuit_breaker=CircuitBreakerState(),
            recent_trades=[Trade(id=3)],
        )
        html = render_overview(ViewState().resolve(overview))
        assert 'Open' in html
        assert_no_leaks(html)

        trades = TradesData(trades=[Trade(id=3)], summary=TradeSummary())
        assert_no_leaks(render_trades(ViewState().resolve(trades)))

        system = SystemData(health=SystemHealth(), metrics=SystemMetrics(), info=SystemInfo())
        html = render_system(ViewState().resolve(system))
        assert 'Disconnected' in html
        assert_no_leaks(html)


def test_rendering_is_deterministic(api_client, mock_api, default_responses):
    mock_api(default_responses)
    for loader, renderer in PAGES:
        first = renderer(ready(api_client, loader))
        second = renderer(ready(api_client, loader))
        assert first == second
