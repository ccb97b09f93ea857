"""
HTML renderers, one per route.

Each renderer takes the page's ViewState and returns the page body. Rendering
is a pure function of the state: the same API responses always produce the
same HTML.
"""
from typing import List, Optional, Sequence, Tuple

from .formatting import (
    DASH, HYPHEN, color_by_pnl, confidence_band, format_count, format_currency,
    format_date, format_number, format_percent, format_pnl, format_price,
    format_short_datetime, format_signed_currency, format_time, format_timestamp,
    format_uptime, or_fallback, rsi_band, slippage_band, win_rate_band,
)
from .layout import esc
from .models import (
    CircuitBreakerStatus, SYSTEM_UNREACHABLE, SystemHealth, SystemInfo, SystemMetrics,
    Trade,
)
from .views import (
    CircuitBreakerData, MdseData, MdseTradeDetail, OverviewData, PerformanceData,
    PortfolioData, SignalsData, SystemData, TradesData, ViewState,
)

API_HINT = 'Make sure the API server is running'

CB_DESCRIPTIONS = {
    CircuitBreakerStatus.NORMAL: 'All systems operational. Trading is active.',
    CircuitBreakerStatus.WARNING: 'Consecutive loss threshold reached. Leverage reduced automatically.',
    CircuitBreakerStatus.PAUSED: 'Further losses detected. Positions reduced by 50% and new trades halted.',
    CircuitBreakerStatus.STOPPED: ('Critical threshold exceeded. All positions closed and system shut down. '
                                   'Manual restart required.'),
}

# (from, to, trigger, action)
CB_TRANSITIONS = [
    (CircuitBreakerStatus.NORMAL, CircuitBreakerStatus.WARNING,
     'Consecutive loss threshold reached', 'Leverage is automatically reduced'),
    (CircuitBreakerStatus.WARNING, CircuitBreakerStatus.PAUSED,
     'Further losses beyond WARNING threshold', 'Positions reduced by 50%, new trades halted'),
    (CircuitBreakerStatus.PAUSED, CircuitBreakerStatus.STOPPED,
     'Critical drawdown limit exceeded', 'All positions closed, system shutdown'),
    (CircuitBreakerStatus.WARNING, CircuitBreakerStatus.NORMAL,
     'Gradual recovery over 12 hours', 'Leverage restored (75% → 100%)'),
    (CircuitBreakerStatus.PAUSED, CircuitBreakerStatus.WARNING,
     'Gradual recovery over 12 hours', 'New trades re-enabled at reduced leverage'),
]

SYSTEM_LABELS = {
    'OK': 'All systems operational',
    'DEGRADED': 'Some services degraded',
    'DOWN': 'System is down',
    SYSTEM_UNREACHABLE: 'Health monitor not running (API-only mode)',
}


# ── Building blocks ──

def _text(value, fallback: str = DASH) -> str:
    return esc(or_fallback(value, fallback))


def _upper(value: Optional[str], fallback: str = DASH) -> str:
    return esc(value.upper()) if value else fallback


def _loading(text: str) -> str:
    return f'<div class="loading">{esc(text)}</div>'


def _page_error(message: str, hint: str = None) -> str:
    hint_html = f'<p class="hint">{esc(hint)}</p>' if hint else ''
    return f'<div class="error-box"><p>Error: {esc(message)}</p>{hint_html}</div>'


def _inline_error(title: str, message: str) -> str:
    return f'<div class="error-inline"><p>{esc(title)}</p><p class="hint">{esc(message)}</p></div>'


def _skeleton(width: str = '100%', height: str = '20px') -> str:
    return f'<div class="skeleton" style="width:{width};height:{height}"></div>'


def _stat_card(label: str, value_html: str, cls: str = '') -> str:
    value_cls = f'value {cls}'.strip()
    return (f'<div class="card"><div class="label">{esc(label)}</div>'
            f'<div class="{value_cls}">{value_html}</div></div>')


def _page_head(title: str, count_text: str = None, level: int = 1) -> str:
    count = f'<span class="count">{esc(count_text)}</span>' if count_text is not None else ''
    return f'<div class="page-head"><h{level}>{esc(title)}</h{level}>{count}</div>'


def _status_badge(status: str, large: bool = False) -> str:
    size = ' lg' if large else ''
    s = esc(status)
    return f'<span class="badge status-{s} tone-{s}{size}"><span class="dot"></span>{s}</span>'


def _side_class(side: Optional[str]) -> str:
    lower = (side or '').lower()
    if lower == 'buy':
        return 'buy'
    if lower == 'sell':
        return 'sell'
    return 'other'


def _table(headers: Sequence[Tuple[str, bool]], rows: List[str], empty_text: str) -> str:
    """`headers` is a list of (label, numeric) pairs. Numeric columns are right-aligned."""
    head = ''.join(f'<th class="num">{esc(label)}</th>' if numeric else f'<th>{esc(label)}</th>'
                   for label, numeric in headers)
    if rows:
        body = ''.join(rows)
    else:
        body = f'<tr><td colspan="{len(headers)}" class="pos-empty">{esc(empty_text)}</td></tr>'
    return (f'<div class="table-wrap"><table><thead><tr>{head}</tr></thead>'
            f'<tbody>{body}</tbody></table></div>')


def _cell(html: str, cls: str = '') -> str:
    return f'<td class="{cls}">{html}</td>' if cls else f'<td>{html}</td>'


def _detail_template(template_id: str, fields: List[Tuple[str, str]]) -> str:
    """Hidden detail panel body, cloned into the slide-over when its row is clicked"""
    rows = ''.join(f'<div class="detail-row"><span class="k">{esc(k)}</span>'
                   f'<span class="v">{esc(v)}</span></div>' for k, v in fields)
    return f'<template id="{template_id}">{rows}</template>'


def _pnl_span(value: Optional[float], text: str) -> str:
    return f'<span class="{color_by_pnl(value)}">{esc(text)}</span>'


# ── Dashboard ──

def render_overview(state: ViewState) -> str:
    if state.is_loading:
        return _loading('Loading dashboard...')
    if state.is_error:
        return _page_error(state.error, API_HINT)

    data: OverviewData = state.data
    pf = data.portfolio
    balance = pf.total_balance or 0.0
    daily = pf.daily_pnl or 0.0
    daily_pct = pf.daily_pnl_pct or 0.0
    status = data.circuit_breaker.status.value

    daily_html = (f'{esc(format_signed_currency(daily))} '
                  f'<span class="sub">({esc(format_pnl(daily_pct))}%)</span>')
    cards = ''.join([
        _stat_card('Total Balance', esc(format_currency(balance))),
        _stat_card('Daily PnL', daily_html, color_by_pnl(daily)),
        _stat_card('Circuit Breaker', _status_badge(status)),
    ])

    if data.recent_trades:
        items = ''.join(_overview_trade(t) for t in data.recent_trades)
    else:
        items = '<div class="pos-empty">No trades yet</div>'

    return (
        '<h1>Dashboard</h1>'
        f'<div class="grid">{cards}</div>'
        f'<section><h2>Recent Trades</h2>{items}</section>'
    )


def _overview_trade(trade: Trade) -> str:
    if trade.pnl is not None:
        pnl_html = _pnl_span(trade.pnl, format_signed_currency(trade.pnl))
    else:
        pnl_html = '<span class="muted">Open</span>'
    pct_html = ''
    if trade.pnl_pct is not None:
        pct_html = f'<div class="time">{esc(format_pnl(trade.pnl_pct))}%</div>'
    return (
        '<div class="feed-item">'
        f'<span class="side {_side_class(trade.side)}">{_upper(trade.side)}</span>'
        f'<div class="grow"><div>{_text(trade.symbol)}</div>'
        f'<div class="time">{esc(format_short_datetime(trade.entry_time))}</div></div>'
        f'<div class="num">{pnl_html}{pct_html}</div>'
        '</div>'
    )


# ── Trades ──

def render_trades(state: ViewState) -> str:
    if state.is_loading:
        return _loading('Loading trades...')
    if state.is_error:
        return _page_error(state.error)

    data: TradesData = state.data
    summary = data.summary
    win_rate = format_percent(summary.win_rate * 100, 1) if summary.win_rate is not None else DASH
    wins_losses = f"{format_count(summary.winning_trades)} / {format_count(summary.losing_trades)}"
    cards = ''.join([
        _stat_card('Total Trades', esc(format_count(summary.total_trades))),
        _stat_card('Win Rate', esc(win_rate)),
        _stat_card('Wins / Losses', esc(wins_losses)),
        _stat_card('Total PnL', esc(format_pnl(summary.total_pnl)), color_by_pnl(summary.total_pnl)),
        _stat_card('Profit Factor', esc(format_number(summary.profit_factor, 2))),
    ])
    message = f'<p class="muted">{esc(summary.message)}</p>' if summary.message else ''

    rows, templates = [], []
    for i, t in enumerate(data.trades):
        template_id = f'trade-detail-{i}'
        if t.pnl is not None:
            pnl_html = _pnl_span(t.pnl, format_pnl(t.pnl))
        else:
            pnl_html = f'<span class="muted">{HYPHEN}</span>'
        rows.append(
            f'<tr data-detail="{template_id}" data-detail-title="Trade Details">'
            + _cell(_text(t.symbol))
            + _cell(_text(t.side), 'pnl-pos' if t.is_buy else 'pnl-neg')
            + _cell(_text(t.strategy, HYPHEN), 'muted')
            + _cell(esc(format_number(t.entry_price, 2, HYPHEN)), 'num')
            + _cell(esc(format_number(t.exit_price, 2, HYPHEN)), 'num')
            + _cell(pnl_html, 'num')
            + _cell(esc(format_date(t.entry_time, HYPHEN)), 'muted')
            + '</tr>'
        )
        templates.append(_detail_template(template_id, _trade_fields(t)))

    table = _table(
        [('Symbol', False), ('Side', False), ('Strategy', False), ('Entry Price', True),
         ('Exit Price', True), ('PnL', True), ('Date', False)],
        rows, 'No trades found',
    )
    return (
        _page_head('Trade History', f'{len(data.trades)} trades')
        + f'<div class="grid">{cards}</div>{message}'
        + table
        + ''.join(templates)
    )


def _trade_fields(t: Trade) -> List[Tuple[str, str]]:
    return [
        ('ID', or_fallback(t.id)),
        ('Symbol', or_fallback(t.symbol)),
        ('Side', or_fallback(t.side)),
        ('Strategy', or_fallback(t.strategy)),
        ('Quantity', format_price(t.quantity)),
        ('Entry Price', format_price(t.entry_price)),
        ('Exit Price', format_price(t.exit_price)),
        ('Entry Time', format_timestamp(t.entry_time)),
        ('Exit Time', format_timestamp(t.exit_time)),
        ('Exit Reason', or_fallback(t.exit_reason)),
        ('PnL', format_pnl(t.pnl) if t.pnl is not None else 'Open'),
        ('PnL %', format_percent(t.pnl_pct)),
        ('Fees', format_number(t.fees, 2)),
        ('Cycle', or_fallback(t.cycle_id)),
    ]


# ── Signals ──

def render_signals(state: ViewState) -> str:
    if state.is_loading:
        return _loading('Loading signals...')
    if state.is_error:
        return _page_error(state.error)

    data: SignalsData = state.data
    stats = data.stats
    cards = ''.join([
        _stat_card('Total Signals', str(stats.total)),
        _stat_card('Executed', str(stats.executed)),
        _stat_card('Execution Rate', f'{stats.execution_rate:.1f}%'),
        _stat_card('Avg Confidence', f'{stats.avg_confidence:.1f}%'),
    ])

    rows = []
    for s in data.signals:
        executed = '<span class="good">&#10003;</span>' if s.executed else '<span class="muted">&#10007;</span>'
        confidence = f'{format_number(s.confidence, 1, HYPHEN)}%' if s.confidence is not None else HYPHEN
        rows.append(
            '<tr>'
            + _cell(esc(format_timestamp(s.timestamp, HYPHEN)), 'muted')
            + _cell(_text(s.symbol))
            + _cell(f'<span class="side {_side_class(s.action)}">{_upper(s.action)}</span>')
            + _cell(esc(format_number(s.score, 3, HYPHEN)), 'num')
            + _cell(esc(confidence), 'num')
            + _cell(executed)
            + _cell(_text(s.skip_reason, HYPHEN), 'muted')
            + _cell(_text(s.strategy_type, HYPHEN), 'muted')
            + '</tr>'
        )
    table = _table(
        [('Timestamp', False), ('Symbol', False), ('Action', False), ('Score', True),
         ('Confidence', True), ('Executed', False), ('Skip Reason', False), ('Strategy', False)],
        rows, 'No signals found',
    )

    cycle_rows = []
    for c in data.cycles:
        duration = f'{format_number(c.duration_seconds, 1)}s' if c.duration_seconds is not None else DASH
        cycle_rows.append(
            '<tr>'
            + _cell(f'#{_text(c.id)}', 'muted')
            + _cell(esc(format_timestamp(c.start_time)))
            + _cell(esc(duration), 'num')
            + _cell(_text(c.symbols_processed), 'muted')
            + _cell(esc(format_count(c.signals_generated)), 'num')
            + _cell(esc(format_count(c.trades_executed)), 'num')
            + _cell(_text(c.errors, HYPHEN), 'bad' if c.errors else 'muted')
            + '</tr>'
        )
    cycles = _table(
        [('Cycle', False), ('Started', False), ('Duration', True), ('Symbols', False),
         ('Signals', True), ('Trades', True), ('Errors', False)],
        cycle_rows, 'No analysis cycles recorded',
    )

    return (
        _page_head('Signals', f'{stats.total} signals')
        + f'<div class="grid">{cards}</div>'
        + f'<section>{table}</section>'
        + f'<section>{_page_head("Analysis Cycles", f"{len(data.cycles)} cycles", level=2)}{cycles}</section>'
    )


# ── Portfolio ──

def render_portfolio(state: ViewState) -> str:
    if state.is_loading:
        return _loading('Loading portfolio...')
    if state.is_error:
        return _page_error(state.error, API_HINT)

    data: PortfolioData = state.data
    pf = data.portfolio
    total_pnl = pf.total_pnl
    pnl_html = (f'{esc(format_signed_currency(total_pnl))} '
                f'<span class="sub">({esc(format_pnl(pf.total_pnl_pct))}%)</span>')
    last_updated = format_timestamp(pf.last_updated) if pf.last_updated else 'N/A'
    cards = ''.join([
        _stat_card('Total Value', esc(format_currency(pf.total_value))),
        _stat_card('Total PnL', pnl_html, color_by_pnl(total_pnl)),
        _stat_card('Last Updated', f'<span class="sub">{esc(last_updated)}</span>'),
    ])

    if pf.strategies:
        rows = []
        for s in pf.strategies:
            pnl = f'{esc(format_pnl(s.pnl))} <span class="sub">({esc(format_pnl(s.pnl_pct))}%)</span>'
            rows.append(
                '<tr>'
                + _cell(esc(s.symbol))
                + _cell(esc(s.strategy), 'muted')
                + _cell(esc(format_percent(s.allocation_pct, 1)), 'num')
                + _cell(esc(format_currency(s.equity)), 'num')
                + _cell(pnl, f'num {color_by_pnl(s.pnl)}')
                + '</tr>'
            )
        allocations = _table(
            [('Symbol', False), ('Strategy', False), ('Allocation %', True),
             ('Current Value', True), ('PnL', True)],
            rows, 'No strategy data available',
        )
    else:
        allocations = '<div class="pos-empty">No strategy data available</div>'

    return (
        f'<div class="grid">{cards}</div>'
        f'<section class="card"><h3>Strategy Allocations</h3>{allocations}</section>'
    )


# ── Performance ──

def render_performance(state: ViewState) -> str:
    if state.is_loading:
        return _loading('Loading performance data...')
    if state.is_error:
        return _page_error(state.error)

    data: PerformanceData = state.data
    summary = data.summary
    total_pnl = summary.total_pnl or 0.0
    win_rate = format_percent(summary.win_rate * 100, 1) if summary.win_rate is not None else DASH
    cards = ''.join([
        _stat_card('Total PnL', esc(format_pnl(total_pnl)), color_by_pnl(total_pnl)),
        _stat_card('Win Rate', esc(win_rate)),
        _stat_card('Profit Factor', esc(format_number(summary.profit_factor, 2))),
        _stat_card('Avg Slippage', esc(format_percent(summary.avg_slippage, 3)),
                   slippage_band(summary.avg_slippage or 0.0)),
    ])

    eq_rows = []
    for eq in data.execution_quality:
        eq_rows.append(
            '<tr>'
            + _cell(f'#{_text(eq.trade_id)}')
            + _cell(esc(format_price(eq.expected_price)), 'num')
            + _cell(esc(format_price(eq.actual_price)), 'num')
            + _cell(esc(format_percent(eq.slippage_pct, 3)), f'num {slippage_band(eq.slippage_pct)}')
            + _cell(esc(format_count(eq.api_latency_ms)), 'num')
            + _cell(esc(format_timestamp(eq.timestamp)), 'muted')
            + '</tr>'
        )
    eq_table = _table(
        [('Trade ID', False), ('Expected Price', True), ('Actual Price', True),
         ('Slippage %', True), ('Latency (ms)', True), ('Timestamp', False)],
        eq_rows, 'No execution data',
    )

    snap_rows = []
    for snap in data.snapshots:
        snap_rows.append(
            '<tr>'
            + _cell(_text(snap.symbol))
            + _cell(esc(format_number(snap.price, 2)), 'num')
            + _cell(esc(format_number(snap.rsi, 1, HYPHEN)), f'num {rsi_band(snap.rsi)}')
            + _cell(esc(format_number(snap.adx, 1, HYPHEN)), 'num')
            + _cell(esc(format_number(snap.macd, 4, HYPHEN)), 'num')
            + _cell(esc(format_count(snap.volume)), 'num')
            + _cell(esc(format_timestamp(snap.timestamp)), 'muted')
            + '</tr>'
        )
    snap_table = _table(
        [('Symbol', False), ('Price', True), ('RSI', True), ('ADX', True),
         ('MACD', True), ('Volume', True), ('Timestamp', False)],
        snap_rows, 'No snapshots',
    )

    return (
        '<h1>Performance</h1>'
        f'<div class="grid">{cards}</div>'
        f'<section><h2>Execution Quality</h2>{eq_table}</section>'
        f'<section><h2>Market Snapshots</h2>{snap_table}</section>'
    )


# ── Circuit breaker (polled) ──

def render_circuit_breaker(state: ViewState) -> str:
    data: Optional[CircuitBreakerData] = state.data
    status = data.state.status if data is not None else CircuitBreakerStatus.NORMAL

    if state.is_loading:
        current = _skeleton('128px', '32px')
    elif state.is_error:
        current = _inline_error('Failed to load circuit breaker state', state.error)
    else:
        current = (_status_badge(status.value, large=True)
                   + f'<p class="tone-{status.value}" style="margin-top:10px">'
                   f'{esc(CB_DESCRIPTIONS[status])}</p>')

    transitions = ''.join(
        '<div class="feed-item">'
        f'<span class="tone-{src.value}">{src.value}</span>'
        '<span class="muted">→</span>'
        f'<span class="tone-{dst.value}">{dst.value}</span>'
        f'<div class="grow"><div>{esc(trigger)}</div><div class="time">{esc(action)}</div></div>'
        '</div>'
        for src, dst, trigger, action in CB_TRANSITIONS
    )

    if state.is_loading:
        events = _skeleton(height='44px')
    elif data is None or not data.state.recent_events:
        events = '<p class="muted">No circuit breaker events recorded</p>'
    else:
        events = ''.join(
            '<div class="feed-item">'
            f'{_status_badge(ev.status.value)}'
            f'<div class="grow"><div>{esc(ev.message)}</div>'
            f'<div class="time">{esc(format_timestamp(ev.timestamp, ""))}</div></div>'
            '</div>'
            for ev in data.state.recent_events
        )

    return (
        '<h1>Circuit Breaker</h1>'
        '<p class="subtitle">Safety mechanism that automatically reduces risk during adverse conditions</p>'
        f'<div class="panel status-{status.value}"><div class="panel-label">Current Status</div>{current}</div>'
        f'<div class="panel"><h2>State Transitions</h2>{transitions}</div>'
        f'<div class="panel"><h2>Recent Events</h2>{events}</div>'
    )


# ── MDSE ──

def render_mdse(state: ViewState) -> str:
    if state.is_loading:
        return _loading('Loading MDSE data...')
    if state.is_error:
        return _page_error(state.error)

    data: MdseData = state.data

    if data.scores:
        cards = []
        for d in data.scores:
            band = win_rate_band(d.win_rate)
            cards.append(
                f'<div class="card band-{band}"><h3>{_text(d.detector_name)}</h3><div class="kv">'
                f'<span class="k">Win Rate</span><span class="v {band}">{esc(format_percent(d.win_rate, 1))}</span>'
                f'<span class="k">Avg PnL</span><span class="v {color_by_pnl(d.avg_pnl)}">{esc(format_pnl(d.avg_pnl))}</span>'
                f'<span class="k">Weight</span><span class="v">{esc(format_number(d.weight, 2))}</span>'
                f'<span class="k">Samples</span><span class="v">{esc(format_count(d.sample_count))}</span>'
                '</div></div>'
            )
        scores = f'<div class="grid">{"".join(cards)}</div>'
    else:
        scores = '<div class="pos-empty">No detector scores available</div>'

    if data.events:
        items = []
        for ev in data.events:
            width = min(ev.confidence or 0.0, 100.0)
            confidence = f'{format_number(ev.confidence, 0)}%' if ev.confidence is not None else DASH
            items.append(
                '<div class="feed-item">'
                f'<span class="tag">{_text(ev.detector)}</span>'
                f'<span style="width:80px">{_text(ev.symbol)}</span>'
                f'<span class="{"pnl-pos" if ev.is_long else "pnl-neg"}" style="width:56px">{_upper(ev.direction)}</span>'
                f'<div class="grow"><div class="bar"><div class="{confidence_band(ev.confidence)}" '
                f'style="width:{width:g}%"></div></div></div>'
                f'<span class="time">{esc(confidence)}</span>'
                f'<span class="time">{esc(format_time(ev.timestamp))}</span>'
                '</div>'
            )
        events = ''.join(items)
    else:
        events = '<div class="pos-empty">No events in the last 24 hours</div>'

    rows, templates = [], []
    for i, t in enumerate(data.trades):
        template_id = f'mdse-trade-detail-{i}'
        if t.pnl is not None:
            pnl_html = _pnl_span(t.pnl, format_pnl(t.pnl))
        else:
            pnl_html = f'<span class="muted">{HYPHEN}</span>'
        rows.append(
            f'<tr data-detail="{template_id}" data-detail-title="MDSE Trade Details">'
            + _cell(f'#{_text(t.event_id)}', 'muted')
            + _cell(_text(t.symbol))
            + _cell(_upper(t.direction), 'pnl-pos' if t.is_long else 'pnl-neg')
            + _cell(esc(format_number(t.entry_price, 2)), 'num')
            + _cell(esc(format_number(t.exit_price, 2, HYPHEN)), 'num')
            + _cell(pnl_html, 'num')
            + _cell(esc(format_number(t.position_size, 4)), 'num')
            + '</tr>'
        )
        templates.append(_detail_template(template_id, _mdse_trade_fields(data.detail_for(t))))
    trades = _table(
        [('Event ID', False), ('Symbol', False), ('Direction', False), ('Entry Price', True),
         ('Exit Price', True), ('PnL', True), ('Size', True)],
        rows, 'No MDSE trades found',
    )

    return (
        f'<section><h1>MDSE Detector Status</h1>{scores}</section>'
        f'<section>{_page_head("Recent Events (24h)", f"{len(data.events)} events", level=2)}{events}</section>'
        f'<section>{_page_head("MDSE Trades", f"{len(data.trades)} trades", level=2)}{trades}'
        f'{"".join(templates)}</section>'
    )


def _mdse_trade_fields(detail: MdseTradeDetail) -> List[Tuple[str, str]]:
    t = detail.trade
    return [
        ('Event ID', f'#{or_fallback(t.event_id)}'),
        ('Detector Name', or_fallback(detail.detector_name)),
        ('Symbol', or_fallback(t.symbol)),
        ('Direction', t.direction.upper() if t.direction else DASH),
        ('Confidence', format_percent(detail.confidence, 1)),
        ('Confluence Score', format_number(detail.confluence_score, 2)),
        ('Timestamp', format_time(detail.timestamp)),
        ('PnL', format_pnl(t.pnl)),
    ]


# ── System (polled) ──

def render_system(state: ViewState) -> str:
    data: Optional[SystemData] = state.data
    health = data.health if data is not None else SystemHealth()
    metrics = data.metrics if data is not None else SystemMetrics()
    info = data.info if data is not None else SystemInfo()
    status = health.status

    if state.is_loading:
        current = _skeleton('128px', '32px')
    elif state.is_error:
        current = _inline_error('Failed to load system status', state.error)
    else:
        current = (
            _status_badge(status, large=True)
            + f'<p class="tone-{esc(status)}" style="margin-top:10px">'
            f'{esc(SYSTEM_LABELS[status])}</p>'
            '<p class="muted" style="margin-top:12px">'
            f'Uptime: <strong>{esc(format_uptime(health.uptime_seconds))}</strong> &nbsp; '
            f'PID: <strong>{_text(health.pid)}</strong></p>'
        )

    if state.is_loading:
        resources = ''.join(_skeleton(height='72px') for _ in range(5))
        api_info = ''.join(_skeleton('256px', '24px') for _ in range(3))
    else:
        ws_cls, ws_text = ('good', 'Connected') if metrics.ws_connected else ('bad', 'Disconnected')
        resources = ''.join([
            _stat_card('Memory', f'{esc(format_number(metrics.memory_mb, 1))} <span class="unit">MB</span>'),
            _stat_card('CPU', f'{esc(format_number(metrics.cpu_percent, 1))}<span class="unit">%</span>'),
            _stat_card('WebSocket', f'<span class="{ws_cls}">&#9679;</span> {ws_text}'),
            _stat_card('Last FR Fetch', f'<span class="sub">{esc(format_timestamp(metrics.last_fr_fetch))}</span>'),
            _stat_card('Open Positions', esc(format_count(metrics.open_positions or 0))),
        ])
        api_info = ''.join(
            f'<div class="feed-item"><span class="grow muted">{label}</span><span>{_text(value)}</span></div>'
            for label, value in (
                ('Database Path', info.db_path),
                ('API Version', info.api_version),
                ('Python Version', info.python_version),
            )
        )

    return (
        '<h1>System</h1>'
        '<p class="subtitle">Process health, resource usage, and API information</p>'
        f'<div class="panel status-{esc(status)}"><div class="panel-label">System Status</div>{current}</div>'
        f'<div class="panel"><h2>Resource Metrics</h2><div class="grid">{resources}</div></div>'
        f'<div class="panel"><h2>API Information</h2>{api_info}</div>'
    )
