"""
Display formatting for dashboard values.
Every helper accepts None and returns a fallback instead of raising.
"""
from datetime import datetime
from typing import Optional

DASH = '—'   # em dash, fallback for missing values
HYPHEN = '-'      # table cells use a plain hyphen for missing values

# CSS classes
PNL_POS = 'pnl-pos'
PNL_NEG = 'pnl-neg'
GOOD = 'good'
BAD = 'bad'
NEUTRAL = 'neutral'
MUTED = 'muted'


def format_number(value: Optional[float], decimals: int = 2, fallback: str = DASH) -> str:
    """Format a number with thousands separators and fixed decimals (e.g. "1,234.56")."""
    if value is None:
        return fallback
    return f"{value:,.{decimals}f}"


def format_price(value: Optional[float], fallback: str = DASH) -> str:
    """Prices keep 2 to 6 decimals, trailing zeros past the second are dropped."""
    if value is None:
        return fallback
    text = f"{value:,.6f}"
    whole, frac = text.split('.')
    frac = frac.rstrip('0')
    if len(frac) < 2:
        frac = frac.ljust(2, '0')
    return f"{whole}.{frac}"


def format_currency(value: Optional[float], fallback: str = DASH) -> str:
    """Format as dollars, sign before the symbol (e.g. "$1,234.56", "-$5.00")."""
    if value is None:
        return fallback
    sign = '-' if value < 0 else ''
    return f"{sign}${abs(value):,.2f}"


def format_signed_currency(value: Optional[float], fallback: str = DASH) -> str:
    """Currency with an explicit + for non-negative values."""
    if value is None:
        return fallback
    return ('+' if value >= 0 else '') + format_currency(value)


def format_percent(value: Optional[float], decimals: int = 2, fallback: str = DASH) -> str:
    """Format a percentage value (e.g. "12.34%")."""
    if value is None:
        return fallback
    return f"{value:.{decimals}f}%"


def format_pnl(value: Optional[float], fallback: str = DASH) -> str:
    """Format a PnL value with sign prefix (e.g. "+12.34" or "-5.67")."""
    if value is None:
        return fallback
    return f"{value:+.2f}" if value != 0 else "+0.00"


def format_count(value: Optional[float], fallback: str = DASH) -> str:
    if value is None:
        return fallback
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,}"


def color_by_pnl(value: Optional[float]) -> str:
    """Non-negative PnL is positive, negative PnL is negative. None is muted."""
    if value is None:
        return MUTED
    return PNL_POS if value >= 0 else PNL_NEG


def win_rate_band(rate: Optional[float]) -> str:
    """Detector win rate: >50 good, <30 bad, otherwise neutral."""
    if rate is None:
        return MUTED
    if rate > 50:
        return GOOD
    if rate < 30:
        return BAD
    return NEUTRAL


def slippage_band(pct: Optional[float]) -> str:
    """Slippage percent: >0.5 bad, >=0.1 neutral, otherwise good."""
    if pct is None:
        return MUTED
    if pct > 0.5:
        return BAD
    if pct >= 0.1:
        return NEUTRAL
    return GOOD


def rsi_band(rsi: Optional[float]) -> str:
    """RSI: >70 overbought (bad), <30 oversold (good), otherwise neutral."""
    if rsi is None:
        return MUTED
    if rsi > 70:
        return BAD
    if rsi < 30:
        return GOOD
    return NEUTRAL


def confidence_band(confidence: Optional[float]) -> str:
    if confidence is None:
        return MUTED
    if confidence >= 70:
        return GOOD
    if confidence >= 40:
        return NEUTRAL
    return BAD


def format_uptime(seconds: Optional[float]) -> str:
    seconds = int(seconds or 0)
    d = seconds // 86400
    h = (seconds % 86400) // 3600
    m = (seconds % 3600) // 60
    if d > 0:
        return f"{d}d {h}h {m}m"
    if h > 0:
        return f"{h}h {m}m"
    return f"{m}m"


def parse_timestamp(ts: Optional[str]) -> Optional[datetime]:
    if not ts:
        return None
    try:
        return datetime.fromisoformat(ts.replace('Z', '+00:00'))
    except (ValueError, TypeError):
        return None


def _format_ts(ts: Optional[str], fmt: str, fallback: str) -> str:
    if not ts:
        return fallback
    dt = parse_timestamp(ts)
    if dt is None:
        # Unparseable timestamps are shown as sent
        return ts
    return dt.strftime(fmt)


def format_timestamp(ts: Optional[str], fallback: str = DASH) -> str:
    """ISO timestamp as date and time (e.g. "2026-01-01 00:00:00")."""
    return _format_ts(ts, '%Y-%m-%d %H:%M:%S', fallback)


def format_date(ts: Optional[str], fallback: str = DASH) -> str:
    return _format_ts(ts, '%Y-%m-%d', fallback)


def format_time(ts: Optional[str], fallback: str = DASH) -> str:
    return _format_ts(ts, '%H:%M:%S', fallback)


def format_short_datetime(ts: Optional[str], fallback: str = DASH) -> str:
    """Compact form for feed rows (e.g. "Jan 01, 00:00")."""
    return _format_ts(ts, '%b %d, %H:%M', fallback)


def or_fallback(value, fallback: str = DASH) -> str:
    """Stringify a value, using the fallback for None and empty strings."""
    if value is None or value == '':
        return fallback
    return str(value)
