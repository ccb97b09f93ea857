"""
Typed records for the trading engine API payloads.

Every record is built through ``from_dict``, which is the single place where
loosely-typed JSON is normalized: missing keys, nulls, non-numeric values and
NaN/inf all become ``None`` so that views only ever deal with real numbers or
an explicit absence.
"""
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


def as_dict(payload: Any) -> Dict[str, Any]:
    return payload if isinstance(payload, dict) else {}


def as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def as_int(value: Any) -> Optional[int]:
    result = as_float(value)
    return int(result) if result is not None else None


def as_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return None
    return str(value)


def as_bool(value: Any) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'yes')
    return bool(value)


def as_list(payload: Any, item_cls) -> list:
    """Normalize a list payload, skipping items that are not JSON objects."""
    if not isinstance(payload, list):
        return []
    return [item_cls.from_dict(item) for item in payload if isinstance(item, dict)]


@dataclass(frozen=True)
class Trade:
    id: Optional[int] = None
    symbol: Optional[str] = None
    side: Optional[str] = None
    entry_price: Optional[float] = None
    exit_price: Optional[float] = None
    quantity: Optional[float] = None
    pnl: Optional[float] = None
    pnl_pct: Optional[float] = None
    fees: Optional[float] = None
    entry_time: Optional[str] = None
    exit_time: Optional[str] = None
    exit_reason: Optional[str] = None
    strategy: Optional[str] = None
    cycle_id: Optional[int] = None
    created_at: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.pnl is None

    @property
    def is_buy(self) -> bool:
        return (self.side or '').upper() == 'BUY'

    @classmethod
    def from_dict(cls, payload: Any) -> 'Trade':
        d = as_dict(payload)
        return cls(
            id=as_int(d.get('id')),
            symbol=as_str(d.get('symbol')),
            side=as_str(d.get('side')),
            entry_price=as_float(d.get('entry_price')),
            exit_price=as_float(d.get('exit_price')),
            quantity=as_float(d.get('quantity')),
            pnl=as_float(d.get('pnl')),
            pnl_pct=as_float(d.get('pnl_pct')),
            fees=as_float(d.get('fees')),
            entry_time=as_str(d.get('entry_time')),
            exit_time=as_str(d.get('exit_time')),
            exit_reason=as_str(d.get('exit_reason')),
            strategy=as_str(d.get('strategy')),
            cycle_id=as_int(d.get('cycle_id')),
            created_at=as_str(d.get('created_at')),
        )


@dataclass(frozen=True)
class TradeSummary:
    total_trades: Optional[int] = None
    winning_trades: Optional[int] = None
    losing_trades: Optional[int] = None
    win_rate: Optional[float] = None
    total_pnl: Optional[float] = None
    profit_factor: Optional[float] = None
    message: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Any) -> 'TradeSummary':
        d = as_dict(payload)
        return cls(
            total_trades=as_int(d.get('total_trades')),
            winning_trades=as_int(d.get('winning_trades')),
            losing_trades=as_int(d.get('losing_trades')),
            win_rate=as_float(d.get('win_rate')),
            total_pnl=as_float(d.get('total_pnl')),
            profit_factor=as_float(d.get('profit_factor')),
            message=as_str(d.get('message')),
        )


@dataclass(frozen=True)
class Signal:
    id: Optional[int] = None
    timestamp: Optional[str] = None
    symbol: Optional[str] = None
    action: Optional[str] = None
    score: Optional[float] = None
    confidence: Optional[float] = None
    executed: bool = False
    skip_reason: Optional[str] = None
    strategy_type: Optional[str] = None
    cycle_id: Optional[int] = None
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Any) -> 'Signal':
        d = as_dict(payload)
        return cls(
            id=as_int(d.get('id')),
            timestamp=as_str(d.get('timestamp')),
            symbol=as_str(d.get('symbol')),
            action=as_str(d.get('action')),
            score=as_float(d.get('score')),
            confidence=as_float(d.get('confidence')),
            executed=bool(as_bool(d.get('executed'))),
            skip_reason=as_str(d.get('skip_reason')),
            strategy_type=as_str(d.get('strategy_type')),
            cycle_id=as_int(d.get('cycle_id')),
            created_at=as_str(d.get('created_at')),
        )


@dataclass(frozen=True)
class AnalysisCycle:
    id: Optional[int] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    symbols_processed: Optional[str] = None
    signals_generated: Optional[int] = None
    trades_executed: Optional[int] = None
    errors: Optional[str] = None
    duration_seconds: Optional[float] = None
    regime_info: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Any) -> 'AnalysisCycle':
        d = as_dict(payload)
        return cls(
            id=as_int(d.get('id')),
            start_time=as_str(d.get('start_time')),
            end_time=as_str(d.get('end_time')),
            symbols_processed=as_str(d.get('symbols_processed')),
            signals_generated=as_int(d.get('signals_generated')),
            trades_executed=as_int(d.get('trades_executed')),
            errors=as_str(d.get('errors')),
            duration_seconds=as_float(d.get('duration_seconds')),
            regime_info=as_str(d.get('regime_info')),
            created_at=as_str(d.get('created_at')),
        )


@dataclass(frozen=True)
class StrategyAllocation:
    id: str
    symbol: str
    strategy: str
    allocation_pct: float
    equity: float
    initial_equity: float

    @property
    def pnl(self) -> float:
        return self.equity - self.initial_equity

    @property
    def pnl_pct(self) -> float:
        if self.initial_equity > 0:
            return self.pnl / self.initial_equity * 100
        return 0.0

    @classmethod
    def from_dict(cls, strategy_id: str, payload: Any) -> 'StrategyAllocation':
        d = as_dict(payload)
        equity = as_float(d.get('equity'))
        if equity is None:
            equity = 0.0
        initial = as_float(d.get('initial_equity'))
        if initial is None:
            # No baseline recorded: pnl is zero rather than the full equity
            initial = equity
        allocation = as_float(d.get('allocation_pct'))
        return cls(
            id=strategy_id,
            symbol=as_str(d.get('symbol')) or strategy_id.replace('_', ' ').upper(),
            strategy=as_str(d.get('strategy')) or 'unknown',
            allocation_pct=allocation if allocation is not None else 0.0,
            equity=equity,
            initial_equity=initial,
        )


@dataclass(frozen=True)
class PortfolioState:
    total_balance: Optional[float] = None
    daily_pnl: Optional[float] = None
    daily_pnl_pct: Optional[float] = None
    total_equity: Optional[float] = None
    last_updated: Optional[str] = None
    strategies: List[StrategyAllocation] = field(default_factory=list)

    @property
    def total_value(self) -> float:
        """Reported total equity, else the sum of the strategy equities."""
        if self.total_equity:
            return self.total_equity
        return sum(s.equity for s in self.strategies)

    @property
    def total_pnl(self) -> float:
        return sum(s.pnl for s in self.strategies)

    @property
    def total_pnl_pct(self) -> float:
        initial = sum(s.initial_equity for s in self.strategies)
        return self.total_pnl / initial * 100 if initial > 0 else 0.0

    @classmethod
    def from_dict(cls, payload: Any) -> 'PortfolioState':
        """Normalize the ``{"data": {...}}`` envelope of /portfolio/state."""
        data = as_dict(as_dict(payload).get('data'))
        entries = data.get('strategies')
        if not isinstance(entries, dict):
            entries = data.get('positions')
        strategies = []
        if isinstance(entries, dict):
            for strategy_id, entry in entries.items():
                if isinstance(entry, dict):
                    strategies.append(StrategyAllocation.from_dict(str(strategy_id), entry))
        last_updated = data.get('last_updated')
        return cls(
            total_balance=as_float(data.get('total_balance')),
            daily_pnl=as_float(data.get('daily_pnl')),
            daily_pnl_pct=as_float(data.get('daily_pnl_pct')),
            total_equity=as_float(data.get('total_equity')),
            last_updated=last_updated if isinstance(last_updated, str) else None,
            strategies=strategies,
        )


class CircuitBreakerStatus(str, Enum):
    NORMAL = 'NORMAL'
    WARNING = 'WARNING'
    PAUSED = 'PAUSED'
    STOPPED = 'STOPPED'

    @classmethod
    def parse(cls, raw: Any) -> 'CircuitBreakerStatus':
        """Unknown or missing statuses display as NORMAL."""
        if isinstance(raw, str):
            try:
                return cls(raw.strip().upper())
            except ValueError:
                pass
        return cls.NORMAL


@dataclass(frozen=True)
class CircuitBreakerEvent:
    status: CircuitBreakerStatus = CircuitBreakerStatus.NORMAL
    message: str = 'State change'
    timestamp: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Any) -> 'CircuitBreakerEvent':
        d = as_dict(payload)
        return cls(
            status=CircuitBreakerStatus.parse(d.get('status')),
            message=as_str(d.get('message')) or 'State change',
            timestamp=as_str(d.get('timestamp')),
        )


@dataclass(frozen=True)
class CircuitBreakerState:
    status: CircuitBreakerStatus = CircuitBreakerStatus.NORMAL
    raw_status: Optional[str] = None
    recent_events: List[CircuitBreakerEvent] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: Any) -> 'CircuitBreakerState':
        """Normalize the ``{"data": {...}}`` envelope of /cb/state."""
        data = as_dict(as_dict(payload).get('data'))
        return cls(
            status=CircuitBreakerStatus.parse(data.get('status')),
            raw_status=as_str(data.get('status')),
            recent_events=as_list(data.get('recent_events'), CircuitBreakerEvent),
        )


@dataclass(frozen=True)
class MdseDetectorScore:
    detector_name: Optional[str] = None
    win_rate: Optional[float] = None
    avg_pnl: Optional[float] = None
    weight: Optional[float] = None
    sample_count: Optional[int] = None

    @classmethod
    def from_dict(cls, payload: Any) -> 'MdseDetectorScore':
        d = as_dict(payload)
        return cls(
            detector_name=as_str(d.get('detector_name')),
            win_rate=as_float(d.get('win_rate')),
            avg_pnl=as_float(d.get('avg_pnl')),
            weight=as_float(d.get('weight')),
            sample_count=as_int(d.get('sample_count')),
        )


@dataclass(frozen=True)
class MdseEvent:
    id: Optional[int] = None
    detector: Optional[str] = None
    symbol: Optional[str] = None
    direction: Optional[str] = None
    confidence: Optional[float] = None
    timestamp: Optional[str] = None
    confluence_score: Optional[float] = None

    @property
    def is_long(self) -> bool:
        return (self.direction or '').lower() == 'long'

    @classmethod
    def from_dict(cls, payload: Any) -> 'MdseEvent':
        d = as_dict(payload)
        return cls(
            id=as_int(d.get('id')),
            detector=as_str(d.get('detector')),
            symbol=as_str(d.get('symbol')),
            direction=as_str(d.get('direction')),
            confidence=as_float(d.get('confidence')),
            timestamp=as_str(d.get('timestamp')),
            confluence_score=as_float(d.get('confluence_score')),
        )


@dataclass(frozen=True)
class MdseTrade:
    event_id: Optional[int] = None
    symbol: Optional[str] = None
    direction: Optional[str] = None
    entry_price: Optional[float] = None
    exit_price: Optional[float] = None
    pnl: Optional[float] = None
    position_size: Optional[float] = None
    detector_name: Optional[str] = None
    confidence: Optional[float] = None
    timestamp: Optional[str] = None
    confluence_score: Optional[float] = None

    @property
    def is_long(self) -> bool:
        return (self.direction or '').lower() == 'long'

    @classmethod
    def from_dict(cls, payload: Any) -> 'MdseTrade':
        d = as_dict(payload)
        return cls(
            event_id=as_int(d.get('event_id')),
            symbol=as_str(d.get('symbol')),
            direction=as_str(d.get('direction')),
            entry_price=as_float(d.get('entry_price')),
            exit_price=as_float(d.get('exit_price')),
            pnl=as_float(d.get('pnl')),
            position_size=as_float(d.get('position_size')),
            detector_name=as_str(d.get('detector_name')),
            confidence=as_float(d.get('confidence')),
            timestamp=as_str(d.get('timestamp')),
            confluence_score=as_float(d.get('confluence_score')),
        )


SYSTEM_STATUSES = ('OK', 'DEGRADED', 'DOWN')
SYSTEM_UNREACHABLE = 'unreachable'


@dataclass(frozen=True)
class SystemHealth:
    status: str = 'OK'
    uptime_seconds: Optional[float] = None
    pid: Optional[int] = None

    @classmethod
    def from_dict(cls, payload: Any) -> 'SystemHealth':
        d = as_dict(payload)
        raw = d.get('status')
        if raw is None:
            status = 'OK'
        elif raw in SYSTEM_STATUSES:
            status = raw
        else:
            status = SYSTEM_UNREACHABLE
        return cls(
            status=status,
            uptime_seconds=as_float(d.get('uptime_seconds')),
            pid=as_int(d.get('pid')),
        )


@dataclass(frozen=True)
class SystemMetrics:
    memory_mb: Optional[float] = None
    cpu_percent: Optional[float] = None
    ws_connected: Optional[bool] = None
    last_fr_fetch: Optional[str] = None
    open_positions: Optional[int] = None

    @classmethod
    def from_dict(cls, payload: Any) -> 'SystemMetrics':
        d = as_dict(payload)
        return cls(
            memory_mb=as_float(d.get('memory_mb')),
            cpu_percent=as_float(d.get('cpu_percent')),
            ws_connected=as_bool(d.get('ws_connected')),
            last_fr_fetch=as_str(d.get('last_fr_fetch')),
            open_positions=as_int(d.get('open_positions')),
        )


@dataclass(frozen=True)
class SystemInfo:
    db_path: Optional[str] = None
    api_version: Optional[str] = None
    python_version: Optional[str] = None
    platform: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Any) -> 'SystemInfo':
        d = as_dict(payload)
        return cls(
            db_path=as_str(d.get('db_path')),
            api_version=as_str(d.get('api_version')),
            python_version=as_str(d.get('python_version')),
            platform=as_str(d.get('platform')),
        )


@dataclass(frozen=True)
class PerformanceSummary:
    total_pnl: Optional[float] = None
    win_rate: Optional[float] = None
    profit_factor: Optional[float] = None
    avg_slippage: Optional[float] = None
    total_trades: Optional[int] = None
    winning_trades: Optional[int] = None
    losing_trades: Optional[int] = None

    @classmethod
    def from_dict(cls, payload: Any) -> 'PerformanceSummary':
        d = as_dict(payload)
        return cls(
            total_pnl=as_float(d.get('total_pnl')),
            win_rate=as_float(d.get('win_rate')),
            profit_factor=as_float(d.get('profit_factor')),
            avg_slippage=as_float(d.get('avg_slippage')),
            total_trades=as_int(d.get('total_trades')),
            winning_trades=as_int(d.get('winning_trades')),
            losing_trades=as_int(d.get('losing_trades')),
        )


@dataclass(frozen=True)
class ExecutionQuality:
    trade_id: Optional[int] = None
    expected_price: Optional[float] = None
    actual_price: Optional[float] = None
    slippage_pct: Optional[float] = None
    api_latency_ms: Optional[float] = None
    timestamp: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Any) -> 'ExecutionQuality':
        d = as_dict(payload)
        return cls(
            trade_id=as_int(d.get('trade_id')),
            expected_price=as_float(d.get('expected_price')),
            actual_price=as_float(d.get('actual_price')),
            slippage_pct=as_float(d.get('slippage_pct')),
            api_latency_ms=as_float(d.get('api_latency_ms')),
            timestamp=as_str(d.get('timestamp')),
        )


@dataclass(frozen=True)
class MarketSnapshot:
    symbol: Optional[str] = None
    price: Optional[float] = None
    rsi: Optional[float] = None
    adx: Optional[float] = None
    macd: Optional[float] = None
    volume: Optional[float] = None
    timestamp: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Any) -> 'MarketSnapshot':
        d = as_dict(payload)
        return cls(
            symbol=as_str(d.get('symbol')),
            price=as_float(d.get('price')),
            rsi=as_float(d.get('rsi')),
            adx=as_float(d.get('adx')),
            macd=as_float(d.get('macd')),
            volume=as_float(d.get('volume')),
            timestamp=as_str(d.get('timestamp')),
        )
