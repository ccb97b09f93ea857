"""
Page view state and data loaders.

Every page goes through the same state machine: LOADING until its fetches
resolve, then READY with the page data or ERROR with a message. Loaders are
synchronous and issue their fetches in parallel on a thread pool; the web
layer runs them off the event loop with `load_view`.
"""
import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from .api_client import ApiError, DashboardApiClient
from .config import Config
from .models import (
    AnalysisCycle, CircuitBreakerState, ExecutionQuality, MarketSnapshot,
    MdseDetectorScore, MdseEvent, MdseTrade, PerformanceSummary, PortfolioState,
    Signal, SystemHealth, SystemInfo, SystemMetrics, Trade, TradeSummary,
)
from .polling import CancelToken

logger = logging.getLogger(__name__)


class ViewStatus(str, Enum):
    LOADING = 'loading'
    ERROR = 'error'
    READY = 'ready'


@dataclass(frozen=True)
class ViewState:
    status: ViewStatus = ViewStatus.LOADING
    data: Any = None
    error: Optional[str] = None

    @property
    def is_loading(self) -> bool:
        return self.status == ViewStatus.LOADING

    @property
    def is_error(self) -> bool:
        return self.status == ViewStatus.ERROR

    @property
    def is_ready(self) -> bool:
        return self.status == ViewStatus.READY

    @property
    def has_data(self) -> bool:
        return self.data is not None

    def begin_refresh(self) -> 'ViewState':
        """Only the first fetch shows the loading state; refreshes keep what is on screen."""
        if self.data is None:
            return ViewState()
        return self

    def resolve(self, data) -> 'ViewState':
        return ViewState(ViewStatus.READY, data=data)

    def fail(self, message: str) -> 'ViewState':
        return replace(self, status=ViewStatus.ERROR, error=message)


def fetch_all(calls: Dict[str, Callable[[], Any]]) -> Dict[str, Any]:
    """
    Run every call in parallel and wait for all of them.

    Returns results keyed like `calls`. The first call to fail fails the
    whole batch: its exception is re-raised and calls still queued are dropped.
    """
    if not calls:
        return {}
    results = {}
    executor = ThreadPoolExecutor(max_workers=len(calls))
    try:
        futures = {executor.submit(fn): name for name, fn in calls.items()}
        for future in as_completed(futures):
            results[futures[future]] = future.result()
    finally:
        executor.shutdown(wait=False, cancel_futures=True)
    return results


# ── Page data ──

@dataclass(frozen=True)
class OverviewData:
    portfolio: PortfolioState
    circuit_breaker: CircuitBreakerState
    recent_trades: List[Trade] = field(default_factory=list)


@dataclass(frozen=True)
class TradesData:
    trades: List[Trade]
    summary: TradeSummary


@dataclass(frozen=True)
class SignalStats:
    total: int
    executed: int
    execution_rate: float
    avg_confidence: float

    @classmethod
    def from_signals(cls, signals: List[Signal]) -> 'SignalStats':
        total = len(signals)
        executed = sum(1 for s in signals if s.executed)
        if total == 0:
            return cls(total=0, executed=0, execution_rate=0.0, avg_confidence=0.0)
        # Missing confidence counts as zero
        confidence_sum = sum(s.confidence or 0.0 for s in signals)
        return cls(
            total=total,
            executed=executed,
            execution_rate=executed / total * 100,
            avg_confidence=confidence_sum / total,
        )


@dataclass(frozen=True)
class SignalsData:
    signals: List[Signal]
    cycles: List[AnalysisCycle] = field(default_factory=list)

    @property
    def stats(self) -> SignalStats:
        return SignalStats.from_signals(self.signals)


@dataclass(frozen=True)
class PortfolioData:
    portfolio: PortfolioState


@dataclass(frozen=True)
class PerformanceData:
    summary: PerformanceSummary
    execution_quality: List[ExecutionQuality] = field(default_factory=list)
    snapshots: List[MarketSnapshot] = field(default_factory=list)


@dataclass(frozen=True)
class CircuitBreakerData:
    state: CircuitBreakerState


@dataclass(frozen=True)
class MdseTradeDetail:
    """A MDSE trade with the fields it lacks filled in from its originating event"""
    trade: MdseTrade
    detector_name: Optional[str] = None
    confidence: Optional[float] = None
    timestamp: Optional[str] = None
    confluence_score: Optional[float] = None


@dataclass(frozen=True)
class MdseData:
    scores: List[MdseDetectorScore]
    events: List[MdseEvent] = field(default_factory=list)
    trades: List[MdseTrade] = field(default_factory=list)

    def event_for(self, trade: MdseTrade) -> Optional[MdseEvent]:
        if trade.event_id is None:
            return None
        for event in self.events:
            if event.id == trade.event_id:
                return event
        return None

    def detail_for(self, trade: MdseTrade) -> MdseTradeDetail:
        event = self.event_for(trade)

        def pick(own, attr):
            if own is not None:
                return own
            return getattr(event, attr) if event is not None else None

        return MdseTradeDetail(
            trade=trade,
            detector_name=pick(trade.detector_name, 'detector'),
            confidence=pick(trade.confidence, 'confidence'),
            timestamp=pick(trade.timestamp, 'timestamp'),
            confluence_score=pick(trade.confluence_score, 'confluence_score'),
        )


@dataclass(frozen=True)
class SystemData:
    health: SystemHealth
    metrics: SystemMetrics
    info: SystemInfo


# ── Loaders ──

def load_overview(client: DashboardApiClient, cancel: Optional[CancelToken] = None) -> OverviewData:
    r = fetch_all({
        'portfolio': lambda: client.get_portfolio_state(cancel=cancel),
        'cb': lambda: client.get_circuit_breaker_state(cancel=cancel),
        'trades': lambda: client.get_trades(limit=Config.OVERVIEW_TRADES_LIMIT, cancel=cancel),
    })
    return OverviewData(portfolio=r['portfolio'], circuit_breaker=r['cb'], recent_trades=r['trades'])


def load_trades(client: DashboardApiClient, cancel: Optional[CancelToken] = None) -> TradesData:
    r = fetch_all({
        'trades': lambda: client.get_trades(limit=Config.TRADES_PAGE_LIMIT, cancel=cancel),
        'summary': lambda: client.get_trade_summary(cancel=cancel),
    })
    return TradesData(trades=r['trades'], summary=r['summary'])


def load_signals(client: DashboardApiClient, cancel: Optional[CancelToken] = None) -> SignalsData:
    r = fetch_all({
        'signals': lambda: client.get_signals(limit=Config.SIGNALS_PAGE_LIMIT, cancel=cancel),
        'cycles': lambda: client.get_analysis_cycles(limit=Config.CYCLES_PAGE_LIMIT, cancel=cancel),
    })
    return SignalsData(signals=r['signals'], cycles=r['cycles'])


def load_portfolio(client: DashboardApiClient, cancel: Optional[CancelToken] = None) -> PortfolioData:
    return PortfolioData(portfolio=client.get_portfolio_state(cancel=cancel))


def load_performance(client: DashboardApiClient, cancel: Optional[CancelToken] = None) -> PerformanceData:
    r = fetch_all({
        'summary': lambda: client.get_performance_summary(cancel=cancel),
        'quality': lambda: client.get_execution_quality(limit=Config.EXECUTION_QUALITY_LIMIT, cancel=cancel),
        'snapshots': lambda: client.get_market_snapshots(limit=Config.MARKET_SNAPSHOTS_LIMIT, cancel=cancel),
    })
    return PerformanceData(summary=r['summary'], execution_quality=r['quality'], snapshots=r['snapshots'])


def load_circuit_breaker(client: DashboardApiClient,
                         cancel: Optional[CancelToken] = None) -> CircuitBreakerData:
    return CircuitBreakerData(state=client.get_circuit_breaker_state(cancel=cancel))


def load_mdse(client: DashboardApiClient, cancel: Optional[CancelToken] = None) -> MdseData:
    r = fetch_all({
        'scores': lambda: client.get_mdse_scores(cancel=cancel),
        'events': lambda: client.get_mdse_events(hours=Config.MDSE_EVENTS_HOURS, cancel=cancel),
        'trades': lambda: client.get_mdse_trades(limit=Config.MDSE_TRADES_LIMIT, cancel=cancel),
    })
    return MdseData(scores=r['scores'], events=r['events'], trades=r['trades'])


def load_system(client: DashboardApiClient, cancel: Optional[CancelToken] = None) -> SystemData:
    r = fetch_all({
        'health': lambda: client.get_system_health(cancel=cancel),
        'metrics': lambda: client.get_system_metrics(cancel=cancel),
        'info': lambda: client.get_system_info(cancel=cancel),
    })
    return SystemData(health=r['health'], metrics=r['metrics'], info=r['info'])


async def load_view(loader, client: DashboardApiClient,
                    previous: Optional[ViewState] = None,
                    cancel: Optional[CancelToken] = None) -> ViewState:
    """
    Run a page loader off the event loop and fold the outcome into a ViewState.

    Upstream failures become an ERROR state that keeps any previously loaded
    data. Cancelled propagates so a stopped poller never applies the result.
    """
    state = (previous or ViewState()).begin_refresh()
    loop = asyncio.get_running_loop()
    try:
        data = await loop.run_in_executor(None, loader, client, cancel)
    except ApiError as e:
        logger.warning(f"{loader.__name__}: {e}")
        return state.fail(str(e))
    return state.resolve(data)
