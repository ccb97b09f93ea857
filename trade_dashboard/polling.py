"""
Cancellable periodic refresh for the circuit breaker and system pages.

A Poller owns one asyncio task and one CancelToken. The token is handed down
to every fetch so that a response arriving after stop() is dropped instead of
being applied.
"""
import asyncio
import logging
import threading
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class Cancelled(Exception):
    """Raised when work is abandoned because its CancelToken was cancelled"""


class CancelToken:
    def __init__(self):
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self):
        self._event.set()

    def raise_if_cancelled(self):
        if self._event.is_set():
            raise Cancelled()


class Poller:
    """
    Run `fetch(token)` immediately and then every `interval` seconds.

    Each result is passed to `on_result`. `fetch` is expected to turn upstream
    failures into a value (e.g. an error ViewState) rather than raise; anything
    it does raise is logged and the loop keeps going.
    """

    def __init__(self, fetch: Callable[[CancelToken], Awaitable],
                 on_result: Callable[[object], Awaitable],
                 interval: float, name: str = 'poller'):
        self.fetch = fetch
        self.on_result = on_result
        self.interval = interval
        self.name = name
        self.token = CancelToken()
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        if self._task is None:
            self._task = asyncio.ensure_future(self._run())
        return self._task

    async def refresh(self) -> bool:
        """Fetch once. Returns False if the result was discarded due to cancellation."""
        if self.token.cancelled:
            return False
        try:
            result = await self.fetch(self.token)
        except Cancelled:
            return False
        if self.token.cancelled:
            logger.debug(f"{self.name}: discarding result that arrived after stop")
            return False
        await self.on_result(result)
        return True

    async def _run(self):
        while not self.token.cancelled:
            try:
                await self.refresh()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"{self.name}: refresh failed: {e}", exc_info=True)
            if self.token.cancelled:
                break
            await asyncio.sleep(self.interval)

    async def stop(self):
        self.token.cancel()
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
