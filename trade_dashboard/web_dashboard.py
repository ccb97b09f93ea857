"""
Web dashboard for the trading engine.
Serves one server-rendered HTML page per route via aiohttp. The circuit
breaker and system pages refresh themselves over Server-Sent Events.
"""

import asyncio
import json
import logging

from aiohttp import web

from .api_client import DashboardApiClient
from .config import Config
from .layout import render_error_boundary, render_error_content, render_page
from .pages import (
    render_circuit_breaker, render_mdse, render_overview, render_performance,
    render_portfolio, render_signals, render_system, render_trades,
)
from .polling import Cancelled, Poller
from .views import (
    ViewState, load_circuit_breaker, load_mdse, load_overview, load_performance,
    load_portfolio, load_signals, load_system, load_trades, load_view,
)

logger = logging.getLogger(__name__)


@web.middleware
async def error_boundary(request, handler):
    """Replace any page that fails to load or render with a recovery page."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unhandled error rendering {request.path}: {e}", exc_info=True)
        return web.Response(
            text=render_error_boundary(request.path, str(e)),
            content_type='text/html',
            status=500,
        )


class WebDashboard:
    """aiohttp web server that renders the trading engine's API as HTML pages."""

    def __init__(self, client: DashboardApiClient = None, host: str = None,
                 port: int = None, poll_interval: float = None):
        self.client = client or DashboardApiClient()
        self.host = host or Config.WEB_DASHBOARD_HOST
        self.port = port or Config.WEB_DASHBOARD_PORT
        self.poll_interval = poll_interval or Config.POLL_INTERVAL_SECONDS

    def run(self):
        """Serve until interrupted."""
        app = self._create_app()
        logger.info(f"Web dashboard listening on http://{self.host}:{self.port} "
                    f"(API: {self.client.base_url})")
        try:
            web.run_app(app, host=self.host, port=self.port, print=None)
        except OSError as e:
            logger.error(f"Web dashboard failed to start: {e}. Free port {self.port} "
                         f"or change WEB_DASHBOARD_PORT")
            raise

    def _create_app(self):
        app = web.Application(middlewares=[error_boundary])
        app.router.add_get('/', self.handle_overview)
        app.router.add_get('/trades', self.handle_trades)
        app.router.add_get('/signals', self.handle_signals)
        app.router.add_get('/portfolio', self.handle_portfolio)
        app.router.add_get('/performance', self.handle_performance)
        app.router.add_get('/circuit-breaker', self.handle_circuit_breaker)
        app.router.add_get('/mdse', self.handle_mdse)
        app.router.add_get('/system', self.handle_system)
        app.router.add_get('/stream/circuit-breaker', self.handle_circuit_breaker_stream)
        app.router.add_get('/stream/system', self.handle_system_stream)
        app.on_cleanup.append(self._on_cleanup)
        return app

    async def _on_cleanup(self, app):
        self.client.close()

    # ── Handlers ──

    async def _render(self, request, loader, renderer, stream_url: str = None):
        if stream_url:
            # Polled pages ship their loading state; the stream fills it in
            content = renderer(ViewState())
        else:
            state = await load_view(loader, self.client)
            content = renderer(state)
        return web.Response(text=render_page(request.path, content, stream_url),
                            content_type='text/html')

    async def handle_overview(self, request):
        return await self._render(request, load_overview, render_overview)

    async def handle_trades(self, request):
        return await self._render(request, load_trades, render_trades)

    async def handle_signals(self, request):
        return await self._render(request, load_signals, render_signals)

    async def handle_portfolio(self, request):
        return await self._render(request, load_portfolio, render_portfolio)

    async def handle_performance(self, request):
        return await self._render(request, load_performance, render_performance)

    async def handle_mdse(self, request):
        return await self._render(request, load_mdse, render_mdse)

    async def handle_circuit_breaker(self, request):
        return await self._render(request, load_circuit_breaker, render_circuit_breaker,
                                  stream_url='/stream/circuit-breaker')

    async def handle_system(self, request):
        return await self._render(request, load_system, render_system,
                                  stream_url='/stream/system')

    async def handle_circuit_breaker_stream(self, request):
        return await self._stream(request, load_circuit_breaker, render_circuit_breaker)

    async def handle_system_stream(self, request):
        return await self._stream(request, load_system, render_system)

    async def _stream(self, request, loader, renderer):
        """Server-Sent Events stream: one rendered fragment per poll, until the client leaves."""
        response = web.StreamResponse()
        response.content_type = 'text/event-stream'
        response.headers['Cache-Control'] = 'no-cache'
        response.headers['X-Accel-Buffering'] = 'no'
        await response.prepare(request)

        fragments = asyncio.Queue()
        current = ViewState()

        async def fetch(token):
            nonlocal current
            try:
                current = await load_view(loader, self.client, previous=current, cancel=token)
                return renderer(current)
            except Cancelled:
                raise
            except Exception as e:
                # Recovery view for the content region only
                logger.error(f"Unhandled error rendering {request.path}: {e}", exc_info=True)
                return render_error_content(str(e))

        poller = Poller(fetch, fragments.put, self.poll_interval, name=f"stream {request.path}")
        poller.start()
        try:
            while True:
                fragment = await fragments.get()
                payload = json.dumps({'html': fragment})
                await response.write(f"data: {payload}\n\n".encode())
        except (ConnectionResetError, asyncio.CancelledError):
            pass
        finally:
            await poller.stop()
            logger.debug(f"SSE client left {request.path}, poller stopped")
        return response
