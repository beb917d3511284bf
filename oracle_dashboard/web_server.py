"""aiohttp web server — dashboard pages, JSON API, health and metrics.

Every ``GET /`` is a page load and triggers one refresh cycle. Player pages
reuse the last refresh, the same way a click in the roster or feed selects a
player without refetching history.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from aiohttp import web

from .errors import UnknownPlayerError
from .views import to_dict

if TYPE_CHECKING:
    from .main import DashboardApp


class DashboardWebServer:
    """Serves the dashboard over HTTP."""

    def __init__(
        self,
        app: DashboardApp,
        host: str = "0.0.0.0",
        port: int = 8080,
        logger: logging.Logger | None = None,
    ) -> None:
        self._app = app
        self.host = host
        self.port = port
        self._logger = logger or app.logger
        self._runner: web.AppRunner | None = None

    def build_app(self) -> web.Application:
        """Create the aiohttp application with all routes registered."""
        webapp = web.Application()
        webapp.router.add_get("/", self.handle_index)
        webapp.router.add_get("/player/{address}", self.handle_player)
        webapp.router.add_get("/api/dashboard", self.handle_api_dashboard)
        webapp.router.add_get("/api/players/{address}", self.handle_api_player)
        metrics = self._app.config.metrics
        if metrics.enabled:
            webapp.router.add_get(metrics.health_path, self.handle_health)
            webapp.router.add_get(metrics.metrics_path, self.handle_metrics)
        return webapp

    async def start(self) -> None:
        """Start listening."""
        self._runner = web.AppRunner(self.build_app())
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        self._logger.info("Dashboard listening on http://%s:%d/", self.host, self.port)

    async def stop(self) -> None:
        """Stop listening."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None

    # ══════════════════════════════════════════════════════════
    #  Pages
    # ══════════════════════════════════════════════════════════

    async def handle_index(self, request: web.Request) -> web.Response:
        await self._app.refresh()
        return web.Response(text=self._app.render(), content_type="text/html")

    async def handle_player(self, request: web.Request) -> web.Response:
        address = request.match_info["address"]
        await self._app.ensure_refreshed()
        try:
            detail = await self._app.player_detail(address)
        except UnknownPlayerError:
            self._logger.debug("Player page requested for unknown address %s", address)
            return web.Response(text=self._app.render(), content_type="text/html", status=404)
        return web.Response(text=self._app.render(detail), content_type="text/html")

    # ══════════════════════════════════════════════════════════
    #  JSON API
    # ══════════════════════════════════════════════════════════

    async def handle_api_dashboard(self, request: web.Request) -> web.Response:
        await self._app.refresh()
        return web.json_response({
            "state": self._app.state.value,
            "roster": [to_dict(card) for card in self._app.roster],
            "history": [to_dict(entry) for entry in self._app.feed],
        })

    async def handle_api_player(self, request: web.Request) -> web.Response:
        address = request.match_info["address"]
        await self._app.ensure_refreshed()
        try:
            detail = await self._app.player_detail(address)
        except UnknownPlayerError as e:
            return web.json_response(
                {"error": {"code": e.error_code, "message": e.message}}, status=404,
            )
        return web.json_response(to_dict(detail))

    # ══════════════════════════════════════════════════════════
    #  Health & metrics
    # ══════════════════════════════════════════════════════════

    async def handle_health(self, request: web.Request) -> web.Response:
        return web.json_response(self._get_health_details())

    async def handle_metrics(self, request: web.Request) -> web.Response:
        text = "\n".join(self._collect_metrics()) + "\n"
        return web.Response(text=text, content_type="text/plain")

    def _get_health_details(self) -> dict:
        """Return health details for the /health endpoint."""
        app = self._app
        return {
            "status": "degraded" if app.last_error else "ok",
            "state": app.state.value,
            "last_error": app.last_error.error_code if app.last_error else None,
            "players": len(app.aggregator.players),
            "rounds": len(app.history),
            "identities_cached": len(app.ens_resolver.cache),
            "uptime_seconds": round(app.uptime_seconds, 1),
        }

    def _collect_metrics(self) -> list[str]:
        """Collect dashboard Prometheus metrics."""
        app = self._app
        ens = app.ens_resolver
        lines: list[str] = []

        # ── Counters ─────────────────────────────────────────
        lines.append(f"dashboard_refreshes_total {app.refreshes_total}")
        lines.append(f"dashboard_refresh_failures_total {app.refresh_failures_total}")
        lines.append(f"dashboard_ens_lookups_total {ens.lookups_total}")
        lines.append(f"dashboard_ens_cache_hits_total {ens.cache_hits_total}")
        lines.append(f"dashboard_ens_failures_total {ens.failures_total}")

        # ── Gauges ───────────────────────────────────────────
        lines.append(f"dashboard_players {len(app.aggregator.stats)}")
        lines.append(f"dashboard_rounds {len(app.history)}")
        lines.append(f"dashboard_skipped_rounds {len(app.aggregator.skipped_rounds)}")
        lines.append(f"dashboard_ens_cache_size {len(ens.cache)}")
        for state in type(app.state):
            value = 1 if state is app.state else 0
            lines.append(f'dashboard_refresh_state{{state="{state.value}"}} {value}')

        return lines
