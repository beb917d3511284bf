"""Service orchestrator — DashboardApp.

Owns the clients, the aggregator and the identity cache, and runs the
refresh cycle: fetch history → aggregate → resolve identities → build views.
"""

from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum

from . import __version__
from .config import DashboardConfig
from .ens_resolver import EnsResolver, IdentityCache
from .errors import DashboardError
from .history_client import HistoryClient
from .models import BetHistoryItem
from .render import render_history, render_page, render_player_detail, render_roster
from .stats_aggregator import StatsAggregator, distinct_players
from .views import (
    HistoryEntry,
    PlayerDetail,
    RosterCard,
    build_history_feed,
    build_player_detail,
    build_roster,
)


class RefreshState(Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    AGGREGATED = "aggregated"
    RENDERED = "rendered"
    FAILED = "failed"


class DashboardApp:
    """Top-level application orchestrator."""

    def __init__(
        self,
        config: DashboardConfig | None = None,
        logger: logging.Logger | None = None,
        history_client: HistoryClient | None = None,
        ens_resolver: EnsResolver | None = None,
        aggregator: StatsAggregator | None = None,
        identity_cache: IdentityCache | None = None,
    ) -> None:
        self.config = config or DashboardConfig()
        self.logger = logger or logging.getLogger("dashboard")

        # Components (injected, or built from config)
        self.history_client = history_client or HistoryClient(
            self.config.history_api, self.logger.getChild("history"),
        )
        self.ens_resolver = ens_resolver or EnsResolver(
            self.config.ens, self.logger.getChild("ens"), cache=identity_cache,
        )
        self.aggregator = aggregator or StatsAggregator(
            self.logger.getChild("stats"), bet_policy=self.config.aggregation.bet_policy,
        )

        # Refresh state
        self.state = RefreshState.IDLE
        self.last_error: DashboardError | None = None
        self.history: list[BetHistoryItem] = []
        self.roster: list[RosterCard] = []
        self.feed: list[HistoryEntry] = []
        self.views_ready = False
        self._refresh_lock = asyncio.Lock()
        self._running = False
        self._start_time: float | None = None

        # Counters (for metrics)
        self.refreshes_total: int = 0
        self.refresh_failures_total: int = 0
        self.last_refresh_at: float | None = None

    @property
    def uptime_seconds(self) -> float:
        if self._start_time is None:
            return 0.0
        return time.time() - self._start_time

    @property
    def bet_policy(self) -> str:
        return self.aggregator.bet_policy

    # ══════════════════════════════════════════════════════════
    #  Lifecycle
    # ══════════════════════════════════════════════════════════

    async def start(self) -> None:
        """Open HTTP sessions for both upstream APIs."""
        self.logger.info("Starting oracle-dashboard v%s...", __version__)
        self._start_time = time.time()
        await self.history_client.start()
        await self.ens_resolver.start()
        self._running = True
        self.logger.info("History API: %s", self.config.history_api.url)
        self.logger.info("ENS API: %s", self.config.ens.base_url)

    async def stop(self) -> None:
        """Close HTTP sessions in reverse order."""
        if not self._running:
            return
        self.logger.info("Shutting down oracle-dashboard...")
        self._running = False
        await self.ens_resolver.stop()
        await self.history_client.stop()
        self.logger.info("oracle-dashboard stopped.")

    # ══════════════════════════════════════════════════════════
    #  Refresh cycle
    # ══════════════════════════════════════════════════════════

    async def refresh(self) -> bool:
        """Run one fetch cycle. Returns True when views were rebuilt.

        idle → fetching → aggregated → rendered, or → failed on a fetch or
        decode error. A failure is logged once and leaves every view empty.
        """
        async with self._refresh_lock:
            self.refreshes_total += 1
            self.last_refresh_at = time.time()
            self.state = RefreshState.FETCHING
            self.last_error = None

            try:
                history = await self.history_client.fetch_history()
            except DashboardError as e:
                self._fail(e)
                return False

            self.aggregator.aggregate(history)
            self.state = RefreshState.AGGREGATED

            players = distinct_players(history, self.bet_policy)
            identities = await self.ens_resolver.resolve_many(players)

            display = self.config.display
            roster = build_roster(history, self.aggregator.stats, identities, display, self.bet_policy)
            feed = build_history_feed(history, identities, display, self.bet_policy)

            # Swap in the finished views together; pages served mid-cycle keep the last ones
            self.history = history
            self.roster = roster
            self.feed = feed
            self.views_ready = True
            self.state = RefreshState.RENDERED
            self.logger.info(
                "Refreshed: %d round(s), %d player(s)", len(history), len(self.roster),
            )
            return True

    def _fail(self, error: DashboardError) -> None:
        self.refresh_failures_total += 1
        self.last_error = error
        self.state = RefreshState.FAILED
        self.history = []
        self.roster = []
        self.feed = []
        self.views_ready = False
        self.aggregator.clear()
        self.logger.error("Error fetching history (%s): %s", error.error_code, error)

    async def ensure_refreshed(self) -> None:
        """Refresh once if no cycle has run yet."""
        if self.state is RefreshState.IDLE:
            await self.refresh()

    # ══════════════════════════════════════════════════════════
    #  Views
    # ══════════════════════════════════════════════════════════

    async def player_detail(self, address: str) -> PlayerDetail:
        """Stats panel for one player. Raises UnknownPlayerError for unknown addresses."""
        self.aggregator.require(address)
        identity = await self.ens_resolver.resolve(address)
        return build_player_detail(address, self.aggregator.stats, identity, self.config.display)

    def render(self, detail: PlayerDetail | None = None) -> str:
        """Full page from the last completed refresh. Views stay empty after a failed one."""
        display = self.config.display
        if self.views_ready:
            roster_html = render_roster(self.roster, display.roster_title)
            history_html = render_history(self.feed)
        else:
            roster_html = ""
            history_html = ""
        return render_page(
            roster_html=roster_html,
            stats_html=render_player_detail(detail),
            history_html=history_html,
            title=display.title,
        )

    async def render_snapshot(self) -> str:
        """Run one refresh and return the rendered page."""
        await self.refresh()
        return self.render()
