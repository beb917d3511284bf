"""Stats aggregator — reduce the bet history into per-player counters.

``aggregate_player_stats`` is the pure reduction; ``StatsAggregator`` owns the
current mapping and rebuilds it from scratch on every fetch cycle.
"""

from __future__ import annotations

import logging
from typing import Iterable

from .errors import UnknownPlayerError
from .models import Bet, BetHistoryItem, PlayerStats

BET_POLICIES = ("first", "all")


def counted_bets(item: BetHistoryItem, bet_policy: str = "first") -> tuple[Bet, ...]:
    """Bets of a round that count toward stats and views under the given policy."""
    if bet_policy == "all":
        return item.bets
    if bet_policy == "first":
        return item.bets[:1]
    raise ValueError(f"Unknown bet policy: {bet_policy!r}")


def aggregate_player_stats(
    history: Iterable[BetHistoryItem],
    bet_policy: str = "first",
) -> tuple[dict[str, PlayerStats], list[int]]:
    """Single pass over the history.

    Returns (stats by player address, round numbers skipped for having no bets).
    """
    stats: dict[str, PlayerStats] = {}
    skipped: list[int] = []

    for item in history:
        bets = counted_bets(item, bet_policy)
        if not bets:
            skipped.append(item.round)
            continue
        for bet in bets:
            if bet.player not in stats:
                stats[bet.player] = PlayerStats()
            stats[bet.player].record(bet)

    return stats, skipped


def distinct_players(history: Iterable[BetHistoryItem], bet_policy: str = "first") -> list[str]:
    """Players with at least one counted bet, in first-seen order."""
    return list(dict.fromkeys(
        bet.player for item in history for bet in counted_bets(item, bet_policy)
    ))


class StatsAggregator:
    """Holds the per-player stats for the most recent history."""

    def __init__(self, logger: logging.Logger | None = None, bet_policy: str = "first") -> None:
        if bet_policy not in BET_POLICIES:
            raise ValueError(f"Unknown bet policy: {bet_policy!r}")
        self._logger = logger or logging.getLogger("dashboard.stats")
        self._bet_policy = bet_policy
        self._stats: dict[str, PlayerStats] = {}
        self.skipped_rounds: list[int] = []

    @property
    def bet_policy(self) -> str:
        return self._bet_policy

    @property
    def stats(self) -> dict[str, PlayerStats]:
        return self._stats

    @property
    def players(self) -> list[str]:
        return list(self._stats)

    def clear(self) -> None:
        self._stats = {}
        self.skipped_rounds = []

    def aggregate(self, history: Iterable[BetHistoryItem]) -> dict[str, PlayerStats]:
        """Replace the current stats with a fresh aggregation of ``history``."""
        self.clear()
        self._stats, self.skipped_rounds = aggregate_player_stats(history, self._bet_policy)
        if self.skipped_rounds:
            self._logger.warning(
                "Skipped %d round(s) with no bets: %s",
                len(self.skipped_rounds), self.skipped_rounds,
            )
        self._logger.debug("Aggregated stats for %d player(s)", len(self._stats))
        return self._stats

    def get(self, player: str) -> PlayerStats | None:
        return self._stats.get(player)

    def require(self, player: str) -> PlayerStats:
        stats = self._stats.get(player)
        if stats is None:
            raise UnknownPlayerError(player)
        return stats
