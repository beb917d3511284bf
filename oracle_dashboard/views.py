"""View models for the roster, player detail and history feed.

Pure functions over aggregator and resolver output; no I/O. ``render.py``
turns these into HTML and the web server serves them as JSON.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from .errors import UnknownPlayerError
from .stats_aggregator import counted_bets, distinct_players
from .utils import format_amount, format_timestamp, short_address

if TYPE_CHECKING:
    from .config import DisplayConfig
    from .models import BetHistoryItem, EnsIdentity, PlayerStats

ROSTER_AVATAR_SIZE = 40
DETAIL_AVATAR_SIZE = 80
FEED_AVATAR_SIZE = 40


@dataclass
class RosterCard:
    address: str
    display_name: str
    avatar: str
    total_bets: int
    win_rate: str


@dataclass
class PlayerDetail:
    address: str
    display_name: str
    avatar: str
    total_bets: int
    total_spent: str
    wins: int
    losses: int


@dataclass
class HistoryEntry:
    round: int
    timestamp: str
    player: str
    display_name: str
    avatar: str
    amount: str
    win_amount: str
    spin_result: str
    is_win: bool


def to_dict(view: Any) -> dict[str, Any]:
    return asdict(view)


# ═══════════════════════════════════════════════════════════════
#  Display helpers
# ═══════════════════════════════════════════════════════════════


def display_name(address: str, identity: EnsIdentity | None) -> str:
    """ENS display name, or the abbreviated address when there is none."""
    if identity is not None and identity.display_name:
        return identity.display_name
    return short_address(address)


def avatar_url(identity: EnsIdentity | None, display: DisplayConfig, size: int) -> str:
    if identity is not None and identity.avatar:
        return identity.avatar
    return display.placeholder(size)


def win_rate(stats: PlayerStats) -> float:
    """Wins as a percentage of total bets, rounded half up to one decimal."""
    if stats.total_bets == 0:
        raise ValueError("Win rate is undefined for a player with no bets")
    rate = Decimal(stats.wins) * 100 / Decimal(stats.total_bets)
    return float(rate.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def format_win_rate(stats: PlayerStats) -> str:
    return f"{win_rate(stats):.1f}"


# ═══════════════════════════════════════════════════════════════
#  Builders
# ═══════════════════════════════════════════════════════════════


def build_roster(
    history: Iterable[BetHistoryItem],
    stats: Mapping[str, PlayerStats],
    identities: Mapping[str, EnsIdentity | None],
    display: DisplayConfig,
    bet_policy: str = "first",
) -> list[RosterCard]:
    """One card per distinct player, in first-seen order."""
    cards: list[RosterCard] = []
    for player in distinct_players(history, bet_policy):
        player_stats = stats.get(player)
        if player_stats is None:
            raise UnknownPlayerError(player)
        identity = identities.get(player)
        cards.append(RosterCard(
            address=player,
            display_name=display_name(player, identity),
            avatar=avatar_url(identity, display, ROSTER_AVATAR_SIZE),
            total_bets=player_stats.total_bets,
            win_rate=format_win_rate(player_stats),
        ))
    return cards


def build_player_detail(
    address: str,
    stats: Mapping[str, PlayerStats],
    identity: EnsIdentity | None,
    display: DisplayConfig,
) -> PlayerDetail:
    """Stats panel for one player. Raises UnknownPlayerError if not aggregated."""
    player_stats = stats.get(address)
    if player_stats is None:
        raise UnknownPlayerError(address)
    return PlayerDetail(
        address=address,
        display_name=display_name(address, identity),
        avatar=avatar_url(identity, display, DETAIL_AVATAR_SIZE),
        total_bets=player_stats.total_bets,
        total_spent=format_amount(player_stats.total_spent),
        wins=player_stats.wins,
        losses=player_stats.losses,
    )


def build_history_feed(
    history: Iterable[BetHistoryItem],
    identities: Mapping[str, EnsIdentity | None],
    display: DisplayConfig,
    bet_policy: str = "first",
) -> list[HistoryEntry]:
    """Feed entries in API order (never re-sorted). Rounds without bets are left out."""
    entries: list[HistoryEntry] = []
    for item in history:
        timestamp = format_timestamp(item.timestamp, display.timestamp_format)
        for bet in counted_bets(item, bet_policy):
            identity = identities.get(bet.player)
            entries.append(HistoryEntry(
                round=item.round,
                timestamp=timestamp,
                player=bet.player,
                display_name=display_name(bet.player, identity),
                avatar=avatar_url(identity, display, FEED_AVATAR_SIZE),
                amount=format_amount(bet.amount),
                win_amount=format_amount(bet.win_amount),
                spin_result=bet.spin_result,
                is_win=bet.is_win,
            ))
    return entries
