"""HTML presentation for the three dashboard views.

Markup only, no styling framework. Every interpolated value goes through
``html.escape``; ENS display names and avatars are user-controlled.
"""

from __future__ import annotations

from html import escape
from typing import TYPE_CHECKING
from urllib.parse import quote

if TYPE_CHECKING:
    from .views import HistoryEntry, PlayerDetail, RosterCard

PROFILES_CONTAINER = "profiles-container"
STATS_CONTAINER = "stats-container"
HISTORY_CONTAINER = "history-container"


def player_href(address: str) -> str:
    return f"/player/{quote(address, safe='')}"


def render_roster(cards: list[RosterCard], title: str = "Recent Players") -> str:
    parts = [f'<h2>{escape(title)}</h2>']
    for card in cards:
        parts.append(
            f'<a class="profile-card" href="{escape(player_href(card.address))}">'
            f'<img src="{escape(card.avatar)}" alt="Player avatar" width="40" height="40">'
            f'<p class="name">{escape(card.display_name)}</p>'
            f'<p class="meta"><span>{card.total_bets} bets</span> • '
            f'<span>{escape(card.win_rate)}% wins</span></p>'
            f'</a>'
        )
    return "\n".join(parts)


def render_player_detail(detail: PlayerDetail | None) -> str:
    """Stats panel markup, or an empty string when no player is selected."""
    if detail is None:
        return ""
    return (
        f'<div class="player-header">'
        f'<img src="{escape(detail.avatar)}" alt="Player avatar" width="80" height="80">'
        f'<h2>{escape(detail.display_name)}</h2>'
        f'</div>\n'
        f'<dl class="player-stats">'
        f'<dt>Total Bets</dt><dd class="total-bets">{detail.total_bets}</dd>'
        f'<dt>Total Spent</dt><dd class="total-spent">{escape(detail.total_spent)}</dd>'
        f'<dt>Wins</dt><dd class="wins">{detail.wins}</dd>'
        f'<dt>Losses</dt><dd class="losses">{detail.losses}</dd>'
        f'</dl>'
    )


def render_history(entries: list[HistoryEntry]) -> str:
    parts: list[str] = []
    for entry in entries:
        outcome = "win" if entry.is_win else "loss"
        parts.append(
            f'<a class="history-item {outcome}" href="{escape(player_href(entry.player))}">'
            f'<img src="{escape(entry.avatar)}" alt="Player avatar" width="40" height="40">'
            f'<p class="round">Round #{entry.round}</p>'
            f'<p class="timestamp">{escape(entry.timestamp)}</p>'
            f'<p class="payout">{escape(entry.amount)} → {escape(entry.win_amount)}</p>'
            f'<p class="result">Result: {escape(entry.spin_result)}</p>'
            f'<p class="name">{escape(entry.display_name)}</p>'
            f'</a>'
        )
    return "\n".join(parts)


def render_page(
    roster_html: str = "",
    stats_html: str = "",
    history_html: str = "",
    title: str = "Oracle History",
) -> str:
    """Full page with the three fixed mount points."""
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n'
        "<head>\n"
        '<meta charset="utf-8">\n'
        f"<title>{escape(title)}</title>\n"
        "</head>\n"
        "<body>\n"
        f'<section id="{PROFILES_CONTAINER}">\n{roster_html}\n</section>\n'
        f'<section id="{STATS_CONTAINER}">\n{stats_html}\n</section>\n'
        f'<section id="{HISTORY_CONTAINER}">\n{history_html}\n</section>\n'
        "</body>\n"
        "</html>\n"
    )
