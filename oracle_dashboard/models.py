"""Domain types — bets, history rounds, player stats and ENS identities.

The History and ENS APIs speak camelCase JSON; the ``from_dict`` constructors
translate into these dataclasses and raise ``DecodeError`` on payloads that
do not have the expected shape.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from .errors import DecodeError

Number = int | float


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# ═══════════════════════════════════════════════════════════════
#  History payload
# ═══════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class Bet:
    """A single wager placed in a round."""

    player: str
    amount: Number
    win_amount: Number = 0
    spin_result: str = ""

    @property
    def is_win(self) -> bool:
        return self.win_amount > 0

    @classmethod
    def from_dict(cls, data: Any) -> Bet:
        if not isinstance(data, dict):
            raise DecodeError(f"Bet must be an object, got {type(data).__name__}")
        player = data.get("player")
        if not isinstance(player, str) or not player:
            raise DecodeError("Bet is missing a player address", {"bet": data})
        amount = data.get("amount")
        if not _is_number(amount):
            raise DecodeError(f"Bet amount is not a number: {amount!r}", {"bet": data})
        win_amount = data.get("winAmount", 0)
        if win_amount is None:
            win_amount = 0
        if not _is_number(win_amount):
            raise DecodeError(f"Bet winAmount is not a number: {win_amount!r}", {"bet": data})
        spin_result = data.get("spinResult")
        return cls(
            player=player,
            amount=amount,
            win_amount=win_amount,
            spin_result="" if spin_result is None else str(spin_result),
        )


@dataclass(frozen=True)
class BetHistoryItem:
    """One round of the game as returned by the History API."""

    round: int
    timestamp: Number  # epoch millis
    bets: tuple[Bet, ...] = ()

    @property
    def first_bet(self) -> Bet | None:
        return self.bets[0] if self.bets else None

    @classmethod
    def from_dict(cls, data: Any) -> BetHistoryItem:
        if not isinstance(data, dict):
            raise DecodeError(f"History item must be an object, got {type(data).__name__}")
        round_no = data.get("round")
        if not isinstance(round_no, int) or isinstance(round_no, bool):
            raise DecodeError(f"History item round is not an integer: {round_no!r}")
        timestamp = data.get("timestamp")
        if not _is_number(timestamp):
            raise DecodeError(f"Round {round_no} timestamp is not a number: {timestamp!r}")
        bets = data.get("bets", [])
        if not isinstance(bets, list):
            raise DecodeError(f"Round {round_no} bets is not a list")
        return cls(
            round=round_no,
            timestamp=timestamp,
            bets=tuple(Bet.from_dict(b) for b in bets),
        )


def parse_history(payload: Any) -> list[BetHistoryItem]:
    """Decode the History API response body (a JSON array) into items, in API order."""
    if not isinstance(payload, list):
        raise DecodeError(f"History payload must be a list, got {type(payload).__name__}")
    return [BetHistoryItem.from_dict(item) for item in payload]


# ═══════════════════════════════════════════════════════════════
#  Aggregates & identities
# ═══════════════════════════════════════════════════════════════


@dataclass
class PlayerStats:
    """Per-player counters. Invariant: wins + losses == total_bets."""

    total_bets: int = 0
    wins: int = 0
    losses: int = 0
    total_spent: Number = 0

    def record(self, bet: Bet) -> None:
        self.total_bets += 1
        self.total_spent += bet.amount
        if bet.is_win:
            self.wins += 1
        else:
            self.losses += 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalBets": self.total_bets,
            "wins": self.wins,
            "losses": self.losses,
            "totalSpent": self.total_spent,
        }


@dataclass(frozen=True)
class EnsIdentity:
    """Resolved ENS name and avatar for an address. Either may be missing."""

    display_name: str | None = None
    avatar: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> EnsIdentity:
        if not isinstance(data, dict):
            raise DecodeError(f"ENS response must be an object, got {type(data).__name__}")
        display_name = data.get("displayName")
        avatar = data.get("avatar")
        return cls(
            display_name=display_name if isinstance(display_name, str) and display_name else None,
            avatar=avatar if isinstance(avatar, str) and avatar else None,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
