"""Shared test fixtures for oracle-dashboard."""

from __future__ import annotations

import logging
from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from oracle_dashboard.config import DashboardConfig
from oracle_dashboard.ens_resolver import EnsResolver, IdentityCache
from oracle_dashboard.history_client import HistoryClient
from oracle_dashboard.main import DashboardApp
from oracle_dashboard.models import BetHistoryItem, parse_history
from oracle_dashboard.stats_aggregator import StatsAggregator

ALICE = "0xA11CE00000000000000000000000000000000001"
BOB = "0xB0B0000000000000000000000000000000000002"
CAROL = "0xCA50100000000000000000000000000000000003"


# ── Minimal config dict matching DashboardConfig schema ──────

def make_config_dict(**overrides) -> dict:
    """Build a valid config dict with sensible test defaults."""
    base = {
        "history_api": {"url": "https://oracle.test/api/history", "timeout_seconds": 5},
        "ens": {
            "base_url": "https://ens.test/ens/resolve",
            "timeout_seconds": 5,
            "max_concurrency": 4,
            "cache_failures": False,
        },
        "aggregation": {"bet_policy": "first"},
        "display": {
            "title": "Test Oracle",
            "roster_title": "Recent Players",
            "placeholder_avatar": "https://placeholder.test/{size}",
            "timestamp_format": "%Y-%m-%d %H:%M:%S",
        },
        "server": {"host": "127.0.0.1", "port": 18080},
        "metrics": {"enabled": True},
    }
    base.update(overrides)
    return base


# ── Raw History API payload builders ─────────────────────────

def make_bet(
    player: str = ALICE,
    amount: int | float = 10,
    win_amount: int | float = 0,
    spin_result: str = "red",
) -> dict:
    return {"player": player, "amount": amount, "winAmount": win_amount, "spinResult": spin_result}


def make_round(round_no: int, *bets: dict, timestamp: int | None = None) -> dict:
    return {
        "round": round_no,
        "timestamp": timestamp if timestamp is not None else 1_700_000_000_000 + round_no * 60_000,
        "bets": list(bets),
    }


# ── Mocked aiohttp responses ─────────────────────────────────

def make_response(
    json_data: Any = None,
    status: int = 200,
    json_exc: Exception | None = None,
    raise_exc: Exception | None = None,
) -> AsyncMock:
    """An async-context-manager response like ``session.get(...)`` returns."""
    resp = AsyncMock()
    resp.status = status
    resp.raise_for_status = MagicMock(side_effect=raise_exc)
    if json_exc is not None:
        resp.json = AsyncMock(side_effect=json_exc)
    else:
        resp.json = AsyncMock(return_value=json_data)
    resp.__aenter__ = AsyncMock(return_value=resp)
    resp.__aexit__ = AsyncMock(return_value=False)
    return resp


def make_session(*responses: AsyncMock, side_effect: Any = None) -> MagicMock:
    """Session whose get() returns the given responses in order (or raises)."""
    session = MagicMock()
    if side_effect is not None:
        session.get = MagicMock(side_effect=side_effect)
    elif len(responses) == 1:
        session.get = MagicMock(return_value=responses[0])
    else:
        session.get = MagicMock(side_effect=list(responses))
    return session


# ── Fixtures ─────────────────────────────────────────────────

@pytest.fixture
def sample_config_dict() -> dict:
    return make_config_dict()


@pytest.fixture
def sample_config(sample_config_dict: dict) -> DashboardConfig:
    return DashboardConfig(**sample_config_dict)


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("test.dashboard")


@pytest.fixture
def bet_factory() -> Callable[..., dict]:
    return make_bet


@pytest.fixture
def round_factory() -> Callable[..., dict]:
    return make_round


@pytest.fixture
def response_factory() -> Callable[..., AsyncMock]:
    return make_response


@pytest.fixture
def session_factory() -> Callable[..., MagicMock]:
    return make_session


@pytest.fixture
def history_payload() -> list[dict]:
    """Four rounds: Alice wins twice and loses once, Bob loses once."""
    return [
        make_round(1, make_bet(ALICE, 10, 20, "red")),
        make_round(2, make_bet(BOB, 5, 0, "black")),
        make_round(3, make_bet(ALICE, 5, 0, "black")),
        make_round(4, make_bet(ALICE, 7.5, 15, "red")),
    ]


@pytest.fixture
def sample_history(history_payload: list[dict]) -> list[BetHistoryItem]:
    return parse_history(history_payload)


@pytest.fixture
def identity_cache() -> IdentityCache:
    return IdentityCache()


@pytest.fixture
def ens_resolver(sample_config: DashboardConfig, logger: logging.Logger, identity_cache: IdentityCache) -> EnsResolver:
    return EnsResolver(sample_config.ens, logger, cache=identity_cache)


@pytest.fixture
def history_client(sample_config: DashboardConfig, logger: logging.Logger) -> HistoryClient:
    return HistoryClient(sample_config.history_api, logger)


@pytest.fixture
def aggregator(logger: logging.Logger) -> StatsAggregator:
    return StatsAggregator(logger)


@pytest.fixture
def dashboard_app(
    sample_config: DashboardConfig,
    logger: logging.Logger,
    history_client: HistoryClient,
    ens_resolver: EnsResolver,
    aggregator: StatsAggregator,
) -> DashboardApp:
    """App with real components; tests mock ``_session`` on the clients."""
    return DashboardApp(
        sample_config,
        logger,
        history_client=history_client,
        ens_resolver=ens_resolver,
        aggregator=aggregator,
    )
