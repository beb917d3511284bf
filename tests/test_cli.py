"""Tests for the oracle-dashboard command line entry point."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from oracle_dashboard.__main__ import main_async, parse_args, resolve_config_path, run_snapshot
from oracle_dashboard.main import DashboardApp

from conftest import make_response, make_session


class TestParseArgs:

    def test_defaults(self):
        args = parse_args([])
        assert args.config is None
        assert args.log_level == "INFO"
        assert args.validate_config is False
        assert args.snapshot is None

    def test_all_flags(self):
        args = parse_args(["--config", "c.yaml", "--log-level", "DEBUG", "--validate-config", "--snapshot", "out.html"])
        assert args.config == "c.yaml"
        assert args.log_level == "DEBUG"
        assert args.validate_config is True
        assert args.snapshot == "out.html"

    def test_invalid_log_level(self):
        with pytest.raises(SystemExit):
            parse_args(["--log-level", "LOUD"])


def test_explicit_config_path_wins():
    assert resolve_config_path("/tmp/explicit.yaml") == "/tmp/explicit.yaml"


@pytest.mark.asyncio
async def test_validate_config_ok(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text("aggregation:\n  bet_policy: all\n", encoding="utf-8")
    await main_async(["--config", str(path), "--validate-config"])


@pytest.mark.asyncio
async def test_validate_config_invalid_exits(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text("aggregation:\n  bet_policy: sometimes\n", encoding="utf-8")
    with pytest.raises(SystemExit) as exc_info:
        await main_async(["--config", str(path), "--validate-config"])
    assert exc_info.value.code == 1


@pytest.mark.asyncio
async def test_missing_config_exits(tmp_path: Path):
    with pytest.raises(SystemExit):
        await main_async(["--config", str(tmp_path / "missing.yaml"), "--validate-config"])


@pytest.mark.asyncio
async def test_run_snapshot_writes_page(tmp_path: Path, sample_config, history_payload):
    app = DashboardApp(sample_config)
    app.start = AsyncMock()
    app.stop = AsyncMock()
    app.history_client._session = make_session(make_response(history_payload))
    app.ens_resolver._session = make_session(side_effect=lambda *a, **kw: make_response(status=404))

    output = tmp_path / "snapshot.html"
    await run_snapshot(app, str(output))

    page = output.read_text(encoding="utf-8")
    assert 'id="profiles-container"' in page
    assert "Round #1" in page
    app.start.assert_awaited_once()
    app.stop.assert_awaited_once()
