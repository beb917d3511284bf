"""CLI entry point for oracle-dashboard."""
import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path

from .config import DashboardConfig, load_config
from .main import DashboardApp
from .web_server import DashboardWebServer


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Oracle Dashboard — bet history, ENS identities and player stats")
    parser.add_argument("--config", type=str, help="Path to config.yaml")
    parser.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--validate-config", action="store_true", help="Validate config and exit without starting")
    parser.add_argument("--snapshot", type=str, metavar="PATH", help="Run one refresh, write the page to PATH and exit")
    return parser.parse_args(argv)


def resolve_config_path(config_path: str | None) -> str | None:
    """Explicit path, else the first standard location that exists."""
    if config_path:
        return config_path
    for candidate in [
        "/etc/oracle-dashboard/config.yaml",
        "./config.yaml",
    ]:
        if Path(candidate).exists():
            return candidate
    return None


async def run_snapshot(app: DashboardApp, output: str) -> None:
    await app.start()
    try:
        page = await app.render_snapshot()
    finally:
        await app.stop()
    Path(output).write_text(page, encoding="utf-8")
    app.logger.info("Wrote snapshot to %s (state: %s)", output, app.state.value)


async def run_server(app: DashboardApp) -> None:
    server = DashboardWebServer(app, host=app.config.server.host, port=app.config.server.port)
    stop_event = asyncio.Event()

    # Signal handling (Unix only; Windows uses KeyboardInterrupt)
    loop = asyncio.get_running_loop()
    if sys.platform != "win32":
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, stop_event.set)

    await app.start()
    try:
        await server.start()
        await stop_event.wait()
    finally:
        await server.stop()
        await app.stop()


async def main_async(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.log_level)
    logger = logging.getLogger("dashboard")

    config_path = resolve_config_path(args.config)
    try:
        if config_path:
            config = load_config(config_path)
            logger.info("Config loaded from %s", config_path)
        else:
            config = DashboardConfig()
            logger.info("No config file found, using defaults.")
    except Exception as e:
        logger.error("Config validation failed: %s", e)
        sys.exit(1)

    if args.validate_config:
        logger.info("Config is valid.")
        return

    app = DashboardApp(config, logger)
    if args.snapshot:
        await run_snapshot(app, args.snapshot)
        return

    try:
        await run_server(app)
    except KeyboardInterrupt:
        pass


def main() -> None:
    """Sync entry point for pyproject.toml [project.scripts]."""
    asyncio.run(main_async())


if __name__ == "__main__":
    main()
