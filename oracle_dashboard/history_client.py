"""History API client — async HTTP wrapper for the bet history endpoint.

Unlike the ENS resolver this client does not swallow errors: every failure
is raised as a typed ``DashboardError`` and the orchestrator decides what
to log. All tests mock the HTTP layer and never call the real API.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import aiohttp

from .errors import DecodeError, FetchError, NotFoundError
from .models import BetHistoryItem, parse_history

if TYPE_CHECKING:
    from .config import HistoryApiConfig


class HistoryClient:
    """Async client for the game's bet history API."""

    def __init__(self, config: HistoryApiConfig, logger: logging.Logger | None = None) -> None:
        self._config = config
        self._logger = logger or logging.getLogger("dashboard.history")
        self._session: aiohttp.ClientSession | None = None

    async def start(self) -> None:
        """Create the HTTP session."""
        self._session = aiohttp.ClientSession(
            headers={"Accept": "application/json"},
            timeout=aiohttp.ClientTimeout(total=self._config.timeout_seconds),
        )

    async def stop(self) -> None:
        """Close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    async def fetch_history(self) -> list[BetHistoryItem]:
        """Fetch and decode the full bet history, in API order.

        Raises FetchError (network, HTTP status), NotFoundError (404) or
        DecodeError (bad JSON, unexpected shape).
        """
        if not self._session:
            raise FetchError("History client not started")

        url = self._config.url
        self._logger.debug("Fetching history from %s", url)
        try:
            async with self._session.get(url) as resp:
                if resp.status == 404:
                    raise NotFoundError(f"History endpoint not found: {url}", {"url": url})
                resp.raise_for_status()
                try:
                    payload = await resp.json(content_type=None)
                except ValueError as e:
                    raise DecodeError(f"History response is not valid JSON: {e}", {"url": url}) from e
        except aiohttp.ClientResponseError as e:
            raise FetchError(f"History API returned HTTP {e.status}", status=e.status, details={"url": url}) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise FetchError(f"History request failed: {e!r}", details={"url": url}) from e

        history = parse_history(payload)
        self._logger.debug("Fetched %d history items", len(history))
        return history
