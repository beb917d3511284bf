"""ENS resolver — address → identity lookups with a session-lifetime cache.

The cache is an ``IdentityCache`` object owned by whoever builds the
resolver, so tests and separate dashboards never share entries. Failed
lookups are logged and come back as ``None``; whether they are remembered
is controlled by ``EnsConfig.cache_failures``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Iterable

import aiohttp

from .errors import DashboardError, DecodeError, FetchError, NotFoundError
from .models import EnsIdentity

if TYPE_CHECKING:
    from .config import EnsConfig


# ═══════════════════════════════════════════════════════════════
#  Cache
# ═══════════════════════════════════════════════════════════════


class IdentityCache:
    """Address → identity map. Grows for the life of the process, never evicts.

    A stored ``None`` is a remembered miss (only written when failures are
    cached).
    """

    def __init__(self) -> None:
        self._entries: dict[str, EnsIdentity | None] = {}

    @staticmethod
    def key(address: str) -> str:
        return address.lower()

    def __contains__(self, address: object) -> bool:
        return isinstance(address, str) and self.key(address) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, address: str) -> EnsIdentity | None:
        return self._entries.get(self.key(address))

    def put(self, address: str, identity: EnsIdentity | None) -> None:
        self._entries[self.key(address)] = identity


# ═══════════════════════════════════════════════════════════════
#  Resolver
# ═══════════════════════════════════════════════════════════════


class EnsResolver:
    """Async client for the ENS resolve API with memoization."""

    def __init__(
        self,
        config: EnsConfig,
        logger: logging.Logger | None = None,
        cache: IdentityCache | None = None,
    ) -> None:
        self._config = config
        self._logger = logger or logging.getLogger("dashboard.ens")
        self._cache = cache if cache is not None else IdentityCache()
        self._session: aiohttp.ClientSession | None = None
        self._inflight: dict[str, asyncio.Future] = {}

        # Counters (for metrics)
        self.lookups_total: int = 0
        self.cache_hits_total: int = 0
        self.failures_total: int = 0

    @property
    def cache(self) -> IdentityCache:
        return self._cache

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

    def url_for(self, address: str) -> str:
        return f"{self._config.base_url.rstrip('/')}/{address}"

    async def lookup(self, address: str) -> EnsIdentity:
        """Uncached network lookup. Raises FetchError, NotFoundError or DecodeError."""
        if not self._session:
            raise FetchError("ENS resolver not started")

        url = self.url_for(address)
        self.lookups_total += 1
        try:
            async with self._session.get(url) as resp:
                if resp.status == 404:
                    raise NotFoundError(f"No ENS record for {address}", {"address": address})
                resp.raise_for_status()
                try:
                    data = await resp.json(content_type=None)
                except ValueError as e:
                    raise DecodeError(f"ENS response is not valid JSON: {e}", {"address": address}) from e
        except aiohttp.ClientResponseError as e:
            raise FetchError(f"ENS API returned HTTP {e.status}", status=e.status, details={"address": address}) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise FetchError(f"ENS request failed: {e!r}", details={"address": address}) from e

        return EnsIdentity.from_dict(data)

    async def resolve(self, address: str) -> EnsIdentity | None:
        """Cached lookup. Returns None (and logs) on any lookup failure."""
        if address in self._cache:
            self.cache_hits_total += 1
            return self._cache.get(address)

        # Concurrent callers for the same address share one lookup
        key = IdentityCache.key(address)
        pending = self._inflight.get(key)
        if pending is None:
            pending = asyncio.ensure_future(self._resolve_uncached(address))
            self._inflight[key] = pending
        return await asyncio.shield(pending)

    async def resolve_many(self, addresses: Iterable[str]) -> dict[str, EnsIdentity | None]:
        """Resolve a batch with bounded concurrency.

        Duplicates are resolved once; the result preserves first-seen order
        regardless of which lookup finishes first.
        """
        unique = list(dict.fromkeys(addresses))
        sem = asyncio.Semaphore(self._config.max_concurrency)

        async def _one(address: str) -> EnsIdentity | None:
            async with sem:
                return await self.resolve(address)

        results = await asyncio.gather(*[_one(a) for a in unique])
        return dict(zip(unique, results))

    async def _resolve_uncached(self, address: str) -> EnsIdentity | None:
        # Off the in-flight map before the future completes
        try:
            identity = await self.lookup(address)
        except DashboardError as e:
            self.failures_total += 1
            self._logger.error("Error fetching ENS data for %s (%s): %s", address, e.error_code, e)
            if self._config.cache_failures:
                self._cache.put(address, None)
            return None
        finally:
            self._inflight.pop(IdentityCache.key(address), None)
        self._cache.put(address, identity)
        return identity
