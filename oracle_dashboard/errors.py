"""Exception types for the dashboard's fetch paths.

Clients raise these; the resolver and orchestrator catch them and fall back
to empty views or a missing identity. The subclasses keep network, decode
and not-found failures apart so callers and tests can tell them apart.
"""

from __future__ import annotations

from typing import Any


class DashboardError(Exception):
    """Base class for all dashboard errors."""

    error_code = "dashboard_error"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


class FetchError(DashboardError):
    """Network failure or non-success HTTP status from an upstream API."""

    error_code = "fetch_error"

    def __init__(
        self,
        message: str,
        status: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.status = status
        super().__init__(message, details)


class NotFoundError(FetchError):
    """Upstream answered 404 for the requested resource."""

    error_code = "not_found"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, status=404, details=details)


class DecodeError(DashboardError):
    """Response body was not valid JSON or did not have the expected shape."""

    error_code = "decode_error"


class UnknownPlayerError(DashboardError):
    """Player detail requested for an address with no aggregated stats."""

    error_code = "unknown_player"

    def __init__(self, address: str) -> None:
        self.address = address
        super().__init__(f"No stats for player {address}", {"address": address})
