"""Exception hierarchy for breaker."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from breaker.tripper import TripResult


class BreakerError(Exception):
    """Base exception for all breaker errors."""


class CircuitTrippedError(BreakerError):
    """The breaker is open; no request was attempted."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Circuit: {name} is tripped")
        self.name = name


class UpstreamError(BreakerError):
    """The wrapped call failed or timed out. The fault is already recorded."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
        response: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.response = response

    @classmethod
    def from_result(cls, result: "TripResult") -> "UpstreamError":
        from breaker.tripper import TripOutcome

        if result.outcome is TripOutcome.TIMEOUT or result.status_code is None:
            message = result.body
        else:
            message = f"{result.status_code}: {result.body}"
        return cls(message, status_code=result.status_code, body=result.body, response=result.response)


class StoreError(BreakerError):
    """The record store failed to read or write."""
