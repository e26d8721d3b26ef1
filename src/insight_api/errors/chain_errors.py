"""Errors raised by the upstream chain-data service."""

from __future__ import annotations

from insight_api.errors.insight_errors import InsightError

# Daemon error code for an unknown transaction / block / address.
RPC_NOT_FOUND = -5


class ChainDataError(InsightError):
    """Failure reported by (or while talking to) the chain-data service.

    Errors carrying an upstream RPC code are client-visible (400) with the
    code appended to the message; anything else is a service fault (503).
    """

    def __init__(self, message: str, *, rpc_code: int | None = None) -> None:
        if rpc_code is not None:
            super().__init__(
                f"{message}. Code:{rpc_code}",
                status_code=400,
                code="chain-error",
            )
        else:
            super().__init__(message, status_code=503, code="chain-unavailable")
        self.rpc_code = rpc_code

    @property
    def is_not_found(self) -> bool:
        """Whether the upstream reported an unknown id or hash."""
        return self.rpc_code == RPC_NOT_FOUND
