"""FastAPI dependency injection helpers.

Usage in a route::

    @router.get("/tx/{txid}")
    async def get_transaction(
        txid: str,
        engine: Annotated[ExplorerEngine, Depends(get_engine)],
    ) -> ...:
        ...
"""

from __future__ import annotations

from fastapi import Request

from insight_api.engine.client import ExplorerEngine  # noqa: TC001
from insight_api.errors.definitions import ErrChainUnavailable


def get_engine(request: Request) -> ExplorerEngine:
    """Retrieve the engine from ``app.state``.

    The engine is stored on ``app.state.engine`` during lifespan startup.

    Raises:
        InsightError: ``ErrChainUnavailable`` if the engine is not initialized.
    """
    engine: ExplorerEngine | None = getattr(request.app.state, "engine", None)
    if engine is None:
        raise ErrChainUnavailable
    return engine
