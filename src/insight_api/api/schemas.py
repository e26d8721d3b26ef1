"""API request schemas.

Response bodies are the explorer views in :mod:`insight_api.explorer.views`.
"""

from __future__ import annotations

from pydantic import BaseModel


class SendTransactionRequest(BaseModel):
    """Body of ``/tx/send`` and ``/tx/sendix``."""

    rawtx: str | None = None
