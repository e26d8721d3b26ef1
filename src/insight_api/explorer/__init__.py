"""Explorer: transformation of chain records into API views, and listings.

Provides:
- ``transform_transaction`` / ``transform_input`` / ``transform_output``
- ``summarize_inv_transaction``: compact summary of relayed transactions
- ``ListingService``: paginated listings by block or address
- ``TransactionService``: lookups and submission
"""

from __future__ import annotations

from insight_api.explorer.inv import summarize_inv_transaction
from insight_api.explorer.listing import ListingService
from insight_api.explorer.service import TransactionService
from insight_api.explorer.transform import (
    DEFAULT_OPTIONS,
    TransformOptions,
    transform_input,
    transform_output,
    transform_transaction,
)

__all__ = [
    "DEFAULT_OPTIONS",
    "ListingService",
    "TransactionService",
    "TransformOptions",
    "summarize_inv_transaction",
    "transform_input",
    "transform_output",
    "transform_transaction",
]
