"""Pre-defined explorer errors."""

from __future__ import annotations

from insight_api.errors.insight_errors import InsightError

# -- Validation ------------------------------------------------------------

ErrBlockHashOrAddressExpected = InsightError(
    "Block hash or address expected",
    status_code=400,
    code="block-hash-or-address-expected",
)
ErrMissingRawTx = InsightError(
    "Missing parameter (expected 'rawtx' a string)",
    status_code=400,
    code="missing-rawtx",
)

# -- Not Found -------------------------------------------------------------

ErrNotFound = InsightError("Not found", status_code=404, code="not-found")

# -- Service ---------------------------------------------------------------

ErrChainUnavailable = InsightError(
    "chain data source not initialized", status_code=503, code="chain-unavailable"
)
