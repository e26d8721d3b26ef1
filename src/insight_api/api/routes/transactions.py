"""Transaction endpoints: lookup, raw hex, listings and submission."""

from __future__ import annotations

import re
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query

from insight_api.api.dependencies import get_engine
from insight_api.api.schemas import SendTransactionRequest  # noqa: TC001
from insight_api.engine.client import ExplorerEngine  # noqa: TC001
from insight_api.errors.definitions import ErrNotFound
from insight_api.explorer.transform import TransformOptions

router = APIRouter(tags=["transaction"])

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def parse_page_number(value: str | None) -> int:
    """Read a page number the lenient way browsers send it.

    Leading digits are used (``"2abc"`` is 2, ``"1.9"`` is 1); anything
    without them, or a missing value, is page 0.
    """
    if value is None:
        return 0
    match = _LEADING_INT.match(value)
    if match is None:
        return 0
    return int(match.group(1))


def _transform_options(
    no_asm: Annotated[bool, Query(alias="noAsm")] = False,
    no_script_sig: Annotated[bool, Query(alias="noScriptSig")] = False,
    no_spent: Annotated[bool, Query(alias="noSpent")] = False,
) -> TransformOptions:
    return TransformOptions(no_asm=no_asm, no_script_sig=no_script_sig, no_spent=no_spent)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.get("/tx/{txid}")
async def get_transaction(
    txid: str,
    engine: Annotated[ExplorerEngine, Depends(get_engine)],
    options: Annotated[TransformOptions, Depends(_transform_options)],
) -> dict[str, Any]:
    """Get a transaction in explorer form."""
    view = await engine.transaction_service.get_transaction(txid, options)
    if view is None:
        raise ErrNotFound
    return view.to_json()


@router.get("/rawtx/{txid}")
async def get_raw_transaction(
    txid: str,
    engine: Annotated[ExplorerEngine, Depends(get_engine)],
) -> dict[str, Any]:
    """Get the serialized hex of a transaction."""
    view = await engine.transaction_service.get_raw_transaction(txid)
    if view is None:
        raise ErrNotFound
    return view.to_json()


@router.get("/txs")
async def list_transactions(
    engine: Annotated[ExplorerEngine, Depends(get_engine)],
    options: Annotated[TransformOptions, Depends(_transform_options)],
    block: str | None = None,
    address: str | None = None,
    page_num: Annotated[str | None, Query(alias="pageNum")] = None,
) -> dict[str, Any]:
    """List a page of transactions of a block or an address."""
    listing = await engine.listing_service.list(
        block_hash=block,
        address=address,
        page=parse_page_number(page_num),
        options=options,
    )
    if listing is None:
        raise ErrNotFound
    return listing.to_json()


@router.post("/tx/send")
async def send_transaction(
    engine: Annotated[ExplorerEngine, Depends(get_engine)],
    body: SendTransactionRequest | None = None,
) -> dict[str, Any]:
    """Relay a signed transaction."""
    result = await engine.transaction_service.send_transaction(body.rawtx if body else None)
    return result.to_json()


@router.post("/tx/sendix")
async def send_instant_transaction(
    engine: Annotated[ExplorerEngine, Depends(get_engine)],
    body: SendTransactionRequest | None = None,
) -> dict[str, Any]:
    """Relay a signed transaction with InstantSend."""
    result = await engine.transaction_service.send_transaction(
        body.rawtx if body else None,
        instant_send=True,
    )
    return result.to_json()
