"""Raw chain records → explorer views.

Pure functions: they perform no I/O and let structural errors in the raw
records (missing inputs, malformed totals) propagate to the caller.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from insight_api.explorer.views import (
    CoinbaseInputView,
    InputView,
    OutputView,
    ScriptPubKeyView,
    ScriptSigView,
    TransactionView,
)

if TYPE_CHECKING:
    from insight_api.chain.models import RawInput, RawOutput, RawTransaction

logger = logging.getLogger(__name__)

SATOSHIS_PER_COIN = 100_000_000


class AddressTypeResolver(Protocol):
    def resolve_type(self, address: str) -> str | None: ...


@dataclass(frozen=True)
class TransformOptions:
    """Fields to leave out of transformed transactions."""

    no_asm: bool = False
    no_script_sig: bool = False
    no_spent: bool = False


DEFAULT_OPTIONS = TransformOptions()


# ---------------------------------------------------------------------------
# Amounts
# ---------------------------------------------------------------------------


def to_coins(satoshis: int) -> float:
    """Convert duffs to whole coins."""
    return satoshis / SATOSHIS_PER_COIN


def format_coins(satoshis: int) -> str:
    """Format duffs as whole coins with exactly 8 decimal places."""
    sign = "-" if satoshis < 0 else ""
    whole, frac = divmod(abs(satoshis), SATOSHIS_PER_COIN)
    return f"{sign}{whole}.{frac:08d}"


# ---------------------------------------------------------------------------
# Outputs / inputs
# ---------------------------------------------------------------------------


def _resolve_type(resolver: AddressTypeResolver, address: str) -> str | None:
    try:
        return resolver.resolve_type(address)
    except ValueError:
        logger.debug("Address type lookup failed for %s", address)
        return None


def transform_output(
    output: RawOutput,
    index: int,
    resolver: AddressTypeResolver,
    options: TransformOptions = DEFAULT_OPTIONS,
) -> OutputView:
    """Build the view of the output at position *index*."""
    script: dict[str, Any] = {"hex": output.script}
    if not options.no_asm and output.script_asm is not None:
        script["asm"] = output.script_asm
    if output.address:
        address_type = _resolve_type(resolver, output.address)
        if address_type is not None:
            script["addresses"] = [output.address]
            script["type"] = address_type

    fields: dict[str, Any] = {
        "value": format_coins(output.satoshis),
        "n": index,
        "script_pub_key": ScriptPubKeyView(**script),
    }
    if not options.no_spent:
        # spentIndex 0 is a real index; only a missing one becomes null
        fields["spent_tx_id"] = output.spent_tx_id or None
        fields["spent_index"] = output.spent_index
        fields["spent_height"] = output.spent_height or None
    return OutputView(**fields)


def transform_input(
    input_: RawInput,
    index: int,
    options: TransformOptions = DEFAULT_OPTIONS,
) -> InputView:
    """Build the view of the input at position *index*.

    Input scripts were validated upstream and are not checked here.
    """
    fields: dict[str, Any] = {
        "txid": input_.prev_tx_id,
        "vout": input_.output_index,
        "sequence": input_.sequence,
        "n": index,
    }
    if not options.no_script_sig:
        script_sig: dict[str, Any] = {"hex": input_.script}
        if not options.no_asm and input_.script_asm is not None:
            script_sig["asm"] = input_.script_asm
        fields["script_sig"] = ScriptSigView(**script_sig)

    fields["addr"] = input_.address
    fields["value_sat"] = input_.satoshis
    fields["value"] = None if input_.satoshis is None else to_coins(input_.satoshis)
    fields["double_spent_tx_id"] = None
    return InputView(**fields)


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------

_SPECIAL_PAYLOADS = (
    "pro_reg_tx",
    "pro_up_serv_tx",
    "pro_up_reg_tx",
    "pro_up_rev_tx",
    "cb_tx",
    "qc_tx",
    "mnhf_tx",
)


def confirmations_at(height: int, current_height: int) -> int:
    """Number of confirmations of a transaction mined at *height*."""
    if height >= 0:
        return current_height - height + 1
    return 0


def transform_transaction(
    tx: RawTransaction,
    current_height: int,
    resolver: AddressTypeResolver,
    options: TransformOptions = DEFAULT_OPTIONS,
    *,
    now: int | None = None,
) -> TransactionView:
    """Build the full view of a detailed transaction.

    Args:
        tx: Detailed transaction from the chain-data service.
        current_height: Height of the chain tip, for confirmations.
        resolver: Address type lookup for output scripts.
        options: Fields to leave out.
        now: Unix time used for unconfirmed transactions; defaults to the
            current wall-clock time.
    """
    confirmations = confirmations_at(tx.height, current_height)

    fields: dict[str, Any] = {"txid": tx.hash, "version": tx.version}
    if tx.type:
        fields["type"] = tx.type
    fields["locktime"] = tx.locktime
    if tx.extra_payload_size:
        fields["extra_payload_size"] = tx.extra_payload_size
    if tx.extra_payload:
        fields["extra_payload"] = tx.extra_payload

    if tx.coinbase:
        first = tx.inputs[0]
        fields["vin"] = [CoinbaseInputView(coinbase=first.script, sequence=first.sequence, n=0)]
    else:
        fields["vin"] = [transform_input(inp, i, options) for i, inp in enumerate(tx.inputs)]

    fields["vout"] = [
        transform_output(out, i, resolver, options) for i, out in enumerate(tx.outputs)
    ]

    if tx.block_hash is not None:
        fields["blockhash"] = tx.block_hash
    fields["blockheight"] = tx.height
    fields["confirmations"] = confirmations
    if tx.block_timestamp:
        fields["time"] = tx.block_timestamp
    else:
        fields["time"] = round(time.time()) if now is None else now
    if confirmations:
        fields["blocktime"] = fields["time"]

    if tx.coinbase:
        fields["is_coin_base"] = True

    fields["value_out"] = to_coins(tx.output_satoshis)
    fields["size"] = len(tx.hex) // 2
    if not tx.coinbase:
        fields["value_in"] = to_coins(tx.input_satoshis)
        fields["fees"] = to_coins(tx.fee_satoshis)

    if tx.txlock is not None:
        fields["txlock"] = tx.txlock

    for name in _SPECIAL_PAYLOADS:
        payload = getattr(tx, name)
        if payload is not None:
            fields[name] = payload

    logger.debug("Transformed transaction %s (%d confirmations)", tx.hash, confirmations)
    return TransactionView(**fields)
