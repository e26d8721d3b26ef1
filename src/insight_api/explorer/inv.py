"""Compact summaries of relayed transactions for inv notifications."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from insight_api.dash.transaction import MAX_SEQUENCE
from insight_api.explorer.transform import to_coins
from insight_api.explorer.views import InvView

if TYPE_CHECKING:
    from insight_api.dash.transaction import Transaction

# Inputs with a sequence below this opt in to replace-by-fee
RBF_THRESHOLD = MAX_SEQUENCE - 1


class ScriptAddressResolver(Protocol):
    def script_to_address(self, script: bytes) -> str | None: ...


def signals_rbf(tx: Transaction) -> bool:
    """Whether any input signals replace-by-fee."""
    return any(inp.sequence < RBF_THRESHOLD for inp in tx.inputs)


def summarize_inv_transaction(
    tx: Transaction,
    resolver: ScriptAddressResolver,
    *,
    is_locked: bool = False,
) -> InvView:
    """Summarize a not-yet-confirmed transaction.

    Outputs whose script does not pay to an address count towards
    ``valueOut`` but are left out of ``vout``.
    """
    value_out = 0
    vout: list[dict[str, int]] = []
    for output in tx.outputs:
        value_out += output.value
        if not output.script_pubkey:
            continue
        address = resolver.script_to_address(output.script_pubkey)
        if address:
            vout.append({address: output.value})

    return InvView(
        txid=tx.txid(),
        value_out=to_coins(value_out),
        vout=vout,
        is_rbf=signals_rbf(tx),
        txlock=is_locked,
    )
