"""Explorer view models: the consumer-facing JSON shapes.

Sparse fields are modelled as explicit optionals. Views are serialised with
``exclude_unset`` so a field appears only when the transformer set it;
fields documented as always present (``doubleSpentTxID``, the ``spent*``
trio) are set explicitly, even to None.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _View(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_json(self) -> dict[str, Any]:
        """Serialise with JSON aliases, omitting fields that were never set."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


# ---------------------------------------------------------------------------
# Scripts
# ---------------------------------------------------------------------------


class ScriptSigView(_View):
    hex: str
    asm: str | None = None


class ScriptPubKeyView(_View):
    hex: str
    asm: str | None = None
    addresses: list[str] | None = None
    type: str | None = None


# ---------------------------------------------------------------------------
# Inputs / outputs
# ---------------------------------------------------------------------------


class CoinbaseInputView(_View):
    """The single synthetic vin entry of a coinbase transaction."""

    coinbase: str
    sequence: int
    n: int = 0


class InputView(_View):
    txid: str
    vout: int
    sequence: int
    n: int
    script_sig: ScriptSigView | None = Field(default=None, alias="scriptSig")
    addr: str | None = None
    value_sat: int | None = Field(default=None, alias="valueSat")
    value: float | None = None
    # Not computed; kept in the shape for API compatibility.
    double_spent_tx_id: str | None = Field(default=None, alias="doubleSpentTxID")


class OutputView(_View):
    value: str  # whole coins, 8 decimal places
    n: int
    script_pub_key: ScriptPubKeyView = Field(alias="scriptPubKey")
    spent_tx_id: str | None = Field(default=None, alias="spentTxId")
    spent_index: int | None = Field(default=None, alias="spentIndex")
    spent_height: int | None = Field(default=None, alias="spentHeight")


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


class TransactionView(_View):
    """Full transaction as served by ``/tx/<txid>`` and listings."""

    txid: str
    version: int
    type: int | None = None
    locktime: int
    extra_payload_size: int | None = Field(default=None, alias="extraPayloadSize")
    extra_payload: str | None = Field(default=None, alias="extraPayload")
    vin: list[CoinbaseInputView | InputView]
    vout: list[OutputView]
    blockhash: str | None = None
    blockheight: int
    confirmations: int
    time: int
    blocktime: int | None = None
    is_coin_base: bool | None = Field(default=None, alias="isCoinBase")
    value_out: float = Field(alias="valueOut")
    size: int
    value_in: float | None = Field(default=None, alias="valueIn")
    fees: float | None = None
    txlock: bool | None = None
    pro_reg_tx: dict[str, Any] | None = Field(default=None, alias="proRegTx")
    pro_up_serv_tx: dict[str, Any] | None = Field(default=None, alias="proUpServTx")
    pro_up_reg_tx: dict[str, Any] | None = Field(default=None, alias="proUpRegTx")
    pro_up_rev_tx: dict[str, Any] | None = Field(default=None, alias="proUpRevTx")
    cb_tx: dict[str, Any] | None = Field(default=None, alias="cbTx")
    qc_tx: dict[str, Any] | None = Field(default=None, alias="qcTx")
    mnhf_tx: dict[str, Any] | None = Field(default=None, alias="mnhfTx")


class InvView(_View):
    """Compact notification payload for a relayed, unconfirmed transaction."""

    txid: str
    value_out: float = Field(alias="valueOut")
    vout: list[dict[str, int]]
    is_rbf: bool = Field(alias="isRBF")
    txlock: bool


# ---------------------------------------------------------------------------
# Endpoint payloads
# ---------------------------------------------------------------------------


class ListingView(_View):
    pages_total: int = Field(alias="pagesTotal")
    txs: list[TransactionView]


class RawTxView(_View):
    rawtx: str


class SendResultView(_View):
    txid: str
