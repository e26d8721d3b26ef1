"""Chain-data models: raw transactions, block overviews, address history.

Data classes representing the decoded records supplied by the chain-data
service. ``from_dict`` reads the service's camelCase JSON; a missing
required key raises ``KeyError`` rather than being defaulted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# ---------------------------------------------------------------------------
# Inputs / outputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RawInput:
    """A decoded transaction input with its resolved previous output."""

    prev_tx_id: str
    output_index: int
    sequence: int
    script: str  # hex
    script_asm: str | None = None
    address: str | None = None
    satoshis: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RawInput:
        return cls(
            prev_tx_id=data["prevTxId"],
            output_index=data["outputIndex"],
            sequence=data["sequence"],
            script=data["script"],
            script_asm=data.get("scriptAsm"),
            address=data.get("address"),
            satoshis=data.get("satoshis"),
        )


@dataclass(frozen=True)
class RawOutput:
    """A decoded transaction output with its spending status."""

    satoshis: int
    script: str  # hex
    script_asm: str | None = None
    address: str | None = None
    spent_tx_id: str | None = None
    spent_index: int | None = None
    spent_height: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RawOutput:
        return cls(
            satoshis=data["satoshis"],
            script=data["script"],
            script_asm=data.get("scriptAsm"),
            address=data.get("address"),
            spent_tx_id=data.get("spentTxId"),
            spent_index=data.get("spentIndex"),
            spent_height=data.get("spentHeight"),
        )


# ---------------------------------------------------------------------------
# Transaction
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RawTransaction:
    """A detailed transaction as returned by the chain-data service.

    Attributes:
        hash: Transaction id (hex).
        height: Block height, or -1 while unconfirmed.
        hex: Serialized transaction (hex).
        input_satoshis / output_satoshis / fee_satoshis: Totals in duffs;
            input and fee totals are None for coinbase transactions.
        txlock: InstantSend / ChainLock relay flag, passed through verbatim.
        pro_reg_tx ... mnhf_tx: Opaque DIP2 special-transaction payloads.
    """

    hash: str
    version: int
    locktime: int
    inputs: list[RawInput]
    outputs: list[RawOutput]
    hex: str
    output_satoshis: int
    height: int = -1
    block_hash: str | None = None
    block_timestamp: int | None = None
    input_satoshis: int | None = None
    fee_satoshis: int | None = None
    coinbase: bool = False
    type: int | None = None
    extra_payload_size: int | None = None
    extra_payload: str | None = None
    txlock: bool | None = None
    pro_reg_tx: dict[str, Any] | None = None
    pro_up_serv_tx: dict[str, Any] | None = None
    pro_up_reg_tx: dict[str, Any] | None = None
    pro_up_rev_tx: dict[str, Any] | None = None
    cb_tx: dict[str, Any] | None = None
    qc_tx: dict[str, Any] | None = None
    mnhf_tx: dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RawTransaction:
        """Create a RawTransaction from the chain-data service JSON."""
        coinbase = bool(data.get("coinbase", False))
        height = data.get("height")
        return cls(
            hash=data["hash"],
            version=data["version"],
            locktime=data["locktime"],
            inputs=[RawInput.from_dict(item) for item in data["inputs"]],
            outputs=[RawOutput.from_dict(item) for item in data["outputs"]],
            hex=data["hex"],
            output_satoshis=data["outputSatoshis"],
            height=-1 if height is None else height,
            block_hash=data.get("blockHash"),
            block_timestamp=data.get("blockTimestamp"),
            # Coinbase transactions spend nothing, so only they may omit these.
            input_satoshis=None if coinbase else data["inputSatoshis"],
            fee_satoshis=None if coinbase else data["feeSatoshis"],
            coinbase=coinbase,
            type=data.get("type"),
            extra_payload_size=data.get("extraPayloadSize"),
            extra_payload=data.get("extraPayload"),
            txlock=data.get("txlock"),
            pro_reg_tx=data.get("proRegTx"),
            pro_up_serv_tx=data.get("proUpServTx"),
            pro_up_reg_tx=data.get("proUpRegTx"),
            pro_up_rev_tx=data.get("proUpRevTx"),
            cb_tx=data.get("cbTx"),
            qc_tx=data.get("qcTx"),
            mnhf_tx=data.get("mnhfTx"),
        )


# ---------------------------------------------------------------------------
# Blocks / address history
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BlockOverview:
    """Ordered txids of a block."""

    txids: list[str]
    hash: str = ""
    height: int = -1

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BlockOverview:
        return cls(
            txids=list(data["txids"]),
            hash=data.get("hash", ""),
            height=data.get("height", -1),
        )


@dataclass(frozen=True)
class AddressHistoryItem:
    """One history entry; carries the full transaction when the service has it."""

    txid: str
    tx: RawTransaction | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AddressHistoryItem:
        if data.get("tx") is not None:
            tx = RawTransaction.from_dict(data["tx"])
            return cls(txid=tx.hash, tx=tx)
        return cls(txid=data["txid"])


@dataclass(frozen=True)
class AddressHistory:
    """A page of address history plus the unpaged total."""

    items: list[AddressHistoryItem] = field(default_factory=list)
    total_count: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AddressHistory:
        return cls(
            items=[AddressHistoryItem.from_dict(item) for item in data["items"]],
            total_count=data["totalCount"],
        )


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SendOptions:
    """Relay options for transaction submission (InstantSend)."""

    max_fee_rate: float
    instant_send: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"maxFeeRate": self.max_fee_rate, "instantSend": self.instant_send}
