"""Builders for chain-data records used across the test suite."""

from __future__ import annotations

from typing import Any

from insight_api.chain.models import RawTransaction
from insight_api.dash.address import encode_address
from insight_api.dash.script import ScriptType

# ---------------------------------------------------------------------------
# Raw record builders
# ---------------------------------------------------------------------------

HASH_A = bytes(range(20))
HASH_B = bytes(range(20, 40))
ADDRESS_A = encode_address(HASH_A)
ADDRESS_B = encode_address(HASH_B, ScriptType.P2SH)
P2PKH_SCRIPT_A = "76a914" + HASH_A.hex() + "88ac"
P2SH_SCRIPT_B = "a914" + HASH_B.hex() + "87"


def make_tx_dict(txid: str = "aa" * 32, **overrides: Any) -> dict[str, Any]:
    """Chain-data JSON for a confirmed one-in, two-out transaction."""
    data: dict[str, Any] = {
        "hash": txid,
        "version": 1,
        "locktime": 0,
        "height": 100,
        "blockHash": "bb" * 32,
        "blockTimestamp": 1_600_000_000,
        "hex": "00" * 225,
        "inputSatoshis": 150_000_000,
        "outputSatoshis": 149_990_000,
        "feeSatoshis": 10_000,
        "inputs": [
            {
                "prevTxId": "cc" * 32,
                "outputIndex": 1,
                "sequence": 0xFFFFFFFF,
                "script": "4730440220",
                "scriptAsm": "30440220",
                "address": ADDRESS_A,
                "satoshis": 150_000_000,
            }
        ],
        "outputs": [
            {
                "satoshis": 100_000_000,
                "script": P2PKH_SCRIPT_A,
                "scriptAsm": f"OP_DUP OP_HASH160 {HASH_A.hex()} OP_EQUALVERIFY OP_CHECKSIG",
                "address": ADDRESS_A,
                "spentTxId": "dd" * 32,
                "spentIndex": 0,
                "spentHeight": 105,
            },
            {
                "satoshis": 49_990_000,
                "script": P2SH_SCRIPT_B,
                "scriptAsm": f"OP_HASH160 {HASH_B.hex()} OP_EQUAL",
                "address": ADDRESS_B,
            },
        ],
    }
    data.update(overrides)
    return data


def make_raw_tx(txid: str = "aa" * 32, **overrides: Any) -> RawTransaction:
    return RawTransaction.from_dict(make_tx_dict(txid, **overrides))


def make_coinbase_dict(txid: str = "ee" * 32) -> dict[str, Any]:
    return {
        "hash": txid,
        "version": 3,
        "type": 5,
        "locktime": 0,
        "height": 100,
        "blockHash": "bb" * 32,
        "blockTimestamp": 1_600_000_000,
        "hex": "00" * 180,
        "outputSatoshis": 300_000_000,
        "coinbase": True,
        "extraPayloadSize": 70,
        "extraPayload": "02" + "00" * 69,
        "cbTx": {"version": 2, "height": 100, "merkleRootMNList": "ff" * 32},
        "inputs": [
            {
                "prevTxId": "00" * 32,
                "outputIndex": 0xFFFFFFFF,
                "sequence": 0xFFFFFFFF,
                "script": "03640000",
            }
        ],
        "outputs": [
            {"satoshis": 300_000_000, "script": P2PKH_SCRIPT_A, "address": ADDRESS_A},
        ],
    }
