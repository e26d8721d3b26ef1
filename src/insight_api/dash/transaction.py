"""Transaction wire format: raw hex, DIP2 special transactions.

Pure-Python Dash transaction serialization and deserialization:
- VarInt encoding/decoding
- TxInput / TxOutput data classes
- Transaction with version/type split and the special-transaction
  extra payload (DIP2), plus txid computation
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from io import BytesIO

from insight_api.utils.crypto import sha256d

# ---------------------------------------------------------------------------
# VarInt encoding / decoding
# ---------------------------------------------------------------------------


def encode_varint(n: int) -> bytes:
    """Encode an integer as a variable-length integer (CompactSize)."""
    if n < 0xFD:
        return struct.pack("<B", n)
    if n <= 0xFFFF:
        return b"\xfd" + struct.pack("<H", n)
    if n <= 0xFFFFFFFF:
        return b"\xfe" + struct.pack("<I", n)
    return b"\xff" + struct.pack("<Q", n)


def read_varint(stream: BytesIO) -> int:
    """Read a variable-length integer from a byte stream."""
    first = stream.read(1)
    if len(first) == 0:
        msg = "Unexpected end of stream reading varint"
        raise ValueError(msg)
    n = first[0]
    if n < 0xFD:
        return n
    if n == 0xFD:
        return struct.unpack("<H", _read_exact(stream, 2))[0]
    if n == 0xFE:
        return struct.unpack("<I", _read_exact(stream, 4))[0]
    return struct.unpack("<Q", _read_exact(stream, 8))[0]


def _read_exact(stream: BytesIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        msg = f"Unexpected end of stream: wanted {size} bytes, got {len(data)}"
        raise ValueError(msg)
    return data


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Final sequence number; anything below MAX_SEQUENCE - 1 signals RBF
MAX_SEQUENCE = 0xFFFFFFFF

# The null previous outpoint used in coinbase transactions
COINBASE_TXID = b"\x00" * 32

# First transaction version that may carry a DIP2 type and extra payload
SPECIAL_TX_VERSION = 3


# ---------------------------------------------------------------------------
# TxInput
# ---------------------------------------------------------------------------


@dataclass
class TxInput:
    """A transaction input.

    Attributes:
        prev_tx_id: 32-byte hash of the previous transaction (internal byte order).
        prev_tx_out_index: Index of the output in the previous transaction.
        script_sig: Unlocking script (scriptSig).
        sequence: Sequence number (default 0xFFFFFFFF).
    """

    prev_tx_id: bytes
    prev_tx_out_index: int
    script_sig: bytes = b""
    sequence: int = MAX_SEQUENCE

    @property
    def prev_tx_id_hex(self) -> str:
        """Previous transaction ID in display (reversed) hex."""
        return self.prev_tx_id[::-1].hex()

    @property
    def is_coinbase(self) -> bool:
        return self.prev_tx_id == COINBASE_TXID and self.prev_tx_out_index == 0xFFFFFFFF

    def serialize(self) -> bytes:
        """Serialize the input to bytes."""
        return (
            self.prev_tx_id
            + struct.pack("<I", self.prev_tx_out_index)
            + encode_varint(len(self.script_sig))
            + self.script_sig
            + struct.pack("<I", self.sequence)
        )

    @classmethod
    def deserialize(cls, stream: BytesIO) -> TxInput:
        """Deserialize a transaction input from a byte stream."""
        prev_tx_id = _read_exact(stream, 32)
        prev_tx_out_index = struct.unpack("<I", _read_exact(stream, 4))[0]
        script_sig = _read_exact(stream, read_varint(stream))
        sequence = struct.unpack("<I", _read_exact(stream, 4))[0]
        return cls(
            prev_tx_id=prev_tx_id,
            prev_tx_out_index=prev_tx_out_index,
            script_sig=script_sig,
            sequence=sequence,
        )


# ---------------------------------------------------------------------------
# TxOutput
# ---------------------------------------------------------------------------


@dataclass
class TxOutput:
    """A transaction output.

    Attributes:
        value: Output value in duffs.
        script_pubkey: Locking script (scriptPubKey).
    """

    value: int
    script_pubkey: bytes

    def serialize(self) -> bytes:
        """Serialize the output to bytes."""
        return (
            struct.pack("<q", self.value)
            + encode_varint(len(self.script_pubkey))
            + self.script_pubkey
        )

    @classmethod
    def deserialize(cls, stream: BytesIO) -> TxOutput:
        """Deserialize a transaction output from a byte stream."""
        value = struct.unpack("<q", _read_exact(stream, 8))[0]
        script_pubkey = _read_exact(stream, read_varint(stream))
        return cls(value=value, script_pubkey=script_pubkey)


# ---------------------------------------------------------------------------
# Transaction
# ---------------------------------------------------------------------------


@dataclass
class Transaction:
    """A Dash transaction.

    Attributes:
        version: 16-bit transaction version.
        tx_type: DIP2 special transaction type (0 for classic transactions).
        inputs: List of transaction inputs.
        outputs: List of transaction outputs.
        locktime: Transaction locktime.
        extra_payload: Special transaction payload (only when type != 0).
    """

    version: int = 1
    tx_type: int = 0
    inputs: list[TxInput] = field(default_factory=list)
    outputs: list[TxOutput] = field(default_factory=list)
    locktime: int = 0
    extra_payload: bytes = b""

    @property
    def has_extra_payload(self) -> bool:
        return self.version >= SPECIAL_TX_VERSION and self.tx_type != 0

    @property
    def is_coinbase(self) -> bool:
        return len(self.inputs) == 1 and self.inputs[0].is_coinbase

    def serialize(self) -> bytes:
        """Serialize the transaction to raw bytes."""
        result = struct.pack("<hH", self.version, self.tx_type)
        result += encode_varint(len(self.inputs))
        for inp in self.inputs:
            result += inp.serialize()
        result += encode_varint(len(self.outputs))
        for out in self.outputs:
            result += out.serialize()
        result += struct.pack("<I", self.locktime)
        if self.has_extra_payload:
            result += encode_varint(len(self.extra_payload)) + self.extra_payload
        return result

    @classmethod
    def deserialize(cls, stream: BytesIO) -> Transaction:
        """Deserialize a transaction from a byte stream."""
        version, tx_type = struct.unpack("<hH", _read_exact(stream, 4))
        inputs = [TxInput.deserialize(stream) for _ in range(read_varint(stream))]
        outputs = [TxOutput.deserialize(stream) for _ in range(read_varint(stream))]
        locktime = struct.unpack("<I", _read_exact(stream, 4))[0]
        tx = cls(
            version=version,
            tx_type=tx_type,
            inputs=inputs,
            outputs=outputs,
            locktime=locktime,
        )
        if tx.has_extra_payload:
            tx.extra_payload = _read_exact(stream, read_varint(stream))
        return tx

    @classmethod
    def from_hex(cls, hex_str: str) -> Transaction:
        """Deserialize a transaction from a hex string.

        Raises:
            ValueError: If the hex is malformed, truncated or has trailing bytes.
        """
        return cls.from_bytes(bytes.fromhex(hex_str))

    @classmethod
    def from_bytes(cls, data: bytes) -> Transaction:
        """Deserialize a transaction from raw bytes."""
        stream = BytesIO(data)
        tx = cls.deserialize(stream)
        if stream.read(1):
            msg = "Trailing bytes after transaction"
            raise ValueError(msg)
        return tx

    def txid(self) -> str:
        """Compute the transaction ID (double-SHA256, reversed, hex)."""
        return sha256d(self.serialize())[::-1].hex()

    @property
    def size(self) -> int:
        """Transaction size in bytes."""
        return len(self.serialize())

    @property
    def output_value(self) -> int:
        """Sum of all output values in duffs."""
        return sum(out.value for out in self.outputs)
