"""Dash script parsing: type detection, hash extraction, ASM rendering.

Provides read-only helpers over locking/unlocking scripts:
- Script type detection (P2PKH, P2SH, P2PK, OP_RETURN)
- Extraction of the hash committed to by P2PKH / P2SH outputs
- Chunk iteration and ASM rendering (the ``asm`` text shown by the explorer)
"""

from __future__ import annotations

import enum
import struct
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

# ---------------------------------------------------------------------------
# Opcodes
# ---------------------------------------------------------------------------


class OpCode(int, enum.Enum):
    """Opcodes recognised by the ASM renderer."""

    OP_0 = 0x00
    OP_PUSHDATA1 = 0x4C
    OP_PUSHDATA2 = 0x4D
    OP_PUSHDATA4 = 0x4E
    OP_1NEGATE = 0x4F
    OP_RESERVED = 0x50
    OP_1 = 0x51
    OP_2 = 0x52
    OP_3 = 0x53
    OP_4 = 0x54
    OP_5 = 0x55
    OP_6 = 0x56
    OP_7 = 0x57
    OP_8 = 0x58
    OP_9 = 0x59
    OP_10 = 0x5A
    OP_11 = 0x5B
    OP_12 = 0x5C
    OP_13 = 0x5D
    OP_14 = 0x5E
    OP_15 = 0x5F
    OP_16 = 0x60
    OP_NOP = 0x61
    OP_IF = 0x63
    OP_NOTIF = 0x64
    OP_ELSE = 0x67
    OP_ENDIF = 0x68
    OP_VERIFY = 0x69
    OP_RETURN = 0x6A
    OP_TOALTSTACK = 0x6B
    OP_FROMALTSTACK = 0x6C
    OP_IFDUP = 0x73
    OP_DEPTH = 0x74
    OP_DROP = 0x75
    OP_DUP = 0x76
    OP_NIP = 0x77
    OP_OVER = 0x78
    OP_PICK = 0x79
    OP_ROLL = 0x7A
    OP_ROT = 0x7B
    OP_SWAP = 0x7C
    OP_TUCK = 0x7D
    OP_SIZE = 0x82
    OP_EQUAL = 0x87
    OP_EQUALVERIFY = 0x88
    OP_1ADD = 0x8B
    OP_1SUB = 0x8C
    OP_NEGATE = 0x8F
    OP_ABS = 0x90
    OP_NOT = 0x91
    OP_ADD = 0x93
    OP_SUB = 0x94
    OP_BOOLAND = 0x9A
    OP_BOOLOR = 0x9B
    OP_NUMEQUAL = 0x9C
    OP_LESSTHAN = 0x9F
    OP_GREATERTHAN = 0xA0
    OP_MIN = 0xA3
    OP_MAX = 0xA4
    OP_WITHIN = 0xA5
    OP_RIPEMD160 = 0xA6
    OP_SHA1 = 0xA7
    OP_SHA256 = 0xA8
    OP_HASH160 = 0xA9
    OP_HASH256 = 0xAA
    OP_CODESEPARATOR = 0xAB
    OP_CHECKSIG = 0xAC
    OP_CHECKSIGVERIFY = 0xAD
    OP_CHECKMULTISIG = 0xAE
    OP_CHECKMULTISIGVERIFY = 0xAF
    OP_CHECKLOCKTIMEVERIFY = 0xB1
    OP_CHECKSEQUENCEVERIFY = 0xB2


_OPCODE_NAMES = {op.value: op.name for op in OpCode}


# ---------------------------------------------------------------------------
# Script Type
# ---------------------------------------------------------------------------


class ScriptType(enum.StrEnum):
    """Known script types."""

    P2PKH = "pubkeyhash"
    P2SH = "scripthash"
    P2PK = "pubkey"
    NULL_DATA = "nulldata"
    UNKNOWN = "unknown"


# ---------------------------------------------------------------------------
# Chunk iteration
# ---------------------------------------------------------------------------


def iter_chunks(script: bytes) -> Iterator[tuple[int, bytes | None]]:
    """Yield ``(opcode, data)`` pairs; *data* is None for non-push opcodes.

    Raises:
        ValueError: If a push runs past the end of the script.
    """
    i = 0
    end = len(script)
    while i < end:
        op = script[i]
        i += 1
        if op == OpCode.OP_0 or op > OpCode.OP_PUSHDATA4:
            yield op, None
            continue
        if op < OpCode.OP_PUSHDATA1:
            size = op
        elif op == OpCode.OP_PUSHDATA1:
            if i + 1 > end:
                msg = "Script truncated in OP_PUSHDATA1 length"
                raise ValueError(msg)
            size = script[i]
            i += 1
        elif op == OpCode.OP_PUSHDATA2:
            if i + 2 > end:
                msg = "Script truncated in OP_PUSHDATA2 length"
                raise ValueError(msg)
            size = struct.unpack("<H", script[i : i + 2])[0]
            i += 2
        else:
            if i + 4 > end:
                msg = "Script truncated in OP_PUSHDATA4 length"
                raise ValueError(msg)
            size = struct.unpack("<I", script[i : i + 4])[0]
            i += 4
        if i + size > end:
            msg = f"Script push of {size} bytes runs past end of script"
            raise ValueError(msg)
        yield op, script[i : i + size]
        i += size


def script_to_asm(script: bytes) -> str:
    """Render a script as space-separated ASM text.

    Data pushes are shown as hex, ``OP_0`` as ``0`` and ``OP_1NEGATE`` as
    ``-1``; opcodes without a name are shown as two-digit hex.
    """
    parts: list[str] = []
    for op, data in iter_chunks(script):
        if data is not None:
            parts.append(data.hex() if data else "0")
        elif op == OpCode.OP_0:
            parts.append("0")
        elif op == OpCode.OP_1NEGATE:
            parts.append("-1")
        elif op in _OPCODE_NAMES:
            parts.append(_OPCODE_NAMES[op])
        else:
            parts.append(f"{op:02x}")
    return " ".join(parts)


# ---------------------------------------------------------------------------
# Script type detection
# ---------------------------------------------------------------------------


def detect_script_type(script: bytes) -> ScriptType:
    """Detect the type of a locking script.

    Recognises:
    - P2PKH: ``OP_DUP OP_HASH160 <20> OP_EQUALVERIFY OP_CHECKSIG``
    - P2SH: ``OP_HASH160 <20> OP_EQUAL``
    - NULL_DATA: ``OP_RETURN ...``
    - P2PK: ``<33|65> OP_CHECKSIG``
    """
    if len(script) == 0:
        return ScriptType.UNKNOWN

    if (
        len(script) == 25
        and script[0] == OpCode.OP_DUP
        and script[1] == OpCode.OP_HASH160
        and script[2] == 0x14  # push 20 bytes
        and script[23] == OpCode.OP_EQUALVERIFY
        and script[24] == OpCode.OP_CHECKSIG
    ):
        return ScriptType.P2PKH

    if (
        len(script) == 23
        and script[0] == OpCode.OP_HASH160
        and script[1] == 0x14
        and script[22] == OpCode.OP_EQUAL
    ):
        return ScriptType.P2SH

    if script[0] == OpCode.OP_RETURN:
        return ScriptType.NULL_DATA

    if len(script) == 35 and script[0] == 0x21 and script[34] == OpCode.OP_CHECKSIG:
        return ScriptType.P2PK
    if len(script) == 67 and script[0] == 0x41 and script[66] == OpCode.OP_CHECKSIG:
        return ScriptType.P2PK

    return ScriptType.UNKNOWN


def extract_hash(script: bytes) -> tuple[ScriptType, bytes] | None:
    """Return the script type and 20-byte hash of a P2PKH or P2SH script.

    Returns None for every other script type.
    """
    script_type = detect_script_type(script)
    if script_type == ScriptType.P2PKH:
        return script_type, script[3:23]
    if script_type == ScriptType.P2SH:
        return script_type, script[2:22]
    return None
