"""Address encoding: Base58Check Dash addresses and type resolution.

Dash address operations:
- P2PKH / P2SH address encoding from a 20-byte hash
- Address validation and type detection across networks
- ``AddressResolver``: the lookup capability consumed by the transformers
"""

from __future__ import annotations

import logging

from insight_api.config.settings import Network
from insight_api.dash.base58 import base58check_decode, base58check_encode
from insight_api.dash.script import ScriptType, extract_hash

logger = logging.getLogger(__name__)

# Network version bytes
_VERSIONS: dict[Network, dict[ScriptType, int]] = {
    Network.MAINNET: {ScriptType.P2PKH: 0x4C, ScriptType.P2SH: 0x10},  # X... / 7...
    Network.TESTNET: {ScriptType.P2PKH: 0x8C, ScriptType.P2SH: 0x13},  # y... / 8... or 9...
    Network.REGTEST: {ScriptType.P2PKH: 0x8C, ScriptType.P2SH: 0x13},
}

_TYPE_BY_VERSION: dict[int, ScriptType] = {
    version: script_type
    for versions in _VERSIONS.values()
    for script_type, version in versions.items()
}


def encode_address(
    hash160: bytes,
    script_type: ScriptType = ScriptType.P2PKH,
    *,
    network: Network = Network.MAINNET,
) -> str:
    """Encode a 20-byte hash as a Base58Check address.

    Args:
        hash160: RIPEMD160(SHA256(x)) of the public key or redeem script.
        script_type: ``P2PKH`` or ``P2SH``.
        network: Network whose version byte to use.

    Raises:
        ValueError: If the hash length or script type is unsupported.
    """
    if len(hash160) != 20:
        msg = f"hash160 must be 20 bytes, got {len(hash160)}"
        raise ValueError(msg)
    versions = _VERSIONS[network]
    if script_type not in versions:
        msg = f"No address encoding for script type {script_type}"
        raise ValueError(msg)
    return base58check_encode(bytes([versions[script_type]]) + hash160)


def address_type(address: str) -> ScriptType:
    """Return the script type an address pays to.

    Raises:
        ValueError: If the address is malformed or has an unknown version.
    """
    payload = base58check_decode(address)
    if len(payload) != 21:
        msg = f"Invalid address payload length: {len(payload)}"
        raise ValueError(msg)
    try:
        return _TYPE_BY_VERSION[payload[0]]
    except KeyError:
        msg = f"Unknown address version byte: {payload[0]:#04x}"
        raise ValueError(msg) from None


class AddressResolver:
    """Address lookups used by the transaction transformers.

    ``resolve_type`` works on any network's addresses; ``script_to_address``
    encodes for the network the resolver was built for.
    """

    def __init__(self, network: Network = Network.MAINNET) -> None:
        self._network = network

    @property
    def network(self) -> Network:
        """Network used when deriving addresses from scripts."""
        return self._network

    def resolve_type(self, address: str) -> str | None:
        """Return ``pubkeyhash`` / ``scripthash`` for *address*, or None."""
        try:
            return address_type(address).value
        except ValueError:
            logger.debug("Could not resolve address type for %s", address)
            return None

    def script_to_address(self, script: bytes) -> str | None:
        """Derive the address a locking script pays to, or None."""
        extracted = extract_hash(script)
        if extracted is None:
            return None
        script_type, hash160 = extracted
        return encode_address(hash160, script_type, network=self._network)
