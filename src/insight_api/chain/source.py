"""ChainDataSource: the upstream operations the explorer consumes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from insight_api.chain.models import (
        AddressHistory,
        BlockOverview,
        RawTransaction,
        SendOptions,
    )


class ChainDataSource(Protocol):
    """Supplier of decoded chain data.

    Every method may raise :class:`~insight_api.errors.chain_errors.ChainDataError`;
    an error whose ``is_not_found`` is true means the id or hash is unknown.
    """

    async def connect(self) -> None: ...

    async def close(self) -> None: ...

    async def get_best_height(self) -> int: ...

    async def get_detailed_transaction(self, txid: str) -> RawTransaction: ...

    async def get_raw_transaction(self, txid: str) -> str: ...

    async def get_block_overview(self, block_hash: str) -> BlockOverview: ...

    async def get_address_history(
        self, address: str, *, start: int, end: int
    ) -> AddressHistory: ...

    async def send_transaction(
        self, raw_tx: str, options: SendOptions | None = None
    ) -> str: ...
