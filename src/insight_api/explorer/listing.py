"""Paginated transaction listings by block or by address."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import math
from typing import TYPE_CHECKING

from insight_api.errors.chain_errors import ChainDataError
from insight_api.errors.definitions import ErrBlockHashOrAddressExpected
from insight_api.explorer.transform import DEFAULT_OPTIONS, transform_transaction
from insight_api.explorer.views import ListingView

if TYPE_CHECKING:
    from insight_api.chain.models import AddressHistoryItem, RawTransaction
    from insight_api.chain.source import ChainDataSource
    from insight_api.explorer.transform import AddressTypeResolver, TransformOptions
    from insight_api.explorer.views import TransactionView
    from insight_api.metrics.collector import ExplorerMetrics

logger = logging.getLogger(__name__)

DEFAULT_PAGE_LENGTH = 10


def dedupe_history(items: list[AddressHistoryItem]) -> list[AddressHistoryItem]:
    """Drop repeated txids, keeping the first occurrence of each."""
    seen: set[str] = set()
    unique: list[AddressHistoryItem] = []
    for item in items:
        if item.txid in seen:
            continue
        seen.add(item.txid)
        unique.append(item)
    return unique


async def fetch_history_transactions(
    chain: ChainDataSource, items: list[AddressHistoryItem]
) -> list[RawTransaction]:
    """Return the transactions of *items*, fetching missing ones concurrently.

    The first failure cancels the outstanding fetches and propagates.
    """
    pending = {
        item.txid: asyncio.create_task(chain.get_detailed_transaction(item.txid))
        for item in items
        if item.tx is None
    }
    if pending:
        try:
            await asyncio.gather(*pending.values())
        except BaseException:
            for task in pending.values():
                task.cancel()
            raise

    return [item.tx if item.tx is not None else pending[item.txid].result() for item in items]


class ListingService:
    """Builds one page of transactions for a block or an address.

    Exactly one selector is used per call; a block hash takes precedence
    over an address when both are given.
    """

    def __init__(
        self,
        chain: ChainDataSource,
        resolver: AddressTypeResolver,
        *,
        page_length: int = DEFAULT_PAGE_LENGTH,
        metrics: ExplorerMetrics | None = None,
    ) -> None:
        self._chain = chain
        self._resolver = resolver
        self._page_length = page_length
        self._metrics = metrics

    @property
    def page_length(self) -> int:
        return self._page_length

    async def list(
        self,
        block_hash: str | None = None,
        address: str | None = None,
        page: int = 0,
        options: TransformOptions = DEFAULT_OPTIONS,
    ) -> ListingView | None:
        """List a page of transactions.

        Args:
            block_hash: Hash of the block to list.
            address: Address whose history to list.
            page: Zero-based page number; negative values read as 0.
            options: Fields to leave out of each transaction.

        Returns:
            The page, or None when the block is unknown.

        Raises:
            InsightError: ``ErrBlockHashOrAddressExpected`` when neither
                selector is given, before any upstream call.
            ChainDataError: If any upstream lookup fails.
        """
        page = max(page, 0)
        if not block_hash and not address:
            raise ErrBlockHashOrAddressExpected

        try:
            if block_hash:
                with self._track("block"):
                    return await self._list_by_block(block_hash, page, options)
            with self._track("address"):
                return await self._list_by_address(address, page, options)
        except ChainDataError:
            if self._metrics is not None:
                self._metrics.record_upstream_error("list_transactions")
            raise

    # ------------------------------------------------------------------
    # Selectors
    # ------------------------------------------------------------------

    async def _list_by_block(
        self, block_hash: str, page: int, options: TransformOptions
    ) -> ListingView | None:
        try:
            block = await self._chain.get_block_overview(block_hash)
        except ChainDataError as exc:
            if exc.is_not_found:
                logger.debug("Block %s not found", block_hash)
                return None
            raise

        start = page * self._page_length
        txids = block.txids[start : start + self._page_length]
        pages_total = math.ceil(len(block.txids) / self._page_length)

        current_height = await self._chain.get_best_height()
        # Block order is significant: fetch one at a time.
        txs: list[TransactionView] = []
        for txid in txids:
            tx = await self._chain.get_detailed_transaction(txid)
            txs.append(self._transform(tx, current_height, options))
        return ListingView(pages_total=pages_total, txs=txs)

    async def _list_by_address(
        self, address: str, page: int, options: TransformOptions
    ) -> ListingView:
        history = await self._chain.get_address_history(
            address,
            start=page * self._page_length,
            end=(page + 1) * self._page_length,
        )
        items = dedupe_history(history.items)
        pages_total = math.ceil(history.total_count / self._page_length)

        current_height = await self._chain.get_best_height()
        raw = await fetch_history_transactions(self._chain, items)
        txs = [self._transform(tx, current_height, options) for tx in raw]
        return ListingView(pages_total=pages_total, txs=txs)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _transform(
        self, tx: RawTransaction, current_height: int, options: TransformOptions
    ) -> TransactionView:
        return transform_transaction(tx, current_height, self._resolver, options)

    def _track(self, selector: str) -> contextlib.AbstractContextManager[None]:
        if self._metrics is None:
            return contextlib.nullcontext()
        return self._metrics.track_list_transactions(selector)
