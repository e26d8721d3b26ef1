"""Tests for paginated listings: explorer/listing.py.

The chain-data source is mocked; we test pagination arithmetic, ordering,
de-duplication and error propagation.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest
from factories import make_raw_tx

from insight_api.chain.models import (
    AddressHistory,
    AddressHistoryItem,
    BlockOverview,
    RawTransaction,
)
from insight_api.dash.address import AddressResolver
from insight_api.errors.chain_errors import RPC_NOT_FOUND, ChainDataError
from insight_api.errors.definitions import ErrBlockHashOrAddressExpected
from insight_api.explorer.listing import ListingService, dedupe_history
from insight_api.explorer.transform import TransformOptions
from insight_api.metrics.collector import ExplorerMetrics

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _txid(i: int) -> str:
    return f"{i:064x}"


@pytest.fixture
def chain() -> AsyncMock:
    chain = AsyncMock()
    chain.get_best_height.return_value = 200

    async def _detailed(txid: str) -> RawTransaction:
        return make_raw_tx(txid)

    chain.get_detailed_transaction.side_effect = _detailed
    return chain


@pytest.fixture
def service(chain: AsyncMock, resolver: AddressResolver) -> ListingService:
    return ListingService(chain, resolver)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestValidation:
    async def test_no_selector_raises_before_any_call(
        self, service: ListingService, chain: AsyncMock
    ) -> None:
        with pytest.raises(type(ErrBlockHashOrAddressExpected)) as exc_info:
            await service.list()
        assert exc_info.value is ErrBlockHashOrAddressExpected
        assert exc_info.value.status_code == 400
        assert chain.mock_calls == []

    async def test_empty_selectors_count_as_missing(
        self, service: ListingService, chain: AsyncMock
    ) -> None:
        with pytest.raises(type(ErrBlockHashOrAddressExpected)):
            await service.list(block_hash="", address="")
        assert chain.mock_calls == []


# ---------------------------------------------------------------------------
# By block
# ---------------------------------------------------------------------------


class TestListByBlock:
    async def test_last_partial_page(self, service: ListingService, chain: AsyncMock) -> None:
        txids = [_txid(i) for i in range(25)]
        chain.get_block_overview.return_value = BlockOverview(txids=txids)

        listing = await service.list(block_hash="bb" * 32, page=2)

        assert listing is not None
        assert listing.pages_total == 3
        assert [tx.txid for tx in listing.txs] == txids[20:25]

    async def test_first_page(self, service: ListingService, chain: AsyncMock) -> None:
        txids = [_txid(i) for i in range(25)]
        chain.get_block_overview.return_value = BlockOverview(txids=txids)

        listing = await service.list(block_hash="bb" * 32)

        assert listing is not None
        assert [tx.txid for tx in listing.txs] == txids[:10]

    async def test_page_past_the_end_is_empty(
        self, service: ListingService, chain: AsyncMock
    ) -> None:
        chain.get_block_overview.return_value = BlockOverview(txids=[_txid(1)])
        listing = await service.list(block_hash="bb" * 32, page=4)
        assert listing is not None
        assert listing.to_json() == {"pagesTotal": 1, "txs": []}

    async def test_negative_page_reads_as_first(
        self, service: ListingService, chain: AsyncMock
    ) -> None:
        txids = [_txid(i) for i in range(12)]
        chain.get_block_overview.return_value = BlockOverview(txids=txids)
        listing = await service.list(block_hash="bb" * 32, page=-3)
        assert listing is not None
        assert [tx.txid for tx in listing.txs] == txids[:10]

    async def test_order_preserved_when_fetches_finish_out_of_order(
        self, service: ListingService, chain: AsyncMock
    ) -> None:
        txids = [_txid(i) for i in range(4)]
        chain.get_block_overview.return_value = BlockOverview(txids=txids)
        in_flight = 0

        async def _slow_first(txid: str) -> RawTransaction:
            nonlocal in_flight
            in_flight += 1
            assert in_flight == 1
            await asyncio.sleep(0.01 if txid == txids[0] else 0)
            in_flight -= 1
            return make_raw_tx(txid)

        chain.get_detailed_transaction.side_effect = _slow_first
        listing = await service.list(block_hash="bb" * 32)
        assert listing is not None
        assert [tx.txid for tx in listing.txs] == txids

    async def test_duplicates_in_block_are_kept(
        self, service: ListingService, chain: AsyncMock
    ) -> None:
        chain.get_block_overview.return_value = BlockOverview(txids=[_txid(1), _txid(1)])
        listing = await service.list(block_hash="bb" * 32)
        assert listing is not None
        assert len(listing.txs) == 2

    async def test_unknown_block_is_none(self, service: ListingService, chain: AsyncMock) -> None:
        chain.get_block_overview.side_effect = ChainDataError(
            "Block not found", rpc_code=RPC_NOT_FOUND
        )
        assert await service.list(block_hash="00" * 32) is None
        chain.get_detailed_transaction.assert_not_called()

    async def test_block_lookup_failure_propagates(
        self, service: ListingService, chain: AsyncMock
    ) -> None:
        chain.get_block_overview.side_effect = ChainDataError("down")
        with pytest.raises(ChainDataError, match="down"):
            await service.list(block_hash="00" * 32)

    async def test_transaction_failure_aborts_listing(
        self, service: ListingService, chain: AsyncMock
    ) -> None:
        txids = [_txid(i) for i in range(3)]
        chain.get_block_overview.return_value = BlockOverview(txids=txids)

        async def _fail_second(txid: str) -> RawTransaction:
            if txid == txids[1]:
                msg = "No such mempool or blockchain transaction"
                raise ChainDataError(msg, rpc_code=RPC_NOT_FOUND)
            return make_raw_tx(txid)

        chain.get_detailed_transaction.side_effect = _fail_second
        with pytest.raises(ChainDataError):
            await service.list(block_hash="bb" * 32)
        # Sequential: the third transaction is never requested.
        assert chain.get_detailed_transaction.await_count == 2

    async def test_confirmations_use_current_height(
        self, service: ListingService, chain: AsyncMock
    ) -> None:
        chain.get_block_overview.return_value = BlockOverview(txids=[_txid(1), _txid(2)])
        listing = await service.list(block_hash="bb" * 32)
        assert listing is not None
        assert [tx.confirmations for tx in listing.txs] == [101, 101]
        chain.get_best_height.assert_awaited_once()

    async def test_options_reach_transformer(
        self, service: ListingService, chain: AsyncMock
    ) -> None:
        chain.get_block_overview.return_value = BlockOverview(txids=[_txid(1)])
        listing = await service.list(
            block_hash="bb" * 32, options=TransformOptions(no_script_sig=True)
        )
        assert listing is not None
        assert "scriptSig" not in listing.to_json()["txs"][0]["vin"][0]


# ---------------------------------------------------------------------------
# By address
# ---------------------------------------------------------------------------


class TestListByAddress:
    async def test_requests_page_window(self, service: ListingService, chain: AsyncMock) -> None:
        chain.get_address_history.return_value = AddressHistory(items=[], total_count=0)
        await service.list(address="Xaddr", page=3)
        chain.get_address_history.assert_awaited_once_with("Xaddr", start=30, end=40)

    async def test_pages_total_from_total_count(
        self, service: ListingService, chain: AsyncMock
    ) -> None:
        chain.get_address_history.return_value = AddressHistory(
            items=[AddressHistoryItem(txid=_txid(1))], total_count=21
        )
        listing = await service.list(address="Xaddr")
        assert listing is not None
        assert listing.pages_total == 3

    async def test_empty_history(self, service: ListingService, chain: AsyncMock) -> None:
        chain.get_address_history.return_value = AddressHistory(items=[], total_count=0)
        listing = await service.list(address="Xaddr")
        assert listing is not None
        assert listing.to_json() == {"pagesTotal": 0, "txs": []}

    async def test_duplicates_appear_once_in_first_seen_order(
        self, service: ListingService, chain: AsyncMock
    ) -> None:
        tx_a = make_raw_tx(_txid(1))
        tx_b = make_raw_tx(_txid(2))
        chain.get_address_history.return_value = AddressHistory(
            items=[
                AddressHistoryItem(txid=tx_b.hash, tx=tx_b),
                AddressHistoryItem(txid=tx_a.hash, tx=tx_a),
                AddressHistoryItem(txid=tx_b.hash, tx=tx_b),
                AddressHistoryItem(txid=tx_a.hash),
            ],
            total_count=4,
        )
        listing = await service.list(address="Xaddr")
        assert listing is not None
        assert [tx.txid for tx in listing.txs] == [_txid(2), _txid(1)]
        chain.get_detailed_transaction.assert_not_called()

    async def test_txid_only_items_are_fetched(
        self, service: ListingService, chain: AsyncMock
    ) -> None:
        chain.get_address_history.return_value = AddressHistory(
            items=[AddressHistoryItem(txid=_txid(i)) for i in range(3)],
            total_count=3,
        )
        listing = await service.list(address="Xaddr")
        assert listing is not None
        assert sorted(tx.txid for tx in listing.txs) == [_txid(i) for i in range(3)]
        assert chain.get_detailed_transaction.await_count == 3

    async def test_fetches_run_concurrently(
        self, service: ListingService, chain: AsyncMock
    ) -> None:
        chain.get_address_history.return_value = AddressHistory(
            items=[AddressHistoryItem(txid=_txid(i)) for i in range(3)],
            total_count=3,
        )
        started = asyncio.Event()
        in_flight = 0

        async def _wait_for_all(txid: str) -> RawTransaction:
            nonlocal in_flight
            in_flight += 1
            if in_flight == 3:
                started.set()
            await asyncio.wait_for(started.wait(), timeout=1)
            return make_raw_tx(txid)

        chain.get_detailed_transaction.side_effect = _wait_for_all
        listing = await service.list(address="Xaddr")
        assert listing is not None
        assert len(listing.txs) == 3

    async def test_first_failure_cancels_the_rest(
        self, service: ListingService, chain: AsyncMock
    ) -> None:
        chain.get_address_history.return_value = AddressHistory(
            items=[AddressHistoryItem(txid=_txid(i)) for i in range(3)],
            total_count=3,
        )
        cancelled: list[str] = []

        async def _one_fails(txid: str) -> RawTransaction:
            if txid == _txid(0):
                msg = "down"
                raise ChainDataError(msg)
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.append(txid)
                raise
            return make_raw_tx(txid)

        chain.get_detailed_transaction.side_effect = _one_fails
        with pytest.raises(ChainDataError, match="down"):
            await service.list(address="Xaddr")
        await asyncio.sleep(0.01)
        assert sorted(cancelled) == [_txid(1), _txid(2)]

    async def test_history_failure_propagates(
        self, service: ListingService, chain: AsyncMock
    ) -> None:
        chain.get_address_history.side_effect = ChainDataError("bad address", rpc_code=-8)
        with pytest.raises(ChainDataError, match="Code:-8"):
            await service.list(address="garbage")

    async def test_block_takes_precedence(
        self, service: ListingService, chain: AsyncMock
    ) -> None:
        chain.get_block_overview.return_value = BlockOverview(txids=[])
        await service.list(block_hash="bb" * 32, address="Xaddr")
        chain.get_address_history.assert_not_called()


class TestCustomPageLength:
    async def test_page_length(self, chain: AsyncMock, resolver: AddressResolver) -> None:
        service = ListingService(chain, resolver, page_length=4)
        chain.get_block_overview.return_value = BlockOverview(txids=[_txid(i) for i in range(9)])
        listing = await service.list(block_hash="bb" * 32, page=2)
        assert listing is not None
        assert listing.pages_total == 3
        assert [tx.txid for tx in listing.txs] == [_txid(8)]


class TestMetrics:
    async def test_listing_is_timed_by_selector(
        self, chain: AsyncMock, resolver: AddressResolver
    ) -> None:
        metrics = ExplorerMetrics()
        service = ListingService(chain, resolver, metrics=metrics)
        chain.get_block_overview.return_value = BlockOverview(txids=[])
        await service.list(block_hash="bb" * 32)
        count = metrics.registry.get_sample_value(
            "insight_list_transactions_histogram_count", {"selector": "block"}
        )
        assert count == 1.0

    async def test_upstream_failure_is_counted(
        self, chain: AsyncMock, resolver: AddressResolver
    ) -> None:
        metrics = ExplorerMetrics()
        service = ListingService(chain, resolver, metrics=metrics)
        chain.get_address_history.side_effect = ChainDataError("down")
        with pytest.raises(ChainDataError, match="down"):
            await service.list(address="Xaddr")
        errors = metrics.registry.get_sample_value(
            "insight_upstream_errors_total", {"operation": "list_transactions"}
        )
        assert errors == 1.0

    async def test_unknown_block_is_not_counted(
        self, chain: AsyncMock, resolver: AddressResolver
    ) -> None:
        metrics = ExplorerMetrics()
        service = ListingService(chain, resolver, metrics=metrics)
        chain.get_block_overview.side_effect = ChainDataError("gone", rpc_code=RPC_NOT_FOUND)
        assert await service.list(block_hash="00" * 32) is None
        errors = metrics.registry.get_sample_value(
            "insight_upstream_errors_total", {"operation": "list_transactions"}
        )
        assert errors is None


def test_dedupe_history_keeps_first() -> None:
    items = [
        AddressHistoryItem(txid="a"),
        AddressHistoryItem(txid="b"),
        AddressHistoryItem(txid="a", tx=make_raw_tx("a")),
    ]
    assert dedupe_history(items) == items[:2]
