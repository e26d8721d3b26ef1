"""Tests for error classes and pre-defined error instances."""

from __future__ import annotations

import pytest

from insight_api.errors import definitions as defs
from insight_api.errors.chain_errors import RPC_NOT_FOUND, ChainDataError
from insight_api.errors.insight_errors import InsightError

# ---------------------------------------------------------------------------
# InsightError base class
# ---------------------------------------------------------------------------


class TestInsightError:
    def test_default_attributes(self) -> None:
        err = InsightError("something broke")
        assert str(err) == "something broke"
        assert err.message == "something broke"
        assert err.status_code == 500
        assert err.code == "insight-error"

    def test_custom_attributes(self) -> None:
        err = InsightError("bad request", status_code=400, code="bad-req")
        assert err.status_code == 400
        assert err.code == "bad-req"

    def test_is_exception(self) -> None:
        with pytest.raises(InsightError, match="boom"):
            raise InsightError("boom")


# ---------------------------------------------------------------------------
# ChainDataError
# ---------------------------------------------------------------------------


class TestChainDataError:
    def test_with_rpc_code(self) -> None:
        err = ChainDataError("Transaction rejected", rpc_code=-26)
        assert err.message == "Transaction rejected. Code:-26"
        assert err.status_code == 400
        assert err.code == "chain-error"
        assert err.rpc_code == -26
        assert not err.is_not_found

    def test_without_rpc_code(self) -> None:
        err = ChainDataError("connection refused")
        assert err.message == "connection refused"
        assert err.status_code == 503
        assert err.code == "chain-unavailable"
        assert err.rpc_code is None

    def test_not_found(self) -> None:
        assert ChainDataError("No such tx", rpc_code=RPC_NOT_FOUND).is_not_found

    def test_is_insight_error(self) -> None:
        assert isinstance(ChainDataError("x"), InsightError)


# ---------------------------------------------------------------------------
# Definitions
# ---------------------------------------------------------------------------


class TestDefinitions:
    @pytest.mark.parametrize(
        ("err", "status", "code"),
        [
            (defs.ErrBlockHashOrAddressExpected, 400, "block-hash-or-address-expected"),
            (defs.ErrMissingRawTx, 400, "missing-rawtx"),
            (defs.ErrNotFound, 404, "not-found"),
            (defs.ErrChainUnavailable, 503, "chain-unavailable"),
        ],
    )
    def test_status_and_code(self, err: InsightError, status: int, code: str) -> None:
        assert err.status_code == status
        assert err.code == code

    def test_messages(self) -> None:
        assert defs.ErrNotFound.message == "Not found"
        assert defs.ErrBlockHashOrAddressExpected.message == "Block hash or address expected"
        assert defs.ErrMissingRawTx.message == "Missing parameter (expected 'rawtx' a string)"
