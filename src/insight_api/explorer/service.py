"""Transaction service: lookups and submission.

1. Get: fetch a detailed transaction and transform it for display
2. Raw: fetch the serialized transaction hex
3. Send: relay a signed transaction, optionally with InstantSend, and
   announce it to inv subscribers
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from insight_api.chain.models import SendOptions
from insight_api.dash.transaction import Transaction
from insight_api.errors.chain_errors import ChainDataError
from insight_api.errors.definitions import ErrMissingRawTx
from insight_api.explorer.inv import summarize_inv_transaction
from insight_api.explorer.transform import DEFAULT_OPTIONS, transform_transaction
from insight_api.explorer.views import RawTxView, SendResultView
from insight_api.notifications.events import InvEvent

if TYPE_CHECKING:
    from insight_api.engine.client import ExplorerEngine
    from insight_api.explorer.transform import TransformOptions
    from insight_api.explorer.views import TransactionView

logger = logging.getLogger(__name__)


class TransactionService:
    """Business logic behind the single-transaction endpoints.

    Unknown transactions are reported as None rather than raised.
    """

    def __init__(self, engine: ExplorerEngine) -> None:
        self._engine = engine

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def get_transaction(
        self, txid: str, options: TransformOptions = DEFAULT_OPTIONS
    ) -> TransactionView | None:
        """Get the display form of a transaction.

        Args:
            txid: Transaction id (hex).
            options: Fields to leave out.

        Returns:
            The transformed transaction, or None if the txid is unknown.

        Raises:
            ChainDataError: On any other upstream failure.
        """
        chain = self._engine.chain
        metrics = self._engine.metrics
        with metrics.track_get_transaction():
            try:
                tx = await chain.get_detailed_transaction(txid)
            except ChainDataError as exc:
                if exc.is_not_found:
                    return None
                metrics.record_upstream_error("get_transaction")
                raise
            current_height = await chain.get_best_height()
            return transform_transaction(tx, current_height, self._engine.resolver, options)

    async def get_raw_transaction(self, txid: str) -> RawTxView | None:
        """Get the serialized hex of a transaction, or None if unknown."""
        try:
            raw = await self._engine.chain.get_raw_transaction(txid)
        except ChainDataError as exc:
            if exc.is_not_found:
                return None
            self._engine.metrics.record_upstream_error("get_raw_transaction")
            raise
        return RawTxView(rawtx=raw)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    async def send_transaction(
        self, raw_tx: str | None, *, instant_send: bool = False
    ) -> SendResultView:
        """Relay a signed transaction.

        Args:
            raw_tx: Serialized transaction (hex).
            instant_send: Request InstantSend relay with the configured
                fee-rate ceiling.

        Returns:
            The txid assigned by the node.

        Raises:
            InsightError: ``ErrMissingRawTx`` if *raw_tx* is None.
            ChainDataError: If the node rejects the transaction.
        """
        if raw_tx is None:
            raise ErrMissingRawTx

        options = None
        if instant_send:
            options = SendOptions(
                max_fee_rate=self._engine.config.api.instant_send_max_fee_rate,
                instant_send=True,
            )

        metrics = self._engine.metrics
        with metrics.track_send_transaction():
            try:
                txid = await self._engine.chain.send_transaction(raw_tx, options)
            except ChainDataError:
                metrics.record_upstream_error("send_transaction")
                raise

        logger.info("Relayed transaction %s (instant_send=%s)", txid, instant_send)
        await self._announce(raw_tx, is_locked=instant_send)
        return SendResultView(txid=txid)

    async def _announce(self, raw_tx: str, *, is_locked: bool) -> None:
        """Publish an inv summary of a relayed transaction."""
        notifications = self._engine.notification_service
        if notifications is None:
            return
        try:
            tx = Transaction.from_hex(raw_tx)
        except ValueError:
            logger.warning("Relayed transaction could not be parsed; skipping inv event")
            return
        view = summarize_inv_transaction(tx, self._engine.resolver, is_locked=is_locked)
        await notifications.notify(InvEvent.from_view(view))
