"""ExplorerEngine: central engine client owning all services."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from insight_api.chain.source import ChainDataSource
    from insight_api.config.settings import AppConfig
    from insight_api.dash.address import AddressResolver
    from insight_api.explorer.listing import ListingService
    from insight_api.explorer.service import TransactionService
    from insight_api.metrics.collector import ExplorerMetrics
    from insight_api.notifications.service import NotificationService

logger = logging.getLogger(__name__)

# Error messages
_ERR_NOT_INITIALIZED = "Engine not initialized. Call initialize() first."


class ExplorerEngine:
    """Central engine that owns the chain source and explorer services.

    Provides lifecycle management and service registry pattern.
    """

    def __init__(
        self,
        config: AppConfig,
        *,
        chain: ChainDataSource | None = None,
        metrics: ExplorerMetrics | None = None,
    ) -> None:
        """Initialize engine with configuration.

        Args:
            config: Application configuration.
            chain: Chain-data source to use instead of the HTTP client
                built from ``config.chain``.
            metrics: Shared metrics; a private registry is created if omitted.
        """
        self._config = config
        self._initialized = False

        # Infrastructure components
        self._chain: ChainDataSource | None = chain
        self._resolver: AddressResolver | None = None
        self._metrics: ExplorerMetrics | None = metrics
        self._notifications: NotificationService | None = None

        # Services
        self._transaction_service: TransactionService | None = None
        self._listing_service: ListingService | None = None

    async def initialize(self) -> None:
        """Connect the chain source and start services.

        Raises:
            RuntimeError: If already initialized.
        """
        if self._initialized:
            msg = "Engine already initialized"
            raise RuntimeError(msg)

        from insight_api.chain.remote import RemoteChainSource
        from insight_api.dash.address import AddressResolver
        from insight_api.explorer.listing import ListingService
        from insight_api.explorer.service import TransactionService
        from insight_api.metrics.collector import ExplorerMetrics
        from insight_api.notifications.service import NotificationService

        if self._chain is None:
            self._chain = RemoteChainSource(self._config.chain)
        await self._chain.connect()

        self._resolver = AddressResolver(self._config.chain.network)
        if self._metrics is None:
            self._metrics = ExplorerMetrics()

        self._notifications = NotificationService()
        await self._notifications.start()

        self._transaction_service = TransactionService(self)
        self._listing_service = ListingService(
            self._chain,
            self._resolver,
            page_length=self._config.api.page_length,
            metrics=self._metrics,
        )

        self._initialized = True
        logger.info(
            "Explorer engine initialized (network=%s, chain=%s)",
            self._config.chain.network,
            self._config.chain.url,
        )

    async def close(self) -> None:
        """Gracefully shut down all services and connections.

        Can be called multiple times (idempotent).
        """
        if not self._initialized:
            return

        if self._notifications is not None:
            await self._notifications.stop()
            self._notifications = None

        self._transaction_service = None
        self._listing_service = None

        if self._chain is not None:
            await self._chain.close()

        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        """Check if the engine is initialized."""
        return self._initialized

    @property
    def config(self) -> AppConfig:
        """Get the application configuration."""
        return self._config

    @property
    def chain(self) -> ChainDataSource:
        """Get the chain-data source.

        Raises:
            RuntimeError: If engine not initialized.
        """
        if self._chain is None or not self._initialized:
            raise RuntimeError(_ERR_NOT_INITIALIZED)
        return self._chain

    @property
    def resolver(self) -> AddressResolver:
        """Get the address resolver for the configured network."""
        if self._resolver is None:
            raise RuntimeError(_ERR_NOT_INITIALIZED)
        return self._resolver

    @property
    def metrics(self) -> ExplorerMetrics:
        """Get the explorer metrics."""
        if self._metrics is None:
            raise RuntimeError(_ERR_NOT_INITIALIZED)
        return self._metrics

    @property
    def notification_service(self) -> NotificationService | None:
        """Get the notification service (None if not initialized)."""
        return self._notifications

    @property
    def transaction_service(self) -> TransactionService:
        """Get the transaction service."""
        if self._transaction_service is None:
            raise RuntimeError(_ERR_NOT_INITIALIZED)
        return self._transaction_service

    @property
    def listing_service(self) -> ListingService:
        """Get the listing service."""
        if self._listing_service is None:
            raise RuntimeError(_ERR_NOT_INITIALIZED)
        return self._listing_service

    async def health_check(self) -> dict[str, str]:
        """Check health status of engine components.

        Returns:
            Dictionary with component statuses ('ok', 'error', 'not_initialized').
        """
        status = {
            "engine": "ok" if self._initialized else "not_initialized",
            "chain": "unknown",
        }
        if not self._initialized or self._chain is None:
            return status

        from insight_api.errors.chain_errors import ChainDataError

        try:
            await self._chain.get_best_height()
            status["chain"] = "ok"
        except ChainDataError:
            logger.warning("Chain-data service health check failed")
            status["chain"] = "error"
        return status
