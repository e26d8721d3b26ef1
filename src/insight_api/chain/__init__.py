"""Chain data: upstream models, source protocol and HTTP adapter."""

from insight_api.chain.remote import RemoteChainSource
from insight_api.chain.source import ChainDataSource

__all__ = ["ChainDataSource", "RemoteChainSource"]
