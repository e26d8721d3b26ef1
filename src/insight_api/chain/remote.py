"""HTTP client for the upstream chain-data service.

Async client for a node-side indexer that already serves decoded data:
- GET  /status/height
- GET  /tx/<txid>
- GET  /tx/<txid>/hex
- GET  /block/<hash>/overview
- GET  /address/<addr>/history?from=&to=
- POST /tx/send

Upstream errors are reported as ``{"code": <rpc code>, "message": "..."}``
and surface as :class:`ChainDataError`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, NoReturn
from urllib.parse import quote

import httpx

from insight_api.chain.models import AddressHistory, BlockOverview, RawTransaction
from insight_api.errors.chain_errors import RPC_NOT_FOUND, ChainDataError

if TYPE_CHECKING:
    from insight_api.chain.models import SendOptions
    from insight_api.config.settings import ChainConfig

logger = logging.getLogger(__name__)


def _segment(value: str) -> str:
    """Percent-encode *value* as exactly one URL path segment."""
    quoted = quote(value, safe="")
    # Dot segments survive quote() and would be collapsed by URL normalization.
    if quoted in (".", ".."):
        return quoted.replace(".", "%2E")
    return quoted


class RemoteChainSource:
    """Async HTTP implementation of the ChainDataSource protocol.

    Usage::

        chain = RemoteChainSource(config.chain)
        await chain.connect()
        try:
            tx = await chain.get_detailed_transaction(txid)
        finally:
            await chain.close()
    """

    def __init__(self, config: ChainConfig) -> None:
        """Initialize the client.

        Args:
            config: Chain configuration (url, timeout).
        """
        self._config = config
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:
        """Create the underlying HTTP client."""
        self._client = httpx.AsyncClient(
            base_url=self._config.url.rstrip("/"),
            headers={"Accept": "application/json"},
            timeout=self._config.timeout,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def is_connected(self) -> bool:
        """Check if the HTTP client is active."""
        return self._client is not None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_best_height(self) -> int:
        """Height of the current chain tip."""
        data = await self._request("GET", "/status/height")
        return int(data["height"])

    async def get_detailed_transaction(self, txid: str) -> RawTransaction:
        """Get a decoded transaction with resolved inputs and spent info."""
        data = await self._request("GET", f"/tx/{_segment(txid)}")
        return RawTransaction.from_dict(data)

    async def get_raw_transaction(self, txid: str) -> str:
        """Get the serialized transaction as hex."""
        data = await self._request("GET", f"/tx/{_segment(txid)}/hex")
        return data["hex"]

    async def get_block_overview(self, block_hash: str) -> BlockOverview:
        """Get the ordered txids of a block."""
        data = await self._request("GET", f"/block/{_segment(block_hash)}/overview")
        return BlockOverview.from_dict(data)

    async def get_address_history(self, address: str, *, start: int, end: int) -> AddressHistory:
        """Get the ``[start, end)`` window of an address's history."""
        data = await self._request(
            "GET",
            f"/address/{_segment(address)}/history",
            params={"from": start, "to": end},
        )
        return AddressHistory.from_dict(data)

    async def send_transaction(self, raw_tx: str, options: SendOptions | None = None) -> str:
        """Submit a signed transaction and return its txid."""
        body: dict[str, Any] = {"rawtx": raw_tx}
        if options is not None:
            body.update(options.to_dict())
        data = await self._request("POST", "/tx/send", json=body)
        return data["txid"]

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _ensure_connected(self) -> httpx.AsyncClient:
        if self._client is None:
            msg = "RemoteChainSource is not connected. Call connect() first."
            raise ChainDataError(msg)
        return self._client

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        client = self._ensure_connected()
        try:
            response = await client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("Chain-data request %s %s failed: %s", method, path, exc)
            msg = f"Chain data service unreachable: {exc}"
            raise ChainDataError(msg) from exc

        if response.is_success:
            return response.json()
        self._raise_for_status(response)

    def _raise_for_status(self, response: httpx.Response) -> NoReturn:
        """Raise a ChainDataError from a non-2xx response."""
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and isinstance(body.get("code"), int):
            msg = str(body.get("message", ""))
            raise ChainDataError(msg, rpc_code=body["code"])
        if response.status_code == 404:
            msg = "Not found"
            raise ChainDataError(msg, rpc_code=RPC_NOT_FOUND)

        detail = response.text.strip() or response.reason_phrase
        msg = f"Chain data service error ({response.status_code}): {detail}"
        raise ChainDataError(msg)
