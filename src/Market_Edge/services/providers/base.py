"""Vendor adapter contract and the shared httpx plumbing behind it.

Every adapter resolves a quote or a bar history for one symbol. Any failure
is raised as a ``DataFetchError`` subclass so the aggregator can move on to
the next vendor; adapters never fall back on their own.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

import httpx

from Market_Edge.models.enums import AssetClass
from Market_Edge.models.market_data import Bar, Quote
from Market_Edge.utils.exceptions import (
    DataSourceUnavailableError,
    ProviderTimeoutError,
    TickerNotFoundError,
)

logger = logging.getLogger(__name__)

HTTP_OK: int = 200
HTTP_NOT_FOUND: int = 404


@runtime_checkable
class VendorAdapter(Protocol):
    """A market-data vendor the aggregator can query."""

    name: str

    async def get_quote(self, symbol: str, asset_class: AssetClass) -> Quote: ...

    async def get_history(
        self,
        symbol: str,
        asset_class: AssetClass,
        interval: str,
        limit: int,
    ) -> list[Bar]: ...


class HttpVendorAdapter:
    """Base class for adapters talking JSON over HTTPS.

    Subclasses set ``name`` and ``base_url`` and implement ``get_quote`` /
    ``get_history`` on top of :meth:`_get_json`. A client may be injected
    (tests pass one built on ``httpx.MockTransport``); otherwise the adapter
    owns its client and closes it in :meth:`aclose`.
    """

    name: str = ""
    base_url: str = ""

    def __init__(self, api_key: str, client: httpx.AsyncClient | None = None) -> None:
        self._api_key = api_key
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(connect=5.0, read=10.0, write=10.0, pool=5.0),
            limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
        )

        logger.info("%s adapter initialized", self.name)

    async def aclose(self) -> None:
        """Close the shared httpx client."""
        await self._client.aclose()

    async def _get_json(self, path: str, params: dict[str, Any], *, symbol: str) -> Any:
        """GET ``base_url + path`` and return the decoded JSON body.

        Raises:
            TickerNotFoundError: The vendor answered 404.
            ProviderTimeoutError: The HTTP client timed out.
            DataSourceUnavailableError: Transport error, any other non-200
                status, or a body that is not JSON.
        """
        url = f"{self.base_url}{path}"
        try:
            response = await self._client.get(url, params=params)
        except httpx.TimeoutException as exc:
            msg = f"{self.name} request timed out: {exc}"
            raise ProviderTimeoutError(msg, symbol=symbol, source=self.name) from exc
        except httpx.HTTPError as exc:
            msg = f"{self.name} request failed: {exc}"
            raise DataSourceUnavailableError(msg, symbol=symbol, source=self.name) from exc

        if response.status_code == HTTP_NOT_FOUND:
            msg = f"{self.name} has no data for {symbol}."
            raise TickerNotFoundError(
                msg,
                symbol=symbol,
                source=self.name,
                http_status=response.status_code,
            )
        if response.status_code != HTTP_OK:
            msg = f"{self.name} returned HTTP {response.status_code}."
            raise DataSourceUnavailableError(
                msg,
                symbol=symbol,
                source=self.name,
                http_status=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            msg = f"{self.name} returned a non-JSON body."
            raise DataSourceUnavailableError(msg, symbol=symbol, source=self.name) from exc

    def _not_found(self, symbol: str, detail: str = "") -> TickerNotFoundError:
        msg = f"No data from {self.name} for {symbol}"
        if detail:
            msg = f"{msg}: {detail}"
        return TickerNotFoundError(msg, symbol=symbol, source=self.name)
