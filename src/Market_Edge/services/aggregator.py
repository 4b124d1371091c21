"""Multi-vendor market data aggregator with cache and mock fallback.

Vendors are tried sequentially in priority order. Each call is raced against
its own timeout with ``asyncio.wait_for``, which cancels the slow call rather
than leaving it running. The first usable answer is cached and returned. When
no vendor is configured, or all of them fail, synthesized mock data of the
right shape is returned instead: the public methods never raise.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING, Final

from pydantic import ValidationError

from Market_Edge.models.enums import AssetClass
from Market_Edge.models.market_data import Bar, BarSeries, Quote
from Market_Edge.services.cache import (
    TTL_HISTORY,
    TTL_QUOTE,
    ServiceCache,
    history_key,
    quote_key,
)
from Market_Edge.services.mock_data import mock_history, mock_quote
from Market_Edge.services.providers import (
    EODHDAdapter,
    FinnhubAdapter,
    FMPAdapter,
    TwelveDataAdapter,
    VendorAdapter,
)
from Market_Edge.services.symbols import format_symbol_for_country

if TYPE_CHECKING:
    from Market_Edge.config import Settings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_PROVIDER_TIMEOUT: Final[float] = 5.0
DEFAULT_HISTORY_INTERVAL: Final[str] = "1d"
DEFAULT_HISTORY_LIMIT: Final[int] = 30


class MarketDataAggregator:
    """Resolve quotes and bar history across an ordered list of vendors.

    Usage::

        cache = ServiceCache()
        aggregator = MarketDataAggregator.from_settings(get_settings(), cache)

        quote = await aggregator.get_quote("VOD", AssetClass.STOCK, country_code="GB")
        bars = await aggregator.get_history("AAPL", AssetClass.STOCK, interval="1d", limit=250)
    """

    def __init__(
        self,
        providers: Sequence[VendorAdapter],
        cache: ServiceCache,
        timeout: float = DEFAULT_PROVIDER_TIMEOUT,
        *,
        quote_ttl: int = TTL_QUOTE,
        history_ttl: int = TTL_HISTORY,
    ) -> None:
        self._providers = list(providers)
        self._cache = cache
        self._timeout = timeout
        self._quote_ttl = quote_ttl
        self._history_ttl = history_ttl

        if not self._providers:
            logger.warning("No market data providers configured. Using mock data.")
        else:
            logger.info(
                "MarketDataAggregator initialized: providers=%s, timeout=%.1fs",
                ", ".join(self.provider_names),
                timeout,
            )

    @classmethod
    def from_settings(cls, settings: Settings, cache: ServiceCache) -> MarketDataAggregator:
        """Build the vendor list from configured API keys, in priority order."""
        providers: list[VendorAdapter] = []
        if settings.finnhub_api_key:
            providers.append(FinnhubAdapter(settings.finnhub_api_key))
        if settings.twelve_data_api_key:
            providers.append(TwelveDataAdapter(settings.twelve_data_api_key))
        if settings.fmp_api_key:
            providers.append(FMPAdapter(settings.fmp_api_key))
        if settings.eodhd_api_key:
            providers.append(EODHDAdapter(settings.eodhd_api_key))

        return cls(
            providers,
            cache,
            timeout=settings.provider_timeout_seconds,
            quote_ttl=settings.quote_ttl_seconds,
            history_ttl=settings.history_ttl_seconds,
        )

    @property
    def cache(self) -> ServiceCache:
        return self._cache

    @property
    def provider_names(self) -> list[str]:
        """Vendor names in the order they are tried."""
        return [provider.name for provider in self._providers]

    async def aclose(self) -> None:
        """Close any vendor HTTP clients."""
        for provider in self._providers:
            aclose = getattr(provider, "aclose", None)
            if aclose is not None:
                await aclose()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_quote(
        self,
        symbol: str,
        asset_class: AssetClass,
        country_code: str | None = None,
    ) -> Quote:
        """Return the latest quote for *symbol*.

        Args:
            symbol: Instrument symbol in generic notation (``AAPL``, ``BTC/USD``).
            asset_class: Asset class, used by vendors for symbol translation.
            country_code: Optional ISO country; adds an exchange suffix when
                the country needs one (``VOD`` in ``GB`` -> ``VOD.L``).

        Returns:
            A vendor quote, a cached quote, or a mock quote (provider "Mock").
        """
        formatted = format_symbol_for_country(symbol, country_code) if country_code else symbol

        if not self._providers:
            return mock_quote(formatted, asset_class)

        cache_key = quote_key(formatted)
        cached = await self._cache.get(cache_key)
        if cached is not None:
            try:
                return Quote.model_validate_json(cached)
            except ValidationError as exc:
                logger.warning("Discarding unreadable cached quote %s: %s", cache_key, exc)
                await self._cache.invalidate(cache_key)

        for provider in self._providers:
            quote = await self._call_provider(
                provider,
                f"{provider.name}.get_quote({formatted})",
                lambda p=provider: p.get_quote(formatted, asset_class),
            )
            if quote is not None:
                payload = quote.model_dump_json(by_alias=True)
                await self._cache.set(cache_key, payload, self._quote_ttl)
                logger.debug("Quote for %s served by %s", formatted, provider.name)
                return quote

        logger.warning("All providers failed for quote %s. Using mock data.", formatted)
        return mock_quote(formatted, asset_class)

    async def get_history(
        self,
        symbol: str,
        asset_class: AssetClass,
        interval: str = DEFAULT_HISTORY_INTERVAL,
        limit: int = DEFAULT_HISTORY_LIMIT,
        country_code: str | None = None,
    ) -> list[Bar]:
        """Return up to *limit* bars for *symbol*, oldest first.

        An empty vendor answer counts as a failure and the next vendor is
        tried. Falls back to mock bars spaced by *interval*.
        """
        formatted = format_symbol_for_country(symbol, country_code) if country_code else symbol

        if not self._providers:
            return mock_history(limit, interval)

        cache_key = history_key(formatted, interval, limit)
        cached = await self._cache.get(cache_key)
        if cached is not None:
            try:
                return BarSeries.validate_json(cached)
            except ValidationError as exc:
                logger.warning("Discarding unreadable cached history %s: %s", cache_key, exc)
                await self._cache.invalidate(cache_key)

        for provider in self._providers:
            bars = await self._call_provider(
                provider,
                f"{provider.name}.get_history({formatted})",
                lambda p=provider: p.get_history(formatted, asset_class, interval, limit),
            )
            if bars:
                payload = BarSeries.dump_json(bars).decode("utf-8")
                await self._cache.set(cache_key, payload, self._history_ttl)
                logger.info("Fetched %d bars for %s from %s", len(bars), formatted, provider.name)
                return bars

        logger.warning("All providers failed for history %s. Using mock data.", formatted)
        return mock_history(limit, interval)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _call_provider[T](
        self,
        provider: VendorAdapter,
        label: str,
        call: Callable[[], Awaitable[T]],
    ) -> T | None:
        """Run one vendor call under the timeout; None means "try the next one"."""
        try:
            return await asyncio.wait_for(call(), timeout=self._timeout)
        except TimeoutError:
            logger.warning(
                "Provider %s timed out after %.1fs (%s), trying next...",
                provider.name,
                self._timeout,
                label,
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Provider %s failed (%s): %s, trying next...",
                provider.name,
                label,
                exc,
            )
        return None
