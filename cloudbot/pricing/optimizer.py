"""Cheapest (region, instance type) selection across a candidate set."""

import time
from collections.abc import Mapping, Sequence

from cloudbot.config.models.pricing import ProviderDefaults
from cloudbot.domain.pricing import (
    HOURS_PER_MONTH,
    OptimalConfig,
    PriceComparison,
    PriceQuote,
    PriceRange,
)
from cloudbot.errors import (
    AuthMissingError,
    NoQuotesAvailableError,
    UnsupportedError,
)
from cloudbot.observability.logging import get_logger
from cloudbot.observability.metrics import (
    PRICE_CACHE_HITS,
    PRICE_QUOTE_LATENCY,
    PRICE_QUOTES,
)
from cloudbot.pricing.base import PriceQuoteClient
from cloudbot.pricing.cache import QuoteCache
from cloudbot.pricing.currency import CurrencyConverter
from cloudbot.utils.fanout import BoundedFanOut

logger = get_logger(__name__)


class PriceOptimizer:
    """Fans price queries out with bounded concurrency and ranks the results.

    Failed pairs are dropped from the round. AuthMissingError is the one
    failure that cancels the remaining queries and propagates. Ranking uses
    prices converted to the reference currency; quotes keep their own.
    Candidates are visited in sorted (instance_type, region) order and the
    first quote wins a tie, so equal inputs always give equal outputs.
    """

    def __init__(
        self,
        clients: Mapping[str, PriceQuoteClient],
        converter: CurrencyConverter | None = None,
        defaults: Mapping[str, ProviderDefaults] | None = None,
        fanout: BoundedFanOut | None = None,
        cache: QuoteCache | None = None,
    ) -> None:
        self._clients = dict(clients)
        self._converter = converter or CurrencyConverter({"CNY": 1.0, "USD": 7.2})
        self._defaults = dict(defaults or {})
        self._fanout = fanout or BoundedFanOut(max_in_flight=5, timeout=10.0)
        self._cache = cache

    @property
    def providers(self) -> list[str]:
        return sorted(self._clients)

    def candidates(
        self,
        provider: str,
        instance_types: Sequence[str] | None = None,
        regions: Sequence[str] | None = None,
    ) -> list[tuple[str, str]]:
        """Deduplicated (instance_type, region) pairs in sorted order.

        Empty inputs fall back to the provider's configured defaults.
        """
        defaults = self._defaults.get(provider, ProviderDefaults())
        types = sorted(set(instance_types or defaults.instance_types))
        region_list = sorted(set(regions or defaults.regions))
        return [(t, r) for t in types for r in region_list]

    async def collect_quotes(
        self,
        provider: str,
        instance_types: Sequence[str] | None = None,
        regions: Sequence[str] | None = None,
    ) -> list[PriceQuote]:
        """Every successful quote of the round, in candidate order.

        Args:
            provider: Provider to quote
            instance_types: Candidate instance types; provider defaults when empty
            regions: Candidate regions; provider defaults when empty

        Returns:
            Quotes that succeeded; failed pairs are logged and dropped

        Raises:
            AuthMissingError: The provider has no usable credentials
            UnsupportedError: No client is registered for the provider
        """
        client = self._clients.get(provider)
        if client is None:
            raise UnsupportedError(f"No price client for provider {provider}", provider=provider)

        pairs = self.candidates(provider, instance_types, regions)

        async def _quote(pair: tuple[str, str]) -> PriceQuote:
            instance_type, region = pair
            started = time.perf_counter()
            try:
                return await client.quote(region, instance_type)
            finally:
                PRICE_QUOTE_LATENCY.labels(provider=provider).observe(time.perf_counter() - started)

        try:
            results = await self._fanout.run(_quote, pairs, stop_on=(AuthMissingError,))
        except AuthMissingError:
            PRICE_QUOTES.labels(provider=provider, outcome="auth_missing").inc()
            logger.error("price_auth_missing", provider=provider)
            raise

        quotes: list[PriceQuote] = []
        for result in results:
            if result.ok and result.value is not None:
                PRICE_QUOTES.labels(provider=provider, outcome="ok").inc()
                quotes.append(result.value)
            else:
                PRICE_QUOTES.labels(provider=provider, outcome=type(result.error).__name__).inc()
                instance_type, region = result.item
                logger.debug(
                    "price_quote_dropped",
                    provider=provider,
                    region=region,
                    instance_type=instance_type,
                    error=str(result.error) or type(result.error).__name__,
                )

        logger.info(
            "price_quotes_collected",
            provider=provider,
            candidates=len(pairs),
            succeeded=len(quotes),
        )
        return quotes

    async def find_optimal(
        self,
        provider: str,
        instance_types: Sequence[str] | None = None,
        regions: Sequence[str] | None = None,
    ) -> OptimalConfig:
        """Return the cheapest quote of the candidate set.

        Returns:
            The cheapest quote with its price in the reference currency

        Raises:
            NoQuotesAvailableError: No candidate produced a usable quote
            AuthMissingError: The provider has no usable credentials
            UnsupportedError: No client is registered for the provider
        """
        quotes = await self.collect_quotes(provider, instance_types, regions)
        ranked = self._rank(quotes)
        if not ranked:
            raise NoQuotesAvailableError(
                provider, len(self.candidates(provider, instance_types, regions))
            )

        best_price, best = ranked[0]
        optimal = OptimalConfig(
            quote=best,
            normalized_price_per_hour=best_price,
            reference_currency=self._converter.reference,
            candidates_considered=len(ranked),
        )
        logger.info(
            "optimal_config_selected",
            provider=provider,
            region=best.region,
            instance_type=best.instance_type,
            price_per_hour=best.price_per_hour,
            currency=best.currency,
        )
        return optimal

    async def find_optimal_cached(
        self,
        provider: str,
        template_ref: str,
        instance_types: Sequence[str] | None = None,
        regions: Sequence[str] | None = None,
    ) -> OptimalConfig:
        """find_optimal, served from the cache while the entry is fresh.

        A cached entry is reused only when it was computed from the same
        (instance_type, region) candidates this call would quote.

        Args:
            provider: Provider to quote
            template_ref: Template the result is cached under
            instance_types: Candidate instance types; provider defaults when empty
            regions: Candidate regions; provider defaults when empty

        Returns:
            The cheapest configuration of the candidate set
        """
        pairs = self.candidates(provider, instance_types, regions)
        if self._cache is not None:
            cached = self._cache.get(provider, template_ref, pairs)
            if cached is not None:
                PRICE_CACHE_HITS.labels(provider=provider).inc()
                return cached

        optimal = await self.find_optimal(provider, instance_types, regions)
        if self._cache is not None:
            self._cache.put(provider, template_ref, optimal, pairs)
        return optimal

    async def list_region_prices(
        self,
        provider: str,
        instance_types: Sequence[str] | None = None,
        regions: Sequence[str] | None = None,
    ) -> list[PriceQuote]:
        """All successful quotes, cheapest first."""
        quotes = await self.collect_quotes(provider, instance_types, regions)
        return [quote for _, quote in self._rank(quotes)]

    async def compare(
        self,
        provider: str,
        instance_types: Sequence[str] | None = None,
        regions: Sequence[str] | None = None,
    ) -> PriceComparison:
        """Cheapest-first options with the best pick and the price spread."""
        quotes = await self.collect_quotes(provider, instance_types, regions)
        ranked = self._rank(quotes)
        if not ranked:
            raise NoQuotesAvailableError(
                provider, len(self.candidates(provider, instance_types, regions))
            )

        prices = [price for price, _ in ranked]
        best_price, best = ranked[0]
        return PriceComparison(
            options=[quote for _, quote in ranked],
            best=OptimalConfig(
                quote=best,
                normalized_price_per_hour=best_price,
                reference_currency=self._converter.reference,
                candidates_considered=len(ranked),
            ),
            price_range=PriceRange(
                min_per_hour=min(prices),
                max_per_hour=max(prices),
                min_per_month=min(prices) * HOURS_PER_MONTH,
                max_per_month=max(prices) * HOURS_PER_MONTH,
                currency=self._converter.reference,
            ),
        )

    @staticmethod
    def apply_optimal_config(optimal: OptimalConfig) -> dict[str, str]:
        """Engine variables that pin a deploy to the selected pair."""
        return {"region": optimal.region, "instance_type": optimal.instance_type}

    async def aclose(self) -> None:
        for client in self._clients.values():
            await client.aclose()

    def _rank(self, quotes: Sequence[PriceQuote]) -> list[tuple[float, PriceQuote]]:
        """Stable ascending sort by normalised price; unconvertible quotes are dropped."""
        normalized: list[tuple[float, PriceQuote]] = []
        for quote in quotes:
            try:
                price = self._converter.to_reference(quote.price_per_hour, quote.currency)
            except UnsupportedError:
                logger.warning(
                    "price_quote_unconvertible",
                    provider=quote.provider,
                    region=quote.region,
                    currency=quote.currency,
                )
                continue
            normalized.append((price, quote))
        return sorted(normalized, key=lambda item: item[0])
