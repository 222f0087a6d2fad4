"""Table-driven prices for providers without a live pricing client."""

from collections.abc import Iterable

from cloudbot.config.models.pricing import StaticPrice
from cloudbot.domain.pricing import PriceQuote
from cloudbot.errors import QuoteNotFoundError
from cloudbot.pricing.base import PriceQuoteClient


class StaticPriceClient(PriceQuoteClient):
    """Serves quotes from the configured fallback price table."""

    def __init__(self, provider: str, prices: Iterable[StaticPrice]) -> None:
        self._provider = provider
        self._prices = {
            (p.region, p.instance_type): p for p in prices if p.provider == provider
        }

    @property
    def provider_name(self) -> str:
        return self._provider

    async def quote(self, region: str, instance_type: str) -> PriceQuote:
        entry = self._prices.get((region, instance_type))
        if entry is None:
            raise QuoteNotFoundError(
                f"No static price for {instance_type} in {region}",
                provider=self._provider,
                region=region,
                instance_type=instance_type,
            )
        return PriceQuote(
            provider=self._provider,
            region=region,
            instance_type=instance_type,
            price_per_hour=entry.price_per_hour,
            currency=entry.currency,
        )

    async def list_regions(self) -> list[str]:
        return sorted({region for region, _ in self._prices})

    async def list_instance_types(self, region: str) -> list[str]:
        return sorted(t for r, t in self._prices if r == region)
