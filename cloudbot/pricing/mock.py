"""Mock price client for testing."""

import asyncio
from typing import Any

from cloudbot.domain.pricing import PriceQuote
from cloudbot.errors import QuoteNotFoundError
from cloudbot.pricing.base import PriceQuoteClient


class MockPriceQuoteClient(PriceQuoteClient):
    """Scripted prices and errors with a call log.

    Unscripted pairs raise QuoteNotFoundError.
    """

    def __init__(
        self,
        provider: str = "mock",
        prices: dict[tuple[str, str], float] | None = None,
        currency: str = "CNY",
        delay: float = 0.0,
    ) -> None:
        self._provider = provider
        self._prices: dict[tuple[str, str], float] = dict(prices or {})
        self._errors: dict[tuple[str, str], Exception] = {}
        self._currency = currency
        self._delay = delay
        self._call_history: list[dict[str, Any]] = []
        self.in_flight = 0
        self.max_in_flight_seen = 0

    @property
    def provider_name(self) -> str:
        return self._provider

    @property
    def call_history(self) -> list[dict[str, Any]]:
        return self._call_history

    def set_price(self, region: str, instance_type: str, price_per_hour: float) -> None:
        self._prices[(region, instance_type)] = price_per_hour
        self._errors.pop((region, instance_type), None)

    def set_error(self, region: str, instance_type: str, error: Exception) -> None:
        self._errors[(region, instance_type)] = error

    def clear_history(self) -> None:
        self._call_history = []

    async def quote(self, region: str, instance_type: str) -> PriceQuote:
        self._call_history.append({"region": region, "instance_type": instance_type})
        self.in_flight += 1
        self.max_in_flight_seen = max(self.max_in_flight_seen, self.in_flight)
        try:
            if self._delay:
                await asyncio.sleep(self._delay)
        finally:
            self.in_flight -= 1

        key = (region, instance_type)
        if key in self._errors:
            raise self._errors[key]
        if key not in self._prices:
            raise QuoteNotFoundError(
                f"No mock price for {instance_type} in {region}",
                provider=self._provider,
                region=region,
                instance_type=instance_type,
            )
        return PriceQuote(
            provider=self._provider,
            region=region,
            instance_type=instance_type,
            price_per_hour=self._prices[key],
            currency=self._currency,
        )

    async def list_regions(self) -> list[str]:
        return sorted({region for region, _ in self._prices})
