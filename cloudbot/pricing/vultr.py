"""Vultr price client backed by the public plans listing."""

from typing import Any

import httpx

from cloudbot.domain.pricing import HOURS_PER_MONTH, PriceQuote
from cloudbot.errors import QuoteNotFoundError, TransientError
from cloudbot.observability.logging import get_logger
from cloudbot.pricing.base import PriceQuoteClient

logger = get_logger(__name__)


class VultrPriceClient(PriceQuoteClient):
    """Hourly prices derived from Vultr's monthly plan cost, in USD.

    ``/v2/plans`` needs no authentication. Plans are fetched once per client
    and reused for every quote.
    """

    def __init__(
        self,
        base_url: str = "https://api.vultr.com/v2",
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._plans: dict[str, dict[str, Any]] | None = None

    @property
    def provider_name(self) -> str:
        return "vultr"

    async def quote(self, region: str, instance_type: str) -> PriceQuote:
        plans = await self._load_plans()
        plan = plans.get(instance_type)
        locations = plan.get("locations") if plan else None
        if plan is None or (locations is not None and region not in locations):
            raise QuoteNotFoundError(
                f"Plan {instance_type} not offered in {region}",
                provider=self.provider_name,
                region=region,
                instance_type=instance_type,
            )

        try:
            monthly = float(plan["monthly_cost"])
        except (KeyError, TypeError, ValueError) as e:
            raise QuoteNotFoundError(
                f"Plan {instance_type} has no usable monthly_cost",
                provider=self.provider_name,
                region=region,
                instance_type=instance_type,
            ) from e

        return PriceQuote(
            provider=self.provider_name,
            region=region,
            instance_type=instance_type,
            price_per_hour=monthly / HOURS_PER_MONTH,
            currency="USD",
        )

    async def list_regions(self) -> list[str]:
        plans = await self._load_plans()
        return sorted({loc for plan in plans.values() for loc in plan.get("locations") or []})

    async def list_instance_types(self, region: str) -> list[str]:
        plans = await self._load_plans()
        return sorted(
            plan_id
            for plan_id, plan in plans.items()
            if region in (plan.get("locations") or [])
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _load_plans(self) -> dict[str, dict[str, Any]]:
        if self._plans is not None:
            return self._plans

        try:
            response = await self._client.get(
                f"{self._base_url}/plans",
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            raise TransientError(f"Vultr request failed: {e}", provider=self.provider_name) from e

        if response.status_code != 200:
            logger.warning("vultr_plans_error", status_code=response.status_code)
            raise TransientError(
                f"Vultr API error ({response.status_code})",
                provider=self.provider_name,
            )

        plans = response.json().get("plans", [])
        self._plans = {plan["id"]: plan for plan in plans if "id" in plan}
        return self._plans
