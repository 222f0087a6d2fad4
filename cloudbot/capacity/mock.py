"""Mock capacity signal for testing."""

import asyncio

from cloudbot.capacity.base import CapacitySignal
from cloudbot.domain.capacity import RegionAvailability


class MockCapacitySignal(CapacitySignal):
    """Regions listed in ``available`` have capacity; ``failing`` regions raise."""

    def __init__(
        self,
        provider: str = "mock",
        available: set[str] | None = None,
        failing: set[str] | None = None,
        hanging: set[str] | None = None,
    ) -> None:
        self._provider = provider
        self.available = set(available or ())
        self.failing = set(failing or ())
        self.hanging = set(hanging or ())
        self.probed: list[str] = []

    @property
    def provider_name(self) -> str:
        return self._provider

    async def probe(self, region: str, instance_family: str) -> list[RegionAvailability]:
        self.probed.append(region)
        if region in self.hanging:
            await asyncio.Event().wait()
        if region in self.failing:
            raise RuntimeError(f"probe failed for {region}")
        return [
            RegionAvailability(
                region=region,
                instance_type=instance_family,
                available=region in self.available,
            )
        ]
