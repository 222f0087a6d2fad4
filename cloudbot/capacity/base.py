"""Capacity signal interface."""

from abc import ABC, abstractmethod

from cloudbot.domain.capacity import RegionAvailability


class CapacitySignal(ABC):
    """Provider-specific check for sellable spot capacity in one region."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider this signal probes."""
        pass

    @abstractmethod
    async def probe(self, region: str, instance_family: str) -> list[RegionAvailability]:
        """Availability of the family's instance types in ``region``.

        May raise; the probe treats any error as "region unavailable".
        """
        pass
