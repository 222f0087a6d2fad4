"""Region pruning by current spot capacity."""

from collections.abc import Iterable, Mapping, Sequence

from cloudbot.capacity.base import CapacitySignal
from cloudbot.domain.capacity import RegionAvailability
from cloudbot.observability.logging import get_logger
from cloudbot.observability.metrics import CAPACITY_PROBES
from cloudbot.utils.fanout import BoundedFanOut

logger = get_logger(__name__)


class CapacityProbe:
    """Asks each candidate region whether an instance family has capacity.

    Never raises (cancellation aside). A region whose probe errors or times
    out counts as unavailable; when no region yields any signal the result
    is empty, meaning "no information, try every candidate".
    """

    def __init__(
        self,
        signals: Mapping[str, CapacitySignal],
        fanout: BoundedFanOut | None = None,
    ) -> None:
        self._signals = dict(signals)
        self._fanout = fanout or BoundedFanOut(max_in_flight=5, timeout=10.0)

    def supports(self, provider: str) -> bool:
        return provider in self._signals

    async def find_available_regions(
        self,
        provider: str,
        instance_family: str,
        candidate_regions: Sequence[str],
    ) -> set[RegionAvailability]:
        """Ask every candidate region about ``instance_family``.

        Args:
            provider: Provider whose signal is queried
            instance_family: Instance family prefix, e.g. ``ecs.t5``
            candidate_regions: Regions to ask

        Returns:
            One entry per (region, instance type) the provider reported;
            regions that failed to answer are left out
        """
        signal = self._signals.get(provider)
        if signal is None or not candidate_regions:
            return set()

        async def _probe(region: str) -> list[RegionAvailability]:
            return await signal.probe(region, instance_family)

        results = await self._fanout.run(_probe, list(dict.fromkeys(candidate_regions)))

        availability: set[RegionAvailability] = set()
        answered = 0
        for result in results:
            if result.ok:
                answered += 1
                availability.update(result.value or [])
                has_capacity = any(a.available for a in result.value or [])
                CAPACITY_PROBES.labels(
                    provider=provider,
                    result="available" if has_capacity else "unavailable",
                ).inc()
            else:
                CAPACITY_PROBES.labels(provider=provider, result="error").inc()
                logger.debug(
                    "capacity_probe_failed",
                    provider=provider,
                    region=result.item,
                    error=str(result.error) or type(result.error).__name__,
                )
                availability.add(
                    RegionAvailability(
                        region=result.item,
                        instance_type=instance_family,
                        available=False,
                    )
                )

        if answered == 0:
            logger.warning("capacity_probe_no_information", provider=provider, regions=len(results))
            return set()

        logger.info(
            "capacity_probe_complete",
            provider=provider,
            instance_family=instance_family,
            available=sorted(available_regions(availability)),
        )
        return availability


def available_regions(availability: Iterable[RegionAvailability]) -> set[str]:
    """Regions with at least one available instance type."""
    return {a.region for a in availability if a.available}


def order_candidates(
    regions: Sequence[str],
    availability: Iterable[RegionAvailability],
) -> list[str]:
    """Keep only regions with capacity, in their original order.

    With no availability information, or none available, every region is
    returned unchanged.

    Args:
        regions: Candidate regions in preference order
        availability: Capacity answers for those regions

    Returns:
        The regions to try, in preference order
    """
    usable = available_regions(availability)
    if not usable:
        return list(regions)
    return [region for region in regions if region in usable]
