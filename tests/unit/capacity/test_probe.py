"""Unit tests for CapacityProbe and candidate ordering."""

import pytest

from cloudbot.capacity.mock import MockCapacitySignal
from cloudbot.capacity.probe import CapacityProbe, available_regions, order_candidates
from cloudbot.domain.capacity import RegionAvailability
from cloudbot.utils.fanout import BoundedFanOut

REGIONS = ["ap-shanghai", "ap-nanjing", "ap-guangzhou", "ap-beijing"]


def _probe(signal: MockCapacitySignal, timeout: float = 10.0) -> CapacityProbe:
    return CapacityProbe({"tencent": signal}, fanout=BoundedFanOut(timeout=timeout))


class TestFindAvailableRegions:
    """Tests for CapacityProbe.find_available_regions."""

    @pytest.mark.asyncio
    async def test_reports_available_regions(self) -> None:
        signal = MockCapacitySignal("tencent", available={"ap-nanjing", "ap-beijing"})

        result = await _probe(signal).find_available_regions("tencent", "S5", REGIONS)

        assert available_regions(result) == {"ap-nanjing", "ap-beijing"}
        assert sorted(signal.probed) == sorted(REGIONS)

    @pytest.mark.asyncio
    async def test_failing_region_counts_as_unavailable(self) -> None:
        signal = MockCapacitySignal(
            "tencent", available={"ap-shanghai", "ap-nanjing"}, failing={"ap-nanjing"}
        )

        result = await _probe(signal).find_available_regions("tencent", "S5", REGIONS)

        assert available_regions(result) == {"ap-shanghai"}
        nanjing = RegionAvailability(region="ap-nanjing", instance_type="S5", available=False)
        assert nanjing in result

    @pytest.mark.asyncio
    async def test_hanging_region_times_out(self) -> None:
        signal = MockCapacitySignal(
            "tencent", available={"ap-shanghai"}, hanging={"ap-beijing"}
        )

        result = await _probe(signal, timeout=0.05).find_available_regions(
            "tencent", "S5", REGIONS
        )

        assert available_regions(result) == {"ap-shanghai"}

    @pytest.mark.asyncio
    async def test_no_information_is_empty(self) -> None:
        signal = MockCapacitySignal("tencent", failing=set(REGIONS))
        assert await _probe(signal).find_available_regions("tencent", "S5", REGIONS) == set()

    @pytest.mark.asyncio
    async def test_unknown_provider_is_empty(self) -> None:
        probe = _probe(MockCapacitySignal("tencent"))
        assert probe.supports("aws") is False
        assert await probe.find_available_regions("aws", "t3", ["us-east-1"]) == set()


class TestOrderCandidates:
    """Tests for order_candidates."""

    def test_keeps_available_in_original_order(self) -> None:
        availability = {
            RegionAvailability(region="ap-beijing", instance_type="S5.SMALL1", available=True),
            RegionAvailability(region="ap-nanjing", instance_type="S5.SMALL1", available=True),
            RegionAvailability(region="ap-shanghai", instance_type="S5.SMALL1", available=False),
        }
        assert order_candidates(REGIONS, availability) == ["ap-nanjing", "ap-beijing"]

    def test_no_information_keeps_everything(self) -> None:
        assert order_candidates(REGIONS, set()) == REGIONS

    def test_nothing_available_keeps_everything(self) -> None:
        availability = {
            RegionAvailability(region=r, instance_type="S5", available=False) for r in REGIONS
        }
        assert order_candidates(REGIONS, availability) == REGIONS
