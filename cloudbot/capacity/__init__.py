"""Spot capacity probing."""

from cloudbot.capacity.base import CapacitySignal
from cloudbot.capacity.mock import MockCapacitySignal
from cloudbot.capacity.probe import CapacityProbe, available_regions, order_candidates
from cloudbot.capacity.tencent import TencentSpotSignal

__all__ = [
    "CapacityProbe",
    "CapacitySignal",
    "MockCapacitySignal",
    "TencentSpotSignal",
    "available_regions",
    "order_candidates",
]
