"""How many nodes to try per region when a request is split across regions."""

import math
from abc import ABC, abstractmethod
from typing import Any


class FragmentationStrategy(ABC):
    """Chooses the size of the next fragment."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the strategy name."""
        pass

    @abstractmethod
    def fragment_size(self, remaining_nodes: int, remaining_regions: int) -> int:
        """Nodes to place in the next region (at least 1, at most ``remaining_nodes``)."""
        pass


class UnitFragmentationStrategy(FragmentationStrategy):
    """Fixed-size fragments, one node per region by default.

    Never tries more than ``unit`` nodes in a region even when it has
    headroom, which keeps each fragment small at the cost of using more
    regions.
    """

    def __init__(self, unit: int = 1) -> None:
        if unit < 1:
            raise ValueError(f"unit must be at least 1, got {unit}")
        self._unit = unit

    @property
    def name(self) -> str:
        return "unit"

    def fragment_size(self, remaining_nodes: int, remaining_regions: int) -> int:  # noqa: ARG002
        return max(1, min(self._unit, remaining_nodes))


class SpreadFragmentationStrategy(FragmentationStrategy):
    """Spread the remaining nodes evenly over the remaining regions."""

    @property
    def name(self) -> str:
        return "spread"

    def fragment_size(self, remaining_nodes: int, remaining_regions: int) -> int:
        if remaining_regions <= 0:
            return max(1, remaining_nodes)
        return max(1, math.ceil(remaining_nodes / remaining_regions))


def create_fragmentation_strategy(strategy: str, **kwargs: Any) -> FragmentationStrategy:
    """Build a fragmentation strategy by name.

    Raises:
        ValueError: If strategy name is not recognized
    """
    strategies: dict[str, type[FragmentationStrategy]] = {
        "unit": UnitFragmentationStrategy,
        "spread": SpreadFragmentationStrategy,
    }

    if strategy not in strategies:
        valid = ", ".join(strategies.keys())
        raise ValueError(f"Unknown fragmentation strategy: {strategy}. Valid options: {valid}")

    return strategies[strategy](**kwargs)
