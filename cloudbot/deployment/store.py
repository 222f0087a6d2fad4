"""Scenario persistence boundary."""

from abc import ABC, abstractmethod
from uuid import UUID

from cloudbot.domain.scenario import Scenario


class ScenarioStore(ABC):
    """Key-value storage of scenario records."""

    @abstractmethod
    async def get(self, scenario_id: UUID) -> Scenario | None:
        """Get a scenario by id."""
        pass

    @abstractmethod
    async def save(self, scenario: Scenario) -> None:
        """Insert or replace a scenario."""
        pass

    @abstractmethod
    async def list_scenarios(self, project: str | None = None) -> list[Scenario]:
        """List scenarios, optionally for one project."""
        pass

    @abstractmethod
    async def delete(self, scenario_id: UUID) -> bool:
        """Delete a scenario. Returns True if it existed."""
        pass


class InMemoryScenarioStore(ScenarioStore):
    """Dict-backed store; records are copied on the way in and out."""

    def __init__(self) -> None:
        self._scenarios: dict[UUID, Scenario] = {}

    async def get(self, scenario_id: UUID) -> Scenario | None:
        scenario = self._scenarios.get(scenario_id)
        return scenario.model_copy(deep=True) if scenario else None

    async def save(self, scenario: Scenario) -> None:
        self._scenarios[scenario.id] = scenario.model_copy(deep=True)

    async def list_scenarios(self, project: str | None = None) -> list[Scenario]:
        return [
            s.model_copy(deep=True)
            for s in self._scenarios.values()
            if project is None or s.project == project
        ]

    async def delete(self, scenario_id: UUID) -> bool:
        return self._scenarios.pop(scenario_id, None) is not None
