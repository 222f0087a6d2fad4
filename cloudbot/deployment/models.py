"""Deploy and destroy results."""

from pathlib import Path
from uuid import UUID

from pydantic import BaseModel, Field, computed_field

from cloudbot.domain.enums import (
    AttemptOutcome,
    DeployOutcome,
    EngineErrorKind,
    FailureKind,
)
from cloudbot.domain.resources import ResourceDetail
from cloudbot.domain.scenario import Placement, Scenario


class RegionAttempt(BaseModel):
    """One provisioning attempt against one region."""

    region: str
    node_count: int
    outcome: AttemptOutcome
    fragment: bool = False
    command: str | None = None
    error_kind: EngineErrorKind | None = None
    message: str = ""


class DeployResult(BaseModel):
    """Outcome of a deploy call, including partial progress.

    A deploy that placed some but not all nodes is PARTIAL: the placed
    fragments are listed so they can be cleaned up deliberately.
    """

    scenario_id: UUID
    outcome: DeployOutcome
    requested_nodes: int
    placed_nodes: int = 0
    placements: list[Placement] = Field(default_factory=list)
    attempts: list[RegionAttempt] = Field(default_factory=list)
    failure: FailureKind | None = None
    message: str = ""

    @property
    def succeeded(self) -> bool:
        return self.outcome == DeployOutcome.DEPLOYED

    @property
    def attempted_regions(self) -> list[str]:
        return [a.region for a in self.attempts]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def summary(self) -> str:
        regions = ", ".join(p.region for p in self.placements)
        text = f"{self.placed_nodes} of {self.requested_nodes} requested nodes placed"
        if regions:
            text += f" in regions {regions}"
        if self.failure == FailureKind.QUOTA_EXHAUSTED:
            tried = ", ".join(dict.fromkeys(self.attempted_regions))
            text += f"; remaining candidates exhausted quota (tried {tried})"
        elif self.failure is not None:
            text += f"; {self.failure.value}"
            if self.message:
                text += f": {self.message}"
        return text


class DestroyResult(BaseModel):
    """Working directories whose resources were destroyed."""

    scenario_id: UUID
    destroyed: list[Path] = Field(default_factory=list)


class ScenarioReport(BaseModel):
    """Scenario record plus what the engine reports for it."""

    scenario: Scenario
    resources: list[str] = Field(default_factory=list)
    instances: list[ResourceDetail] = Field(default_factory=list)
