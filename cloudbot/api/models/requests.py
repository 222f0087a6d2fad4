"""Request and response bodies for the price and scenario routes."""

from datetime import datetime
from pathlib import Path
from uuid import UUID

from pydantic import BaseModel, Field

from cloudbot.domain.enums import ScenarioStatus
from cloudbot.domain.scenario import Placement, Scenario


class PriceRequest(BaseModel):
    """Candidate set for a price lookup; empty lists use provider defaults."""

    provider: str = Field(..., min_length=1)
    template_ref: str | None = Field(
        default=None,
        description="Template the result is cached under",
    )
    instance_types: list[str] = Field(default_factory=list)
    regions: list[str] = Field(default_factory=list)


class ScenarioCreate(BaseModel):
    template_ref: str = Field(..., min_length=1)
    name: str = ""
    project: str = Field(default="default", pattern=r"^[A-Za-z0-9._-]+$")
    region: str | None = None


class DeployRequest(BaseModel):
    node_count: int = Field(default=1, ge=1)
    region: str | None = None
    auto_approve: bool = True
    variables: dict[str, str] = Field(default_factory=dict)
    instance_types: list[str] = Field(
        default_factory=list,
        description="Let the optimizer pick an instance type from these",
    )


class ScenarioResponse(BaseModel):
    id: UUID
    name: str
    project: str
    template_ref: str
    provider: str
    status: ScenarioStatus
    region: str | None
    working_directory: Path
    placements: list[Placement]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_scenario(cls, scenario: Scenario) -> "ScenarioResponse":
        return cls(
            id=scenario.id,
            name=scenario.name,
            project=scenario.project,
            template_ref=scenario.template_ref,
            provider=scenario.provider,
            status=scenario.status,
            region=scenario.region,
            working_directory=scenario.working_directory,
            placements=list(scenario.placements),
            created_at=scenario.created_at,
            updated_at=scenario.updated_at,
        )
