"""Scenario: one provisioning target and its lifecycle."""

from datetime import UTC, datetime
from pathlib import Path
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from cloudbot.domain.enums import ScenarioStatus
from cloudbot.domain.templates import TemplateKind, parse_template_ref


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class Placement(BaseModel):
    """Nodes provisioned in one region from one working directory."""

    model_config = ConfigDict(frozen=True)

    region: str
    node_count: int = Field(..., ge=1)
    working_directory: Path
    fragment: bool = False


class Scenario(BaseModel):
    """A single provisioning target.

    ``template_kind`` is resolved from ``template_ref`` once, at creation.
    ``region`` is set only when the scenario was created for one region.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: UUID = Field(default_factory=uuid4, frozen=True)
    name: str = ""
    project: str = "default"
    template_ref: str = Field(..., frozen=True)
    template_kind: TemplateKind = Field(..., frozen=True)
    region: str | None = Field(default=None, frozen=True)
    status: ScenarioStatus = ScenarioStatus.PENDING
    working_directory: Path = Field(..., frozen=True)
    placements: list[Placement] = Field(default_factory=list)
    variables: dict[str, str] = Field(
        default_factory=dict,
        description="Non-secret engine variables of the last successful deploy",
    )
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def provider(self) -> str:
        return self.template_kind.provider

    @property
    def placed_nodes(self) -> int:
        return sum(p.node_count for p in self.placements)

    def touch(self) -> None:
        """Update the updated_at timestamp to current time."""
        self.updated_at = utc_now()


def create_scenario(
    template_ref: str,
    working_root: Path,
    *,
    name: str = "",
    project: str = "default",
    region: str | None = None,
) -> Scenario:
    """Build a pending scenario with its own working directory.

    The directory is ``<working_root>/<project>/<scenario id>``; template
    files are expected to be copied into it by the caller.

    Args:
        template_ref: Template the scenario provisions
        working_root: Root of every scenario working directory
        name: Display name; defaults to ``template_ref``
        project: Project the scenario belongs to
        region: Pin every deploy to this region

    Returns:
        The new scenario, not yet saved
    """
    scenario_id = uuid4()
    working_directory = Path(working_root).expanduser() / project / str(scenario_id)
    working_directory.mkdir(parents=True, exist_ok=True)
    return Scenario(
        id=scenario_id,
        name=name or template_ref,
        project=project,
        template_ref=template_ref,
        template_kind=parse_template_ref(template_ref),
        region=region,
        working_directory=working_directory,
    )
