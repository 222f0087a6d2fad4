"""Scenario lifecycle endpoints."""

from pathlib import Path
from uuid import UUID

from fastapi import APIRouter, Query, status

from cloudbot.api.dependencies import OrchestratorDep, ScenarioStoreDep, SettingsDep
from cloudbot.api.models.requests import DeployRequest, ScenarioCreate, ScenarioResponse
from cloudbot.deployment.models import DeployResult, DestroyResult, ScenarioReport
from cloudbot.deployment.workspace import copy_template
from cloudbot.domain.scenario import create_scenario
from cloudbot.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/scenarios")


@router.post("", response_model=ScenarioResponse, status_code=status.HTTP_201_CREATED)
async def create(
    request: ScenarioCreate,
    settings: SettingsDep,
    store: ScenarioStoreDep,
) -> ScenarioResponse:
    """Register a pending scenario and allocate its working directory.

    When ``deployment.template_root`` is configured the template tree is
    copied into the new directory.
    """
    scenario = create_scenario(
        request.template_ref,
        Path(settings.deployment.working_root),
        name=request.name,
        project=request.project,
        region=request.region,
    )
    if settings.deployment.template_root:
        copy_template(
            Path(settings.deployment.template_root),
            request.template_ref,
            scenario.working_directory,
        )
    await store.save(scenario)

    logger.info(
        "scenario_created",
        scenario_id=str(scenario.id),
        template=scenario.template_ref,
        kind=scenario.template_kind.kind,
    )
    return ScenarioResponse.from_scenario(scenario)


@router.get("", response_model=list[ScenarioResponse])
async def list_scenarios(
    store: ScenarioStoreDep,
    project: str | None = Query(default=None),
) -> list[ScenarioResponse]:
    scenarios = await store.list_scenarios(project)
    return [ScenarioResponse.from_scenario(s) for s in scenarios]


@router.get("/{scenario_id}/status", response_model=ScenarioReport)
async def scenario_status(scenario_id: UUID, orchestrator: OrchestratorDep) -> ScenarioReport:
    """Stored scenario record plus the resources the engine reports."""
    return await orchestrator.inspect(scenario_id)


@router.post("/{scenario_id}/deploy", response_model=DeployResult)
async def deploy(
    scenario_id: UUID,
    request: DeployRequest,
    orchestrator: OrchestratorDep,
) -> DeployResult:
    """Deploy a pending scenario.

    Quota exhaustion and engine failures are reported in the body with
    HTTP 200; the ``outcome`` field says whether nodes were placed.
    """
    return await orchestrator.deploy(
        scenario_id,
        request.node_count,
        request.region,
        auto_approve=request.auto_approve,
        variables=request.variables,
        instance_types=request.instance_types or None,
    )


@router.post("/{scenario_id}/destroy", response_model=DestroyResult)
async def destroy(scenario_id: UUID, orchestrator: OrchestratorDep) -> DestroyResult:
    return await orchestrator.destroy(scenario_id)


@router.post("/{scenario_id}/release", response_model=DestroyResult)
async def release_partial(scenario_id: UUID, orchestrator: OrchestratorDep) -> DestroyResult:
    """Destroy fragments left behind by a partial deploy."""
    return await orchestrator.release_partial(scenario_id)
