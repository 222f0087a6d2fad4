"""Dependency injection for API routes.

Instances are created once from settings and reused. Tests replace them
through ``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends

from cloudbot.config import Settings, get_settings
from cloudbot.credentials.store import CredentialStore
from cloudbot.deployment.factory import (
    create_credential_store,
    create_orchestrator,
    create_price_optimizer,
)
from cloudbot.deployment.orchestrator import DeploymentOrchestrator
from cloudbot.deployment.store import InMemoryScenarioStore, ScenarioStore
from cloudbot.observability.logging import get_logger
from cloudbot.pricing.optimizer import PriceOptimizer

logger = get_logger(__name__)

_credential_store: CredentialStore | None = None
_scenario_store: ScenarioStore | None = None
_price_optimizer: PriceOptimizer | None = None
_orchestrator: DeploymentOrchestrator | None = None


def get_credential_store() -> CredentialStore:
    global _credential_store
    if _credential_store is None:
        _credential_store = create_credential_store(get_settings().credentials)
    return _credential_store


async def get_scenario_store() -> ScenarioStore:
    global _scenario_store
    if _scenario_store is None:
        _scenario_store = InMemoryScenarioStore()
        logger.info("scenario_store_initialized", store_type="inmemory")
    return _scenario_store


async def get_price_optimizer() -> PriceOptimizer:
    global _price_optimizer
    if _price_optimizer is None:
        _price_optimizer = create_price_optimizer(get_settings(), get_credential_store())
    return _price_optimizer


async def get_orchestrator() -> DeploymentOrchestrator:
    """Get the shared DeploymentOrchestrator.

    Shares the scenario store and price optimizer with the other routes so
    cached quotes and scenario records are seen by both.
    """
    global _orchestrator
    if _orchestrator is None:
        settings = get_settings()
        optimizer = await get_price_optimizer() if settings.deployment.use_optimizer else None
        _orchestrator = create_orchestrator(
            settings,
            store=await get_scenario_store(),
            credentials=get_credential_store(),
            optimizer=optimizer,
        )
    return _orchestrator


async def shutdown_dependencies() -> None:
    """Close HTTP clients and drop every shared instance."""
    global _credential_store, _scenario_store, _price_optimizer, _orchestrator
    if _price_optimizer is not None:
        await _price_optimizer.aclose()
    _credential_store = None
    _scenario_store = None
    _price_optimizer = None
    _orchestrator = None
    logger.info("dependencies_shutdown")


SettingsDep = Annotated[Settings, Depends(get_settings)]
ScenarioStoreDep = Annotated[ScenarioStore, Depends(get_scenario_store)]
PriceOptimizerDep = Annotated[PriceOptimizer, Depends(get_price_optimizer)]
OrchestratorDep = Annotated[DeploymentOrchestrator, Depends(get_orchestrator)]
