"""Scenario lifecycle: deploy with failover and fragmentation, destroy, inspect."""

from cloudbot.deployment.factory import (
    create_capacity_probe,
    create_credential_store,
    create_engine,
    create_orchestrator,
    create_price_optimizer,
    create_scenario_lock,
)
from cloudbot.deployment.fragmentation import (
    FragmentationStrategy,
    SpreadFragmentationStrategy,
    UnitFragmentationStrategy,
    create_fragmentation_strategy,
)
from cloudbot.deployment.locks import InMemoryScenarioLock, RedisScenarioLock, ScenarioLock
from cloudbot.deployment.models import (
    DeployResult,
    DestroyResult,
    RegionAttempt,
    ScenarioReport,
)
from cloudbot.deployment.orchestrator import DeploymentOrchestrator
from cloudbot.deployment.store import InMemoryScenarioStore, ScenarioStore
from cloudbot.deployment.workspace import FragmentWorkspaces, copy_template

__all__ = [
    "DeployResult",
    "DeploymentOrchestrator",
    "DestroyResult",
    "FragmentWorkspaces",
    "FragmentationStrategy",
    "InMemoryScenarioLock",
    "InMemoryScenarioStore",
    "RedisScenarioLock",
    "RegionAttempt",
    "ScenarioLock",
    "ScenarioReport",
    "ScenarioStore",
    "SpreadFragmentationStrategy",
    "UnitFragmentationStrategy",
    "copy_template",
    "create_capacity_probe",
    "create_credential_store",
    "create_engine",
    "create_fragmentation_strategy",
    "create_orchestrator",
    "create_price_optimizer",
    "create_scenario_lock",
]
