"""Domain models shared across cloudbot components."""

from cloudbot.domain.capacity import RegionAvailability
from cloudbot.domain.credentials import CredentialSet, SecretField
from cloudbot.domain.enums import (
    AttemptOutcome,
    DeployOutcome,
    EngineErrorKind,
    FailureKind,
    ScenarioStatus,
)
from cloudbot.domain.pricing import (
    HOURS_PER_MONTH,
    OptimalConfig,
    PriceComparison,
    PriceQuote,
    PriceRange,
)
from cloudbot.domain.resources import ResourceDetail
from cloudbot.domain.scenario import Placement, Scenario, create_scenario
from cloudbot.domain.templates import (
    AnyTemplateKind,
    RegionScopedProxy,
    StandardProvisioning,
    TaskExecutor,
    TemplateKind,
    parse_template_ref,
)

__all__ = [
    "AnyTemplateKind",
    "AttemptOutcome",
    "CredentialSet",
    "DeployOutcome",
    "EngineErrorKind",
    "FailureKind",
    "HOURS_PER_MONTH",
    "OptimalConfig",
    "Placement",
    "PriceComparison",
    "PriceQuote",
    "PriceRange",
    "RegionAvailability",
    "RegionScopedProxy",
    "ResourceDetail",
    "Scenario",
    "ScenarioStatus",
    "SecretField",
    "StandardProvisioning",
    "TaskExecutor",
    "TemplateKind",
    "create_scenario",
    "parse_template_ref",
]
