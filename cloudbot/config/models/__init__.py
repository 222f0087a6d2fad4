"""Configuration model exports.

    from cloudbot.config.models import PricingConfig, DeploymentConfig
"""

from cloudbot.config.models.api import APIConfig
from cloudbot.config.models.capacity import CapacityConfig
from cloudbot.config.models.credentials import CredentialsConfig
from cloudbot.config.models.deployment import DeploymentConfig, LockConfig
from cloudbot.config.models.engine import EngineConfig
from cloudbot.config.models.observability import (
    LoggingConfig,
    MetricsConfig,
    ObservabilityConfig,
)
from cloudbot.config.models.pricing import PricingConfig, ProviderDefaults, StaticPrice

__all__ = [
    "APIConfig",
    "CapacityConfig",
    "CredentialsConfig",
    "DeploymentConfig",
    "EngineConfig",
    "LockConfig",
    "LoggingConfig",
    "MetricsConfig",
    "ObservabilityConfig",
    "PricingConfig",
    "ProviderDefaults",
    "StaticPrice",
]
