"""Provisioning engine boundary and implementations."""

from cloudbot.engine.base import ProvisioningEngine
from cloudbot.engine.classification import ErrorClassifier
from cloudbot.engine.mock import EngineCall, MockProvisioningEngine
from cloudbot.engine.terraform import TerraformEngine, parse_show_json

__all__ = [
    "EngineCall",
    "ErrorClassifier",
    "MockProvisioningEngine",
    "ProvisioningEngine",
    "TerraformEngine",
    "parse_show_json",
]
