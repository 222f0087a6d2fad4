"""Provisioning engine configuration."""

from pydantic import BaseModel, Field


class EngineConfig(BaseModel):
    """Terraform invocation settings."""

    exec_path: str = Field(default="terraform", description="Terraform executable")
    command_timeout_seconds: float = Field(
        default=1800.0,
        gt=0,
        description="Upper bound for one engine command",
    )
    termination_grace_seconds: float = Field(
        default=10.0,
        ge=0,
        description="Wait after SIGTERM before killing a cancelled command",
    )
    json_output: bool = Field(
        default=True,
        description="Request machine-readable diagnostics from plan/apply",
    )
