"""Deployment orchestration configuration."""

from typing import Literal

from pydantic import BaseModel, Field

LockBackend = Literal["inmemory", "redis"]
FragmentExecution = Literal["sequential", "parallel"]


class LockConfig(BaseModel):
    """Per-scenario lock settings."""

    backend: LockBackend = Field(default="inmemory", description="Lock backend")
    redis_url: str = Field(default="redis://localhost:6379/0", description="Redis URL")
    lock_timeout_seconds: float = Field(
        default=3600.0,
        gt=0,
        description="Lock expiry so a crashed holder cannot wedge a scenario",
    )


class DeploymentConfig(BaseModel):
    """Failover and fragmentation settings."""

    working_root: str = Field(
        default="~/.cloudbot/scenarios",
        description="Directory holding scenario working directories",
    )
    template_root: str | None = Field(
        default=None,
        description="Directory of template trees copied into new scenarios",
    )
    regions: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Failover candidates per provider; falls back to pricing defaults",
    )
    fragment_strategy: str = Field(default="unit", description="Fragmentation strategy name")
    fragment_size: int = Field(default=1, ge=1, description="Nodes per fragment")
    fragment_execution: FragmentExecution = Field(
        default="sequential",
        description="Place fragments one at a time or concurrently",
    )
    max_parallel_fragments: int = Field(default=3, ge=1)
    verify_state: bool = Field(
        default=True,
        description="List engine state after a successful deploy",
    )
    use_optimizer: bool = Field(
        default=True,
        description="Move the cheapest region to the front of the candidates",
    )
    tool_oss_bucket: str = Field(
        default="aliyuncloudtools",
        description="Object storage bucket handed to task executor templates",
    )
    quota_markers: list[str] = Field(
        default_factory=lambda: [
            "LimitExceeded.SpotQuota",
            "配额不足",
            "QuotaExceeded",
            "InsufficientInstanceCapacity",
            "OperationDenied.NoStock",
            "ResourceInsufficient",
            "InstanceLimitExceeded",
        ],
        description="Substrings that mark an engine failure as quota/capacity",
    )
    auth_markers: list[str] = Field(
        default_factory=lambda: [
            "InvalidAccessKeyId",
            "SignatureDoesNotMatch",
            "AuthFailure",
            "InvalidClientTokenId",
            "Forbidden.RAM",
        ],
        description="Substrings that mark an engine failure as an auth problem",
    )
    lock: LockConfig = Field(default_factory=LockConfig)
