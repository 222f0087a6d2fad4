"""Capacity probing configuration."""

from pydantic import BaseModel, Field


class CapacityConfig(BaseModel):
    """Spot capacity probe settings."""

    enabled: bool = Field(default=True, description="Probe capacity before deploying")
    max_in_flight: int = Field(default=5, ge=1, description="Maximum concurrent probes")
    probe_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Upper bound for a single region probe",
    )
    tccli_path: str = Field(default="tccli", description="Tencent Cloud CLI executable")
    instance_families: dict[str, str] = Field(
        default_factory=lambda: {"tencent": "S5"},
        description="Instance family probed per provider",
    )
