"""Capacity probe results."""

from pydantic import BaseModel, ConfigDict


class RegionAvailability(BaseModel):
    """Whether a region currently sells spot capacity for an instance type."""

    model_config = ConfigDict(frozen=True)

    region: str
    instance_type: str
    available: bool
