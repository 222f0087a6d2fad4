"""Provisioned resource details reported by the engine."""

from pydantic import BaseModel, Field


class ResourceDetail(BaseModel):
    """One instance-like resource in engine state."""

    address: str
    id: str = ""
    region: str = ""
    kind: str = ""
    instance_type: str = ""
    status: str = ""
    public_ips: list[str] = Field(default_factory=list)
    private_ips: list[str] = Field(default_factory=list)
