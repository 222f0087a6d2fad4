"""Credential source configuration."""

from typing import Literal

from pydantic import BaseModel, Field

CredentialBackend = Literal["environment", "inmemory"]


class CredentialsConfig(BaseModel):
    """Where provider credentials are read from."""

    backend: CredentialBackend = Field(default="environment")
    object_storage_provider: str = Field(
        default="aliyun",
        description="Provider whose keys back task executor object storage",
    )
