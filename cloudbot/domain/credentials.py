"""Credential value objects."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, SecretStr

CredentialAttribute = Literal["access_key", "secret_key", "region"]


class CredentialSet(BaseModel):
    """Access key pair for one provider."""

    model_config = ConfigDict(frozen=True)

    access_key: SecretStr
    secret_key: SecretStr
    default_region: str | None = None

    def value(self, attribute: CredentialAttribute) -> str | None:
        """Return the plain value of one attribute."""
        if attribute == "access_key":
            return self.access_key.get_secret_value()
        if attribute == "secret_key":
            return self.secret_key.get_secret_value()
        return self.default_region


class SecretField(BaseModel):
    """One environment variable that must be filled from a provider's credentials."""

    model_config = ConfigDict(frozen=True)

    env_var: str
    provider: str
    attribute: CredentialAttribute
    required: bool = True
