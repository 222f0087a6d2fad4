"""Credential stores.

The orchestrator and resolver receive a store at construction and only
read from it.
"""

import os
from abc import ABC, abstractmethod
from collections.abc import Mapping

from pydantic import SecretStr

from cloudbot.domain.credentials import CredentialSet


class CredentialStore(ABC):
    """Read-only lookup of provider credentials."""

    @abstractmethod
    def get(self, provider: str) -> CredentialSet | None:
        """Return credentials for a provider, or None when none are configured."""
        pass

    def has(self, provider: str) -> bool:
        return self.get(provider) is not None


class InMemoryCredentialStore(CredentialStore):
    """Dict-backed store for tests and embedding."""

    def __init__(self, credentials: Mapping[str, CredentialSet] | None = None) -> None:
        self._credentials: dict[str, CredentialSet] = {
            provider.lower(): creds for provider, creds in (credentials or {}).items()
        }

    def get(self, provider: str) -> CredentialSet | None:
        return self._credentials.get(provider.lower())

    def add(
        self,
        provider: str,
        access_key: str,
        secret_key: str,
        default_region: str | None = None,
    ) -> None:
        self._credentials[provider.lower()] = CredentialSet(
            access_key=SecretStr(access_key),
            secret_key=SecretStr(secret_key),
            default_region=default_region,
        )


# provider -> (access key var, secret key var, region var)
PROVIDER_ENV_VARS: dict[str, tuple[str, str, str | None]] = {
    "aliyun": ("ALICLOUD_ACCESS_KEY", "ALICLOUD_SECRET_KEY", "ALICLOUD_REGION"),
    "tencent": ("TENCENTCLOUD_SECRET_ID", "TENCENTCLOUD_SECRET_KEY", "TENCENTCLOUD_REGION"),
    "huaweicloud": ("HUAWEICLOUD_ACCESS_KEY", "HUAWEICLOUD_SECRET_KEY", "HUAWEICLOUD_REGION"),
    "aws": ("AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY", "AWS_REGION"),
    "vultr": ("VULTR_API_KEY", "VULTR_API_KEY", None),
}


class EnvironmentCredentialStore(CredentialStore):
    """Reads each provider's conventional environment variables."""

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = environ if environ is not None else os.environ

    def get(self, provider: str) -> CredentialSet | None:
        names = PROVIDER_ENV_VARS.get(provider.lower())
        if names is None:
            return None
        access_var, secret_var, region_var = names
        access_key = self._environ.get(access_var, "")
        secret_key = self._environ.get(secret_var, "")
        if not access_key or not secret_key:
            return None
        return CredentialSet(
            access_key=SecretStr(access_key),
            secret_key=SecretStr(secret_key),
            default_region=self._environ.get(region_var) if region_var else None,
        )
