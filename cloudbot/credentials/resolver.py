"""Decide which secrets a template needs and build the engine environment.

Secrets always travel as environment variables of the engine process,
never as command-line arguments.
"""

from cloudbot.credentials.store import CredentialStore
from cloudbot.domain.credentials import CredentialAttribute, SecretField
from cloudbot.domain.templates import (
    AnyTemplateKind,
    RegionScopedProxy,
    StandardProvisioning,
    TaskExecutor,
    parse_template_ref,
)
from cloudbot.errors import AuthMissingError
from cloudbot.observability.logging import get_logger

logger = get_logger(__name__)

# Environment variables each provider's Terraform provider reads, plus the
# TF_VAR_ forms used by templates that declare credential variables.
_PROVIDER_FIELDS: dict[str, tuple[tuple[str, CredentialAttribute, bool], ...]] = {
    "aliyun": (
        ("ALICLOUD_ACCESS_KEY", "access_key", True),
        ("ALICLOUD_SECRET_KEY", "secret_key", True),
        ("ALICLOUD_REGION", "region", False),
    ),
    "tencent": (
        ("TENCENTCLOUD_SECRET_ID", "access_key", True),
        ("TENCENTCLOUD_SECRET_KEY", "secret_key", True),
        ("TF_VAR_tencentcloud_secret_id", "access_key", True),
        ("TF_VAR_tencentcloud_secret_key", "secret_key", True),
        ("TENCENTCLOUD_REGION", "region", False),
    ),
    "huaweicloud": (
        ("HW_ACCESS_KEY", "access_key", True),
        ("HW_SECRET_KEY", "secret_key", True),
        ("TF_VAR_access_key", "access_key", True),
        ("TF_VAR_secret_key", "secret_key", True),
        ("HW_REGION_NAME", "region", False),
    ),
    "aws": (
        ("AWS_ACCESS_KEY_ID", "access_key", True),
        ("AWS_SECRET_ACCESS_KEY", "secret_key", True),
        ("AWS_REGION", "region", False),
    ),
    "vultr": (("VULTR_API_KEY", "access_key", True),),
}

_PROXY_FIELDS: tuple[tuple[str, CredentialAttribute], ...] = (
    ("TF_VAR_access_key", "access_key"),
    ("TF_VAR_secret_key", "secret_key"),
)

_OBJECT_STORAGE_FIELDS: tuple[tuple[str, CredentialAttribute], ...] = (
    ("TF_VAR_oss_access_key_id", "access_key"),
    ("TF_VAR_oss_access_key_secret", "secret_key"),
)


class CredentialResolver:
    """Maps a TemplateKind to the secret fields its deploy needs.

    Total over inputs: an unknown provider yields no fields, and the engine
    reports its own missing-variable error if one was actually needed.
    """

    def __init__(self, store: CredentialStore, object_storage_provider: str = "aliyun") -> None:
        self._store = store
        self._object_storage_provider = object_storage_provider

    def required_secrets(self, template: AnyTemplateKind | str) -> frozenset[SecretField]:
        """Secret fields a deploy of ``template`` needs.

        Args:
            template: Parsed template kind, or a template reference to parse

        Returns:
            Fields to resolve; empty for providers with no known secrets
        """
        kind = parse_template_ref(template) if isinstance(template, str) else template
        fields = set(self._provider_fields(kind.provider))
        if not fields:
            return frozenset()

        # Proxy templates declare their own access_key/secret_key variables.
        is_proxy = isinstance(kind, RegionScopedProxy) or (
            isinstance(kind, StandardProvisioning) and kind.node_scaled
        )
        if is_proxy:
            fields.update(
                SecretField(env_var=var, provider=kind.provider, attribute=attr)
                for var, attr in _PROXY_FIELDS
            )
        elif isinstance(kind, TaskExecutor):
            fields.update(
                SecretField(env_var=var, provider=self._object_storage_provider, attribute=attr)
                for var, attr in _OBJECT_STORAGE_FIELDS
            )
        return frozenset(fields)

    def build_environment(self, fields: frozenset[SecretField]) -> dict[str, str]:
        """Fetch every field's value from the store.

        Args:
            fields: Secret fields to resolve

        Returns:
            Engine environment mapping each field's variable to its value;
            optional fields without a value are omitted

        Raises:
            AuthMissingError: A required field's provider has no credentials
        """
        env: dict[str, str] = {}
        for field in sorted(fields, key=lambda f: f.env_var):
            creds = self._store.get(field.provider)
            if creds is None:
                if field.required:
                    raise AuthMissingError(
                        f"No credentials configured for {field.provider}",
                        provider=field.provider,
                    )
                continue
            value = creds.value(field.attribute)
            if value:
                env[field.env_var] = value
            elif field.required:
                raise AuthMissingError(
                    f"Credential {field.attribute} missing for {field.provider}",
                    provider=field.provider,
                )

        logger.debug("credentials_resolved", variables=sorted(env))
        return env

    def resolve(self, template: AnyTemplateKind | str) -> dict[str, str]:
        """Required fields plus their values, in one call."""
        return self.build_environment(self.required_secrets(template))

    def default_region(self, provider: str) -> str | None:
        creds = self._store.get(provider)
        return creds.default_region if creds else None

    @staticmethod
    def _provider_fields(provider: str) -> list[SecretField]:
        return [
            SecretField(env_var=var, provider=provider, attribute=attr, required=required)
            for var, attr, required in _PROVIDER_FIELDS.get(provider, ())
        ]
