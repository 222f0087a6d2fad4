"""Unit tests for CredentialResolver."""

import pytest

from cloudbot.credentials.resolver import CredentialResolver
from cloudbot.credentials.store import InMemoryCredentialStore
from cloudbot.domain.templates import RegionScopedProxy, StandardProvisioning, TaskExecutor
from cloudbot.errors import AuthMissingError


@pytest.fixture
def store() -> InMemoryCredentialStore:
    store = InMemoryCredentialStore()
    store.add("aliyun", "ali-ak", "ali-sk", default_region="cn-hangzhou")
    store.add("tencent", "tc-id", "tc-key")
    return store


@pytest.fixture
def resolver(store: InMemoryCredentialStore) -> CredentialResolver:
    return CredentialResolver(store)


def _vars(fields) -> set[str]:
    return {f.env_var for f in fields}


class TestRequiredSecrets:
    """Tests for required_secrets."""

    def test_standard_template_needs_provider_keys(self, resolver: CredentialResolver) -> None:
        fields = resolver.required_secrets(StandardProvisioning(provider="aliyun"))
        assert _vars(fields) == {"ALICLOUD_ACCESS_KEY", "ALICLOUD_SECRET_KEY", "ALICLOUD_REGION"}

    def test_region_is_optional(self, resolver: CredentialResolver) -> None:
        fields = resolver.required_secrets("aliyun/ecs")
        optional = {f.env_var for f in fields if not f.required}
        assert optional == {"ALICLOUD_REGION"}

    def test_proxy_template_adds_declared_credential_variables(
        self, resolver: CredentialResolver
    ) -> None:
        fields = resolver.required_secrets(
            RegionScopedProxy(provider="aliyun", region="cn-beijing")
        )
        assert {"TF_VAR_access_key", "TF_VAR_secret_key"} <= _vars(fields)

    def test_task_executor_adds_object_storage_keys(self, resolver: CredentialResolver) -> None:
        fields = resolver.required_secrets(TaskExecutor(provider="tencent"))
        storage = {f for f in fields if f.env_var.startswith("TF_VAR_oss_")}
        assert _vars(storage) == {"TF_VAR_oss_access_key_id", "TF_VAR_oss_access_key_secret"}
        assert {f.provider for f in storage} == {"aliyun"}

    def test_tencent_also_fills_tf_var_forms(self, resolver: CredentialResolver) -> None:
        fields = resolver.required_secrets("tencent/cvm")
        assert {"TF_VAR_tencentcloud_secret_id", "TF_VAR_tencentcloud_secret_key"} <= _vars(fields)

    def test_unknown_provider_yields_nothing(self, resolver: CredentialResolver) -> None:
        assert resolver.required_secrets("digitalocean/droplet") == frozenset()

    def test_same_input_same_output(self, resolver: CredentialResolver) -> None:
        ref = "aliyun/aliyun-proxy/zone-node/ss-libev-node-bj"
        assert resolver.required_secrets(ref) == resolver.required_secrets(ref)


class TestResolve:
    """Tests for resolve and build_environment."""

    def test_builds_environment(self, resolver: CredentialResolver) -> None:
        env = resolver.resolve("aliyun/ecs")
        assert env == {
            "ALICLOUD_ACCESS_KEY": "ali-ak",
            "ALICLOUD_SECRET_KEY": "ali-sk",
            "ALICLOUD_REGION": "cn-hangzhou",
        }

    def test_optional_region_skipped_when_unset(self, resolver: CredentialResolver) -> None:
        env = resolver.resolve("tencent/cvm")
        assert "TENCENTCLOUD_REGION" not in env
        assert env["TF_VAR_tencentcloud_secret_id"] == "tc-id"

    def test_missing_provider_credentials_raise(self, resolver: CredentialResolver) -> None:
        with pytest.raises(AuthMissingError) as exc_info:
            resolver.resolve("aws/ec2")
        assert exc_info.value.provider == "aws"

    def test_task_executor_needs_object_storage_provider(self) -> None:
        store = InMemoryCredentialStore()
        store.add("tencent", "tc-id", "tc-key")

        with pytest.raises(AuthMissingError) as exc_info:
            CredentialResolver(store).resolve("tencent/task-executor")
        assert exc_info.value.provider == "aliyun"

    def test_unknown_provider_resolves_to_empty_environment(
        self, resolver: CredentialResolver
    ) -> None:
        assert resolver.resolve("digitalocean/droplet") == {}

    def test_default_region(self, resolver: CredentialResolver) -> None:
        assert resolver.default_region("aliyun") == "cn-hangzhou"
        assert resolver.default_region("tencent") is None
        assert resolver.default_region("aws") is None
