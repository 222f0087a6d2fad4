"""Unit tests for credential stores."""

from cloudbot.credentials.store import EnvironmentCredentialStore, InMemoryCredentialStore


class TestInMemoryCredentialStore:
    """Tests for InMemoryCredentialStore."""

    def test_add_and_get(self) -> None:
        store = InMemoryCredentialStore()
        store.add("Aliyun", "ak", "sk", default_region="cn-beijing")

        creds = store.get("aliyun")
        assert creds is not None
        assert creds.value("access_key") == "ak"
        assert creds.value("secret_key") == "sk"
        assert creds.value("region") == "cn-beijing"
        assert store.has("ALIYUN")

    def test_missing_provider(self) -> None:
        assert InMemoryCredentialStore().get("aws") is None

    def test_secrets_hidden_in_repr(self) -> None:
        store = InMemoryCredentialStore()
        store.add("aws", "AKIAEXAMPLE", "very-secret")
        assert "very-secret" not in repr(store.get("aws"))


class TestEnvironmentCredentialStore:
    """Tests for EnvironmentCredentialStore."""

    def test_reads_provider_variables(self) -> None:
        store = EnvironmentCredentialStore(
            {
                "ALICLOUD_ACCESS_KEY": "ak",
                "ALICLOUD_SECRET_KEY": "sk",
                "ALICLOUD_REGION": "cn-shanghai",
            }
        )
        creds = store.get("aliyun")
        assert creds is not None
        assert creds.default_region == "cn-shanghai"

    def test_requires_both_keys(self) -> None:
        store = EnvironmentCredentialStore({"AWS_ACCESS_KEY_ID": "ak"})
        assert store.get("aws") is None

    def test_single_token_provider(self) -> None:
        store = EnvironmentCredentialStore({"VULTR_API_KEY": "token"})
        creds = store.get("vultr")
        assert creds is not None
        assert creds.value("access_key") == "token"

    def test_unknown_provider(self) -> None:
        assert EnvironmentCredentialStore({}).get("digitalocean") is None
