"""Unit tests for the deployment factory functions."""

from pathlib import Path

import pytest

from cloudbot.config.models.credentials import CredentialsConfig
from cloudbot.config.models.deployment import LockConfig
from cloudbot.config.settings import Settings
from cloudbot.credentials.store import EnvironmentCredentialStore, InMemoryCredentialStore
from cloudbot.deployment.factory import (
    create_capacity_probe,
    create_credential_store,
    create_engine,
    create_orchestrator,
    create_price_optimizer,
    create_scenario_lock,
)
from cloudbot.deployment.locks import InMemoryScenarioLock, RedisScenarioLock
from cloudbot.deployment.store import InMemoryScenarioStore
from cloudbot.domain.enums import DeployOutcome
from cloudbot.domain.scenario import create_scenario
from cloudbot.engine.mock import MockProvisioningEngine
from cloudbot.engine.terraform import TerraformEngine


class TestCreateCredentialStore:
    """Tests for create_credential_store."""

    def test_environment_backend(self) -> None:
        store = create_credential_store(CredentialsConfig(backend="environment"))
        assert isinstance(store, EnvironmentCredentialStore)

    def test_inmemory_backend(self) -> None:
        store = create_credential_store(CredentialsConfig(backend="inmemory"))
        assert isinstance(store, InMemoryCredentialStore)


class TestCreateScenarioLock:
    """Tests for create_scenario_lock."""

    def test_inmemory_backend(self) -> None:
        assert isinstance(create_scenario_lock(LockConfig()), InMemoryScenarioLock)

    def test_redis_backend(self) -> None:
        lock = create_scenario_lock(
            LockConfig(backend="redis", redis_url="redis://localhost:6379/3")
        )
        assert isinstance(lock, RedisScenarioLock)


class TestCreatePriceOptimizer:
    """Tests for create_price_optimizer."""

    def test_live_and_static_clients(self) -> None:
        settings = Settings(
            pricing={
                "static_prices": [
                    {
                        "provider": "tencent",
                        "region": "ap-shanghai",
                        "instance_type": "S5.SMALL1",
                        "price_per_hour": 0.12,
                    }
                ]
            }
        )

        optimizer = create_price_optimizer(settings, InMemoryCredentialStore())

        assert optimizer.providers == ["aliyun", "tencent", "vultr"]

    def test_uses_provider_defaults(self) -> None:
        optimizer = create_price_optimizer(Settings(), InMemoryCredentialStore())
        pairs = optimizer.candidates("aliyun")
        assert ("ecs.t5-lc1m1.small", "cn-beijing") in pairs


class TestCreateCapacityProbe:
    """Tests for create_capacity_probe."""

    def test_disabled(self) -> None:
        settings = Settings(capacity={"enabled": False})
        assert create_capacity_probe(settings, InMemoryCredentialStore()) is None

    def test_enabled_supports_tencent(self) -> None:
        probe = create_capacity_probe(Settings(), InMemoryCredentialStore())
        assert probe is not None
        assert probe.supports("tencent")
        assert not probe.supports("aliyun")


class TestCreateEngine:
    """Tests for create_engine."""

    def test_builds_terraform_engine(self) -> None:
        assert isinstance(create_engine(Settings()), TerraformEngine)


class TestCreateOrchestrator:
    """Tests for create_orchestrator."""

    @pytest.mark.asyncio
    async def test_configured_regions_drive_failover(self, tmp_path: Path) -> None:
        settings = Settings(
            capacity={"enabled": False},
            deployment={
                "use_optimizer": False,
                "regions": {"aliyun": ["cn-qingdao", "cn-chengdu"]},
            },
        )
        credentials = InMemoryCredentialStore()
        credentials.add("aliyun", "ak", "sk")
        engine = MockProvisioningEngine(capacity={"cn-qingdao": 0})
        store = InMemoryScenarioStore()
        scenario = create_scenario("aliyun/ecs", tmp_path)
        await store.save(scenario)

        orchestrator = create_orchestrator(
            settings, engine=engine, store=store, credentials=credentials
        )
        result = await orchestrator.deploy(scenario.id)

        assert result.outcome == DeployOutcome.DEPLOYED
        assert result.attempted_regions == ["cn-qingdao", "cn-chengdu"]

    @pytest.mark.asyncio
    async def test_pricing_defaults_are_candidates(self, tmp_path: Path) -> None:
        settings = Settings(capacity={"enabled": False}, deployment={"use_optimizer": False})
        credentials = InMemoryCredentialStore()
        credentials.add("tencent", "id", "key")
        engine = MockProvisioningEngine(default_capacity=0)
        store = InMemoryScenarioStore()
        scenario = create_scenario("tencent/cvm", tmp_path)
        await store.save(scenario)

        orchestrator = create_orchestrator(
            settings, engine=engine, store=store, credentials=credentials
        )
        result = await orchestrator.deploy(scenario.id)

        assert result.outcome == DeployOutcome.FAILED
        assert result.attempted_regions == [
            "ap-shanghai",
            "ap-nanjing",
            "ap-guangzhou",
            "ap-beijing",
            "ap-chengdu",
            "ap-chongqing",
        ]

    def test_unknown_fragment_strategy(self) -> None:
        settings = Settings(deployment={"fragment_strategy": "random"})
        with pytest.raises(ValueError):
            create_orchestrator(settings, engine=MockProvisioningEngine())
