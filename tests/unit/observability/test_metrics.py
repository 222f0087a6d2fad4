"""Tests for Prometheus metrics."""

from pathlib import Path

import pytest
from prometheus_client import REGISTRY

from cloudbot.credentials.resolver import CredentialResolver
from cloudbot.credentials.store import InMemoryCredentialStore
from cloudbot.deployment.orchestrator import DeploymentOrchestrator
from cloudbot.deployment.store import InMemoryScenarioStore
from cloudbot.domain.scenario import create_scenario
from cloudbot.engine.mock import MockProvisioningEngine
from cloudbot.observability.metrics import (
    CAPACITY_PROBES,
    DEPLOYMENTS,
    ENGINE_COMMAND_LATENCY,
    ENGINE_ERRORS,
    FRAGMENTS_PLACED,
    PRICE_CACHE_HITS,
    PRICE_QUOTE_LATENCY,
    PRICE_QUOTES,
    REGION_FAILOVERS,
)


def _sample(name: str, **labels: str) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


class TestMetricDefinitions:
    """Every metric is registered and accepts its labels."""

    def test_counters_accept_labels(self) -> None:
        PRICE_QUOTES.labels(provider="mock", outcome="ok").inc()
        PRICE_CACHE_HITS.labels(provider="mock").inc()
        CAPACITY_PROBES.labels(provider="mock", result="available").inc()
        ENGINE_ERRORS.labels(command="apply", kind="other").inc()
        DEPLOYMENTS.labels(provider="mock", outcome="deployed").inc()
        REGION_FAILOVERS.labels(provider="mock").inc()
        FRAGMENTS_PLACED.labels(provider="mock").inc()

    def test_histograms_accept_labels(self) -> None:
        PRICE_QUOTE_LATENCY.labels(provider="mock").observe(0.2)
        ENGINE_COMMAND_LATENCY.labels(command="plan").observe(12.0)


class TestDeploymentMetrics:
    """Deploys record outcome, failover and fragment counts."""

    @pytest.mark.asyncio
    async def test_fragmented_deploy_updates_counters(self, tmp_path: Path) -> None:
        credentials = InMemoryCredentialStore()
        credentials.add("metricscloud", "ak", "sk")
        store = InMemoryScenarioStore()
        scenario = create_scenario("metricscloud/node-proxy", tmp_path)
        await store.save(scenario)
        engine = MockProvisioningEngine(capacity={"m1": 1, "m2": 1})
        orchestrator = DeploymentOrchestrator(
            store,
            engine,
            CredentialResolver(credentials),
            candidate_regions={"metricscloud": ["m1", "m2"]},
        )

        deployed = _sample(
            "cloudbot_deployments_total", provider="metricscloud", outcome="deployed"
        )
        failovers = _sample("cloudbot_region_failovers_total", provider="metricscloud")
        fragments = _sample("cloudbot_fragments_placed_total", provider="metricscloud")

        await orchestrator.deploy(scenario.id, node_count=2)

        assert _sample(
            "cloudbot_deployments_total", provider="metricscloud", outcome="deployed"
        ) == deployed + 1
        assert _sample(
            "cloudbot_region_failovers_total", provider="metricscloud"
        ) == failovers + 1
        assert _sample(
            "cloudbot_fragments_placed_total", provider="metricscloud"
        ) == fragments + 2
