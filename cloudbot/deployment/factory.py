"""Build the deployment stack from settings.

Connection details come from TOML/env settings. Cloud secrets are read by
the credential store, from the process environment by default.
"""

from redis.asyncio import Redis

from cloudbot.capacity.probe import CapacityProbe
from cloudbot.capacity.tencent import TencentSpotSignal
from cloudbot.config.models.credentials import CredentialsConfig
from cloudbot.config.models.deployment import LockConfig
from cloudbot.config.settings import Settings
from cloudbot.credentials.resolver import CredentialResolver
from cloudbot.credentials.store import (
    CredentialStore,
    EnvironmentCredentialStore,
    InMemoryCredentialStore,
)
from cloudbot.deployment.fragmentation import create_fragmentation_strategy
from cloudbot.deployment.locks import InMemoryScenarioLock, RedisScenarioLock, ScenarioLock
from cloudbot.deployment.orchestrator import DeploymentOrchestrator
from cloudbot.deployment.store import InMemoryScenarioStore, ScenarioStore
from cloudbot.engine.base import ProvisioningEngine
from cloudbot.engine.classification import ErrorClassifier
from cloudbot.engine.terraform import TerraformEngine
from cloudbot.observability.logging import get_logger
from cloudbot.pricing.aliyun import AliyunPriceClient
from cloudbot.pricing.base import PriceQuoteClient
from cloudbot.pricing.cache import QuoteCache
from cloudbot.pricing.currency import CurrencyConverter
from cloudbot.pricing.optimizer import PriceOptimizer
from cloudbot.pricing.static import StaticPriceClient
from cloudbot.pricing.vultr import VultrPriceClient
from cloudbot.utils.fanout import BoundedFanOut

logger = get_logger(__name__)


def create_credential_store(config: CredentialsConfig) -> CredentialStore:
    """Create the credential store named by ``config.backend``.

    Raises:
        ValueError: If the backend is not supported
    """
    if config.backend == "environment":
        logger.info("creating_credential_store", backend="environment")
        return EnvironmentCredentialStore()
    if config.backend == "inmemory":
        logger.info("creating_credential_store", backend="inmemory")
        return InMemoryCredentialStore()
    raise ValueError(f"Unsupported credential backend: {config.backend}")


def create_scenario_lock(config: LockConfig) -> ScenarioLock:
    """Create the per-scenario lock named by ``config.backend``.

    Raises:
        ValueError: If the backend is not supported
    """
    if config.backend == "inmemory":
        logger.info("creating_scenario_lock", backend="inmemory")
        return InMemoryScenarioLock()
    if config.backend == "redis":
        logger.info(
            "creating_scenario_lock",
            backend="redis",
            url=config.redis_url.split("@")[-1],
        )
        client = Redis.from_url(config.redis_url, decode_responses=True)
        return RedisScenarioLock(client, lock_timeout=config.lock_timeout_seconds)
    raise ValueError(f"Unsupported lock backend: {config.backend}")


def create_price_optimizer(settings: Settings, credentials: CredentialStore) -> PriceOptimizer:
    """Wire live and static quote clients into a PriceOptimizer.

    Aliyun and Vultr get live clients. Any provider with rows in
    ``pricing.static_prices`` and no live client is served from the table.
    """
    pricing = settings.pricing
    clients: dict[str, PriceQuoteClient] = {
        "aliyun": AliyunPriceClient(
            credentials,
            endpoint=pricing.aliyun_endpoint,
            timeout=pricing.quote_timeout_seconds,
        ),
        "vultr": VultrPriceClient(
            base_url=pricing.vultr_endpoint,
            timeout=pricing.quote_timeout_seconds,
        ),
    }
    for provider in sorted({p.provider for p in pricing.static_prices}):
        clients.setdefault(provider, StaticPriceClient(provider, pricing.static_prices))

    logger.info("creating_price_optimizer", providers=sorted(clients))
    return PriceOptimizer(
        clients,
        converter=CurrencyConverter(
            pricing.conversion_rates,
            reference=pricing.reference_currency,
        ),
        defaults=pricing.defaults,
        fanout=BoundedFanOut(
            max_in_flight=pricing.max_in_flight,
            timeout=pricing.quote_timeout_seconds,
        ),
        cache=QuoteCache(ttl_seconds=pricing.cache_ttl_seconds),
    )


def create_capacity_probe(settings: Settings, credentials: CredentialStore) -> CapacityProbe | None:
    """Capacity probe over every provider with a signal, or None when disabled."""
    capacity = settings.capacity
    if not capacity.enabled:
        logger.info("capacity_probe_disabled")
        return None
    return CapacityProbe(
        {"tencent": TencentSpotSignal(credentials, tccli_path=capacity.tccli_path)},
        fanout=BoundedFanOut(
            max_in_flight=capacity.max_in_flight,
            timeout=capacity.probe_timeout_seconds,
        ),
    )


def create_engine(settings: Settings) -> ProvisioningEngine:
    deployment = settings.deployment
    engine = settings.engine
    return TerraformEngine(
        exec_path=engine.exec_path,
        classifier=ErrorClassifier(
            quota_markers=deployment.quota_markers,
            auth_markers=deployment.auth_markers,
        ),
        command_timeout=engine.command_timeout_seconds,
        termination_grace=engine.termination_grace_seconds,
        json_output=engine.json_output,
    )


def create_orchestrator(
    settings: Settings,
    *,
    engine: ProvisioningEngine | None = None,
    store: ScenarioStore | None = None,
    credentials: CredentialStore | None = None,
    optimizer: PriceOptimizer | None = None,
) -> DeploymentOrchestrator:
    """Create a DeploymentOrchestrator configured from settings.

    Any collaborator passed explicitly replaces the one settings would build.

    Args:
        settings: Application settings
        engine: Provisioning engine override
        store: Scenario store override
        credentials: Credential store override
        optimizer: Price optimizer override

    Returns:
        Configured DeploymentOrchestrator
    """
    deployment = settings.deployment
    credentials = credentials or create_credential_store(settings.credentials)

    if optimizer is None and deployment.use_optimizer:
        optimizer = create_price_optimizer(settings, credentials)

    if deployment.fragment_strategy == "unit":
        fragmentation = create_fragmentation_strategy("unit", unit=deployment.fragment_size)
    else:
        fragmentation = create_fragmentation_strategy(deployment.fragment_strategy)

    candidate_regions = {
        provider: list(defaults.regions)
        for provider, defaults in settings.pricing.defaults.items()
    }
    candidate_regions.update(deployment.regions)

    max_parallel = (
        deployment.max_parallel_fragments if deployment.fragment_execution == "parallel" else 1
    )

    logger.info(
        "creating_orchestrator",
        fragment_strategy=fragmentation.name,
        fragment_execution=deployment.fragment_execution,
        lock_backend=deployment.lock.backend,
        optimizer=optimizer is not None,
    )

    return DeploymentOrchestrator(
        store or InMemoryScenarioStore(),
        engine or create_engine(settings),
        CredentialResolver(
            credentials,
            object_storage_provider=settings.credentials.object_storage_provider,
        ),
        optimizer=optimizer,
        probe=create_capacity_probe(settings, credentials),
        lock=create_scenario_lock(deployment.lock),
        fragmentation=fragmentation,
        candidate_regions=candidate_regions,
        instance_families=settings.capacity.instance_families,
        max_parallel_fragments=max_parallel,
        verify_state=deployment.verify_state,
        tool_oss_bucket=deployment.tool_oss_bucket,
    )
