"""Scenario deploy/destroy with region failover and multi-region fragmentation.

Deploy walks an ordered list of candidate regions one at a time. Quota or
capacity errors move on to the next region; any other engine error stops
the deploy. When more than one node is requested and a region runs out of
quota, the request is split into fragments that are placed in distinct
regions, each from its own working directory.
"""

import asyncio
from collections.abc import Mapping, Sequence
from pathlib import Path
from uuid import UUID

from cloudbot.capacity.probe import CapacityProbe, order_candidates
from cloudbot.credentials.resolver import CredentialResolver
from cloudbot.deployment.fragmentation import (
    FragmentationStrategy,
    UnitFragmentationStrategy,
)
from cloudbot.deployment.locks import InMemoryScenarioLock, ScenarioLock
from cloudbot.deployment.models import (
    DeployResult,
    DestroyResult,
    RegionAttempt,
    ScenarioReport,
)
from cloudbot.deployment.store import ScenarioStore
from cloudbot.deployment.workspace import FragmentWorkspaces
from cloudbot.domain.capacity import RegionAvailability
from cloudbot.domain.enums import (
    AttemptOutcome,
    DeployOutcome,
    FailureKind,
    ScenarioStatus,
)
from cloudbot.domain.pricing import OptimalConfig
from cloudbot.domain.scenario import Placement, Scenario
from cloudbot.domain.templates import RegionScopedProxy, TaskExecutor
from cloudbot.engine.base import ProvisioningEngine
from cloudbot.engine.terraform import SENSITIVE_VARIABLE
from cloudbot.errors import (
    AuthMissingError,
    CloudbotError,
    EngineError,
    InvalidTransitionError,
    ScenarioNotFoundError,
)
from cloudbot.observability.logging import get_logger
from cloudbot.observability.metrics import (
    DEPLOYMENTS,
    FRAGMENTS_PLACED,
    REGION_FAILOVERS,
)
from cloudbot.pricing.optimizer import PriceOptimizer

logger = get_logger(__name__)


def _storable(variables: Mapping[str, str]) -> dict[str, str]:
    """Variables safe to persist on the scenario record."""
    return {k: v for k, v in variables.items() if not SENSITIVE_VARIABLE.search(k)}


class DeploymentOrchestrator:
    """Owns the scenario lifecycle: pending -> deployed -> destroyed.

    A failed or partial deploy leaves the scenario pending. Only one
    deploy or destroy runs per scenario at a time.
    """

    def __init__(
        self,
        store: ScenarioStore,
        engine: ProvisioningEngine,
        resolver: CredentialResolver,
        *,
        optimizer: PriceOptimizer | None = None,
        probe: CapacityProbe | None = None,
        lock: ScenarioLock | None = None,
        fragmentation: FragmentationStrategy | None = None,
        workspaces: FragmentWorkspaces | None = None,
        candidate_regions: Mapping[str, Sequence[str]] | None = None,
        instance_families: Mapping[str, str] | None = None,
        max_parallel_fragments: int = 1,
        verify_state: bool = True,
        tool_oss_bucket: str = "aliyuncloudtools",
    ) -> None:
        self._store = store
        self._engine = engine
        self._resolver = resolver
        self._optimizer = optimizer
        self._probe = probe
        self._lock = lock or InMemoryScenarioLock()
        self._fragmentation = fragmentation or UnitFragmentationStrategy()
        self._workspaces = workspaces or FragmentWorkspaces()
        self._candidate_regions = {k: list(v) for k, v in (candidate_regions or {}).items()}
        self._instance_families = dict(instance_families or {})
        self._max_parallel_fragments = max(1, max_parallel_fragments)
        self._verify_state = verify_state
        self._tool_oss_bucket = tool_oss_bucket

    # =========================================================================
    # Deploy
    # =========================================================================

    async def deploy(
        self,
        scenario_id: UUID,
        node_count: int = 1,
        region: str | None = None,
        *,
        auto_approve: bool = True,
        variables: Mapping[str, str] | None = None,
        instance_types: Sequence[str] | None = None,
    ) -> DeployResult:
        """Provision a pending scenario.

        Classified engine failures come back as a DeployResult, never as an
        exception.

        Args:
            scenario_id: Scenario to provision
            node_count: Nodes requested; above 1 only for node-scaled templates
            region: Preferred region, tried first
            auto_approve: Pass -auto-approve to apply
            variables: Extra template variables
            instance_types: Candidate instance types for the price optimizer

        Returns:
            The outcome with every region attempt and the placements made

        Raises:
            ValueError: node_count is below 1, or above 1 for a template
                that does not scale by node count
            ScenarioNotFoundError: Unknown scenario id
            InvalidTransitionError: Scenario is not pending, or still holds
                fragments from a partial deploy
            ScenarioBusyError: Another operation holds the scenario
        """
        if node_count < 1:
            raise ValueError(f"node_count must be at least 1, got {node_count}")

        async with self._lock.hold(scenario_id):
            scenario = await self._load(scenario_id)
            if scenario.status != ScenarioStatus.PENDING:
                raise InvalidTransitionError(
                    f"Cannot deploy scenario {scenario_id} from status {scenario.status.value}"
                )
            if scenario.placements:
                raise InvalidTransitionError(
                    f"Scenario {scenario_id} holds {scenario.placed_nodes} nodes from a partial "
                    "deploy; release them before deploying again"
                )
            if node_count > 1 and not scenario.template_kind.node_scaled:
                raise ValueError(
                    f"Template {scenario.template_ref} provisions a fixed topology; "
                    f"node_count must be 1, got {node_count}"
                )

            logger.info(
                "deploy_started",
                scenario_id=str(scenario_id),
                template=scenario.template_ref,
                node_count=node_count,
                region=region,
            )

            try:
                env = self._resolver.resolve(scenario.template_kind)
            except AuthMissingError as e:
                logger.error("deploy_auth_missing", scenario_id=str(scenario_id), error=str(e))
                result = DeployResult(
                    scenario_id=scenario_id,
                    outcome=DeployOutcome.FAILED,
                    requested_nodes=node_count,
                    failure=FailureKind.AUTH_MISSING,
                    message=str(e),
                )
                DEPLOYMENTS.labels(provider=scenario.provider, outcome=result.outcome.value).inc()
                return result

            base_variables = self._base_variables(scenario, variables)
            candidates, selected = await self._candidates(scenario, region, instance_types)
            base_variables.update(selected)

            if not candidates:
                result = DeployResult(
                    scenario_id=scenario_id,
                    outcome=DeployOutcome.FAILED,
                    requested_nodes=node_count,
                    failure=FailureKind.NO_CANDIDATES,
                    message=f"No candidate regions for provider {scenario.provider}",
                )
            else:
                result = await self._failover(
                    scenario, candidates, node_count, base_variables, env, auto_approve
                )

            await self._record(scenario, result, base_variables, env)
            return result

    def _base_variables(
        self,
        scenario: Scenario,
        variables: Mapping[str, str] | None,
    ) -> dict[str, str]:
        merged = {k: str(v) for k, v in (variables or {}).items()}
        merged.pop("region", None)
        merged.pop("node_count", None)
        if isinstance(scenario.template_kind, TaskExecutor):
            merged.setdefault("project_name", scenario.project)
            merged.setdefault("scenario_id", str(scenario.id))
            merged.setdefault("tool_oss_bucket", self._tool_oss_bucket)
        return merged

    async def _candidates(
        self,
        scenario: Scenario,
        requested: str | None,
        instance_types: Sequence[str] | None,
    ) -> tuple[list[str], dict[str, str]]:
        """Ordered regions to try, plus variables picked by the optimizer."""
        kind = scenario.template_kind
        fixed = kind.region if isinstance(kind, RegionScopedProxy) else scenario.region
        if fixed:
            if requested and requested != fixed:
                logger.warning(
                    "region_conflict",
                    scenario_id=str(scenario.id),
                    requested=requested,
                    fixed=fixed,
                )
            return [fixed], {}

        provider = scenario.provider
        regions = list(dict.fromkeys(self._candidate_regions.get(provider, [])))
        preferred = requested or self._resolver.default_region(provider)
        if preferred:
            regions = [preferred, *(r for r in regions if r != preferred)]
        if not regions:
            return [], {}

        availability, optimal = await asyncio.gather(
            self._probe_capacity(provider, regions),
            self._cheapest(scenario, regions, instance_types),
        )

        ordered = order_candidates(regions, availability)
        if requested and requested not in ordered:
            ordered.insert(0, requested)

        selected: dict[str, str] = {}
        if optimal is not None and optimal.region in ordered:
            ordered.remove(optimal.region)
            position = 1 if requested and requested != optimal.region else 0
            ordered.insert(position, optimal.region)
            if instance_types:
                selected["instance_type"] = optimal.instance_type

        logger.info("deploy_candidates", scenario_id=str(scenario.id), regions=ordered)
        return ordered, selected

    async def _probe_capacity(self, provider: str, regions: list[str]) -> set[RegionAvailability]:
        family = self._instance_families.get(provider)
        if self._probe is None or family is None or not self._probe.supports(provider):
            return set()
        return await self._probe.find_available_regions(provider, family, regions)

    async def _cheapest(
        self,
        scenario: Scenario,
        regions: list[str],
        instance_types: Sequence[str] | None,
    ) -> OptimalConfig | None:
        if self._optimizer is None or scenario.provider not in self._optimizer.providers:
            return None
        try:
            return await self._optimizer.find_optimal_cached(
                scenario.provider,
                scenario.template_ref,
                instance_types,
                regions,
            )
        except CloudbotError as e:
            logger.warning(
                "optimizer_unavailable",
                scenario_id=str(scenario.id),
                error=str(e),
            )
            return None

    async def _failover(
        self,
        scenario: Scenario,
        candidates: list[str],
        node_count: int,
        variables: dict[str, str],
        env: dict[str, str],
        auto_approve: bool,
    ) -> DeployResult:
        attempts: list[RegionAttempt] = []
        for region in candidates:
            attempt = await self._attempt(
                scenario,
                scenario.working_directory,
                region,
                node_count,
                variables,
                env,
                auto_approve,
            )
            attempts.append(attempt)

            if attempt.outcome == AttemptOutcome.PLACED:
                placement = Placement(
                    region=region,
                    node_count=node_count,
                    working_directory=scenario.working_directory,
                )
                return DeployResult(
                    scenario_id=scenario.id,
                    outcome=DeployOutcome.DEPLOYED,
                    requested_nodes=node_count,
                    placed_nodes=node_count,
                    placements=[placement],
                    attempts=attempts,
                )

            if attempt.outcome == AttemptOutcome.FAILED:
                return DeployResult(
                    scenario_id=scenario.id,
                    outcome=DeployOutcome.FAILED,
                    requested_nodes=node_count,
                    attempts=attempts,
                    failure=FailureKind.ENGINE_FAILURE,
                    message=attempt.message,
                )

            REGION_FAILOVERS.labels(provider=scenario.provider).inc()
            if node_count > 1:
                return await self._fragment(
                    scenario, candidates, node_count, variables, env, auto_approve, attempts
                )

        return DeployResult(
            scenario_id=scenario.id,
            outcome=DeployOutcome.FAILED,
            requested_nodes=node_count,
            attempts=attempts,
            failure=FailureKind.QUOTA_EXHAUSTED,
        )

    async def _fragment(
        self,
        scenario: Scenario,
        candidates: list[str],
        node_count: int,
        variables: dict[str, str],
        env: dict[str, str],
        auto_approve: bool,
        attempts: list[RegionAttempt],
    ) -> DeployResult:
        """Place ``node_count`` nodes as fragments across distinct regions.

        Fragments run in waves of ``max_parallel_fragments``; a wave of one
        is strictly sequential.
        """
        logger.info(
            "fragmentation_started",
            scenario_id=str(scenario.id),
            node_count=node_count,
            strategy=self._fragmentation.name,
            candidates=len(candidates),
        )

        placements: list[Placement] = []
        remaining = node_count
        index = 0
        while remaining > 0 and index < len(candidates):
            wave: list[tuple[str, int]] = []
            budget = remaining
            while (
                budget > 0
                and index < len(candidates)
                and len(wave) < self._max_parallel_fragments
            ):
                size = self._fragmentation.fragment_size(budget, len(candidates) - index)
                size = min(size, budget)
                wave.append((candidates[index], size))
                budget -= size
                index += 1

            outcomes = await asyncio.gather(*(
                self._place_fragment(scenario, region, size, variables, env, auto_approve)
                for region, size in wave
            ))

            failed: RegionAttempt | None = None
            for attempt, workdir in outcomes:
                attempts.append(attempt)
                if attempt.outcome == AttemptOutcome.PLACED:
                    placements.append(
                        Placement(
                            region=attempt.region,
                            node_count=attempt.node_count,
                            working_directory=workdir,
                            fragment=True,
                        )
                    )
                    remaining -= attempt.node_count
                    FRAGMENTS_PLACED.labels(provider=scenario.provider).inc()
                elif attempt.outcome == AttemptOutcome.FAILED and failed is None:
                    failed = attempt

            if failed is not None:
                return self._fragment_result(
                    scenario,
                    node_count,
                    placements,
                    attempts,
                    FailureKind.ENGINE_FAILURE,
                    failed.message,
                )

        return self._fragment_result(
            scenario,
            node_count,
            placements,
            attempts,
            FailureKind.QUOTA_EXHAUSTED if remaining > 0 else None,
        )

    async def _place_fragment(
        self,
        scenario: Scenario,
        region: str,
        size: int,
        variables: dict[str, str],
        env: dict[str, str],
        auto_approve: bool,
    ) -> tuple[RegionAttempt, Path]:
        workdir = self._workspaces.prepare(scenario.working_directory, region)
        attempt = await self._attempt(
            scenario, workdir, region, size, variables, env, auto_approve, fragment=True
        )
        if attempt.outcome == AttemptOutcome.PLACED:
            placement = Placement(
                region=region,
                node_count=size,
                working_directory=workdir,
                fragment=True,
            )
            await self._persist_placement(scenario, placement, variables)
        return attempt, workdir

    async def _persist_placement(
        self,
        scenario: Scenario,
        placement: Placement,
        variables: dict[str, str],
    ) -> None:
        """Save an applied fragment before the rest of the deploy runs."""
        scenario.placements = [*scenario.placements, placement]
        scenario.variables = _storable(variables)
        scenario.touch()
        await self._store.save(scenario)

    def _fragment_result(
        self,
        scenario: Scenario,
        node_count: int,
        placements: list[Placement],
        attempts: list[RegionAttempt],
        failure: FailureKind | None,
        message: str = "",
    ) -> DeployResult:
        placed = sum(p.node_count for p in placements)
        if placed >= node_count:
            outcome = DeployOutcome.DEPLOYED
            failure = None
        elif placed > 0:
            outcome = DeployOutcome.PARTIAL
        else:
            outcome = DeployOutcome.FAILED
        return DeployResult(
            scenario_id=scenario.id,
            outcome=outcome,
            requested_nodes=node_count,
            placed_nodes=placed,
            placements=placements,
            attempts=attempts,
            failure=failure,
            message=message,
        )

    async def _attempt(
        self,
        scenario: Scenario,
        workdir: Path,
        region: str,
        node_count: int,
        variables: dict[str, str],
        env: dict[str, str],
        auto_approve: bool,
        *,
        fragment: bool = False,
    ) -> RegionAttempt:
        """init, validate, plan and apply one region; engine errors become the attempt outcome."""
        kind = scenario.template_kind
        attempt_vars = dict(variables)
        if not isinstance(kind, RegionScopedProxy):
            attempt_vars["region"] = region
        if kind.node_scaled:
            attempt_vars["node_count"] = str(node_count)

        logger.info(
            "region_attempt_started",
            scenario_id=str(scenario.id),
            region=region,
            node_count=node_count,
            fragment=fragment,
        )

        command = "init"
        try:
            await self._engine.init(workdir, env=env)
            command = "validate"
            await self._engine.validate(workdir, env=env)
            command = "plan"
            await self._engine.plan(workdir, attempt_vars, env=env)
            command = "apply"
            await self._engine.apply(workdir, attempt_vars, auto_approve=auto_approve, env=env)
        except EngineError as e:
            outcome = AttemptOutcome.QUOTA_EXCEEDED if e.is_quota else AttemptOutcome.FAILED
            log = logger.warning if e.is_quota else logger.error
            log(
                "region_quota_exceeded" if e.is_quota else "region_attempt_failed",
                scenario_id=str(scenario.id),
                region=region,
                command=command,
                kind=e.kind.value,
                error=e.message,
            )
            return RegionAttempt(
                region=region,
                node_count=node_count,
                outcome=outcome,
                fragment=fragment,
                command=command,
                error_kind=e.kind,
                message=e.message,
            )

        logger.info("region_attempt_placed", scenario_id=str(scenario.id), region=region)
        return RegionAttempt(
            region=region,
            node_count=node_count,
            outcome=AttemptOutcome.PLACED,
            fragment=fragment,
        )

    async def _record(
        self,
        scenario: Scenario,
        result: DeployResult,
        variables: dict[str, str],
        env: dict[str, str],
    ) -> None:
        if result.placements:
            scenario.placements = list(result.placements)
            scenario.variables = _storable(variables)
        if result.outcome == DeployOutcome.DEPLOYED:
            scenario.status = ScenarioStatus.DEPLOYED
        if result.placements or result.outcome == DeployOutcome.DEPLOYED:
            scenario.touch()
            await self._store.save(scenario)

        DEPLOYMENTS.labels(provider=scenario.provider, outcome=result.outcome.value).inc()
        log = logger.info if result.succeeded else logger.warning
        log(
            "deploy_finished",
            scenario_id=str(scenario.id),
            outcome=result.outcome.value,
            summary=result.summary,
        )

        if result.succeeded and self._verify_state:
            await self._verify(scenario, env)

    async def _verify(self, scenario: Scenario, env: dict[str, str]) -> None:
        """Best-effort check that engine state lists at least one resource."""
        total = 0
        for placement in scenario.placements:
            try:
                total += len(await self._engine.state_list(placement.working_directory, env=env))
            except EngineError as e:
                logger.warning(
                    "state_verification_failed",
                    scenario_id=str(scenario.id),
                    region=placement.region,
                    error=e.message,
                )
                return
        if total == 0:
            logger.warning("deployed_state_empty", scenario_id=str(scenario.id))

    # =========================================================================
    # Destroy
    # =========================================================================

    async def destroy(self, scenario_id: UUID, *, auto_approve: bool = True) -> DestroyResult:
        """Tear down a deployed scenario. No failover is attempted.

        Raises:
            ScenarioNotFoundError: Unknown scenario id
            InvalidTransitionError: Scenario is not deployed
            AuthMissingError: Required credentials are not configured
            EngineError: The engine failed; the scenario stays deployed
        """
        async with self._lock.hold(scenario_id):
            scenario = await self._load(scenario_id)
            if scenario.status != ScenarioStatus.DEPLOYED:
                raise InvalidTransitionError(
                    f"Cannot destroy scenario {scenario_id} from status {scenario.status.value}"
                )

            result = await self._destroy_placements(scenario, auto_approve)
            scenario.status = ScenarioStatus.DESTROYED
            scenario.placements = []
            scenario.touch()
            await self._store.save(scenario)

            logger.info(
                "scenario_destroyed",
                scenario_id=str(scenario_id),
                directories=len(result.destroyed),
            )
            return result

    async def release_partial(
        self, scenario_id: UUID, *, auto_approve: bool = True
    ) -> DestroyResult:
        """Destroy fragments left by a partial deploy; the scenario stays pending."""
        async with self._lock.hold(scenario_id):
            scenario = await self._load(scenario_id)
            if scenario.status != ScenarioStatus.PENDING or not scenario.placements:
                raise InvalidTransitionError(
                    f"Scenario {scenario_id} has no partial placement to release"
                )

            result = await self._destroy_placements(scenario, auto_approve)
            scenario.placements = []
            scenario.touch()
            await self._store.save(scenario)
            logger.info("partial_placement_released", scenario_id=str(scenario_id))
            return result

    async def _destroy_placements(self, scenario: Scenario, auto_approve: bool) -> DestroyResult:
        env = self._resolver.resolve(scenario.template_kind)
        placements = scenario.placements or [
            Placement(
                region=scenario.region or "",
                node_count=1,
                working_directory=scenario.working_directory,
            )
        ]

        destroyed: list[Path] = []
        for placement in placements:
            variables = dict(scenario.variables)
            if placement.region and not isinstance(scenario.template_kind, RegionScopedProxy):
                variables["region"] = placement.region
            if scenario.template_kind.node_scaled:
                variables["node_count"] = str(placement.node_count)
            try:
                await self._engine.destroy(
                    placement.working_directory,
                    variables,
                    auto_approve=auto_approve,
                    env=env,
                )
            except EngineError:
                scenario.placements = [
                    p for p in placements if p.working_directory not in destroyed
                ]
                scenario.touch()
                await self._store.save(scenario)
                logger.error(
                    "destroy_failed",
                    scenario_id=str(scenario.id),
                    region=placement.region,
                    destroyed=len(destroyed),
                )
                raise
            destroyed.append(placement.working_directory)

        return DestroyResult(scenario_id=scenario.id, destroyed=destroyed)

    # =========================================================================
    # Inspection
    # =========================================================================

    async def inspect(self, scenario_id: UUID) -> ScenarioReport:
        """Scenario record with engine state for each placement.

        Engine or credential failures leave the lists empty.
        """
        scenario = await self._load(scenario_id)
        try:
            env = self._resolver.resolve(scenario.template_kind)
        except AuthMissingError:
            env = {}

        directories = [p.working_directory for p in scenario.placements] or [
            scenario.working_directory
        ]
        report = ScenarioReport(scenario=scenario)
        for workdir in dict.fromkeys(directories):
            try:
                report.resources.extend(await self._engine.state_list(workdir, env=env))
                report.instances.extend(await self._engine.show_resources(workdir, env=env))
            except EngineError as e:
                logger.warning(
                    "scenario_inspection_failed",
                    scenario_id=str(scenario_id),
                    workdir=str(workdir),
                    error=e.message,
                )
        return report

    async def _load(self, scenario_id: UUID) -> Scenario:
        scenario = await self._store.get(scenario_id)
        if scenario is None:
            raise ScenarioNotFoundError(f"Scenario {scenario_id} not found")
        return scenario
