"""Scripted provisioning engine for testing."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from cloudbot.domain.enums import EngineErrorKind
from cloudbot.domain.resources import ResourceDetail
from cloudbot.engine.base import ProvisioningEngine
from cloudbot.errors import EngineError


@dataclass
class EngineCall:
    """One recorded engine invocation."""

    command: str
    workdir: Path
    variables: dict[str, str] = field(default_factory=dict)
    env: dict[str, str] = field(default_factory=dict)
    auto_approve: bool | None = None

    @property
    def region(self) -> str | None:
        return self.variables.get("region")


class MockProvisioningEngine(ProvisioningEngine):
    """In-memory engine with per-region node capacity.

    ``apply`` places ``node_count`` nodes (default 1) in the ``region``
    variable; if the region's remaining capacity is smaller the call fails
    with a quota error. Regions missing from ``capacity`` use
    ``default_capacity`` (None = unlimited). ``failures`` scripts an error
    for a region at a given command.
    """

    def __init__(
        self,
        capacity: Mapping[str, int] | None = None,
        default_capacity: int | None = None,
    ) -> None:
        self._capacity: dict[str, int] = dict(capacity or {})
        self._default_capacity = default_capacity
        self._failures: dict[tuple[str, str], EngineError] = {}
        self._state: dict[Path, list[str]] = {}
        self.calls: list[EngineCall] = []

    def fail(self, region: str, command: str, kind: EngineErrorKind, message: str = "") -> None:
        self._failures[(region, command)] = EngineError(
            message or f"{command} failed in {region}",
            kind=kind,
            command=command,
        )

    def commands(self, command: str) -> list[EngineCall]:
        return [c for c in self.calls if c.command == command]

    @property
    def applied_regions(self) -> list[str | None]:
        return [c.region for c in self.commands("apply")]

    @property
    def planned_regions(self) -> list[str | None]:
        return [c.region for c in self.commands("plan")]

    def state_for(self, workdir: Path) -> list[str]:
        return list(self._state.get(Path(workdir), []))

    async def init(self, workdir: Path, *, env: Mapping[str, str] | None = None) -> None:
        self._record("init", workdir, env=env)

    async def validate(self, workdir: Path, *, env: Mapping[str, str] | None = None) -> None:
        self._record("validate", workdir, env=env)

    async def plan(
        self,
        workdir: Path,
        variables: Mapping[str, str],
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        call = self._record("plan", workdir, variables, env)
        self._raise_scripted(call)

    async def apply(
        self,
        workdir: Path,
        variables: Mapping[str, str],
        *,
        auto_approve: bool = True,
        env: Mapping[str, str] | None = None,
    ) -> None:
        call = self._record("apply", workdir, variables, env, auto_approve)
        self._raise_scripted(call)

        region = call.region or "default"
        nodes = int(call.variables.get("node_count", "1"))
        remaining = self._capacity.get(region, self._default_capacity)
        if remaining is not None and nodes > remaining:
            raise EngineError(
                f"LimitExceeded.SpotQuota: {region} has room for {remaining} nodes, "
                f"{nodes} requested",
                kind=EngineErrorKind.QUOTA_EXCEEDED,
                command="apply",
            )
        if remaining is not None:
            self._capacity[region] = remaining - nodes

        self._state[Path(workdir)] = [
            f"mock_instance.{region}[{i}]" for i in range(nodes)
        ]

    async def destroy(
        self,
        workdir: Path,
        variables: Mapping[str, str],
        *,
        auto_approve: bool = True,
        env: Mapping[str, str] | None = None,
    ) -> None:
        call = self._record("destroy", workdir, variables, env, auto_approve)
        self._raise_scripted(call)
        self._state.pop(Path(workdir), None)

    async def state_list(
        self, workdir: Path, *, env: Mapping[str, str] | None = None
    ) -> list[str]:
        self._record("state_list", workdir, env=env)
        return self.state_for(workdir)

    async def show_resources(
        self, workdir: Path, *, env: Mapping[str, str] | None = None
    ) -> list[ResourceDetail]:
        self._record("show", workdir, env=env)
        return [
            ResourceDetail(
                address=address,
                id=f"i-{index}",
                region=address.split(".", 1)[1].split("[", 1)[0],
                kind="mock_instance",
                status="Running",
            )
            for index, address in enumerate(self.state_for(workdir))
        ]

    def _record(
        self,
        command: str,
        workdir: Path,
        variables: Mapping[str, str] | None = None,
        env: Mapping[str, str] | None = None,
        auto_approve: bool | None = None,
    ) -> EngineCall:
        call = EngineCall(
            command=command,
            workdir=Path(workdir),
            variables=dict(variables or {}),
            env=dict(env or {}),
            auto_approve=auto_approve,
        )
        self.calls.append(call)
        return call

    def _raise_scripted(self, call: EngineCall) -> None:
        error = self._failures.get((call.region or "", call.command))
        if error is not None:
            raise error
