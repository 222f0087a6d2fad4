"""Terraform-backed provisioning engine."""

import json
import re
import time
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from cloudbot.domain.resources import ResourceDetail
from cloudbot.engine.base import ProvisioningEngine
from cloudbot.engine.classification import ErrorClassifier
from cloudbot.errors import EngineError
from cloudbot.observability.logging import get_logger
from cloudbot.observability.metrics import ENGINE_COMMAND_LATENCY, ENGINE_ERRORS
from cloudbot.utils.process import CommandResult, run_command

logger = get_logger(__name__)

# Variable names that must never be passed on the command line.
SENSITIVE_VARIABLE = re.compile(r"(secret|access_key|password|token|api_key)", re.IGNORECASE)


class TerraformEngine(ProvisioningEngine):
    """Drives the ``terraform`` binary as a subprocess."""

    def __init__(
        self,
        exec_path: str = "terraform",
        classifier: ErrorClassifier | None = None,
        command_timeout: float | None = 1800.0,
        termination_grace: float = 10.0,
        json_output: bool = True,
    ) -> None:
        self._exec_path = exec_path
        self._classifier = classifier or ErrorClassifier()
        self._timeout = command_timeout
        self._grace = termination_grace
        self._json_output = json_output

    async def init(self, workdir: Path, *, env: Mapping[str, str] | None = None) -> None:
        await self._run("init", ["init", "-input=false", "-no-color"], workdir, env)

    async def validate(self, workdir: Path, *, env: Mapping[str, str] | None = None) -> None:
        await self._run("validate", ["validate", "-no-color"], workdir, env)

    async def plan(
        self,
        workdir: Path,
        variables: Mapping[str, str],
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        var_args, env = self._split_variables(variables, env)
        args = ["plan", "-input=false", "-no-color", *var_args]
        if self._json_output:
            args.append("-json")
        await self._run("plan", args, workdir, env)

    async def apply(
        self,
        workdir: Path,
        variables: Mapping[str, str],
        *,
        auto_approve: bool = True,
        env: Mapping[str, str] | None = None,
    ) -> None:
        await self._change("apply", workdir, variables, auto_approve, env)

    async def destroy(
        self,
        workdir: Path,
        variables: Mapping[str, str],
        *,
        auto_approve: bool = True,
        env: Mapping[str, str] | None = None,
    ) -> None:
        await self._change("destroy", workdir, variables, auto_approve, env)

    async def state_list(
        self, workdir: Path, *, env: Mapping[str, str] | None = None
    ) -> list[str]:
        result = await self._run("state_list", ["state", "list"], workdir, env, check=False)
        if not result.ok:
            if "No state file was found" in result.stderr:
                return []
            self._raise("state_list", result)
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    async def show_resources(
        self, workdir: Path, *, env: Mapping[str, str] | None = None
    ) -> list[ResourceDetail]:
        result = await self._run("show", ["show", "-json", "-no-color"], workdir, env)
        return parse_show_json(result.stdout)

    async def _change(
        self,
        command: str,
        workdir: Path,
        variables: Mapping[str, str],
        auto_approve: bool,
        env: Mapping[str, str] | None,
    ) -> None:
        var_args, env = self._split_variables(variables, env)
        args = [command, "-input=false", "-no-color"]
        if auto_approve:
            args.append("-auto-approve")
            if self._json_output:
                args.append("-json")
        args.extend(var_args)
        await self._run(command, args, workdir, env)

    def _split_variables(
        self,
        variables: Mapping[str, str],
        env: Mapping[str, str] | None,
    ) -> tuple[list[str], dict[str, str]]:
        """``-var`` arguments for plain variables; credential-like ones move to TF_VAR_ env."""
        merged_env = dict(env or {})
        var_args: list[str] = []
        for name, value in sorted(variables.items()):
            if SENSITIVE_VARIABLE.search(name):
                logger.warning("sensitive_variable_moved_to_env", variable=name)
                merged_env.setdefault(f"TF_VAR_{name}", str(value))
                continue
            var_args.extend(["-var", f"{name}={value}"])
        return var_args, merged_env

    async def _run(
        self,
        command: str,
        args: Sequence[str],
        workdir: Path,
        env: Mapping[str, str] | None,
        *,
        check: bool = True,
    ) -> CommandResult:
        logger.info("engine_command_started", command=command, workdir=str(workdir))
        started = time.perf_counter()
        try:
            result = await run_command(
                [self._exec_path, *args],
                cwd=workdir,
                env={"TF_IN_AUTOMATION": "1", **(env or {})},
                timeout=self._timeout,
                termination_grace=self._grace,
            )
        except TimeoutError as e:
            ENGINE_ERRORS.labels(command=command, kind="timeout").inc()
            raise EngineError(
                f"terraform {command} timed out after {self._timeout}s",
                command=command,
            ) from e
        except FileNotFoundError as e:
            raise EngineError(
                f"terraform executable not found: {self._exec_path}", command=command
            ) from e
        finally:
            ENGINE_COMMAND_LATENCY.labels(command=command).observe(time.perf_counter() - started)

        if check and not result.ok:
            self._raise(command, result)
        return result

    def _raise(self, command: str, result: CommandResult) -> None:
        output = f"{result.stdout}\n{result.stderr}"
        kind = self._classifier.classify(output)
        reason = self._classifier.summarize(output)
        ENGINE_ERRORS.labels(command=command, kind=kind.value).inc()
        logger.warning(
            "engine_command_failed",
            command=command,
            kind=kind.value,
            exit_code=result.returncode,
            reason=reason,
        )
        raise EngineError(
            f"terraform {command} failed: {reason}",
            kind=kind,
            command=command,
            exit_code=result.returncode,
        )


def parse_show_json(output: str) -> list[ResourceDetail]:
    """Instance-like resources from ``terraform show -json``, child modules included."""
    if not output.strip():
        return []
    data = json.loads(output)
    root = (data.get("values") or {}).get("root_module") or {}
    return list(_module_resources(root))


def _module_resources(module: dict[str, Any]) -> list[ResourceDetail]:
    resources: list[ResourceDetail] = []
    for resource in module.get("resources") or []:
        kind = resource.get("type", "")
        if resource.get("mode", "managed") != "managed" or "instance" not in kind:
            continue
        values = resource.get("values") or {}
        resources.append(
            ResourceDetail(
                address=resource.get("address", ""),
                id=str(values.get("id") or ""),
                region=str(
                    values.get("region_id")
                    or values.get("region")
                    or values.get("availability_zone")
                    or ""
                ),
                kind=kind,
                instance_type=str(values.get("instance_type") or ""),
                status=str(values.get("status") or values.get("instance_state") or ""),
                public_ips=_as_list(values.get("public_ip")),
                private_ips=_as_list(values.get("private_ip")),
            )
        )
    for child in module.get("child_modules") or []:
        resources.extend(_module_resources(child))
    return resources


def _as_list(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, list):
        return [str(v) for v in value if v]
    return [str(value)]
