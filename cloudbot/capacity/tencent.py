"""Tencent Cloud spot capacity via the ``tccli`` command line tool."""

import json
from collections.abc import Sequence
from typing import Any

from cloudbot.capacity.base import CapacitySignal
from cloudbot.credentials.store import CredentialStore
from cloudbot.domain.capacity import RegionAvailability
from cloudbot.errors import AuthMissingError
from cloudbot.observability.logging import get_logger
from cloudbot.utils.process import run_command

logger = get_logger(__name__)


def _response(stdout: str) -> dict[str, Any]:
    data = json.loads(stdout or "{}")
    return data.get("Response", data) if isinstance(data, dict) else {}


class TencentSpotSignal(CapacitySignal):
    """Sellable instance types of a family that also have spot price history.

    Credentials are handed to tccli through its environment variables so
    they never appear in the process list.
    """

    def __init__(self, credentials: CredentialStore, tccli_path: str = "tccli") -> None:
        self._credentials = credentials
        self._tccli = tccli_path

    @property
    def provider_name(self) -> str:
        return "tencent"

    async def probe(self, region: str, instance_family: str) -> list[RegionAvailability]:
        env = self._environment()

        configs = await self._call(
            [
                "cvm",
                "DescribeInstanceTypeConfigs",
                "--region",
                region,
                "--Filters",
                json.dumps([{"Name": "instance-family", "Values": [instance_family]}]),
            ],
            env,
        )
        sellable = sorted({
            c["InstanceType"]
            for c in configs.get("InstanceTypeConfigSet", [])
            if c.get("Status") == "SELL" and c.get("InstanceType")
        })

        results: list[RegionAvailability] = []
        for instance_type in sellable:
            history = await self._call(
                [
                    "cvm",
                    "DescribeSpotPriceHistory",
                    "--region",
                    region,
                    "--InstanceType",
                    instance_type,
                ],
                env,
            )
            results.append(
                RegionAvailability(
                    region=region,
                    instance_type=instance_type,
                    available=bool(history.get("SpotPriceHistorySet")),
                )
            )

        if not results:
            results.append(
                RegionAvailability(region=region, instance_type=instance_family, available=False)
            )
        return results

    def _environment(self) -> dict[str, str]:
        creds = self._credentials.get(self.provider_name)
        if creds is None:
            raise AuthMissingError("No tencent credentials configured", provider=self.provider_name)
        return {
            "TENCENTCLOUD_SECRET_ID": creds.access_key.get_secret_value(),
            "TENCENTCLOUD_SECRET_KEY": creds.secret_key.get_secret_value(),
        }

    async def _call(self, args: Sequence[str], env: dict[str, str]) -> dict[str, Any]:
        result = await run_command([self._tccli, *args], env=env)
        if not result.ok:
            raise RuntimeError(f"tccli {args[1]} failed: {result.stderr.strip()[:200]}")
        return _response(result.stdout)
