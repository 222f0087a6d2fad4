"""Unit tests for TencentSpotSignal."""

import json
from unittest.mock import AsyncMock, patch

import pytest

from cloudbot.capacity.tencent import TencentSpotSignal
from cloudbot.credentials.store import InMemoryCredentialStore
from cloudbot.errors import AuthMissingError
from cloudbot.utils.process import CommandResult


def _result(payload: dict, returncode: int = 0, stderr: str = "") -> CommandResult:
    return CommandResult(
        args=("tccli",),
        returncode=returncode,
        stdout=json.dumps(payload),
        stderr=stderr,
    )


@pytest.fixture
def credentials() -> InMemoryCredentialStore:
    store = InMemoryCredentialStore()
    store.add("tencent", "tc-id", "tc-key")
    return store


class TestTencentSpotSignal:
    """Tests for TencentSpotSignal.probe."""

    @pytest.mark.asyncio
    async def test_sellable_types_with_spot_history(
        self, credentials: InMemoryCredentialStore
    ) -> None:
        responses = [
            _result(
                {
                    "Response": {
                        "InstanceTypeConfigSet": [
                            {"InstanceType": "S5.SMALL1", "Status": "SELL"},
                            {"InstanceType": "S5.SMALL2", "Status": "SELL"},
                            {"InstanceType": "S5.LARGE8", "Status": "SOLD_OUT"},
                        ]
                    }
                }
            ),
            _result({"Response": {"SpotPriceHistorySet": [{"Price": 0.01}]}}),
            _result({"Response": {"SpotPriceHistorySet": []}}),
        ]
        run = AsyncMock(side_effect=responses)

        with patch("cloudbot.capacity.tencent.run_command", run):
            result = await TencentSpotSignal(credentials).probe("ap-beijing", "S5")

        assert [(r.instance_type, r.available) for r in result] == [
            ("S5.SMALL1", True),
            ("S5.SMALL2", False),
        ]
        first_args = run.await_args_list[0].args[0]
        assert first_args[:3] == ["tccli", "cvm", "DescribeInstanceTypeConfigs"]
        env = run.await_args_list[0].kwargs["env"]
        assert env["TENCENTCLOUD_SECRET_ID"] == "tc-id"
        assert "tc-key" not in " ".join(first_args)

    @pytest.mark.asyncio
    async def test_no_sellable_type_is_unavailable(
        self, credentials: InMemoryCredentialStore
    ) -> None:
        run = AsyncMock(return_value=_result({"Response": {"InstanceTypeConfigSet": []}}))

        with patch("cloudbot.capacity.tencent.run_command", run):
            result = await TencentSpotSignal(credentials).probe("ap-beijing", "S5")

        assert len(result) == 1
        assert result[0].available is False

    @pytest.mark.asyncio
    async def test_cli_failure_raises(self, credentials: InMemoryCredentialStore) -> None:
        run = AsyncMock(return_value=_result({}, returncode=1, stderr="AuthFailure"))

        with patch("cloudbot.capacity.tencent.run_command", run), pytest.raises(RuntimeError):
            await TencentSpotSignal(credentials).probe("ap-beijing", "S5")

    @pytest.mark.asyncio
    async def test_missing_credentials(self) -> None:
        with pytest.raises(AuthMissingError):
            await TencentSpotSignal(InMemoryCredentialStore()).probe("ap-beijing", "S5")
