"""Unit tests for scenario and pricing value objects."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from cloudbot.domain.enums import ScenarioStatus
from cloudbot.domain.pricing import HOURS_PER_MONTH, PriceQuote
from cloudbot.domain.scenario import Placement, create_scenario
from cloudbot.domain.templates import RegionScopedProxy


class TestCreateScenario:
    """Tests for create_scenario."""

    def test_allocates_working_directory(self, tmp_path: Path) -> None:
        scenario = create_scenario("aliyun/ecs", tmp_path, project="demo")

        assert scenario.working_directory == tmp_path / "demo" / str(scenario.id)
        assert scenario.working_directory.is_dir()
        assert scenario.status == ScenarioStatus.PENDING
        assert scenario.name == "aliyun/ecs"
        assert scenario.provider == "aliyun"

    def test_template_kind_resolved_once(self, tmp_path: Path) -> None:
        scenario = create_scenario("aliyun/aliyun-proxy/zone-node/ss-libev-node-sh", tmp_path)
        assert scenario.template_kind == RegionScopedProxy(provider="aliyun", region="cn-shanghai")

    def test_identity_fields_are_frozen(self, tmp_path: Path) -> None:
        scenario = create_scenario("aliyun/ecs", tmp_path)
        with pytest.raises(ValidationError):
            scenario.template_ref = "tencent/cvm"

    def test_status_is_validated_on_assignment(self, tmp_path: Path) -> None:
        scenario = create_scenario("aliyun/ecs", tmp_path)
        with pytest.raises(ValidationError):
            scenario.status = "exploded"

    def test_placed_nodes_sums_placements(self, tmp_path: Path) -> None:
        scenario = create_scenario("aliyun/aliyun-proxy", tmp_path)
        scenario.placements = [
            Placement(region="cn-beijing", node_count=2, working_directory=tmp_path / "a"),
            Placement(region="cn-shanghai", node_count=1, working_directory=tmp_path / "b"),
        ]
        assert scenario.placed_nodes == 3


class TestPriceQuote:
    """Tests for PriceQuote."""

    def test_monthly_price_is_thirty_days(self) -> None:
        quote = PriceQuote(
            provider="aliyun",
            region="cn-shanghai",
            instance_type="ecs.t5-lc1m1.small",
            price_per_hour=0.065,
        )
        assert HOURS_PER_MONTH == 720
        assert quote.price_per_month == pytest.approx(46.8)

    def test_monthly_price_is_serialized(self) -> None:
        quote = PriceQuote(provider="vultr", region="hk", instance_type="vc2", price_per_hour=0.5)
        assert quote.model_dump()["price_per_month"] == pytest.approx(360.0)

    def test_negative_price_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PriceQuote(provider="aws", region="us-east-1", instance_type="t3", price_per_hour=-1)
