"""Pricing configuration models."""

from pydantic import BaseModel, Field


class ProviderDefaults(BaseModel):
    """Candidate regions and instance types used when a caller passes none."""

    regions: list[str] = Field(default_factory=list, description="Candidate regions")
    instance_types: list[str] = Field(
        default_factory=list,
        description="Candidate instance types",
    )


class StaticPrice(BaseModel):
    """One row of the fallback price table."""

    provider: str
    region: str
    instance_type: str
    price_per_hour: float = Field(gt=0)
    currency: str = "CNY"


def _default_provider_defaults() -> dict[str, ProviderDefaults]:
    return {
        "aliyun": ProviderDefaults(
            regions=[
                "cn-beijing",
                "cn-shanghai",
                "cn-hangzhou",
                "cn-shenzhen",
                "cn-hongkong",
                "ap-southeast-1",
            ],
            instance_types=["ecs.t5-lc1m1.small", "ecs.t5-lc1m2.small", "ecs.t6-c1m1.large"],
        ),
        "tencent": ProviderDefaults(
            regions=[
                "ap-shanghai",
                "ap-nanjing",
                "ap-guangzhou",
                "ap-beijing",
                "ap-chengdu",
                "ap-chongqing",
            ],
            instance_types=["S5.SMALL1"],
        ),
    }


class PricingConfig(BaseModel):
    """Price lookup and optimisation settings."""

    quote_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Upper bound for a single price query",
    )
    max_in_flight: int = Field(
        default=5,
        ge=1,
        description="Maximum concurrent price queries",
    )
    cache_ttl_seconds: int = Field(
        default=3600,
        ge=0,
        description="How long a cached quote stays valid",
    )
    reference_currency: str = Field(
        default="CNY",
        description="Currency all quotes are normalised into for ranking",
    )
    conversion_rates: dict[str, float] = Field(
        default_factory=lambda: {"CNY": 1.0, "USD": 7.2},
        description="Units of reference currency per unit of each currency",
    )
    aliyun_endpoint: str = Field(
        default="https://ecs.aliyuncs.com",
        description="Aliyun ECS RPC endpoint",
    )
    vultr_endpoint: str = Field(
        default="https://api.vultr.com/v2",
        description="Vultr public API base URL",
    )
    defaults: dict[str, ProviderDefaults] = Field(
        default_factory=_default_provider_defaults,
        description="Per-provider candidate regions and instance types",
    )
    static_prices: list[StaticPrice] = Field(
        default_factory=list,
        description="Fallback price table for providers without a live client",
    )
