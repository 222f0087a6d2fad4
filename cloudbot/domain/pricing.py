"""Price quote value objects."""

from pydantic import BaseModel, ConfigDict, Field, computed_field

HOURS_PER_MONTH = 24 * 30


class PriceQuote(BaseModel):
    """Price of one (region, instance type) pair in the provider's currency."""

    model_config = ConfigDict(frozen=True)

    provider: str
    region: str
    instance_type: str
    price_per_hour: float = Field(..., ge=0)
    currency: str = "CNY"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def price_per_month(self) -> float:
        return self.price_per_hour * HOURS_PER_MONTH


class OptimalConfig(BaseModel):
    """The cheapest quote of a candidate set."""

    model_config = ConfigDict(frozen=True)

    quote: PriceQuote
    normalized_price_per_hour: float = Field(
        ..., description="Price per hour in the reference currency"
    )
    reference_currency: str
    candidates_considered: int = Field(default=0, ge=0)

    @property
    def provider(self) -> str:
        return self.quote.provider

    @property
    def region(self) -> str:
        return self.quote.region

    @property
    def instance_type(self) -> str:
        return self.quote.instance_type

    @property
    def price_per_hour(self) -> float:
        return self.quote.price_per_hour

    @property
    def price_per_month(self) -> float:
        return self.quote.price_per_month


class PriceRange(BaseModel):
    """Spread of normalised prices across a comparison."""

    min_per_hour: float
    max_per_hour: float
    min_per_month: float
    max_per_month: float
    currency: str


class PriceComparison(BaseModel):
    """All successful quotes of a candidate set, cheapest first."""

    options: list[PriceQuote] = Field(default_factory=list)
    best: OptimalConfig
    price_range: PriceRange
