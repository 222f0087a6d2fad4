"""Price lookup endpoints."""

from fastapi import APIRouter

from cloudbot.api.dependencies import PriceOptimizerDep
from cloudbot.api.models.requests import PriceRequest
from cloudbot.domain.pricing import OptimalConfig, PriceComparison
from cloudbot.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/prices")


@router.post("/optimal", response_model=OptimalConfig)
async def find_optimal(request: PriceRequest, optimizer: PriceOptimizerDep) -> OptimalConfig:
    """Cheapest (region, instance type) pair of the candidate set."""
    logger.debug("optimal_price_request", provider=request.provider)
    if request.template_ref:
        return await optimizer.find_optimal_cached(
            request.provider,
            request.template_ref,
            request.instance_types,
            request.regions,
        )
    return await optimizer.find_optimal(
        request.provider,
        request.instance_types,
        request.regions,
    )


@router.post("/compare", response_model=PriceComparison)
async def compare_prices(request: PriceRequest, optimizer: PriceOptimizerDep) -> PriceComparison:
    """Every quoted option, cheapest first."""
    logger.debug("compare_prices_request", provider=request.provider)
    return await optimizer.compare(request.provider, request.instance_types, request.regions)
