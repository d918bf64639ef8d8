"""
Recommendations API router.
Implements POST /v1/recommendations and GET /v1/recommendations/trending.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response

from app.api.dependencies import (
    enforce_rate_limit,
    get_api_rate_limiter,
    get_recommendation_selector,
)
from app.config import get_settings
from app.core.exceptions import RecommendationServiceError
from app.core.rate_limiter import SlidingWindowRateLimiter, get_identifier
from app.models.schemas import (
    RateLimitErrorResponse,
    RecommendationErrorResponse,
    RecommendationRequest,
    RecommendationResponse,
    SelectionResult,
)
from app.services.recommendation import RecommendationSelector, TrendingStage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["recommendations"])

ERROR_RESPONSES = {
    429: {"model": RateLimitErrorResponse, "description": "Rate limit exceeded"},
    500: {"model": RecommendationErrorResponse, "description": "Every strategy failed"},
}


def _to_response(result: SelectionResult, response: Response) -> RecommendationResponse:
    if result.error:
        raise RecommendationServiceError(result.error)
    response.headers["X-Recommendation-Stages"] = ",".join(result.stages)
    return RecommendationResponse(recommendations=result.items)


@router.post(
    "/recommendations",
    response_model=RecommendationResponse,
    summary="Get Product Recommendations",
    description="""
    Suggest products for a shopper and/or the product being viewed.

    Strategies run in order until `limit` items are found:
    - Collaborative: categories of items the user reviewed well, wishlisted or viewed
    - Content-based: same category and price within 30% of the viewed product
    - Trending: most viewed / liked / carted products over the last 7 days
    - Featured: merchandised products
    """,
    responses=ERROR_RESPONSES,
)
async def get_recommendations(
    body: RecommendationRequest,
    request: Request,
    response: Response,
    selector: RecommendationSelector = Depends(get_recommendation_selector),
    limiter: SlidingWindowRateLimiter = Depends(get_api_rate_limiter),
) -> RecommendationResponse:
    admission = enforce_rate_limit(limiter, get_identifier(request, body.user_id))
    response.headers["X-RateLimit-Remaining"] = str(admission.remaining)

    logger.info(
        f"Getting recommendations: product={body.product_id}, limit={body.limit}",
        extra={"user_id": body.user_id},
    )
    try:
        result = await selector.select(
            user_id=body.user_id,
            item_id=body.product_id,
            limit=body.limit,
        )
    except Exception as e:
        logger.exception(f"Recommendation selection crashed: {e}")
        raise RecommendationServiceError(str(e) or "Unknown error")

    return _to_response(result, response)


@router.get(
    "/recommendations/trending",
    response_model=RecommendationResponse,
    summary="Get Trending Products",
    responses=ERROR_RESPONSES,
)
async def get_trending(
    request: Request,
    response: Response,
    limit: Optional[int] = Query(
        default=None,
        ge=1,
        le=100,
        description="Number of items to return",
    ),
    selector: RecommendationSelector = Depends(get_recommendation_selector),
    limiter: SlidingWindowRateLimiter = Depends(get_api_rate_limiter),
) -> RecommendationResponse:
    """Trending stage alone, without personalization or featured fill."""
    admission = enforce_rate_limit(limiter, get_identifier(request))
    response.headers["X-RateLimit-Remaining"] = str(admission.remaining)

    result = await selector.select(
        limit=limit or get_settings().DEFAULT_TRENDING_LIMIT,
        only=(TrendingStage.name,),
    )
    return _to_response(result, response)
