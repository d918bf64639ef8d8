"""
Interaction tracking router.
Records storefront events that feed the trending and collaborative stages.
"""
import time

from fastapi import APIRouter, Depends, Request, Response, status

from app.api.dependencies import enforce_rate_limit, get_api_rate_limiter, get_catalog_repository
from app.core.rate_limiter import SlidingWindowRateLimiter, get_identifier
from app.models.schemas import Interaction, InteractionRequest, RateLimitErrorResponse
from app.repositories.memory import InMemoryCatalogRepository

router = APIRouter(prefix="/v1", tags=["interactions"])


@router.post(
    "/interactions",
    response_model=Interaction,
    status_code=status.HTTP_201_CREATED,
    summary="Track Interaction",
    responses={429: {"model": RateLimitErrorResponse}},
)
async def track_interaction(
    body: InteractionRequest,
    request: Request,
    response: Response,
    catalog_repo: InMemoryCatalogRepository = Depends(get_catalog_repository),
    limiter: SlidingWindowRateLimiter = Depends(get_api_rate_limiter),
) -> Interaction:
    admission = enforce_rate_limit(limiter, get_identifier(request, body.user_id))
    response.headers["X-RateLimit-Remaining"] = str(admission.remaining)

    return await catalog_repo.record_interaction(
        Interaction(
            user_id=body.user_id,
            item_id=body.product_id,
            interaction_type=body.interaction_type,
            created_at=int(time.time() * 1000),
            metadata=body.metadata,
        )
    )
