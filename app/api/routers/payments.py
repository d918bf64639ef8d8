"""
Payment stub router.
POST /v1/payments with action=create|verify; guarded by the payment limiter.
"""
from fastapi import APIRouter, Depends, Request, Response

from app.api.dependencies import (
    enforce_rate_limit,
    get_payment_rate_limiter,
    get_payment_service,
)
from app.core.rate_limiter import SlidingWindowRateLimiter, get_identifier
from app.models.schemas import (
    ErrorResponse,
    PaymentRequest,
    PaymentResponse,
    RateLimitErrorResponse,
)
from app.services.payments import PaymentService

router = APIRouter(prefix="/v1", tags=["payments"])


@router.post(
    "/payments",
    response_model=PaymentResponse,
    summary="Create or Verify Payment Intent",
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        429: {"model": RateLimitErrorResponse},
    },
)
async def process_payment(
    body: PaymentRequest,
    request: Request,
    response: Response,
    payment_service: PaymentService = Depends(get_payment_service),
    limiter: SlidingWindowRateLimiter = Depends(get_payment_rate_limiter),
) -> PaymentResponse:
    admission = enforce_rate_limit(limiter, get_identifier(request))
    response.headers["X-RateLimit-Remaining"] = str(admission.remaining)
    return await payment_service.handle(body)
