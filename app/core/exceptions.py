"""
Custom exception hierarchy for centralized error handling.
All exceptions map to appropriate HTTP status codes.
"""
import math
from typing import Any, Dict, Optional


class AppException(Exception):
    """Base exception for all application errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        self.headers = headers or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to API response format."""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }


class ValidationError(AppException):
    """Invalid input data."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            message=message,
            status_code=400,
            error_code="VALIDATION_ERROR",
            details=details,
        )


class NotFoundError(AppException):
    """Resource not found."""

    def __init__(self, resource: str, identifier: str) -> None:
        super().__init__(
            message=f"{resource} not found: {identifier}",
            status_code=404,
            error_code="NOT_FOUND",
            details={"resource": resource, "identifier": identifier},
        )


class RateLimitError(AppException):
    """
    Too many requests for one caller identity.

    Serialized in the flat shape storefront clients already parse:
    {"error", "message", "retryAfter"} plus Retry-After headers.
    """

    def __init__(self, reset_at_ms: int, now_ms: int) -> None:
        self.retry_after = max(0, math.ceil((reset_at_ms - now_ms) / 1000))
        super().__init__(
            message=(
                f"Too many requests. Please try again in {self.retry_after} seconds."
            ),
            status_code=429,
            error_code="RATE_LIMIT_EXCEEDED",
            details={"retry_after_seconds": self.retry_after},
            headers={
                "Retry-After": str(self.retry_after),
                "X-RateLimit-Remaining": "0",
            },
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": "Rate limit exceeded",
            "message": self.message,
            "retryAfter": self.retry_after,
        }


class RecommendationServiceError(AppException):
    """Every recommendation stage failed; nothing can be served."""

    def __init__(self, reason: str = "Unknown error") -> None:
        super().__init__(
            message=reason,
            status_code=500,
            error_code="RECOMMENDATION_ERROR",
            details={"reason": reason},
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "recommendations": []}


class CircuitBreakerOpenError(AppException):
    """Circuit breaker is open - service calls blocked."""

    def __init__(self, service_name: str) -> None:
        super().__init__(
            message=f"Circuit breaker open for: {service_name}",
            status_code=503,
            error_code="CIRCUIT_BREAKER_OPEN",
            details={"service": service_name},
        )
