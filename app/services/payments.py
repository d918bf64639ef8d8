"""
Payment intent stub.
Records pending payments and marks them completed on verification.
No gateway is contacted; transaction ids are generated locally.
"""
import logging
import secrets
import string
import time
import uuid

from app.core.exceptions import NotFoundError, ValidationError
from app.models.interfaces import PaymentRepository
from app.models.schemas import (
    PaymentAction,
    PaymentRecord,
    PaymentRequest,
    PaymentResponse,
    PaymentStatus,
)

logger = logging.getLogger(__name__)

_TXN_ALPHABET = string.ascii_lowercase + string.digits


def generate_transaction_id(now_ms: int) -> str:
    """TXN-<epoch ms>-<9 random base36 chars>."""
    suffix = "".join(secrets.choice(_TXN_ALPHABET) for _ in range(9))
    return f"TXN-{now_ms}-{suffix}"


class PaymentService:
    """Handles create / verify actions of the payment endpoint."""

    def __init__(self, payment_repo: PaymentRepository) -> None:
        self._payments = payment_repo

    async def handle(self, request: PaymentRequest) -> PaymentResponse:
        if request.action == PaymentAction.CREATE:
            return await self.create(request)
        return await self.verify(request)

    async def create(self, request: PaymentRequest) -> PaymentResponse:
        errors = []
        if request.amount is None:
            errors.append("Invalid payment amount")
        if not request.payment_method:
            errors.append("Invalid payment method")
        if errors:
            raise ValidationError("Invalid payment data", details={"errors": errors})

        now = int(time.time() * 1000)
        payment = await self._payments.save(
            PaymentRecord(
                id=str(uuid.uuid4()),
                order_id=str(request.order_id),
                amount=request.amount,
                payment_method=request.payment_method,
                status=PaymentStatus.PENDING,
                transaction_id=generate_transaction_id(now),
                created_at=now,
            )
        )
        logger.info(f"Payment initiated: order={payment.order_id}, txn={payment.transaction_id}")

        return PaymentResponse(
            success=True,
            payment=payment,
            message="Payment initiated. Integrate with a payment gateway for real payments.",
        )

    async def verify(self, request: PaymentRequest) -> PaymentResponse:
        if not request.transaction_id:
            raise ValidationError(
                "Invalid payment data",
                details={"errors": ["Transaction ID is required"]},
            )

        order_id = str(request.order_id)
        payment = await self._payments.find_by_transaction(request.transaction_id, order_id)
        if payment is None:
            raise NotFoundError("Payment", request.transaction_id)

        completed = await self._payments.save(
            payment.model_copy(update={"status": PaymentStatus.COMPLETED})
        )
        logger.info(f"Payment verified: order={order_id}, txn={completed.transaction_id}")

        return PaymentResponse(
            success=True,
            payment=completed,
            message="Payment verified successfully",
        )
