"""
Refund request workflow: customers raise review tickets against completed
transactions, administrators approve or reject them once.
"""

from typing import List, Optional
from decimal import Decimal
import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shutterbook.config import settings
from shutterbook.core.database import db_manager
from shutterbook.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    StateTransitionError,
    ValidationError,
)
from shutterbook.core.metrics import record_review, record_transition
from shutterbook.models.base import utcnow
from shutterbook.models.booking import Booking
from shutterbook.models.transaction import Transaction, TransactionStatus, TransactionType
from shutterbook.models.transaction_request import (
    TransactionRequest,
    TransactionRequestStatus,
    TransactionRequestType,
)
from shutterbook.schemas.transaction_request import (
    TransactionRequestDetail,
    TransactionRequestListItem,
)
from shutterbook.services import views
from shutterbook.services.ledger_service import ledger_service, validate_reason

logger = logging.getLogger(__name__)


class RefundRequestService:
    """Review queue for customer refund requests"""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    async def _get_request(self, db: AsyncSession, request_id: uuid.UUID) -> TransactionRequest:
        request = await db.get(TransactionRequest, request_id, populate_existing=True)
        if not request:
            raise NotFoundError("Transaction request", request_id)
        return request

    async def _detail(self, db: AsyncSession, request_id: uuid.UUID) -> TransactionRequestDetail:
        detail = await views.load_request_detail(db, request_id)
        if detail is None:
            raise NotFoundError("Transaction request", request_id)
        return detail

    async def list_requests(
        self,
        db: AsyncSession,
        status: Optional[str] = None,
        request_type: Optional[str] = None,
        customer_id: Optional[uuid.UUID] = None,
    ) -> List[TransactionRequestListItem]:
        criteria = [TransactionRequest.is_active.is_(True)]
        if status:
            criteria.append(TransactionRequest.status == TransactionRequestStatus(status))
        if request_type:
            criteria.append(TransactionRequest.request_type == TransactionRequestType(request_type))
        if customer_id:
            criteria.append(TransactionRequest.customer_id == customer_id)
        return await views.load_request_list(db, criteria)

    async def get_request(self, db: AsyncSession, request_id: uuid.UUID) -> TransactionRequestDetail:
        return await self._detail(db, request_id)

    async def approve_refund(
        self,
        db: AsyncSession,
        request_id: uuid.UUID,
        actor_id: uuid.UUID,
        admin_notes: Optional[str] = None,
    ) -> TransactionRequestDetail:
        """
        Pending -> Approved.

        With REFUND_APPROVAL_ISSUES_REFUND set, the refund transaction is
        issued in the same database transaction as the approval.
        """
        async with db_manager.transaction(db):
            request = await self._get_request(db, request_id)
            transaction = await db.get(Transaction, request.transaction_id, populate_existing=True)
            if transaction is None:
                raise NotFoundError("Transaction", request.transaction_id)

            if transaction.status != TransactionStatus.COMPLETED:
                raise ValidationError("Only completed transactions are eligible for refund requests")
            if request.status != TransactionRequestStatus.PENDING:
                raise StateTransitionError("Request", "approve", request.status.value)

            request.status = TransactionRequestStatus.APPROVED
            request.reviewed_by = actor_id
            request.reviewed_at = utcnow()
            request.admin_notes = admin_notes
            request.updated_by = actor_id

            if settings.REFUND_APPROVAL_ISSUES_REFUND:
                await ledger_service.stage_refund(
                    db,
                    transaction,
                    request.refund_amount,
                    request.refund_reason,
                    actor_id,
                    notes=f"Issued for {request.request_reference}",
                )
                record_transition("refund")

        record_review("approved")
        self.logger.info(
            f"Refund request {request.request_reference} approved",
            extra={
                "request_id": str(request_id),
                "transaction_id": str(request.transaction_id),
                "actor_id": str(actor_id),
            }
        )
        return await self._detail(db, request_id)

    async def reject_refund(
        self,
        db: AsyncSession,
        request_id: uuid.UUID,
        actor_id: uuid.UUID,
        rejection_reason: Optional[str],
        admin_notes: Optional[str] = None,
    ) -> TransactionRequestDetail:
        """Pending -> Rejected, keeping the reason"""
        async with db_manager.transaction(db):
            request = await self._get_request(db, request_id)
            if request.status != TransactionRequestStatus.PENDING:
                raise StateTransitionError("Request", "reject", request.status.value)
            reason = validate_reason(rejection_reason, "Rejection reason")

            request.status = TransactionRequestStatus.REJECTED
            request.reviewed_by = actor_id
            request.reviewed_at = utcnow()
            request.rejection_reason = reason
            request.admin_notes = admin_notes
            request.updated_by = actor_id

        record_review("rejected")
        self.logger.info(
            f"Refund request {request.request_reference} rejected",
            extra={"request_id": str(request_id), "actor_id": str(actor_id)}
        )
        return await self._detail(db, request_id)

    async def submit(
        self,
        db: AsyncSession,
        customer_id: uuid.UUID,
        transaction_id: uuid.UUID,
        booking_id: uuid.UUID,
        refund_amount: Decimal,
        refund_reason: Optional[str],
    ) -> TransactionRequestDetail:
        """Open a refund request on one of the customer's completed transactions"""
        reason = validate_reason(refund_reason, "Refund reason")
        if refund_amount is None or Decimal(refund_amount) <= 0:
            raise ValidationError("Refund amount must be greater than 0", field="refund_amount")

        transaction = await db.get(Transaction, transaction_id, populate_existing=True)
        if not transaction:
            raise NotFoundError("Transaction", transaction_id)
        if transaction.customer_id != customer_id:
            raise AuthorizationError("You can only request refunds for your own transactions")
        if transaction.status != TransactionStatus.COMPLETED:
            raise StateTransitionError("Transaction", "request refund for", transaction.status.value)
        if transaction.transaction_type == TransactionType.REFUND:
            raise ValidationError("Refund transactions cannot be refunded")
        if transaction.refund_transaction_id is not None:
            raise ConflictError("Transaction has already been refunded")
        if Decimal(refund_amount) > transaction.amount:
            raise ValidationError(
                f"Refund amount ({refund_amount}) exceeds transaction amount ({transaction.amount})",
                field="refund_amount"
            )

        booking = await db.get(Booking, booking_id)
        if not booking:
            raise NotFoundError("Booking", booking_id)
        if booking.customer_id != customer_id:
            raise AuthorizationError("Booking does not belong to you")

        existing = await db.execute(
            select(TransactionRequest.id).where(
                TransactionRequest.transaction_id == transaction_id,
                TransactionRequest.customer_id == customer_id,
                TransactionRequest.request_type == TransactionRequestType.REFUND,
                TransactionRequest.status == TransactionRequestStatus.PENDING,
                TransactionRequest.is_active.is_(True),
            )
        )
        if existing.first() is not None:
            raise ConflictError("You already have a pending refund request for this transaction")

        request = TransactionRequest(
            transaction_id=transaction_id,
            booking_id=booking_id,
            customer_id=customer_id,
            request_type=TransactionRequestType.REFUND,
            status=TransactionRequestStatus.PENDING,
            refund_amount=Decimal(refund_amount),
            refund_reason=reason,
            created_by=customer_id,
        )
        async with db_manager.transaction(db):
            db.add(request)

        self.logger.info(
            f"Refund request {request.request_reference} submitted",
            extra={"request_id": str(request.id), "customer_id": str(customer_id)}
        )
        return await self._detail(db, request.id)

    async def list_customer_requests(
        self,
        db: AsyncSession,
        customer_id: uuid.UUID
    ) -> List[TransactionRequestListItem]:
        return await views.load_request_list(
            db,
            [
                TransactionRequest.customer_id == customer_id,
                TransactionRequest.is_active.is_(True),
            ]
        )

    async def get_customer_request(
        self,
        db: AsyncSession,
        customer_id: uuid.UUID,
        request_id: uuid.UUID
    ) -> TransactionRequestDetail:
        detail = await self._detail(db, request_id)
        if detail.customer_id != customer_id:
            raise AuthorizationError("You are not authorized to view this transaction request")
        return detail

    async def cancel(
        self,
        db: AsyncSession,
        customer_id: uuid.UUID,
        request_id: uuid.UUID
    ) -> uuid.UUID:
        """Withdraw a Pending request; it leaves the queue but is kept"""
        async with db_manager.transaction(db):
            request = await self._get_request(db, request_id)
            if request.customer_id != customer_id or not request.is_active:
                raise NotFoundError("Transaction request", request_id)
            if request.status != TransactionRequestStatus.PENDING:
                raise StateTransitionError("Request", "cancel", request.status.value)

            request.is_active = False
            request.deleted_by = customer_id
            request.deleted_at = utcnow()
            request.updated_by = customer_id

        self.logger.info(
            f"Refund request {request.request_reference} cancelled",
            extra={"request_id": str(request_id), "customer_id": str(customer_id)}
        )
        return request_id


# Create global refund request service
refund_request_service = RefundRequestService()
