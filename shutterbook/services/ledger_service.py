"""
Transaction ledger: payment capture, status transitions and refunds
"""

from typing import Any, Dict, List, Optional
from datetime import datetime
from decimal import Decimal
import logging
import uuid

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
from shutterbook.core.metrics import record_transition
from shutterbook.models.base import utcnow
from shutterbook.models.booking import Booking
from shutterbook.models.transaction import (
    PaymentMethod,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from shutterbook.schemas.transaction import TransactionDetail
from shutterbook.services import views

logger = logging.getLogger(__name__)

# Keys an administrator may change on an existing transaction
UPDATABLE_FIELDS = ("notes", "external_reference", "payment_proof_images")


def validate_reason(reason: Optional[str], label: str) -> str:
    """Trimmed reason text, at least MIN_REASON_LENGTH characters"""
    cleaned = (reason or "").strip()
    if len(cleaned) < settings.MIN_REASON_LENGTH:
        raise ValidationError(
            f"{label} must be at least {settings.MIN_REASON_LENGTH} characters long",
            field="reason"
        )
    return cleaned


class LedgerService:
    """Mutations and queries over the transaction ledger"""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    async def _get_transaction(self, db: AsyncSession, transaction_id: uuid.UUID) -> Transaction:
        transaction = await db.get(Transaction, transaction_id, populate_existing=True)
        if not transaction:
            raise NotFoundError("Transaction", transaction_id)
        return transaction

    async def _detail(self, db: AsyncSession, transaction_id: uuid.UUID) -> TransactionDetail:
        detail = await views.load_transaction_detail(db, transaction_id)
        if detail is None:
            raise NotFoundError("Transaction", transaction_id)
        return detail

    async def create_transaction(
        self,
        db: AsyncSession,
        booking_id: uuid.UUID,
        amount: Decimal,
        transaction_type: Optional[str],
        payment_method: Optional[str],
        actor_id: uuid.UUID,
        payment_proof_images: Optional[List[str]] = None,
        external_reference: Optional[str] = None,
        notes: Optional[str] = None,
        status: Optional[str] = None,
    ) -> TransactionDetail:
        """
        Record a payment or refund against a booking.

        The customer is always taken from the booking.
        """
        if not isinstance(booking_id, uuid.UUID):
            try:
                booking_id = uuid.UUID(str(booking_id))
            except ValueError:
                raise ValidationError("Valid booking ID required", field="booking_id")

        booking = await db.get(Booking, booking_id)
        if not booking:
            raise NotFoundError("Booking", booking_id)
        if amount is None or Decimal(amount) <= 0:
            raise ValidationError("Invalid amount", field="amount")
        if not transaction_type:
            raise ValidationError("Transaction type required", field="transaction_type")
        if TransactionType(transaction_type) == TransactionType.REFUND:
            raise ValidationError(
                "Refunds must be issued against an existing transaction via its refund endpoint",
                field="transaction_type"
            )
        if not payment_method:
            raise ValidationError("Payment method required", field="payment_method")

        initial_status = TransactionStatus(status) if status else TransactionStatus.PENDING
        now = utcnow()
        transaction = Transaction(
            booking_id=booking.id,
            customer_id=booking.customer_id,
            amount=Decimal(amount),
            transaction_type=TransactionType(transaction_type),
            payment_method=PaymentMethod(payment_method),
            status=initial_status,
            payment_proof_images=list(payment_proof_images or []),
            external_reference=external_reference,
            notes=notes,
            transaction_date=now,
            processed_at=now if initial_status == TransactionStatus.COMPLETED else None,
            failed_at=now if initial_status == TransactionStatus.FAILED else None,
            created_by=actor_id,
        )

        async with db_manager.transaction(db):
            db.add(transaction)

        record_transition("create")
        self.logger.info(
            f"Transaction {transaction.transaction_reference} created",
            extra={
                "transaction_id": str(transaction.id),
                "booking_id": str(booking.id),
                "actor_id": str(actor_id),
            }
        )
        return await self._detail(db, transaction.id)

    async def approve(
        self,
        db: AsyncSession,
        transaction_id: uuid.UUID,
        actor_id: uuid.UUID
    ) -> TransactionDetail:
        """Pending -> Completed"""
        async with db_manager.transaction(db):
            transaction = await self._get_transaction(db, transaction_id)
            if transaction.status != TransactionStatus.PENDING:
                record_transition("approve", "rejected")
                raise StateTransitionError("Transaction", "approve", transaction.status.value)

            transaction.status = TransactionStatus.COMPLETED
            transaction.processed_at = utcnow()
            transaction.updated_by = actor_id

        record_transition("approve")
        self.logger.info(
            f"Transaction {transaction.transaction_reference} approved",
            extra={"transaction_id": str(transaction_id), "actor_id": str(actor_id)}
        )
        return await self._detail(db, transaction_id)

    async def reject(
        self,
        db: AsyncSession,
        transaction_id: uuid.UUID,
        reason: Optional[str],
        actor_id: uuid.UUID
    ) -> TransactionDetail:
        """Pending -> Failed, keeping the reason"""
        async with db_manager.transaction(db):
            transaction = await self._get_transaction(db, transaction_id)
            if transaction.status != TransactionStatus.PENDING:
                record_transition("reject", "rejected")
                raise StateTransitionError("Transaction", "reject", transaction.status.value)
            reason = validate_reason(reason, "Rejection reason")

            transaction.status = TransactionStatus.FAILED
            transaction.failed_at = utcnow()
            transaction.failure_reason = reason
            transaction.updated_by = actor_id

        record_transition("reject")
        self.logger.info(
            f"Transaction {transaction.transaction_reference} rejected",
            extra={"transaction_id": str(transaction_id), "actor_id": str(actor_id)}
        )
        return await self._detail(db, transaction_id)

    async def stage_refund(
        self,
        db: AsyncSession,
        original: Transaction,
        refund_amount: Decimal,
        refund_reason: str,
        actor_id: uuid.UUID,
        notes: Optional[str] = None,
    ) -> Transaction:
        """
        Add a Refund transaction for ``original`` and link both rows.

        Must run inside a unit of work; the caller commits.
        """
        if original.transaction_type == TransactionType.REFUND:
            raise ValidationError("Refund transactions cannot be refunded")
        if original.refund_transaction_id is not None:
            raise ConflictError(
                "Transaction has already been refunded",
                details={"refund_transaction_id": str(original.refund_transaction_id)}
            )
        if refund_amount is None or Decimal(refund_amount) <= 0:
            raise ValidationError("Invalid refund amount", field="refund_amount")
        if Decimal(refund_amount) > original.amount:
            raise ValidationError(
                "Refund amount cannot exceed the original transaction amount",
                field="refund_amount"
            )

        now = utcnow()
        refund = Transaction(
            id=uuid.uuid4(),
            booking_id=original.booking_id,
            customer_id=original.customer_id,
            amount=Decimal(refund_amount),
            transaction_type=TransactionType.REFUND,
            payment_method=original.payment_method,
            status=TransactionStatus.PENDING,
            payment_proof_images=[],
            refund_reason=refund_reason,
            notes=notes,
            transaction_date=now,
            original_transaction_id=original.id,
            created_by=actor_id,
        )
        db.add(refund)
        # The refund row has to exist before the original can point at it
        await db.flush()

        original.refund_transaction_id = refund.id
        original.refunded_at = now
        original.updated_by = actor_id
        await db.flush()
        return refund

    async def create_refund(
        self,
        db: AsyncSession,
        transaction_id: uuid.UUID,
        refund_amount: Decimal,
        refund_reason: Optional[str],
        actor_id: uuid.UUID,
        notes: Optional[str] = None,
    ) -> TransactionDetail:
        """
        Issue a refund against an existing transaction.

        Both rows are written in one database transaction.
        """
        refund_reason = (refund_reason or "").strip()
        if not refund_amount or not refund_reason:
            raise ValidationError("Refund amount and reason are required")

        try:
            async with db_manager.transaction(db):
                original = await self._get_transaction(db, transaction_id)
                refund = await self.stage_refund(
                    db, original, refund_amount, refund_reason, actor_id, notes
                )
        except (ValidationError, ConflictError):
            record_transition("refund", "rejected")
            raise

        record_transition("refund")
        self.logger.info(
            f"Refund {refund.transaction_reference} issued for {original.transaction_reference}",
            extra={
                "transaction_id": str(transaction_id),
                "refund_transaction_id": str(refund.id),
                "actor_id": str(actor_id),
            }
        )
        return await self._detail(db, refund.id)

    async def update(
        self,
        db: AsyncSession,
        transaction_id: uuid.UUID,
        patch: Dict[str, Any],
        actor_id: uuid.UUID
    ) -> TransactionDetail:
        """Apply the allow-listed keys of ``patch``; the rest is ignored"""
        async with db_manager.transaction(db):
            transaction = await self._get_transaction(db, transaction_id)
            for key in UPDATABLE_FIELDS:
                if key in patch:
                    value = patch[key]
                    if key == "payment_proof_images":
                        value = list(value or [])
                    setattr(transaction, key, value)
            transaction.updated_by = actor_id

        self.logger.info(
            f"Transaction {transaction.transaction_reference} updated",
            extra={
                "transaction_id": str(transaction_id),
                "fields": sorted(k for k in patch if k in UPDATABLE_FIELDS),
                "actor_id": str(actor_id),
            }
        )
        return await self._detail(db, transaction_id)

    async def soft_delete(
        self,
        db: AsyncSession,
        transaction_id: uuid.UUID,
        actor_id: uuid.UUID
    ) -> uuid.UUID:
        async with db_manager.transaction(db):
            transaction = await self._get_transaction(db, transaction_id)
            transaction.is_active = False
            transaction.deleted_by = actor_id
            transaction.deleted_at = utcnow()

        record_transition("delete")
        self.logger.info(
            f"Transaction {transaction.transaction_reference} deleted",
            extra={"transaction_id": str(transaction_id), "actor_id": str(actor_id)}
        )
        return transaction_id

    async def list_transactions(
        self,
        db: AsyncSession,
        status: Optional[str] = None,
        payment_method: Optional[str] = None,
        transaction_type: Optional[str] = None,
        booking_id: Optional[uuid.UUID] = None,
        customer_id: Optional[uuid.UUID] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        is_active: Optional[bool] = None,
    ) -> List[TransactionDetail]:
        criteria = []
        if status:
            criteria.append(Transaction.status == TransactionStatus(status))
        if payment_method:
            criteria.append(Transaction.payment_method == PaymentMethod(payment_method))
        if transaction_type:
            criteria.append(Transaction.transaction_type == TransactionType(transaction_type))
        if booking_id:
            criteria.append(Transaction.booking_id == booking_id)
        if customer_id:
            criteria.append(Transaction.customer_id == customer_id)
        if start_date:
            criteria.append(Transaction.transaction_date >= start_date)
        if end_date:
            criteria.append(Transaction.transaction_date <= end_date)
        if is_active is not None:
            criteria.append(Transaction.is_active == is_active)
        return await views.load_transaction_details(db, criteria)

    async def get_transaction(self, db: AsyncSession, transaction_id: uuid.UUID) -> TransactionDetail:
        return await self._detail(db, transaction_id)

    async def list_customer_transactions(
        self,
        db: AsyncSession,
        customer_id: uuid.UUID
    ) -> List[TransactionDetail]:
        return await views.load_transaction_details(
            db,
            [Transaction.customer_id == customer_id, Transaction.is_active.is_(True)]
        )

    # Customer side

    async def list_my_transactions(
        self,
        db: AsyncSession,
        customer_id: uuid.UUID,
        status: Optional[str] = None,
        payment_method: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[TransactionDetail]:
        return await self.list_transactions(
            db,
            status=status,
            payment_method=payment_method,
            customer_id=customer_id,
            start_date=start_date,
            end_date=end_date,
            is_active=True,
        )

    async def get_customer_transaction(
        self,
        db: AsyncSession,
        customer_id: uuid.UUID,
        transaction_id: uuid.UUID
    ) -> TransactionDetail:
        detail = await self._detail(db, transaction_id)
        if detail.customer_id != customer_id or not detail.is_active:
            raise AuthorizationError("You don't have access to this transaction")
        return detail

    async def pay(
        self,
        db: AsyncSession,
        customer_id: uuid.UUID,
        booking_id: uuid.UUID,
        amount: Decimal,
        payment_method: str,
        payment_proof_images: Optional[List[str]] = None,
        external_reference: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> TransactionDetail:
        """Customer-submitted payment; it waits as Pending for an administrator"""
        booking = await db.get(Booking, booking_id)
        if not booking:
            raise NotFoundError("Booking", booking_id)
        if booking.customer_id != customer_id:
            raise AuthorizationError("You don't have access to this booking")

        return await self.create_transaction(
            db,
            booking_id=booking_id,
            amount=amount,
            transaction_type=TransactionType.PAYMENT,
            payment_method=payment_method,
            actor_id=customer_id,
            payment_proof_images=payment_proof_images,
            external_reference=external_reference,
            notes=notes,
        )


# Create global ledger service
ledger_service = LedgerService()
