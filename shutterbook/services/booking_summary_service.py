"""
Financial totals per booking and per customer
"""

from typing import Iterable
from decimal import Decimal
import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shutterbook.core.exceptions import AuthorizationError, NotFoundError
from shutterbook.models.booking import Booking
from shutterbook.models.transaction import Transaction, TransactionStatus, TransactionType
from shutterbook.schemas.transaction import (
    BookingPaymentSummary,
    BookingTransactionSummary,
    CustomerPaymentSummary,
    TransactionResponse,
)
from shutterbook.services import views

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


def _total(amounts: Iterable) -> Decimal:
    return sum((Decimal(a) for a in amounts), ZERO)


def payment_status(total_paid: Decimal, remaining: Decimal) -> str:
    if total_paid <= 0:
        return "unpaid"
    if remaining == 0:
        return "paid"
    if remaining < 0:
        return "overpaid"
    return "partial"


class BookingSummaryService:
    """Aggregations over the ledger"""

    async def get_booking_summary(
        self,
        db: AsyncSession,
        booking_id: uuid.UUID
    ) -> BookingTransactionSummary:
        """
        Every active transaction of a booking split by status, with totals.

        total_paid counts every completed row. total_refunded counts refunds
        in any status, so a refund awaiting approval already reduces
        net_amount.
        """
        transactions = await views.load_transaction_details(
            db,
            [Transaction.booking_id == booking_id, Transaction.is_active.is_(True)]
        )
        if not transactions:
            raise NotFoundError("Transaction", booking_id, message="No transactions found for this booking")

        completed = [t for t in transactions if t.status == TransactionStatus.COMPLETED.value]
        pending = [t for t in transactions if t.status == TransactionStatus.PENDING.value]
        failed = [t for t in transactions if t.status == TransactionStatus.FAILED.value]

        total_paid = _total(t.amount for t in completed)
        total_refunded = _total(
            t.amount for t in transactions
            if t.transaction_type == TransactionType.REFUND.value
        )

        return BookingTransactionSummary(
            booking_id=booking_id,
            all_transactions=transactions,
            completed_transactions=completed,
            pending_transactions=pending,
            failed_transactions=failed,
            total_paid=total_paid,
            total_refunded=total_refunded,
            net_amount=total_paid - total_refunded,
        )

    async def get_booking_payment_summary(
        self,
        db: AsyncSession,
        customer_id: uuid.UUID,
        booking_id: uuid.UUID
    ) -> BookingPaymentSummary:
        """Balance of a booking as its owner sees it; only settled money counts"""
        booking = await db.get(Booking, booking_id)
        if not booking:
            raise NotFoundError("Booking", booking_id)
        if booking.customer_id != customer_id:
            raise AuthorizationError("You don't have access to this booking")

        result = await db.execute(
            select(Transaction)
            .where(Transaction.booking_id == booking_id, Transaction.is_active.is_(True))
            .order_by(Transaction.transaction_date.desc())
        )
        transactions = result.scalars().all()
        completed = [t for t in transactions if t.status == TransactionStatus.COMPLETED]

        total_paid = _total(
            t.amount for t in completed if t.transaction_type == TransactionType.PAYMENT
        )
        total_refunded = _total(
            t.amount for t in completed if t.transaction_type == TransactionType.REFUND
        )
        net_paid = total_paid - total_refunded
        remaining = Decimal(booking.final_amount) - net_paid

        return BookingPaymentSummary(
            booking_id=booking.id,
            booking_reference=booking.booking_reference,
            final_amount=booking.final_amount,
            total_paid=total_paid,
            total_refunded=total_refunded,
            net_paid=net_paid,
            remaining_balance=max(ZERO, remaining),
            payment_status=payment_status(total_paid, remaining),
            transactions=[TransactionResponse.model_validate(t) for t in transactions],
        )

    async def get_customer_payment_summary(
        self,
        db: AsyncSession,
        customer_id: uuid.UUID
    ) -> CustomerPaymentSummary:
        result = await db.execute(
            select(Transaction).where(
                Transaction.customer_id == customer_id,
                Transaction.is_active.is_(True)
            )
        )
        transactions = result.scalars().all()
        completed = [t for t in transactions if t.status == TransactionStatus.COMPLETED]

        total_spent = _total(
            t.amount for t in completed if t.transaction_type == TransactionType.PAYMENT
        )
        total_refunded = _total(
            t.amount for t in completed if t.transaction_type == TransactionType.REFUND
        )

        return CustomerPaymentSummary(
            total_bookings=len({t.booking_id for t in transactions}),
            total_spent=total_spent,
            total_refunded=total_refunded,
            net_spent=total_spent - total_refunded,
            pending_payments=sum(1 for t in transactions if t.status == TransactionStatus.PENDING),
            completed_payments=len(completed),
            failed_payments=sum(1 for t in transactions if t.status == TransactionStatus.FAILED),
        )


# Create global summary service
booking_summary_service = BookingSummaryService()
