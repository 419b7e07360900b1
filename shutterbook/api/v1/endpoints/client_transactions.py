"""
Customer-facing transaction endpoints
"""

from typing import Any, List, Optional
from datetime import datetime
import uuid
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from shutterbook.core.database import get_session
from shutterbook.core.security import get_current_customer
from shutterbook.models.customer import Customer
from shutterbook.models.transaction import PaymentMethod, TransactionStatus
from shutterbook.schemas.response import ApiResponse
from shutterbook.schemas.transaction import (
    BookingPaymentSummary,
    CustomerPaymentSummary,
    TransactionDetail,
    TransactionPay,
)
from shutterbook.services.booking_summary_service import booking_summary_service
from shutterbook.services.ledger_service import ledger_service

router = APIRouter()


@router.get("/my-transactions", response_model=ApiResponse[List[TransactionDetail]])
async def my_transactions(
    status_filter: Optional[TransactionStatus] = Query(None, alias="status"),
    payment_method: Optional[PaymentMethod] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    db: AsyncSession = Depends(get_session),
    customer: Customer = Depends(get_current_customer)
) -> Any:
    transactions = await ledger_service.list_my_transactions(
        db,
        customer.id,
        status=status_filter,
        payment_method=payment_method,
        start_date=start_date,
        end_date=end_date,
    )
    return ApiResponse(message="Transactions fetched successfully!", data=transactions)


@router.get("/payment-summary", response_model=ApiResponse[CustomerPaymentSummary])
async def payment_summary(
    db: AsyncSession = Depends(get_session),
    customer: Customer = Depends(get_current_customer)
) -> Any:
    summary = await booking_summary_service.get_customer_payment_summary(db, customer.id)
    return ApiResponse(message="Payment summary fetched successfully!", data=summary)


@router.get("/booking/{booking_id}", response_model=ApiResponse[BookingPaymentSummary])
async def booking_payment_summary(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
    customer: Customer = Depends(get_current_customer)
) -> Any:
    """
    Paid amount and remaining balance of one of the customer's bookings
    """
    summary = await booking_summary_service.get_booking_payment_summary(db, customer.id, booking_id)
    return ApiResponse(message="Booking payment summary fetched successfully!", data=summary)


@router.post(
    "/booking/{booking_id}/pay",
    response_model=ApiResponse[TransactionDetail],
    status_code=status.HTTP_201_CREATED
)
async def pay_booking(
    booking_id: uuid.UUID,
    body: TransactionPay,
    db: AsyncSession = Depends(get_session),
    customer: Customer = Depends(get_current_customer)
) -> Any:
    """
    Submit a payment for review
    """
    transaction = await ledger_service.pay(
        db,
        customer.id,
        booking_id,
        amount=body.amount,
        payment_method=body.payment_method,
        payment_proof_images=body.payment_proof_images,
        external_reference=body.external_reference,
        notes=body.notes,
    )
    return ApiResponse(
        status=status.HTTP_201_CREATED,
        message="Payment submitted successfully! It will be verified shortly.",
        data=transaction
    )


@router.get("/{transaction_id}", response_model=ApiResponse[TransactionDetail])
async def get_my_transaction(
    transaction_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
    customer: Customer = Depends(get_current_customer)
) -> Any:
    transaction = await ledger_service.get_customer_transaction(db, customer.id, transaction_id)
    return ApiResponse(message="Transaction fetched successfully!", data=transaction)
