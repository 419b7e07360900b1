"""
Administrator transaction ledger endpoints
"""

from typing import Any, List, Optional
from datetime import datetime
import uuid
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from shutterbook.core.database import get_session
from shutterbook.core.security import require_permission
from shutterbook.models.transaction import PaymentMethod, TransactionStatus, TransactionType
from shutterbook.models.user import User
from shutterbook.schemas.response import ApiResponse
from shutterbook.schemas.transaction import (
    BookingTransactionSummary,
    TransactionCreate,
    TransactionDetail,
    TransactionRefund,
    TransactionReject,
    TransactionUpdate,
)
from shutterbook.services.booking_summary_service import booking_summary_service
from shutterbook.services.ledger_service import ledger_service

router = APIRouter()


@router.get("", response_model=ApiResponse[List[TransactionDetail]])
async def list_transactions(
    status_filter: Optional[TransactionStatus] = Query(None, alias="status"),
    payment_method: Optional[PaymentMethod] = None,
    transaction_type: Optional[TransactionType] = None,
    booking_id: Optional[uuid.UUID] = None,
    customer_id: Optional[uuid.UUID] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    is_active: Optional[bool] = None,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_permission("transaction:read"))
) -> Any:
    """
    List transactions, newest first
    """
    transactions = await ledger_service.list_transactions(
        db,
        status=status_filter,
        payment_method=payment_method,
        transaction_type=transaction_type,
        booking_id=booking_id,
        customer_id=customer_id,
        start_date=start_date,
        end_date=end_date,
        is_active=is_active,
    )
    return ApiResponse(message="Transactions fetched successfully!", data=transactions)


@router.get("/booking/{booking_id}/summary", response_model=ApiResponse[BookingTransactionSummary])
async def booking_summary(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_permission("transaction:read"))
) -> Any:
    """
    Paid, refunded and net totals for one booking
    """
    summary = await booking_summary_service.get_booking_summary(db, booking_id)
    return ApiResponse(message="Booking transaction summary fetched successfully!", data=summary)


@router.get("/customer/{customer_id}", response_model=ApiResponse[List[TransactionDetail]])
async def customer_transactions(
    customer_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_permission("transaction:read"))
) -> Any:
    transactions = await ledger_service.list_customer_transactions(db, customer_id)
    return ApiResponse(message="Customer transactions fetched successfully!", data=transactions)


@router.get("/{transaction_id}", response_model=ApiResponse[TransactionDetail])
async def get_transaction(
    transaction_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_permission("transaction:read"))
) -> Any:
    transaction = await ledger_service.get_transaction(db, transaction_id)
    return ApiResponse(message="Transaction fetched successfully!", data=transaction)


@router.post(
    "",
    response_model=ApiResponse[TransactionDetail],
    status_code=status.HTTP_201_CREATED
)
async def create_transaction(
    body: TransactionCreate,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_permission("transaction:write"))
) -> Any:
    """
    Record a payment or refund against a booking
    """
    transaction = await ledger_service.create_transaction(
        db,
        booking_id=body.booking_id,
        amount=body.amount,
        transaction_type=body.transaction_type,
        payment_method=body.payment_method,
        actor_id=current_user.id,
        payment_proof_images=body.payment_proof_images,
        external_reference=body.external_reference,
        notes=body.notes,
        status=body.status,
    )
    return ApiResponse(
        status=status.HTTP_201_CREATED,
        message="Transaction created successfully!",
        data=transaction
    )


@router.put("/{transaction_id}", response_model=ApiResponse[TransactionDetail])
async def update_transaction(
    transaction_id: uuid.UUID,
    body: TransactionUpdate,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_permission("transaction:write"))
) -> Any:
    """
    Update notes, external reference or proof images
    """
    transaction = await ledger_service.update(
        db,
        transaction_id,
        body.model_dump(exclude_unset=True),
        current_user.id
    )
    return ApiResponse(message="Transaction updated successfully!", data=transaction)


@router.delete("/{transaction_id}", response_model=ApiResponse[dict])
async def delete_transaction(
    transaction_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_permission("transaction:delete"))
) -> Any:
    deleted_id = await ledger_service.soft_delete(db, transaction_id, current_user.id)
    return ApiResponse(message="Transaction deleted successfully!", data={"id": str(deleted_id)})


@router.patch("/{transaction_id}/approve", response_model=ApiResponse[TransactionDetail])
async def approve_transaction(
    transaction_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_permission("transaction:approve"))
) -> Any:
    transaction = await ledger_service.approve(db, transaction_id, current_user.id)
    return ApiResponse(message="Transaction approved successfully!", data=transaction)


@router.patch("/{transaction_id}/reject", response_model=ApiResponse[TransactionDetail])
async def reject_transaction(
    transaction_id: uuid.UUID,
    body: TransactionReject,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_permission("transaction:approve"))
) -> Any:
    transaction = await ledger_service.reject(db, transaction_id, body.reason, current_user.id)
    return ApiResponse(message="Transaction rejected successfully!", data=transaction)


@router.post(
    "/{transaction_id}/refund",
    response_model=ApiResponse[TransactionDetail],
    status_code=status.HTTP_201_CREATED
)
async def refund_transaction(
    transaction_id: uuid.UUID,
    body: TransactionRefund,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_permission("transaction:refund"))
) -> Any:
    """
    Issue a refund linked to the original transaction
    """
    refund = await ledger_service.create_refund(
        db,
        transaction_id,
        body.refund_amount,
        body.refund_reason,
        current_user.id,
        notes=body.notes,
    )
    return ApiResponse(
        status=status.HTTP_201_CREATED,
        message="Refund transaction created successfully!",
        data=refund
    )
