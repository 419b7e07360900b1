"""
Customer refund request endpoints
"""

from typing import Any, List
import uuid
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from shutterbook.core.database import get_session
from shutterbook.core.security import get_current_customer
from shutterbook.models.customer import Customer
from shutterbook.schemas.response import ApiResponse
from shutterbook.schemas.transaction_request import (
    RefundRequestCreate,
    TransactionRequestDetail,
    TransactionRequestListItem,
)
from shutterbook.services.refund_request_service import refund_request_service

router = APIRouter()


@router.post(
    "/request-refund",
    response_model=ApiResponse[TransactionRequestDetail],
    status_code=status.HTTP_201_CREATED
)
async def request_refund(
    body: RefundRequestCreate,
    db: AsyncSession = Depends(get_session),
    customer: Customer = Depends(get_current_customer)
) -> Any:
    """
    Ask for a refund on a completed transaction
    """
    request = await refund_request_service.submit(
        db,
        customer.id,
        transaction_id=body.transaction_id,
        booking_id=body.booking_id,
        refund_amount=body.refund_amount,
        refund_reason=body.refund_reason,
    )
    return ApiResponse(
        status=status.HTTP_201_CREATED,
        message="Refund request submitted successfully! An admin will review your request.",
        data=request
    )


@router.get("/my-requests", response_model=ApiResponse[List[TransactionRequestListItem]])
async def my_requests(
    db: AsyncSession = Depends(get_session),
    customer: Customer = Depends(get_current_customer)
) -> Any:
    requests = await refund_request_service.list_customer_requests(db, customer.id)
    return ApiResponse(message="Transaction requests retrieved successfully", data=requests)


@router.get("/{request_id}", response_model=ApiResponse[TransactionRequestDetail])
async def get_my_request(
    request_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
    customer: Customer = Depends(get_current_customer)
) -> Any:
    request = await refund_request_service.get_customer_request(db, customer.id, request_id)
    return ApiResponse(message="Transaction request retrieved successfully", data=request)


@router.delete("/{request_id}", response_model=ApiResponse[dict])
async def cancel_request(
    request_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
    customer: Customer = Depends(get_current_customer)
) -> Any:
    """
    Withdraw a pending refund request
    """
    cancelled_id = await refund_request_service.cancel(db, customer.id, request_id)
    return ApiResponse(message="Transaction request cancelled successfully", data={"id": str(cancelled_id)})
