"""
Administrator review queue for refund requests
"""

from typing import Any, List, Optional
import uuid
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shutterbook.core.database import get_session
from shutterbook.core.security import require_permission
from shutterbook.models.transaction_request import TransactionRequestStatus, TransactionRequestType
from shutterbook.models.user import User
from shutterbook.schemas.response import ApiResponse
from shutterbook.schemas.transaction_request import (
    RefundApprove,
    RefundReject,
    TransactionRequestDetail,
    TransactionRequestListItem,
)
from shutterbook.services.refund_request_service import refund_request_service

router = APIRouter()


@router.get("", response_model=ApiResponse[List[TransactionRequestListItem]])
async def list_requests(
    status_filter: Optional[TransactionRequestStatus] = Query(None, alias="status"),
    request_type: Optional[TransactionRequestType] = None,
    customer_id: Optional[uuid.UUID] = None,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_permission("transaction_request:read"))
) -> Any:
    requests = await refund_request_service.list_requests(
        db,
        status=status_filter,
        request_type=request_type,
        customer_id=customer_id,
    )
    return ApiResponse(message="Transaction requests retrieved successfully", data=requests)


@router.get("/{request_id}", response_model=ApiResponse[TransactionRequestDetail])
async def get_request(
    request_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_permission("transaction_request:read"))
) -> Any:
    request = await refund_request_service.get_request(db, request_id)
    return ApiResponse(message="Transaction request retrieved successfully", data=request)


@router.patch("/{request_id}/approve-refund", response_model=ApiResponse[TransactionRequestDetail])
async def approve_refund(
    request_id: uuid.UUID,
    body: Optional[RefundApprove] = None,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_permission("transaction_request:review"))
) -> Any:
    """
    Approve a pending refund request
    """
    request = await refund_request_service.approve_refund(
        db,
        request_id,
        current_user.id,
        admin_notes=body.admin_notes if body else None,
    )
    return ApiResponse(message="Refund request approved successfully", data=request)


@router.patch("/{request_id}/reject", response_model=ApiResponse[TransactionRequestDetail])
async def reject_refund(
    request_id: uuid.UUID,
    body: RefundReject,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_permission("transaction_request:review"))
) -> Any:
    request = await refund_request_service.reject_refund(
        db,
        request_id,
        current_user.id,
        rejection_reason=body.rejection_reason,
        admin_notes=body.admin_notes,
    )
    return ApiResponse(message="Refund request rejected successfully", data=request)
