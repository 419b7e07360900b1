"""
Refund request schemas
"""

from pydantic import Field
from typing import Optional
from uuid import UUID
from datetime import datetime
from decimal import Decimal

from shutterbook.schemas.base import AuditSchema, BaseSchema, IDSchema, Money, TimestampSchema
from shutterbook.schemas.booking import BookingBrief, BookingDetail, ContactBrief, CustomerBrief
from shutterbook.schemas.transaction import TransactionDetail
from shutterbook.models.transaction import PaymentMethod, TransactionStatus
from shutterbook.models.transaction_request import TransactionRequestStatus, TransactionRequestType


class RefundRequestCreate(BaseSchema):
    """Refund review ticket raised by a customer"""
    transaction_id: UUID
    booking_id: UUID
    refund_amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    refund_reason: str = Field("", max_length=500)


class RefundApprove(BaseSchema):
    admin_notes: Optional[str] = Field(None, max_length=1000)


class RefundReject(BaseSchema):
    rejection_reason: str = Field("", max_length=500)
    admin_notes: Optional[str] = Field(None, max_length=1000)


class RequestTransactionBrief(IDSchema):
    transaction_reference: str
    amount: Money
    payment_method: PaymentMethod
    status: TransactionStatus


class TransactionRequestResponse(IDSchema, TimestampSchema, AuditSchema):
    """Request row without expansions"""
    request_reference: str
    transaction_id: UUID
    booking_id: UUID
    customer_id: UUID
    request_type: TransactionRequestType
    status: TransactionRequestStatus
    refund_amount: Money
    refund_reason: str
    rejection_reason: Optional[str] = None
    admin_notes: Optional[str] = None
    reviewed_by: Optional[UUID] = None
    reviewed_at: Optional[datetime] = None


class TransactionRequestListItem(TransactionRequestResponse):
    """Review queue row"""
    transaction: RequestTransactionBrief
    booking: BookingBrief
    customer: ContactBrief
    reviewer: Optional[ContactBrief] = None


class TransactionRequestDetail(TransactionRequestResponse):
    """Request with its transaction and booking fully expanded"""
    transaction: TransactionDetail
    booking: BookingDetail
    customer: CustomerBrief
    reviewer: Optional[ContactBrief] = None
