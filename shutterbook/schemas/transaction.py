"""
Transaction schemas for request/response models
"""

from pydantic import Field, field_validator
from typing import List, Optional
from uuid import UUID
from datetime import datetime
from decimal import Decimal

from shutterbook.schemas.base import AuditSchema, BaseSchema, IDSchema, Money, TimestampSchema
from shutterbook.schemas.booking import BookingDetail, CustomerBrief
from shutterbook.models.transaction import PaymentMethod, TransactionStatus, TransactionType


class TransactionCreate(BaseSchema):
    """Transaction creation schema (administrator)"""
    booking_id: UUID
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    transaction_type: TransactionType
    payment_method: PaymentMethod
    status: Optional[TransactionStatus] = None
    payment_proof_images: List[str] = []
    external_reference: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=500)


class TransactionPay(BaseSchema):
    """Payment submitted by a customer for one of their bookings"""
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    payment_method: PaymentMethod
    payment_proof_images: List[str] = []
    external_reference: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=500)


class TransactionUpdate(BaseSchema):
    """
    Editable fields of a transaction.

    Anything else in the body is dropped before it reaches the ledger.
    """
    notes: Optional[str] = Field(None, max_length=500)
    external_reference: Optional[str] = Field(None, max_length=50)
    payment_proof_images: Optional[List[str]] = None


class TransactionReject(BaseSchema):
    reason: str = Field("", max_length=200)


class TransactionRefund(BaseSchema):
    refund_amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    refund_reason: str = Field("", max_length=500)
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator("refund_reason")
    def strip_reason(cls, v):
        return v.strip()


class TransactionLink(IDSchema):
    """The other side of a refund link"""
    transaction_reference: str
    transaction_type: TransactionType
    amount: Money
    status: TransactionStatus
    transaction_date: datetime


class TransactionResponse(IDSchema, TimestampSchema, AuditSchema):
    """Transaction row without expansions"""
    transaction_reference: str
    booking_id: UUID
    customer_id: UUID
    amount: Money
    transaction_type: TransactionType
    payment_method: PaymentMethod
    status: TransactionStatus
    payment_proof_images: List[str] = []
    external_reference: Optional[str] = None
    transaction_date: datetime
    processed_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None
    refunded_at: Optional[datetime] = None
    notes: Optional[str] = None
    failure_reason: Optional[str] = None
    refund_reason: Optional[str] = None
    original_transaction_id: Optional[UUID] = None
    refund_transaction_id: Optional[UUID] = None
    version: int


class TransactionDetail(TransactionResponse):
    """Transaction with booking, customer and refund cross-links expanded"""
    booking: BookingDetail
    customer: CustomerBrief
    original_transaction: Optional[TransactionLink] = None
    refund_transaction: Optional[TransactionLink] = None


class BookingTransactionSummary(BaseSchema):
    """Per-booking totals for administrators"""
    booking_id: UUID
    all_transactions: List[TransactionDetail]
    completed_transactions: List[TransactionDetail]
    pending_transactions: List[TransactionDetail]
    failed_transactions: List[TransactionDetail]
    total_paid: Money
    total_refunded: Money
    net_amount: Money


class BookingPaymentSummary(BaseSchema):
    """Payment position of one booking as shown to its customer"""
    booking_id: UUID
    booking_reference: str
    final_amount: Money
    total_paid: Money
    total_refunded: Money
    net_paid: Money
    remaining_balance: Money
    payment_status: str
    transactions: List[TransactionResponse]


class CustomerPaymentSummary(BaseSchema):
    """Totals over every transaction of one customer"""
    total_bookings: int
    total_spent: Money
    total_refunded: Money
    net_spent: Money
    pending_payments: int
    completed_payments: int
    failed_payments: int
