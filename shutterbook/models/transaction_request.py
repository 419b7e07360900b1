"""
TransactionRequest model: customer tickets awaiting administrator review
"""

from sqlalchemy import Column, String, ForeignKey, Enum, Numeric, DateTime, Integer, Uuid
from sqlalchemy.orm import relationship
import enum

from shutterbook.models.base import AuditMixin, BaseModel, generate_reference, enum_values


class TransactionRequestType(str, enum.Enum):
    REFUND = "Refund"


class TransactionRequestStatus(str, enum.Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class TransactionRequest(AuditMixin, BaseModel):
    """
    Refund review ticket raised against a completed transaction
    """
    __tablename__ = "transaction_requests"

    request_reference = Column(
        String(12),
        unique=True,
        nullable=False,
        index=True,
        default=lambda: generate_reference("TRQ")
    )
    transaction_id = Column(Uuid(as_uuid=True), ForeignKey("transactions.id"), nullable=False, index=True)
    booking_id = Column(Uuid(as_uuid=True), ForeignKey("bookings.id"), nullable=False)
    customer_id = Column(Uuid(as_uuid=True), ForeignKey("customers.id"), nullable=False, index=True)

    request_type = Column(
        Enum(TransactionRequestType, values_callable=enum_values),
        default=TransactionRequestType.REFUND,
        nullable=False
    )
    status = Column(
        Enum(TransactionRequestStatus, values_callable=enum_values),
        default=TransactionRequestStatus.PENDING,
        nullable=False,
        index=True
    )
    refund_amount = Column(Numeric(10, 2), nullable=False)
    refund_reason = Column(String(500), nullable=False)

    # Review outcome
    reviewed_by = Column(Uuid(as_uuid=True), ForeignKey("users.id"))
    reviewed_at = Column(DateTime(timezone=True))
    admin_notes = Column(String(1000))
    rejection_reason = Column(String(500))

    version = Column(Integer, nullable=False)
    __mapper_args__ = {"version_id_col": version}

    # Relationships
    transaction = relationship("Transaction")
    booking = relationship("Booking")
    customer = relationship("Customer")
    reviewer = relationship("User")

    def __repr__(self):
        return (
            f"<TransactionRequest(id={self.id}, reference={self.request_reference}, "
            f"type={self.request_type}, status={self.status})>"
        )
