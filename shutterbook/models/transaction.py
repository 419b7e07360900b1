"""
Transaction model
"""

from sqlalchemy import Column, String, ForeignKey, Enum, Numeric, DateTime, Integer, JSON, Uuid
from sqlalchemy.orm import relationship
import enum

from shutterbook.models.base import AuditMixin, BaseModel, generate_reference, utcnow, enum_values


class TransactionStatus(str, enum.Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"
    FAILED = "Failed"


class TransactionType(str, enum.Enum):
    PAYMENT = "Payment"
    REFUND = "Refund"


class PaymentMethod(str, enum.Enum):
    CASH = "Cash"
    GCASH = "GCash"
    BANK_TRANSFER = "Bank_Transfer"


class Transaction(AuditMixin, BaseModel):
    """
    One monetary movement tied to a booking
    """
    __tablename__ = "transactions"

    transaction_reference = Column(
        String(12),
        unique=True,
        nullable=False,
        index=True,
        default=lambda: generate_reference("TXN")
    )
    booking_id = Column(Uuid(as_uuid=True), ForeignKey("bookings.id"), nullable=False, index=True)
    customer_id = Column(Uuid(as_uuid=True), ForeignKey("customers.id"), nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    transaction_type = Column(Enum(TransactionType, values_callable=enum_values), nullable=False, index=True)
    payment_method = Column(Enum(PaymentMethod, values_callable=enum_values), nullable=False, index=True)
    status = Column(
        Enum(TransactionStatus, values_callable=enum_values),
        default=TransactionStatus.PENDING,
        nullable=False,
        index=True
    )
    payment_proof_images = Column(JSON, default=list, nullable=False)
    external_reference = Column(String(50))
    transaction_date = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    processed_at = Column(DateTime(timezone=True))
    failed_at = Column(DateTime(timezone=True))
    refunded_at = Column(DateTime(timezone=True))
    notes = Column(String(500))
    failure_reason = Column(String(200))
    refund_reason = Column(String(500))

    # Refund cross-links
    original_transaction_id = Column(Uuid(as_uuid=True), ForeignKey("transactions.id"))
    refund_transaction_id = Column(Uuid(as_uuid=True), ForeignKey("transactions.id"))

    version = Column(Integer, nullable=False)
    __mapper_args__ = {"version_id_col": version}

    # Relationships
    booking = relationship("Booking", back_populates="transactions", foreign_keys=[booking_id])
    customer = relationship("Customer")
    original_transaction = relationship(
        "Transaction",
        foreign_keys=[original_transaction_id],
        remote_side="Transaction.id",
        viewonly=True
    )
    refund_transaction = relationship(
        "Transaction",
        foreign_keys=[refund_transaction_id],
        remote_side="Transaction.id",
        viewonly=True
    )

    @property
    def is_refund(self) -> bool:
        return self.transaction_type == TransactionType.REFUND

    def __repr__(self):
        return (
            f"<Transaction(id={self.id}, reference={self.transaction_reference}, "
            f"type={self.transaction_type}, amount={self.amount}, status={self.status})>"
        )
