"""
Booking and BookingService models
"""

from sqlalchemy import Column, String, ForeignKey, Enum, Numeric, DateTime, Integer, Uuid
from sqlalchemy.orm import relationship
import enum

from shutterbook.models.base import AuditMixin, BaseModel, generate_reference, enum_values


class BookingStatus(str, enum.Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    ONGOING = "Ongoing"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    RESCHEDULED = "Rescheduled"


class Booking(AuditMixin, BaseModel):
    """
    Photo session booked by a customer
    """
    __tablename__ = "bookings"

    booking_reference = Column(
        String(12),
        unique=True,
        nullable=False,
        index=True,
        default=lambda: generate_reference("BK")
    )
    customer_id = Column(Uuid(as_uuid=True), ForeignKey("customers.id"), nullable=False, index=True)
    package_id = Column(Uuid(as_uuid=True), ForeignKey("packages.id"))
    photographer_id = Column(Uuid(as_uuid=True), ForeignKey("photographers.id"))
    promo_id = Column(Uuid(as_uuid=True), ForeignKey("promos.id"))

    booking_date = Column(DateTime(timezone=True), nullable=False)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    location = Column(String(200), nullable=False)
    status = Column(
        Enum(BookingStatus, values_callable=enum_values),
        default=BookingStatus.PENDING,
        nullable=False,
        index=True
    )

    total_amount = Column(Numeric(10, 2), nullable=False)
    discount_amount = Column(Numeric(10, 2), default=0, nullable=False)
    final_amount = Column(Numeric(10, 2), nullable=False)

    # Relationships
    customer = relationship("Customer", back_populates="bookings")
    package = relationship("Package")
    photographer = relationship("Photographer")
    promo = relationship("Promo")
    services = relationship("BookingService", back_populates="booking", cascade="all, delete-orphan")
    transactions = relationship(
        "Transaction",
        back_populates="booking",
        foreign_keys="Transaction.booking_id"
    )

    def __repr__(self):
        return f"<Booking(id={self.id}, reference={self.booking_reference}, status={self.status})>"


class BookingService(BaseModel):
    """
    Line item linking a booking to a catalog service
    """
    __tablename__ = "booking_services"

    booking_id = Column(Uuid(as_uuid=True), ForeignKey("bookings.id"), nullable=False, index=True)
    service_id = Column(Uuid(as_uuid=True), ForeignKey("services.id"), nullable=False)
    quantity = Column(Integer, default=1, nullable=False)
    price_per_unit = Column(Numeric(10, 2), nullable=False)
    total_price = Column(Numeric(10, 2), nullable=False)

    # Relationships
    booking = relationship("Booking", back_populates="services")
    service = relationship("Service")

    def __repr__(self):
        return f"<BookingService(booking_id={self.booking_id}, service_id={self.service_id}, qty={self.quantity})>"
