"""
Customer model
"""

from sqlalchemy import Column, String, Boolean
from sqlalchemy.orm import relationship

from shutterbook.models.base import BaseModel


class Customer(BaseModel):
    """
    Studio client who books sessions and pays for them
    """
    __tablename__ = "customers"

    customer_no = Column(String(20), unique=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(25), nullable=False)
    last_name = Column(String(25), nullable=False)
    mobile_number = Column(String(20), nullable=False)
    profile_image = Column(String(500))
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    bookings = relationship("Booking", back_populates="customer")

    def __repr__(self):
        return f"<Customer(id={self.id}, email={self.email})>"
