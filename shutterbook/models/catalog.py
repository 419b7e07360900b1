"""
Catalog models referenced by bookings: photographers, services, packages
and promos
"""

from sqlalchemy import Column, String, Boolean, Numeric, Integer, JSON, Enum
import enum

from shutterbook.models.base import BaseModel, enum_values


class DiscountType(str, enum.Enum):
    PERCENTAGE = "Percentage"
    FIXED = "Fixed"


class Photographer(BaseModel):
    __tablename__ = "photographers"

    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    mobile_number = Column(String(20))
    bio = Column(String(1000))
    profile_image = Column(String(500))
    specialties = Column(JSON, default=list, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<Photographer(id={self.id}, name={self.name})>"


class Service(BaseModel):
    __tablename__ = "services"

    name = Column(String(50), unique=True, nullable=False)
    description = Column(String(1000))
    category = Column(String(50), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    old_price = Column(Numeric(10, 2), default=0)
    duration_minutes = Column(Integer)
    is_available = Column(Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<Service(id={self.id}, name={self.name}, price={self.price})>"


class Package(BaseModel):
    __tablename__ = "packages"

    name = Column(String(100), unique=True, nullable=False)
    description = Column(String(500))
    image = Column(String(500))
    package_price = Column(Numeric(10, 2), nullable=False)
    is_available = Column(Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<Package(id={self.id}, name={self.name}, price={self.package_price})>"


class Promo(BaseModel):
    __tablename__ = "promos"

    promo_code = Column(String(20), unique=True, nullable=False)
    name = Column(String(100), nullable=False)
    discount_type = Column(Enum(DiscountType, values_callable=enum_values), nullable=False)
    discount_value = Column(Numeric(10, 2), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<Promo(id={self.id}, code={self.promo_code})>"
