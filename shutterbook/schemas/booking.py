"""
Booking schemas and the reference-record shapes embedded in ledger views
"""

from typing import List, Optional
from uuid import UUID
from datetime import datetime

from shutterbook.schemas.base import BaseSchema, IDSchema, Money
from shutterbook.models.booking import BookingStatus
from shutterbook.models.catalog import DiscountType


class ContactBrief(IDSchema):
    """Name and contact details of a customer or administrator"""
    first_name: str
    last_name: str
    email: str
    mobile_number: Optional[str] = None


class CustomerBrief(ContactBrief):
    customer_no: Optional[str] = None
    profile_image: Optional[str] = None


class PhotographerBrief(IDSchema):
    name: str
    email: str
    mobile_number: Optional[str] = None
    profile_image: Optional[str] = None


class PackageBrief(IDSchema):
    name: str
    description: Optional[str] = None
    image: Optional[str] = None
    package_price: Money


class PromoBrief(IDSchema):
    promo_code: str
    name: str
    discount_type: DiscountType
    discount_value: Money


class ServiceBrief(IDSchema):
    name: str
    category: str
    price: Money
    duration_minutes: Optional[int] = None


class BookingServiceLine(BaseSchema):
    """Service line on a booking"""
    service: ServiceBrief
    quantity: int
    price_per_unit: Money
    total_price: Money


class BookingBrief(IDSchema):
    """Booking shape used in review queue listings"""
    booking_reference: str
    booking_date: datetime
    start_time: str
    status: BookingStatus


class BookingDetail(BookingBrief):
    """Booking with its customer, crew and priced line items"""
    end_time: str
    location: str
    total_amount: Money
    discount_amount: Money
    final_amount: Money
    customer: CustomerBrief
    photographer: Optional[PhotographerBrief] = None
    package: Optional[PackageBrief] = None
    promo: Optional[PromoBrief] = None
    services: List[BookingServiceLine] = []
