"""
Database models
"""

from shutterbook.models.user import Role, User
from shutterbook.models.customer import Customer
from shutterbook.models.catalog import Photographer, Service, Package, Promo
from shutterbook.models.booking import Booking, BookingService
from shutterbook.models.transaction import Transaction
from shutterbook.models.transaction_request import TransactionRequest

__all__ = [
    "Role",
    "User",
    "Customer",
    "Photographer",
    "Service",
    "Package",
    "Promo",
    "Booking",
    "BookingService",
    "Transaction",
    "TransactionRequest"
]
