"""
API endpoints module
"""

from . import (
    auth,
    transactions,
    transaction_requests,
    client_transactions,
    client_transaction_requests,
    health
)

__all__ = [
    "auth",
    "transactions",
    "transaction_requests",
    "client_transactions",
    "client_transaction_requests",
    "health"
]
