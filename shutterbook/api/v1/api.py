"""
Main API Router
Aggregates all API endpoints for v1
"""

from fastapi import APIRouter
from shutterbook.api.v1.endpoints import (
    auth,
    transactions,
    transaction_requests,
    client_transactions,
    client_transaction_requests,
    health
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(transactions.router, prefix="/admin/transactions", tags=["admin transactions"])
api_router.include_router(
    transaction_requests.router,
    prefix="/admin/transaction-requests",
    tags=["admin transaction requests"]
)
api_router.include_router(client_transactions.router, prefix="/client/transactions", tags=["client transactions"])
api_router.include_router(
    client_transaction_requests.router,
    prefix="/client/transaction-requests",
    tags=["client transaction requests"]
)
api_router.include_router(health.router, prefix="/health", tags=["health"])
