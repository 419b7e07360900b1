"""
Typed loaders for the expanded views returned by the API.

Each loader names the relationships it needs up front and validates the
result into a fixed schema, so nothing is lazy-loaded under the async
session.
"""

from typing import List, Optional, Sequence
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from shutterbook.models.booking import Booking, BookingService
from shutterbook.models.transaction import Transaction
from shutterbook.models.transaction_request import TransactionRequest
from shutterbook.schemas.transaction import TransactionDetail
from shutterbook.schemas.transaction_request import (
    TransactionRequestDetail,
    TransactionRequestListItem,
)


def booking_detail_options():
    return (
        selectinload(Booking.customer),
        selectinload(Booking.photographer),
        selectinload(Booking.package),
        selectinload(Booking.promo),
        selectinload(Booking.services).selectinload(BookingService.service),
    )


def transaction_detail_options():
    return (
        selectinload(Transaction.booking).options(*booking_detail_options()),
        selectinload(Transaction.customer),
        selectinload(Transaction.original_transaction),
        selectinload(Transaction.refund_transaction),
    )


async def load_transaction_details(
    db: AsyncSession,
    criteria: Sequence = (),
) -> List[TransactionDetail]:
    """Matching transactions, newest transaction_date first"""
    stmt = (
        select(Transaction)
        .options(*transaction_detail_options())
        .where(*criteria)
        .order_by(Transaction.transaction_date.desc(), Transaction.created_at.desc())
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    return [TransactionDetail.model_validate(t) for t in result.scalars().all()]


async def load_transaction_detail(
    db: AsyncSession,
    transaction_id: uuid.UUID,
) -> Optional[TransactionDetail]:
    rows = await load_transaction_details(db, [Transaction.id == transaction_id])
    return rows[0] if rows else None


async def load_request_list(
    db: AsyncSession,
    criteria: Sequence = (),
) -> List[TransactionRequestListItem]:
    """Review queue rows, newest first"""
    stmt = (
        select(TransactionRequest)
        .options(
            selectinload(TransactionRequest.transaction),
            selectinload(TransactionRequest.booking),
            selectinload(TransactionRequest.customer),
            selectinload(TransactionRequest.reviewer),
        )
        .where(*criteria)
        .order_by(TransactionRequest.created_at.desc())
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    return [TransactionRequestListItem.model_validate(r) for r in result.scalars().all()]


async def load_request_detail(
    db: AsyncSession,
    request_id: uuid.UUID,
) -> Optional[TransactionRequestDetail]:
    stmt = (
        select(TransactionRequest)
        .options(
            selectinload(TransactionRequest.transaction).options(*transaction_detail_options()),
            selectinload(TransactionRequest.booking).options(*booking_detail_options()),
            selectinload(TransactionRequest.customer),
            selectinload(TransactionRequest.reviewer),
        )
        .where(TransactionRequest.id == request_id)
        .execution_options(populate_existing=True)
    )
    request = (await db.execute(stmt)).scalar_one_or_none()
    return TransactionRequestDetail.model_validate(request) if request else None
