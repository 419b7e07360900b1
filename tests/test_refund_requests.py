"""
Tests for the refund request review workflow
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from shutterbook.config import settings
from shutterbook.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    StateTransitionError,
    ValidationError,
)
from shutterbook.models.transaction import TransactionStatus, TransactionType
from shutterbook.models.transaction_request import TransactionRequestStatus
from shutterbook.services.ledger_service import ledger_service
from shutterbook.services.refund_request_service import refund_request_service
from tests.factories import create_request, create_transaction


class TestSubmit:
    """Customers opening refund requests"""

    @pytest.mark.asyncio
    async def test_submit_creates_pending_request(self, db_session, customer, booking, completed_payment):
        detail = await refund_request_service.submit(
            db_session,
            customer.id,
            transaction_id=completed_payment.id,
            booking_id=booking.id,
            refund_amount=Decimal("1200.00"),
            refund_reason="  Two hours were cut short  ",
        )

        assert detail.status == "Pending"
        assert detail.request_type == "Refund"
        assert detail.request_reference.startswith("TRQ-")
        assert detail.refund_reason == "Two hours were cut short"
        assert detail.refund_amount == Decimal("1200.00")
        assert detail.transaction.id == completed_payment.id
        assert detail.booking.id == booking.id
        assert detail.customer.id == customer.id
        assert detail.reviewer is None

    @pytest.mark.asyncio
    async def test_submit_short_reason(self, db_session, customer, booking, completed_payment):
        with pytest.raises(ValidationError) as exc_info:
            await refund_request_service.submit(
                db_session, customer.id, completed_payment.id, booking.id, Decimal("10.00"), "late"
            )
        assert exc_info.value.message == "Refund reason must be at least 5 characters long"

    @pytest.mark.asyncio
    async def test_submit_for_someone_elses_transaction(
        self, db_session, other_customer, booking, completed_payment
    ):
        with pytest.raises(AuthorizationError):
            await refund_request_service.submit(
                db_session, other_customer.id, completed_payment.id, booking.id,
                Decimal("10.00"), "Not my session"
            )

    @pytest.mark.asyncio
    async def test_submit_for_pending_transaction(self, db_session, customer, booking, pending_payment):
        with pytest.raises(StateTransitionError):
            await refund_request_service.submit(
                db_session, customer.id, pending_payment.id, booking.id,
                Decimal("10.00"), "Changed my mind"
            )

    @pytest.mark.asyncio
    async def test_submit_exceeding_amount(self, db_session, customer, booking, completed_payment):
        with pytest.raises(ValidationError):
            await refund_request_service.submit(
                db_session, customer.id, completed_payment.id, booking.id,
                Decimal("5000.01"), "Overcharged for prints"
            )

    @pytest.mark.asyncio
    async def test_submit_for_refund_transaction(self, db_session, customer, booking):
        refund = await create_transaction(
            db_session, booking, amount="500.00", transaction_type=TransactionType.REFUND
        )

        with pytest.raises(ValidationError) as exc_info:
            await refund_request_service.submit(
                db_session, customer.id, refund.id, booking.id, Decimal("100.00"), "Refund the refund"
            )
        assert exc_info.value.message == "Refund transactions cannot be refunded"

    @pytest.mark.asyncio
    async def test_submit_for_already_refunded_transaction(
        self, db_session, customer, admin_user, booking, completed_payment
    ):
        customer_id, transaction_id, booking_id = customer.id, completed_payment.id, booking.id
        await ledger_service.create_refund(
            db_session, transaction_id, Decimal("1000.00"), "Rain delay", admin_user.id
        )

        with pytest.raises(ConflictError) as exc_info:
            await refund_request_service.submit(
                db_session, customer_id, transaction_id, booking_id, Decimal("100.00"), "Another refund"
            )
        assert exc_info.value.message == "Transaction has already been refunded"
        assert await refund_request_service.list_customer_requests(db_session, customer_id) == []

    @pytest.mark.asyncio
    async def test_submit_with_foreign_booking(
        self, db_session, customer, other_booking, completed_payment
    ):
        with pytest.raises(AuthorizationError):
            await refund_request_service.submit(
                db_session, customer.id, completed_payment.id, other_booking.id,
                Decimal("10.00"), "Wrong booking"
            )

    @pytest.mark.asyncio
    async def test_duplicate_pending_request_conflicts(self, db_session, customer, booking, completed_payment):
        customer_id, transaction_id, booking_id = customer.id, completed_payment.id, booking.id
        await refund_request_service.submit(
            db_session, customer_id, transaction_id, booking_id, Decimal("100.00"), "First request"
        )

        with pytest.raises(ConflictError) as exc_info:
            await refund_request_service.submit(
                db_session, customer_id, transaction_id, booking_id, Decimal("100.00"), "Second request"
            )
        assert exc_info.value.status_code == 409

    @pytest.mark.asyncio
    async def test_new_request_allowed_after_rejection(
        self, db_session, customer, admin_user, booking, completed_payment
    ):
        customer_id, transaction_id, booking_id = customer.id, completed_payment.id, booking.id
        first = await refund_request_service.submit(
            db_session, customer_id, transaction_id, booking_id, Decimal("100.00"), "First request"
        )
        await refund_request_service.reject_refund(db_session, first.id, admin_user.id, "Outside the window")

        second = await refund_request_service.submit(
            db_session, customer_id, transaction_id, booking_id, Decimal("100.00"), "Second request"
        )
        assert second.status == "Pending"
        assert second.id != first.id


class TestReview:
    """Administrators approving or rejecting requests"""

    @pytest.mark.asyncio
    async def test_approve(self, db_session, admin_user, completed_payment):
        request = await create_request(db_session, completed_payment)
        transaction_id = completed_payment.id

        detail = await refund_request_service.approve_refund(
            db_session, request.id, admin_user.id, admin_notes="Confirmed with photographer"
        )

        assert detail.status == "Approved"
        assert detail.reviewed_by == admin_user.id
        assert detail.reviewed_at is not None
        assert detail.admin_notes == "Confirmed with photographer"
        assert detail.reviewer.id == admin_user.id

        # Approval alone records the decision; the ledger is untouched
        original = await ledger_service.get_transaction(db_session, transaction_id)
        assert original.refund_transaction_id is None

    @pytest.mark.asyncio
    async def test_approve_requires_completed_transaction(self, db_session, admin_user, booking):
        transaction = await create_transaction(db_session, booking, status=TransactionStatus.PENDING)
        request = await create_request(db_session, transaction)
        request_id = request.id

        with pytest.raises(ValidationError) as exc_info:
            await refund_request_service.approve_refund(db_session, request_id, admin_user.id)
        assert exc_info.value.message == "Only completed transactions are eligible for refund requests"

        detail = await refund_request_service.get_request(db_session, request_id)
        assert detail.status == "Pending"
        assert detail.reviewed_by is None

    @pytest.mark.asyncio
    async def test_approve_twice(self, db_session, admin_user, completed_payment):
        request = await create_request(db_session, completed_payment)
        request_id, actor_id = request.id, admin_user.id
        await refund_request_service.approve_refund(db_session, request_id, actor_id)

        with pytest.raises(StateTransitionError) as exc_info:
            await refund_request_service.approve_refund(db_session, request_id, actor_id)
        assert exc_info.value.message == "Cannot approve request with status: Approved"

    @pytest.mark.asyncio
    async def test_approve_unknown(self, db_session, admin_user):
        with pytest.raises(NotFoundError):
            await refund_request_service.approve_refund(db_session, uuid4(), admin_user.id)

    @pytest.mark.asyncio
    async def test_reject_reason_boundary(self, db_session, admin_user, completed_payment):
        request = await create_request(db_session, completed_payment)
        request_id, actor_id = request.id, admin_user.id

        with pytest.raises(ValidationError):
            await refund_request_service.reject_refund(db_session, request_id, actor_id, "nope")

        detail = await refund_request_service.reject_refund(
            db_session, request_id, actor_id, "  Past due  ", admin_notes="Policy 4.2"
        )
        assert detail.status == "Rejected"
        assert detail.rejection_reason == "Past due"
        assert detail.admin_notes == "Policy 4.2"

    @pytest.mark.asyncio
    async def test_reject_checks_status_before_reason(self, db_session, admin_user, completed_payment):
        request = await create_request(db_session, completed_payment)
        request_id, actor_id = request.id, admin_user.id
        await refund_request_service.approve_refund(db_session, request_id, actor_id)

        with pytest.raises(StateTransitionError):
            await refund_request_service.reject_refund(db_session, request_id, actor_id, "")

    @pytest.mark.asyncio
    async def test_approve_issues_refund_when_enabled(
        self, db_session, admin_user, completed_payment, monkeypatch
    ):
        monkeypatch.setattr(settings, "REFUND_APPROVAL_ISSUES_REFUND", True)
        request = await create_request(db_session, completed_payment, refund_amount="800.00")
        transaction_id = completed_payment.id

        detail = await refund_request_service.approve_refund(db_session, request.id, admin_user.id)
        assert detail.status == "Approved"

        original = await ledger_service.get_transaction(db_session, transaction_id)
        assert original.refund_transaction is not None
        assert original.refund_transaction.amount == Decimal("800.00")
        assert original.refund_transaction.transaction_type == "Refund"

        refund = await ledger_service.get_transaction(db_session, original.refund_transaction_id)
        assert refund.original_transaction_id == transaction_id
        assert refund.refund_reason == "Session was cut short"

    @pytest.mark.asyncio
    async def test_failed_refund_keeps_request_pending(
        self, db_session, admin_user, completed_payment, monkeypatch
    ):
        monkeypatch.setattr(settings, "REFUND_APPROVAL_ISSUES_REFUND", True)
        transaction_id = completed_payment.id
        actor_id = admin_user.id
        await ledger_service.create_refund(db_session, transaction_id, Decimal("100.00"), "Already refunded", actor_id)
        request = await create_request(db_session, completed_payment)
        request_id = request.id

        with pytest.raises(ConflictError):
            await refund_request_service.approve_refund(db_session, request_id, actor_id)

        detail = await refund_request_service.get_request(db_session, request_id)
        assert detail.status == "Pending"


class TestQueue:

    @pytest.mark.asyncio
    async def test_list_filters_by_status(self, db_session, booking, completed_payment):
        await create_request(db_session, completed_payment)
        second_payment = await create_transaction(db_session, booking, amount="900.00")
        await create_request(
            db_session, second_payment, refund_amount="900.00", status=TransactionRequestStatus.REJECTED
        )

        everything = await refund_request_service.list_requests(db_session)
        assert len(everything) == 2

        pending = await refund_request_service.list_requests(db_session, status="Pending")
        assert len(pending) == 1
        assert pending[0].transaction.id == completed_payment.id
        assert pending[0].booking.id == booking.id

    @pytest.mark.asyncio
    async def test_customer_view_is_scoped(self, db_session, customer, other_customer, completed_payment):
        request = await create_request(db_session, completed_payment)
        request_id, customer_id, other_id = request.id, customer.id, other_customer.id

        mine = await refund_request_service.list_customer_requests(db_session, customer_id)
        assert [r.id for r in mine] == [request_id]
        assert await refund_request_service.list_customer_requests(db_session, other_id) == []

        with pytest.raises(AuthorizationError):
            await refund_request_service.get_customer_request(db_session, other_id, request_id)

    @pytest.mark.asyncio
    async def test_cancel_pending(self, db_session, customer, completed_payment):
        request = await create_request(db_session, completed_payment)
        request_id, customer_id = request.id, customer.id

        cancelled = await refund_request_service.cancel(db_session, customer_id, request_id)
        assert cancelled == request_id
        assert await refund_request_service.list_requests(db_session) == []

        with pytest.raises(NotFoundError):
            await refund_request_service.cancel(db_session, customer_id, request_id)

    @pytest.mark.asyncio
    async def test_cancel_by_other_customer(self, db_session, other_customer, completed_payment):
        request = await create_request(db_session, completed_payment)

        with pytest.raises(NotFoundError):
            await refund_request_service.cancel(db_session, other_customer.id, request.id)

    @pytest.mark.asyncio
    async def test_cancel_reviewed_request(self, db_session, customer, admin_user, completed_payment):
        request = await create_request(db_session, completed_payment)
        request_id, customer_id = request.id, customer.id
        await refund_request_service.approve_refund(db_session, request_id, admin_user.id)

        with pytest.raises(StateTransitionError):
            await refund_request_service.cancel(db_session, customer_id, request_id)
