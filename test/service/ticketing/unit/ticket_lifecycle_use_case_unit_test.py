"""
Unit tests for the post-booking lifecycle

CancelTicketUseCase, CheckInTicketUseCase and ConfirmTicketPaymentUseCase on the
in-memory adapters.
"""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from src.service.ticketing.domain.enum.ticket_status import PaymentStatus, TicketStatus
from src.service.ticketing.domain.ticketing_error import (
    AlreadyCheckedInError,
    CancellationFailedError,
    CannotCancelUsedTicketError,
    EventNotBookableError,
    InvalidPaymentProofError,
    InvalidStateForCheckInError,
    InvalidTicketTransitionError,
    NotTicketHolderError,
    TicketAlreadyCancelledError,
    TicketNotFoundError,
    TicketStateConflictError,
)
from test.constants import ANOTHER_BUYER_ID, TEST_BUYER_ID, TEST_EVENT_ID, TEST_STAFF_ID
from test.service.ticketing.fixtures import make_event


pytestmark = pytest.mark.unit


@pytest.fixture
async def reserved_ticket(book_tickets_use_case):
    views = await book_tickets_use_case.execute(
        event_id=TEST_EVENT_ID, holder_id=TEST_BUYER_ID, count=1
    )
    return views[0].ticket


@pytest.fixture
async def confirmed_ticket(book_tickets_use_case, payment_proof_issuer):
    proof = payment_proof_issuer.issue(holder_id=TEST_BUYER_ID, event_id=TEST_EVENT_ID)
    views = await book_tickets_use_case.execute(
        event_id=TEST_EVENT_ID,
        holder_id=TEST_BUYER_ID,
        count=1,
        payment_proof_token=proof.token,
        transaction_id=proof.transaction_id,
    )
    return views[0].ticket


async def _available(seat_inventory_handler) -> int:
    inventory = await seat_inventory_handler.get_inventory(event_id=TEST_EVENT_ID)
    return inventory.available_seats


class TestCancelTicket:
    async def test_cancel_frees_the_seat_for_someone_else(
        self, cancel_ticket_use_case, book_tickets_use_case, confirmed_ticket,
        seat_inventory_handler,
    ):
        # Given: A confirmed ticket on S001
        assert await _available(seat_inventory_handler) == 9

        # When: The holder cancels it
        view = await cancel_ticket_use_case.execute(
            ticket_id=confirmed_ticket.ticket_id, requester_id=TEST_BUYER_ID
        )

        # Then: Cancelled and refunded, the seat is free
        assert view.ticket.status == TicketStatus.CANCELLED
        assert view.ticket.payment.status == PaymentStatus.REFUNDED
        assert await _available(seat_inventory_handler) == 10

        # And: Another buyer can take the very same seat
        views = await book_tickets_use_case.execute(
            event_id=TEST_EVENT_ID,
            holder_id=ANOTHER_BUYER_ID,
            count=1,
            preferred_seat_ids=[confirmed_ticket.seat_id],
        )
        assert views[0].ticket.seat_id == confirmed_ticket.seat_id

    async def test_holder_may_book_again_after_cancelling(
        self, cancel_ticket_use_case, book_tickets_use_case, reserved_ticket
    ):
        await cancel_ticket_use_case.execute(
            ticket_id=reserved_ticket.ticket_id, requester_id=TEST_BUYER_ID
        )

        views = await book_tickets_use_case.execute(
            event_id=TEST_EVENT_ID, holder_id=TEST_BUYER_ID, count=1
        )

        assert views[0].ticket.status == TicketStatus.RESERVED

    async def test_only_the_holder_may_cancel(self, cancel_ticket_use_case, reserved_ticket):
        with pytest.raises(NotTicketHolderError):
            await cancel_ticket_use_case.execute(
                ticket_id=reserved_ticket.ticket_id, requester_id=ANOTHER_BUYER_ID
            )

    async def test_cancel_twice(self, cancel_ticket_use_case, reserved_ticket):
        await cancel_ticket_use_case.execute(
            ticket_id=reserved_ticket.ticket_id, requester_id=TEST_BUYER_ID
        )

        with pytest.raises(TicketAlreadyCancelledError):
            await cancel_ticket_use_case.execute(
                ticket_id=reserved_ticket.ticket_id, requester_id=TEST_BUYER_ID
            )

    async def test_checked_in_ticket_cannot_be_cancelled(
        self, cancel_ticket_use_case, check_in_ticket_use_case, confirmed_ticket,
        seat_inventory_handler,
    ):
        await check_in_ticket_use_case.execute(
            ticket_id=confirmed_ticket.ticket_id, staff_id=TEST_STAFF_ID
        )

        with pytest.raises(CannotCancelUsedTicketError):
            await cancel_ticket_use_case.execute(
                ticket_id=confirmed_ticket.ticket_id, requester_id=TEST_BUYER_ID
            )

        assert await _available(seat_inventory_handler) == 9

    async def test_release_failure_restores_the_ticket(
        self, cancel_ticket_use_case, seat_inventory_handler, ticket_ledger_repo,
        confirmed_ticket, monkeypatch,
    ):
        # Given: The seat inventory cannot be written
        monkeypatch.setattr(
            seat_inventory_handler,
            'release_seat',
            AsyncMock(side_effect=ConnectionError('inventory store down')),
        )

        # When: Cancelling
        with pytest.raises(CancellationFailedError):
            await cancel_ticket_use_case.execute(
                ticket_id=confirmed_ticket.ticket_id, requester_id=TEST_BUYER_ID
            )

        # Then: The ticket is confirmed again and still holds its seat
        stored = await ticket_ledger_repo.get_by_ticket_id(ticket_id=confirmed_ticket.ticket_id)
        assert stored.status == TicketStatus.CONFIRMED
        assert await _available(seat_inventory_handler) == 9

    async def test_unknown_ticket(self, cancel_ticket_use_case):
        with pytest.raises(TicketNotFoundError):
            await cancel_ticket_use_case.execute(ticket_id='TKT-NOPE', requester_id=TEST_BUYER_ID)


class TestCheckInTicket:
    async def test_check_in_records_staff_and_time(
        self, check_in_ticket_use_case, confirmed_ticket
    ):
        view = await check_in_ticket_use_case.execute(
            ticket_id=confirmed_ticket.ticket_id, staff_id=TEST_STAFF_ID
        )

        assert view.ticket.status == TicketStatus.CHECKED_IN
        assert view.ticket.check_in_record.done is True
        assert view.ticket.check_in_record.by == TEST_STAFF_ID
        assert view.ticket.check_in_record.at is not None

    async def test_second_check_in(self, check_in_ticket_use_case, confirmed_ticket):
        await check_in_ticket_use_case.execute(
            ticket_id=confirmed_ticket.ticket_id, staff_id=TEST_STAFF_ID
        )

        with pytest.raises(AlreadyCheckedInError):
            await check_in_ticket_use_case.execute(
                ticket_id=confirmed_ticket.ticket_id, staff_id=TEST_STAFF_ID
            )

    async def test_unpaid_ticket(self, check_in_ticket_use_case, reserved_ticket):
        with pytest.raises(InvalidStateForCheckInError):
            await check_in_ticket_use_case.execute(
                ticket_id=reserved_ticket.ticket_id, staff_id=TEST_STAFF_ID
            )

    async def test_concurrent_change_is_detected(
        self, check_in_ticket_use_case, ticket_ledger_repo, confirmed_ticket, monkeypatch
    ):
        monkeypatch.setattr(
            ticket_ledger_repo, 'update', AsyncMock(side_effect=TicketStateConflictError())
        )

        with pytest.raises(TicketStateConflictError):
            await check_in_ticket_use_case.execute(
                ticket_id=confirmed_ticket.ticket_id, staff_id=TEST_STAFF_ID
            )


class TestConfirmTicketPayment:
    async def test_reserved_ticket_is_confirmed_and_issued(
        self, confirm_ticket_payment_use_case, payment_proof_issuer, reserved_ticket
    ):
        proof = payment_proof_issuer.issue(holder_id=TEST_BUYER_ID, event_id=TEST_EVENT_ID)

        view = await confirm_ticket_payment_use_case.execute(
            ticket_id=reserved_ticket.ticket_id,
            holder_id=TEST_BUYER_ID,
            payment_proof_token=proof.token,
            transaction_id=proof.transaction_id,
        )

        assert view.effective_status == TicketStatus.CONFIRMED
        assert view.ticket.payment.proof_reference == proof.transaction_id
        assert view.issuance is not None
        assert view.issuance.payload == view.ticket.verification_payload

    async def test_already_confirmed_ticket_does_not_spend_the_proof(
        self, confirm_ticket_payment_use_case, payment_proof_issuer, payment_proof_registry,
        confirmed_ticket,
    ):
        proof = payment_proof_issuer.issue(holder_id=TEST_BUYER_ID, event_id=TEST_EVENT_ID)

        with pytest.raises(InvalidTicketTransitionError):
            await confirm_ticket_payment_use_case.execute(
                ticket_id=confirmed_ticket.ticket_id,
                holder_id=TEST_BUYER_ID,
                payment_proof_token=proof.token,
                transaction_id=proof.transaction_id,
            )

        assert await payment_proof_registry.claim(
            transaction_id=proof.transaction_id,
            holder_id=TEST_BUYER_ID,
            expires_at=proof.expires_at,
        )

    async def test_someone_elses_ticket(
        self, confirm_ticket_payment_use_case, payment_proof_issuer, reserved_ticket
    ):
        proof = payment_proof_issuer.issue(holder_id=ANOTHER_BUYER_ID, event_id=TEST_EVENT_ID)

        with pytest.raises(NotTicketHolderError):
            await confirm_ticket_payment_use_case.execute(
                ticket_id=reserved_ticket.ticket_id,
                holder_id=ANOTHER_BUYER_ID,
                payment_proof_token=proof.token,
                transaction_id=proof.transaction_id,
            )

    async def test_proof_for_another_event(
        self, confirm_ticket_payment_use_case, payment_proof_issuer, reserved_ticket
    ):
        proof = payment_proof_issuer.issue(holder_id=TEST_BUYER_ID, event_id=999)

        with pytest.raises(InvalidPaymentProofError, match='another event'):
            await confirm_ticket_payment_use_case.execute(
                ticket_id=reserved_ticket.ticket_id,
                holder_id=TEST_BUYER_ID,
                payment_proof_token=proof.token,
                transaction_id=proof.transaction_id,
            )

    async def test_event_already_started(
        self, confirm_ticket_payment_use_case, payment_proof_issuer, event_query_repo,
        reserved_ticket,
    ):
        event_query_repo.upsert(make_event(starts_in=-timedelta(minutes=5)))
        proof = payment_proof_issuer.issue(holder_id=TEST_BUYER_ID, event_id=TEST_EVENT_ID)

        with pytest.raises(EventNotBookableError):
            await confirm_ticket_payment_use_case.execute(
                ticket_id=reserved_ticket.ticket_id,
                holder_id=TEST_BUYER_ID,
                payment_proof_token=proof.token,
                transaction_id=proof.transaction_id,
            )

    async def test_ledger_conflict_gives_the_proof_back(
        self, confirm_ticket_payment_use_case, payment_proof_issuer, payment_proof_registry,
        ticket_ledger_repo, reserved_ticket, monkeypatch,
    ):
        proof = payment_proof_issuer.issue(holder_id=TEST_BUYER_ID, event_id=TEST_EVENT_ID)
        monkeypatch.setattr(
            ticket_ledger_repo, 'update', AsyncMock(side_effect=TicketStateConflictError())
        )

        with pytest.raises(TicketStateConflictError):
            await confirm_ticket_payment_use_case.execute(
                ticket_id=reserved_ticket.ticket_id,
                holder_id=TEST_BUYER_ID,
                payment_proof_token=proof.token,
                transaction_id=proof.transaction_id,
            )

        assert await payment_proof_registry.claim(
            transaction_id=proof.transaction_id,
            holder_id=TEST_BUYER_ID,
            expires_at=proof.expires_at,
        )
