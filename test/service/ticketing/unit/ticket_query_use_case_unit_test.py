from datetime import timedelta

import pytest

from src.service.ticketing.domain.entity.user_entity import UserEntity, UserRole
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.domain.ticketing_error import (
    EventNotFoundError,
    InvalidBookingRequestError,
    NoSeatsAvailableError,
    NotTicketHolderError,
    TicketNotFoundError,
)
from test.constants import ANOTHER_BUYER_ID, TEST_BUYER_ID, TEST_EVENT_ID, TEST_STAFF_ID
from test.service.ticketing.fixtures import make_event


pytestmark = pytest.mark.unit

BUYER = UserEntity(id=TEST_BUYER_ID, role=UserRole.BUYER)
OTHER_BUYER = UserEntity(id=ANOTHER_BUYER_ID, role=UserRole.BUYER)
STAFF = UserEntity(id=TEST_STAFF_ID, role=UserRole.STAFF)


async def _book_free(book_tickets_use_case, event_query_repo, *, event_id, holder_id=TEST_BUYER_ID):
    event_query_repo.upsert(make_event(event_id=event_id, price=0))
    views = await book_tickets_use_case.execute(event_id=event_id, holder_id=holder_id, count=1)
    return views[0].ticket


class TestListMyTickets:
    async def test_lists_newest_first_with_paging(
        self, list_my_tickets_use_case, book_tickets_use_case, event_query_repo
    ):
        # Given: Three tickets on three events
        ids = [
            (await _book_free(book_tickets_use_case, event_query_repo, event_id=e)).ticket_id
            for e in (11, 12, 13)
        ]

        # When: Page 1 of size 2
        page = await list_my_tickets_use_case.execute(holder_id=TEST_BUYER_ID, page=1, limit=2)

        # Then
        assert [view.ticket.ticket_id for view in page.items] == [ids[2], ids[1]]
        assert page.total == 3
        assert page.pages == 2

    async def test_other_holders_tickets_are_not_listed(
        self, list_my_tickets_use_case, book_tickets_use_case, event_query_repo
    ):
        await _book_free(
            book_tickets_use_case, event_query_repo, event_id=11, holder_id=ANOTHER_BUYER_ID
        )

        page = await list_my_tickets_use_case.execute(holder_id=TEST_BUYER_ID)

        assert page.items == []
        assert page.total == 0

    async def test_confirmed_ticket_of_past_event_is_listed_as_expired(
        self, list_my_tickets_use_case, book_tickets_use_case, event_query_repo
    ):
        # Given: A confirmed ticket, then the event date moves into the past
        ticket = await _book_free(book_tickets_use_case, event_query_repo, event_id=11)
        event_query_repo.upsert(make_event(event_id=11, price=0, starts_in=-timedelta(hours=2)))

        # When/Then: Filtering by expired finds it, filtering by confirmed does not
        expired = await list_my_tickets_use_case.execute(
            holder_id=TEST_BUYER_ID, status=TicketStatus.EXPIRED
        )
        confirmed = await list_my_tickets_use_case.execute(
            holder_id=TEST_BUYER_ID, status=TicketStatus.CONFIRMED
        )
        assert [view.ticket.ticket_id for view in expired.items] == [ticket.ticket_id]
        assert expired.items[0].effective_status == TicketStatus.EXPIRED
        assert confirmed.total == 0

    async def test_scannable_tickets_come_with_qr(
        self, list_my_tickets_use_case, book_tickets_use_case, event_query_repo
    ):
        await _book_free(book_tickets_use_case, event_query_repo, event_id=11)

        page = await list_my_tickets_use_case.execute(holder_id=TEST_BUYER_ID)

        assert page.items[0].image_available

    @pytest.mark.parametrize(('page', 'limit'), [(0, 10), (1, 0)])
    async def test_invalid_paging(self, list_my_tickets_use_case, page, limit):
        with pytest.raises(InvalidBookingRequestError):
            await list_my_tickets_use_case.execute(holder_id=TEST_BUYER_ID, page=page, limit=limit)


class TestGetTicket:
    async def test_holder_and_staff_can_view(
        self, get_ticket_use_case, book_tickets_use_case, event_query_repo
    ):
        ticket = await _book_free(book_tickets_use_case, event_query_repo, event_id=11)

        for requester in (BUYER, STAFF):
            view = await get_ticket_use_case.execute(
                ticket_id=ticket.ticket_id, requester=requester
            )
            assert view.ticket.ticket_id == ticket.ticket_id
            assert view.issuance.payload == ticket.verification_payload

    async def test_other_buyer_cannot_view(
        self, get_ticket_use_case, book_tickets_use_case, event_query_repo
    ):
        ticket = await _book_free(book_tickets_use_case, event_query_repo, event_id=11)

        with pytest.raises(NotTicketHolderError):
            await get_ticket_use_case.execute(ticket_id=ticket.ticket_id, requester=OTHER_BUYER)

    async def test_unknown_ticket(self, get_ticket_use_case):
        with pytest.raises(TicketNotFoundError):
            await get_ticket_use_case.execute(ticket_id='TKT-NOPE', requester=BUYER)


class TestEventTicketStats:
    async def test_counts_revenue_and_availability(
        self, get_event_ticket_stats_use_case, book_tickets_use_case, cancel_ticket_use_case,
        payment_proof_issuer,
    ):
        # Given: One paid ticket, one reserved, one cancelled
        proof = payment_proof_issuer.issue(holder_id=1, event_id=TEST_EVENT_ID)
        await book_tickets_use_case.execute(
            event_id=TEST_EVENT_ID,
            holder_id=1,
            count=1,
            payment_proof_token=proof.token,
            transaction_id=proof.transaction_id,
        )
        await book_tickets_use_case.execute(event_id=TEST_EVENT_ID, holder_id=2, count=1)
        cancelled = await book_tickets_use_case.execute(
            event_id=TEST_EVENT_ID, holder_id=3, count=1
        )
        await cancel_ticket_use_case.execute(
            ticket_id=cancelled[0].ticket.ticket_id, requester_id=3
        )

        # When
        stats = await get_event_ticket_stats_use_case.execute(event_id=TEST_EVENT_ID)

        # Then
        by_status = {item.status: item.count for item in stats.by_status}
        assert by_status == {
            TicketStatus.CONFIRMED: 1,
            TicketStatus.RESERVED: 1,
            TicketStatus.CANCELLED: 1,
        }
        assert stats.total_tickets == 3
        assert stats.total_revenue == 1500
        assert stats.total_seats == 10
        assert stats.available_seats == 8

    async def test_lists_event_tickets_newest_first_with_paging(
        self, get_event_ticket_stats_use_case, book_tickets_use_case, event_query_repo
    ):
        # Given: Three reservations on the event and one ticket on another event
        ids = []
        for holder_id in (1, 2, 3):
            views = await book_tickets_use_case.execute(
                event_id=TEST_EVENT_ID, holder_id=holder_id, count=1
            )
            ids.append(views[0].ticket.ticket_id)
        await _book_free(book_tickets_use_case, event_query_repo, event_id=12)

        # When
        first = await get_event_ticket_stats_use_case.execute(
            event_id=TEST_EVENT_ID, page=1, limit=2
        )
        second = await get_event_ticket_stats_use_case.execute(
            event_id=TEST_EVENT_ID, page=2, limit=2
        )

        # Then
        assert [view.ticket.ticket_id for view in first.tickets.items] == [ids[2], ids[1]]
        assert [view.ticket.ticket_id for view in second.tickets.items] == [ids[0]]
        assert first.tickets.total == 3
        assert first.tickets.pages == 2
        assert all(view.issuance is None for view in first.tickets.items)
        assert first.total_tickets == 3

    async def test_invalid_event_ticket_paging(self, get_event_ticket_stats_use_case):
        with pytest.raises(InvalidBookingRequestError):
            await get_event_ticket_stats_use_case.execute(event_id=TEST_EVENT_ID, page=0)

    async def test_event_not_on_sale_yet(self, get_event_ticket_stats_use_case):
        stats = await get_event_ticket_stats_use_case.execute(event_id=TEST_EVENT_ID)

        assert stats.total_tickets == 0
        assert stats.available_seats == stats.total_seats == 10
        assert stats.tickets.items == []
        assert stats.tickets.total == 0

    async def test_unknown_event(self, get_event_ticket_stats_use_case):
        with pytest.raises(EventNotFoundError):
            await get_event_ticket_stats_use_case.execute(event_id=404)


class TestSeatMapAndInventory:
    async def test_ensure_then_read_seat_map(
        self, ensure_seat_inventory_use_case, get_seat_map_use_case
    ):
        await ensure_seat_inventory_use_case.execute(event_id=TEST_EVENT_ID)

        inventory = await get_seat_map_use_case.execute(event_id=TEST_EVENT_ID)

        assert inventory.total_seats == 10
        assert inventory.available_seats == 10

    async def test_event_capacity_wins_over_requested_size(self, ensure_seat_inventory_use_case):
        inventory = await ensure_seat_inventory_use_case.execute(
            event_id=TEST_EVENT_ID, total_seats=50
        )

        assert inventory.total_seats == 10

    async def test_negative_size_is_rejected(
        self, ensure_seat_inventory_use_case, event_query_repo
    ):
        event_query_repo.upsert(make_event(total_seats=None))

        with pytest.raises(InvalidBookingRequestError):
            await ensure_seat_inventory_use_case.execute(event_id=TEST_EVENT_ID, total_seats=-1)

    async def test_seat_map_before_sale(self, get_seat_map_use_case):
        with pytest.raises(NoSeatsAvailableError):
            await get_seat_map_use_case.execute(event_id=TEST_EVENT_ID)

    async def test_seat_map_of_unknown_event(self, get_seat_map_use_case):
        with pytest.raises(EventNotFoundError):
            await get_seat_map_use_case.execute(event_id=404)
