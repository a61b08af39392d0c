"""
Unit tests for SeatInventoryHandlerImpl

Test Coverage:
1. ensure_inventory: create, idempotency, rebuild of a damaged map from the ledger
2. reserve_seat / reserve_seats: exclusivity under concurrency, all-or-nothing groups
3. release_seat(s): holder-checked and idempotent
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest

from src.service.ticketing.domain.entity.seat_inventory_entity import SeatInventory, SeatSlot
from src.service.ticketing.domain.entity.ticket_entity import Ticket
from src.service.ticketing.domain.enum.ticket_status import PaymentMethod, TicketStatus
from src.service.ticketing.domain.ticketing_error import (
    DuplicateBookingError,
    NoSeatsAvailableError,
    SeatUnavailableError,
)
from src.service.ticketing.driven_adapter.repo.in_memory_ticket_ledger_repo_impl import (
    InMemoryTicketLedgerRepoImpl,
)
from src.service.ticketing.driven_adapter.state.local_event_lock_manager_impl import (
    LocalEventLockManagerImpl,
)
from src.service.ticketing.driven_adapter.state.seat_inventory_handler_impl import (
    SeatInventoryHandlerImpl,
)


pytestmark = pytest.mark.unit

EVENT_ID = 1


def _ticket(seat_id: str, holder_id: int) -> Ticket:
    return Ticket.reserve(
        event_id=EVENT_ID,
        holder_id=holder_id,
        seat_id=seat_id,
        amount=1500,
        currency='USD',
        method=PaymentMethod.CREDIT_CARD,
        now=datetime.now(timezone.utc),
    ).confirm(proof_reference=None, now=datetime.now(timezone.utc))


class _SlowLedger(InMemoryTicketLedgerRepoImpl):
    """Records whether the event lock was held and yields to the loop on every read."""

    def __init__(self, lock_manager: LocalEventLockManagerImpl) -> None:
        super().__init__()
        self.lock_manager = lock_manager
        self.lock_held_on_read: List[bool] = []
        self.on_read: Optional[asyncio.Task] = None
        self.cancel_on_read: Optional[Ticket] = None
        self.seat_inventory_handler: Optional[SeatInventoryHandlerImpl] = None

    async def _cancel(self, ticket: Ticket) -> None:
        cancelled = ticket.cancel(
            event_starts_at=datetime.now(timezone.utc) + timedelta(days=1),
            now=datetime.now(timezone.utc),
        )
        await self.update(ticket=cancelled, expected_status=TicketStatus.CONFIRMED)
        await self.seat_inventory_handler.release_seat(
            event_id=ticket.event_id, seat_id=ticket.seat_id, holder_id=ticket.holder_id
        )

    async def list_active_by_event(self, *, event_id: int) -> List[Ticket]:
        self.lock_held_on_read.append(self.lock_manager._lock_for(event_id).locked())
        active = await super().list_active_by_event(event_id=event_id)
        if self.cancel_on_read is not None:
            self.on_read = asyncio.create_task(self._cancel(self.cancel_on_read))
            self.cancel_on_read = None
        await asyncio.sleep(0.01)
        return active


class TestEnsureInventory:
    async def test_creates_all_free_seat_map(self, seat_inventory_handler):
        inventory = await seat_inventory_handler.ensure_inventory(event_id=EVENT_ID, total_seats=5)

        assert inventory.total_seats == 5
        assert inventory.available_seats == 5
        assert inventory.version == 1

    async def test_is_idempotent_and_keeps_confirmed_tickets(
        self, seat_inventory_handler, ticket_ledger_repo
    ):
        # Given: A 10-seat event with 3 confirmed tickets
        await seat_inventory_handler.ensure_inventory(event_id=EVENT_ID, total_seats=10)
        for index, seat_id in enumerate(['S001', 'S002', 'S003']):
            await seat_inventory_handler.reserve_seat(
                event_id=EVENT_ID, seat_id=seat_id, holder_id=index + 1
            )
        await ticket_ledger_repo.create_batch(
            tickets=[_ticket('S001', 1), _ticket('S002', 2), _ticket('S003', 3)]
        )

        # When: Ensure runs again
        inventory = await seat_inventory_handler.ensure_inventory(
            event_id=EVENT_ID, total_seats=10
        )

        # Then: Still 7 available, nothing was regenerated
        assert inventory.available_seats == 7
        assert inventory.occupancy() == {'S001': 1, 'S002': 2, 'S003': 3}

    async def test_rebuilds_damaged_map_from_ledger(
        self, seat_inventory_handler, seat_inventory_repo, ticket_ledger_repo
    ):
        # Given: A stored map whose seat list is truncated, and one active ticket on S004
        seat_inventory_repo.put(
            SeatInventory(
                event_id=EVENT_ID,
                total_seats=5,
                seats=[SeatSlot(seat_id='S001', occupied=True, holder_id=9)],
                version=4,
            )
        )
        await ticket_ledger_repo.create_batch(tickets=[_ticket('S004', 2)])

        # When: Ensure
        inventory = await seat_inventory_handler.ensure_inventory(event_id=EVENT_ID, total_seats=5)

        # Then: Full map again, occupancy kept from the document and the ledger
        assert inventory.is_intact()
        assert inventory.total_seats == 5
        assert inventory.occupancy() == {'S001': 9, 'S004': 2}
        assert inventory.version == 5

    async def test_concurrent_ensure_creates_once(self, seat_inventory_handler):
        results = await asyncio.gather(
            *[
                seat_inventory_handler.ensure_inventory(event_id=EVENT_ID, total_seats=5)
                for _ in range(5)
            ]
        )

        assert {inventory.version for inventory in results} == {1}

    async def test_cancel_during_rebuild_does_not_leave_seat_occupied(
        self, seat_inventory_repo, lock_manager
    ):
        # Given: A damaged map and one confirmed ticket on S004 that gets cancelled
        # while the rebuild is reading the ledger
        ledger = _SlowLedger(lock_manager)
        handler = SeatInventoryHandlerImpl(
            seat_inventory_repo=seat_inventory_repo,
            ticket_ledger_repo=ledger,
            lock_manager=lock_manager,
        )
        ledger.seat_inventory_handler = handler
        seat_inventory_repo.put(
            SeatInventory(
                event_id=EVENT_ID,
                total_seats=5,
                seats=[SeatSlot(seat_id='S001', occupied=True, holder_id=9)],
                version=4,
            )
        )
        ticket = _ticket('S004', 2)
        await ledger.create_batch(tickets=[ticket])
        ledger.cancel_on_read = ticket

        # When: Ensure rebuilds and the cancel finishes
        await handler.ensure_inventory(event_id=EVENT_ID, total_seats=5)
        await ledger.on_read

        # Then: The ledger was read under the event lock and S004 ends up free
        assert ledger.lock_held_on_read == [True]
        inventory = await handler.get_inventory(event_id=EVENT_ID)
        assert inventory.is_intact()
        assert inventory.occupancy() == {'S001': 9}
        assert (await ledger.list_active_by_event(event_id=EVENT_ID)) == []


class TestReserveSeat:
    async def test_missing_inventory_is_rejected(self, seat_inventory_handler):
        with pytest.raises(NoSeatsAvailableError):
            await seat_inventory_handler.reserve_seat(event_id=EVENT_ID, seat_id=None, holder_id=1)

    async def test_concurrent_reservations_never_share_a_seat(self, seat_inventory_handler):
        # Given: 5 seats and 8 concurrent callers
        await seat_inventory_handler.ensure_inventory(event_id=EVENT_ID, total_seats=5)

        # When: Everyone asks for any seat
        results = await asyncio.gather(
            *[
                seat_inventory_handler.reserve_seat(
                    event_id=EVENT_ID, seat_id=None, holder_id=holder_id
                )
                for holder_id in range(1, 9)
            ],
            return_exceptions=True,
        )

        # Then: Exactly 5 succeed with distinct seats, 3 see no seats
        slots = [r for r in results if isinstance(r, SeatSlot)]
        failures = [r for r in results if isinstance(r, NoSeatsAvailableError)]
        assert len(slots) == 5
        assert len({slot.seat_id for slot in slots}) == 5
        assert len(failures) == 3

    async def test_same_specific_seat_goes_to_one_caller(self, seat_inventory_handler):
        await seat_inventory_handler.ensure_inventory(event_id=EVENT_ID, total_seats=5)

        results = await asyncio.gather(
            *[
                seat_inventory_handler.reserve_seat(
                    event_id=EVENT_ID, seat_id='S003', holder_id=holder_id
                )
                for holder_id in (1, 2, 3)
            ],
            return_exceptions=True,
        )

        assert sum(isinstance(r, SeatSlot) for r in results) == 1
        assert sum(isinstance(r, SeatUnavailableError) for r in results) == 2


class TestReserveSeats:
    async def test_failed_group_leaves_stored_map_untouched(
        self, seat_inventory_handler, seat_inventory_repo
    ):
        # Given: S002 already taken
        await seat_inventory_handler.ensure_inventory(event_id=EVENT_ID, total_seats=5)
        await seat_inventory_handler.reserve_seat(event_id=EVENT_ID, seat_id='S002', holder_id=1)
        before = await seat_inventory_repo.get(event_id=EVENT_ID)

        # When: A group wants S001 and S002
        with pytest.raises(SeatUnavailableError):
            await seat_inventory_handler.reserve_seats(
                event_id=EVENT_ID, count=2, preferred_seat_ids=['S001', 'S002'], holder_id=2
            )

        # Then: Stored map did not change
        after = await seat_inventory_repo.get(event_id=EVENT_ID)
        assert after.occupancy() == before.occupancy() == {'S002': 1}
        assert after.version == before.version

    async def test_holder_already_seated_is_rejected(self, seat_inventory_handler):
        await seat_inventory_handler.ensure_inventory(event_id=EVENT_ID, total_seats=5)
        await seat_inventory_handler.reserve_seats(
            event_id=EVENT_ID, count=1, preferred_seat_ids=[], holder_id=1
        )

        with pytest.raises(DuplicateBookingError):
            await seat_inventory_handler.reserve_seats(
                event_id=EVENT_ID,
                count=1,
                preferred_seat_ids=[],
                holder_id=1,
                reject_if_holder_present=True,
            )


class TestRelease:
    async def test_release_is_idempotent(self, seat_inventory_handler):
        await seat_inventory_handler.ensure_inventory(event_id=EVENT_ID, total_seats=3)
        await seat_inventory_handler.reserve_seat(event_id=EVENT_ID, seat_id='S001', holder_id=1)

        assert await seat_inventory_handler.release_seat(event_id=EVENT_ID, seat_id='S001')
        assert not await seat_inventory_handler.release_seat(event_id=EVENT_ID, seat_id='S001')

        inventory = await seat_inventory_handler.get_inventory(event_id=EVENT_ID)
        assert inventory.available_seats == 3

    async def test_release_for_other_holder_keeps_the_seat(self, seat_inventory_handler):
        await seat_inventory_handler.ensure_inventory(event_id=EVENT_ID, total_seats=3)
        await seat_inventory_handler.reserve_seat(event_id=EVENT_ID, seat_id='S001', holder_id=1)

        released = await seat_inventory_handler.release_seats(
            event_id=EVENT_ID, seat_ids=['S001'], holder_id=2
        )

        assert released == 0
        inventory = await seat_inventory_handler.get_inventory(event_id=EVENT_ID)
        assert inventory.occupancy() == {'S001': 1}

    async def test_release_without_inventory(self, seat_inventory_handler):
        assert await seat_inventory_handler.release_seats(event_id=99, seat_ids=['S001']) == 0
