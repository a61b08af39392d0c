"""
Seat Inventory Handler

The single serialization point for seat occupancy. Every mutation runs as
lock -> load -> mutate in memory -> save -> unlock for one event. A mutation that
raises is never saved, so a failed call leaves the stored seat map untouched.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional, Sequence

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_event_lock_manager import IEventLockManager
from src.service.ticketing.app.interface.i_seat_inventory_handler import ISeatInventoryHandler
from src.service.ticketing.app.interface.i_seat_inventory_repo import ISeatInventoryRepo
from src.service.ticketing.app.interface.i_ticket_ledger_repo import ITicketLedgerRepo
from src.service.ticketing.domain.entity.seat_inventory_entity import SeatInventory, SeatSlot
from src.service.ticketing.domain.ticketing_error import (
    DuplicateBookingError,
    NoSeatsAvailableError,
)


class SeatInventoryHandlerImpl(ISeatInventoryHandler):
    def __init__(
        self,
        *,
        seat_inventory_repo: ISeatInventoryRepo,
        ticket_ledger_repo: ITicketLedgerRepo,
        lock_manager: IEventLockManager,
        seat_id_prefix: str = 'S',
    ) -> None:
        self.seat_inventory_repo = seat_inventory_repo
        self.ticket_ledger_repo = ticket_ledger_repo
        self.lock_manager = lock_manager
        self.seat_id_prefix = seat_id_prefix

    @asynccontextmanager
    async def _locked_inventory(self, event_id: int) -> AsyncIterator[SeatInventory]:
        async with self.lock_manager.hold(event_id=event_id):
            inventory = await self.seat_inventory_repo.get(event_id=event_id)
            if inventory is None:
                raise NoSeatsAvailableError('Seats are not on sale for this event yet')
            yield inventory

    @Logger.io
    async def ensure_inventory(self, *, event_id: int, total_seats: int) -> SeatInventory:
        inventory = await self.seat_inventory_repo.get(event_id=event_id)
        if inventory is not None and inventory.is_intact():
            return inventory

        async with self.lock_manager.hold(event_id=event_id):
            inventory = await self.seat_inventory_repo.get(event_id=event_id)
            if inventory is not None and inventory.is_intact():
                return inventory  # rebuilt by a concurrent caller

            # Ledger is read under the lock
            active_tickets = await self.ticket_ledger_repo.list_active_by_event(
                event_id=event_id
            )
            occupied_by: Dict[str, int] = inventory.occupancy() if inventory else {}
            occupied_by.update({ticket.seat_id: ticket.holder_id for ticket in active_tickets})

            rebuilt = SeatInventory.generate(
                event_id=event_id,
                total_seats=total_seats,
                prefix=self.seat_id_prefix,
                occupied_by=occupied_by,
                version=inventory.version if inventory else 0,
            )
            saved = await self.seat_inventory_repo.save(inventory=rebuilt)

        Logger.base.info(
            f'🪑 [INVENTORY] Event {event_id}: '
            f'{"rebuilt damaged" if inventory else "created"} seat map, '
            f'{saved.total_seats} seats, {saved.occupied_seats} kept occupied'
        )
        return saved

    async def get_inventory(self, *, event_id: int) -> Optional[SeatInventory]:
        return await self.seat_inventory_repo.get(event_id=event_id)

    @Logger.io
    async def reserve_seat(
        self, *, event_id: int, seat_id: Optional[str], holder_id: int
    ) -> SeatSlot:
        async with self._locked_inventory(event_id) as inventory:
            if seat_id is not None:
                slot = inventory.occupy(seat_id=seat_id, holder_id=holder_id)
            else:
                slot = inventory.occupy_lowest_free(holder_id=holder_id)
            await self.seat_inventory_repo.save(inventory=inventory)
        return slot

    @Logger.io
    async def reserve_seats(
        self,
        *,
        event_id: int,
        count: int,
        preferred_seat_ids: Sequence[str],
        holder_id: int,
        reject_if_holder_present: bool = False,
    ) -> List[SeatSlot]:
        async with self._locked_inventory(event_id) as inventory:
            if reject_if_holder_present and inventory.held_by(holder_id):
                raise DuplicateBookingError()
            slots = inventory.occupy_group(
                count=count, preferred_seat_ids=preferred_seat_ids, holder_id=holder_id
            )
            await self.seat_inventory_repo.save(inventory=inventory)

        Logger.base.info(
            f'🪑 [INVENTORY] Event {event_id}: holder {holder_id} took '
            f'{[slot.seat_id for slot in slots]}'
        )
        return slots

    @Logger.io
    async def release_seat(
        self, *, event_id: int, seat_id: str, holder_id: Optional[int] = None
    ) -> bool:
        return bool(
            await self.release_seats(event_id=event_id, seat_ids=[seat_id], holder_id=holder_id)
        )

    @Logger.io
    async def release_seats(
        self, *, event_id: int, seat_ids: Sequence[str], holder_id: Optional[int] = None
    ) -> int:
        async with self.lock_manager.hold(event_id=event_id):
            inventory = await self.seat_inventory_repo.get(event_id=event_id)
            if inventory is None:
                return 0
            released = [
                seat_id
                for seat_id in seat_ids
                if inventory.release(seat_id=seat_id, holder_id=holder_id)
            ]
            if released:
                await self.seat_inventory_repo.save(inventory=inventory)

        if released:
            Logger.base.info(f'🔓 [INVENTORY] Event {event_id}: released {released}')
        return len(released)
