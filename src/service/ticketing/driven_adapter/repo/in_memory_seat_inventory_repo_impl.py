from typing import Dict, Optional

import attrs

from src.platform.logging.loguru_io import Logger
from src.platform.types.datetime_utils import utc_now
from src.service.ticketing.app.interface.i_seat_inventory_repo import ISeatInventoryRepo
from src.service.ticketing.domain.entity.seat_inventory_entity import SeatInventory
from src.service.ticketing.domain.ticketing_error import SeatInventoryVersionConflictError


def _detach(inventory: SeatInventory) -> SeatInventory:
    # SeatSlot is frozen, a shallow list copy is enough
    return SeatInventory(
        event_id=inventory.event_id,
        total_seats=inventory.total_seats,
        seats=list(inventory.seats),
        version=inventory.version,
        updated_at=inventory.updated_at,
    )


class InMemorySeatInventoryRepoImpl(ISeatInventoryRepo):
    """Process-local inventory store for tests and single-process runs."""

    def __init__(self) -> None:
        self._documents: Dict[int, SeatInventory] = {}

    @Logger.io(truncate_content=True)
    async def get(self, *, event_id: int) -> Optional[SeatInventory]:
        stored = self._documents.get(event_id)
        return _detach(stored) if stored else None

    @Logger.io(truncate_content=True)
    async def save(self, *, inventory: SeatInventory) -> SeatInventory:
        stored = self._documents.get(inventory.event_id)
        stored_version = stored.version if stored else 0
        if stored_version != inventory.version:
            raise SeatInventoryVersionConflictError()

        saved = attrs.evolve(
            _detach(inventory), version=inventory.version + 1, updated_at=utc_now()
        )
        self._documents[inventory.event_id] = saved
        return _detach(saved)

    def put(self, inventory: SeatInventory) -> None:
        """Seed or corrupt a document directly, bypassing the version check."""
        self._documents[inventory.event_id] = _detach(inventory)
