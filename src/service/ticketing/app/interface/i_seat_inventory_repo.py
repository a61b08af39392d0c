from abc import ABC, abstractmethod
from typing import Optional

from src.service.ticketing.domain.entity.seat_inventory_entity import SeatInventory


class ISeatInventoryRepo(ABC):
    """
    One seat inventory document per event.

    Callers mutate documents only while holding the event's inventory lock; `save`
    still checks the version so a writer whose lock expired cannot clobber a newer map.
    """

    @abstractmethod
    async def get(self, *, event_id: int) -> Optional[SeatInventory]:
        """
        Load the inventory document of an event

        Returns:
            A detached copy, or None if the event has no inventory yet
        """
        pass

    @abstractmethod
    async def save(self, *, inventory: SeatInventory) -> SeatInventory:
        """
        Insert or replace the document (compare-and-swap on `version`)

        Args:
            inventory: Document whose `version` is the one it was loaded with
                (0 for a document that has never been saved)

        Returns:
            The saved document with its version bumped

        Raises:
            SeatInventoryVersionConflictError: Another writer saved first
        """
        pass
