from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from src.service.ticketing.domain.entity.seat_inventory_entity import SeatInventory, SeatSlot


class ISeatInventoryHandler(ABC):
    """
    Race-safe seat operations for one event's inventory.

    Each call serializes on the event's lock only for the read-mutate-save of the
    seat map; no other I/O happens while the lock is held.
    """

    @abstractmethod
    async def ensure_inventory(self, *, event_id: int, total_seats: int) -> SeatInventory:
        """
        Create or repair the seat map; a no-op when it is already intact

        A repaired map keeps seats occupied by active tickets and by the old map.
        """
        pass

    @abstractmethod
    async def get_inventory(self, *, event_id: int) -> Optional[SeatInventory]:
        pass

    @abstractmethod
    async def reserve_seat(
        self, *, event_id: int, seat_id: Optional[str], holder_id: int
    ) -> SeatSlot:
        """
        Take one seat: the given one, or the lowest free one when `seat_id` is None

        Raises:
            SeatUnavailableError: The given seat is taken or unknown
            NoSeatsAvailableError: No free seat left
        """
        pass

    @abstractmethod
    async def reserve_seats(
        self,
        *,
        event_id: int,
        count: int,
        preferred_seat_ids: Sequence[str],
        holder_id: int,
        reject_if_holder_present: bool = False,
    ) -> List[SeatSlot]:
        """
        Take `count` seats as one group, preferred seats first

        Args:
            reject_if_holder_present: Fail with DuplicateBookingError when the holder
                already occupies a seat of this event

        Raises:
            SeatUnavailableError / NoSeatsAvailableError: Nothing is held afterwards
        """
        pass

    @abstractmethod
    async def release_seat(
        self, *, event_id: int, seat_id: str, holder_id: Optional[int] = None
    ) -> bool:
        """
        Free a seat; releasing a free seat is a no-op

        Returns:
            True if the seat was freed by this call
        """
        pass

    @abstractmethod
    async def release_seats(
        self, *, event_id: int, seat_ids: Sequence[str], holder_id: Optional[int] = None
    ) -> int:
        """
        Free several seats under a single lock acquisition

        Returns:
            Number of seats freed by this call
        """
        pass
