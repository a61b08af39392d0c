from datetime import datetime
from typing import Dict, Iterable, List, Optional

import attrs

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.domain.ticketing_error import (
    NoSeatsAvailableError,
    SeatUnavailableError,
)


@attrs.define(frozen=True)
class SeatSlot:
    seat_id: str
    occupied: bool = False
    holder_id: Optional[int] = None


def seat_label(*, index: int, prefix: str = 'S') -> str:
    """1-based, zero padded: S001, S002, ... S1000"""
    return f'{prefix}{index:03d}'


@attrs.define
class SeatInventory:
    """
    Occupancy state of one event's seats.

    The instance is mutated in place while the caller holds the event's inventory lock,
    then saved as a whole. `version` is bumped by the repository on every save.
    """

    event_id: int
    total_seats: int
    seats: List[SeatSlot] = attrs.field(factory=list)
    version: int = 0
    updated_at: Optional[datetime] = None
    _positions: Dict[str, int] = attrs.field(init=False, factory=dict, repr=False, eq=False)

    def __attrs_post_init__(self) -> None:
        self._positions = {slot.seat_id: i for i, slot in enumerate(self.seats)}

    @classmethod
    def generate(
        cls,
        *,
        event_id: int,
        total_seats: int,
        prefix: str = 'S',
        occupied_by: Optional[Dict[str, int]] = None,
        version: int = 0,
    ) -> 'SeatInventory':
        """
        Build a fresh seat map, keeping the seats in `occupied_by` (seat id -> holder) taken.

        Seat ids in `occupied_by` that fall outside the generated range are ignored.
        """
        occupied_by = occupied_by or {}
        seats = []
        for index in range(1, total_seats + 1):
            seat_id = seat_label(index=index, prefix=prefix)
            holder_id = occupied_by.get(seat_id)
            seats.append(
                SeatSlot(seat_id=seat_id, occupied=holder_id is not None, holder_id=holder_id)
            )
        return cls(event_id=event_id, total_seats=total_seats, seats=seats, version=version)

    # ------------------------------------------------------------------ queries

    @property
    def available_seats(self) -> int:
        return sum(1 for slot in self.seats if not slot.occupied)

    @property
    def occupied_seats(self) -> int:
        return self.total_seats - self.available_seats

    def is_intact(self) -> bool:
        if self.total_seats < 0 or len(self.seats) != self.total_seats:
            return False
        if len(self._positions) != len(self.seats):
            return False  # duplicate seat ids
        return all(slot.occupied == (slot.holder_id is not None) for slot in self.seats)

    def get(self, seat_id: str) -> Optional[SeatSlot]:
        position = self._positions.get(seat_id)
        return None if position is None else self.seats[position]

    def held_by(self, holder_id: int) -> List[SeatSlot]:
        return [slot for slot in self.seats if slot.occupied and slot.holder_id == holder_id]

    def occupancy(self) -> Dict[str, int]:
        return {
            slot.seat_id: slot.holder_id
            for slot in self.seats
            if slot.occupied and slot.holder_id is not None
        }

    # ---------------------------------------------------------------- mutations

    def _replace(self, slot: SeatSlot) -> SeatSlot:
        self.seats[self._positions[slot.seat_id]] = slot
        return slot

    def occupy(self, *, seat_id: str, holder_id: int) -> SeatSlot:
        slot = self.get(seat_id)
        if slot is None or slot.occupied:
            raise SeatUnavailableError(seat_id)
        return self._replace(attrs.evolve(slot, occupied=True, holder_id=holder_id))

    def occupy_lowest_free(self, *, holder_id: int) -> SeatSlot:
        for slot in self.seats:
            if not slot.occupied:
                return self._replace(attrs.evolve(slot, occupied=True, holder_id=holder_id))
        raise NoSeatsAvailableError('No seats available')

    def occupy_group(
        self, *, count: int, preferred_seat_ids: Iterable[str], holder_id: int
    ) -> List[SeatSlot]:
        """
        Take `count` seats, preferred ones first, then the lowest free ones.

        All or nothing: seats taken by this call are given back before any error leaves.
        """
        if count > self.available_seats:
            raise NoSeatsAvailableError(
                f'Requested {count} seats but only {self.available_seats} are available'
            )

        taken: List[SeatSlot] = []
        try:
            for seat_id in preferred_seat_ids:
                if len(taken) == count:
                    break
                taken.append(self.occupy(seat_id=seat_id, holder_id=holder_id))
            while len(taken) < count:
                taken.append(self.occupy_lowest_free(holder_id=holder_id))
        except Exception:
            for slot in taken:
                self.release(seat_id=slot.seat_id)
            Logger.base.info(
                f'↩️ [INVENTORY] Event {self.event_id}: '
                f'rolled back {len(taken)} partial seat(s)'
            )
            raise
        return taken

    def release(self, *, seat_id: str, holder_id: Optional[int] = None) -> bool:
        """
        Free a seat. Returns False when nothing changed.

        With `holder_id`, a seat now held by someone else is left alone.
        """
        slot = self.get(seat_id)
        if slot is None or not slot.occupied:
            return False
        if holder_id is not None and slot.holder_id != holder_id:
            Logger.base.warning(
                f'⚠️ [INVENTORY] Event {self.event_id}: seat {seat_id} is held by '
                f'{slot.holder_id}, not {holder_id}; left untouched'
            )
            return False
        self._replace(attrs.evolve(slot, occupied=False, holder_id=None))
        return True
