from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager


class IEventLockManager(ABC):
    """Mutual exclusion for seat inventory mutations, one lock per event."""

    @abstractmethod
    def hold(self, *, event_id: int) -> AbstractAsyncContextManager[None]:
        """
        Async context manager that holds the event's lock for the `async with` body

        Raises:
            SeatInventoryBusyError: The lock could not be taken in time
        """
        pass
