from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict

import anyio

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_event_lock_manager import IEventLockManager
from src.service.ticketing.domain.ticketing_error import SeatInventoryBusyError


class LocalEventLockManagerImpl(IEventLockManager):
    """
    One anyio.Lock per event id, valid within a single process.

    Locks are never evicted; there is one small lock object per event ever touched.
    """

    def __init__(self, *, acquire_timeout: float = 5.0) -> None:
        self._acquire_timeout = acquire_timeout
        self._locks: Dict[int, anyio.Lock] = {}

    def _lock_for(self, event_id: int) -> anyio.Lock:
        lock = self._locks.get(event_id)
        if lock is None:
            lock = self._locks[event_id] = anyio.Lock()
        return lock

    @asynccontextmanager
    async def hold(self, *, event_id: int) -> AsyncIterator[None]:
        lock = self._lock_for(event_id)
        try:
            with anyio.fail_after(self._acquire_timeout):
                await lock.acquire()
        except TimeoutError:
            Logger.base.warning(f'⏳ [LOCK] Event {event_id} inventory lock timed out')
            raise SeatInventoryBusyError() from None
        try:
            yield
        finally:
            lock.release()
