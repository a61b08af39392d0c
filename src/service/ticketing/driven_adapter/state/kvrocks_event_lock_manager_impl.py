from contextlib import asynccontextmanager
from typing import AsyncIterator

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.platform.state.distributed_lock import DistributedLock
from src.platform.state.kvrocks_client import KvrocksClient
from src.service.ticketing.app.interface.i_event_lock_manager import IEventLockManager
from src.service.ticketing.domain.ticketing_error import SeatInventoryBusyError


class KvrocksEventLockManagerImpl(IEventLockManager):
    """Cross-process per-event lock on Kvrocks (SET NX EX + owner-checked release)."""

    KEY_PREFIX = 'lock:seat_inventory:'

    def __init__(self, *, kvrocks_client: KvrocksClient) -> None:
        self._kvrocks_client = kvrocks_client

    @asynccontextmanager
    async def hold(self, *, event_id: int) -> AsyncIterator[None]:
        key = f'{self.KEY_PREFIX}{event_id}'
        lock = DistributedLock(client=self._kvrocks_client.get_client())
        acquired = await lock.acquire_lock_with_retry(
            key=key,
            ttl=settings.SEAT_LOCK_TTL_SECONDS,
            timeout=settings.SEAT_LOCK_ACQUIRE_TIMEOUT_SECONDS,
            retry_interval=settings.SEAT_LOCK_RETRY_INTERVAL_SECONDS,
        )
        if not acquired:
            Logger.base.warning(f'⏳ [LOCK] Event {event_id} inventory lock not acquired')
            raise SeatInventoryBusyError()
        try:
            yield
        finally:
            await lock.release_lock(key=key)
