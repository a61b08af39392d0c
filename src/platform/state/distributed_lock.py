"""
Distributed Lock using Kvrocks (Redis)

SET NX EX acquisition with an ownership-checked Lua release.
"""

from typing import Optional
from uuid import uuid4

import anyio
from redis.asyncio import Redis as AsyncRedis

from src.platform.logging.loguru_io import Logger


_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""


class DistributedLock:
    """One lock holder; create a new instance per acquisition."""

    def __init__(self, *, client: AsyncRedis) -> None:
        self._client = client
        self.lock_value: Optional[str] = None

    async def acquire_lock(self, *, key: str, ttl: int = 10) -> bool:
        """
        Try once to take the lock

        Args:
            key: Lock key (e.g., "lock:seat_inventory:42")
            ttl: Time-to-live in seconds

        Returns:
            True if lock acquired, False otherwise
        """
        self.lock_value = str(uuid4())  # Unique value for ownership verification

        try:
            result = await self._client.set(key, self.lock_value, nx=True, ex=ttl)
        except Exception as e:
            Logger.base.error(f'❌ [LOCK] Error acquiring lock {key}: {e}')
            self.lock_value = None
            return False

        if result:
            Logger.base.debug(f'🔒 [LOCK] Acquired lock: {key} (ttl={ttl}s)')
            return True
        self.lock_value = None
        return False

    async def acquire_lock_with_retry(
        self, *, key: str, ttl: int, timeout: float, retry_interval: float
    ) -> bool:
        """Poll until the lock is taken or `timeout` seconds have passed."""
        with anyio.move_on_after(timeout):
            while True:
                if await self.acquire_lock(key=key, ttl=ttl):
                    return True
                await anyio.sleep(retry_interval)
        Logger.base.warning(f'⏳ [LOCK] Gave up on lock {key} after {timeout}s')
        return False

    async def release_lock(self, *, key: str) -> bool:
        """
        Release the lock only if this instance still owns it

        Returns:
            True if lock released, False otherwise (expired or taken over)
        """
        if not self.lock_value:
            Logger.base.warning(f'⚠️ [LOCK] No lock value to release: {key}')
            return False

        try:
            result = await self._client.eval(  # type: ignore
                _RELEASE_SCRIPT, 1, key, self.lock_value
            )
        except Exception as e:
            Logger.base.error(f'❌ [LOCK] Error releasing lock {key}: {e}')
            return False
        finally:
            self.lock_value = None

        if result:
            Logger.base.debug(f'🔓 [LOCK] Released lock: {key}')
            return True
        Logger.base.warning(
            f'⚠️ [LOCK] Failed to release lock: {key} (ownership mismatch or expired)'
        )
        return False
