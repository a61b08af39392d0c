from datetime import datetime
from typing import Dict

from src.platform.logging.loguru_io import Logger
from src.platform.types.datetime_utils import utc_now
from src.service.ticketing.app.interface.i_payment_proof_registry import IPaymentProofRegistry


class InMemoryPaymentProofRegistryImpl(IPaymentProofRegistry):
    def __init__(self) -> None:
        # transaction_id -> proof expiry; expired entries are dropped on the next claim
        self._claims: Dict[str, datetime] = {}

    def _evict_expired(self) -> None:
        now = utc_now()
        for transaction_id in [t for t, exp in self._claims.items() if exp <= now]:
            del self._claims[transaction_id]

    async def claim(self, *, transaction_id: str, holder_id: int, expires_at: datetime) -> bool:
        self._evict_expired()
        if transaction_id in self._claims:
            Logger.base.warning(
                f'🔁 [PAYMENT] Proof {transaction_id} replayed by holder {holder_id}'
            )
            return False
        self._claims[transaction_id] = expires_at
        return True

    async def release(self, *, transaction_id: str) -> None:
        self._claims.pop(transaction_id, None)
