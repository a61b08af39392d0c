from abc import ABC, abstractmethod
from datetime import datetime


class IPaymentProofRegistry(ABC):
    """Makes payment proofs single-use, keyed by transaction id."""

    @abstractmethod
    async def claim(self, *, transaction_id: str, holder_id: int, expires_at: datetime) -> bool:
        """
        Atomically mark a transaction as consumed

        Returns:
            False if the transaction was already consumed
        """
        pass

    @abstractmethod
    async def release(self, *, transaction_id: str) -> None:
        """Give a claim back after the booking that took it was rolled back"""
        pass
