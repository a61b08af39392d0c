from datetime import datetime
from typing import AsyncContextManager, Callable

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.platform.types.datetime_utils import utc_now
from src.service.ticketing.app.interface.i_payment_proof_registry import IPaymentProofRegistry
from src.service.ticketing.driven_adapter.model.payment_proof_claim_model import (
    PaymentProofClaimModel,
)


class PaymentProofRegistryRepoImpl(IPaymentProofRegistry):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @Logger.io
    async def claim(self, *, transaction_id: str, holder_id: int, expires_at: datetime) -> bool:
        async with self.session_factory() as session:
            # Claims of expired proofs are dropped on every claim
            await session.execute(
                delete(PaymentProofClaimModel).where(
                    PaymentProofClaimModel.expires_at <= utc_now()
                )
            )
            session.add(
                PaymentProofClaimModel(
                    transaction_id=transaction_id, holder_id=holder_id, expires_at=expires_at
                )
            )
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                Logger.base.warning(
                    f'🔁 [PAYMENT] Proof {transaction_id} replayed by holder {holder_id}'
                )
                return False
        return True

    @Logger.io
    async def release(self, *, transaction_id: str) -> None:
        async with self.session_factory() as session:
            await session.execute(
                delete(PaymentProofClaimModel).where(
                    PaymentProofClaimModel.transaction_id == transaction_id
                )
            )
            await session.commit()
