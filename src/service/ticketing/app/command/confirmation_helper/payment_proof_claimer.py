from typing import Optional

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_payment_proof_registry import IPaymentProofRegistry
from src.service.ticketing.app.interface.i_payment_proof_verifier import IPaymentProofVerifier
from src.service.ticketing.domain.ticketing_error import InvalidPaymentProofError
from src.service.ticketing.domain.value_object.payment_proof import PaymentProof


class PaymentProofClaimer:
    """
    Verify a payment proof and consume it.

    A proof is single-use: the first successful claim of its transaction id wins, any
    later presentation is rejected until the claim is released by a rollback.
    """

    def __init__(
        self,
        *,
        payment_proof_verifier: IPaymentProofVerifier,
        payment_proof_registry: IPaymentProofRegistry,
    ) -> None:
        self.payment_proof_verifier = payment_proof_verifier
        self.payment_proof_registry = payment_proof_registry

    @Logger.io
    async def claim(
        self,
        *,
        token: str,
        transaction_id: str,
        holder_id: int,
        event_id: Optional[int],
    ) -> PaymentProof:
        proof = self.payment_proof_verifier.verify(
            token=token,
            expected_holder_id=holder_id,
            expected_transaction_id=transaction_id,
            expected_event_id=event_id,
        )
        claimed = await self.payment_proof_registry.claim(
            transaction_id=proof.transaction_id,
            holder_id=holder_id,
            expires_at=proof.expires_at,
        )
        if not claimed:
            raise InvalidPaymentProofError('Payment proof has already been used')
        return proof

    async def release(self, *, transaction_id: str) -> None:
        try:
            await self.payment_proof_registry.release(transaction_id=transaction_id)
        except Exception as e:
            Logger.base.error(
                f'❌ [PAYMENT] Could not release claim on {transaction_id}: {type(e).__name__}'
            )
