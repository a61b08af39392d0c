from abc import ABC, abstractmethod
from typing import Optional

from src.service.ticketing.app.dto.payment_proof_token_dto import PaymentProofTokenDto


class IPaymentProofIssuer(ABC):
    """Signing side of payment proofs, used by the payment simulation only."""

    @abstractmethod
    def issue(
        self, *, holder_id: int, event_id: Optional[int] = None
    ) -> PaymentProofTokenDto:
        pass
