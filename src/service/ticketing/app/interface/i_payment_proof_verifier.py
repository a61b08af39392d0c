from abc import ABC, abstractmethod
from typing import Optional

from src.service.ticketing.domain.value_object.payment_proof import PaymentProof


class IPaymentProofVerifier(ABC):
    @abstractmethod
    def verify(
        self,
        *,
        token: str,
        expected_holder_id: int,
        expected_transaction_id: str,
        expected_event_id: Optional[int] = None,
    ) -> PaymentProof:
        """
        Check signature, expiry, shape and bindings of a payment proof token

        The event binding is only checked when the token carries an event id.

        Raises:
            InvalidPaymentProofError: Any check failed
        """
        pass
