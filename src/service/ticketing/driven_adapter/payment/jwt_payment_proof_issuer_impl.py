from datetime import timedelta
from typing import Optional

import jwt
import uuid_utils

from src.platform.config.core_setting import settings
from src.platform.types.datetime_utils import utc_now
from src.service.ticketing.app.dto.payment_proof_token_dto import PaymentProofTokenDto
from src.service.ticketing.app.interface.i_payment_proof_issuer import IPaymentProofIssuer


class JwtPaymentProofIssuerImpl(IPaymentProofIssuer):
    """Stands in for the payment provider: signs proofs the verifier accepts."""

    def __init__(
        self,
        *,
        secret: Optional[str] = None,
        algorithm: Optional[str] = None,
        ttl: Optional[timedelta] = None,
    ) -> None:
        self.secret = secret or settings.PAYMENT_PROOF_SECRET.get_secret_value()
        self.algorithm = algorithm or settings.PAYMENT_PROOF_ALGORITHM
        self.ttl = ttl or timedelta(minutes=settings.PAYMENT_PROOF_TTL_MINUTES)

    @staticmethod
    def new_transaction_id() -> str:
        return f'tx_{uuid_utils.uuid4().hex[:24]}'

    def issue(self, *, holder_id: int, event_id: Optional[int] = None) -> PaymentProofTokenDto:
        now = utc_now()
        # JWT timestamps have second precision
        now = now.replace(microsecond=0)
        expires_at = now + self.ttl
        transaction_id = self.new_transaction_id()
        token = jwt.encode(
            {
                'txn_id': transaction_id,
                'holder_id': holder_id,
                'event_id': event_id,
                'iat': now,
                'exp': expires_at,
            },
            self.secret,
            algorithm=self.algorithm,
        )
        return PaymentProofTokenDto(
            transaction_id=transaction_id,
            token=token,
            holder_id=holder_id,
            event_id=event_id,
            expires_at=expires_at,
        )
