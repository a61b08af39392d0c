"""
Payment proof verification.

Proofs are HS256 JWTs signed by the payment simulation service with the shared
PAYMENT_PROOF_SECRET. Claims: txn_id, holder_id, event_id (nullable), iat, exp.
"""

from datetime import datetime, timezone
from typing import Any, Optional

import jwt

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_payment_proof_verifier import IPaymentProofVerifier
from src.service.ticketing.domain.ticketing_error import InvalidPaymentProofError
from src.service.ticketing.domain.value_object.payment_proof import PaymentProof


class JwtPaymentProofVerifierImpl(IPaymentProofVerifier):
    def __init__(self, *, secret: Optional[str] = None, algorithm: Optional[str] = None) -> None:
        self.secret = secret or settings.PAYMENT_PROOF_SECRET.get_secret_value()
        self.algorithm = algorithm or settings.PAYMENT_PROOF_ALGORITHM

    @staticmethod
    def _to_proof(claims: dict[str, Any]) -> PaymentProof:
        """Reject anything that does not have exactly the expected claim types."""
        txn_id = claims.get('txn_id')
        holder_id = claims.get('holder_id')
        event_id = claims.get('event_id')
        if not isinstance(txn_id, str) or not txn_id:
            raise InvalidPaymentProofError('Payment proof is malformed')
        if not isinstance(holder_id, int) or isinstance(holder_id, bool):
            raise InvalidPaymentProofError('Payment proof is malformed')
        if event_id is not None and (not isinstance(event_id, int) or isinstance(event_id, bool)):
            raise InvalidPaymentProofError('Payment proof is malformed')
        return PaymentProof(
            transaction_id=txn_id,
            holder_id=holder_id,
            event_id=event_id,
            issued_at=datetime.fromtimestamp(claims['iat'], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(claims['exp'], tz=timezone.utc),
        )

    @Logger.io
    def verify(
        self,
        *,
        token: str,
        expected_holder_id: int,
        expected_transaction_id: str,
        expected_event_id: Optional[int] = None,
    ) -> PaymentProof:
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={'require': ['exp', 'iat', 'txn_id', 'holder_id']},
            )
        except jwt.ExpiredSignatureError:
            raise InvalidPaymentProofError('Payment proof has expired') from None
        except jwt.PyJWTError:
            raise InvalidPaymentProofError('Payment proof is invalid') from None

        proof = self._to_proof(claims)

        if proof.transaction_id != expected_transaction_id:
            raise InvalidPaymentProofError('Payment proof does not match the transaction')
        if proof.holder_id != expected_holder_id:
            raise InvalidPaymentProofError('Payment proof was issued to another user')
        if proof.event_id is not None and proof.event_id != expected_event_id:
            raise InvalidPaymentProofError('Payment proof was issued for another event')

        return proof
