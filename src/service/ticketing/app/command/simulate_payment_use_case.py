"""
Payment simulation

Stands in for a payment provider in development: it accepts any payment and hands
back a signed, short-lived proof bound to the caller (and optionally one event).
"""

import re
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import DomainError, ForbiddenError
from src.platform.logging.loguru_io import Logger
from src.platform.types.datetime_utils import utc_now
from src.service.ticketing.app.dto.payment_proof_token_dto import PaymentProofTokenDto
from src.service.ticketing.app.dto.payment_receipt_dto import PaymentReceipt
from src.service.ticketing.app.interface.i_payment_proof_issuer import IPaymentProofIssuer
from src.service.ticketing.domain.enum.ticket_status import PaymentMethod


class SimulatePaymentUseCase:
    def __init__(self, *, payment_proof_issuer: IPaymentProofIssuer) -> None:
        self.payment_proof_issuer = payment_proof_issuer

    @classmethod
    @inject
    def depends(
        cls,
        payment_proof_issuer: IPaymentProofIssuer = Depends(
            Provide[Container.payment_proof_issuer]
        ),
    ) -> Self:
        return cls(payment_proof_issuer=payment_proof_issuer)

    @staticmethod
    def _ensure_enabled() -> None:
        if not settings.PAYMENT_SIMULATION_ENABLED:
            raise ForbiddenError('Payment simulation is disabled')

    @staticmethod
    def mask_card_number(card_number: Optional[str]) -> Optional[str]:
        digits = re.sub(r'\D', '', card_number or '')
        return digits[-4:] or None

    @Logger.io
    def process_payment(
        self,
        *,
        holder_id: int,
        amount: int,
        currency: str = 'USD',
        method: PaymentMethod = PaymentMethod.CREDIT_CARD,
        card_number: Optional[str] = None,
        event_id: Optional[int] = None,
    ) -> PaymentReceipt:
        self._ensure_enabled()
        if amount <= 0:
            raise DomainError('Valid amount is required')
        if method == PaymentMethod.FREE:
            raise DomainError('Free tickets need no payment')

        proof = self.payment_proof_issuer.issue(holder_id=holder_id, event_id=event_id)
        Logger.base.info(
            f'💳 [PAYMENT] Simulated {amount} {currency} by holder {holder_id}: '
            f'{proof.transaction_id}'
        )
        return PaymentReceipt(
            payment_id=proof.transaction_id,
            token=proof.token,
            amount=amount,
            currency=currency,
            method=method,
            processed_at=utc_now(),
            expires_at=proof.expires_at,
            masked_last4=self.mask_card_number(card_number),
            event_id=event_id,
        )

    @Logger.io
    def issue_test_token(
        self, *, holder_id: int, event_id: Optional[int] = None
    ) -> PaymentProofTokenDto:
        self._ensure_enabled()
        return self.payment_proof_issuer.issue(holder_id=holder_id, event_id=event_id)
