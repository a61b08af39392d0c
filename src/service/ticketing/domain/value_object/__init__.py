"""Ticketing Domain Value Objects"""

from src.service.ticketing.domain.value_object.payment_proof import PaymentProof
from src.service.ticketing.domain.value_object.ticket_issuance import TicketIssuance

__all__ = ['PaymentProof', 'TicketIssuance']
