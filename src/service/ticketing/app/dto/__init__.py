"""Application layer DTOs"""

from src.service.ticketing.app.dto.payment_proof_token_dto import PaymentProofTokenDto
from src.service.ticketing.app.dto.payment_receipt_dto import PaymentReceipt
from src.service.ticketing.app.dto.ticket_stats_dto import EventTicketStats, TicketStatusStats
from src.service.ticketing.app.dto.ticket_view_dto import TicketPage, TicketView

__all__ = [
    'EventTicketStats',
    'PaymentProofTokenDto',
    'PaymentReceipt',
    'TicketPage',
    'TicketStatusStats',
    'TicketView',
]
