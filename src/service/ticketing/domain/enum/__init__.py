"""Ticketing Domain Enums"""

from src.service.ticketing.domain.enum.event_status import EventStatus
from src.service.ticketing.domain.enum.ticket_status import (
    ACTIVE_TICKET_STATUSES,
    PaymentMethod,
    PaymentStatus,
    TicketStatus,
)

__all__ = [
    'ACTIVE_TICKET_STATUSES',
    'EventStatus',
    'PaymentMethod',
    'PaymentStatus',
    'TicketStatus',
]
