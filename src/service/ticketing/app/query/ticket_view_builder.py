from datetime import datetime
from typing import Optional

from src.service.ticketing.app.dto.ticket_view_dto import TicketView
from src.service.ticketing.app.interface.i_ticket_issuer import ITicketIssuer
from src.service.ticketing.domain.entity.event_entity import EventEntity
from src.service.ticketing.domain.entity.ticket_entity import Ticket
from src.service.ticketing.domain.enum.ticket_status import TicketStatus


SCANNABLE_STATUSES = frozenset({TicketStatus.CONFIRMED, TicketStatus.CHECKED_IN})


def build_ticket_view(
    *,
    ticket: Ticket,
    event: Optional[EventEntity],
    ticket_issuer: ITicketIssuer,
    now: datetime,
) -> TicketView:
    """Derived status plus the QR re-rendered from the stored payload."""
    effective_status = (
        ticket.effective_status(event_starts_at=event.starts_at, now=now)
        if event
        else ticket.status
    )
    issuance = None
    if ticket.status in SCANNABLE_STATUSES and ticket.issued_at is not None:
        issuance = ticket_issuer.issue(ticket=ticket)
    return TicketView(ticket=ticket, effective_status=effective_status, issuance=issuance)
