from typing import Optional

import attrs

from src.service.ticketing.domain.entity.ticket_entity import Ticket
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.domain.value_object.ticket_issuance import TicketIssuance


@attrs.define(frozen=True)
class TicketView:
    """A ticket as shown to callers: derived status plus its scannable issuance."""

    ticket: Ticket
    effective_status: TicketStatus
    issuance: Optional[TicketIssuance] = None

    @property
    def image_available(self) -> bool:
        return self.issuance is not None and self.issuance.image_available


@attrs.define(frozen=True)
class TicketPage:
    items: list[TicketView]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0
