import attrs

from src.service.ticketing.app.dto.ticket_view_dto import TicketPage
from src.service.ticketing.domain.enum.ticket_status import TicketStatus


@attrs.define(frozen=True)
class TicketStatusStats:
    status: TicketStatus
    count: int
    revenue: int


@attrs.define(frozen=True)
class EventTicketStats:
    event_id: int
    total_seats: int
    available_seats: int
    by_status: list[TicketStatusStats]
    tickets: TicketPage

    @property
    def total_tickets(self) -> int:
        return sum(item.count for item in self.by_status)

    @property
    def total_revenue(self) -> int:
        """Money kept: refunded and cancelled payments do not count."""
        return sum(
            item.revenue
            for item in self.by_status
            if item.status in (TicketStatus.CONFIRMED, TicketStatus.CHECKED_IN)
        )
