from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from src.service.ticketing.app.dto.ticket_stats_dto import EventTicketStats
from src.service.ticketing.domain.entity.seat_inventory_entity import SeatInventory
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.driving_adapter.http_controller.schema.ticket_schema import (
    TicketResponse,
)


class EnsureInventoryRequest(BaseModel):
    total_seats: Optional[int] = Field(default=None, ge=0)


class SeatResponse(BaseModel):
    seat_id: str
    occupied: bool  # holders are never exposed


class SeatMapResponse(BaseModel):
    event_id: int
    total_seats: int
    available_seats: int
    version: int
    updated_at: Optional[datetime] = None
    seats: List[SeatResponse]

    @classmethod
    def from_inventory(cls, inventory: SeatInventory) -> 'SeatMapResponse':
        return cls(
            event_id=inventory.event_id,
            total_seats=inventory.total_seats,
            available_seats=inventory.available_seats,
            version=inventory.version,
            updated_at=inventory.updated_at,
            seats=[
                SeatResponse(seat_id=slot.seat_id, occupied=slot.occupied)
                for slot in inventory.seats
            ],
        )


class TicketStatusStatsResponse(BaseModel):
    status: TicketStatus
    count: int
    revenue: int


class PaginationResponse(BaseModel):
    page: int
    limit: int
    pages: int
    total: int


class EventTicketStatsResponse(BaseModel):
    event_id: int
    total_seats: int
    available_seats: int
    total_tickets: int
    total_revenue: int
    by_status: List[TicketStatusStatsResponse]
    tickets: List[TicketResponse]  # newest first
    pagination: PaginationResponse

    @classmethod
    def from_stats(cls, stats: EventTicketStats) -> 'EventTicketStatsResponse':
        return cls(
            event_id=stats.event_id,
            total_seats=stats.total_seats,
            available_seats=stats.available_seats,
            total_tickets=stats.total_tickets,
            total_revenue=stats.total_revenue,
            by_status=[
                TicketStatusStatsResponse(
                    status=item.status, count=item.count, revenue=item.revenue
                )
                for item in stats.by_status
            ],
            tickets=[TicketResponse.from_view(view) for view in stats.tickets.items],
            pagination=PaginationResponse(
                page=stats.tickets.page,
                limit=stats.tickets.limit,
                pages=stats.tickets.pages,
                total=stats.tickets.total,
            ),
        )
