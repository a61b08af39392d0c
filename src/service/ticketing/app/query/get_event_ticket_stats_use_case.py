from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.platform.types.datetime_utils import utc_now
from src.service.ticketing.app.dto.ticket_stats_dto import EventTicketStats
from src.service.ticketing.app.dto.ticket_view_dto import TicketPage, TicketView
from src.service.ticketing.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.ticketing.app.interface.i_seat_inventory_handler import ISeatInventoryHandler
from src.service.ticketing.app.interface.i_ticket_ledger_repo import ITicketLedgerRepo
from src.service.ticketing.domain.ticketing_error import (
    EventNotFoundError,
    InvalidBookingRequestError,
)


class GetEventTicketStatsUseCase:
    def __init__(
        self,
        *,
        event_query_repo: IEventQueryRepo,
        seat_inventory_handler: ISeatInventoryHandler,
        ticket_ledger_repo: ITicketLedgerRepo,
    ) -> None:
        self.event_query_repo = event_query_repo
        self.seat_inventory_handler = seat_inventory_handler
        self.ticket_ledger_repo = ticket_ledger_repo

    @classmethod
    @inject
    def depends(
        cls,
        event_query_repo: IEventQueryRepo = Depends(Provide[Container.event_query_repo]),
        seat_inventory_handler: ISeatInventoryHandler = Depends(
            Provide[Container.seat_inventory_handler]
        ),
        ticket_ledger_repo: ITicketLedgerRepo = Depends(Provide[Container.ticket_ledger_repo]),
    ) -> Self:
        return cls(
            event_query_repo=event_query_repo,
            seat_inventory_handler=seat_inventory_handler,
            ticket_ledger_repo=ticket_ledger_repo,
        )

    @Logger.io
    async def execute(self, *, event_id: int, page: int = 1, limit: int = 50) -> EventTicketStats:
        if page < 1 or limit < 1:
            raise InvalidBookingRequestError('page and limit must be positive')

        event = await self.event_query_repo.get_by_id(event_id=event_id)
        if event is None:
            raise EventNotFoundError()

        inventory = await self.seat_inventory_handler.get_inventory(event_id=event_id)
        by_status = await self.ticket_ledger_repo.stats_by_event(event_id=event_id)
        tickets, total = await self.ticket_ledger_repo.list_by_event(
            event_id=event_id, offset=(page - 1) * limit, limit=limit
        )

        if inventory is not None:
            total_seats, available_seats = inventory.total_seats, inventory.available_seats
        else:
            # Not on sale yet: every seat of the planned capacity is free
            total_seats = available_seats = event.capacity(default=settings.DEFAULT_TOTAL_SEATS)

        # Staff listing carries no QR images
        now = utc_now()
        views = [
            TicketView(
                ticket=ticket,
                effective_status=ticket.effective_status(event_starts_at=event.starts_at, now=now),
            )
            for ticket in tickets
        ]
        return EventTicketStats(
            event_id=event_id,
            total_seats=total_seats,
            available_seats=available_seats,
            by_status=by_status,
            tickets=TicketPage(items=views, total=total, page=page, limit=limit),
        )
