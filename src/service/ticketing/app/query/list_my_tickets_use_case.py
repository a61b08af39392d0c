from typing import List, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.platform.types.datetime_utils import utc_now
from src.service.ticketing.app.dto.ticket_view_dto import TicketPage, TicketView
from src.service.ticketing.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.ticketing.app.interface.i_ticket_issuer import ITicketIssuer
from src.service.ticketing.app.interface.i_ticket_ledger_repo import ITicketLedgerRepo
from src.service.ticketing.app.query.ticket_view_builder import build_ticket_view
from src.service.ticketing.domain.entity.ticket_entity import Ticket
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.domain.ticketing_error import InvalidBookingRequestError


# Filters on these statuses depend on the event date, not only on the stored status
DERIVED_FILTER_STATUSES = frozenset({TicketStatus.CONFIRMED, TicketStatus.EXPIRED})


class ListMyTicketsUseCase:
    def __init__(
        self,
        *,
        ticket_ledger_repo: ITicketLedgerRepo,
        event_query_repo: IEventQueryRepo,
        ticket_issuer: ITicketIssuer,
    ) -> None:
        self.ticket_ledger_repo = ticket_ledger_repo
        self.event_query_repo = event_query_repo
        self.ticket_issuer = ticket_issuer

    @classmethod
    @inject
    def depends(
        cls,
        ticket_ledger_repo: ITicketLedgerRepo = Depends(Provide[Container.ticket_ledger_repo]),
        event_query_repo: IEventQueryRepo = Depends(Provide[Container.event_query_repo]),
        ticket_issuer: ITicketIssuer = Depends(Provide[Container.ticket_issuer]),
    ) -> Self:
        return cls(
            ticket_ledger_repo=ticket_ledger_repo,
            event_query_repo=event_query_repo,
            ticket_issuer=ticket_issuer,
        )

    async def _to_views(self, tickets: List[Ticket]) -> List[TicketView]:
        events = await self.event_query_repo.get_by_ids(
            event_ids=sorted({ticket.event_id for ticket in tickets})
        )
        now = utc_now()
        return [
            build_ticket_view(
                ticket=ticket,
                event=events.get(ticket.event_id),
                ticket_issuer=self.ticket_issuer,
                now=now,
            )
            for ticket in tickets
        ]

    @Logger.io
    async def execute(
        self,
        *,
        holder_id: int,
        status: Optional[TicketStatus] = None,
        page: int = 1,
        limit: int = 10,
    ) -> TicketPage:
        if page < 1 or limit < 1:
            raise InvalidBookingRequestError('page and limit must be positive')
        offset = (page - 1) * limit

        if status not in DERIVED_FILTER_STATUSES:
            tickets, total = await self.ticket_ledger_repo.list_by_holder(
                holder_id=holder_id, status=status, offset=offset, limit=limit
            )
            return TicketPage(
                items=await self._to_views(tickets), total=total, page=page, limit=limit
            )

        # Both live in stored `confirmed`; split them by event date, then page
        _, stored_total = await self.ticket_ledger_repo.list_by_holder(
            holder_id=holder_id, status=TicketStatus.CONFIRMED, offset=0, limit=1
        )
        confirmed, _ = await self.ticket_ledger_repo.list_by_holder(
            holder_id=holder_id,
            status=TicketStatus.CONFIRMED,
            offset=0,
            limit=max(stored_total, 1),
        )
        views = [
            view for view in await self._to_views(confirmed) if view.effective_status == status
        ]
        return TicketPage(
            items=views[offset : offset + limit], total=len(views), page=page, limit=limit
        )
