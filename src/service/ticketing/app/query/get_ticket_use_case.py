from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.platform.types.datetime_utils import utc_now
from src.service.ticketing.app.dto.ticket_view_dto import TicketView
from src.service.ticketing.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.ticketing.app.interface.i_ticket_issuer import ITicketIssuer
from src.service.ticketing.app.interface.i_ticket_ledger_repo import ITicketLedgerRepo
from src.service.ticketing.app.query.ticket_view_builder import build_ticket_view
from src.service.ticketing.domain.entity.user_entity import UserEntity
from src.service.ticketing.domain.ticketing_error import (
    NotTicketHolderError,
    TicketNotFoundError,
)


class GetTicketUseCase:
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

    @Logger.io
    async def execute(self, *, ticket_id: str, requester: UserEntity) -> TicketView:
        ticket = await self.ticket_ledger_repo.get_by_ticket_id(ticket_id=ticket_id)
        if ticket is None:
            raise TicketNotFoundError()
        if ticket.holder_id != requester.id and not requester.is_staff:
            raise NotTicketHolderError('Not authorized to view this ticket')

        event = await self.event_query_repo.get_by_id(event_id=ticket.event_id)
        return build_ticket_view(
            ticket=ticket, event=event, ticket_issuer=self.ticket_issuer, now=utc_now()
        )
