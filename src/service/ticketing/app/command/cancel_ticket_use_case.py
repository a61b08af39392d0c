from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.platform.types.datetime_utils import utc_now
from src.service.ticketing.app.dto.ticket_view_dto import TicketView
from src.service.ticketing.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.ticketing.app.interface.i_seat_inventory_handler import ISeatInventoryHandler
from src.service.ticketing.app.interface.i_ticket_ledger_repo import ITicketLedgerRepo
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.domain.ticketing_error import (
    CancellationFailedError,
    EventNotFoundError,
    NotTicketHolderError,
    TicketNotFoundError,
)


class CancelTicketUseCase:
    """
    Cancel a reserved or confirmed ticket and free its seat.

    The ledger transition and the seat release form one unit: if the seat cannot be
    released the ticket is put back to its previous status.
    """

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
        self.tracer = trace.get_tracer(__name__)

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
    async def execute(self, *, ticket_id: str, requester_id: int) -> TicketView:
        with self.tracer.start_as_current_span(
            'use_case.cancel_ticket',
            attributes={'ticket.id': ticket_id, 'requester.id': requester_id},
        ):
            ticket = await self.ticket_ledger_repo.get_by_ticket_id(ticket_id=ticket_id)
            if ticket is None:
                raise TicketNotFoundError()
            if ticket.holder_id != requester_id:
                raise NotTicketHolderError('Not authorized to cancel this ticket')

            event = await self.event_query_repo.get_by_id(event_id=ticket.event_id)
            if event is None:
                raise EventNotFoundError()

            cancelled = ticket.cancel(event_starts_at=event.starts_at, now=utc_now())
            cancelled = await self.ticket_ledger_repo.update(
                ticket=cancelled, expected_status=ticket.status
            )

            try:
                await self.seat_inventory_handler.release_seat(
                    event_id=ticket.event_id, seat_id=ticket.seat_id, holder_id=ticket.holder_id
                )
            except Exception as e:
                Logger.base.error(
                    f'❌ [CANCEL] Seat {ticket.seat_id} of {ticket_id} not released: '
                    f'{type(e).__name__}, restoring {ticket.status}'
                )
                try:
                    await self.ticket_ledger_repo.update(
                        ticket=ticket, expected_status=TicketStatus.CANCELLED
                    )
                except Exception as restore_error:
                    Logger.base.critical(
                        f'🚨 [CANCEL] {ticket_id} stays cancelled with seat {ticket.seat_id} '
                        f'held: {type(restore_error).__name__}'
                    )
                raise CancellationFailedError() from e

            Logger.base.info(
                f'🗑️ [CANCEL] {ticket_id} cancelled, seat {ticket.seat_id} of event '
                f'{ticket.event_id} released'
            )
            return TicketView(ticket=cancelled, effective_status=cancelled.status)
