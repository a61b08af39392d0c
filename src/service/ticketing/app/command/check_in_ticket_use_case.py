from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.platform.types.datetime_utils import utc_now
from src.service.ticketing.app.dto.ticket_view_dto import TicketView
from src.service.ticketing.app.interface.i_ticket_ledger_repo import ITicketLedgerRepo
from src.service.ticketing.domain.ticketing_error import TicketNotFoundError


class CheckInTicketUseCase:
    def __init__(self, *, ticket_ledger_repo: ITicketLedgerRepo) -> None:
        self.ticket_ledger_repo = ticket_ledger_repo
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        ticket_ledger_repo: ITicketLedgerRepo = Depends(Provide[Container.ticket_ledger_repo]),
    ) -> Self:
        return cls(ticket_ledger_repo=ticket_ledger_repo)

    @Logger.io
    async def execute(self, *, ticket_id: str, staff_id: int) -> TicketView:
        """Staff authorization is checked by the caller."""
        with self.tracer.start_as_current_span(
            'use_case.check_in_ticket',
            attributes={'ticket.id': ticket_id, 'staff.id': staff_id},
        ):
            ticket = await self.ticket_ledger_repo.get_by_ticket_id(ticket_id=ticket_id)
            if ticket is None:
                raise TicketNotFoundError()

            checked_in = ticket.check_in(staff_id=staff_id, now=utc_now())
            # Two scanners racing on the same ticket: the loser gets a state conflict
            checked_in = await self.ticket_ledger_repo.update(
                ticket=checked_in, expected_status=ticket.status
            )

            Logger.base.info(f'✅ [CHECK-IN] {ticket_id} checked in by staff {staff_id}')
            return TicketView(ticket=checked_in, effective_status=checked_in.status)
