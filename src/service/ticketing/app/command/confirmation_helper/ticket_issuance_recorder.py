from typing import Tuple

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_ticket_issuer import ITicketIssuer
from src.service.ticketing.app.interface.i_ticket_ledger_repo import ITicketLedgerRepo
from src.service.ticketing.domain.entity.ticket_entity import Ticket
from src.service.ticketing.domain.value_object.ticket_issuance import TicketIssuance


class TicketIssuanceRecorder:
    """Issue a confirmed ticket and store its verification payload, after the ledger write."""

    def __init__(self, *, ticket_issuer: ITicketIssuer, ticket_ledger_repo: ITicketLedgerRepo):
        self.ticket_issuer = ticket_issuer
        self.ticket_ledger_repo = ticket_ledger_repo

    async def issue(self, *, ticket: Ticket) -> Tuple[Ticket, TicketIssuance]:
        issuance = self.ticket_issuer.issue(ticket=ticket)
        try:
            stored_payload = await self.ticket_ledger_repo.record_verification_payload(
                ticket_id=ticket.ticket_id, payload=issuance.payload
            )
        except Exception as e:
            # The ticket stays valid; the payload is derived again from the same fields
            Logger.base.warning(
                f'⚠️ [ISSUER] Payload for {ticket.ticket_id} not stored: {type(e).__name__}'
            )
            return ticket.with_verification_payload(issuance.payload), issuance

        if stored_payload != issuance.payload:
            issuance = self.ticket_issuer.issue(
                ticket=ticket.with_verification_payload(stored_payload)
            )
        return ticket.with_verification_payload(stored_payload), issuance
