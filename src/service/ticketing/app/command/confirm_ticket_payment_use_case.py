from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.platform.types.datetime_utils import utc_now
from src.service.ticketing.app.command.confirmation_helper.payment_proof_claimer import (
    PaymentProofClaimer,
)
from src.service.ticketing.app.command.confirmation_helper.ticket_issuance_recorder import (
    TicketIssuanceRecorder,
)
from src.service.ticketing.app.dto.ticket_view_dto import TicketView
from src.service.ticketing.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.ticketing.app.interface.i_ticket_ledger_repo import ITicketLedgerRepo
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.domain.ticketing_error import (
    EventNotBookableError,
    EventNotFoundError,
    InvalidTicketTransitionError,
    NotTicketHolderError,
    TicketNotFoundError,
)


class ConfirmTicketPaymentUseCase:
    """
    Pay for a ticket that was booked without a payment proof.

    reserved -> confirmed once the proof verifies and its transaction id is claimed.
    The claim is given back if the ledger update does not go through.
    """

    def __init__(
        self,
        *,
        event_query_repo: IEventQueryRepo,
        ticket_ledger_repo: ITicketLedgerRepo,
        payment_proof_claimer: PaymentProofClaimer,
        ticket_issuance_recorder: TicketIssuanceRecorder,
    ) -> None:
        self.event_query_repo = event_query_repo
        self.ticket_ledger_repo = ticket_ledger_repo
        self.payment_proof_claimer = payment_proof_claimer
        self.ticket_issuance_recorder = ticket_issuance_recorder
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        event_query_repo: IEventQueryRepo = Depends(Provide[Container.event_query_repo]),
        ticket_ledger_repo: ITicketLedgerRepo = Depends(Provide[Container.ticket_ledger_repo]),
        payment_proof_claimer: PaymentProofClaimer = Depends(
            Provide[Container.payment_proof_claimer]
        ),
        ticket_issuance_recorder: TicketIssuanceRecorder = Depends(
            Provide[Container.ticket_issuance_recorder]
        ),
    ) -> Self:
        return cls(
            event_query_repo=event_query_repo,
            ticket_ledger_repo=ticket_ledger_repo,
            payment_proof_claimer=payment_proof_claimer,
            ticket_issuance_recorder=ticket_issuance_recorder,
        )

    @Logger.io
    async def execute(
        self,
        *,
        ticket_id: str,
        holder_id: int,
        payment_proof_token: str,
        transaction_id: str,
    ) -> TicketView:
        with self.tracer.start_as_current_span(
            'use_case.confirm_ticket_payment',
            attributes={'ticket.id': ticket_id, 'holder.id': holder_id},
        ):
            ticket = await self.ticket_ledger_repo.get_by_ticket_id(ticket_id=ticket_id)
            if ticket is None:
                raise TicketNotFoundError()
            if ticket.holder_id != holder_id:
                raise NotTicketHolderError('Not authorized to pay for this ticket')
            # Checked before the claim so a proof is not spent on a ticket that cannot take it
            if ticket.status != TicketStatus.RESERVED:
                raise InvalidTicketTransitionError(f'Cannot confirm a {ticket.status} ticket')

            event = await self.event_query_repo.get_by_id(event_id=ticket.event_id)
            if event is None:
                raise EventNotFoundError()
            if event.has_started(now=utc_now()):
                raise EventNotBookableError('Event has already taken place')

            proof = await self.payment_proof_claimer.claim(
                token=payment_proof_token,
                transaction_id=transaction_id,
                holder_id=holder_id,
                event_id=ticket.event_id,
            )
            try:
                confirmed = ticket.confirm(proof_reference=proof.transaction_id, now=utc_now())
                confirmed = await self.ticket_ledger_repo.update(
                    ticket=confirmed, expected_status=TicketStatus.RESERVED
                )
            except Exception:
                await self.payment_proof_claimer.release(transaction_id=proof.transaction_id)
                raise

            confirmed, issuance = await self.ticket_issuance_recorder.issue(ticket=confirmed)
            Logger.base.info(
                f'💳 [PAYMENT] {ticket_id} confirmed with transaction {proof.transaction_id}'
            )
            return TicketView(
                ticket=confirmed,
                effective_status=confirmed.effective_status(
                    event_starts_at=event.starts_at, now=utc_now()
                ),
                issuance=issuance,
            )
