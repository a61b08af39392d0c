from typing import List, Optional, Self, Sequence

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.core_setting import settings
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
from src.service.ticketing.app.interface.i_seat_inventory_handler import ISeatInventoryHandler
from src.service.ticketing.app.interface.i_ticket_ledger_repo import ITicketLedgerRepo
from src.service.ticketing.domain.entity.event_entity import EventEntity
from src.service.ticketing.domain.entity.ticket_entity import Ticket
from src.service.ticketing.domain.enum.ticket_status import PaymentMethod, TicketStatus
from src.service.ticketing.domain.ticketing_error import (
    BookingPersistenceFailedError,
    DuplicateBookingError,
    EventNotFoundError,
    InvalidBookingRequestError,
)
from src.service.ticketing.domain.value_object.payment_proof import PaymentProof


class BookTicketsUseCase:
    """
    Book N seats of one event for one holder.

    Flow:
    1. Event must be published and in the future
    2. Holder must not already hold an active ticket for the event
    3. Ensure the seat map, then reserve all seats as one group (per-event lock)
    4. Verify and claim the payment proof, if one was supplied (no lock held)
    5. Write all tickets as one batch
    6. Issue confirmed tickets (payload + QR)

    All or nothing: any failure after step 3 releases every seat taken in step 3 and
    the payment proof claim before the error leaves this use case.
    """

    def __init__(
        self,
        *,
        event_query_repo: IEventQueryRepo,
        seat_inventory_handler: ISeatInventoryHandler,
        ticket_ledger_repo: ITicketLedgerRepo,
        payment_proof_claimer: PaymentProofClaimer,
        ticket_issuance_recorder: TicketIssuanceRecorder,
    ) -> None:
        self.event_query_repo = event_query_repo
        self.seat_inventory_handler = seat_inventory_handler
        self.ticket_ledger_repo = ticket_ledger_repo
        self.payment_proof_claimer = payment_proof_claimer
        self.ticket_issuance_recorder = ticket_issuance_recorder
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
        payment_proof_claimer: PaymentProofClaimer = Depends(
            Provide[Container.payment_proof_claimer]
        ),
        ticket_issuance_recorder: TicketIssuanceRecorder = Depends(
            Provide[Container.ticket_issuance_recorder]
        ),
    ) -> Self:
        return cls(
            event_query_repo=event_query_repo,
            seat_inventory_handler=seat_inventory_handler,
            ticket_ledger_repo=ticket_ledger_repo,
            payment_proof_claimer=payment_proof_claimer,
            ticket_issuance_recorder=ticket_issuance_recorder,
        )

    @staticmethod
    def _validate_request(
        *,
        event: EventEntity,
        count: int,
        preferred_seat_ids: Sequence[str],
        payment_method: PaymentMethod,
        payment_proof_token: Optional[str],
        transaction_id: Optional[str],
    ) -> None:
        if count < 1:
            raise InvalidBookingRequestError('At least one ticket must be requested')
        if count > settings.MAX_TICKETS_PER_BOOKING:
            raise InvalidBookingRequestError(
                f'At most {settings.MAX_TICKETS_PER_BOOKING} tickets can be booked at once'
            )
        if len(preferred_seat_ids) > count:
            raise InvalidBookingRequestError('More preferred seats than requested tickets')
        if len(set(preferred_seat_ids)) != len(preferred_seat_ids):
            raise InvalidBookingRequestError('Preferred seats must not repeat')
        if payment_proof_token is not None and not transaction_id:
            raise InvalidBookingRequestError('A payment proof needs its transaction id')
        if payment_method == PaymentMethod.FREE and not event.is_free:
            raise InvalidBookingRequestError('This event is not free of charge')

    @staticmethod
    def _build_tickets(
        *,
        event: EventEntity,
        holder_id: int,
        seat_ids: Sequence[str],
        payment_method: PaymentMethod,
        proof: Optional[PaymentProof],
    ) -> List[Ticket]:
        now = utc_now()
        tickets = []
        for seat_id in seat_ids:
            ticket = Ticket.reserve(
                event_id=event.id,
                holder_id=holder_id,
                seat_id=seat_id,
                amount=0 if event.is_free else event.price,
                currency=event.currency,
                method=PaymentMethod.FREE if event.is_free else payment_method,
                now=now,
            )
            if event.is_free or proof is not None:
                ticket = ticket.confirm(
                    proof_reference=proof.transaction_id if proof else None, now=now
                )
            tickets.append(ticket)
        return tickets

    async def _roll_back(
        self,
        *,
        event_id: int,
        holder_id: int,
        seat_ids: Sequence[str],
        claimed_transaction_id: Optional[str],
    ) -> None:
        try:
            released = await self.seat_inventory_handler.release_seats(
                event_id=event_id, seat_ids=seat_ids, holder_id=holder_id
            )
            Logger.base.info(
                f'↩️ [BOOKING] Event {event_id}: rolled back {released} seat(s) of holder '
                f'{holder_id}'
            )
        except Exception as e:
            Logger.base.error(
                f'❌ [BOOKING] Event {event_id}: seats {list(seat_ids)} of holder {holder_id} '
                f'could not be released: {type(e).__name__}'
            )
        if claimed_transaction_id is not None:
            await self.payment_proof_claimer.release(transaction_id=claimed_transaction_id)

    async def _cancel_written(self, *, event: EventEntity, tickets: Sequence[Ticket]) -> None:
        """Cancel whatever part of a failed batch did reach the ledger."""
        try:
            written = await self.ticket_ledger_repo.get_by_ticket_ids(
                ticket_ids=[ticket.ticket_id for ticket in tickets]
            )
            for ticket in written:
                cancelled = ticket.cancel(event_starts_at=event.starts_at, now=utc_now())
                await self.ticket_ledger_repo.update(
                    ticket=cancelled, expected_status=ticket.status
                )
        except Exception as e:
            Logger.base.error(
                f'❌ [BOOKING] Partial batch {[t.ticket_id for t in tickets]} not compensated: '
                f'{type(e).__name__}'
            )

    @Logger.io
    async def execute(
        self,
        *,
        event_id: int,
        holder_id: int,
        count: int,
        preferred_seat_ids: Sequence[str] = (),
        payment_method: PaymentMethod = PaymentMethod.CREDIT_CARD,
        payment_proof_token: Optional[str] = None,
        transaction_id: Optional[str] = None,
    ) -> List[TicketView]:
        with self.tracer.start_as_current_span(
            'use_case.book_tickets',
            attributes={
                'event.id': event_id,
                'holder.id': holder_id,
                'booking.count': count,
            },
        ):
            event = await self.event_query_repo.get_by_id(event_id=event_id)
            if event is None:
                raise EventNotFoundError()
            event.ensure_bookable(now=utc_now())
            self._validate_request(
                event=event,
                count=count,
                preferred_seat_ids=preferred_seat_ids,
                payment_method=payment_method,
                payment_proof_token=payment_proof_token,
                transaction_id=transaction_id,
            )

            # Fast rejection; the authoritative check runs again under the inventory lock
            if await self.ticket_ledger_repo.find_active_by_holder(
                event_id=event_id, holder_id=holder_id
            ):
                raise DuplicateBookingError()

            await self.seat_inventory_handler.ensure_inventory(
                event_id=event_id,
                total_seats=event.capacity(default=settings.DEFAULT_TOTAL_SEATS),
            )
            slots = await self.seat_inventory_handler.reserve_seats(
                event_id=event_id,
                count=count,
                preferred_seat_ids=list(preferred_seat_ids),
                holder_id=holder_id,
                reject_if_holder_present=True,
            )
            seat_ids = [slot.seat_id for slot in slots]

            claimed_transaction_id: Optional[str] = None
            try:
                proof = None
                if payment_proof_token is not None:
                    proof = await self.payment_proof_claimer.claim(
                        token=payment_proof_token,
                        transaction_id=transaction_id,  # type: ignore[arg-type]
                        holder_id=holder_id,
                        event_id=event_id,
                    )
                    claimed_transaction_id = proof.transaction_id

                tickets = self._build_tickets(
                    event=event,
                    holder_id=holder_id,
                    seat_ids=seat_ids,
                    payment_method=payment_method,
                    proof=proof,
                )
            except Exception:
                await self._roll_back(
                    event_id=event_id,
                    holder_id=holder_id,
                    seat_ids=seat_ids,
                    claimed_transaction_id=claimed_transaction_id,
                )
                raise

            try:
                tickets = await self.ticket_ledger_repo.create_batch(tickets=tickets)
            except Exception as e:
                Logger.base.error(
                    f'❌ [BOOKING] Event {event_id}: ticket batch for holder {holder_id} '
                    f'failed: {type(e).__name__}'
                )
                await self._cancel_written(event=event, tickets=tickets)
                await self._roll_back(
                    event_id=event_id,
                    holder_id=holder_id,
                    seat_ids=seat_ids,
                    claimed_transaction_id=claimed_transaction_id,
                )
                raise BookingPersistenceFailedError() from e

            views: List[TicketView] = []
            now = utc_now()
            for ticket in tickets:
                issuance = None
                if ticket.status == TicketStatus.CONFIRMED:
                    ticket, issuance = await self.ticket_issuance_recorder.issue(ticket=ticket)
                views.append(
                    TicketView(
                        ticket=ticket,
                        effective_status=ticket.effective_status(
                            event_starts_at=event.starts_at, now=now
                        ),
                        issuance=issuance,
                    )
                )

            Logger.base.info(
                f'🎫 [BOOKING] Event {event_id}: holder {holder_id} booked {seat_ids} '
                f'({views[0].ticket.status})'
            )
            return views
