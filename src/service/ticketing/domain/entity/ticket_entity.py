from datetime import datetime
from typing import Optional

import attrs
import uuid_utils

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.domain.enum.ticket_status import (
    ACTIVE_TICKET_STATUSES,
    PaymentMethod,
    PaymentStatus,
    TicketStatus,
)
from src.service.ticketing.domain.ticketing_error import (
    AlreadyCheckedInError,
    CannotCancelPastEventError,
    CannotCancelUsedTicketError,
    InvalidStateForCheckInError,
    InvalidTicketTransitionError,
    TicketAlreadyCancelledError,
)


@attrs.define(frozen=True)
class TicketPayment:
    amount: int
    currency: str
    method: PaymentMethod
    status: PaymentStatus = PaymentStatus.PENDING
    proof_reference: Optional[str] = None
    paid_at: Optional[datetime] = None


@attrs.define(frozen=True)
class TicketCheckIn:
    done: bool = False
    at: Optional[datetime] = None
    by: Optional[int] = None


@attrs.define
class Ticket:
    ticket_id: str
    event_id: int
    holder_id: int
    seat_id: str
    status: TicketStatus
    payment: TicketPayment
    check_in_record: TicketCheckIn = attrs.field(factory=TicketCheckIn)
    issued_at: Optional[datetime] = None
    verification_payload: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @staticmethod
    def new_ticket_id() -> str:
        # Tail of a UUID7 is random; the head is a timestamp shared by concurrent bookings
        return f'TKT-{uuid_utils.uuid7().hex[-12:].upper()}'

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_TICKET_STATUSES

    @classmethod
    def reserve(
        cls,
        *,
        event_id: int,
        holder_id: int,
        seat_id: str,
        amount: int,
        currency: str,
        method: PaymentMethod,
        now: datetime,
    ) -> 'Ticket':
        return cls(
            ticket_id=cls.new_ticket_id(),
            event_id=event_id,
            holder_id=holder_id,
            seat_id=seat_id,
            status=TicketStatus.RESERVED,
            payment=TicketPayment(amount=amount, currency=currency, method=method),
            created_at=now,
            updated_at=now,
        )

    @Logger.io
    def confirm(self, *, proof_reference: Optional[str], now: datetime) -> 'Ticket':
        """reserved -> confirmed, once payment is proven or the seat is free of charge"""
        if self.status != TicketStatus.RESERVED:
            raise InvalidTicketTransitionError(f'Cannot confirm a {self.status} ticket')
        return attrs.evolve(
            self,
            status=TicketStatus.CONFIRMED,
            payment=attrs.evolve(
                self.payment,
                status=PaymentStatus.COMPLETED,
                proof_reference=proof_reference,
                paid_at=now,
            ),
            issued_at=now,
            updated_at=now,
        )

    @Logger.io
    def check_in(self, *, staff_id: int, now: datetime) -> 'Ticket':
        if self.status == TicketStatus.CHECKED_IN:
            raise AlreadyCheckedInError()
        if self.status == TicketStatus.CANCELLED:
            raise InvalidStateForCheckInError('Cannot check in a cancelled ticket')
        if self.status != TicketStatus.CONFIRMED:
            raise InvalidStateForCheckInError('Ticket payment has not been confirmed')
        return attrs.evolve(
            self,
            status=TicketStatus.CHECKED_IN,
            check_in_record=TicketCheckIn(done=True, at=now, by=staff_id),
            updated_at=now,
        )

    @Logger.io
    def cancel(self, *, event_starts_at: datetime, now: datetime) -> 'Ticket':
        if self.status == TicketStatus.CANCELLED:
            raise TicketAlreadyCancelledError()
        if self.status == TicketStatus.CHECKED_IN:
            raise CannotCancelUsedTicketError()
        if event_starts_at <= now:
            raise CannotCancelPastEventError()

        payment = self.payment
        if payment.status == PaymentStatus.COMPLETED and payment.amount > 0:
            payment = attrs.evolve(payment, status=PaymentStatus.REFUNDED)
        return attrs.evolve(
            self,
            status=TicketStatus.CANCELLED,
            payment=payment,
            cancelled_at=now,
            updated_at=now,
        )

    def with_verification_payload(self, payload: str) -> 'Ticket':
        """The first payload sticks; later ones are ignored."""
        if self.verification_payload is not None:
            return self
        return attrs.evolve(self, verification_payload=payload)

    def effective_status(self, *, event_starts_at: datetime, now: datetime) -> TicketStatus:
        """A confirmed ticket for an event that already took place reads as expired."""
        if self.status == TicketStatus.CONFIRMED and event_starts_at <= now:
            return TicketStatus.EXPIRED
        return self.status
