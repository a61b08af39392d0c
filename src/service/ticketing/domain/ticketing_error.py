"""
Ticketing error taxonomy.

Every error carries a stable `kind` so callers can branch on it without parsing
messages. Messages never include lock or persistence internals.
"""

from enum import StrEnum

from src.platform.exception.exceptions import (
    ConflictError,
    DomainError,
    ForbiddenError,
    InfrastructureError,
    NotFoundError,
)


class TicketingErrorKind(StrEnum):
    # Inventory
    SEAT_UNAVAILABLE = 'seat_unavailable'
    NO_SEATS_AVAILABLE = 'no_seats_available'
    # Booking policy
    EVENT_NOT_BOOKABLE = 'event_not_bookable'
    DUPLICATE_BOOKING = 'duplicate_booking'
    INVALID_PAYMENT_PROOF = 'invalid_payment_proof'
    INVALID_BOOKING_REQUEST = 'invalid_booking_request'
    # State transitions
    ALREADY_CHECKED_IN = 'already_checked_in'
    INVALID_STATE_FOR_CHECK_IN = 'invalid_state_for_check_in'
    CANNOT_CANCEL_USED_TICKET = 'cannot_cancel_used_ticket'
    CANNOT_CANCEL_PAST_EVENT = 'cannot_cancel_past_event'
    TICKET_ALREADY_CANCELLED = 'ticket_already_cancelled'
    INVALID_TICKET_TRANSITION = 'invalid_ticket_transition'
    TICKET_STATE_CONFLICT = 'ticket_state_conflict'
    # Lookup / access
    EVENT_NOT_FOUND = 'event_not_found'
    TICKET_NOT_FOUND = 'ticket_not_found'
    NOT_TICKET_HOLDER = 'not_ticket_holder'
    # Infrastructure
    BOOKING_PERSISTENCE_FAILED = 'booking_persistence_failed'
    CANCELLATION_FAILED = 'cancellation_failed'
    SEAT_INVENTORY_BUSY = 'seat_inventory_busy'


class SeatUnavailableError(ConflictError):
    kind = TicketingErrorKind.SEAT_UNAVAILABLE

    def __init__(self, seat_id: str) -> None:
        self.seat_id = seat_id
        super().__init__(f'Seat {seat_id} is not available')


class NoSeatsAvailableError(ConflictError):
    kind = TicketingErrorKind.NO_SEATS_AVAILABLE

    def __init__(self, message: str = 'Not enough seats available') -> None:
        super().__init__(message)


class EventNotBookableError(DomainError):
    kind = TicketingErrorKind.EVENT_NOT_BOOKABLE


class DuplicateBookingError(ConflictError):
    kind = TicketingErrorKind.DUPLICATE_BOOKING

    def __init__(self, message: str = 'You already hold a ticket for this event') -> None:
        super().__init__(message)


class InvalidPaymentProofError(DomainError):
    kind = TicketingErrorKind.INVALID_PAYMENT_PROOF


class InvalidBookingRequestError(DomainError):
    kind = TicketingErrorKind.INVALID_BOOKING_REQUEST


class AlreadyCheckedInError(ConflictError):
    kind = TicketingErrorKind.ALREADY_CHECKED_IN

    def __init__(self, message: str = 'Ticket is already checked in') -> None:
        super().__init__(message)


class InvalidStateForCheckInError(DomainError):
    kind = TicketingErrorKind.INVALID_STATE_FOR_CHECK_IN


class CannotCancelUsedTicketError(DomainError):
    kind = TicketingErrorKind.CANNOT_CANCEL_USED_TICKET

    def __init__(self, message: str = 'Cannot cancel a used ticket') -> None:
        super().__init__(message)


class CannotCancelPastEventError(DomainError):
    kind = TicketingErrorKind.CANNOT_CANCEL_PAST_EVENT

    def __init__(self, message: str = 'Cannot cancel tickets for past events') -> None:
        super().__init__(message)


class TicketAlreadyCancelledError(DomainError):
    kind = TicketingErrorKind.TICKET_ALREADY_CANCELLED

    def __init__(self, message: str = 'Ticket is already cancelled') -> None:
        super().__init__(message)


class InvalidTicketTransitionError(DomainError):
    kind = TicketingErrorKind.INVALID_TICKET_TRANSITION


class TicketStateConflictError(ConflictError):
    kind = TicketingErrorKind.TICKET_STATE_CONFLICT

    def __init__(self, message: str = 'Ticket was modified concurrently, please retry') -> None:
        super().__init__(message)


class EventNotFoundError(NotFoundError):
    kind = TicketingErrorKind.EVENT_NOT_FOUND

    def __init__(self, message: str = 'Event not found') -> None:
        super().__init__(message)


class TicketNotFoundError(NotFoundError):
    kind = TicketingErrorKind.TICKET_NOT_FOUND

    def __init__(self, message: str = 'Ticket not found') -> None:
        super().__init__(message)


class NotTicketHolderError(ForbiddenError):
    kind = TicketingErrorKind.NOT_TICKET_HOLDER


class BookingPersistenceFailedError(InfrastructureError):
    kind = TicketingErrorKind.BOOKING_PERSISTENCE_FAILED

    def __init__(self, message: str = 'Booking could not be saved, no seats were held') -> None:
        super().__init__(message)


class CancellationFailedError(InfrastructureError):
    kind = TicketingErrorKind.CANCELLATION_FAILED

    def __init__(self, message: str = 'Cancellation failed, please retry') -> None:
        super().__init__(message)


class SeatInventoryBusyError(InfrastructureError):
    """The per-event inventory lock could not be taken in time."""

    kind = TicketingErrorKind.SEAT_INVENTORY_BUSY

    def __init__(self, message: str = 'Seat inventory is busy, please retry') -> None:
        super().__init__(message)
        self.status_code = 503


class SeatInventoryVersionConflictError(SeatInventoryBusyError):
    """Another writer saved the inventory document first (optimistic version check)."""
