from enum import StrEnum


class TicketStatus(StrEnum):
    RESERVED = 'reserved'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    CHECKED_IN = 'checked_in'
    EXPIRED = 'expired'  # Derived on read, never stored


# Statuses whose seat must stay occupied by the ticket holder
ACTIVE_TICKET_STATUSES = frozenset(
    {TicketStatus.RESERVED, TicketStatus.CONFIRMED, TicketStatus.CHECKED_IN}
)


class PaymentStatus(StrEnum):
    PENDING = 'pending'
    COMPLETED = 'completed'
    FAILED = 'failed'
    REFUNDED = 'refunded'


class PaymentMethod(StrEnum):
    CREDIT_CARD = 'credit_card'
    DEBIT_CARD = 'debit_card'
    PAYPAL = 'paypal'
    BANK_TRANSFER = 'bank_transfer'
    CASH = 'cash'
    FREE = 'free'
