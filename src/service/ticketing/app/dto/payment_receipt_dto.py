from datetime import datetime
from typing import Optional

import attrs

from src.service.ticketing.domain.enum.ticket_status import PaymentMethod


@attrs.define(frozen=True)
class PaymentReceipt:
    """Outcome of a simulated payment; `token` is the proof to present when booking."""

    payment_id: str
    token: str = attrs.field(repr=False)
    amount: int
    currency: str
    method: PaymentMethod
    processed_at: datetime
    expires_at: datetime
    masked_last4: Optional[str] = None
    event_id: Optional[int] = None
    status: str = 'succeeded'
