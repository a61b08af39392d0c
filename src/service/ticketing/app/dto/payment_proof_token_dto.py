from datetime import datetime
from typing import Optional

import attrs


@attrs.define(frozen=True)
class PaymentProofTokenDto:
    transaction_id: str
    token: str = attrs.field(repr=False)
    holder_id: int
    expires_at: datetime
    event_id: Optional[int] = None
