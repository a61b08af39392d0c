from datetime import datetime
from typing import Optional

import attrs


@attrs.define(frozen=True)
class PaymentProof:
    """A verified payment assertion; only the verifier constructs these."""

    transaction_id: str
    holder_id: int
    issued_at: datetime
    expires_at: datetime
    event_id: Optional[int] = None
