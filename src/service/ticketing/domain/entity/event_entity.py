from datetime import datetime
from typing import Optional

import attrs

from src.platform.types.datetime_utils import as_utc
from src.service.ticketing.domain.enum.event_status import EventStatus
from src.service.ticketing.domain.ticketing_error import EventNotBookableError


@attrs.define(frozen=True)
class EventEntity:
    """Read-only projection of an event, owned by the event service."""

    id: int
    status: EventStatus
    starts_at: datetime = attrs.field(converter=as_utc)
    price: int = 0
    currency: str = 'USD'
    total_seats: Optional[int] = None
    title: str = ''

    @property
    def is_free(self) -> bool:
        return self.price <= 0

    def has_started(self, *, now: datetime) -> bool:
        return self.starts_at <= now

    def capacity(self, *, default: int) -> int:
        return self.total_seats if self.total_seats is not None else default

    def ensure_bookable(self, *, now: datetime) -> None:
        if self.status != EventStatus.PUBLISHED:
            raise EventNotBookableError(f'Event is {self.status}, bookings are closed')
        if self.has_started(now=now):
            raise EventNotBookableError('Event has already taken place')
