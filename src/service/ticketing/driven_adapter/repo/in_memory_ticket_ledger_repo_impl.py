from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

import attrs

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.dto.ticket_stats_dto import TicketStatusStats
from src.service.ticketing.app.interface.i_ticket_ledger_repo import ITicketLedgerRepo
from src.service.ticketing.domain.entity.ticket_entity import Ticket
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.domain.ticketing_error import (
    TicketNotFoundError,
    TicketStateConflictError,
)


class InMemoryTicketLedgerRepoImpl(ITicketLedgerRepo):
    """
    Dict-backed ledger. No awaits happen between a check and its write, so every
    method is atomic with respect to other coroutines on the loop.
    """

    def __init__(self) -> None:
        self._tickets: Dict[str, Ticket] = {}
        self._insert_order: List[str] = []

    @Logger.io
    async def create_batch(self, *, tickets: Sequence[Ticket]) -> List[Ticket]:
        duplicated = [t.ticket_id for t in tickets if t.ticket_id in self._tickets]
        if duplicated:
            raise ValueError(f'Ticket ids already exist: {duplicated}')
        for ticket in tickets:
            self._tickets[ticket.ticket_id] = ticket
            self._insert_order.append(ticket.ticket_id)
        return list(tickets)

    async def get_by_ticket_id(self, *, ticket_id: str) -> Optional[Ticket]:
        return self._tickets.get(ticket_id)

    async def get_by_ticket_ids(self, *, ticket_ids: Sequence[str]) -> List[Ticket]:
        return [self._tickets[tid] for tid in ticket_ids if tid in self._tickets]

    @Logger.io
    async def update(self, *, ticket: Ticket, expected_status: TicketStatus) -> Ticket:
        stored = self._tickets.get(ticket.ticket_id)
        if stored is None:
            raise TicketNotFoundError()
        if stored.status != expected_status:
            raise TicketStateConflictError()
        self._tickets[ticket.ticket_id] = ticket
        return ticket

    async def record_verification_payload(self, *, ticket_id: str, payload: str) -> str:
        stored = self._tickets.get(ticket_id)
        if stored is None:
            raise TicketNotFoundError()
        if stored.verification_payload is None:
            stored = attrs.evolve(stored, verification_payload=payload)
            self._tickets[ticket_id] = stored
        return stored.verification_payload  # type: ignore[return-value]

    async def find_active_by_holder(self, *, event_id: int, holder_id: int) -> List[Ticket]:
        return [
            t
            for t in self._tickets.values()
            if t.event_id == event_id and t.holder_id == holder_id and t.is_active
        ]

    async def list_active_by_event(self, *, event_id: int) -> List[Ticket]:
        return [t for t in self._tickets.values() if t.event_id == event_id and t.is_active]

    async def list_by_holder(
        self,
        *,
        holder_id: int,
        status: Optional[TicketStatus] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> Tuple[List[Ticket], int]:
        matching = [
            self._tickets[tid]
            for tid in reversed(self._insert_order)
            if self._tickets[tid].holder_id == holder_id
            and (status is None or self._tickets[tid].status == status)
        ]
        return matching[offset : offset + limit], len(matching)

    async def list_by_event(
        self, *, event_id: int, offset: int = 0, limit: int = 50
    ) -> Tuple[List[Ticket], int]:
        matching = [
            self._tickets[tid]
            for tid in reversed(self._insert_order)
            if self._tickets[tid].event_id == event_id
        ]
        return matching[offset : offset + limit], len(matching)

    async def stats_by_event(self, *, event_id: int) -> List[TicketStatusStats]:
        counts: Dict[TicketStatus, int] = defaultdict(int)
        revenue: Dict[TicketStatus, int] = defaultdict(int)
        for ticket in self._tickets.values():
            if ticket.event_id != event_id:
                continue
            counts[ticket.status] += 1
            revenue[ticket.status] += ticket.payment.amount
        return [
            TicketStatusStats(status=status, count=counts[status], revenue=revenue[status])
            for status in sorted(counts)
        ]
