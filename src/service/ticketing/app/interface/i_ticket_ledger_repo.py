from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple

from src.service.ticketing.app.dto.ticket_stats_dto import TicketStatusStats
from src.service.ticketing.domain.entity.ticket_entity import Ticket
from src.service.ticketing.domain.enum.ticket_status import TicketStatus


class ITicketLedgerRepo(ABC):
    """Durable record of issued tickets. Tickets are never deleted."""

    @abstractmethod
    async def create_batch(self, *, tickets: Sequence[Ticket]) -> List[Ticket]:
        """
        Write all tickets of one booking in a single transaction

        Raises:
            Any storage error; in that case none of the tickets were written
        """
        pass

    @abstractmethod
    async def get_by_ticket_id(self, *, ticket_id: str) -> Optional[Ticket]:
        pass

    @abstractmethod
    async def get_by_ticket_ids(self, *, ticket_ids: Sequence[str]) -> List[Ticket]:
        pass

    @abstractmethod
    async def update(self, *, ticket: Ticket, expected_status: TicketStatus) -> Ticket:
        """
        Replace a ticket if its stored status is still `expected_status`

        Raises:
            TicketStateConflictError: The stored status changed in between
            TicketNotFoundError: No such ticket
        """
        pass

    @abstractmethod
    async def record_verification_payload(self, *, ticket_id: str, payload: str) -> str:
        """
        Store the payload unless one is already stored

        Returns:
            The payload now stored for the ticket
        """
        pass

    @abstractmethod
    async def find_active_by_holder(self, *, event_id: int, holder_id: int) -> List[Ticket]:
        """Tickets of the holder for the event that still hold a seat"""
        pass

    @abstractmethod
    async def list_active_by_event(self, *, event_id: int) -> List[Ticket]:
        pass

    @abstractmethod
    async def list_by_holder(
        self,
        *,
        holder_id: int,
        status: Optional[TicketStatus] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> Tuple[List[Ticket], int]:
        """
        Page through a holder's tickets, newest first

        Returns:
            (tickets on this page, total matching tickets)
        """
        pass

    @abstractmethod
    async def list_by_event(
        self, *, event_id: int, offset: int = 0, limit: int = 50
    ) -> Tuple[List[Ticket], int]:
        """Page through every ticket of an event, newest first"""
        pass

    @abstractmethod
    async def stats_by_event(self, *, event_id: int) -> List[TicketStatusStats]:
        """Ticket count and summed payment amount per stored status"""
        pass
