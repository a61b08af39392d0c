from abc import ABC, abstractmethod

from src.service.ticketing.domain.entity.ticket_entity import Ticket
from src.service.ticketing.domain.value_object.ticket_issuance import TicketIssuance


class ITicketIssuer(ABC):
    @abstractmethod
    def derive_payload(self, *, ticket: Ticket) -> str:
        """Canonical verification payload; the stored payload wins when present"""
        pass

    @abstractmethod
    def issue(self, *, ticket: Ticket) -> TicketIssuance:
        """
        Payload plus a scannable image of it

        Image failures are not raised: the issuance comes back without an image.
        """
        pass
