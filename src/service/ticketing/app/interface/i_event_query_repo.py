from abc import ABC, abstractmethod
from typing import Dict, Optional, Sequence

from src.service.ticketing.domain.entity.event_entity import EventEntity


class IEventQueryRepo(ABC):
    """Read access to events published by the event service."""

    @abstractmethod
    async def get_by_id(self, *, event_id: int) -> Optional[EventEntity]:
        pass

    @abstractmethod
    async def get_by_ids(self, *, event_ids: Sequence[int]) -> Dict[int, EventEntity]:
        pass
