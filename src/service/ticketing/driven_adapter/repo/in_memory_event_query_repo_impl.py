from typing import Dict, Optional, Sequence

from src.service.ticketing.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.ticketing.domain.entity.event_entity import EventEntity


class InMemoryEventQueryRepoImpl(IEventQueryRepo):
    def __init__(self) -> None:
        self._events: Dict[int, EventEntity] = {}

    def upsert(self, event: EventEntity) -> None:
        self._events[event.id] = event

    async def get_by_id(self, *, event_id: int) -> Optional[EventEntity]:
        return self._events.get(event_id)

    async def get_by_ids(self, *, event_ids: Sequence[int]) -> Dict[int, EventEntity]:
        return {eid: self._events[eid] for eid in set(event_ids) if eid in self._events}
