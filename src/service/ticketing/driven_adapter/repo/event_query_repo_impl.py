from typing import AsyncContextManager, Callable, Dict, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.ticketing.domain.entity.event_entity import EventEntity
from src.service.ticketing.domain.enum.event_status import EventStatus
from src.service.ticketing.driven_adapter.model.event_model import EventModel


class EventQueryRepoImpl(IEventQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @staticmethod
    def _model_to_entity(model: EventModel) -> EventEntity:
        return EventEntity(
            id=model.id,
            status=EventStatus(model.status),
            starts_at=model.starts_at,
            price=model.price,
            currency=model.currency,
            total_seats=model.total_seats,
            title=model.title,
        )

    @Logger.io
    async def get_by_id(self, *, event_id: int) -> Optional[EventEntity]:
        async with self.session_factory() as session:
            model = await session.get(EventModel, event_id)
            return self._model_to_entity(model) if model else None

    @Logger.io
    async def get_by_ids(self, *, event_ids: Sequence[int]) -> Dict[int, EventEntity]:
        if not event_ids:
            return {}
        async with self.session_factory() as session:
            result = await session.execute(
                select(EventModel).where(EventModel.id.in_(set(event_ids)))
            )
            return {model.id: self._model_to_entity(model) for model in result.scalars()}
