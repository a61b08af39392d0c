from typing import AsyncContextManager, Callable, Optional

import attrs
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from src.platform.logging.loguru_io import Logger
from src.platform.types.datetime_utils import as_utc, utc_now
from src.service.ticketing.app.interface.i_seat_inventory_repo import ISeatInventoryRepo
from src.service.ticketing.domain.entity.seat_inventory_entity import SeatInventory, SeatSlot
from src.service.ticketing.domain.ticketing_error import SeatInventoryVersionConflictError
from src.service.ticketing.driven_adapter.model.seat_inventory_model import SeatInventoryModel


class SeatInventoryRepoImpl(ISeatInventoryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @staticmethod
    def _model_to_entity(model: SeatInventoryModel) -> SeatInventory:
        seats = []
        for raw in model.seats or []:
            if not isinstance(raw, dict) or 'seat_id' not in raw:
                continue  # damaged entry; the inventory then fails is_intact()
            seats.append(
                SeatSlot(
                    seat_id=str(raw['seat_id']),
                    occupied=bool(raw.get('occupied', False)),
                    holder_id=raw.get('holder_id'),
                )
            )
        return SeatInventory(
            event_id=model.event_id,
            total_seats=model.total_seats,
            seats=seats,
            version=model.version,
            updated_at=as_utc(model.updated_at) if model.updated_at else None,
        )

    @staticmethod
    def _serialize_seats(inventory: SeatInventory) -> list[dict]:
        return [
            {'seat_id': slot.seat_id, 'occupied': slot.occupied, 'holder_id': slot.holder_id}
            for slot in inventory.seats
        ]

    @Logger.io(truncate_content=True)
    async def get(self, *, event_id: int) -> Optional[SeatInventory]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(SeatInventoryModel).where(SeatInventoryModel.event_id == event_id)
            )
            model = result.scalar_one_or_none()
            return self._model_to_entity(model) if model else None

    @Logger.io(truncate_content=True)
    async def save(self, *, inventory: SeatInventory) -> SeatInventory:
        new_version = inventory.version + 1
        seats = self._serialize_seats(inventory)

        async with self.session_factory() as session:
            if inventory.version == 0:
                session.add(
                    SeatInventoryModel(
                        event_id=inventory.event_id,
                        total_seats=inventory.total_seats,
                        seats=seats,
                        version=new_version,
                    )
                )
                try:
                    await session.commit()
                except IntegrityError:
                    await session.rollback()
                    raise SeatInventoryVersionConflictError() from None
            else:
                result = await session.execute(
                    update(SeatInventoryModel)
                    .where(
                        SeatInventoryModel.event_id == inventory.event_id,
                        SeatInventoryModel.version == inventory.version,
                    )
                    .values(
                        total_seats=inventory.total_seats,
                        seats=seats,
                        version=new_version,
                        updated_at=func.now(),
                    )
                )
                if result.rowcount != 1:  # type: ignore[attr-defined]
                    await session.rollback()
                    raise SeatInventoryVersionConflictError()
                await session.commit()

        return attrs.evolve(
            inventory, seats=list(inventory.seats), version=new_version, updated_at=utc_now()
        )
