from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.ticketing.app.interface.i_seat_inventory_handler import ISeatInventoryHandler
from src.service.ticketing.domain.entity.seat_inventory_entity import SeatInventory
from src.service.ticketing.domain.ticketing_error import (
    EventNotFoundError,
    NoSeatsAvailableError,
)


class GetSeatMapUseCase:
    def __init__(
        self,
        *,
        event_query_repo: IEventQueryRepo,
        seat_inventory_handler: ISeatInventoryHandler,
    ) -> None:
        self.event_query_repo = event_query_repo
        self.seat_inventory_handler = seat_inventory_handler

    @classmethod
    @inject
    def depends(
        cls,
        event_query_repo: IEventQueryRepo = Depends(Provide[Container.event_query_repo]),
        seat_inventory_handler: ISeatInventoryHandler = Depends(
            Provide[Container.seat_inventory_handler]
        ),
    ) -> Self:
        return cls(event_query_repo=event_query_repo, seat_inventory_handler=seat_inventory_handler)

    @Logger.io(truncate_content=True)
    async def execute(self, *, event_id: int) -> SeatInventory:
        if await self.event_query_repo.get_by_id(event_id=event_id) is None:
            raise EventNotFoundError()
        inventory = await self.seat_inventory_handler.get_inventory(event_id=event_id)
        if inventory is None:
            raise NoSeatsAvailableError('Seats are not on sale for this event yet')
        return inventory
