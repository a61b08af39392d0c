from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.ticketing.app.interface.i_seat_inventory_handler import ISeatInventoryHandler
from src.service.ticketing.domain.entity.seat_inventory_entity import SeatInventory
from src.service.ticketing.domain.ticketing_error import (
    EventNotFoundError,
    InvalidBookingRequestError,
)


class EnsureSeatInventoryUseCase:
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

    @Logger.io
    async def execute(self, *, event_id: int, total_seats: Optional[int] = None) -> SeatInventory:
        """
        Create the event's seat map, or repair it when damaged.

        An intact seat map is returned as is; `total_seats` only applies when the
        seat map has to be (re)built and the event carries no capacity of its own.
        """
        event = await self.event_query_repo.get_by_id(event_id=event_id)
        if event is None:
            raise EventNotFoundError()
        if total_seats is not None and total_seats < 0:
            raise InvalidBookingRequestError('Seat count cannot be negative')

        default = total_seats if total_seats is not None else settings.DEFAULT_TOTAL_SEATS
        return await self.seat_inventory_handler.ensure_inventory(
            event_id=event_id, total_seats=event.capacity(default=default)
        )
