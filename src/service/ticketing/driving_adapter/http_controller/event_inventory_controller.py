from fastapi import APIRouter, Depends, status

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.command.ensure_seat_inventory_use_case import (
    EnsureSeatInventoryUseCase,
)
from src.service.ticketing.app.query.get_event_ticket_stats_use_case import (
    GetEventTicketStatsUseCase,
)
from src.service.ticketing.app.query.get_seat_map_use_case import GetSeatMapUseCase
from src.service.ticketing.domain.entity.user_entity import UserEntity
from src.service.ticketing.driving_adapter.http_controller.auth.role_auth import (
    get_current_user,
    require_staff,
)
from src.service.ticketing.driving_adapter.http_controller.schema.event_inventory_schema import (
    EnsureInventoryRequest,
    EventTicketStatsResponse,
    SeatMapResponse,
)


router = APIRouter()


@router.post('/{event_id}/inventory', status_code=status.HTTP_200_OK)
@Logger.io
async def ensure_inventory(
    event_id: int,
    request: EnsureInventoryRequest,
    current_user: UserEntity = Depends(require_staff),
    use_case: EnsureSeatInventoryUseCase = Depends(EnsureSeatInventoryUseCase.depends),
) -> SeatMapResponse:
    inventory = await use_case.execute(event_id=event_id, total_seats=request.total_seats)
    return SeatMapResponse.from_inventory(inventory)


@router.get('/{event_id}/seats')
@Logger.io(truncate_content=True)
async def get_seat_map(
    event_id: int,
    current_user: UserEntity = Depends(get_current_user),
    use_case: GetSeatMapUseCase = Depends(GetSeatMapUseCase.depends),
) -> SeatMapResponse:
    inventory = await use_case.execute(event_id=event_id)
    return SeatMapResponse.from_inventory(inventory)


@router.get('/{event_id}/ticket_stats')
@Logger.io
async def get_ticket_stats(
    event_id: int,
    page: int = 1,
    limit: int = 50,
    current_user: UserEntity = Depends(require_staff),
    use_case: GetEventTicketStatsUseCase = Depends(GetEventTicketStatsUseCase.depends),
) -> EventTicketStatsResponse:
    stats = await use_case.execute(event_id=event_id, page=page, limit=limit)
    return EventTicketStatsResponse.from_stats(stats)
