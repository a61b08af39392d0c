from typing import Optional

from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.command.book_tickets_use_case import BookTicketsUseCase
from src.service.ticketing.app.command.cancel_ticket_use_case import CancelTicketUseCase
from src.service.ticketing.app.command.check_in_ticket_use_case import CheckInTicketUseCase
from src.service.ticketing.app.command.confirm_ticket_payment_use_case import (
    ConfirmTicketPaymentUseCase,
)
from src.service.ticketing.app.query.get_ticket_use_case import GetTicketUseCase
from src.service.ticketing.app.query.list_my_tickets_use_case import ListMyTicketsUseCase
from src.service.ticketing.domain.entity.user_entity import UserEntity
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.driving_adapter.http_controller.auth.role_auth import (
    get_current_user,
    require_staff,
)
from src.service.ticketing.driving_adapter.http_controller.schema.ticket_schema import (
    TicketBookRequest,
    TicketBookResponse,
    TicketListResponse,
    TicketPaymentRequest,
    TicketResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def book_tickets(
    request: TicketBookRequest,
    current_user: UserEntity = Depends(get_current_user),
    use_case: BookTicketsUseCase = Depends(BookTicketsUseCase.depends),
) -> TicketBookResponse:
    with tracer.start_as_current_span('controller.book_tickets') as span:
        span.set_attribute('event_id', request.event_id)
        span.set_attribute('quantity', request.quantity)
        span.set_attribute('holder_id', current_user.id)

        views = await use_case.execute(
            event_id=request.event_id,
            holder_id=current_user.id,
            count=request.quantity,
            preferred_seat_ids=request.preferred_seat_ids,
            payment_method=request.payment_method,
            payment_proof_token=request.payment_proof_token,
            transaction_id=request.transaction_id,
        )
        return TicketBookResponse(tickets=[TicketResponse.from_view(view) for view in views])


@router.get('/my_tickets')
@Logger.io
async def list_my_tickets(
    ticket_status: Optional[TicketStatus] = None,
    page: int = 1,
    limit: int = 10,
    current_user: UserEntity = Depends(get_current_user),
    use_case: ListMyTicketsUseCase = Depends(ListMyTicketsUseCase.depends),
) -> TicketListResponse:
    ticket_page = await use_case.execute(
        holder_id=current_user.id, status=ticket_status, page=page, limit=limit
    )
    return TicketListResponse.from_page(ticket_page)


@router.get('/{ticket_id}')
@Logger.io
async def get_ticket(
    ticket_id: str,
    current_user: UserEntity = Depends(get_current_user),
    use_case: GetTicketUseCase = Depends(GetTicketUseCase.depends),
) -> TicketResponse:
    view = await use_case.execute(ticket_id=ticket_id, requester=current_user)
    return TicketResponse.from_view(view)


@router.post('/{ticket_id}/pay')
@Logger.io
async def pay_ticket(
    ticket_id: str,
    request: TicketPaymentRequest,
    current_user: UserEntity = Depends(get_current_user),
    use_case: ConfirmTicketPaymentUseCase = Depends(ConfirmTicketPaymentUseCase.depends),
) -> TicketResponse:
    with tracer.start_as_current_span('controller.pay_ticket') as span:
        span.set_attribute('ticket_id', ticket_id)
        view = await use_case.execute(
            ticket_id=ticket_id,
            holder_id=current_user.id,
            payment_proof_token=request.payment_proof_token,
            transaction_id=request.transaction_id,
        )
        return TicketResponse.from_view(view)


@router.patch('/{ticket_id}/cancel')
@Logger.io
async def cancel_ticket(
    ticket_id: str,
    current_user: UserEntity = Depends(get_current_user),
    use_case: CancelTicketUseCase = Depends(CancelTicketUseCase.depends),
) -> TicketResponse:
    with tracer.start_as_current_span('controller.cancel_ticket') as span:
        span.set_attribute('ticket_id', ticket_id)
        view = await use_case.execute(ticket_id=ticket_id, requester_id=current_user.id)
        return TicketResponse.from_view(view)


@router.post('/{ticket_id}/check_in')
@Logger.io
async def check_in_ticket(
    ticket_id: str,
    current_user: UserEntity = Depends(require_staff),
    use_case: CheckInTicketUseCase = Depends(CheckInTicketUseCase.depends),
) -> TicketResponse:
    with tracer.start_as_current_span('controller.check_in_ticket') as span:
        span.set_attribute('ticket_id', ticket_id)
        view = await use_case.execute(ticket_id=ticket_id, staff_id=current_user.id)
        return TicketResponse.from_view(view)
