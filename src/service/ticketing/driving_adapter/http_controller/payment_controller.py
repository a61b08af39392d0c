from fastapi import APIRouter, Depends

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.command.simulate_payment_use_case import SimulatePaymentUseCase
from src.service.ticketing.domain.entity.user_entity import UserEntity
from src.service.ticketing.driving_adapter.http_controller.auth.role_auth import get_current_user
from src.service.ticketing.driving_adapter.http_controller.schema.payment_schema import (
    IssueTestTokenRequest,
    IssueTestTokenResponse,
    ProcessPaymentRequest,
    ProcessPaymentResponse,
)


router = APIRouter()


@router.post('/process')
@Logger.io
async def process_payment(
    request: ProcessPaymentRequest,
    current_user: UserEntity = Depends(get_current_user),
    use_case: SimulatePaymentUseCase = Depends(SimulatePaymentUseCase.depends),
) -> ProcessPaymentResponse:
    receipt = use_case.process_payment(
        holder_id=current_user.id,
        amount=request.amount,
        currency=request.currency,
        method=request.payment_method,
        card_number=request.card_number.get_secret_value() if request.card_number else None,
        event_id=request.event_id,
    )
    return ProcessPaymentResponse(
        payment_id=receipt.payment_id,
        token=receipt.token,
        status=receipt.status,
        amount=receipt.amount,
        currency=receipt.currency,
        method=receipt.method,
        masked_last4=receipt.masked_last4,
        processed_at=receipt.processed_at,
        expires_at=receipt.expires_at,
        event_id=receipt.event_id,
    )


@router.post('/test_token')
@Logger.io
async def issue_test_token(
    request: IssueTestTokenRequest,
    current_user: UserEntity = Depends(get_current_user),
    use_case: SimulatePaymentUseCase = Depends(SimulatePaymentUseCase.depends),
) -> IssueTestTokenResponse:
    proof = use_case.issue_test_token(holder_id=current_user.id, event_id=request.event_id)
    return IssueTestTokenResponse(
        transaction_id=proof.transaction_id,
        token=proof.token,
        expires_at=proof.expires_at,
        event_id=proof.event_id,
    )
