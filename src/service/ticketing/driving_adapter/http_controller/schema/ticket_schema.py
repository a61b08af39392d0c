import base64
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from src.service.ticketing.app.dto.ticket_view_dto import TicketPage, TicketView
from src.service.ticketing.domain.enum.ticket_status import (
    PaymentMethod,
    PaymentStatus,
    TicketStatus,
)


QR_UNAVAILABLE_WARNING = 'QR image is temporarily unavailable; the ticket remains valid'


class TicketBookRequest(BaseModel):
    event_id: int
    quantity: int = Field(default=1, ge=1)
    preferred_seat_ids: List[str] = []
    payment_method: PaymentMethod = PaymentMethod.CREDIT_CARD
    payment_proof_token: Optional[str] = None
    transaction_id: Optional[str] = None

    model_config = {
        'json_schema_extra': {
            'examples': [
                {'event_id': 1, 'quantity': 1},
                {
                    'event_id': 1,
                    'quantity': 2,
                    'preferred_seat_ids': ['S010', 'S011'],
                    'payment_method': 'credit_card',
                    'payment_proof_token': '<signed proof>',
                    'transaction_id': 'tx_3f9c2a0d41b84e7f9a6c1d2e',
                },
            ]
        },
    }


class TicketPaymentRequest(BaseModel):
    payment_proof_token: str
    transaction_id: str


class TicketPaymentResponse(BaseModel):
    amount: int
    currency: str
    method: PaymentMethod
    status: PaymentStatus
    proof_reference: Optional[str] = None
    paid_at: Optional[datetime] = None


class TicketCheckInResponse(BaseModel):
    done: bool
    at: Optional[datetime] = None
    by: Optional[int] = None


class TicketResponse(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'ticket_id': 'TKT-9F3A61C0B2D4',
                'event_id': 1,
                'holder_id': 2,
                'seat_id': 'S001',
                'status': 'confirmed',
                'stored_status': 'confirmed',
                'payment': {
                    'amount': 1500,
                    'currency': 'USD',
                    'method': 'credit_card',
                    'status': 'completed',
                    'proof_reference': 'tx_3f9c2a0d41b84e7f9a6c1d2e',
                    'paid_at': '2025-01-10T10:30:00Z',
                },
                'check_in': {'done': False, 'at': None, 'by': None},
                'issued_at': '2025-01-10T10:30:00Z',
                'verification_payload': '{"eventId":1,...}',
                'qr_code': '<base64 png>',
                'image_available': True,
                'warning': None,
            }
        },
    }

    ticket_id: str
    event_id: int
    holder_id: int
    seat_id: str
    status: TicketStatus  # derived: confirmed tickets of past events read as expired
    stored_status: TicketStatus
    payment: TicketPaymentResponse
    check_in: TicketCheckInResponse
    issued_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    verification_payload: Optional[str] = None
    qr_code: Optional[str] = None
    image_available: bool = False
    warning: Optional[str] = None

    @classmethod
    def from_view(cls, view: TicketView) -> 'TicketResponse':
        ticket = view.ticket
        issuance = view.issuance
        qr_code = None
        warning = None
        if issuance is not None and issuance.image is not None:
            qr_code = base64.b64encode(issuance.image).decode()
        elif issuance is not None:
            warning = QR_UNAVAILABLE_WARNING

        return cls(
            ticket_id=ticket.ticket_id,
            event_id=ticket.event_id,
            holder_id=ticket.holder_id,
            seat_id=ticket.seat_id,
            status=view.effective_status,
            stored_status=ticket.status,
            payment=TicketPaymentResponse(
                amount=ticket.payment.amount,
                currency=ticket.payment.currency,
                method=ticket.payment.method,
                status=ticket.payment.status,
                proof_reference=ticket.payment.proof_reference,
                paid_at=ticket.payment.paid_at,
            ),
            check_in=TicketCheckInResponse(
                done=ticket.check_in_record.done,
                at=ticket.check_in_record.at,
                by=ticket.check_in_record.by,
            ),
            issued_at=ticket.issued_at,
            cancelled_at=ticket.cancelled_at,
            created_at=ticket.created_at,
            verification_payload=issuance.payload if issuance else ticket.verification_payload,
            qr_code=qr_code,
            image_available=view.image_available,
            warning=warning,
        )


class TicketBookResponse(BaseModel):
    tickets: List[TicketResponse]


class TicketListResponse(BaseModel):
    items: List[TicketResponse]
    total: int
    page: int
    limit: int
    pages: int

    @classmethod
    def from_page(cls, page: TicketPage) -> 'TicketListResponse':
        return cls(
            items=[TicketResponse.from_view(view) for view in page.items],
            total=page.total,
            page=page.page,
            limit=page.limit,
            pages=page.pages,
        )
