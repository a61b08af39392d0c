from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, SecretStr

from src.service.ticketing.domain.enum.ticket_status import PaymentMethod


class ProcessPaymentRequest(BaseModel):
    amount: int = Field(gt=0)
    currency: str = Field(default='USD', min_length=3, max_length=3)
    payment_method: PaymentMethod = PaymentMethod.CREDIT_CARD
    card_number: Optional[SecretStr] = None
    event_id: Optional[int] = None

    model_config = {
        'json_schema_extra': {
            'example': {
                'amount': 1500,
                'currency': 'USD',
                'payment_method': 'credit_card',
                'card_number': '4242 4242 4242 4242',
                'event_id': 1,
            }
        },
    }


class ProcessPaymentResponse(BaseModel):
    payment_id: str
    token: str
    status: str
    amount: int
    currency: str
    method: PaymentMethod
    masked_last4: Optional[str] = None
    processed_at: datetime
    expires_at: datetime
    event_id: Optional[int] = None


class IssueTestTokenRequest(BaseModel):
    event_id: Optional[int] = None


class IssueTestTokenResponse(BaseModel):
    transaction_id: str
    token: str
    expires_at: datetime
    event_id: Optional[int] = None
