"""
Database Models

Import all models here to ensure they are registered with SQLAlchemy
"""

from src.service.ticketing.driven_adapter.model.event_model import EventModel
from src.service.ticketing.driven_adapter.model.payment_proof_claim_model import (
    PaymentProofClaimModel,
)
from src.service.ticketing.driven_adapter.model.seat_inventory_model import SeatInventoryModel
from src.service.ticketing.driven_adapter.model.ticket_model import TicketModel

__all__ = [
    'EventModel',
    'PaymentProofClaimModel',
    'SeatInventoryModel',
    'TicketModel',
]
