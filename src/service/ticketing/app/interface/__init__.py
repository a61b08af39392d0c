"""Application layer interfaces (Ports)"""

from src.service.ticketing.app.interface.i_event_lock_manager import IEventLockManager
from src.service.ticketing.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.ticketing.app.interface.i_payment_proof_issuer import IPaymentProofIssuer
from src.service.ticketing.app.interface.i_payment_proof_registry import IPaymentProofRegistry
from src.service.ticketing.app.interface.i_payment_proof_verifier import IPaymentProofVerifier
from src.service.ticketing.app.interface.i_seat_inventory_handler import ISeatInventoryHandler
from src.service.ticketing.app.interface.i_seat_inventory_repo import ISeatInventoryRepo
from src.service.ticketing.app.interface.i_ticket_issuer import ITicketIssuer
from src.service.ticketing.app.interface.i_ticket_ledger_repo import ITicketLedgerRepo

__all__ = [
    'IEventLockManager',
    'IEventQueryRepo',
    'IPaymentProofIssuer',
    'IPaymentProofRegistry',
    'IPaymentProofVerifier',
    'ISeatInventoryHandler',
    'ISeatInventoryRepo',
    'ITicketIssuer',
    'ITicketLedgerRepo',
]
