from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from src.service.ticketing.app.command.book_tickets_use_case import BookTicketsUseCase
from src.service.ticketing.app.command.cancel_ticket_use_case import CancelTicketUseCase
from src.service.ticketing.app.command.check_in_ticket_use_case import CheckInTicketUseCase
from src.service.ticketing.app.command.confirm_ticket_payment_use_case import (
    ConfirmTicketPaymentUseCase,
)
from src.service.ticketing.app.command.confirmation_helper.payment_proof_claimer import (
    PaymentProofClaimer,
)
from src.service.ticketing.app.command.confirmation_helper.ticket_issuance_recorder import (
    TicketIssuanceRecorder,
)
from src.service.ticketing.app.command.ensure_seat_inventory_use_case import (
    EnsureSeatInventoryUseCase,
)
from src.service.ticketing.app.command.simulate_payment_use_case import SimulatePaymentUseCase
from src.service.ticketing.app.query.get_event_ticket_stats_use_case import (
    GetEventTicketStatsUseCase,
)
from src.service.ticketing.app.query.get_seat_map_use_case import GetSeatMapUseCase
from src.service.ticketing.app.query.get_ticket_use_case import GetTicketUseCase
from src.service.ticketing.app.query.list_my_tickets_use_case import ListMyTicketsUseCase
from src.service.ticketing.domain.entity.event_entity import EventEntity
from src.service.ticketing.domain.enum.event_status import EventStatus
from src.service.ticketing.driven_adapter.issuer.qr_ticket_issuer_impl import QrTicketIssuerImpl
from src.service.ticketing.driven_adapter.payment.jwt_payment_proof_issuer_impl import (
    JwtPaymentProofIssuerImpl,
)
from src.service.ticketing.driven_adapter.payment.jwt_payment_proof_verifier_impl import (
    JwtPaymentProofVerifierImpl,
)
from src.service.ticketing.driven_adapter.repo.in_memory_event_query_repo_impl import (
    InMemoryEventQueryRepoImpl,
)
from src.service.ticketing.driven_adapter.repo.in_memory_seat_inventory_repo_impl import (
    InMemorySeatInventoryRepoImpl,
)
from src.service.ticketing.driven_adapter.repo.in_memory_ticket_ledger_repo_impl import (
    InMemoryTicketLedgerRepoImpl,
)
from src.service.ticketing.driven_adapter.state.in_memory_payment_proof_registry_impl import (
    InMemoryPaymentProofRegistryImpl,
)
from src.service.ticketing.driven_adapter.state.local_event_lock_manager_impl import (
    LocalEventLockManagerImpl,
)
from src.service.ticketing.driven_adapter.state.seat_inventory_handler_impl import (
    SeatInventoryHandlerImpl,
)
from test.constants import TEST_EVENT_ID, TEST_EVENT_PRICE, TEST_PAYMENT_PROOF_SECRET


def make_event(
    *,
    event_id: int = TEST_EVENT_ID,
    status: EventStatus = EventStatus.PUBLISHED,
    starts_in: timedelta = timedelta(days=7),
    price: int = TEST_EVENT_PRICE,
    total_seats: Optional[int] = 10,
    title: str = 'Spring Concert',
) -> EventEntity:
    return EventEntity(
        id=event_id,
        status=status,
        starts_at=datetime.now(timezone.utc) + starts_in,
        price=price,
        currency='USD',
        total_seats=total_seats,
        title=title,
    )


# =============================================================================
# Driven adapters
# =============================================================================
@pytest.fixture
def event_query_repo() -> InMemoryEventQueryRepoImpl:
    repo = InMemoryEventQueryRepoImpl()
    repo.upsert(make_event())
    return repo


@pytest.fixture
def seat_inventory_repo() -> InMemorySeatInventoryRepoImpl:
    return InMemorySeatInventoryRepoImpl()


@pytest.fixture
def ticket_ledger_repo() -> InMemoryTicketLedgerRepoImpl:
    return InMemoryTicketLedgerRepoImpl()


@pytest.fixture
def payment_proof_registry() -> InMemoryPaymentProofRegistryImpl:
    return InMemoryPaymentProofRegistryImpl()


@pytest.fixture
def lock_manager() -> LocalEventLockManagerImpl:
    return LocalEventLockManagerImpl(acquire_timeout=2.0)


@pytest.fixture
def seat_inventory_handler(
    seat_inventory_repo, ticket_ledger_repo, lock_manager
) -> SeatInventoryHandlerImpl:
    return SeatInventoryHandlerImpl(
        seat_inventory_repo=seat_inventory_repo,
        ticket_ledger_repo=ticket_ledger_repo,
        lock_manager=lock_manager,
    )


@pytest.fixture
def payment_proof_issuer() -> JwtPaymentProofIssuerImpl:
    return JwtPaymentProofIssuerImpl(secret=TEST_PAYMENT_PROOF_SECRET, algorithm='HS256')


@pytest.fixture
def payment_proof_verifier() -> JwtPaymentProofVerifierImpl:
    return JwtPaymentProofVerifierImpl(secret=TEST_PAYMENT_PROOF_SECRET, algorithm='HS256')


@pytest.fixture
def ticket_issuer() -> QrTicketIssuerImpl:
    return QrTicketIssuerImpl(box_size=2, border=1)


# =============================================================================
# Confirmation helpers
# =============================================================================
@pytest.fixture
def payment_proof_claimer(payment_proof_verifier, payment_proof_registry) -> PaymentProofClaimer:
    return PaymentProofClaimer(
        payment_proof_verifier=payment_proof_verifier,
        payment_proof_registry=payment_proof_registry,
    )


@pytest.fixture
def ticket_issuance_recorder(ticket_issuer, ticket_ledger_repo) -> TicketIssuanceRecorder:
    return TicketIssuanceRecorder(
        ticket_issuer=ticket_issuer, ticket_ledger_repo=ticket_ledger_repo
    )


# =============================================================================
# Use cases
# =============================================================================
@pytest.fixture
def book_tickets_use_case(
    event_query_repo,
    seat_inventory_handler,
    ticket_ledger_repo,
    payment_proof_claimer,
    ticket_issuance_recorder,
) -> BookTicketsUseCase:
    return BookTicketsUseCase(
        event_query_repo=event_query_repo,
        seat_inventory_handler=seat_inventory_handler,
        ticket_ledger_repo=ticket_ledger_repo,
        payment_proof_claimer=payment_proof_claimer,
        ticket_issuance_recorder=ticket_issuance_recorder,
    )


@pytest.fixture
def cancel_ticket_use_case(
    event_query_repo, seat_inventory_handler, ticket_ledger_repo
) -> CancelTicketUseCase:
    return CancelTicketUseCase(
        event_query_repo=event_query_repo,
        seat_inventory_handler=seat_inventory_handler,
        ticket_ledger_repo=ticket_ledger_repo,
    )


@pytest.fixture
def check_in_ticket_use_case(ticket_ledger_repo) -> CheckInTicketUseCase:
    return CheckInTicketUseCase(ticket_ledger_repo=ticket_ledger_repo)


@pytest.fixture
def confirm_ticket_payment_use_case(
    event_query_repo, ticket_ledger_repo, payment_proof_claimer, ticket_issuance_recorder
) -> ConfirmTicketPaymentUseCase:
    return ConfirmTicketPaymentUseCase(
        event_query_repo=event_query_repo,
        ticket_ledger_repo=ticket_ledger_repo,
        payment_proof_claimer=payment_proof_claimer,
        ticket_issuance_recorder=ticket_issuance_recorder,
    )


@pytest.fixture
def ensure_seat_inventory_use_case(
    event_query_repo, seat_inventory_handler
) -> EnsureSeatInventoryUseCase:
    return EnsureSeatInventoryUseCase(
        event_query_repo=event_query_repo, seat_inventory_handler=seat_inventory_handler
    )


@pytest.fixture
def simulate_payment_use_case(payment_proof_issuer) -> SimulatePaymentUseCase:
    return SimulatePaymentUseCase(payment_proof_issuer=payment_proof_issuer)


@pytest.fixture
def list_my_tickets_use_case(
    ticket_ledger_repo, event_query_repo, ticket_issuer
) -> ListMyTicketsUseCase:
    return ListMyTicketsUseCase(
        ticket_ledger_repo=ticket_ledger_repo,
        event_query_repo=event_query_repo,
        ticket_issuer=ticket_issuer,
    )


@pytest.fixture
def get_ticket_use_case(ticket_ledger_repo, event_query_repo, ticket_issuer) -> GetTicketUseCase:
    return GetTicketUseCase(
        ticket_ledger_repo=ticket_ledger_repo,
        event_query_repo=event_query_repo,
        ticket_issuer=ticket_issuer,
    )


@pytest.fixture
def get_event_ticket_stats_use_case(
    event_query_repo, seat_inventory_handler, ticket_ledger_repo
) -> GetEventTicketStatsUseCase:
    return GetEventTicketStatsUseCase(
        event_query_repo=event_query_repo,
        seat_inventory_handler=seat_inventory_handler,
        ticket_ledger_repo=ticket_ledger_repo,
    )


@pytest.fixture
def get_seat_map_use_case(event_query_repo, seat_inventory_handler) -> GetSeatMapUseCase:
    return GetSeatMapUseCase(
        event_query_repo=event_query_repo, seat_inventory_handler=seat_inventory_handler
    )
