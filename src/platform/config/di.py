"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings, settings
from src.platform.database.orm_db_setting import Database
from src.platform.state.kvrocks_client import kvrocks_client
from src.service.ticketing.app.command.confirmation_helper.payment_proof_claimer import (
    PaymentProofClaimer,
)
from src.service.ticketing.app.command.confirmation_helper.ticket_issuance_recorder import (
    TicketIssuanceRecorder,
)
from src.service.ticketing.driven_adapter.issuer.qr_ticket_issuer_impl import QrTicketIssuerImpl
from src.service.ticketing.driven_adapter.payment.jwt_payment_proof_issuer_impl import (
    JwtPaymentProofIssuerImpl,
)
from src.service.ticketing.driven_adapter.payment.jwt_payment_proof_verifier_impl import (
    JwtPaymentProofVerifierImpl,
)
from src.service.ticketing.driven_adapter.repo.event_query_repo_impl import EventQueryRepoImpl
from src.service.ticketing.driven_adapter.repo.in_memory_event_query_repo_impl import (
    InMemoryEventQueryRepoImpl,
)
from src.service.ticketing.driven_adapter.repo.in_memory_seat_inventory_repo_impl import (
    InMemorySeatInventoryRepoImpl,
)
from src.service.ticketing.driven_adapter.repo.in_memory_ticket_ledger_repo_impl import (
    InMemoryTicketLedgerRepoImpl,
)
from src.service.ticketing.driven_adapter.repo.payment_proof_registry_repo_impl import (
    PaymentProofRegistryRepoImpl,
)
from src.service.ticketing.driven_adapter.repo.seat_inventory_repo_impl import (
    SeatInventoryRepoImpl,
)
from src.service.ticketing.driven_adapter.repo.ticket_ledger_repo_impl import (
    TicketLedgerRepoImpl,
)
from src.service.ticketing.driven_adapter.state.in_memory_payment_proof_registry_impl import (
    InMemoryPaymentProofRegistryImpl,
)
from src.service.ticketing.driven_adapter.state.kvrocks_event_lock_manager_impl import (
    KvrocksEventLockManagerImpl,
)
from src.service.ticketing.driven_adapter.state.local_event_lock_manager_impl import (
    LocalEventLockManagerImpl,
)
from src.service.ticketing.driven_adapter.state.seat_inventory_handler_impl import (
    SeatInventoryHandlerImpl,
)
from src.service.ticketing.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Backend switches (override in tests with providers.Object)
    storage_backend = providers.Callable(lambda: settings.STORAGE_BACKEND)
    lock_backend = providers.Callable(lambda: settings.LOCK_BACKEND)

    # Database (uses AsyncEngineManager with settings from core_setting)
    database = providers.Singleton(Database)

    # Repositories (SQL repos are stateless - use session_factory per call)
    seat_inventory_repo = providers.Selector(
        storage_backend,
        memory=providers.Singleton(InMemorySeatInventoryRepoImpl),
        postgres=providers.Singleton(
            SeatInventoryRepoImpl, session_factory=database.provided.session
        ),
    )
    ticket_ledger_repo = providers.Selector(
        storage_backend,
        memory=providers.Singleton(InMemoryTicketLedgerRepoImpl),
        postgres=providers.Singleton(
            TicketLedgerRepoImpl, session_factory=database.provided.session
        ),
    )
    event_query_repo = providers.Selector(
        storage_backend,
        memory=providers.Singleton(InMemoryEventQueryRepoImpl),
        postgres=providers.Singleton(EventQueryRepoImpl, session_factory=database.provided.session),
    )
    payment_proof_registry = providers.Selector(
        storage_backend,
        memory=providers.Singleton(InMemoryPaymentProofRegistryImpl),
        postgres=providers.Singleton(
            PaymentProofRegistryRepoImpl, session_factory=database.provided.session
        ),
    )

    # Per-event seat inventory lock
    event_lock_manager = providers.Selector(
        lock_backend,
        local=providers.Singleton(
            LocalEventLockManagerImpl,
            acquire_timeout=settings.SEAT_LOCK_ACQUIRE_TIMEOUT_SECONDS,
        ),
        kvrocks=providers.Singleton(KvrocksEventLockManagerImpl, kvrocks_client=kvrocks_client),
    )

    seat_inventory_handler = providers.Singleton(
        SeatInventoryHandlerImpl,
        seat_inventory_repo=seat_inventory_repo,
        ticket_ledger_repo=ticket_ledger_repo,
        lock_manager=event_lock_manager,
        seat_id_prefix=settings.SEAT_ID_PREFIX,
    )

    # Payment proofs
    payment_proof_verifier = providers.Singleton(JwtPaymentProofVerifierImpl)
    payment_proof_issuer = providers.Singleton(JwtPaymentProofIssuerImpl)

    # Ticket issuance
    ticket_issuer = providers.Singleton(
        QrTicketIssuerImpl, box_size=settings.QR_BOX_SIZE, border=settings.QR_BORDER
    )

    # Confirmation helpers shared by booking and payment confirmation
    payment_proof_claimer = providers.Singleton(
        PaymentProofClaimer,
        payment_proof_verifier=payment_proof_verifier,
        payment_proof_registry=payment_proof_registry,
    )
    ticket_issuance_recorder = providers.Singleton(
        TicketIssuanceRecorder,
        ticket_issuer=ticket_issuer,
        ticket_ledger_repo=ticket_ledger_repo,
    )

    # Auth service
    jwt_auth = providers.Singleton(JwtAuth)


container = Container()


def setup() -> None:
    container.config_service()


def cleanup() -> None:
    container.reset_singletons()
