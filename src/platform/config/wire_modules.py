"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.ticketing.app.command import (
    book_tickets_use_case,
    cancel_ticket_use_case,
    check_in_ticket_use_case,
    confirm_ticket_payment_use_case,
    ensure_seat_inventory_use_case,
    simulate_payment_use_case,
)
from src.service.ticketing.app.query import (
    get_event_ticket_stats_use_case,
    get_seat_map_use_case,
    get_ticket_use_case,
    list_my_tickets_use_case,
)
from src.service.ticketing.driving_adapter.http_controller.auth import role_auth


WIRE_MODULES: list[ModuleType] = [
    book_tickets_use_case,
    cancel_ticket_use_case,
    check_in_ticket_use_case,
    confirm_ticket_payment_use_case,
    ensure_seat_inventory_use_case,
    simulate_payment_use_case,
    get_event_ticket_stats_use_case,
    get_seat_map_use_case,
    get_ticket_use_case,
    list_my_tickets_use_case,
    role_auth,
]
