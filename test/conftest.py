"""
Test Configuration and Fixtures

This module provides:
- Environment setup before any application module reads settings
- A session-scoped TestClient over the in-memory backends
- Container reset between tests so every test starts from empty stores
- Service fixtures (imported from fixture_loader.py)

Architecture:
- Unit tests (test/**/unit/): in-memory adapters and mocks, no HTTP app
- Integration tests: the HTTP app, or the SQL repositories on a SQLite file
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings are read once at import time of src.platform.config.core_setting
# =============================================================================
import os
from pathlib import Path

from test.constants import TEST_PAYMENT_PROOF_SECRET, TEST_SECRET_KEY


def _early_setup_test_environment() -> None:
    os.environ['STORAGE_BACKEND'] = 'memory'
    os.environ['LOCK_BACKEND'] = 'local'
    os.environ['PAYMENT_SIMULATION_ENABLED'] = 'true'
    os.environ['PAYMENT_PROOF_SECRET'] = TEST_PAYMENT_PROOF_SECRET
    os.environ['SECRET_KEY'] = TEST_SECRET_KEY
    os.environ['DEFAULT_TOTAL_SEATS'] = '20'

    # Create test log directory
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['LOG_DIR'] = str(test_log_dir)
    os.environ['LOG_FILE_PREFIX'] = 'test_'


# Call immediately to set env vars before any imports
_early_setup_test_environment()

from collections.abc import Generator  # noqa: E402
from typing import Any  # noqa: E402

from fastapi.testclient import TestClient  # noqa: E402
import pytest  # noqa: E402

from src.platform.config.di import container  # noqa: E402


# =============================================================================
# Per-test isolation
# =============================================================================
@pytest.fixture(autouse=True)
def reset_container() -> Generator[None, None, None]:
    """In-memory stores are container singletons; drop them around every test."""
    container.reset_singletons()
    yield
    container.reset_singletons()


# =============================================================================
# Session-scoped Fixtures
# =============================================================================
@pytest.fixture(scope='session')
def client() -> Generator[Any, None, None]:
    from test.test_main import app

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


# =============================================================================
# Load service fixtures
# =============================================================================
from test.fixture_loader import *  # noqa: E402, F401, F403
