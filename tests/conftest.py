"""
conftest.py - Shared pytest fixtures for payledger tests

Provides common fixtures used across unit, functional and conformance tests:
- Fresh routers and accounts (plain and test-mode)
- CSV file helpers
- Logging reset between tests

Scenario builders and comparison helpers live in tests/helpers.py.
"""

import pytest
from decimal import Decimal

from payledger import Account, LedgerRouter
from payledger.logging_config import reset_logging


@pytest.fixture(autouse=True)
def clean_logging():
    """Undo configure_logging() calls made by the code under test."""
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def router():
    """Fresh router with the invariant guard enabled."""
    return LedgerRouter(check_invariants=True)


@pytest.fixture
def account():
    """Empty account for client 1."""
    return Account(1)


@pytest.fixture
def test_account():
    """Test-mode account for client 1 with 150.0 available."""
    acct = Account(1, test_mode=True)
    acct.set_balances(Decimal("150.0"))
    return acct


@pytest.fixture
def write_csv(tmp_path):
    """Factory writing CSV text to a temporary file and returning its path."""
    def _write(text: str, name: str = "transactions.csv"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path
    return _write
