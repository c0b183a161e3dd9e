"""
Pytest fixtures for the cashbook test suite.

Provides:
- Structured logging configuration and log capture
- An in-memory SQLite movement store
- Movement record builders and the default configuration
"""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO

import pytest

from cashbook_config import get_active_config
from cashbook_engines.movement import MovementRecord, PaymentBreakdown
from cashbook_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from cashbook_kernel.domain.clock import DeterministicClock
from cashbook_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

TEST_BRANCH_ID = 7


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture cashbook logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            reconcile_month(branch_id=7, year_month="2024-03", records=[])
            logs = captured_logs()
            assert any(r["message"] == "CASHBOOK_ENGINE_TRACE" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("cashbook")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def session():
    """Fresh in-memory SQLite movement store, one per test."""
    init_engine_from_url("sqlite://")
    create_tables()
    db_session = get_session()
    yield db_session
    db_session.close()
    drop_tables()
    reset_engine()


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest.fixture
def default_config():
    return get_active_config()


@pytest.fixture
def deterministic_clock():
    return DeterministicClock()


@pytest.fixture
def make_record():
    """Build a MovementRecord for TEST_BRANCH_ID with zero defaults."""

    def _make(
        day: date,
        gross_sales: str = "0",
        expenses: str = "0",
        manual_deposit: str = "0",
        branch_id=TEST_BRANCH_ID,
        **payment: str,
    ) -> MovementRecord:
        return MovementRecord(
            date=day,
            branch_id=branch_id,
            gross_sales=Decimal(gross_sales),
            payment=PaymentBreakdown(**{k: Decimal(v) for k, v in payment.items()}),
            expenses=Decimal(expenses),
            manual_deposit=Decimal(manual_deposit),
        )

    return _make
