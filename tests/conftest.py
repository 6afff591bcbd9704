"""
Pytest fixtures for the budget planning test suite.

Provides:
- Session-wide structured logging
- In-memory SQLite database sessions (fresh schema per test)
- Deterministic clock, settings and actor id
"""

import json
import logging
from collections.abc import Generator
from datetime import datetime, timezone
from decimal import Decimal
from io import StringIO
from uuid import UUID, uuid4

import pytest
from sqlalchemy.orm import Session

from budget_config import BudgetSettings, get_active_config
from budget_engines.labor_cost import FixedBenefit, LaborCharge, PercentageBenefit
from budget_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from budget_kernel.domain.clock import DeterministicClock
from budget_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

# Test actor ID for all test operations
TEST_ACTOR_ID = uuid4()


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
    Capture budget_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, allocation_service):
            allocation_service.add_allocation(...)
            logs = captured_logs()
            assert any(r["message"] == "allocation_created" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("budget_kernel")
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
def session() -> Generator[Session, None, None]:
    """A session on a fresh in-memory SQLite database."""
    engine = init_engine_from_url("sqlite+pysqlite:///:memory:")
    create_tables(engine)
    db_session = get_session()
    yield db_session
    db_session.close()
    drop_tables(engine)
    reset_engine()


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest.fixture
def test_actor_id() -> UUID:
    return TEST_ACTOR_ID


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock(datetime(2024, 6, 15, 9, 0, 0, tzinfo=timezone.utc))


@pytest.fixture(scope="session")
def settings() -> BudgetSettings:
    """Settings shipped with the package."""
    return get_active_config()


@pytest.fixture
def sample_benefits():
    """Fixed and percentage benefits of a typical position."""
    return (
        FixedBenefit("Meal Voucher", Decimal("600"), months=12),
        FixedBenefit("Transportation Voucher", Decimal("300"), months=12),
        FixedBenefit("Health Plan", Decimal("500"), months=12),
        PercentageBenefit("13th Salary", Decimal("100"), months=1),
        PercentageBenefit("Vacation", Decimal("133.33"), months=1),
    )


@pytest.fixture
def sample_charges():
    return (
        LaborCharge("INSS", Decimal("20")),
        LaborCharge("FGTS", Decimal("8")),
        LaborCharge("PIS/PASEP", Decimal("1")),
        LaborCharge("Severance Provision", Decimal("4"), base_includes_benefits=True),
    )
