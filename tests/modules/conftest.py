"""
Shared fixtures for module tests.

Every fixture is opt-in.  Services are built on the in-memory ``session``
and the ``deterministic_clock`` from the root conftest.
"""

from decimal import Decimal

import pytest

from budget_engines.distribution import DistributionType
from budget_modules.allocation.models import AllocationFormData
from budget_modules.allocation.service import BudgetAllocationService
from budget_modules.labor.models import LaborBudgetFormData
from budget_modules.labor.service import LaborBudgetService


@pytest.fixture
def allocation_service(session, deterministic_clock, settings):
    return BudgetAllocationService(session, clock=deterministic_clock, settings=settings)


@pytest.fixture
def labor_service(session, settings):
    return LaborBudgetService(session, settings=settings)


@pytest.fixture
def allocation_form():
    """Factory for valid allocation forms; keyword arguments override."""

    def _make(**overrides) -> AllocationFormData:
        values = {
            "budget_item_id": "BI-SOFTWARE",
            "fiscal_year_id": "FY-2024",
            "cost_center_id": "CC-IT",
            "total_amount": Decimal("120000"),
            "distribution_type": DistributionType.EQUAL,
        }
        values.update(overrides)
        return AllocationFormData(**values)

    return _make


@pytest.fixture
def labor_form(sample_benefits, sample_charges):
    """Factory for valid labor budget forms; keyword arguments override."""

    def _make(**overrides) -> LaborBudgetFormData:
        values = {
            "position": "Software Engineer",
            "department": "Information Technology",
            "base_salary": Decimal("12000"),
            "quantity": 3,
            "cost_center_id": "CC-IT",
            "fiscal_year_id": "FY-2024",
            "benefits": sample_benefits,
            "charges": sample_charges,
        }
        values.update(overrides)
        return LaborBudgetFormData(**values)

    return _make
