"""
Budget Allocation Service (``budget_modules.allocation.service``).

Responsibility
--------------
Creates, edits, deletes and reports on budget allocations: an annual total
for a (budget item, cost center, fiscal year) spread over twelve months.
Pure computation is delegated to ``AllocationDistributor`` and
``VarianceCalculator``; this service validates form input, resolves the
fiscal year, and persists through the ORM.

Architecture position
---------------------
**Modules layer** -- thin glue.  ``BudgetAllocationService`` is the sole
public entry point for allocation operations.

Invariants enforced
-------------------
* Each public write method owns the transaction boundary
  (``commit`` on success, ``rollback`` and re-raise on any exception).
* A stored allocation always has twelve month rows.
* Regeneration (total, distribution type or profile change) never discards
  recorded actuals or month notes.
* Recording an actual never changes a planned amount or percentage.
* Last write wins; there is no version column.

Failure modes
-------------
* ``ValidationError`` -- form input breaks a field rule; nothing written.
* ``AllocationNotFoundError`` / ``MonthlyAllocationNotFoundError`` --
  unknown allocation id or month.
* ``UnknownProfileError`` -- seasonal sub-profile name not registered.

Usage::

    service = BudgetAllocationService(session, clock=clock)
    allocation = service.add_allocation(
        AllocationFormData(
            budget_item_id="BI-01", fiscal_year_id="FY-2024",
            cost_center_id="CC-01", total_amount=Decimal("120000"),
        ),
        actor_id=actor_id,
    )
"""

from __future__ import annotations

import dataclasses
from collections.abc import Sequence
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from budget_config import BudgetSettings, get_active_config
from budget_engines.distribution import (
    AllocationDistributor,
    DistributionType,
    MonthlyAllocation,
)
from budget_engines.profiles import CUSTOM
from budget_engines.variance import (
    ExecutionSummary,
    MonthlyTotal,
    MonthVariance,
    VarianceCalculator,
    YearlyTotals,
)
from budget_kernel.domain.clock import Clock, SystemClock
from budget_kernel.domain.numeric import Numeric, to_decimal
from budget_kernel.exceptions import (
    AllocationNotFoundError,
    MonthlyAllocationNotFoundError,
    ValidationError,
)
from budget_kernel.logging_config import get_logger
from budget_modules.allocation.models import (
    AllocationFormData,
    AllocationUpdate,
    BudgetAllocation,
    resolve_fiscal_year,
)
from budget_modules.allocation.orm import BudgetAllocationModel
from budget_modules.allocation.validators import validate_allocation_form

logger = get_logger("modules.allocation.service")

_ENTITY = "BudgetAllocation"


class BudgetAllocationService:
    """
    Allocation CRUD, execution tracking and variance reporting.

    Contract
    --------
    * Write methods return the stored ``BudgetAllocation`` DTO.
    * Read methods never modify the session.

    Guarantees
    ----------
    * Session is committed only when the whole operation succeeds.
    * Clock is injectable for deterministic testing; it is only consulted
      when a fiscal-year id carries no parseable year.

    Non-goals
    ---------
    * Does NOT check that budget items, cost centers or fiscal years exist.
    * Does NOT round amounts; display formatting belongs to callers.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        settings: BudgetSettings | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._settings = settings or get_active_config()
        self._distributor = AllocationDistributor()
        self._variance = VarianceCalculator()

    # =========================================================================
    # Writes
    # =========================================================================

    def add_allocation(
        self,
        form: AllocationFormData,
        actor_id: UUID,
    ) -> BudgetAllocation:
        """
        Validate ``form``, distribute its total and store the allocation.

        A form without a distribution type uses the configured
        ``allocation.default_distribution``.

        Raises:
            ValidationError: If any field rule fails.
        """
        if form.distribution_type is None:
            form = dataclasses.replace(
                form, distribution_type=self._settings.allocation.default_distribution,
            )
        self._ensure_valid(form)

        try:
            strategy = DistributionType(form.distribution_type)
            fiscal_year = resolve_fiscal_year(
                form.fiscal_year_id, self._clock.current_year(),
            )
            months = self._distributor.distribute(
                total_amount=form.total_amount,
                strategy=strategy,
                fiscal_year=fiscal_year,
                custom_values=form.planned_amounts,
                profile_name=form.profile_name,
            )
            dto = BudgetAllocation(
                id=uuid4(),
                budget_item_id=form.budget_item_id,
                fiscal_year_id=form.fiscal_year_id,
                cost_center_id=form.cost_center_id,
                total_amount=to_decimal(form.total_amount),
                distribution_type=strategy,
                allocations=months,
                notes=form.notes,
            )
            model = BudgetAllocationModel.from_dto(dto, created_by_id=actor_id)
            self._session.add(model)
            self._session.commit()

            logger.info("allocation_created", extra={
                "allocation_id": str(model.id),
                "budget_item_id": form.budget_item_id,
                "cost_center_id": form.cost_center_id,
                "fiscal_year_id": form.fiscal_year_id,
                "distribution_type": strategy.value,
                "total_amount": str(dto.total_amount),
            })
            return model.to_dto()

        except Exception:
            self._session.rollback()
            raise

    def update_allocation(
        self,
        allocation_id: UUID,
        update: AllocationUpdate,
        actor_id: UUID,
    ) -> BudgetAllocation:
        """
        Apply a partial update.

        * A new total, distribution type or profile name regenerates the
          twelve months, keeping recorded actuals.
        * A new fiscal year restamps the year of every month.
        * A custom allocation regenerated without new planned amounts is
          spread equally.
        * New planned amounts alone replace the monthly plan; percentages
          are recomputed from their sum and the amounts must add up to the
          total.  The recorded distribution type is kept unless given.
        * Anything else only changes the allocation's own fields.

        Raises:
            AllocationNotFoundError: If the allocation does not exist.
            ValidationError: If the merged allocation breaks a field rule.
        """
        model = self._get_model(allocation_id)
        current = model.to_dto()

        strategy = update.distribution_type or current.distribution_type
        total = (
            to_decimal(update.total_amount)
            if update.total_amount is not None
            else current.total_amount
        )
        fiscal_year_id = update.fiscal_year_id or current.fiscal_year_id

        regenerate = (
            (update.total_amount is not None and total != current.total_amount)
            or DistributionType(strategy) is not current.distribution_type
            or bool(update.profile_name)
        )
        replan_only = not regenerate and bool(update.planned_amounts)

        # A custom regeneration without new amounts falls back to equal.
        custom_values = update.planned_amounts

        merged = AllocationFormData(
            budget_item_id=update.budget_item_id or current.budget_item_id,
            fiscal_year_id=fiscal_year_id,
            cost_center_id=update.cost_center_id or current.cost_center_id,
            total_amount=total,
            distribution_type=DistributionType.CUSTOM if replan_only else strategy,
            planned_amounts=custom_values if (regenerate or replan_only) else None,
            profile_name=update.profile_name,
            notes=update.notes if update.notes is not None else current.notes,
        )
        self._ensure_valid(merged)

        try:
            strategy = DistributionType(strategy)
            fiscal_year = resolve_fiscal_year(
                fiscal_year_id, self._clock.current_year(),
            )
            previous = _restamp_year(current.allocations, fiscal_year)

            if regenerate:
                months = self._distributor.distribute(
                    total_amount=total,
                    strategy=strategy,
                    fiscal_year=fiscal_year,
                    custom_values=custom_values,
                    profile_name=update.profile_name
                    or self._current_profile(current, strategy),
                    previous=previous,
                )
            elif replan_only:
                months = self._distributor.distribute(
                    total_amount=total,
                    strategy=DistributionType.CUSTOM,
                    fiscal_year=fiscal_year,
                    custom_values=update.planned_amounts,
                    previous=previous,
                )
            else:
                months = previous

            model.budget_item_id = merged.budget_item_id
            model.fiscal_year_id = merged.fiscal_year_id
            model.cost_center_id = merged.cost_center_id
            model.total_amount = total
            model.distribution_type = strategy.value
            model.notes = merged.notes
            model.updated_by_id = actor_id
            model.apply_months(months, actor_id)
            self._session.commit()

            logger.info("allocation_updated", extra={
                "allocation_id": str(allocation_id),
                "distribution_type": strategy.value,
                "total_amount": str(total),
                "regenerated": regenerate,
                "replanned": replan_only,
            })
            return model.to_dto()

        except Exception:
            self._session.rollback()
            raise

    def delete_allocation(self, allocation_id: UUID) -> None:
        """
        Delete an allocation and its months.

        Raises:
            AllocationNotFoundError: If the allocation does not exist.
        """
        model = self._get_model(allocation_id)
        try:
            self._session.delete(model)
            self._session.commit()
            logger.info("allocation_deleted", extra={
                "allocation_id": str(allocation_id),
            })
        except Exception:
            self._session.rollback()
            raise

    def update_actual_amount(
        self,
        allocation_id: UUID,
        month: int,
        actual_amount: Numeric | None,
        actor_id: UUID,
        notes: str | None = None,
    ) -> BudgetAllocation:
        """
        Record (or clear, with None) the executed amount of one month.

        Planned amounts and percentages are left untouched.

        Raises:
            AllocationNotFoundError: If the allocation does not exist.
            MonthlyAllocationNotFoundError: If the month has no row.
        """
        model = self._get_model(allocation_id)
        row = model.month_row(month)
        if row is None:
            raise MonthlyAllocationNotFoundError(allocation_id, month)

        try:
            row.actual_amount = (
                None if actual_amount is None else to_decimal(actual_amount)
            )
            if notes is not None:
                row.notes = notes
            row.updated_by_id = actor_id
            self._session.commit()

            logger.info("allocation_actual_recorded", extra={
                "allocation_id": str(allocation_id),
                "month": month,
                "actual_amount": None if actual_amount is None else str(actual_amount),
            })
            return model.to_dto()

        except Exception:
            self._session.rollback()
            raise

    # =========================================================================
    # Reads
    # =========================================================================

    def get_allocation(self, allocation_id: UUID) -> BudgetAllocation:
        """
        Raises:
            AllocationNotFoundError: If the allocation does not exist.
        """
        return self._get_model(allocation_id).to_dto()

    def list_allocations(self) -> list[BudgetAllocation]:
        return self._list()

    def list_by_budget_item(self, budget_item_id: str) -> list[BudgetAllocation]:
        return self._list(BudgetAllocationModel.budget_item_id == budget_item_id)

    def list_by_cost_center(self, cost_center_id: str) -> list[BudgetAllocation]:
        return self._list(BudgetAllocationModel.cost_center_id == cost_center_id)

    def list_by_fiscal_year(self, fiscal_year_id: str) -> list[BudgetAllocation]:
        return self._list(BudgetAllocationModel.fiscal_year_id == fiscal_year_id)

    def get_monthly_totals(
        self,
        fiscal_year_id: str,
        cost_center_id: str | None = None,
    ) -> tuple[MonthlyTotal, ...]:
        """Planned and actual per month over a fiscal year's allocations."""
        allocations = self._for_year(fiscal_year_id, cost_center_id)
        return self._variance.monthly_totals([a.allocations for a in allocations])

    def get_yearly_totals(
        self,
        fiscal_year_id: str,
        cost_center_id: str | None = None,
    ) -> YearlyTotals:
        """Annual planned, actual and remaining budget (planned - actual)."""
        return self._variance.yearly_totals(
            self.get_monthly_totals(fiscal_year_id, cost_center_id),
        )

    def get_execution_summary(self, allocation_id: UUID) -> ExecutionSummary:
        allocation = self.get_allocation(allocation_id)
        return self._variance.execution_summary(
            allocation.total_amount, allocation.allocations,
        )

    def get_month_variances(self, allocation_id: UUID) -> tuple[MonthVariance, ...]:
        """Variance of every month with a recorded actual."""
        return self._variance.month_variances(
            self.get_allocation(allocation_id).allocations,
        )

    def identify_profile(self, allocation_id: UUID) -> str:
        """Named profile matching the stored percentages, or ``"custom"``."""
        allocation = self.get_allocation(allocation_id)
        return self._distributor.identify_profile(
            allocation.percentages,
            tolerance=self._settings.allocation.profile_match_tolerance,
        )

    # =========================================================================
    # Internals
    # =========================================================================

    def _ensure_valid(self, form: AllocationFormData) -> None:
        errors = validate_allocation_form(form, self._settings)
        if errors:
            logger.warning("allocation_validation_failed", extra={
                "fields": list(errors),
                "budget_item_id": form.budget_item_id,
            })
            raise ValidationError(_ENTITY, errors)

    def _current_profile(
        self,
        current: BudgetAllocation,
        strategy: DistributionType,
    ) -> str | None:
        # A seasonal allocation keeps the named profile it was built with.
        if strategy is not DistributionType.SEASONAL:
            return None
        if current.distribution_type is not DistributionType.SEASONAL:
            return None
        name = self._distributor.identify_profile(
            current.percentages,
            tolerance=self._settings.allocation.profile_match_tolerance,
        )
        return None if name == CUSTOM else name

    def _get_model(self, allocation_id: UUID) -> BudgetAllocationModel:
        model = self._session.get(BudgetAllocationModel, allocation_id)
        if model is None:
            raise AllocationNotFoundError(allocation_id)
        return model

    def _list(self, *criteria) -> list[BudgetAllocation]:
        stmt = select(BudgetAllocationModel).where(*criteria).order_by(
            BudgetAllocationModel.fiscal_year_id,
            BudgetAllocationModel.budget_item_id,
            BudgetAllocationModel.cost_center_id,
        )
        models = self._session.execute(stmt).scalars().all()
        return [m.to_dto() for m in models]

    def _for_year(
        self,
        fiscal_year_id: str,
        cost_center_id: str | None,
    ) -> list[BudgetAllocation]:
        criteria = [BudgetAllocationModel.fiscal_year_id == fiscal_year_id]
        if cost_center_id:
            criteria.append(BudgetAllocationModel.cost_center_id == cost_center_id)
        return self._list(*criteria)


def _restamp_year(
    allocations: Sequence[MonthlyAllocation],
    fiscal_year: int,
) -> tuple[MonthlyAllocation, ...]:
    return tuple(
        a if a.year == fiscal_year else dataclasses.replace(a, year=fiscal_year)
        for a in allocations
    )
