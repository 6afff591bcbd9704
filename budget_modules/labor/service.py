"""
Labor Budget Service (``budget_modules.labor.service``).

Responsibility
--------------
Creates, edits, deletes, filters and totals labor budgets.  Every write
recomputes ``total_cost`` through ``LaborCostCalculator`` so the stored
value always matches salary, benefits, charges and headcount.

Architecture position
---------------------
**Modules layer** -- thin glue.  ``LaborBudgetService`` is the sole public
entry point for labor budget operations.

Invariants enforced
-------------------
* Each public write method owns the transaction boundary
  (``commit`` on success, ``rollback`` and re-raise on any exception).
* ``total_cost`` is recomputed on every write, never accepted as input.
* Cost totals by department, cost center and fiscal year count active
  budgets only.

Failure modes
-------------
* ``ValidationError`` -- form input breaks a field rule; nothing written.
* ``LaborBudgetNotFoundError`` -- unknown labor budget id.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from budget_config import BudgetSettings, get_active_config
from budget_engines.labor_cost import (
    Benefit,
    LaborCharge,
    LaborCostBreakdown,
    LaborCostCalculator,
)
from budget_kernel.domain.numeric import ZERO, Numeric, to_decimal
from budget_kernel.exceptions import LaborBudgetNotFoundError, ValidationError
from budget_kernel.logging_config import get_logger
from budget_modules.labor.models import (
    ALL,
    LaborBudget,
    LaborBudgetFormData,
    LaborBudgetUpdate,
    LaborStatusFilter,
)
from budget_modules.labor.orm import LaborBudgetModel
from budget_modules.labor.validators import validate_labor_form

logger = get_logger("modules.labor.service")

_ENTITY = "LaborBudget"


class LaborBudgetService:
    """
    Labor budget CRUD, filtering and cost aggregation.

    Guarantees
    ----------
    * Session is committed only when the whole operation succeeds.
    * Returned DTOs always carry the recomputed ``total_cost``.

    Non-goals
    ---------
    * Does NOT check that cost centers or fiscal years exist.
    """

    def __init__(
        self,
        session: Session,
        settings: BudgetSettings | None = None,
    ):
        self._session = session
        self._settings = settings or get_active_config()
        self._calculator = LaborCostCalculator()

    # =========================================================================
    # Writes
    # =========================================================================

    def add_labor_budget(
        self,
        form: LaborBudgetFormData,
        actor_id: UUID,
    ) -> LaborBudget:
        """
        Validate ``form``, compute its total cost and store it.

        Raises:
            ValidationError: If any field rule fails.
        """
        self._ensure_valid(form)

        try:
            total_cost = self._calculator.calculate(
                base_salary=form.base_salary,
                benefits=form.benefits,
                charges=form.charges,
                quantity=form.quantity,
            )
            dto = LaborBudget(
                id=uuid4(),
                position=form.position,
                department=form.department,
                base_salary=to_decimal(form.base_salary),
                benefits=tuple(form.benefits),
                charges=tuple(form.charges),
                quantity=form.quantity,
                total_cost=total_cost,
                cost_center_id=form.cost_center_id,
                fiscal_year_id=form.fiscal_year_id,
                is_active=form.is_active,
                notes=form.notes,
            )
            model = LaborBudgetModel.from_dto(dto, created_by_id=actor_id)
            self._session.add(model)
            self._session.commit()

            logger.info("labor_budget_created", extra={
                "labor_budget_id": str(model.id),
                "position": form.position,
                "department": form.department,
                "quantity": form.quantity,
                "total_cost": str(total_cost),
            })
            return model.to_dto()

        except Exception:
            self._session.rollback()
            raise

    def update_labor_budget(
        self,
        labor_budget_id: UUID,
        update: LaborBudgetUpdate,
        actor_id: UUID,
    ) -> LaborBudget:
        """
        Merge ``update`` into the stored budget and recompute its cost.

        Raises:
            LaborBudgetNotFoundError: If the labor budget does not exist.
            ValidationError: If the merged budget breaks a field rule.
        """
        model = self._get_model(labor_budget_id)
        current = model.to_dto()

        merged = LaborBudgetFormData(
            position=_pick(update.position, current.position),
            department=_pick(update.department, current.department),
            base_salary=_pick(update.base_salary, current.base_salary),
            quantity=_pick(update.quantity, current.quantity),
            cost_center_id=_pick(update.cost_center_id, current.cost_center_id),
            fiscal_year_id=_pick(update.fiscal_year_id, current.fiscal_year_id),
            benefits=tuple(_pick(update.benefits, current.benefits)),
            charges=tuple(_pick(update.charges, current.charges)),
            is_active=_pick(update.is_active, current.is_active),
            notes=_pick(update.notes, current.notes),
        )
        self._ensure_valid(merged)

        try:
            total_cost = self._calculator.calculate(
                base_salary=merged.base_salary,
                benefits=merged.benefits,
                charges=merged.charges,
                quantity=merged.quantity,
            )

            model.position = merged.position
            model.department = merged.department
            model.base_salary = to_decimal(merged.base_salary)
            model.quantity = merged.quantity
            model.cost_center_id = merged.cost_center_id
            model.fiscal_year_id = merged.fiscal_year_id
            model.is_active = merged.is_active
            model.notes = merged.notes
            model.total_cost = total_cost
            model.updated_by_id = actor_id
            if update.benefits is not None or update.charges is not None:
                model.replace_rules(merged.benefits, merged.charges, actor_id)
            self._session.commit()

            logger.info("labor_budget_updated", extra={
                "labor_budget_id": str(labor_budget_id),
                "cost_changed": update.changes_cost,
                "total_cost": str(total_cost),
            })
            return model.to_dto()

        except Exception:
            self._session.rollback()
            raise

    def delete_labor_budget(self, labor_budget_id: UUID) -> None:
        """
        Raises:
            LaborBudgetNotFoundError: If the labor budget does not exist.
        """
        model = self._get_model(labor_budget_id)
        try:
            self._session.delete(model)
            self._session.commit()
            logger.info("labor_budget_deleted", extra={
                "labor_budget_id": str(labor_budget_id),
            })
        except Exception:
            self._session.rollback()
            raise

    # =========================================================================
    # Reads
    # =========================================================================

    def get_labor_budget(self, labor_budget_id: UUID) -> LaborBudget:
        return self._get_model(labor_budget_id).to_dto()

    def list_labor_budgets(self) -> list[LaborBudget]:
        return self._list()

    def filter_labor_budgets(
        self,
        search_term: str | None = None,
        department: str = ALL,
        status: LaborStatusFilter | str = LaborStatusFilter.ALL,
        cost_center_id: str = ALL,
        fiscal_year_id: str = ALL,
    ) -> list[LaborBudget]:
        """
        Labor budgets matching every given filter.

        ``"all"`` (or an empty value) disables a filter.  ``search_term``
        matches position or department, case-insensitively.
        """
        criteria = []
        if department and department != ALL:
            criteria.append(LaborBudgetModel.department == department)
        if cost_center_id and cost_center_id != ALL:
            criteria.append(LaborBudgetModel.cost_center_id == cost_center_id)
        if fiscal_year_id and fiscal_year_id != ALL:
            criteria.append(LaborBudgetModel.fiscal_year_id == fiscal_year_id)

        status = LaborStatusFilter(status or LaborStatusFilter.ALL)
        if status is LaborStatusFilter.ACTIVE:
            criteria.append(LaborBudgetModel.is_active == True)
        elif status is LaborStatusFilter.INACTIVE:
            criteria.append(LaborBudgetModel.is_active == False)

        budgets = self._list(*criteria)

        term = (search_term or "").strip().casefold()
        if term:
            budgets = [
                b for b in budgets
                if term in b.position.casefold() or term in b.department.casefold()
            ]
        return budgets

    def get_departments(self) -> list[str]:
        """Distinct departments in use, sorted."""
        stmt = select(LaborBudgetModel.department).distinct()
        return sorted(self._session.execute(stmt).scalars().all())

    def get_total_cost_by_department(
        self,
        fiscal_year_id: str | None = None,
    ) -> dict[str, Decimal]:
        return self._active_totals("department", fiscal_year_id)

    def get_total_cost_by_cost_center(
        self,
        fiscal_year_id: str | None = None,
    ) -> dict[str, Decimal]:
        return self._active_totals("cost_center_id", fiscal_year_id)

    def get_total_cost_by_fiscal_year(self) -> dict[str, Decimal]:
        return self._active_totals("fiscal_year_id", None)

    def estimate_cost(
        self,
        base_salary: Numeric,
        benefits: Sequence[Benefit],
        charges: Sequence[LaborCharge],
        quantity: int,
    ) -> LaborCostBreakdown:
        """Cost breakdown for unsaved input; nothing is persisted."""
        return self._calculator.breakdown(
            base_salary=base_salary,
            benefits=benefits,
            charges=charges,
            quantity=quantity,
        )

    # =========================================================================
    # Internals
    # =========================================================================

    def _ensure_valid(self, form: LaborBudgetFormData) -> None:
        errors = validate_labor_form(form, self._settings)
        if errors:
            logger.warning("labor_budget_validation_failed", extra={
                "fields": list(errors),
                "position": form.position,
            })
            raise ValidationError(_ENTITY, errors)

    def _get_model(self, labor_budget_id: UUID) -> LaborBudgetModel:
        model = self._session.get(LaborBudgetModel, labor_budget_id)
        if model is None:
            raise LaborBudgetNotFoundError(labor_budget_id)
        return model

    def _list(self, *criteria) -> list[LaborBudget]:
        stmt = select(LaborBudgetModel).where(*criteria).order_by(
            LaborBudgetModel.department,
            LaborBudgetModel.position,
        )
        models = self._session.execute(stmt).scalars().all()
        return [m.to_dto() for m in models]

    def _active_totals(
        self,
        attribute: str,
        fiscal_year_id: str | None,
    ) -> dict[str, Decimal]:
        criteria = [LaborBudgetModel.is_active == True]
        if fiscal_year_id:
            criteria.append(LaborBudgetModel.fiscal_year_id == fiscal_year_id)

        totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
        for budget in self._list(*criteria):
            totals[getattr(budget, attribute)] += budget.total_cost
        return dict(totals)


def _pick(value, fallback):
    return fallback if value is None else value
