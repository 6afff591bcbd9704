"""
Budget Allocation ORM Persistence Models (``budget_modules.allocation.orm``).

Responsibility:
    SQLAlchemy ORM models that persist the frozen DTOs defined in
    ``budget_modules.allocation.models``.  Each ORM class mirrors a DTO and
    provides ``to_dto()`` / ``from_dto()`` round-trip conversion.

Architecture position:
    **Modules layer** -- persistence companions to the pure DTO models.
    Inherits from ``TrackedBase`` (kernel DB base) which provides:
    id (UUID PK, auto-generated), created_at, updated_at,
    created_by_id (NOT NULL UUID), updated_by_id (nullable UUID).

Invariants enforced:
    - All monetary fields use Decimal (maps to Numeric(38,9)) -- NEVER float.
    - Enum fields stored as String(50) containing the enum .value string.
    - One month row per (allocation, month, year)
      (uq_budget_monthly_allocation_month).
    - Month rows are updated in place on regeneration, never deleted and
      re-inserted.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from budget_engines.distribution import MonthlyAllocation
from budget_kernel.db.base import TrackedBase, UUIDString


class BudgetAllocationModel(TrackedBase):
    """
    ORM model for ``BudgetAllocation``.

    Guarantees:
        - ``months`` is ordered by month.
        - Deleting an allocation deletes its month rows.
    """

    __tablename__ = "budget_allocations"

    budget_item_id: Mapped[str] = mapped_column(String(100), nullable=False)
    fiscal_year_id: Mapped[str] = mapped_column(String(100), nullable=False)
    cost_center_id: Mapped[str] = mapped_column(String(100), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(nullable=False)
    distribution_type: Mapped[str] = mapped_column(String(50), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    months: Mapped[list["MonthlyAllocationModel"]] = relationship(
        "MonthlyAllocationModel",
        back_populates="allocation",
        cascade="all, delete-orphan",
        order_by="MonthlyAllocationModel.month",
        lazy="selectin",
    )

    __table_args__ = (
        Index("idx_budget_allocation_fiscal_year", "fiscal_year_id"),
        Index("idx_budget_allocation_cost_center", "cost_center_id"),
        Index("idx_budget_allocation_budget_item", "budget_item_id"),
    )

    def to_dto(self):
        from budget_engines.distribution import DistributionType
        from budget_modules.allocation.models import BudgetAllocation

        return BudgetAllocation(
            id=self.id,
            budget_item_id=self.budget_item_id,
            fiscal_year_id=self.fiscal_year_id,
            cost_center_id=self.cost_center_id,
            total_amount=self.total_amount,
            distribution_type=DistributionType(self.distribution_type),
            allocations=tuple(m.to_dto() for m in self.months),
            notes=self.notes,
            created_by_id=self.created_by_id,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "BudgetAllocationModel":
        model = cls(
            id=dto.id,
            budget_item_id=dto.budget_item_id,
            fiscal_year_id=dto.fiscal_year_id,
            cost_center_id=dto.cost_center_id,
            total_amount=dto.total_amount,
            distribution_type=(
                dto.distribution_type.value
                if hasattr(dto.distribution_type, "value")
                else dto.distribution_type
            ),
            notes=dto.notes,
            created_by_id=created_by_id,
        )
        model.months = [
            MonthlyAllocationModel.from_dto(m, created_by_id=created_by_id)
            for m in dto.allocations
        ]
        return model

    def month_row(self, month: int) -> "MonthlyAllocationModel | None":
        return next((m for m in self.months if m.month == month), None)

    def apply_months(
        self,
        allocations: Sequence[MonthlyAllocation],
        actor_id: UUID,
    ) -> None:
        """Overwrite the month rows with ``allocations``, matched by month."""
        for allocation in allocations:
            row = self.month_row(allocation.month)
            if row is None:
                self.months.append(
                    MonthlyAllocationModel.from_dto(allocation, created_by_id=actor_id)
                )
                continue
            row.year = allocation.year
            row.planned_amount = allocation.planned_amount
            row.percentage = allocation.percentage
            row.actual_amount = allocation.actual_amount
            row.notes = allocation.notes
            row.updated_by_id = actor_id

    def __repr__(self) -> str:
        return (
            f"<BudgetAllocationModel {self.budget_item_id}/{self.cost_center_id} "
            f"{self.fiscal_year_id}: {self.total_amount} ({self.distribution_type})>"
        )


class MonthlyAllocationModel(TrackedBase):
    """
    ORM model for one ``MonthlyAllocation`` of an allocation.

    Guarantees:
        - ``allocation_id`` references budget_allocations.id.
        - ``actual_amount`` is NULL until execution is recorded.
    """

    __tablename__ = "budget_monthly_allocations"

    allocation_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("budget_allocations.id"),
        nullable=False,
    )
    month: Mapped[int] = mapped_column(nullable=False)
    year: Mapped[int] = mapped_column(nullable=False)
    planned_amount: Mapped[Decimal] = mapped_column(nullable=False)
    percentage: Mapped[Decimal] = mapped_column(nullable=False)
    actual_amount: Mapped[Decimal | None] = mapped_column(nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    allocation: Mapped["BudgetAllocationModel"] = relationship(
        "BudgetAllocationModel",
        back_populates="months",
    )

    __table_args__ = (
        UniqueConstraint(
            "allocation_id", "month", "year",
            name="uq_budget_monthly_allocation_month",
        ),
        Index("idx_budget_monthly_allocation_parent", "allocation_id"),
    )

    def to_dto(self) -> MonthlyAllocation:
        return MonthlyAllocation(
            month=self.month,
            year=self.year,
            planned_amount=self.planned_amount,
            percentage=self.percentage,
            actual_amount=self.actual_amount,
            notes=self.notes,
        )

    @classmethod
    def from_dto(cls, dto: MonthlyAllocation, created_by_id: UUID) -> "MonthlyAllocationModel":
        return cls(
            month=dto.month,
            year=dto.year,
            planned_amount=dto.planned_amount,
            percentage=dto.percentage,
            actual_amount=dto.actual_amount,
            notes=dto.notes,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return (
            f"<MonthlyAllocationModel {self.year}-{self.month:02d}: "
            f"planned={self.planned_amount} actual={self.actual_amount}>"
        )
