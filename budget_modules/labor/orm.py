"""
Labor Budget ORM Persistence Models (``budget_modules.labor.orm``).

Responsibility:
    SQLAlchemy ORM models persisting ``LaborBudget`` with its ordered
    benefit and charge rows, with ``to_dto()`` / ``from_dto()`` conversion.

Architecture position:
    **Modules layer** -- persistence companions to the pure DTO models.
    Inherits from ``TrackedBase`` (kernel DB base).

Invariants enforced:
    - All monetary fields use Decimal (maps to Numeric(38,9)) -- NEVER float.
    - Benefit type stored as String(50) containing the enum .value string.
    - Benefit and charge order is kept through the ``sequence`` column.
    - ``total_cost`` is written only by ``LaborBudgetService``.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from budget_engines.labor_cost import (
    Benefit,
    BenefitType,
    FixedBenefit,
    LaborCharge,
    PercentageBenefit,
)
from budget_kernel.db.base import TrackedBase, UUIDString
from budget_kernel.domain.numeric import to_decimal


class LaborBudgetModel(TrackedBase):
    """
    ORM model for ``LaborBudget``.

    Guarantees:
        - ``benefits`` and ``charges`` load in input order.
        - Deleting a labor budget deletes its benefit and charge rows.
    """

    __tablename__ = "labor_budgets"

    position: Mapped[str] = mapped_column(String(200), nullable=False)
    department: Mapped[str] = mapped_column(String(100), nullable=False)
    base_salary: Mapped[Decimal] = mapped_column(nullable=False)
    quantity: Mapped[int] = mapped_column(nullable=False)
    total_cost: Mapped[Decimal] = mapped_column(nullable=False)
    cost_center_id: Mapped[str] = mapped_column(String(100), nullable=False)
    fiscal_year_id: Mapped[str] = mapped_column(String(100), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    benefits: Mapped[list["LaborBenefitModel"]] = relationship(
        "LaborBenefitModel",
        back_populates="labor_budget",
        cascade="all, delete-orphan",
        order_by="LaborBenefitModel.sequence",
        lazy="selectin",
    )
    charges: Mapped[list["LaborChargeModel"]] = relationship(
        "LaborChargeModel",
        back_populates="labor_budget",
        cascade="all, delete-orphan",
        order_by="LaborChargeModel.sequence",
        lazy="selectin",
    )

    __table_args__ = (
        Index("idx_labor_budget_department", "department"),
        Index("idx_labor_budget_cost_center", "cost_center_id"),
        Index("idx_labor_budget_fiscal_year", "fiscal_year_id"),
        Index("idx_labor_budget_active", "is_active"),
    )

    def to_dto(self):
        from budget_modules.labor.models import LaborBudget

        return LaborBudget(
            id=self.id,
            position=self.position,
            department=self.department,
            base_salary=self.base_salary,
            benefits=tuple(b.to_dto() for b in self.benefits),
            charges=tuple(c.to_dto() for c in self.charges),
            quantity=self.quantity,
            total_cost=self.total_cost,
            cost_center_id=self.cost_center_id,
            fiscal_year_id=self.fiscal_year_id,
            is_active=self.is_active,
            notes=self.notes,
            created_by_id=self.created_by_id,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "LaborBudgetModel":
        model = cls(
            id=dto.id,
            position=dto.position,
            department=dto.department,
            base_salary=dto.base_salary,
            quantity=dto.quantity,
            total_cost=dto.total_cost,
            cost_center_id=dto.cost_center_id,
            fiscal_year_id=dto.fiscal_year_id,
            is_active=dto.is_active,
            notes=dto.notes,
            created_by_id=created_by_id,
        )
        model.replace_rules(dto.benefits, dto.charges, created_by_id)
        return model

    def replace_rules(
        self,
        benefits,
        charges,
        actor_id: UUID,
    ) -> None:
        """Swap the benefit and charge rows, keeping the given order."""
        self.benefits = [
            LaborBenefitModel.from_dto(b, sequence=i, created_by_id=actor_id)
            for i, b in enumerate(benefits)
        ]
        self.charges = [
            LaborChargeModel.from_dto(c, sequence=i, created_by_id=actor_id)
            for i, c in enumerate(charges)
        ]

    def __repr__(self) -> str:
        return (
            f"<LaborBudgetModel {self.position} ({self.department}) "
            f"x{self.quantity}: {self.total_cost}>"
        )


class LaborBenefitModel(TrackedBase):
    """One benefit rule of a labor budget."""

    __tablename__ = "labor_budget_benefits"

    labor_budget_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("labor_budgets.id"),
        nullable=False,
    )
    sequence: Mapped[int] = mapped_column(nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    benefit_type: Mapped[str] = mapped_column(String(50), nullable=False)
    value: Mapped[Decimal] = mapped_column(nullable=False)
    months: Mapped[int] = mapped_column(nullable=False)
    is_monthly: Mapped[bool] = mapped_column(Boolean, nullable=False)

    labor_budget: Mapped["LaborBudgetModel"] = relationship(
        "LaborBudgetModel",
        back_populates="benefits",
    )

    __table_args__ = (
        Index("idx_labor_benefit_parent", "labor_budget_id"),
    )

    def to_dto(self) -> Benefit:
        variant = (
            FixedBenefit
            if BenefitType(self.benefit_type) is BenefitType.FIXED
            else PercentageBenefit
        )
        return variant(
            name=self.name,
            value=self.value,
            months=self.months,
            is_monthly=self.is_monthly,
        )

    @classmethod
    def from_dto(
        cls,
        dto: Benefit,
        sequence: int,
        created_by_id: UUID,
    ) -> "LaborBenefitModel":
        return cls(
            sequence=sequence,
            name=dto.name,
            benefit_type=dto.type.value,
            value=to_decimal(dto.value),
            months=dto.months,
            is_monthly=dto.is_monthly,
            created_by_id=created_by_id,
        )


class LaborChargeModel(TrackedBase):
    """One statutory charge of a labor budget."""

    __tablename__ = "labor_budget_charges"

    labor_budget_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("labor_budgets.id"),
        nullable=False,
    )
    sequence: Mapped[int] = mapped_column(nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    percentage: Mapped[Decimal] = mapped_column(nullable=False)
    base_includes_benefits: Mapped[bool] = mapped_column(Boolean, nullable=False)

    labor_budget: Mapped["LaborBudgetModel"] = relationship(
        "LaborBudgetModel",
        back_populates="charges",
    )

    __table_args__ = (
        Index("idx_labor_charge_parent", "labor_budget_id"),
    )

    def to_dto(self) -> LaborCharge:
        return LaborCharge(
            name=self.name,
            percentage=self.percentage,
            base_includes_benefits=self.base_includes_benefits,
        )

    @classmethod
    def from_dto(
        cls,
        dto: LaborCharge,
        sequence: int,
        created_by_id: UUID,
    ) -> "LaborChargeModel":
        return cls(
            sequence=sequence,
            name=dto.name,
            percentage=to_decimal(dto.percentage),
            base_includes_benefits=dto.base_includes_benefits,
            created_by_id=created_by_id,
        )
