"""
Typed Exception Hierarchy for the Budget Kernel.

Every error raised by the module layer has a TYPED exception class, a
machine-readable ``code`` class attribute, and structured attributes that
survive logging and serialization (the ``StructuredFormatter`` copies them
into ``exc_*`` fields).

    BudgetKernelError (base)
    |
    +-- ValidationError                  VALIDATION_FAILED
    |
    +-- RecordNotFoundError              RECORD_NOT_FOUND
    |   +-- AllocationNotFoundError      ALLOCATION_NOT_FOUND
    |   +-- MonthlyAllocationNotFoundError  MONTHLY_ALLOCATION_NOT_FOUND
    |   +-- LaborBudgetNotFoundError     LABOR_BUDGET_NOT_FOUND
    |
    +-- ProfileError                     PROFILE_ERROR
        +-- UnknownProfileError          UNKNOWN_DISTRIBUTION_PROFILE

Engines never raise ``ValidationError``.  Validation is the caller's job and
is reported as field-level messages; engines only raise ``ValueError`` for
structurally malformed input (wrong sequence length, month out of range) and
``UnknownProfileError`` for a profile name that is not in the table.

Handling pattern::

    try:
        service.add_allocation(form, actor_id=actor)
    except ValidationError as e:
        return {"error": e.code, "fields": e.field_errors}
    except RecordNotFoundError as e:
        return {"error": e.code, "id": str(e.record_id)}
"""

from uuid import UUID


class BudgetKernelError(Exception):
    """
    Base exception for all budget kernel errors.

    All subclasses must have a ``code`` class attribute for
    machine-readable error identification.
    """

    code: str = "BUDGET_KERNEL_ERROR"


# Validation


class ValidationError(BudgetKernelError):
    """
    Form input rejected by the module layer.

    ``field_errors`` maps a field name to the user-facing message for it,
    in the order the checks ran.
    """

    code: str = "VALIDATION_FAILED"

    def __init__(self, entity: str, field_errors: dict[str, str]):
        self.entity = entity
        self.field_errors = dict(field_errors)
        super().__init__(
            f"Validation failed for {entity}: "
            f"{', '.join(self.field_errors) or 'no fields'}"
        )

    @property
    def first_field(self) -> str | None:
        """Name of the first failing field, if any."""
        return next(iter(self.field_errors), None)


# Lookup


class RecordNotFoundError(BudgetKernelError):
    """Base exception for missing records."""

    code: str = "RECORD_NOT_FOUND"
    entity: str = "record"

    def __init__(self, record_id: UUID | str):
        self.record_id = str(record_id)
        super().__init__(f"{self.entity} not found: {record_id}")


class AllocationNotFoundError(RecordNotFoundError):
    """Budget allocation with given ID was not found."""

    code: str = "ALLOCATION_NOT_FOUND"
    entity: str = "Budget allocation"


class LaborBudgetNotFoundError(RecordNotFoundError):
    """Labor budget with given ID was not found."""

    code: str = "LABOR_BUDGET_NOT_FOUND"
    entity: str = "Labor budget"


class MonthlyAllocationNotFoundError(RecordNotFoundError):
    """The allocation has no month entry for the requested month."""

    code: str = "MONTHLY_ALLOCATION_NOT_FOUND"
    entity: str = "Monthly allocation"

    def __init__(self, record_id: UUID | str, month: int):
        self.month = month
        super().__init__(record_id)
        self.args = (f"Monthly allocation not found: {record_id} month {month}",)


# Distribution profiles


class ProfileError(BudgetKernelError):
    """Base exception for distribution profile errors."""

    code: str = "PROFILE_ERROR"


class UnknownProfileError(ProfileError):
    """No distribution profile is registered under the given name."""

    code: str = "UNKNOWN_DISTRIBUTION_PROFILE"

    def __init__(self, profile_name: str, available: tuple[str, ...] = ()):
        self.profile_name = profile_name
        self.available = available
        super().__init__(
            f"Unknown distribution profile: {profile_name!r}"
            + (f" (available: {', '.join(available)})" if available else "")
        )
