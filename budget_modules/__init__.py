"""
Budget Modules.

Thin orchestration layers over the budget kernel and engines.  Each module
contains:
- Domain models (the nouns)
- Form validators (field-level messages)
- ORM persistence models
- A service owning the transaction boundary

Modules:
- Allocation: annual budgets spread over months, execution tracking
- Labor: position cost budgets (salary, benefits, charges, headcount)

Actual processing logic lives in the engines.
"""

from budget_modules import allocation, labor

__all__ = ["allocation", "labor"]
