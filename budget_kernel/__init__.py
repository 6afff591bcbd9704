"""
budget_kernel -- shared infrastructure for the budget engines and modules.

Provides structured logging (``logging_config``), the typed exception
hierarchy (``exceptions``), pure domain helpers (``domain``) and the
SQLAlchemy persistence base (``db``).
"""
