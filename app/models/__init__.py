"""
Model package: imports all models so Alembic and SQLAlchemy can
discover them automatically when ``flask db`` or ``flask init-db``
commands are run.

  - organization.py -> departments, employees
"""

from app.models.organization import Department, Employee  # noqa: F401
