"""
Employees blueprint: JSON CRUD, statistics and file export under
/api/employees.
"""

from flask import Blueprint

bp = Blueprint("employees", __name__)

from app.blueprints.employees import routes  # noqa: E402, F401
