"""
Departments blueprint: JSON CRUD for departments under /api/departments.
"""

from flask import Blueprint

bp = Blueprint("departments", __name__)

from app.blueprints.departments import routes  # noqa: E402, F401
