"""
Routes for the departments blueprint.

Every handler validates first (``app.validation``), then calls the
department service.  Service errors propagate to the JSON error
handlers registered by the application factory.
"""

from flask import request

from app.blueprints.departments import bp
from app.responses import error, paginated, success
from app.services import department_service
from app.validation import (
    validate_department_create,
    validate_department_update,
    validate_list_query,
)

_NOT_FOUND = "Department not found"


@bp.route("", methods=["POST"])
def create_department():
    """Create a department.  Returns 201."""
    data = validate_department_create(request.get_json(silent=True))
    department = department_service.create_department(name=data.name)
    return success(
        department.to_dict(), message="Department created successfully", status=201
    )


@bp.route("", methods=["GET"])
def list_departments():
    """Paginated department list with optional ``search``."""
    query = validate_list_query(request.args, allow_department=False)
    result = department_service.list_departments(
        page=query.page, limit=query.limit, search=query.search
    )
    return paginated(result, lambda department: department.to_dict())


@bp.route("/<id:department_id>", methods=["GET"])
def get_department(department_id):
    department = department_service.get_department_by_id(department_id)
    if department is None:
        return error(_NOT_FOUND, 404)
    return success(department.to_dict())


@bp.route("/<id:department_id>", methods=["PUT"])
def update_department(department_id):
    data = validate_department_update(request.get_json(silent=True))
    department = department_service.update_department(department_id, name=data.name)
    if department is None:
        return error(_NOT_FOUND, 404)
    return success(department.to_dict(), message="Department updated successfully")


@bp.route("/<id:department_id>", methods=["DELETE"])
def delete_department(department_id):
    """Delete a department; 400 if employees are still assigned."""
    if not department_service.delete_department(department_id):
        return error(_NOT_FOUND, 404)
    return success(message="Department deleted successfully")


@bp.route("/<id:department_id>/employees", methods=["GET"])
def department_employees(department_id):
    """Department detail including its employees."""
    department = department_service.get_department_with_employees(department_id)
    if department is None:
        return error(_NOT_FOUND, 404)
    return success(department.to_dict(include_employees=True))
