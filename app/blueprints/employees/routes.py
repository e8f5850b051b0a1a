"""
Routes for the employees blueprint: CRUD, statistics and export.

``/statistics`` and ``/export`` are registered before ``/<id:employee_id>``
so they are never mistaken for an employee id.
"""

import logging
import os

from flask import request, send_file

from app.blueprints.employees import bp
from app.responses import error, paginated, success
from app.services import employee_service, export_service
from app.validation import (
    validate_employee_create,
    validate_employee_update,
    validate_export_query,
    validate_list_query,
)

logger = logging.getLogger(__name__)

_NOT_FOUND = "Employee not found"


def _serialize(employee) -> dict:
    return employee.to_dict()


@bp.route("", methods=["POST"])
def create_employee():
    """Create an employee.  Returns 201."""
    data = validate_employee_create(request.get_json(silent=True))
    employee = employee_service.create_employee(
        name=data.name,
        email=data.email,
        department_id=data.department_id,
        salary=data.salary,
    )
    return success(
        _serialize(employee), message="Employee created successfully", status=201
    )


@bp.route("", methods=["GET"])
def list_employees():
    """Paginated employee list; filters ``departmentId`` and ``search``."""
    query = validate_list_query(request.args)
    result = employee_service.list_employees(
        page=query.page,
        limit=query.limit,
        department_id=query.department_id,
        search=query.search,
    )
    return paginated(result, _serialize)


@bp.route("/statistics", methods=["GET"])
def employee_statistics():
    stats = employee_service.get_employee_statistics()
    return success(stats.to_dict())


@bp.route("/export", methods=["GET"])
def export_employees():
    """
    Download employees as a file.

    Query args:
        format:       csv (default), pdf or xlsx.
        departmentId: Optional department filter.

    The generated file is removed before the response is sent.
    """
    query = validate_export_query(request.args)
    fmt = export_service.ensure_supported_format(query.format)

    employees = employee_service.list_employees_for_export(
        department_id=query.department_id
    )
    if not employees:
        return error("No employees found to export", 404)

    file_path = export_service.export_employees(
        employees,
        export_service.ExportOptions(format=fmt, department_id=query.department_id),
    )

    download_name = os.path.basename(file_path)
    buffer = export_service.load_export_file(file_path)

    logger.info("Sending export %s (%d employees)", download_name, len(employees))
    return send_file(
        buffer,
        mimetype=export_service.export_mimetype(fmt),
        as_attachment=True,
        download_name=download_name,
        max_age=0,
    )


@bp.route("/department/<id:department_id>", methods=["GET"])
def employees_by_department(department_id):
    """Paginated employees of one department; 404 if it does not exist."""
    query = validate_list_query(request.args, allow_department=False)
    result = employee_service.list_employees_by_department(
        department_id,
        page=query.page,
        limit=query.limit,
        search=query.search,
    )
    return paginated(result, _serialize)


@bp.route("/<id:employee_id>", methods=["GET"])
def get_employee(employee_id):
    employee = employee_service.get_employee_by_id(employee_id)
    if employee is None:
        return error(_NOT_FOUND, 404)
    return success(_serialize(employee))


@bp.route("/<id:employee_id>", methods=["PUT"])
def update_employee(employee_id):
    data = validate_employee_update(request.get_json(silent=True))
    employee = employee_service.update_employee(
        employee_id,
        name=data.name,
        email=data.email,
        department_id=data.department_id,
        salary=data.salary,
    )
    if employee is None:
        return error(_NOT_FOUND, 404)
    return success(_serialize(employee), message="Employee updated successfully")


@bp.route("/<id:employee_id>", methods=["DELETE"])
def delete_employee(employee_id):
    if not employee_service.delete_employee(employee_id):
        return error(_NOT_FOUND, 404)
    return success(message="Employee deleted successfully")
