"""
Employee service: CRUD, department listings and headcount statistics.

Every employee must reference an existing department and carry a
unique email address.  Both rules are checked before anything is
written, and a unique-constraint hit at commit time is rolled back and
reported the same way, so a rejected create or update never leaves a
partial row behind.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.errors import (
    DuplicateConstraintError,
    NotFoundError,
    ReferentialViolationError,
    StoreUnavailableError,
)
from app.extensions import db
from app.models.organization import Employee
from app.pagination import (
    PaginationResult,
    calculate_offset,
    create_pagination_result,
    validate_pagination_params,
)
from app.repositories import (
    DepartmentCount,
    DepartmentRepository,
    EmployeeFilter,
    EmployeeRepository,
)

logger = logging.getLogger(__name__)

_departments = DepartmentRepository()
_employees = EmployeeRepository()

_DUPLICATE_EMAIL = "Employee with this email already exists"
_MISSING_DEPARTMENT = "Department not found"


@dataclass
class EmployeeStatistics:
    """Organization-wide headcount and salary figures."""

    total_employees: int
    average_salary: float
    department_counts: list[DepartmentCount] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "totalEmployees": self.total_employees,
            "averageSalary": self.average_salary,
            "departmentCounts": [
                {"departmentName": item.department_name, "count": item.count}
                for item in self.department_counts
            ],
        }


# =========================================================================
# Writes
# =========================================================================


def create_employee(
    name: str,
    email: str,
    department_id: int,
    salary: Decimal,
) -> Employee:
    """
    Create an employee in an existing department.

    Raises:
        ReferentialViolationError: If the department does not exist.
        DuplicateConstraintError:  If the email is already used.
    """
    logger.info("Creating employee %s in department ID %d", email, department_id)
    try:
        _require_department(department_id)
        if _employees.find_by_email(email) is not None:
            raise DuplicateConstraintError(_DUPLICATE_EMAIL)

        employee = _employees.create(
            name=name,
            email=email,
            department_id=department_id,
            salary=salary,
        )
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise _classify_integrity_error(email) from exc
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Error creating employee %s", email)
        raise StoreUnavailableError("Failed to create employee") from exc

    logger.info("Created employee ID %d (%s)", employee.id, employee.email)
    return _employees.find_by_id(employee.id, include_related=True)


def update_employee(
    employee_id: int,
    name: str | None = None,
    email: str | None = None,
    department_id: int | None = None,
    salary: Decimal | None = None,
) -> Employee | None:
    """
    Apply a partial update to an employee.

    Returns:
        The updated Employee, or None if it does not exist.

    Raises:
        ReferentialViolationError: If the new department does not exist.
        DuplicateConstraintError:  If the new email belongs to someone else.
    """
    logger.info("Updating employee ID %d", employee_id)
    try:
        employee = _employees.find_by_id(employee_id)
        if employee is None:
            logger.warning("Employee ID %d not found for update", employee_id)
            return None

        if department_id is not None:
            _require_department(department_id)
        if email is not None:
            existing = _employees.find_by_email(email)
            if existing is not None and existing.id != employee_id:
                raise DuplicateConstraintError(_DUPLICATE_EMAIL)

        _employees.update(
            employee,
            name=name,
            email=email,
            department_id=department_id,
            salary=salary,
            updated_at=datetime.now(timezone.utc),
        )
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise _classify_integrity_error(email) from exc
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Error updating employee ID %d", employee_id)
        raise StoreUnavailableError("Failed to update employee") from exc

    logger.info("Updated employee ID %d", employee_id)
    return _employees.find_by_id(employee_id, include_related=True)


def delete_employee(employee_id: int) -> bool:
    """Delete an employee.  Returns False if it did not exist."""
    logger.info("Deleting employee ID %d", employee_id)
    try:
        employee = _employees.find_by_id(employee_id)
        if employee is None:
            logger.warning("Employee ID %d not found for deletion", employee_id)
            return False
        _employees.delete(employee)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Error deleting employee ID %d", employee_id)
        raise StoreUnavailableError("Failed to delete employee") from exc

    logger.info("Deleted employee ID %d", employee_id)
    return True


# =========================================================================
# Reads
# =========================================================================


def get_employee_by_id(employee_id: int) -> Employee | None:
    """Return an employee with its department, or None if not found."""
    try:
        employee = _employees.find_by_id(employee_id, include_related=True)
    except SQLAlchemyError as exc:
        logger.exception("Error fetching employee ID %d", employee_id)
        raise StoreUnavailableError("Failed to fetch employee") from exc

    if employee is None:
        logger.warning("Employee ID %d not found", employee_id)
    return employee


def list_employees(
    page: int | None = None,
    limit: int | None = None,
    department_id: int | None = None,
    search: str | None = None,
) -> PaginationResult[Employee]:
    """
    Return one page of employees ordered by name.

    Args:
        page:          1-based page number (normalized, never fails).
        limit:         Page size (normalized, max 100).
        department_id: Optional department filter.
        search:        Optional substring matched against name or email.
    """
    page, limit = validate_pagination_params(page, limit)
    logger.info(
        "Listing employees page=%d limit=%d department=%s search=%r",
        page,
        limit,
        department_id,
        search,
    )

    criteria = EmployeeFilter(search=search, department_id=department_id)
    try:
        rows, total = _employees.find_many(
            _employees.conditions_for(criteria),
            offset=calculate_offset(page, limit),
            limit=limit,
            order_by=(Employee.name,),
            include_related=True,
        )
    except SQLAlchemyError as exc:
        logger.exception("Error listing employees")
        raise StoreUnavailableError("Failed to fetch employees") from exc

    logger.debug("Fetched %d of %d employees", len(rows), total)
    return create_pagination_result(rows, page=page, limit=limit, total=total)


def list_employees_by_department(
    department_id: int,
    page: int | None = None,
    limit: int | None = None,
    search: str | None = None,
) -> PaginationResult[Employee]:
    """
    Return one page of a department's employees.

    Raises:
        NotFoundError: If the department does not exist.
    """
    try:
        department = _departments.find_by_id(department_id)
    except SQLAlchemyError as exc:
        logger.exception("Error fetching department ID %d", department_id)
        raise StoreUnavailableError("Failed to fetch employees") from exc
    if department is None:
        raise NotFoundError(_MISSING_DEPARTMENT)

    return list_employees(
        page=page, limit=limit, department_id=department_id, search=search
    )


def list_employees_for_export(department_id: int | None = None) -> list[Employee]:
    """
    Return every matching employee, unpaginated, for file export.
    """
    criteria = EmployeeFilter(department_id=department_id)
    try:
        rows, _total = _employees.find_many(
            _employees.conditions_for(criteria),
            order_by=(Employee.name,),
            include_related=True,
        )
    except SQLAlchemyError as exc:
        logger.exception("Error fetching employees for export")
        raise StoreUnavailableError("Failed to fetch employees") from exc
    return rows


def get_employee_statistics() -> EmployeeStatistics:
    """
    Compute headcount, mean salary and per-department counts.

    Departments with no employees are left out of ``department_counts``.
    """
    logger.info("Computing employee statistics")
    try:
        stats = EmployeeStatistics(
            total_employees=_employees.count(),
            average_salary=_employees.average_salary(),
            department_counts=_employees.department_counts(),
        )
    except SQLAlchemyError as exc:
        logger.exception("Error computing employee statistics")
        raise StoreUnavailableError("Failed to fetch employee statistics") from exc

    logger.info(
        "Statistics: %d employees, average salary %.2f, %d department(s)",
        stats.total_employees,
        stats.average_salary,
        len(stats.department_counts),
    )
    return stats


# =========================================================================
# Internal helpers
# =========================================================================


def _require_department(department_id: int) -> None:
    if _departments.find_by_id(department_id) is None:
        logger.warning("Department ID %d does not exist", department_id)
        raise ReferentialViolationError(_MISSING_DEPARTMENT)


def _classify_integrity_error(email: str | None):
    """Map a commit-time IntegrityError to the matching service error."""
    if email is not None and _employees.find_by_email(email) is not None:
        logger.warning("Unique constraint hit for email %s", email)
        return DuplicateConstraintError(_DUPLICATE_EMAIL)
    logger.warning("Foreign key constraint hit for employee write")
    return ReferentialViolationError("Invalid department reference")
