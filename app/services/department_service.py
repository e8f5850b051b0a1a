"""
Department service: CRUD for departments.

Input arrives already validated (see ``app.validation``).  This module
enforces the rules the validator cannot: unique names and the ban on
deleting a department that still has employees.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.errors import (
    DuplicateConstraintError,
    ReferentialViolationError,
    StoreUnavailableError,
)
from app.extensions import db
from app.models.organization import Department
from app.pagination import (
    PaginationResult,
    calculate_offset,
    create_pagination_result,
    validate_pagination_params,
)
from app.repositories import DepartmentFilter, DepartmentRepository, EmployeeRepository

logger = logging.getLogger(__name__)

_departments = DepartmentRepository()
_employees = EmployeeRepository()

_DUPLICATE_NAME = "Department with this name already exists"


def create_department(name: str) -> Department:
    """
    Create a department.

    Raises:
        DuplicateConstraintError: If the name is already taken.
        StoreUnavailableError:    If the database write fails.
    """
    logger.info("Creating department %r", name)
    try:
        if _departments.find_by_name(name) is not None:
            raise DuplicateConstraintError(_DUPLICATE_NAME)
        department = _departments.create(name=name)
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        logger.warning("Unique constraint hit creating department %r", name)
        raise DuplicateConstraintError(_DUPLICATE_NAME) from exc
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Error creating department %r", name)
        raise StoreUnavailableError("Failed to create department") from exc

    logger.info("Created department ID %d (%s)", department.id, department.name)
    return department


def get_department_by_id(department_id: int) -> Department | None:
    """Return a department by primary key, or None if not found."""
    try:
        department = _departments.find_by_id(department_id)
    except SQLAlchemyError as exc:
        logger.exception("Error fetching department ID %d", department_id)
        raise StoreUnavailableError("Failed to fetch department") from exc

    if department is None:
        logger.warning("Department ID %d not found", department_id)
    return department


def get_department_with_employees(department_id: int) -> Department | None:
    """Return a department with its employees eagerly loaded."""
    try:
        department = _departments.find_by_id(department_id, include_related=True)
    except SQLAlchemyError as exc:
        logger.exception("Error fetching department ID %d with employees", department_id)
        raise StoreUnavailableError("Failed to fetch department with employees") from exc

    if department is None:
        logger.warning("Department ID %d not found", department_id)
    return department


def list_departments(
    page: int | None = None,
    limit: int | None = None,
    search: str | None = None,
) -> PaginationResult[Department]:
    """
    Return one page of departments ordered by name.

    Args:
        page:   1-based page number (normalized, never fails).
        limit:  Page size (normalized, max 100).
        search: Optional case-insensitive substring of the name.
    """
    page, limit = validate_pagination_params(page, limit)
    logger.info("Listing departments page=%d limit=%d search=%r", page, limit, search)

    try:
        rows, total = _departments.find_many(
            _departments.conditions_for(DepartmentFilter(name_contains=search)),
            offset=calculate_offset(page, limit),
            limit=limit,
            order_by=(Department.name,),
        )
    except SQLAlchemyError as exc:
        logger.exception("Error listing departments")
        raise StoreUnavailableError("Failed to fetch departments") from exc

    logger.debug("Fetched %d of %d departments", len(rows), total)
    return create_pagination_result(rows, page=page, limit=limit, total=total)


def update_department(department_id: int, name: str | None = None) -> Department | None:
    """
    Rename a department.

    Returns:
        The updated Department, or None if it does not exist.

    Raises:
        DuplicateConstraintError: If another department has the name.
    """
    logger.info("Updating department ID %d", department_id)
    try:
        department = _departments.find_by_id(department_id)
        if department is None:
            logger.warning("Department ID %d not found for update", department_id)
            return None

        if name is not None:
            existing = _departments.find_by_name(name)
            if existing is not None and existing.id != department_id:
                raise DuplicateConstraintError(_DUPLICATE_NAME)

        _departments.update(
            department, name=name, updated_at=datetime.now(timezone.utc)
        )
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise DuplicateConstraintError(_DUPLICATE_NAME) from exc
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Error updating department ID %d", department_id)
        raise StoreUnavailableError("Failed to update department") from exc

    logger.info("Updated department ID %d", department_id)
    return department


def delete_department(department_id: int) -> bool:
    """
    Delete a department that has no employees.

    Returns:
        True if deleted, False if it did not exist.

    Raises:
        ReferentialViolationError: If employees still reference it.
    """
    logger.info("Deleting department ID %d", department_id)
    try:
        department = _departments.find_by_id(department_id)
        if department is None:
            logger.warning("Department ID %d not found for deletion", department_id)
            return False

        dependents = _employees.count_for_department(department_id)
        if dependents:
            logger.warning(
                "Refusing to delete department ID %d: %d employee(s) assigned",
                department_id,
                dependents,
            )
            raise ReferentialViolationError(
                "Cannot delete department with associated employees"
            )

        _departments.delete(department)
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise ReferentialViolationError(
            "Cannot delete department with associated employees"
        ) from exc
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Error deleting department ID %d", department_id)
        raise StoreUnavailableError("Failed to delete department") from exc

    logger.info("Deleted department ID %d", department_id)
    return True
