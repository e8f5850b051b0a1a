"""
Request validation: the first stage of every write or list route.

Each ``validate_*`` function takes the raw JSON body or query args and
either returns a frozen dataclass of clean values or raises
``ValidationFailure`` listing every problem found.  Services only ever
see the dataclasses.
"""

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from werkzeug.routing import IntegerConverter

from app.errors import ValidationFailure

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 255

# Largest value a signed 32-bit INTEGER column or LIMIT/OFFSET accepts.
MAX_INTEGER = 2**31 - 1

# Numeric(12, 2)
MAX_SALARY = Decimal("9999999999.99")

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_DIGITS = re.compile(r"^\d+$")


@dataclass(frozen=True)
class DepartmentInput:
    name: str | None = None


@dataclass(frozen=True)
class EmployeeInput:
    name: str | None = None
    email: str | None = None
    department_id: int | None = None
    salary: Decimal | None = None


@dataclass(frozen=True)
class ListQuery:
    page: int | None = None
    limit: int | None = None
    department_id: int | None = None
    search: str | None = None


@dataclass(frozen=True)
class ExportQuery:
    format: str
    department_id: int | None = None


class _Errors:
    """Collects field errors, then raises them together."""

    def __init__(self):
        self.items: list[dict[str, str]] = []

    def add(self, field: str, message: str) -> None:
        self.items.append({"field": field, "message": message})

    def raise_if_any(self, message: str) -> None:
        if self.items:
            raise ValidationFailure(message, errors=self.items)


# =========================================================================
# Bodies
# =========================================================================


def validate_department_create(body: Any) -> DepartmentInput:
    body = _require_object(body)
    errors = _Errors()
    name = _name(body, "name", errors, required=True, label="Department name")
    errors.raise_if_any("Validation failed")
    return DepartmentInput(name=name)


def validate_department_update(body: Any) -> DepartmentInput:
    body = _require_object(body)
    errors = _Errors()
    name = _name(body, "name", errors, required=False, label="Department name")
    errors.raise_if_any("Validation failed")
    if name is None:
        raise ValidationFailure(
            "Validation failed",
            errors=[{"field": "name", "message": "No fields to update"}],
        )
    return DepartmentInput(name=name)


def validate_employee_create(body: Any) -> EmployeeInput:
    return _employee(_require_object(body), required=True)


def validate_employee_update(body: Any) -> EmployeeInput:
    data = _employee(_require_object(body), required=False)
    if all(
        value is None
        for value in (data.name, data.email, data.department_id, data.salary)
    ):
        raise ValidationFailure(
            "Validation failed",
            errors=[{"field": "body", "message": "No fields to update"}],
        )
    return data


def _employee(body: Mapping[str, Any], required: bool) -> EmployeeInput:
    errors = _Errors()

    name = _name(body, "name", errors, required=required, label="Name")

    email = body.get("email")
    if email is None:
        if required:
            errors.add("email", "Email is required")
    elif not isinstance(email, str) or not _EMAIL_PATTERN.match(email.strip()):
        errors.add("email", "Invalid email format")
        email = None
    elif len(email.strip()) > EMAIL_MAX_LENGTH:
        errors.add("email", f"Email must not exceed {EMAIL_MAX_LENGTH} characters")
        email = None
    else:
        email = email.strip().lower()

    department_id = body.get("departmentId")
    if department_id is None:
        if required:
            errors.add("departmentId", "Department ID is required")
    elif (
        isinstance(department_id, bool)
        or not isinstance(department_id, int)
        or not 0 < department_id <= MAX_INTEGER
    ):
        errors.add("departmentId", "Department ID must be a positive integer")
        department_id = None

    salary = body.get("salary")
    if salary is None:
        if required:
            errors.add("salary", "Salary is required")
    else:
        salary = _salary(salary, errors)

    errors.raise_if_any("Validation failed")
    return EmployeeInput(
        name=name, email=email, department_id=department_id, salary=salary
    )


# =========================================================================
# Query strings
# =========================================================================


def validate_list_query(
    args: Mapping[str, str], allow_department: bool = True
) -> ListQuery:
    """
    Validate ``page``, ``limit``, ``search`` and optionally
    ``departmentId`` query parameters.  Range clamping is left to the
    pagination helpers.
    """
    errors = _Errors()
    page = _digits(args, "page", errors)
    limit = _digits(args, "limit", errors)
    department_id = _digits(args, "departmentId", errors) if allow_department else None
    search = (args.get("search") or "").strip() or None
    errors.raise_if_any("Query validation failed")
    return ListQuery(page=page, limit=limit, department_id=department_id, search=search)


def validate_export_query(args: Mapping[str, str]) -> ExportQuery:
    """Validate ``format`` (default csv) and ``departmentId``."""
    errors = _Errors()
    department_id = _digits(args, "departmentId", errors)
    errors.raise_if_any("Query validation failed")
    fmt = (args.get("format") or "csv").strip().lower()
    return ExportQuery(format=fmt, department_id=department_id)


# =========================================================================
# Internal helpers
# =========================================================================


def _require_object(body: Any) -> Mapping[str, Any]:
    if not isinstance(body, Mapping):
        raise ValidationFailure(
            "Validation failed",
            errors=[{"field": "body", "message": "Request body must be a JSON object"}],
        )
    return body


def _name(
    body: Mapping[str, Any],
    field: str,
    errors: _Errors,
    required: bool,
    label: str,
) -> str | None:
    value = body.get(field)
    if value is None:
        if required:
            errors.add(field, f"{label} is required")
        return None
    if not isinstance(value, str):
        errors.add(field, f"{label} must be a string")
        return None
    value = value.strip()
    if len(value) < NAME_MIN_LENGTH:
        errors.add(field, f"{label} must be at least {NAME_MIN_LENGTH} characters")
        return None
    if len(value) > NAME_MAX_LENGTH:
        errors.add(field, f"{label} must not exceed {NAME_MAX_LENGTH} characters")
        return None
    return value


def _salary(value: Any, errors: _Errors) -> Decimal | None:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        errors.add("salary", "Salary must be a number")
        return None
    try:
        salary = Decimal(str(value))
    except InvalidOperation:
        errors.add("salary", "Salary must be a number")
        return None
    if not salary.is_finite():
        errors.add("salary", "Salary must be a number")
        return None
    if salary < 0:
        errors.add("salary", "Salary must not be negative")
        return None
    if salary > MAX_SALARY:
        errors.add("salary", f"Salary must not exceed {MAX_SALARY}")
        return None
    return salary.quantize(Decimal("0.01"))


def _digits(args: Mapping[str, str], field: str, errors: _Errors) -> int | None:
    raw = args.get(field)
    if raw is None or raw == "":
        return None
    if not _DIGITS.match(raw):
        errors.add(field, f"{field} must be a non-negative integer")
        return None
    value = int(raw)
    if value > MAX_INTEGER:
        errors.add(field, f"{field} must not exceed {MAX_INTEGER}")
        return None
    return value


class RecordIdConverter(IntegerConverter):
    """
    ``<id:...>`` URL converter: a positive integer that fits the id column.

    Anything else fails to match, so the request gets the JSON 404.
    """

    def __init__(self, url_map, *args, **kwargs):
        kwargs.setdefault("min", 1)
        kwargs.setdefault("max", MAX_INTEGER)
        super().__init__(url_map, *args, **kwargs)
