"""
Repositories: the only code that builds SQLAlchemy queries.

Each repository wraps one model.  Methods flush but never commit; the
calling service owns the transaction and decides when to commit or
roll back.  Filters are passed as explicit dataclasses rather than raw
query fragments, so services never touch SQLAlchemy operators.
"""

import logging
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from sqlalchemy import func, or_
from sqlalchemy.orm import selectinload

from app.extensions import db
from app.models.organization import Department, Employee

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=db.Model)


@dataclass(frozen=True)
class DepartmentFilter:
    """Criteria for department listings."""

    name_contains: str | None = None


@dataclass(frozen=True)
class EmployeeFilter:
    """
    Criteria for employee listings.

    ``search`` matches name OR email; the ``*_contains`` fields match
    their own column only.  All set fields are combined with AND.
    """

    name_contains: str | None = None
    email_contains: str | None = None
    search: str | None = None
    department_id: int | None = None


@dataclass(frozen=True)
class DepartmentCount:
    """Employee headcount for one department."""

    department_name: str
    count: int


class SqlAlchemyRepository(Generic[ModelT]):
    """Generic CRUD over a single Flask-SQLAlchemy model."""

    model: type[ModelT]

    # Relationship attributes eager-loaded when include_related is set.
    related: tuple = ()

    def _query(self, include_related: bool = False):
        query = self.model.query
        if include_related and self.related:
            query = query.options(*(selectinload(rel) for rel in self.related))
        return query

    def create(self, **values: Any) -> ModelT:
        """Add a new row and flush so it gets its primary key."""
        instance = self.model(**values)
        db.session.add(instance)
        db.session.flush()
        return instance

    def find_by_id(self, record_id: int, include_related: bool = False) -> ModelT | None:
        options = []
        if include_related:
            options = [selectinload(rel) for rel in self.related]
        return db.session.get(self.model, record_id, options=options)

    def find_many(
        self,
        conditions: list,
        offset: int | None = None,
        limit: int | None = None,
        order_by: tuple = (),
        include_related: bool = False,
    ) -> tuple[list[ModelT], int]:
        """
        Return one slice of matching rows and the total match count.

        The count ignores ``offset``/``limit`` so callers can build
        pagination metadata from a single call.
        """
        query = self._query(include_related).filter(*conditions)
        total = query.order_by(None).count()
        if order_by:
            query = query.order_by(*order_by)
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query.all(), total

    def update(self, instance: ModelT, **patch: Any) -> ModelT:
        """Apply non-None values from ``patch`` and flush."""
        for key, value in patch.items():
            if value is not None:
                setattr(instance, key, value)
        db.session.flush()
        return instance

    def delete(self, instance: ModelT) -> None:
        db.session.delete(instance)
        db.session.flush()

    def count(self, conditions: list | None = None) -> int:
        return self.model.query.filter(*(conditions or [])).count()


class DepartmentRepository(SqlAlchemyRepository[Department]):
    """Data access for departments."""

    model = Department
    related = (Department.employees,)

    def conditions_for(self, criteria: DepartmentFilter) -> list:
        conditions = []
        if criteria.name_contains:
            conditions.append(Department.name.ilike(f"%{criteria.name_contains}%"))
        return conditions

    def find_by_name(self, name: str) -> Department | None:
        return Department.query.filter(Department.name == name).first()


class EmployeeRepository(SqlAlchemyRepository[Employee]):
    """Data access for employees, including the aggregate queries."""

    model = Employee
    related = (Employee.department,)

    def conditions_for(self, criteria: EmployeeFilter) -> list:
        conditions = []
        if criteria.department_id is not None:
            conditions.append(Employee.department_id == criteria.department_id)
        if criteria.name_contains:
            conditions.append(Employee.name.ilike(f"%{criteria.name_contains}%"))
        if criteria.email_contains:
            conditions.append(Employee.email.ilike(f"%{criteria.email_contains}%"))
        if criteria.search:
            pattern = f"%{criteria.search}%"
            conditions.append(
                or_(Employee.name.ilike(pattern), Employee.email.ilike(pattern))
            )
        return conditions

    def find_by_email(self, email: str) -> Employee | None:
        return Employee.query.filter(Employee.email == email).first()

    def count_for_department(self, department_id: int) -> int:
        return self.count([Employee.department_id == department_id])

    def average_salary(self) -> float:
        """Mean salary across all employees; 0 when there are none."""
        result = db.session.query(func.avg(Employee.salary)).scalar()
        return float(result) if result is not None else 0.0

    def department_counts(self) -> list[DepartmentCount]:
        """
        Headcount per department.

        Inner join: departments without employees are not returned.
        """
        rows = (
            db.session.query(Department.name, func.count(Employee.id))
            .join(Employee, Employee.department_id == Department.id)
            .group_by(Department.id, Department.name)
            .order_by(Department.name)
            .all()
        )
        return [DepartmentCount(department_name=name, count=int(count)) for name, count in rows]
