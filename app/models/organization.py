"""
Organization models: departments and the employees assigned to them.

Each employee belongs to exactly one department.  A department cannot
be deleted while employees still reference it; the department service
enforces that rule before the database foreign key would.
"""

from datetime import datetime, timezone

from app.extensions import db


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    # SQLite hands back naive datetimes; they were stored as UTC.
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


class Department(db.Model):
    """
    Organizational unit that owns zero or more employees.

    ``name`` is unique across all departments (2-100 characters,
    enforced by the validation layer).
    """

    __tablename__ = "departments"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    name = db.Column(db.String(100), unique=True, nullable=False, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=_utcnow)

    # -- Relationships -----------------------------------------------------
    employees = db.relationship(
        "Employee",
        back_populates="department",
        order_by="Employee.name",
    )

    def to_dict(self, include_employees: bool = False) -> dict:
        """Serialize for the JSON API."""
        data = {
            "id": self.id,
            "name": self.name,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }
        if include_employees:
            data["employees"] = [
                employee.to_dict(include_department=False)
                for employee in self.employees
            ]
        return data

    def __repr__(self) -> str:
        return f"<Department {self.id}: {self.name}>"


class Employee(db.Model):
    """
    Individual employee record.

    ``email`` is unique.  ``salary`` is a non-negative decimal stored
    with two places.
    """

    __tablename__ = "employees"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    name = db.Column(db.String(100), nullable=False, index=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    department_id = db.Column(
        db.Integer,
        db.ForeignKey("departments.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    salary = db.Column(db.Numeric(12, 2), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=_utcnow)

    # -- Relationships -----------------------------------------------------
    department = db.relationship("Department", back_populates="employees")

    @property
    def department_name(self) -> str | None:
        """Denormalized department name, or None when not resolvable."""
        return self.department.name if self.department is not None else None

    def to_dict(self, include_department: bool = True) -> dict:
        """Serialize for the JSON API."""
        data = {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "departmentId": self.department_id,
            "salary": float(self.salary) if self.salary is not None else None,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }
        if include_department:
            department = self.department
            data["department"] = (
                {"id": department.id, "name": department.name}
                if department is not None
                else None
            )
        return data

    def __repr__(self) -> str:
        return f"<Employee {self.id}: {self.email}>"
