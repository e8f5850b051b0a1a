"""
Pytest configuration and shared fixtures.

Provides a test application, database session, and test client that
all test modules can use.  Uses the ``testing`` configuration, which
points at an in-memory SQLite database, and a per-test temporary
export directory.
"""

from decimal import Decimal

import pytest

from app import create_app
from app.extensions import db as _db
from app.models.organization import Department, Employee


@pytest.fixture(scope="function")
def app(tmp_path):
    """
    Create a Flask application configured for testing.

    A fresh app (and therefore a fresh in-memory database) is created
    per test so no state leaks between tests.
    """
    app = create_app(
        "testing",
        {
            "SQLALCHEMY_DATABASE_URI": "sqlite://",
            "EXPORT_DIR": str(tmp_path / "exports"),
        },
    )

    # Establish an application context for the whole test.
    with app.app_context():
        yield app


@pytest.fixture(scope="function")
def db_session(app):  # pylint: disable=redefined-outer-name
    """
    Provide a database session with all tables created.

    Tables are dropped again after the test completes.
    """
    _db.create_all()

    yield _db.session

    _db.session.remove()
    _db.drop_all()


@pytest.fixture(scope="function")
def client(app, db_session):  # pylint: disable=redefined-outer-name,unused-argument
    """
    Provide a Flask test client for making HTTP requests.

    Usage in tests::

        def test_health(client):
            response = client.get("/health")
            assert response.status_code == 200
    """
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture
def make_department(db_session):  # pylint: disable=redefined-outer-name
    """Factory fixture that inserts and commits a department."""

    def _make(name: str = "Engineering") -> Department:
        department = Department(name=name)
        db_session.add(department)
        db_session.commit()
        return department

    return _make


@pytest.fixture
def make_employee(db_session):  # pylint: disable=redefined-outer-name
    """Factory fixture that inserts and commits an employee."""

    def _make(
        department: Department,
        name: str = "John Doe",
        email: str = "john.doe@company.com",
        salary: str = "75000.00",
    ) -> Employee:
        employee = Employee(
            name=name,
            email=email,
            department_id=department.id,
            salary=Decimal(salary),
        )
        db_session.add(employee)
        db_session.commit()
        return employee

    return _make
