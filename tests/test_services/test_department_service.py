"""
Tests for department_service: uniqueness, listing and guarded deletes.
"""

import pytest

from app.errors import DuplicateConstraintError, ReferentialViolationError
from app.models.organization import Department
from app.services import department_service


class TestCreateDepartment:
    """Creating departments."""

    def test_create_assigns_id_and_timestamps(self, db_session):
        department = department_service.create_department("Engineering")

        assert department.id is not None
        assert department.created_at is not None
        assert db_session.get(Department, department.id).name == "Engineering"

    def test_duplicate_name_raises(self, make_department):
        make_department("Engineering")

        with pytest.raises(DuplicateConstraintError):
            department_service.create_department("Engineering")

        assert Department.query.count() == 1


class TestListDepartments:
    """Paginated, searchable listing."""

    @pytest.fixture(autouse=True)
    def _setup(self, make_department):
        for name in ["Sales", "Engineering", "Finance", "Marketing", "Operations"]:
            make_department(name)

    def test_ordered_by_name(self):
        result = department_service.list_departments()
        assert [d.name for d in result.data] == [
            "Engineering",
            "Finance",
            "Marketing",
            "Operations",
            "Sales",
        ]
        assert result.pagination.total_items == 5

    def test_second_page(self):
        result = department_service.list_departments(page=2, limit=2)
        assert [d.name for d in result.data] == ["Marketing", "Operations"]
        assert result.pagination.total_pages == 3
        assert result.pagination.has_next_page is True
        assert result.pagination.has_previous_page is True

    def test_search_is_case_insensitive_substring(self):
        result = department_service.list_departments(search="ING")
        assert [d.name for d in result.data] == ["Engineering", "Marketing"]


class TestUpdateDepartment:
    """Renaming departments."""

    def test_rename(self, make_department):
        department = make_department("Engineering")
        updated = department_service.update_department(department.id, name="R&D")
        assert updated.name == "R&D"

    def test_missing_returns_none(self, db_session):
        assert department_service.update_department(999, name="Ghost") is None

    def test_rename_to_existing_name_raises(self, make_department):
        make_department("Engineering")
        finance = make_department("Finance")

        with pytest.raises(DuplicateConstraintError):
            department_service.update_department(finance.id, name="Engineering")

    def test_rename_to_own_name_is_allowed(self, make_department):
        department = make_department("Engineering")
        updated = department_service.update_department(department.id, name="Engineering")
        assert updated.id == department.id


class TestDeleteDepartment:
    """Deletes are blocked while employees reference the department."""

    def test_delete_empty_department(self, make_department):
        department = make_department("Engineering")
        department_id = department.id

        assert department_service.delete_department(department_id) is True
        assert department_service.get_department_by_id(department_id) is None

    def test_delete_with_employees_is_rejected(self, make_department, make_employee):
        department = make_department("Engineering")
        make_employee(department)

        with pytest.raises(ReferentialViolationError):
            department_service.delete_department(department.id)

        assert department_service.get_department_by_id(department.id) is not None

    def test_delete_missing_returns_false(self, db_session):
        assert department_service.delete_department(12345) is False


class TestDepartmentWithEmployees:
    """Eager-loaded department detail."""

    def test_includes_employees(self, make_department, make_employee):
        department = make_department("Engineering")
        make_employee(department, name="Jane Smith", email="jane@company.com")
        make_employee(department, name="Emily Taylor", email="emily@company.com")

        loaded = department_service.get_department_with_employees(department.id)
        payload = loaded.to_dict(include_employees=True)

        assert [e["name"] for e in payload["employees"]] == ["Emily Taylor", "Jane Smith"]
