"""
Route tests for /api/employees, including statistics and export.
"""

import csv
import io
import os

import pytest


@pytest.fixture
def department_id(client):
    response = client.post("/api/departments", json={"name": "Engineering"})
    return response.get_json()["data"]["id"]


def _create_employee(client, department_id, name="John Doe", email="john@company.com", salary=75000):
    return client.post(
        "/api/employees",
        json={
            "name": name,
            "email": email,
            "departmentId": department_id,
            "salary": salary,
        },
    )


class TestEmployeeCrudRoutes:
    def test_create_returns_201_with_department(self, client, department_id):
        response = _create_employee(client, department_id)
        body = response.get_json()

        assert response.status_code == 201
        assert body["data"]["salary"] == 75000
        assert body["data"]["department"]["name"] == "Engineering"

    def test_unknown_department_returns_400(self, client, department_id):
        response = _create_employee(client, department_id + 100)

        assert response.status_code == 400
        assert response.get_json()["message"] == "Department not found"

    def test_duplicate_email_returns_409(self, client, department_id):
        _create_employee(client, department_id)
        response = _create_employee(client, department_id, name="Other Person")

        assert response.status_code == 409

    def test_get_update_delete(self, client, department_id):
        employee_id = _create_employee(client, department_id).get_json()["data"]["id"]

        assert client.get(f"/api/employees/{employee_id}").status_code == 200

        response = client.put(f"/api/employees/{employee_id}", json={"salary": 81000})
        assert response.get_json()["data"]["salary"] == 81000

        assert client.delete(f"/api/employees/{employee_id}").status_code == 200
        assert client.get(f"/api/employees/{employee_id}").status_code == 404

    def test_update_missing_returns_404(self, client, department_id):
        response = client.put("/api/employees/999", json={"name": "Nobody Here"})
        assert response.status_code == 404


class TestEmployeeListingRoutes:
    @pytest.fixture(autouse=True)
    def _setup(self, client, department_id):
        _create_employee(client, department_id, "John Doe", "john@company.com")
        _create_employee(client, department_id, "Jane Smith", "jane@company.com")

    def test_search(self, client):
        body = client.get("/api/employees?search=jane").get_json()
        assert [e["name"] for e in body["data"]] == ["Jane Smith"]
        assert body["pagination"]["totalItems"] == 1

    def test_by_department(self, client, department_id):
        response = client.get(f"/api/employees/department/{department_id}?limit=1")
        body = response.get_json()

        assert response.status_code == 200
        assert body["pagination"]["totalPages"] == 2

    def test_by_missing_department_returns_404(self, client):
        assert client.get("/api/employees/department/999").status_code == 404

    def test_statistics(self, client):
        body = client.get("/api/employees/statistics").get_json()

        assert body["data"]["totalEmployees"] == 2
        assert body["data"]["averageSalary"] == 75000
        assert body["data"]["departmentCounts"] == [
            {"departmentName": "Engineering", "count": 2}
        ]


class TestExportRoute:
    def test_csv_download_and_cleanup(self, app, client, department_id):
        _create_employee(client, department_id)

        response = client.get("/api/employees/export?format=csv")
        content = response.data.decode("utf-8-sig")
        response.close()

        assert response.status_code == 200
        assert response.mimetype == "text/csv"
        assert "attachment" in response.headers["Content-Disposition"]
        rows = list(csv.reader(io.StringIO(content)))
        assert rows[1][1] == "John Doe"
        assert rows[1][4] == "Engineering"

        export_dir = app.config["EXPORT_DIR"]
        assert os.listdir(export_dir) == []

    def test_pdf_download(self, client, department_id):
        _create_employee(client, department_id)

        response = client.get("/api/employees/export?format=pdf")
        data = response.data
        response.close()

        assert response.status_code == 200
        assert response.mimetype == "application/pdf"
        assert data.startswith(b"%PDF")

    def test_bad_format_returns_400(self, client, department_id):
        _create_employee(client, department_id)

        response = client.get("/api/employees/export?format=docx")

        assert response.status_code == 400
        assert "Unsupported export format" in response.get_json()["message"]

    def test_nothing_to_export_returns_404(self, client):
        response = client.get("/api/employees/export")
        assert response.status_code == 404
        assert response.get_json()["message"] == "No employees found to export"

    def test_export_leaves_no_file_behind(self, app, client, department_id):
        _create_employee(client, department_id)

        for fmt in ("csv", "pdf", "xlsx"):
            response = client.get(f"/api/employees/export?format={fmt}")
            assert response.status_code == 200
            assert response.data

        assert os.listdir(app.config["EXPORT_DIR"]) == []


class TestOutOfRangeIds:
    """Ids past the INTEGER column range never reach the database."""

    def test_huge_path_id_returns_404(self, client):
        response = client.get("/api/employees/99999999999999999999")

        assert response.status_code == 404
        assert response.get_json()["success"] is False

    def test_zero_path_id_returns_404(self, client):
        assert client.get("/api/employees/0").status_code == 404

    def test_huge_department_filter_returns_400(self, client):
        response = client.get("/api/employees?departmentId=99999999999999999999")
        body = response.get_json()

        assert response.status_code == 400
        assert body["errors"][0]["field"] == "departmentId"

    def test_huge_department_id_in_body_returns_400(self, client):
        response = client.post(
            "/api/employees",
            json={
                "name": "John Doe",
                "email": "john@company.com",
                "departmentId": 99999999999999999999,
                "salary": 50000,
            },
        )

        assert response.status_code == 400
        assert response.get_json()["errors"][0]["field"] == "departmentId"


def test_timestamps_carry_utc_offset(client, department_id):
    body = _create_employee(client, department_id).get_json()

    assert body["data"]["createdAt"].endswith("+00:00")
    assert body["data"]["updatedAt"].endswith("+00:00")
