"""
Route tests for /api/departments.
"""


def _create(client, name="Engineering"):
    return client.post("/api/departments", json={"name": name})


class TestCreateDepartmentRoute:
    def test_create_returns_201(self, client):
        response = _create(client)
        body = response.get_json()

        assert response.status_code == 201
        assert body["success"] is True
        assert body["data"]["name"] == "Engineering"
        assert body["data"]["id"] > 0

    def test_duplicate_returns_409(self, client):
        _create(client)
        response = _create(client)

        assert response.status_code == 409
        assert response.get_json()["message"] == "Department with this name already exists"

    def test_invalid_body_returns_400_with_field_errors(self, client):
        response = client.post("/api/departments", json={"name": "A"})
        body = response.get_json()

        assert response.status_code == 400
        assert body["message"] == "Validation failed"
        assert body["errors"][0]["field"] == "name"


class TestListDepartmentsRoute:
    def test_list_includes_pagination(self, client):
        for name in ("Sales", "Finance", "Engineering"):
            _create(client, name)

        response = client.get("/api/departments?page=1&limit=2")
        body = response.get_json()

        assert response.status_code == 200
        assert [d["name"] for d in body["data"]] == ["Engineering", "Finance"]
        assert body["pagination"]["totalPages"] == 2
        assert body["pagination"]["hasNextPage"] is True

    def test_limit_over_cap_uses_default(self, client):
        response = client.get("/api/departments?limit=150")
        assert response.get_json()["pagination"]["itemsPerPage"] == 10

    def test_non_numeric_page_returns_400(self, client):
        response = client.get("/api/departments?page=first")
        assert response.status_code == 400
        assert response.get_json()["message"] == "Query validation failed"


class TestDepartmentDetailRoutes:
    def test_get_missing_returns_404(self, client):
        response = client.get("/api/departments/999")
        assert response.status_code == 404
        assert response.get_json()["message"] == "Department not found"

    def test_update(self, client):
        department_id = _create(client).get_json()["data"]["id"]
        response = client.put(f"/api/departments/{department_id}", json={"name": "R&D"})

        assert response.status_code == 200
        assert response.get_json()["data"]["name"] == "R&D"

    def test_delete_blocked_by_employees(self, client):
        department_id = _create(client).get_json()["data"]["id"]
        client.post(
            "/api/employees",
            json={
                "name": "John Doe",
                "email": "john@company.com",
                "departmentId": department_id,
                "salary": 50000,
            },
        )

        response = client.delete(f"/api/departments/{department_id}")

        assert response.status_code == 400
        assert "associated employees" in response.get_json()["message"]
        assert client.get(f"/api/departments/{department_id}").status_code == 200

    def test_delete_empty_department(self, client):
        department_id = _create(client).get_json()["data"]["id"]

        assert client.delete(f"/api/departments/{department_id}").status_code == 200
        assert client.get(f"/api/departments/{department_id}").status_code == 404

    def test_department_employees(self, client):
        department_id = _create(client).get_json()["data"]["id"]
        client.post(
            "/api/employees",
            json={
                "name": "Jane Smith",
                "email": "jane@company.com",
                "departmentId": department_id,
                "salary": 80000,
            },
        )

        response = client.get(f"/api/departments/{department_id}/employees")
        employees = response.get_json()["data"]["employees"]

        assert response.status_code == 200
        assert [e["email"] for e in employees] == ["jane@company.com"]


class TestOutOfRangeQueries:
    def test_huge_page_returns_400(self, client):
        response = client.get("/api/departments?page=99999999999999999999")

        assert response.status_code == 400
        assert response.get_json()["errors"][0]["field"] == "page"

    def test_huge_path_id_returns_404(self, client):
        response = client.get("/api/departments/99999999999999999999/employees")
        assert response.status_code == 404
