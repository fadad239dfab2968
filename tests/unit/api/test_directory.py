"""
Tests for department, employee and project endpoints.
"""


class TestDepartments:

    def test_create_and_list(self, client):
        response = client.post("/api/v1/departments/", json={"name": "Design", "description": "UI"})
        assert response.status_code == 201
        created = response.json()

        listed = client.get("/api/v1/departments/").json()
        assert [d["id"] for d in listed] == [created["id"]]

    def test_duplicate_name_conflicts(self, client):
        client.post("/api/v1/departments/", json={"name": "Design"})
        response = client.post("/api/v1/departments/", json={"name": "Design"})
        assert response.status_code == 409

    def test_delete_detaches_employees(self, client, people):
        department_id = people["department"]["id"]

        assert client.delete(f"/api/v1/departments/{department_id}").status_code == 204
        assert client.get(f"/api/v1/departments/{department_id}").status_code == 404

        alice = client.get(f"/api/v1/employees/{people['alice']['id']}").json()
        assert alice["department_id"] is None

    def test_empty_update_is_rejected(self, client, people):
        response = client.patch(f"/api/v1/departments/{people['department']['id']}", json={})
        assert response.status_code == 400


class TestEmployees:

    def test_defaults(self, people):
        alice = people["alice"]
        assert alice["weekly_capacity"] == 40
        assert alice["is_active"] is True

    def test_duplicate_email_conflicts(self, client, people):
        response = client.post("/api/v1/employees/", json={
            "first_name": "Alicia",
            "last_name": "Smith",
            "email": "alice@example.com",
        })
        assert response.status_code == 409

    def test_invalid_payloads(self, client):
        assert client.post("/api/v1/employees/", json={
            "first_name": "No", "last_name": "Mail", "email": "not-an-email",
        }).status_code == 422
        assert client.post("/api/v1/employees/", json={
            "first_name": "Zero", "last_name": "Hours", "email": "zero@example.com", "weekly_capacity": 0,
        }).status_code == 422

    def test_unknown_department(self, client):
        response = client.post("/api/v1/employees/", json={
            "first_name": "Lost", "last_name": "Soul", "email": "lost@example.com", "department_id": "nope",
        })
        assert response.status_code == 404

    def test_filter_by_department(self, client, people):
        listed = client.get("/api/v1/employees/", params={"department_id": people["department"]["id"]}).json()
        assert [e["id"] for e in listed] == [people["alice"]["id"]]

    def test_update_capacity(self, client, people):
        response = client.patch(f"/api/v1/employees/{people['bob']['id']}", json={"weekly_capacity": 32})
        assert response.status_code == 200
        assert response.json()["weekly_capacity"] == 32

    def test_delete_deactivates(self, client, people):
        bob_id = people["bob"]["id"]
        assert client.delete(f"/api/v1/employees/{bob_id}").status_code == 204

        assert client.get(f"/api/v1/employees/{bob_id}").json()["is_active"] is False
        active = client.get("/api/v1/employees/").json()
        assert bob_id not in [e["id"] for e in active]
        everyone = client.get("/api/v1/employees/", params={"include_inactive": True}).json()
        assert bob_id in [e["id"] for e in everyone]

    def test_missing_employee(self, client):
        assert client.get("/api/v1/employees/missing").status_code == 404
        assert client.get("/api/v1/employees/missing/allocations").status_code == 404


class TestProjects:

    def test_create_defaults_to_planning(self, people):
        assert people["apollo"]["status"] == "planning"

    def test_date_range_validated(self, client, people):
        response = client.post("/api/v1/projects/", json={
            "name": "Backwards", "start_date": "2024-02-01", "end_date": "2024-01-01",
        })
        assert response.status_code == 422

        project_id = people["apollo"]["id"]
        client.patch(f"/api/v1/projects/{project_id}", json={"start_date": "2024-02-01"})
        response = client.patch(f"/api/v1/projects/{project_id}", json={"end_date": "2024-01-01"})
        assert response.status_code == 422

    def test_delete_cancels(self, client, people):
        project_id = people["gemini"]["id"]
        assert client.delete(f"/api/v1/projects/{project_id}").status_code == 204
        assert client.get(f"/api/v1/projects/{project_id}").json()["status"] == "cancelled"

        cancelled = client.get("/api/v1/projects/", params={"status": "cancelled"}).json()
        assert [p["id"] for p in cancelled] == [project_id]
