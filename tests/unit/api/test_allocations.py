"""
Tests for /api/v1/allocations.
"""


def allocation_payload(people, hours, project="apollo", employee="alice",
                       start="2024-01-01", end="2024-01-05", **extra):
    data = {
        "employee_id": people[employee]["id"],
        "project_id": people[project]["id"],
        "start_date": start,
        "end_date": end,
        "allocated_hours": hours,
    }
    data.update(extra)
    return data


class TestCreateAllocation:

    def test_create_within_capacity(self, client, people):
        response = client.post("/api/v1/allocations/", json=allocation_payload(people, 30, role="Developer"))

        assert response.status_code == 201
        body = response.json()
        assert body["warning"] is None
        assert body["allocation"]["allocated_hours"] == 30
        assert body["allocation"]["status"] == "planned"
        assert body["allocation"]["role"] == "Developer"

    def test_over_allocation_answers_409_with_warning(self, client, people):
        client.post("/api/v1/allocations/", json=allocation_payload(people, 30))
        response = client.post("/api/v1/allocations/", json=allocation_payload(people, 15, project="gemini"))

        assert response.status_code == 409
        detail = response.json()["detail"]
        assert detail["error"] == "over_allocation"
        warning = detail["warning"]
        assert warning["total_hours"] == 45
        assert warning["overage"] == 5
        assert warning["utilization_rate"] == 112.5
        assert warning["severity"] == "warning"
        assert warning["week_start"] == "2024-01-01"
        assert [a["project_name"] for a in warning["allocations"]] == ["Apollo", "Gemini"]

        listed = client.get(f"/api/v1/employees/{people['alice']['id']}/allocations").json()
        assert len(listed) == 1

    def test_force_creates_and_reports_warning(self, client, people):
        client.post("/api/v1/allocations/", json=allocation_payload(people, 30))
        response = client.post(
            "/api/v1/allocations/",
            params={"force": True},
            json=allocation_payload(people, 50, project="gemini"),
        )

        assert response.status_code == 201
        assert response.json()["warning"]["severity"] == "critical"

        notifications = client.get("/api/v1/notifications/").json()
        assert len(notifications) == 1
        assert notifications[0]["employee_id"] == people["alice"]["id"]

    def test_invalid_payloads(self, client, people):
        backwards = allocation_payload(people, 10, start="2024-01-05", end="2024-01-01")
        assert client.post("/api/v1/allocations/", json=backwards).status_code == 422
        assert client.post("/api/v1/allocations/", json=allocation_payload(people, 0)).status_code == 422
        assert client.post("/api/v1/allocations/", json=allocation_payload(people, 81)).status_code == 422

    def test_unknown_project(self, client, people):
        payload = allocation_payload(people, 10)
        payload["project_id"] = "missing"

        response = client.post("/api/v1/allocations/", json=payload)

        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "not_found"


class TestCheckAllocation:

    def test_check_reports_conflict_without_writing(self, client, people):
        client.post("/api/v1/allocations/", json=allocation_payload(people, 30))
        request = {
            "employee_id": people["alice"]["id"],
            "start_date": "2024-01-01",
            "end_date": "2024-01-05",
            "allocated_hours": 50,
        }

        response = client.post("/api/v1/allocations/check", json=request)

        assert response.status_code == 200
        body = response.json()
        assert body["has_conflict"] is True
        assert body["warning"]["severity"] == "critical"
        assert body["warning"]["allocations"][-1]["project_name"] == "Proposed allocation"
        assert len(client.get("/api/v1/allocations/").json()) == 1

    def test_check_excluding_edited_allocation(self, client, people):
        created = client.post("/api/v1/allocations/", json=allocation_payload(people, 30)).json()
        request = {
            "employee_id": people["alice"]["id"],
            "start_date": "2024-01-01",
            "end_date": "2024-01-05",
            "allocated_hours": 40,
            "exclude_allocation_id": created["allocation"]["id"],
        }

        body = client.post("/api/v1/allocations/check", json=request).json()

        assert body == {"has_conflict": False, "warning": None}


class TestUpdateAndLifecycle:

    def test_update_counts_other_allocations_only(self, client, people):
        first = client.post("/api/v1/allocations/", json=allocation_payload(people, 30)).json()["allocation"]
        client.post("/api/v1/allocations/", json=allocation_payload(people, 10, project="gemini"))

        response = client.patch(f"/api/v1/allocations/{first['id']}", json={"allocated_hours": 35})
        assert response.status_code == 409

        response = client.patch(
            f"/api/v1/allocations/{first['id']}",
            params={"force": True},
            json={"allocated_hours": 35},
        )
        assert response.status_code == 200
        assert response.json()["allocation"]["allocated_hours"] == 35
        assert response.json()["warning"]["total_hours"] == 45

    def test_status_transitions(self, client, people):
        created = client.post("/api/v1/allocations/", json=allocation_payload(people, 30)).json()
        url = f"/api/v1/allocations/{created['allocation']['id']}/status"

        assert client.post(url, json={"status": "active"}).json()["status"] == "active"

        response = client.post(url, json={"status": "planned"})
        assert response.status_code == 409
        assert response.json()["detail"]["error"] == "invalid_transition"

        assert client.post(url, json={"status": "paused"}).status_code == 422

    def test_delete_cancels_and_frees_capacity(self, client, people):
        created = client.post("/api/v1/allocations/", json=allocation_payload(people, 30)).json()
        allocation_id = created["allocation"]["id"]

        response = client.delete(f"/api/v1/allocations/{allocation_id}")
        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"

        assert client.get(f"/api/v1/allocations/{allocation_id}").json()["status"] == "cancelled"
        assert client.patch(f"/api/v1/allocations/{allocation_id}", json={"notes": "x"}).status_code == 409

        response = client.post("/api/v1/allocations/", json=allocation_payload(people, 40, project="gemini"))
        assert response.status_code == 201

    def test_missing_allocation(self, client):
        assert client.get("/api/v1/allocations/missing").status_code == 404
        assert client.delete("/api/v1/allocations/missing").status_code == 404
        assert client.patch("/api/v1/allocations/missing", json={"notes": "x"}).status_code == 404


def test_list_filters(client, people):
    client.post("/api/v1/allocations/", json=allocation_payload(people, 10))
    client.post("/api/v1/allocations/", json=allocation_payload(
        people, 10, employee="bob", project="gemini", start="2024-03-04", end="2024-03-08",
    ))

    by_project = client.get("/api/v1/allocations/", params={"project_id": people["gemini"]["id"]}).json()
    assert [a["employee_id"] for a in by_project] == [people["bob"]["id"]]

    in_january = client.get(
        "/api/v1/allocations/", params={"date_from": "2024-01-01", "date_to": "2024-01-31"}
    ).json()
    assert [a["employee_id"] for a in in_january] == [people["alice"]["id"]]

    response = client.get("/api/v1/allocations/", params={"date_from": "2024-02-01", "date_to": "2024-01-01"})
    assert response.status_code == 422
