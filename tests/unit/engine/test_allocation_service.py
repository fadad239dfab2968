"""
Tests for AllocationService against an in-memory SQLite session.
"""

import pytest
from datetime import date

from resourcehub.engine.allocation_service import AllocationService
from resourcehub.engine.notification_service import NotificationService
from resourcehub.engine.overallocation import OverAllocationSeverity, OverAllocationWarning
from resourcehub.engine.result import Err, ErrorKind, Ok
from resourcehub.platform.config import Settings
from resourcehub.storage.models import AllocationModel, EmployeeModel, ProjectModel
from resourcehub.storage.repositories import (
    AllocationRepository,
    EmployeeRepository,
    NotificationRepository,
    ProjectRepository,
)

MON = date(2024, 1, 1)
FRI = date(2024, 1, 5)


@pytest.fixture
def service():
    settings = Settings(NOTIFY_ON_FORCED_OVER_ALLOCATION=True)
    return AllocationService(
        employee_repo=EmployeeRepository(),
        project_repo=ProjectRepository(),
        allocation_repo=AllocationRepository(),
        notification_service=NotificationService(NotificationRepository()),
        settings=settings,
    )


@pytest.fixture
def seeded(session):
    employees = EmployeeRepository()
    employees.create(session, EmployeeModel(
        id="emp-1", first_name="Alice", last_name="Smith", email="alice@example.com",
    ))
    employees.create(session, EmployeeModel(
        id="emp-2", first_name="Old", last_name="Timer", email="old@example.com", is_active=False,
    ))
    ProjectRepository().create(session, ProjectModel(id="proj-1", name="Apollo"))
    ProjectRepository().create(session, ProjectModel(id="proj-2", name="Gemini"))
    return session


def payload(hours, project_id="proj-1", start=MON, end=FRI, employee_id="emp-1", **extra):
    data = {
        "employee_id": employee_id,
        "project_id": project_id,
        "start_date": start,
        "end_date": end,
        "allocated_hours": hours,
    }
    data.update(extra)
    return data


class TestCreate:

    def test_creates_allocation_within_capacity(self, service, seeded):
        result = service.create(seeded, payload(30))

        assert isinstance(result, Ok)
        outcome = result.unwrap()
        assert outcome.warning is None
        assert outcome.allocation.status == "planned"
        assert AllocationRepository().get(seeded, outcome.allocation.id) is not None

    def test_rejects_over_allocation_without_force(self, service, seeded):
        service.create(seeded, payload(30))
        result = service.create(seeded, payload(15, project_id="proj-2"))

        assert isinstance(result, Err)
        assert result.kind == ErrorKind.OVER_ALLOCATION
        warning = result.detail
        assert isinstance(warning, OverAllocationWarning)
        assert warning.total_hours == 45
        assert warning.overage == 5
        assert [a.project_name for a in warning.allocations] == ["Apollo", "Gemini"]
        assert len(AllocationRepository().search(seeded, employee_id="emp-1")) == 1

    def test_force_creates_and_notifies(self, service, seeded):
        first = service.create(seeded, payload(30)).unwrap().allocation
        result = service.create(seeded, payload(50, project_id="proj-2"), force=True)

        outcome = result.unwrap()
        assert outcome.warning.severity == OverAllocationSeverity.CRITICAL

        notifications = NotificationRepository().list(seeded)
        assert len(notifications) == 1
        assert notifications[0].type == "over_allocation"
        assert notifications[0].severity == "critical"
        assert notifications[0].employee_id == "emp-1"
        assert notifications[0].data["overage"] == 40
        assert notifications[0].data["allocation_ids"] == [first.id]

    def test_unknown_employee_and_project(self, service, seeded):
        assert service.create(seeded, payload(10, employee_id="nobody")).kind == ErrorKind.NOT_FOUND
        assert service.create(seeded, payload(10, project_id="nothing")).kind == ErrorKind.NOT_FOUND

    def test_inactive_employee_is_rejected(self, service, seeded):
        result = service.create(seeded, payload(10, employee_id="emp-2"))
        assert result.kind == ErrorKind.VALIDATION

    @pytest.mark.parametrize("data", [
        payload(10, start=FRI, end=MON),
        payload(0),
        payload(81),
        payload(10, status="cancelled"),
        payload(10, status="paused"),
    ])
    def test_validation_errors(self, service, seeded, data):
        result = service.create(seeded, data)
        assert isinstance(result, Err)
        assert result.kind == ErrorKind.VALIDATION


class TestUpdateAndLifecycle:

    def test_update_excludes_own_hours(self, service, seeded):
        allocation = service.create(seeded, payload(30)).unwrap().allocation

        result = service.update(seeded, allocation.id, {"allocated_hours": 40})

        assert isinstance(result, Ok)
        assert result.unwrap().allocation.allocated_hours == 40

    def test_update_detects_conflict_with_other_allocations(self, service, seeded):
        service.create(seeded, payload(20))
        second = service.create(seeded, payload(10, project_id="proj-2")).unwrap().allocation

        result = service.update(seeded, second.id, {"allocated_hours": 25})

        assert result.kind == ErrorKind.OVER_ALLOCATION
        assert result.detail.total_hours == 45
        assert AllocationRepository().get(seeded, second.id).allocated_hours == 10

    def test_update_missing_allocation(self, service, seeded):
        assert service.update(seeded, "missing", {"allocated_hours": 5}).kind == ErrorKind.NOT_FOUND

    def test_cancelled_allocation_cannot_be_edited(self, service, seeded):
        allocation = service.create(seeded, payload(30)).unwrap().allocation
        service.cancel(seeded, allocation.id)

        result = service.update(seeded, allocation.id, {"allocated_hours": 10})
        assert result.kind == ErrorKind.CONFLICT

    def test_transitions_follow_lifecycle(self, service, seeded):
        allocation = service.create(seeded, payload(30)).unwrap().allocation

        assert service.transition(seeded, allocation.id, "active").unwrap().status == "active"
        assert service.transition(seeded, allocation.id, "planned").kind == ErrorKind.INVALID_TRANSITION
        assert service.transition(seeded, allocation.id, "completed").unwrap().status == "completed"
        assert service.cancel(seeded, allocation.id).kind == ErrorKind.INVALID_TRANSITION
        assert service.transition(seeded, "missing", "active").kind == ErrorKind.NOT_FOUND

    def test_cancelled_hours_free_capacity(self, service, seeded):
        allocation = service.create(seeded, payload(30)).unwrap().allocation
        assert service.check(seeded, "emp-1", MON, FRI, 15) is not None

        service.cancel(seeded, allocation.id)

        assert service.check(seeded, "emp-1", MON, FRI, 15) is None


def test_all_conflicts_lists_forced_over_allocations(service, seeded):
    service.create(seeded, payload(30))
    service.create(seeded, payload(20, project_id="proj-2"), force=True)
    service.create(seeded, payload(20, start=date(2024, 2, 5), end=date(2024, 2, 9)))

    conflicts = service.all_conflicts(seeded)

    assert len(conflicts) == 1
    assert conflicts[0].week_start == MON
    assert conflicts[0].total_hours == 50
    assert service.all_conflicts(seeded, date(2024, 2, 1), date(2024, 2, 29)) == []


def test_all_conflicts_totals_weeks_straddling_the_window(service, seeded):
    service.create(seeded, payload(30, end=date(2024, 1, 2)))
    service.create(seeded, payload(20, project_id="proj-2", start=date(2024, 1, 3)), force=True)

    conflicts = service.all_conflicts(seeded, date(2024, 1, 3), FRI)

    assert [c.week_start for c in conflicts] == [MON]
    assert conflicts[0].total_hours == 50
    assert {a.allocated_hours for a in conflicts[0].allocations} == {30, 20}


def test_all_conflicts_skips_inactive_employees(service, seeded):
    AllocationRepository().create(seeded, AllocationModel(
        id="old-1", employee_id="emp-2", project_id="proj-1",
        start_date=MON, end_date=FRI, allocated_hours=60,
    ))

    assert service.all_conflicts(seeded) == []


def test_check_unknown_employee_returns_none(service, seeded):
    assert service.check(seeded, "nobody", MON, FRI, 80) is None
