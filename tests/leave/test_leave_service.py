from __future__ import annotations

from datetime import date, datetime

import pytest

from src.attendance_ledger.attendance_ledger.core.enums import LeaveDecision, LeaveType, RequestStatus, Role
from src.attendance_ledger.attendance_ledger.core.exceptions import (
    AlreadyDecidedError,
    AuthorizationError,
    ForbiddenDepartmentError,
    NotFoundError,
    OverlappingLeaveError,
    ValidationError,
)
from src.attendance_ledger.attendance_ledger.leave.service import LeaveService
from src.attendance_ledger.attendance_ledger.scope.resolver import Actor

ADMIN = Actor(user_id=1, role=Role.ADMIN, dept_id=1)
MANAGER_5 = Actor(user_id=2, role=Role.MANAGER, dept_id=5)
MANAGER_7 = Actor(user_id=5, role=Role.MANAGER, dept_id=7)
EMPLOYEE_5 = Actor(user_id=3, role=Role.EMPLOYEE, dept_id=5)
UNASSIGNED_MANAGER = Actor(user_id=8, role=Role.MANAGER, dept_id=None)


@pytest.fixture
def service(leave_repo, users):
    return LeaveService(leave_repo, users)


def _submit(service, user_id, start, end, leave_type=LeaveType.ANNUAL, now=None):
    return service.submit(user_id, leave_type, start, end, "Family trip", now=now or datetime(2025, 3, 1, 9, 0))


def test_submit_creates_pending_request(service):
    req = _submit(service, 3, date(2025, 4, 1), date(2025, 4, 3))

    assert req.status == RequestStatus.PENDING
    assert req.duration_days == 3
    assert req.approved_by is None and req.approved_at is None


def test_submit_accepts_leave_type_string(service):
    req = service.submit(3, "Sick", date(2025, 4, 1), date(2025, 4, 1), "flu")

    assert req.leave_type == LeaveType.SICK


@pytest.mark.parametrize(
    "leave_type,start,end,reason",
    [
        (LeaveType.ANNUAL, date(2025, 4, 3), date(2025, 4, 1), "trip"),
        (LeaveType.ANNUAL, date(2025, 4, 1), date(2025, 4, 2), "   "),
        ("sabbatical", date(2025, 4, 1), date(2025, 4, 2), "trip"),
    ],
)
def test_submit_validation(service, leave_type, start, end, reason):
    with pytest.raises(ValidationError):
        service.submit(3, leave_type, start, end, reason)


def test_submit_unknown_user(service):
    with pytest.raises(NotFoundError):
        _submit(service, 999, date(2025, 4, 1), date(2025, 4, 1))


def test_overlapping_request_is_rejected(service, leave_repo):
    first = _submit(service, 3, date(2025, 4, 1), date(2025, 4, 3))

    with pytest.raises(OverlappingLeaveError) as exc_info:
        _submit(service, 3, date(2025, 4, 3), date(2025, 4, 5))

    assert exc_info.value.conflicting.request_id == first.request_id
    assert len(leave_repo.requests) == 1


def test_adjacent_and_other_users_do_not_overlap(service):
    _submit(service, 3, date(2025, 4, 1), date(2025, 4, 3))

    _submit(service, 3, date(2025, 4, 4), date(2025, 4, 5))
    _submit(service, 4, date(2025, 4, 1), date(2025, 4, 3))


def test_rejected_request_frees_the_days(service):
    first = _submit(service, 3, date(2025, 4, 1), date(2025, 4, 3))
    service.decide(first.request_id, MANAGER_5, LeaveDecision.REJECT)

    again = _submit(service, 3, date(2025, 4, 2), date(2025, 4, 2))

    assert again.status == RequestStatus.PENDING


def test_manager_approves_own_department(service, leave_repo):
    req = _submit(service, 3, date(2025, 4, 1), date(2025, 4, 3))
    now = datetime(2025, 3, 2, 10, 0)

    decided = service.decide(req.request_id, MANAGER_5, "approve", now=now)

    assert decided.status == RequestStatus.APPROVED
    assert decided.approved_by == 2 and decided.approved_at == now
    assert leave_repo.requests[req.request_id].status == RequestStatus.APPROVED


def test_manager_of_other_department_is_forbidden(service, leave_repo):
    req = _submit(service, 4, date(2025, 4, 1), date(2025, 4, 1))

    with pytest.raises(ForbiddenDepartmentError) as exc_info:
        service.decide(req.request_id, MANAGER_5, LeaveDecision.APPROVE)

    assert "5" in exc_info.value.message and "7" in exc_info.value.message
    assert leave_repo.requests[req.request_id].status == RequestStatus.PENDING


def test_manager_without_department_cannot_decide_unassigned_request(service, leave_repo):
    req = _submit(service, 7, date(2025, 4, 1), date(2025, 4, 1))

    with pytest.raises(ForbiddenDepartmentError):
        service.decide(req.request_id, UNASSIGNED_MANAGER, LeaveDecision.APPROVE)

    assert leave_repo.requests[req.request_id].status == RequestStatus.PENDING


def test_employee_cannot_decide(service):
    req = _submit(service, 3, date(2025, 4, 1), date(2025, 4, 1))

    with pytest.raises(AuthorizationError):
        service.decide(req.request_id, EMPLOYEE_5, LeaveDecision.APPROVE)


def test_manager_cannot_decide_own_request(service):
    req = _submit(service, 2, date(2025, 4, 1), date(2025, 4, 1))

    with pytest.raises(AuthorizationError) as exc_info:
        service.decide(req.request_id, MANAGER_5, LeaveDecision.APPROVE)

    assert not isinstance(exc_info.value, ForbiddenDepartmentError)


def test_admin_decides_any_department(service):
    req = _submit(service, 4, date(2025, 4, 1), date(2025, 4, 1))

    assert service.decide(req.request_id, ADMIN, LeaveDecision.REJECT).status == RequestStatus.REJECTED


def test_second_decision_always_fails(service, leave_repo):
    req = _submit(service, 4, date(2025, 4, 1), date(2025, 4, 1))
    service.decide(req.request_id, MANAGER_7, LeaveDecision.APPROVE)

    with pytest.raises(AlreadyDecidedError):
        service.decide(req.request_id, MANAGER_7, LeaveDecision.REJECT)
    with pytest.raises(AlreadyDecidedError):
        service.decide(req.request_id, ADMIN, LeaveDecision.APPROVE)

    assert leave_repo.requests[req.request_id].status == RequestStatus.APPROVED


def test_lost_decision_race_is_already_decided(service, leave_repo):
    req = _submit(service, 3, date(2025, 4, 1), date(2025, 4, 1))
    leave_repo.decide_leave = lambda **kwargs: False

    with pytest.raises(AlreadyDecidedError):
        service.decide(req.request_id, ADMIN, LeaveDecision.APPROVE)


def test_decide_missing_request(service):
    with pytest.raises(NotFoundError):
        service.decide(404, ADMIN, LeaveDecision.APPROVE)


def test_remaining_allowance_counts_approved_annual_in_year(service):
    annual = _submit(service, 3, date(2025, 4, 1), date(2025, 4, 3))
    sick = _submit(service, 3, date(2025, 5, 1), date(2025, 5, 2), leave_type=LeaveType.SICK)
    _submit(service, 3, date(2025, 6, 1), date(2025, 6, 5))  # stays pending
    last_year = _submit(service, 3, date(2024, 12, 30), date(2025, 1, 2))
    for req in (annual, sick, last_year):
        service.decide(req.request_id, ADMIN, LeaveDecision.APPROVE)

    assert service.remaining_allowance(3, 2025) == 12 - 3
    assert service.remaining_allowance(3, 2024) == 12 - 4


def test_remaining_allowance_can_go_negative(service):
    req = _submit(service, 3, date(2025, 7, 1), date(2025, 7, 20))
    service.decide(req.request_id, ADMIN, LeaveDecision.APPROVE)

    assert service.remaining_allowance(3, 2025) == -8


def test_list_pending_is_scoped(service):
    _submit(service, 3, date(2025, 4, 1), date(2025, 4, 1))
    _submit(service, 2, date(2025, 4, 1), date(2025, 4, 1))
    _submit(service, 4, date(2025, 4, 1), date(2025, 4, 1))

    assert [r.user_id for r in service.list_pending(MANAGER_5)] == [3]
    assert sorted(r.user_id for r in service.list_pending(ADMIN)) == [2, 3, 4]
    assert [r.user_id for r in service.list_pending(EMPLOYEE_5)] == [3]


def test_list_pending_is_empty_for_manager_without_department(service):
    _submit(service, 7, date(2025, 4, 1), date(2025, 4, 1))

    assert service.list_pending(UNASSIGNED_MANAGER) == []


def test_labels():
    assert LeaveService.leave_type_label(LeaveType.URGENT) == "Urgent leave"
    assert LeaveService.status_label(RequestStatus.PENDING) == "Pending"
