"""Example: drive the service layer directly (no transport layer)."""

from datetime import date

from src.attendance_ledger.attendance_ledger.common.datetime_utils import DateRange
from src.attendance_ledger.attendance_ledger.core.enums import GroupBy
from src.attendance_ledger.attendance_ledger.main import create_container
from src.attendance_ledger.attendance_ledger.scope.resolver import Actor


def main():
    container = create_container()

    print(container.attendance_service.get_history_ui(user_id=1, limit=5))
    print("remaining annual leave:", container.leave_service.remaining_allowance(1, date.today().year))

    admin = container.users_repo.get_by_id(1)
    today = date.today()
    report = container.report_service.build_report(
        Actor.from_user(admin),
        DateRange(today.replace(day=1), today),
        group_by=GroupBy.DEPARTMENT,
    )
    print(report.snapshot)


if __name__ == "__main__":
    main()
