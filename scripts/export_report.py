"""Write an attendance report file for one actor's scope.

Example:
    python scripts/export_report.py --actor-id 1 --start 2025-04-01 --end 2025-04-30 --format spreadsheet
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from src.attendance_ledger.attendance_ledger.common.datetime_utils import DateRange
from src.attendance_ledger.attendance_ledger.core.enums import ReportFormat
from src.attendance_ledger.attendance_ledger.core.exceptions import DomainError
from src.attendance_ledger.attendance_ledger.main import create_container
from src.attendance_ledger.attendance_ledger.scope.resolver import Actor


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--actor-id", type=int, required=True, help="user id whose scope applies")
    parser.add_argument("--start", required=True, help="YYYY-MM-DD")
    parser.add_argument("--end", required=True, help="YYYY-MM-DD")
    parser.add_argument(
        "--format",
        default=ReportFormat.SPREADSHEET.value,
        choices=[f.value for f in ReportFormat],
    )
    parser.add_argument("--user-id", type=int, default=None)
    parser.add_argument("--dept-id", type=int, default=None)
    parser.add_argument("--out-dir", default=".", help="directory for the report file")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    container = create_container()

    try:
        user = container.users_repo.get_by_id(args.actor_id)
        if not user:
            print(f"error: user {args.actor_id} not found", file=sys.stderr)
            return 2
        report = container.report_service.export(
            Actor.from_user(user),
            DateRange.parse(args.start, args.end),
            args.format,
            user_id=args.user_id,
            dept_id=args.dept_id,
        )
    except DomainError as exc:
        print(f"error: {exc.code}: {exc.message}", file=sys.stderr)
        return 1

    target = Path(args.out_dir) / report.filename
    target.write_bytes(report.content)
    print(f"OK: wrote {target} ({len(report.content)} bytes)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
