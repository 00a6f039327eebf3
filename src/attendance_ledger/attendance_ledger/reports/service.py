from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import DateRange
from ..core.enums import GroupBy, ReportFormat
from ..core.exceptions import StorageError
from ..leave.repository import LeaveRepository
from ..scope.resolver import Actor, ScopeResolver
from ..users.department_repository import DepartmentRepository
from .aggregation import AggregationEngine
from .export.renderer import RenderedReport, ReportRenderer
from .model import LeaveSummary, ReportData, TaskStats

logger = logging.getLogger(__name__)


class ReportService:
    """Scoped report queries: fetch rows, aggregate, optionally render."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        leaves: LeaveRepository,
        *,
        departments: Optional[DepartmentRepository] = None,
        scope: Optional[ScopeResolver] = None,
        engine: Optional[AggregationEngine] = None,
        renderer: Optional[ReportRenderer] = None,
    ):
        self._attendance = attendance
        self._leaves = leaves
        self._departments = departments
        self._scope = scope or ScopeResolver()
        self._engine = engine or AggregationEngine()
        self._renderer = renderer or ReportRenderer()

    def build_report(
        self,
        actor: Actor,
        date_range: DateRange,
        *,
        user_id: Optional[int] = None,
        dept_id: Optional[int] = None,
        group_by: Optional[GroupBy] = None,
        headcount: Optional[int] = None,
        tasks: Optional[TaskStats] = None,
    ) -> ReportData:
        date_range.validate()
        visible = self._scope.scope_for(actor)
        narrowing = self._scope.query_filter(actor)
        if narrowing.deny_all:
            logger.warning("Actor %s has no reporting scope; returning empty report", actor.user_id)
            empty = self._engine.aggregate([], date_range, group_by, headcount=headcount)
            return ReportData(rows=[], snapshot=empty, leave_summary=LeaveSummary())

        # Caller filters narrow inside the actor's scope, never widen it.
        query = dict(
            dept_id=dept_id if dept_id is not None else narrowing.dept_id,
            user_id=user_id if user_id is not None else narrowing.user_id,
            exclude_user_id=narrowing.exclude_user_id,
        )

        try:
            rows = self._attendance.get_report_rows(
                start_date=date_range.start, end_date=date_range.end, **query
            )
            leave_rows = self._leaves.list_requests(
                start_date=date_range.start, end_date=date_range.end, **query
            )
            scope_label = self._scope_label(dept_id)
        except StorageError:
            logger.exception(
                "Report query failed actor=%s range=%s..%s; returning empty snapshot",
                actor.user_id, date_range.start, date_range.end,
            )
            empty = self._engine.aggregate([], date_range, group_by, headcount=headcount)
            return ReportData(rows=[], snapshot=replace(empty, degraded=True), leave_summary=LeaveSummary())

        rows = [r for r in rows if visible(r)]
        leave_rows = [r for r in leave_rows if visible(r)]

        snapshot = self._engine.aggregate(rows, date_range, group_by, headcount=headcount, tasks=tasks)
        return ReportData(
            rows=rows,
            snapshot=snapshot,
            leave_summary=self._engine.summarize_leave(leave_rows, date_range),
            scope_label=scope_label,
        )

    def export(
        self,
        actor: Actor,
        date_range: DateRange,
        fmt: ReportFormat | str,
        *,
        user_id: Optional[int] = None,
        dept_id: Optional[int] = None,
    ) -> RenderedReport:
        data = self.build_report(
            actor, date_range, user_id=user_id, dept_id=dept_id, group_by=GroupBy.DEPARTMENT
        )
        return self._renderer.render(data.snapshot, data.rows, fmt, date_range)

    def _scope_label(self, dept_id: Optional[int]) -> Optional[str]:
        if dept_id is None or self._departments is None:
            return None
        dept = self._departments.get_by_id(dept_id)
        return dept.dept_name if dept else None
