from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Sequence

from ...common.datetime_utils import DateRange
from ...common.validators import require_enum
from ...core.constants import DEFAULT_REPORT_NAME
from ...core.enums import ReportFormat
from ..model import StatisticsSnapshot
from .content import REPORT_TITLE, ReportContent, build_content
from .delimited import write_delimited
from .document import write_document
from .spreadsheet import write_spreadsheet

logger = logging.getLogger(__name__)

_WRITERS: dict[ReportFormat, Callable[[ReportContent], bytes]] = {
    ReportFormat.DOCUMENT: write_document,
    ReportFormat.SPREADSHEET: write_spreadsheet,
    ReportFormat.DELIMITED_TEXT: write_delimited,
}


@dataclass(frozen=True)
class RenderedReport:
    filename: str
    content_type: str
    content: bytes


def report_filename(report_name: str, date_range: DateRange, fmt: ReportFormat) -> str:
    return f"{report_name}-{date_range.start.isoformat()}-{date_range.end.isoformat()}.{fmt.extension}"


class ReportRenderer:
    def __init__(self, *, report_name: str = DEFAULT_REPORT_NAME, title: str = REPORT_TITLE):
        self._report_name = report_name
        self._title = title

    def render(
        self,
        snapshot: StatisticsSnapshot,
        rows: Sequence,
        fmt: ReportFormat | str,
        date_range: DateRange,
        *,
        report_name: str | None = None,
    ) -> RenderedReport:
        fmt = require_enum(fmt, ReportFormat, "Format")
        content = build_content(snapshot, rows, date_range, title=self._title)
        payload = _WRITERS[fmt](content)
        filename = report_filename(report_name or self._report_name, date_range, fmt)
        logger.info("Rendered %s (%d rows, %d bytes)", filename, len(content.table), len(payload))
        return RenderedReport(filename=filename, content_type=fmt.content_type, content=payload)
