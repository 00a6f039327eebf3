from __future__ import annotations

import io

import pandas as pd
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from .content import DEPARTMENT_COLUMNS, ReportContent

STATISTICS_SHEET = "Statistics"
ATTENDANCE_SHEET = "Attendance"
DEPARTMENTS_SHEET = "Departments"

# Title and period sit above the statistics table.
STATS_START_ROW = 3

_HEADER_FILL = PatternFill(start_color="DDDDDD", end_color="DDDDDD", fill_type="solid")


def _style_header(ws, row: int, width: int) -> None:
    for col_idx in range(1, width + 1):
        cell = ws.cell(row=row, column=col_idx)
        cell.font = Font(bold=True)
        cell.fill = _HEADER_FILL


def _fit_columns(ws) -> None:
    for col_idx, column in enumerate(ws.iter_cols(), start=1):
        longest = max((len(str(c.value)) for c in column if c.value is not None), default=0)
        ws.column_dimensions[get_column_letter(col_idx)].width = max(longest + 2, 12)


def write_spreadsheet(content: ReportContent) -> bytes:
    stats_df = pd.DataFrame(list(content.stats), columns=["Metric", "Value"])
    table_df = pd.DataFrame(list(content.table), columns=list(content.columns))
    dept_df = pd.DataFrame(list(content.departments), columns=list(DEPARTMENT_COLUMNS))

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        stats_df.to_excel(writer, index=False, sheet_name=STATISTICS_SHEET, startrow=STATS_START_ROW)
        table_df.to_excel(writer, index=False, sheet_name=ATTENDANCE_SHEET)
        dept_df.to_excel(writer, index=False, sheet_name=DEPARTMENTS_SHEET)

        ws = writer.sheets[STATISTICS_SHEET]
        ws.merge_cells("A1:B1")
        ws["A1"] = content.title
        ws["A1"].font = Font(bold=True, size=14)
        ws["A1"].alignment = Alignment(horizontal="center", vertical="center")
        ws.merge_cells("A2:B2")
        ws["A2"] = content.period
        ws["A2"].font = Font(italic=True)
        _style_header(ws, STATS_START_ROW + 1, 2)

        _style_header(writer.sheets[ATTENDANCE_SHEET], 1, len(content.columns))
        _style_header(writer.sheets[DEPARTMENTS_SHEET], 1, len(DEPARTMENT_COLUMNS))
        for sheet in writer.sheets.values():
            _fit_columns(sheet)

    return output.getvalue()
