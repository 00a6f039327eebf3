from __future__ import annotations

import io

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .content import DEPARTMENT_COLUMNS, ReportContent

PAGE_SIZE = landscape(A4)

_GRID = colors.HexColor("#BBBBBB")
_HEADER_BG = colors.HexColor("#DDDDDD")
_STATS_BG = colors.HexColor("#F3F3F3")


class _NumberedCanvas(canvas.Canvas):
    """Defers page output until the total page count is known ("Page X of Y")."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._page_states: list[dict] = []

    def showPage(self):
        self._page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total = len(self._page_states)
        for state in self._page_states:
            self.__dict__.update(state)
            self._draw_footer(total)
            super().showPage()
        super().save()

    def _draw_footer(self, total: int) -> None:
        self.setFont("Helvetica", 8)
        self.drawRightString(PAGE_SIZE[0] - 15 * mm, 10 * mm, f"Page {self._pageNumber} of {total}")


def stats_table(content: ReportContent) -> Table:
    table = Table([list(pair) for pair in content.stats], colWidths=[45 * mm, 40 * mm], hAlign="LEFT")
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, -1), _STATS_BG),
                ("BOX", (0, 0), (-1, -1), 0.5, _GRID),
                ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
            ]
        )
    )
    return table


def _grid_table(header, body) -> Table:
    data = [list(header)] + [list(row) for row in body]
    table = Table(data, repeatRows=1, hAlign="LEFT")
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), _HEADER_BG),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 8),
                ("GRID", (0, 0), (-1, -1), 0.25, _GRID),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ]
        )
    )
    return table


def rows_table(content: ReportContent) -> Table:
    return _grid_table(content.columns, content.table)


def departments_table(content: ReportContent) -> Table:
    return _grid_table(DEPARTMENT_COLUMNS, content.departments)


def build_story(content: ReportContent) -> list:
    styles = getSampleStyleSheet()
    return [
        Paragraph(content.title, styles["Title"]),
        Paragraph(content.period, styles["Normal"]),
        Spacer(1, 6 * mm),
        stats_table(content),
        Spacer(1, 6 * mm),
        rows_table(content),
        Spacer(1, 6 * mm),
        Paragraph("Departments", styles["Heading2"]),
        departments_table(content),
    ]


def write_document(content: ReportContent) -> bytes:
    output = io.BytesIO()
    doc = SimpleDocTemplate(
        output,
        pagesize=PAGE_SIZE,
        leftMargin=15 * mm,
        rightMargin=15 * mm,
        topMargin=15 * mm,
        bottomMargin=18 * mm,
        title=content.title,
    )
    doc.build(build_story(content), canvasmaker=_NumberedCanvas)
    return output.getvalue()
