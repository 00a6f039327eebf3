from __future__ import annotations

import csv
import io

from .content import DEPARTMENT_COLUMNS, ReportContent

DELIMITER = ";"
DEPARTMENTS_HEADING = "Departments"


def write_delimited(content: ReportContent) -> bytes:
    """Semicolon-separated text, UTF-8 with BOM so spreadsheet apps detect it.

    Layout: header block, statistics block, attendance table, department
    recap; blocks are separated by a blank line.
    """
    out = io.StringIO()
    writer = csv.writer(out, delimiter=DELIMITER, lineterminator="\r\n")

    writer.writerow([content.title])
    writer.writerow([content.period])
    writer.writerow([])

    writer.writerow(["Statistics", ""])
    for label, value in content.stats:
        writer.writerow([label, value])
    writer.writerow([])

    writer.writerow(content.columns)
    writer.writerows(content.table)
    writer.writerow([])

    writer.writerow([DEPARTMENTS_HEADING])
    writer.writerow(DEPARTMENT_COLUMNS)
    writer.writerows(content.departments)

    return out.getvalue().encode("utf-8-sig")
