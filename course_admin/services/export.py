from datetime import datetime
from io import BytesIO
from typing import Iterable, Sequence, Tuple

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from course_admin.services.normalizer import CANONICAL_FIELDS, RowDiagnostic

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# header labels of the upload template, in column order
SAMPLE_HEADERS = {
    "dept": "Department",
    "semester": "Semester",
    "coursetype": "Course Type",
    "coursecode": "Course Code",
    "coursename": "Course Name",
    "coursenature": "Course Nature",
    "facultyid": "Faculty ID",
    "regulation": "Regulation",
    "degree": "Degree",
    "academicyear": "Academic Year",
    "hodapproval": "HOD Approval",
}

SAMPLE_ROWS = [
    ["CSE", "3", "Core", "CS101", "Data Structures", "Theory", "F001", "2021", "B.E", "2024-2025", ""],
    ["CSE", "3", "Core", "CS101", "Data Structures", "Lab", "F002", "2021", "B.E", "2024-2025", ""],
]

header_font = Font(bold=True, color="FFFFFF")
fill_header = PatternFill("solid", fgColor="1F4E79")
fill_error = PatternFill("solid", fgColor="FFE2C6")
center = Alignment(horizontal="center", vertical="center", wrap_text=True)
left = Alignment(horizontal="left", vertical="center", wrap_text=True)
thin = Side(style="thin", color="A6A6A6")
border = Border(left=thin, right=thin, top=thin, bottom=thin)


def _write_header(ws: Worksheet, headers: Sequence[str]):
    for col, h in enumerate(headers, start=1):
        cell = ws.cell(row=1, column=col, value=h)
        cell.fill = fill_header
        cell.font = header_font
        cell.alignment = center
        cell.border = border
        ws.column_dimensions[get_column_letter(col)].width = max(14, len(h) + 4)
    ws.freeze_panes = "A2"
    ws.auto_filter.ref = f"A1:{get_column_letter(len(headers))}1"


def _save(wb: Workbook) -> bytes:
    bio = BytesIO()
    wb.save(bio)
    bio.seek(0)
    return bio.getvalue()


def build_not_processed_workbook(diagnostics: Iterable[RowDiagnostic]) -> Tuple[bytes, str]:
    """
    Rows that failed an upload, with their original cells and the reason,
    so they can be fixed and uploaded again.
    Returns: (xlsx_bytes, filename)
    """
    diagnostics = list(diagnostics)

    # original headers in first-seen order
    columns: list[str] = []
    for d in diagnostics:
        for key in d.data:
            if key not in columns:
                columns.append(key)

    wb = Workbook()
    ws = wb.active
    ws.title = "Not Processed"

    headers = ["Row"] + columns + ["Error"]
    _write_header(ws, headers)
    ws.column_dimensions[get_column_letter(len(headers))].width = 48

    for r, d in enumerate(diagnostics, start=2):
        values = [d.row] + [d.data.get(c, "") for c in columns] + [d.error]
        for col, value in enumerate(values, start=1):
            cell = ws.cell(row=r, column=col, value=value)
            cell.border = border
            cell.alignment = left
        ws.cell(row=r, column=len(headers)).fill = fill_error

    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    return _save(wb), f"not_processed_courses_{ts}.xlsx"


def build_sample_workbook() -> Tuple[bytes, str]:
    wb = Workbook()
    ws = wb.active
    ws.title = "Courses"

    _write_header(ws, [SAMPLE_HEADERS[f] for f in CANONICAL_FIELDS])
    for r, row in enumerate(SAMPLE_ROWS, start=2):
        for col, value in enumerate(row, start=1):
            ws.cell(row=r, column=col, value=value).border = border

    return _save(wb), "sample_course_upload.xlsx"
