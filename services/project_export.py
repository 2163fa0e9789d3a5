# services/project_export.py

from io import BytesIO
from typing import Iterable, List, Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from models.project import DATE_FIELDS, mappable_field_paths
from services.comparison import to_datetime


def _lookup(project: dict, path: str):
    value = project
    for part in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def _cell_value(value, path: str):
    if value is None:
        return None
    if path in DATE_FIELDS:
        parsed = to_datetime(value)
        # Excel has no timezone support
        return parsed.replace(tzinfo=None) if parsed else str(value)
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value if v is not None)
    if isinstance(value, dict):
        return str(value)
    return value


def export_projects_workbook(projects: Iterable[dict], field_paths: Optional[List[str]] = None) -> BytesIO:
    """
    Write projects to a styled XLSX workbook and return it as BytesIO.
    Column headers are the import field paths, so the file can be edited
    and uploaded again.
    """
    headers = list(field_paths) if field_paths is not None else mappable_field_paths()

    wb = Workbook()
    ws = wb.active
    ws.title = "Projects"

    ws.append(headers)
    for project in projects:
        ws.append([_cell_value(_lookup(project, path), path) for path in headers])

    header_font = Font(bold=True)
    header_fill = PatternFill("solid", fgColor="E5E7EB")
    header_border = Border(bottom=Side(style="thin", color="CCCCCC"))

    for col_idx in range(1, len(headers) + 1):
        cell = ws.cell(row=1, column=col_idx)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = Alignment(vertical="center")
        cell.border = header_border

    ws.freeze_panes = "A2"
    ws.auto_filter.ref = ws.dimensions

    max_len = {i: len(h) for i, h in enumerate(headers, start=1)}
    for row in ws.iter_rows(min_row=2, values_only=True):
        for i, val in enumerate(row, start=1):
            length = len(str(val)) if val is not None else 0
            if length > max_len.get(i, 0):
                max_len[i] = length

    for i, length in max_len.items():
        ws.column_dimensions[get_column_letter(i)].width = min(max(length + 2, 10), 50)

    for col_idx, path in enumerate(headers, start=1):
        if path in DATE_FIELDS:
            for row_idx in range(2, ws.max_row + 1):
                ws.cell(row=row_idx, column=col_idx).number_format = "yyyy-mm-dd hh:mm"

    buf = BytesIO()
    wb.save(buf)
    buf.seek(0)
    return buf
