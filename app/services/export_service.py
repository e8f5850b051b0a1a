"""
Export service: write employee lists to CSV, PDF or Excel files.

``export_employees`` writes one file into the export directory and
returns its path.  ``load_export_file`` then pulls it into memory and
removes it, so nothing is left in the export directory once the
response is built.

The PDF layout uses top-down coordinates (y grows down the page) on a
US Letter page and starts a new page once the row cursor passes
``_PDF_PAGE_BREAK_Y``.  ``layout_pdf_rows`` computes those positions
without touching ReportLab so the page-break rule can be checked on
its own.
"""

import csv
import io
import logging
import os
import time
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Iterable, Sequence

from flask import current_app
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from reportlab.lib.pagesizes import LETTER
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas
from werkzeug.utils import secure_filename

from app.errors import UnsupportedFormatError
from app.models.organization import Employee

logger = logging.getLogger(__name__)

_NOT_AVAILABLE = "N/A"

_CSV_HEADERS = [
    "ID",
    "Name",
    "Email",
    "Salary",
    "Department",
    "Created At",
    "Updated At",
]

_MIMETYPES = {
    "csv": "text/csv",
    "pdf": "application/pdf",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}

# Excel header styling constants.
_HEADER_FONT = Font(bold=True, color="FFFFFF")
_HEADER_FILL = PatternFill(start_color="2B579A", end_color="2B579A", fill_type="solid")
_HEADER_ALIGN = Alignment(horizontal="center", wrap_text=True)
_CURRENCY_FORMAT = "#,##0.00"

# PDF layout, in points from the top-left corner.
_PDF_PAGE_WIDTH, _PDF_PAGE_HEIGHT = LETTER
_PDF_FONT = "Helvetica"
_PDF_COLUMNS = (
    ("ID", 50),
    ("Name", 100),
    ("Email", 200),
    ("Salary", 300),
    ("Department", 400),
)
_PDF_RIGHT_EDGE = 550
_PDF_HEADER_Y = 130
_PDF_SEPARATOR_Y = 150
_PDF_FIRST_ROW_Y = 160
_PDF_ROW_HEIGHT = 15
_PDF_TOP_MARGIN = 50
_PDF_PAGE_BREAK_Y = 750
_PDF_BODY_SIZE = 10


@dataclass(frozen=True)
class ExportOptions:
    """Per-request export settings."""

    format: str
    filename: str | None = None
    department_id: int | None = None


@dataclass(frozen=True)
class PdfRowPosition:
    """Where one employee row lands in the PDF."""

    page: int
    y: float
    starts_page: bool


def ensure_supported_format(fmt: str | None) -> str:
    """
    Return the normalized format name.

    Raises:
        UnsupportedFormatError: If no renderer exists for ``fmt``.
    """
    normalized = (fmt or "").lower()
    if normalized not in _RENDERERS:
        raise UnsupportedFormatError(
            f"Unsupported export format '{fmt}'. "
            f"Supported formats: {', '.join(_RENDERERS)}"
        )
    return normalized


def export_mimetype(fmt: str) -> str:
    """Content type for a generated export file."""
    return _MIMETYPES[fmt]


def default_export_filename(now: datetime | None = None) -> str:
    """
    Build ``employees-export-<timestamp>`` from a UTC ISO-8601 timestamp
    with millisecond precision, colons and dots replaced by dashes.
    """
    now = now or datetime.now(timezone.utc)
    stamp = now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"
    return "employees-export-" + stamp.replace(":", "-").replace(".", "-")


def export_employees(
    employees: Sequence[Employee],
    options: ExportOptions,
    export_dir: str | None = None,
) -> str:
    """
    Write ``employees`` to a file in the requested format.

    Args:
        employees:  Employees to export, with ``department`` loaded.
        options:    Format and optional base filename (no extension).
        export_dir: Target directory; defaults to ``EXPORT_DIR`` from
                    the app config.  Created if missing.

    Returns:
        Absolute path of the written file.

    Raises:
        UnsupportedFormatError: If the format is not csv, pdf or xlsx.
                                Raised before any file I/O.
    """
    fmt = ensure_supported_format(options.format)
    renderer = _RENDERERS[fmt]

    if export_dir is None:
        export_dir = current_app.config["EXPORT_DIR"]
    os.makedirs(export_dir, exist_ok=True)

    filename = secure_filename(options.filename or "") or default_export_filename()
    file_path = os.path.abspath(os.path.join(export_dir, f"{filename}.{fmt}"))

    renderer(employees, file_path)
    logger.info(
        "Exported %d employee(s) as %s to %s", len(employees), fmt, file_path
    )
    return file_path


def delete_export_file(file_path: str) -> None:
    """Remove an export file; no-op when it is already gone."""
    if os.path.exists(file_path):
        os.remove(file_path)
        logger.info("Deleted export file %s", file_path)


def load_export_file(file_path: str) -> io.BytesIO:
    """
    Read a finished export into memory and delete it from disk.

    The file is removed even if reading fails.
    """
    try:
        with open(file_path, "rb") as handle:
            buffer = io.BytesIO(handle.read())
    finally:
        delete_export_file(file_path)
    return buffer


def purge_stale_exports(export_dir: str, older_than_seconds: float) -> int:
    """
    Delete export files last modified more than ``older_than_seconds``
    ago.  Returns the number of files removed.
    """
    if not os.path.isdir(export_dir):
        return 0

    cutoff = time.time() - older_than_seconds
    removed = 0
    for entry in os.scandir(export_dir):
        if not entry.is_file():
            continue
        extension = os.path.splitext(entry.name)[1].lstrip(".")
        if extension in _MIMETYPES and entry.stat().st_mtime < cutoff:
            delete_export_file(entry.path)
            removed += 1
    return removed


# =========================================================================
# CSV
# =========================================================================


def _export_csv(employees: Sequence[Employee], file_path: str) -> None:
    with open(file_path, "w", newline="", encoding="utf-8-sig") as handle:
        writer = csv.writer(handle)
        writer.writerow(_CSV_HEADERS)
        for employee in employees:
            writer.writerow(_employee_row(employee))


def _employee_row(employee: Employee) -> list:
    return [
        employee.id,
        employee.name,
        employee.email,
        _format_decimal(employee.salary),
        employee.department_name or _NOT_AVAILABLE,
        _format_date(employee.created_at),
        _format_date(employee.updated_at),
    ]


# =========================================================================
# PDF
# =========================================================================


def layout_pdf_rows(row_count: int) -> list[PdfRowPosition]:
    """
    Compute the page and y position of each table row.

    Rows start at ``_PDF_FIRST_ROW_Y`` on page 1.  Before each row, a
    cursor past ``_PDF_PAGE_BREAK_Y`` moves to the top margin of a new
    page.
    """
    positions = []
    page = 1
    y = _PDF_FIRST_ROW_Y
    for _ in range(row_count):
        starts_page = False
        if y > _PDF_PAGE_BREAK_Y:
            page += 1
            y = _PDF_TOP_MARGIN
            starts_page = True
        positions.append(PdfRowPosition(page=page, y=y, starts_page=starts_page))
        y += _PDF_ROW_HEIGHT
    return positions


def _export_pdf(employees: Sequence[Employee], file_path: str) -> None:
    pdf = canvas.Canvas(file_path, pagesize=LETTER)
    pdf.setTitle("Employee Report")

    _pdf_text(pdf, "Employee Report", 50, 50, size=20)
    _pdf_text(pdf, f"Generated on: {date.today():%m/%d/%Y}", 50, 80, size=12)
    _pdf_text(pdf, f"Total Employees: {len(employees)}", 50, 100, size=12)

    for label, x in _PDF_COLUMNS:
        _pdf_text(pdf, label, x, _PDF_HEADER_Y)
    separator = _PDF_PAGE_HEIGHT - _PDF_SEPARATOR_Y
    pdf.line(_PDF_COLUMNS[0][1], separator, _PDF_RIGHT_EDGE, separator)

    for employee, position in zip(employees, layout_pdf_rows(len(employees))):
        if position.starts_page:
            pdf.showPage()
        cells = (
            str(employee.id),
            employee.name,
            employee.email,
            _format_decimal(employee.salary),
            employee.department_name or _NOT_AVAILABLE,
        )
        for index, (text, (_, x)) in enumerate(zip(cells, _PDF_COLUMNS)):
            next_x = (
                _PDF_COLUMNS[index + 1][1]
                if index + 1 < len(_PDF_COLUMNS)
                else _PDF_RIGHT_EDGE
            )
            _pdf_text(pdf, _clip(text, next_x - x - 4), x, position.y)

    pdf.save()


def _pdf_text(pdf, text: str, x: float, y: float, size: int = _PDF_BODY_SIZE) -> None:
    """Draw text whose top edge sits at ``y`` points from the page top."""
    pdf.setFont(_PDF_FONT, size)
    pdf.drawString(x, _PDF_PAGE_HEIGHT - y - size, text)


def _clip(text: str, max_width: float) -> str:
    """Shorten text with '...' so it fits its column."""
    if stringWidth(text, _PDF_FONT, _PDF_BODY_SIZE) <= max_width:
        return text
    while text and stringWidth(text + "...", _PDF_FONT, _PDF_BODY_SIZE) > max_width:
        text = text[:-1]
    return text + "..."


# =========================================================================
# Excel
# =========================================================================


def _export_xlsx(employees: Sequence[Employee], file_path: str) -> None:
    wb = Workbook()
    ws = wb.active
    ws.title = "Employees"

    _write_header_row(ws, _CSV_HEADERS)

    for row_idx, employee in enumerate(employees, start=2):
        ws.cell(row=row_idx, column=1, value=employee.id)
        ws.cell(row=row_idx, column=2, value=employee.name)
        ws.cell(row=row_idx, column=3, value=employee.email)
        ws.cell(row=row_idx, column=4, value=float(employee.salary)).number_format = _CURRENCY_FORMAT
        ws.cell(row=row_idx, column=5, value=employee.department_name or _NOT_AVAILABLE)
        ws.cell(row=row_idx, column=6, value=_format_date(employee.created_at))
        ws.cell(row=row_idx, column=7, value=_format_date(employee.updated_at))

    _auto_fit_columns(ws)
    wb.save(file_path)


def _write_header_row(ws, headers: Iterable[str]) -> None:
    """Write a styled header row to an Excel worksheet."""
    for col_idx, header in enumerate(headers, start=1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL
        cell.alignment = _HEADER_ALIGN


def _auto_fit_columns(ws) -> None:
    """Auto-fit column widths based on content (approximate)."""
    for col in ws.columns:
        max_length = 0
        col_letter = get_column_letter(col[0].column)
        for cell in col:
            if cell.value:
                max_length = max(max_length, len(str(cell.value)))
        ws.column_dimensions[col_letter].width = min(max_length + 4, 40)


# =========================================================================
# Internal helpers
# =========================================================================


def _format_decimal(value: Decimal | float | int) -> str:
    """Format a salary for text output."""
    return f"{Decimal(str(value)):.2f}"


def _format_date(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d") if value is not None else _NOT_AVAILABLE


_RENDERERS = {
    "csv": _export_csv,
    "pdf": _export_pdf,
    "xlsx": _export_xlsx,
}
