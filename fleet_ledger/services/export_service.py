"""
Spreadsheet export of any in-memory collection (one sheet, header row + one row per record).
"""

import io
import re
from dataclasses import fields as dataclass_fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from fleet_ledger.config import settings
from fleet_ledger.utils.errors import ExportError
from fleet_ledger.utils.logger import get_logger
from fleet_ledger.utils.messages import t

logger = get_logger(__name__)

SHEET_TITLE = "Datos"


def _style_header(ws, row=1):
    header_font = Font(bold=True, color="FFFFFF")
    fill = PatternFill("solid", fgColor="4F81BD")
    align = Alignment(horizontal="center", vertical="center")
    thin = Side(style="thin", color="A0A0A0")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    for cell in ws[row]:
        cell.font = header_font
        cell.fill = fill
        cell.alignment = align
        cell.border = border


def _autosize_columns(ws, min_width=10, max_width=45):
    for col in range(1, ws.max_column + 1):
        letter = get_column_letter(col)
        max_len = max((len(str(cell.value)) for cell in ws[letter] if cell.value is not None), default=0)
        ws.column_dimensions[letter].width = max(min_width, min(max_width, max_len + 2))


def _as_record(row: Any) -> dict:
    if is_dataclass(row) and not isinstance(row, type):
        return {f.name: getattr(row, f.name) for f in dataclass_fields(row)}
    if isinstance(row, Mapping):
        return dict(row)
    raise ExportError(t("export_failed"), f"cannot export a {type(row).__name__}")


def _cell_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        # openpyxl rejects tz-aware datetimes
        return value.replace(tzinfo=None)
    if value is None or isinstance(value, (str, int, float, bool, date)):
        return value
    if isinstance(value, Decimal):
        return float(value)
    return str(value)


def _headers(records: List[dict]) -> List[str]:
    headers: List[str] = []
    for record in records:
        for key in record:
            if key not in headers:
                headers.append(key)
    return headers


def workbook_bytes(rows: Iterable[Any]) -> bytes:
    """Serialise `rows` (entities or dicts) into an .xlsx payload."""
    records = [_as_record(row) for row in (rows or [])]
    if not records:
        raise ExportError(t("export_empty"))

    headers = _headers(records)
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE
    ws.append(headers)
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for record in records:
        ws.append([_cell_value(record.get(key)) for key in headers])
    _autosize_columns(ws)

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def export_filename(filename: str) -> str:
    stem = re.sub(r"[^\w\-. ]", "_", (filename or "").strip()) or "export"
    return stem if stem.lower().endswith(".xlsx") else f"{stem}.xlsx"


def export_to_spreadsheet(rows: Iterable[Any], filename: str, directory: Optional[str] = None) -> Path:
    """
    Write `rows` to <directory>/<filename>.xlsx and return the path.
    Nothing is written when `rows` is empty or cannot be serialised.
    """
    payload = workbook_bytes(rows)
    target_dir = Path(directory or settings.EXPORT_DIR)
    path = target_dir / export_filename(filename)
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        path.write_bytes(payload)
    except OSError as exc:
        logger.error(f"[Export] Could not write {path}: {exc}")
        raise ExportError(t("export_failed"), str(exc)) from exc
    logger.info(f"[Export] {path} written ({len(payload)} bytes)")
    return path
