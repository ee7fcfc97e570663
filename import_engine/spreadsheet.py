"""
import_engine.spreadsheet - Open a tabular document and expose its rows.

Responsibilities:
  • CSV: BOM removal, UTF-8 with latin-1 fallback, csv.reader
  • XLSX: openpyxl, every sheet materialised in memory
  • Sheet selection and 1-based row access for the import runner
"""

from __future__ import annotations

import csv
import io
import logging
import zipfile
from pathlib import Path
from typing import Any, BinaryIO, Optional, Union

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from import_engine.errors import SpreadsheetOpenError

logger = logging.getLogger(__name__)

Source = Union[str, Path, bytes, BinaryIO]

CSV_SHEET_NAME = "default"
SUPPORTED_EXTENSIONS = ("csv", "xlsx", "xlsm")


class Workbook:
    """
    In-memory view of an opened document.  Rows are lists of raw cell
    values; ``row(1)`` is the first physical row of the default sheet.
    """

    def __init__(self, sheets: dict[str, list[list[Any]]]):
        if not sheets:
            raise SpreadsheetOpenError("Spreadsheet has no sheets")
        self._sheets = sheets
        self._default_sheet = next(iter(sheets))

    @property
    def sheets(self) -> list[str]:
        return list(self._sheets)

    @property
    def default_sheet(self) -> str:
        return self._default_sheet

    @default_sheet.setter
    def default_sheet(self, name: str) -> None:
        if name not in self._sheets:
            raise SpreadsheetOpenError(f"Spreadsheet has no sheet named '{name}'")
        self._default_sheet = name

    @property
    def last_row(self) -> int:
        return len(self._sheets[self._default_sheet])

    def row(self, index: int) -> list[Any]:
        rows = self._sheets[self._default_sheet]
        if 1 <= index <= len(rows):
            return list(rows[index - 1])
        return []


def open_spreadsheet(
    source: Source,
    *,
    extension: Optional[str] = None,
    encoding: Optional[str] = None,
    delimiter: str = ",",
) -> Workbook:
    """
    Open *source* (path, raw bytes or binary file object).  The format is
    taken from *extension* or, for paths, from the file suffix.
    """
    ext = _extension(source, extension)
    try:
        data = _read_bytes(source)
        if ext == "csv":
            return Workbook({CSV_SHEET_NAME: _parse_csv(data, encoding, delimiter)})
        return Workbook(_parse_xlsx(data))
    except SpreadsheetOpenError:
        raise
    except (OSError, ValueError, KeyError, zipfile.BadZipFile, InvalidFileException) as exc:
        logger.error("Cannot open spreadsheet: %s", exc)
        raise SpreadsheetOpenError(f"Cannot open spreadsheet: {exc}") from exc


def cell_text(value: Any) -> str:
    """Stringify and trim one cell; empty cells become ''."""
    if value is None:
        return ""
    return str(value).strip()


# ── Private helpers ────────────────────────────────────────────────────

def _extension(source: Source, extension: Optional[str]) -> str:
    if extension:
        ext = extension.lower().lstrip(".")
    elif isinstance(source, (str, Path)):
        ext = Path(source).suffix.lower().lstrip(".")
    else:
        raise SpreadsheetOpenError("extension is required when opening bytes or a file object")

    if ext not in SUPPORTED_EXTENSIONS:
        raise SpreadsheetOpenError(
            f"Unsupported file type: .{ext} (expected {', '.join(SUPPORTED_EXTENSIONS)})"
        )
    return ext


def _read_bytes(source: Source) -> bytes:
    if isinstance(source, bytes):
        return source
    if isinstance(source, (str, Path)):
        return Path(source).read_bytes()
    return source.read()


def _decode(raw: bytes, encoding: Optional[str]) -> str:
    # Strip UTF-8 BOM
    if raw.startswith(b"\xef\xbb\xbf"):
        return raw[3:].decode("utf-8", errors="replace")
    for enc in (encoding, "utf-8", "latin-1"):
        if not enc:
            continue
        try:
            return raw.decode(enc)
        except (UnicodeDecodeError, LookupError):
            continue
    return raw.decode("latin-1", errors="replace")


def _parse_csv(raw: bytes, encoding: Optional[str], delimiter: str) -> list[list[Any]]:
    text = _decode(raw, encoding)
    rows = [list(r) for r in csv.reader(io.StringIO(text), delimiter=delimiter)]
    return _trim_trailing_blank(rows)


def _parse_xlsx(raw: bytes) -> dict[str, list[list[Any]]]:
    wb = load_workbook(io.BytesIO(raw), read_only=True, data_only=True)
    try:
        return {
            ws.title: _trim_trailing_blank([list(r) for r in ws.iter_rows(values_only=True)])
            for ws in wb.worksheets
        }
    finally:
        wb.close()


def _trim_trailing_blank(rows: list[list[Any]]) -> list[list[Any]]:
    while rows and not any(cell_text(c) for c in rows[-1]):
        rows.pop()
    return rows
