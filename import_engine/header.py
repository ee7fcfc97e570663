"""
import_engine.header - Locate the header row of the default sheet.
"""

from __future__ import annotations

from typing import Union

from import_engine.columns import ColumnRegistry
from import_engine.errors import HeaderNotFoundError
from import_engine.spreadsheet import Workbook, cell_text


def find_header_index(book: Workbook, columns: ColumnRegistry) -> int:
    """
    1-based index of the first row containing every required column
    title.  Raises HeaderNotFoundError when no row qualifies.
    """
    required = columns.required_titles()
    for index in range(1, book.last_row + 1):
        cells = {cell_text(c) for c in book.row(index)}
        if required <= cells:
            return index
    raise HeaderNotFoundError()


def load_header(book: Workbook, index: int) -> list[Union[str, int]]:
    """Header labels; blank labels are replaced by their column position."""
    labels = [cell_text(c) for c in book.row(index)]
    return [label if label else i for i, label in enumerate(labels)]
