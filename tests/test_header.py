"""Tests for header row detection."""

import pytest

from import_engine.columns import ColumnRegistry
from import_engine.errors import HeaderNotFoundError
from import_engine.header import find_header_index, load_header
from import_engine.row_processor import row_to_record
from import_engine.spreadsheet import Workbook


def _columns(*titles, optional=(), positions=()):
    columns = ColumnRegistry()
    for title in titles:
        columns.declare(title, title.lower())
    for title in optional:
        columns.declare(title, {"optional": True})
    for position in positions:
        columns.declare(position)
    return columns


def test_first_row_with_all_required_titles():
    book = Workbook({"default": [
        ["Report", None],
        ["Name", "Phone"],
        [" Name ", "Email", "Extra"],
        ["Name", "Email"],
    ]})
    assert find_header_index(book, _columns("Name", "Email")) == 3


def test_optional_and_positional_columns_are_exempt():
    book = Workbook({"default": [
        ["Name"],
        ["x"],
    ]})
    columns = _columns("Name", optional=["Email"], positions=[4])
    assert find_header_index(book, columns) == 1


def test_non_string_cells_are_stringified():
    book = Workbook({"default": [[2024, None, "Name"]]})
    assert find_header_index(book, _columns("2024", "Name")) == 1


def test_missing_header_raises():
    book = Workbook({"default": [["Name"], ["Ann"]]})
    with pytest.raises(HeaderNotFoundError):
        find_header_index(book, _columns("Name", "Email"))


def test_empty_sheet_has_no_header():
    with pytest.raises(HeaderNotFoundError):
        find_header_index(Workbook({"default": []}), _columns())


def test_blank_labels_become_positions():
    book = Workbook({"default": [["Name", "", None, " Email "]]})
    assert load_header(book, 1) == ["Name", 1, 2, "Email"]


def test_row_record_only_keeps_declared_columns():
    columns = _columns("Name", optional=["Email"], positions=[2])
    header = ["Name", "Email", "Phone", "Other"]
    record = row_to_record(["Ann", "a@x.org", "555", "zzz"], header, columns)
    assert record == {"Name": "Ann", "Email": "a@x.org", 2: "555"}
