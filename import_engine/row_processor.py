"""
import_engine.row_processor - Turn one physical row into a model.

Single-responsibility: key the row's cells by column, then assign the
(transformed) values onto the model supplied by the importer.
"""

from __future__ import annotations

from typing import Any, Sequence, Union

from import_engine.columns import ColumnKey, ColumnRegistry

HeaderRow = Sequence[Union[str, int]]


def row_to_record(cells: Sequence[Any], header: HeaderRow, columns: ColumnRegistry) -> dict[ColumnKey, Any]:
    """
    Map a row's cells to declared columns.  Cells are keyed by their header
    label; integer-keyed columns are picked up by position.
    """
    record: dict[ColumnKey, Any] = {}
    for index, value in enumerate(cells):
        label = header[index] if index < len(header) else index
        if label in columns:
            record[label] = value
        if index != label and index in columns:
            record[index] = value
    return record


class RowMapper:
    """
    Stateless: every piece of per-row state lives on the import session
    (``session.row`` and ``session.model``).
    """

    def __init__(self, columns: ColumnRegistry):
        self.columns = columns

    def build(self, session: Any) -> None:
        """Assign every mapped column of ``session.row`` onto ``session.model``."""
        for key, value in session.row.items():
            column = self.columns.get(key)
            if column is None or not column.assigns:
                continue
            if column.transform is not None:
                value = column.transform(session, value)
            column.setter(session.model, value)
