"""
import_engine.importer - Top-level orchestrator.

An ImportSession opens the document and locates the header when it is
constructed, then ``run()`` walks the data rows:

    skip predicates → fetch model → map columns → save → events

Construction failures fire ``import_failed`` and propagate.  Once a run
has started ``import_finished`` always fires, whichever way it ends.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Union

from sqlalchemy.orm import Session

from db.engine import get_session
from import_engine.errors import ImporterError, RowError, SpreadsheetOpenError
from import_engine.header import find_header_index, load_header
from import_engine.persistence import ModelStore
from import_engine.row_processor import RowMapper, row_to_record
from import_engine.spec import ImporterSpec
from import_engine.spreadsheet import Workbook, open_spreadsheet
from import_engine.transaction import TransactionCoordinator, resolve_transactional

logger = logging.getLogger(__name__)


class ImportSession:
    """
    One run of an importer over one document.  Callbacks receive this
    object and may read ``row``, ``model``, ``params`` … and call
    ``abort(message)``.

    Options other than the ones named below are passed to
    ``open_spreadsheet`` (``extension``, ``encoding``, ``delimiter``).
    """

    def __init__(
        self,
        spec: ImporterSpec,
        source: Any,
        *,
        params: Any = None,
        transactional: Optional[bool] = None,
        sheet: Union[int, str, None] = None,
        db_session: Optional[Session] = None,
        **open_options: Any,
    ):
        self.spec = spec
        self.params = params
        self.row_errors: list[RowError] = []
        self.header: Optional[list[Union[str, int]]] = None
        self.row: Optional[dict] = None
        self.model: Any = None
        self.row_count = 0
        self.row_index: Optional[int] = None
        self.row_skipped_count = 0
        self.db_session = db_session
        self.transactional = spec.transactional

        self._owns_db_session = db_session is None
        self._abort_message: Optional[str] = None
        self._header_index: Optional[int] = None
        self._book: Optional[Workbook] = None
        self._mapper = RowMapper(spec.columns)
        self._started = False

        try:
            self.transactional = resolve_transactional(spec.transactional, transactional)
            self._book = open_spreadsheet(source, **open_options)
            self._load_sheet(sheet if sheet is not None else spec.sheet)
            self._header_index = find_header_index(self._book, spec.columns)
            self.header = load_header(self._book, self._header_index)
            self._data_rows = range(self._header_index + 1, self._book.last_row + 1)
            self.row_count = len(self._data_rows)
        except Exception as exc:
            self._book = self.header = self._header_index = None
            self.row_count = 0
            self.row_index = 1
            logger.error("Import %s failed to open: %s", self._label, exc)
            self._fire("import_failed", exc)
            raise

    # ── Abort ─────────────────────────────────────────────────────────

    def abort(self, message: str) -> None:
        """Stop after the current row; the row itself is not saved."""
        self._abort_message = message

    @property
    def aborted(self) -> bool:
        return self._abort_message is not None

    @property
    def abort_message(self) -> Optional[str]:
        return self._abort_message

    # ── Counters ──────────────────────────────────────────────────────

    @property
    def row_processed_count(self) -> int:
        if self.row_index is None or self._header_index is None:
            return 0
        return self.row_index - self._header_index - self.row_skipped_count

    @property
    def row_success_count(self) -> int:
        return self.row_processed_count - self.row_error_count

    @property
    def row_error_count(self) -> int:
        return len(self.row_errors)

    # ── Run ───────────────────────────────────────────────────────────

    def run(self) -> "ImportSession":
        if self._started:
            raise ImporterError("An import session can only be run once")
        self._started = True

        if self.db_session is None:
            self.db_session = get_session()
        store = ModelStore(self.db_session, self.spec.model_class)
        coordinator = TransactionCoordinator(store, self.transactional,
                                             owns_session=self._owns_db_session)
        logger.info("Import %s started: %d rows (transactional=%s)",
                    self._label, self.row_count, self.transactional)

        try:
            with coordinator.run_scope():
                self._fire("import_started")
                for index in self._data_rows:
                    self.row_index = index
                    self.row = row_to_record(self._book.row(index), self.header, self.spec.columns)
                    if self._skip_row():
                        self.row_skipped_count += 1
                        self._fire("row_skipped")
                        continue
                    self._import_row(store, coordinator)
                    if self.aborted:
                        logger.info("Import %s aborted at row %d: %s",
                                    self._label, index, self._abort_message)
                        self._fire("import_aborted", self._abort_message)
                        break
        except Exception as exc:
            self._fire("import_aborted", str(exc))
            raise
        finally:
            try:
                self._fire("import_finished")
            finally:
                if self._owns_db_session:
                    self.db_session.close()
                logger.info("Import %s finished: %d processed, %d failed, %d skipped",
                            self._label, self.row_processed_count,
                            self.row_error_count, self.row_skipped_count)
        return self

    # ── Private helpers ───────────────────────────────────────────────

    @property
    def _label(self) -> str:
        return self.spec.name or self.spec.model_class.__name__

    def _fire(self, event: str, payload: Any = None) -> None:
        self.spec.events.fire(event, self, payload)

    def _load_sheet(self, sheet: Union[int, str, None]) -> None:
        if sheet is None:
            return
        if isinstance(sheet, int):
            sheets = self._book.sheets
            if not 1 <= sheet <= len(sheets):
                raise SpreadsheetOpenError(f"Spreadsheet has no sheet #{sheet}")
            sheet = sheets[sheet - 1]
        self._book.default_sheet = str(sheet)

    def _skip_row(self) -> bool:
        return any(predicate(self) for predicate in self.spec.skip_predicates)

    def _fetch_model(self, store: ModelStore) -> Any:
        if self.spec.fetch_model is not None:
            return self.spec.fetch_model(self)
        return store.new()

    def _import_row(self, store: ModelStore, coordinator: TransactionCoordinator) -> bool:
        coordinator.row_started()
        try:
            self.model = self._fetch_model(store)
            self._mapper.build(self)
            self._fire("row_processing")
            if self.aborted:
                coordinator.row_discarded()
            else:
                self._save(store)
                coordinator.row_succeeded()
        except Exception as exc:
            message = str(exc) or exc.__class__.__name__
            self.row_errors.append(RowError(self.row_index, message))
            logger.warning("Import %s row %d failed: %s", self._label, self.row_index, message)
            propagate = coordinator.row_failed()
            self._fire("row_error", exc)
            if propagate:
                raise
            return False
        else:
            self._fire("row_success")
            return True
        finally:
            self._fire("row_processed")

    def _save(self, store: ModelStore) -> None:
        if store.is_new_record(self.model) or store.is_changed(self.model):
            store.save(self.model)


def run_import(spec: ImporterSpec, source: Any, **options: Any) -> ImportSession:
    """
    Import *source* with *spec*.

    Parameters
    ----------
    spec : the built importer
    source : path, raw bytes or binary file object
    options : params, transactional, sheet, db_session, reader options

    Returns
    -------
    The finished ImportSession (counters, row_errors, abort state)
    """
    return ImportSession(spec, source, **options).run()
