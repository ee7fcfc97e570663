"""
import_engine.transaction - All-or-nothing vs. per-row persistence.

Transactional: the whole row loop runs inside ModelStore.transaction();
a failed row is re-raised, which rolls back every row of the run.

Non-transactional: each successful row is kept on its own; a failed
row is rolled back and the loop moves on.  A session the runner opened
itself is committed per row.  A caller's session gets one SAVEPOINT per
row instead, so its own pending work is neither committed nor lost.

A row whose import was aborted before saving is rolled back in every
mode, including changes to models fetched from the database.
"""

from __future__ import annotations

from contextlib import contextmanager, nullcontext
from typing import Iterator, Optional

from sqlalchemy.orm import SessionTransaction

from import_engine.errors import TransactionalOverrideError
from import_engine.persistence import ModelStore


def resolve_transactional(declared: bool, requested: Optional[bool]) -> bool:
    """Combine the importer's declared mode with a per-run request."""
    if requested is None:
        return declared
    if declared and not requested:
        raise TransactionalOverrideError("Importer is declared transactional at the class level")
    return bool(requested)


class TransactionCoordinator:

    def __init__(self, store: ModelStore, transactional: bool, owns_session: bool = True):
        self.store = store
        self.transactional = transactional
        self.owns_session = owns_session
        self._savepoint: Optional[SessionTransaction] = None

    @property
    def uses_savepoints(self) -> bool:
        return self.transactional or not self.owns_session

    @contextmanager
    def run_scope(self) -> Iterator[None]:
        if self.transactional:
            ctx = self.store.transaction(savepoint=not self.owns_session)
        else:
            ctx = nullcontext()
        with ctx:
            yield

    def row_started(self) -> None:
        if self.uses_savepoints:
            self._savepoint = self.store.savepoint()

    def row_succeeded(self) -> None:
        self._end_row(keep=True)

    def row_discarded(self) -> None:
        self._end_row(keep=False)

    def row_failed(self) -> bool:
        """Return True when the failure must propagate and end the run."""
        self._end_row(keep=False)
        return self.transactional

    def _end_row(self, keep: bool) -> None:
        if not self.uses_savepoints:
            if keep:
                self.store.commit()
            else:
                self.store.rollback()
            return
        if keep:
            self._savepoint.commit()
            self._savepoint = None
            return
        savepoint, self._savepoint = self._savepoint, None
        if savepoint is not None:
            savepoint.rollback()
