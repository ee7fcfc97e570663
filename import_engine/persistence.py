"""
import_engine.persistence - The importer's view of the database.

ModelStore wraps one SQLAlchemy Session and the mapped class being
imported.  Session lifetime stays with whoever created the session: a
session handed in by a caller is never committed or rolled back as a
whole, only through savepoints opened inside it.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Session, SessionTransaction


class ModelStore:

    def __init__(self, session: Session, model_class: type):
        self.session = session
        self.model_class = model_class

    def new(self) -> Any:
        return self.model_class()

    def save(self, model: Any) -> None:
        """Stage *model* and flush it; integrity errors surface here."""
        self.session.add(model)
        self.session.flush()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    def savepoint(self) -> SessionTransaction:
        """Open a SAVEPOINT; the caller commits or rolls it back."""
        return self.session.begin_nested()

    @contextmanager
    def transaction(self, savepoint: bool = False) -> Iterator[None]:
        """
        One atomic unit: commits on normal exit, rolls back on exception.
        Runs as a SAVEPOINT when asked to, or when the session is already
        in a transaction.
        """
        if savepoint or self.session.in_transaction():
            with self.session.begin_nested():
                yield
        else:
            with self.session.begin():
                yield

    @staticmethod
    def is_new_record(model: Any) -> bool:
        state = sa_inspect(model)
        return state.transient or state.pending

    def is_changed(self, model: Any) -> bool:
        return self.session.is_modified(model)
