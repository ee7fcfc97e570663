"""Pytest configuration and shared fixtures."""

import csv
from pathlib import Path

import pytest
from sqlalchemy import Column, Integer, String, func, select

from db import Base, dispose_db, get_session, init_db
from import_engine import ImporterBuilder, registry


class Contact(Base):
    __tablename__ = "test_contacts"

    id    = Column(Integer, primary_key=True, autoincrement=True)
    name  = Column(String(200), nullable=False)
    email = Column(String(200), unique=True)
    notes = Column(String(200), default="")


def _email(session, value):
    value = (value or "").strip()
    if "@" not in value:
        raise ValueError(f"invalid email '{value}'")
    return value.lower()


@pytest.fixture
def contact_model():
    return Contact


@pytest.fixture
def db(tmp_path):
    """Fresh SQLite database per test."""
    init_db(f"sqlite:///{tmp_path / 'test.sqlite'}")
    yield
    dispose_db()


@pytest.fixture
def contacts():
    """Return all persisted contacts as (name, email) tuples."""
    def _contacts():
        session = get_session()
        try:
            return [(c.name, c.email) for c in session.scalars(select(Contact).order_by(Contact.id))]
        finally:
            session.close()
    return _contacts


@pytest.fixture
def contact_count():
    def _count():
        session = get_session()
        try:
            return session.scalar(select(func.count()).select_from(Contact))
        finally:
            session.close()
    return _count


@pytest.fixture
def contact_builder():
    """Builder for Contact with Name/Email columns; callers add the rest."""
    def _builder(name=None, base=None):
        builder = ImporterBuilder(name, base=base)
        builder.imports(Contact)
        builder.column("Name", "name")
        builder.column("Email", "email", transform=_email)
        return builder
    return _builder


@pytest.fixture
def write_csv(tmp_path):
    """Write rows to a CSV file and return its path."""
    def _write(rows, name="data.csv"):
        path = Path(tmp_path) / name
        with open(path, "w", newline="", encoding="utf-8") as fh:
            csv.writer(fh).writerows(rows)
        return path
    return _write


@pytest.fixture
def contacts_csv(write_csv):
    """Header on row 2; row 4 has an invalid email."""
    return write_csv([
        ["Contacts export", ""],
        ["Name", "Email"],
        ["Ann", "ann@example.com"],
        ["Bob", "not-an-email"],
        ["Cid", "CID@example.com"],
    ])


@pytest.fixture(autouse=True)
def _clean_registry():
    """Forget importers registered during a test."""
    before = set(registry.names())
    yield
    for name in set(registry.names()) - before:
        registry.unregister(name)


class EventLog:
    """Collects (event, row_index, payload) for every handler call."""

    def __init__(self):
        self.calls = []

    def attach(self, builder, events):
        for event in events:
            builder.on(event, self._handler(event))
        return builder

    def _handler(self, event):
        def record(session, payload):
            self.calls.append((event, session.row_index, payload))
        return record

    def names(self):
        return [c[0] for c in self.calls]

    def of(self, event):
        return [c for c in self.calls if c[0] == event]


@pytest.fixture
def event_log():
    return EventLog()
