"""
db.models - SQLAlchemy ORM declarations.

Tables
------
import_runs  - one row per import triggered through the API, with the
               counters of the finished session and its row errors.

Entity types fed by importers declare themselves on the same Base.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class ImportRun(Base):
    __tablename__ = "import_runs"

    id            = Column(Integer, primary_key=True, autoincrement=True)
    importer      = Column(String(200), nullable=False, index=True)
    filename      = Column(String(500), default="")

    # ── Outcome ────────────────────────────────────────────────────────
    status        = Column(String(20), nullable=False, default="finished")   # finished | aborted | failed
    transactional = Column(Boolean, default=False)
    total_rows    = Column(Integer, default=0)
    processed     = Column(Integer, default=0)
    imported      = Column(Integer, default=0)
    skipped       = Column(Integer, default=0)
    failed        = Column(Integer, default=0)
    message       = Column(Text, default="")
    errors_json   = Column(Text, default="[]")

    created_at    = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    # ── Serialisation ──────────────────────────────────────────────────
    def to_dict(self) -> dict:
        try:
            errors = json.loads(self.errors_json or "[]")
        except ValueError:
            errors = []
        return {
            "id": self.id,
            "importer": self.importer,
            "filename": self.filename or "",
            "status": self.status,
            "transactional": bool(self.transactional),
            "total_rows": self.total_rows or 0,
            "processed": self.processed or 0,
            "imported": self.imported or 0,
            "skipped": self.skipped or 0,
            "failed": self.failed or 0,
            "message": self.message or "",
            "errors": errors,
            "created_at": self.created_at.isoformat() if self.created_at else "",
        }
