"""
import_engine.report - Structured result of a finished import run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class ImportReport:
    importer: str = ""
    total_rows: int = 0
    processed: int = 0
    imported: int = 0
    skipped: int = 0
    failed: int = 0
    transactional: bool = False
    aborted: bool = False
    abort_message: Optional[str] = None
    errors: list[dict] = field(default_factory=list)   # [{row_index, error_message}]

    @classmethod
    def from_session(cls, session) -> "ImportReport":
        return cls(
            importer=session.spec.name or session.spec.model_class.__name__,
            total_rows=session.row_count,
            processed=session.row_processed_count,
            imported=session.row_success_count,
            skipped=session.row_skipped_count,
            failed=session.row_error_count,
            transactional=session.transactional,
            aborted=session.aborted,
            abort_message=session.abort_message,
            errors=[e.to_dict() for e in session.row_errors],
        )

    def to_dict(self) -> dict:
        return {
            "importer": self.importer,
            "total_rows": self.total_rows,
            "processed": self.processed,
            "imported": self.imported,
            "skipped": self.skipped,
            "failed": self.failed,
            "transactional": self.transactional,
            "aborted": self.aborted,
            "abort_message": self.abort_message,
            "errors": self.errors,
        }
