"""
import_engine.errors - Exception hierarchy and the recorded RowError value.

DefinitionError   raised while an importer is declared / built
OpenError         raised while an import session is constructed
RowError          recorded per failed row (not an exception)
"""

from __future__ import annotations

from dataclasses import dataclass


class ImporterError(Exception):
    """Base class for every error raised by the import engine."""


# ── Declaration time ───────────────────────────────────────────────────

class DefinitionError(ImporterError):
    """Invalid importer declaration."""


class DuplicateColumnError(DefinitionError):
    pass


class InvalidColumnDeclarationError(DefinitionError):
    pass


class UnknownEventError(DefinitionError):
    pass


# ── Session construction ───────────────────────────────────────────────

class OpenError(ImporterError):
    """The document could not be turned into an import session."""


class SpreadsheetOpenError(OpenError):
    pass


class HeaderNotFoundError(OpenError):
    def __init__(self, message: str = "Spreadsheet does not contain all the expected columns"):
        super().__init__(message)


class TransactionalOverrideError(OpenError):
    """Non-transactional run requested for an importer declared transactional."""


# ── Row level ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class RowError:
    row_index: int
    error_message: str

    def to_dict(self) -> dict:
        return {"row_index": self.row_index, "error_message": self.error_message}
