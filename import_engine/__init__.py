"""
import_engine - Declarative spreadsheet import pipeline.

Public API:
    ImporterBuilder(name, base=None) → declare columns / events → build()
    ImporterSpec.import_file(source, **options) → ImportSession
    run_import(spec, source, **options) → ImportSession
    ImportReport.from_session(session)
"""

from import_engine.errors import (                           # noqa: F401
    ImporterError,
    DefinitionError,
    DuplicateColumnError,
    InvalidColumnDeclarationError,
    UnknownEventError,
    OpenError,
    SpreadsheetOpenError,
    HeaderNotFoundError,
    TransactionalOverrideError,
    RowError,
)
from import_engine.events import EVENTS                     # noqa: F401
from import_engine.spec import ImporterBuilder, ImporterSpec  # noqa: F401
from import_engine.importer import ImportSession, run_import  # noqa: F401
from import_engine.report import ImportReport                # noqa: F401
