"""
import_engine.spec - Declaring importers.

An ImporterBuilder collects declarations; ``build()`` closes it and
returns an immutable ImporterSpec that import sessions only read.

    contacts = ImporterBuilder("contacts")
    contacts.imports(Contact)
    contacts.column("Name", "name")
    contacts.column("Email", "email", transform=lambda s, v: v.lower())

    @contacts.on("row_error")
    def log_error(session, exc):
        ...

    ContactImporter = contacts.build()
    ContactImporter.import_file("contacts.xlsx", params={"owner": 7})

Callbacks always receive the running import session as first argument:
transforms ``(session, value)``, event handlers ``(session, payload)``,
skip predicates and fetch_model hooks ``(session)``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from import_engine import registry
from import_engine.columns import ColumnRegistry, Transform
from import_engine.errors import DefinitionError
from import_engine.events import EventBus, Handler, check_event

SkipPredicate = Callable[[Any], bool]
FetchModel = Callable[[Any], Any]


@dataclass(frozen=True)
class ImporterSpec:
    name: Optional[str]
    model_class: type
    columns: ColumnRegistry
    events: EventBus
    sheet: Union[int, str, None] = None
    fetch_model: Optional[FetchModel] = None
    skip_predicates: tuple[SkipPredicate, ...] = ()
    transactional: bool = False
    base: Optional["ImporterSpec"] = None

    def import_file(self, source: Any, **options: Any):
        """Open *source* and run the import; returns the finished session."""
        from import_engine.importer import run_import
        return run_import(self, source, **options)


class ImporterBuilder:
    """
    Mutable declaration phase of an importer.  Passing *base* composes
    the base importer's event handlers and skip predicates; columns,
    model, sheet and fetch_model are declared per importer.
    """

    def __init__(self, name: Optional[str] = None, base: Optional[ImporterSpec] = None):
        self.name = name
        self.base = base
        self._model_class: Optional[type] = None
        self._sheet: Union[int, str, None] = None
        self._columns = ColumnRegistry()
        self._fetch_model: Optional[FetchModel] = None
        self._skip_predicates: list[SkipPredicate] = []
        self._transactional = False
        self._handlers: dict[str, list[Handler]] = {}
        self._built = False

    # ── Declarations ──────────────────────────────────────────────────

    def imports(self, model_class: type) -> "ImporterBuilder":
        self._check_open()
        self._model_class = model_class
        return self

    def sheet(self, index_or_name: Union[int, str]) -> "ImporterBuilder":
        """Select a sheet by 1-based position or by name."""
        self._check_open()
        if isinstance(index_or_name, bool) or (isinstance(index_or_name, int) and index_or_name < 1):
            raise DefinitionError(f"Invalid sheet {index_or_name!r}: positions start at 1")
        self._sheet = index_or_name
        return self

    def column(
        self,
        title_or_index: Union[str, int],
        field_name: Union[str, Mapping, None] = None,
        options: Optional[Mapping] = None,
        transform: Optional[Transform] = None,
    ) -> "ImporterBuilder":
        self._check_open()
        self._columns.declare(title_or_index, field_name, options, transform)
        return self

    def fetch_model(self, hook: Optional[FetchModel] = None):
        """Set the hook returning the model for the current row (decorator-friendly)."""
        def register(fn: FetchModel) -> FetchModel:
            self._check_open()
            self._fetch_model = fn
            return fn
        return register(hook) if hook is not None else register

    def skip_rows_if(self, predicate: Optional[SkipPredicate] = None):
        """Add a predicate; rows for which any predicate is true are skipped."""
        def register(fn: SkipPredicate) -> SkipPredicate:
            self._check_open()
            self._skip_predicates.append(fn)
            return fn
        return register(predicate) if predicate is not None else register

    def transactional(self, flag: bool = True) -> "ImporterBuilder":
        self._check_open()
        if flag and self._model_class is None:
            raise DefinitionError("Declare imports() before transactional(): the model provides transactions")
        self._transactional = bool(flag)
        return self

    def on(self, event: str, handler: Optional[Handler] = None):
        """Register an event handler; usable as ``@builder.on("row_error")``."""
        check_event(event)

        def register(fn: Handler) -> Handler:
            self._check_open()
            self._handlers.setdefault(event, []).append(fn)
            return fn
        return register(handler) if handler is not None else register

    # ── Closing ───────────────────────────────────────────────────────

    def build(self) -> ImporterSpec:
        self._check_open()
        if self._model_class is None:
            label = f" '{self.name}'" if self.name else ""
            raise DefinitionError(f"Importer{label} does not declare imports()")

        base_predicates = self.base.skip_predicates if self.base else ()
        spec = ImporterSpec(
            name=self.name,
            model_class=self._model_class,
            columns=self._columns.bind(self._model_class),
            events=EventBus(self._handlers, base=self.base.events if self.base else None),
            sheet=self._sheet,
            fetch_model=self._fetch_model,
            skip_predicates=tuple(self._skip_predicates) + tuple(base_predicates),
            transactional=self._transactional,
            base=self.base,
        )
        if self.name:
            registry.register(spec)
        self._built = True
        return spec

    def _check_open(self) -> None:
        if self._built:
            raise DefinitionError("Importer has already been built")
