"""
import_engine.columns - Column declarations for one importer type.

A column binds a header title (or a fixed zero-based position) to an
attribute of the imported model.  Titles are matched after stripping
surrounding whitespace; integer positions are used as-is.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterator, Optional, Union

from sqlalchemy import inspect as sa_inspect

from import_engine.errors import (
    DefinitionError, DuplicateColumnError, InvalidColumnDeclarationError,
)

ColumnKey = Union[str, int]
Transform = Callable[[Any, Any], Any]          # (session, raw_value) -> value
Setter = Callable[[Any, Any], None]            # (model, value) -> None


@dataclass(frozen=True)
class ColumnSpec:
    title_or_index: ColumnKey
    field_name: Optional[str] = None
    transform: Optional[Transform] = None
    optional: bool = False
    setter: Optional[Setter] = None

    @property
    def assigns(self) -> bool:
        return bool(self.field_name)

    @property
    def required_title(self) -> bool:
        """True when the header row must contain this column's title."""
        return not self.optional and not isinstance(self.title_or_index, int)


def normalize_key(title_or_index: Any) -> ColumnKey:
    if isinstance(title_or_index, bool):
        raise InvalidColumnDeclarationError(
            f"Invalid column {title_or_index!r}: expected a title or a column position"
        )
    if isinstance(title_or_index, int):
        return title_or_index
    return str(title_or_index).strip()


def attribute_setter(model_class: Optional[type], field_name: str) -> Setter:
    """
    Resolve the setter for *field_name* once.  Mapped classes are checked
    against their ORM attributes so typos fail when the importer is built.
    """
    if model_class is not None:
        mapper = sa_inspect(model_class, raiseerr=False)
        if mapper is not None and field_name not in mapper.all_orm_descriptors \
                and not hasattr(model_class, field_name):
            raise InvalidColumnDeclarationError(
                f"{model_class.__name__} has no attribute '{field_name}'"
            )

    def _set(model: Any, value: Any) -> None:
        setattr(model, field_name, value)

    _set.__name__ = f"set_{field_name}"
    return _set


class ColumnRegistry:
    """Ordered, duplicate-free set of ColumnSpecs keyed by title/position."""

    def __init__(self):
        self._columns: dict[ColumnKey, ColumnSpec] = {}
        self._closed = False

    def declare(
        self,
        title_or_index: Any,
        field_name: Union[str, Mapping, None] = None,
        options: Optional[Mapping] = None,
        transform: Optional[Transform] = None,
    ) -> ColumnSpec:
        if self._closed:
            raise DefinitionError("Columns cannot be declared on a built importer")
        key = normalize_key(title_or_index)
        if key in self._columns:
            raise DuplicateColumnError(f"Duplicate importer column '{key}'")

        if isinstance(field_name, Mapping):
            if options is not None:
                raise InvalidColumnDeclarationError(
                    f"Invalid column '{key}': expected a single set of options"
                )
            options, field_name = field_name, None
        options = options or {}

        if not field_name and transform is not None:
            raise InvalidColumnDeclarationError(
                f"Invalid column '{key}': must have a corresponding attribute, "
                f"or it shouldn't have a transform"
            )

        column = ColumnSpec(
            title_or_index=key,
            field_name=field_name or None,
            transform=transform,
            optional=bool(options.get("optional", False)),
        )
        self._columns[key] = column
        return column

    def bind(self, model_class: Optional[type]) -> "ColumnRegistry":
        """Return a copy whose assigning columns carry resolved setters."""
        bound = ColumnRegistry()
        for key, column in self._columns.items():
            if column.assigns:
                column = replace(column, setter=attribute_setter(model_class, column.field_name))
            bound._columns[key] = column
        bound._closed = True
        return bound

    def required_titles(self) -> set[str]:
        return {c.title_or_index for c in self._columns.values() if c.required_title}

    def get(self, key: Any) -> Optional[ColumnSpec]:
        return self._columns.get(key)

    def __contains__(self, key: Any) -> bool:
        return key in self._columns

    def __iter__(self) -> Iterator[ColumnSpec]:
        return iter(self._columns.values())
