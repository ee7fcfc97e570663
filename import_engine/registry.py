"""
import_engine.registry - Named importers, looked up by the HTTP API.

Populated by ImporterBuilder.build() for builders created with a name.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from import_engine.errors import DefinitionError

if TYPE_CHECKING:
    from import_engine.spec import ImporterSpec

_IMPORTERS: dict[str, "ImporterSpec"] = {}


def register(spec: "ImporterSpec") -> None:
    if spec.name in _IMPORTERS:
        raise DefinitionError(f"Duplicate importer name '{spec.name}'")
    _IMPORTERS[spec.name] = spec


def get(name: str) -> Optional["ImporterSpec"]:
    return _IMPORTERS.get(name)


def names() -> list[str]:
    return sorted(_IMPORTERS)


def unregister(name: str) -> None:
    _IMPORTERS.pop(name, None)
