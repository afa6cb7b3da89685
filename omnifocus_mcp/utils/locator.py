"""Resolve a user-supplied id or name to an entity in a snapshot."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol, TypeVar


class Locatable(Protocol):
    id: str
    name: str


E = TypeVar("E", bound=Locatable)


@dataclass(frozen=True)
class NotFound:
    """A lookup that matched nothing."""

    kind: str
    identifier: str

    @property
    def message(self) -> str:
        return f"{self.kind} not found: {self.identifier}"


def find_entity(collection: Iterable[E], identifier: str | None) -> E | None:
    """
    Find an entity by id, falling back to exact (case-sensitive) name.

    Ids are unique, names are not, so every id is checked before any name;
    a name that happens to equal another entity's id never shadows it.
    Within each pass the first match in collection order wins.
    """
    if not identifier:
        return None

    entities = list(collection)
    for entity in entities:
        if entity.id == identifier:
            return entity
    for entity in entities:
        if entity.name == identifier:
            return entity
    return None


def lookup(collection: Iterable[E], identifier: str, kind: str) -> E | NotFound:
    """Like find_entity, but report a miss as a NotFound value."""
    found = find_entity(collection, identifier)
    if found is None:
        return NotFound(kind=kind, identifier=identifier)
    return found
