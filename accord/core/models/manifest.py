"""
Manifest model — the declared resources, grouped by kind.

Within a kind, resources keep declaration order. Keys are unique per
kind: adding a resource whose key is already present replaces the
earlier declaration, and the replacement takes the later position.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

from accord.core.models.resource import KIND_ORDER, ResourceKind

if TYPE_CHECKING:
    from accord.core.resources.base import Resource


class Manifest:
    """An ordered collection of resources, one sequence per kind."""

    def __init__(self, source: str = "<manifest>"):
        self.source = source
        self._by_kind: dict[ResourceKind, dict[str, Resource]] = {
            kind: {} for kind in KIND_ORDER
        }

    def add(self, resource: Resource) -> bool:
        """Add a resource (last-write-wins).

        Returns:
            True if an earlier declaration with the same key was replaced.
        """
        bucket = self._by_kind[resource.kind]
        replaced = bucket.pop(resource.key, None) is not None
        bucket[resource.key] = resource
        return replaced

    def get(self, kind: ResourceKind, key: str) -> Resource | None:
        """Look up a resource by identity."""
        return self._by_kind[kind].get(key)

    def resources(self, kind: ResourceKind) -> list[Resource]:
        """All resources of one kind, in declaration order."""
        return list(self._by_kind[kind].values())

    def iter_resources(self) -> Iterator[Resource]:
        """Every resource, in engine processing order."""
        for kind in KIND_ORDER:
            yield from self._by_kind[kind].values()

    def counts(self) -> dict[str, int]:
        """Number of resources per manifest section."""
        return {kind.section: len(self._by_kind[kind]) for kind in KIND_ORDER}

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._by_kind.values())

    def __bool__(self) -> bool:
        return len(self) > 0

    def __repr__(self) -> str:
        return f"<Manifest source={self.source!r} resources={len(self)}>"
