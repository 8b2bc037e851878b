"""
Implementation registry.

Loads implementation manifests and partitions implementations by the
capability tags declared on their issuer and verifier endpoints.

Manifest format (one JSON file per implementation):

    {
      "name": "Example Corp",
      "issuers": [{"id": "did:key:...", "endpoint": "https://...", "tags": ["VC-API"]}],
      "verifiers": [{"endpoint": "https://...", "tags": ["VC-API"]}]
    }
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Iterator

from vc_di_suite.errors import CatalogError


logger = logging.getLogger(__name__)


class Role(Enum):
    """Role an endpoint plays."""

    ISSUER = "issuer"
    VERIFIER = "verifier"


@dataclass(frozen=True)
class Endpoint:
    """A single issuer or verifier endpoint of an implementation."""

    name: str
    url: str
    role: Role
    tags: frozenset[str] = frozenset()
    id: str | None = None
    options: dict[str, Any] = field(default_factory=dict, hash=False)
    headers: dict[str, str] = field(default_factory=dict, hash=False)

    @classmethod
    def from_dict(cls, name: str, role: Role, data: dict[str, Any]) -> Endpoint:
        """Create an Endpoint from a manifest entry."""
        if not isinstance(data, dict):
            raise CatalogError(f"{name}: {role.value} entry must be an object")
        url = data.get("endpoint")
        if not isinstance(url, str) or not url:
            raise CatalogError(f"{name}: {role.value} entry is missing 'endpoint'")
        tags = data.get("tags", [])
        if not isinstance(tags, list):
            raise CatalogError(f"{name}: {role.value} 'tags' must be a list")
        return cls(
            name=name,
            url=url,
            role=role,
            tags=frozenset(tags),
            id=data.get("id"),
            options=dict(data.get("options") or {}),
            headers=dict(data.get("headers") or {}),
        )

    def has_any_tag(self, tags: Iterable[str]) -> bool:
        """Check whether this endpoint carries at least one of ``tags``."""
        return not self.tags.isdisjoint(tags)


@dataclass(frozen=True)
class Implementation:
    """A named implementation and its endpoints."""

    name: str
    issuers: tuple[Endpoint, ...] = ()
    verifiers: tuple[Endpoint, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Implementation:
        """Create an Implementation from a parsed manifest."""
        if not isinstance(data, dict):
            raise CatalogError("Manifest must be a JSON object")
        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise CatalogError("Manifest is missing 'name'")
        endpoints = {}
        for role, key in ((Role.ISSUER, "issuers"), (Role.VERIFIER, "verifiers")):
            items = data.get(key, [])
            if not isinstance(items, list):
                raise CatalogError(f"{name}: '{key}' must be a list")
            endpoints[key] = tuple(Endpoint.from_dict(name, role, item) for item in items)
        return cls(name=name, **endpoints)

    def endpoints(self, role: Role) -> tuple[Endpoint, ...]:
        """Endpoints for the given role."""
        return self.issuers if role == Role.ISSUER else self.verifiers

    def find(self, role: Role, tag: str) -> Endpoint | None:
        """First endpoint for ``role`` carrying ``tag``."""
        for endpoint in self.endpoints(role):
            if tag in endpoint.tags:
                return endpoint
        return None

    def supports(self, role: Role, tags: Iterable[str]) -> bool:
        """Check whether any endpoint for ``role`` has one of ``tags``."""
        tags = tuple(tags)
        return any(endpoint.has_any_tag(tags) for endpoint in self.endpoints(role))


@dataclass(frozen=True)
class TagFilterResult:
    """Partition of a catalog into matching and non-matching implementations."""

    role: Role
    tags: tuple[str, ...]
    match: dict[str, Implementation]
    non_match: dict[str, Implementation]


class ImplementationCatalog:
    """Ordered collection of known implementations."""

    def __init__(self, implementations: Iterable[Implementation] = ()) -> None:
        self._implementations: dict[str, Implementation] = {}
        for implementation in implementations:
            if implementation.name in self._implementations:
                raise CatalogError(f"Duplicate implementation name: {implementation.name}")
            self._implementations[implementation.name] = implementation

    @classmethod
    def from_manifests(cls, manifests: Iterable[dict[str, Any]]) -> ImplementationCatalog:
        """Build a catalog from parsed manifest dictionaries."""
        return cls(Implementation.from_dict(manifest) for manifest in manifests)

    @classmethod
    def from_directory(cls, path: str | Path) -> ImplementationCatalog:
        """Load every ``*.json`` manifest in a directory, ordered by file name.

        Raises:
            CatalogError: If the directory is missing or a manifest is invalid.
        """
        directory = Path(path)
        if not directory.is_dir():
            raise CatalogError(f"Implementations directory not found: {directory}")

        manifests: list[dict[str, Any]] = []
        for manifest_path in sorted(directory.glob("*.json")):
            try:
                with manifest_path.open() as f:
                    manifests.append(json.load(f))
            except json.JSONDecodeError as e:
                raise CatalogError(f"Invalid JSON in {manifest_path.name}: {e}") from e

        catalog = cls.from_manifests(manifests)
        logger.info("Loaded %d implementation(s) from %s", len(catalog), directory)
        return catalog

    def __iter__(self) -> Iterator[Implementation]:
        return iter(self._implementations.values())

    def __len__(self) -> int:
        return len(self._implementations)

    def __contains__(self, name: object) -> bool:
        return name in self._implementations

    def get(self, name: str) -> Implementation | None:
        """Look up an implementation by name."""
        return self._implementations.get(name)

    def filter_by_tag(self, role: Role, tags: Iterable[str]) -> TagFilterResult:
        """Partition implementations by whether they support ``tags`` for ``role``.

        Both mappings keep catalog order and are disjoint.
        """
        tags = tuple(tags)
        match: dict[str, Implementation] = {}
        non_match: dict[str, Implementation] = {}
        for implementation in self:
            if implementation.supports(role, tags):
                match[implementation.name] = implementation
            else:
                non_match[implementation.name] = implementation
        return TagFilterResult(role=role, tags=tags, match=match, non_match=non_match)
