"""
Fixture loading and mutation.

Negative cases are derived from one valid baseline credential by deleting a
field or replacing its value with one of a disallowed type. Every mutation
works on a deep copy, so the shared baseline is never altered.
"""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Union

from vc_di_suite.errors import FixtureError


class _Absent:
    """Marker for a JSON ``undefined`` value."""

    _instance: _Absent | None = None

    def __new__(cls) -> _Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __deepcopy__(self, memo: dict[int, Any]) -> _Absent:
        return self


# Dropped from objects and written as null inside arrays, as JSON does.
ABSENT = _Absent()

# One representative value per JSON type. Label -> value.
DISALLOWED_TYPES: dict[str, Any] = {
    "string": "string",
    "object": {},
    "null": None,
    "undefined": ABSENT,
    "number": 10,
    "boolean": True,
    "array": [],
}

FieldPath = Union[str, tuple[str, ...]]


def disallowed_values(exclude: tuple[str, ...] = ()) -> list[tuple[str, Any]]:
    """Disallowed (label, value) pairs minus the excluded type labels.

    Values are fresh copies on every call.
    """
    unknown = set(exclude) - DISALLOWED_TYPES.keys()
    if unknown:
        raise ValueError(f"Unknown type label(s): {sorted(unknown)}")
    return [
        (label, copy.deepcopy(value))
        for label, value in DISALLOWED_TYPES.items()
        if label not in exclude
    ]


def type_label(value: Any) -> str:
    """JSON type name of a value."""
    if value is ABSENT:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def parse_path(path: FieldPath) -> tuple[str, ...]:
    """Split ``"proof.type"`` into ``("proof", "type")``.

    Only top-level fields and fields one level down are addressable.
    """
    parts = tuple(path.split(".")) if isinstance(path, str) else tuple(path)
    if not parts or len(parts) > 2 or not all(parts):
        raise ValueError(f"Invalid field path: {path!r}")
    return parts


def format_path(path: FieldPath) -> str:
    return ".".join(parse_path(path))


def _parent(doc: dict[str, Any], parts: tuple[str, ...]) -> dict[str, Any]:
    if len(parts) == 1:
        return doc
    parent = doc.get(parts[0])
    if not isinstance(parent, dict):
        raise KeyError(f"{parts[0]!r} is not an object in the fixture")
    return parent


def to_json_value(value: Any) -> Any:
    """Resolve ABSENT markers the way a JSON serializer would."""
    if value is ABSENT:
        return None
    if isinstance(value, list):
        return [to_json_value(item) for item in value]
    if isinstance(value, dict):
        return {
            key: to_json_value(item)
            for key, item in value.items()
            if item is not ABSENT
        }
    return value


def remove_field(doc: dict[str, Any], path: FieldPath) -> dict[str, Any]:
    """Return a deep copy of ``doc`` with the field at ``path`` deleted.

    Raises:
        KeyError: If the field does not exist.
    """
    parts = parse_path(path)
    mutated = copy.deepcopy(doc)
    parent = _parent(mutated, parts)
    if parts[-1] not in parent:
        raise KeyError(f"Field {format_path(parts)!r} not present in the fixture")
    del parent[parts[-1]]
    return mutated


def replace_field(doc: dict[str, Any], path: FieldPath, value: Any) -> dict[str, Any]:
    """Return a deep copy of ``doc`` with the field at ``path`` set to ``value``.

    Replacing with ABSENT removes the key; ABSENT inside a list becomes null.
    """
    parts = parse_path(path)
    mutated = copy.deepcopy(doc)
    parent = _parent(mutated, parts)
    if value is ABSENT:
        parent.pop(parts[-1], None)
    else:
        parent[parts[-1]] = to_json_value(copy.deepcopy(value))
    return mutated


@dataclass(frozen=True)
class DeleteField:
    """Mutation that removes one field."""

    path: FieldPath

    @property
    def label(self) -> str:
        return f"delete {format_path(self.path)}"

    def apply(self, doc: dict[str, Any]) -> dict[str, Any]:
        return remove_field(doc, self.path)


@dataclass(frozen=True)
class ReplaceField:
    """Mutation that swaps one field's value for ``value``."""

    path: FieldPath
    value: Any
    value_label: str | None = None

    @property
    def label(self) -> str:
        return f"{format_path(self.path)} as {self.value_label or type_label(self.value)}"

    def apply(self, doc: dict[str, Any]) -> dict[str, Any]:
        return replace_field(doc, self.path, self.value)


@dataclass(frozen=True)
class Unchanged:
    """Identity mutation used by positive cases."""

    label: str = "valid"

    def apply(self, doc: dict[str, Any]) -> dict[str, Any]:
        return copy.deepcopy(doc)


FixtureMutation = Union[DeleteField, ReplaceField, Unchanged]


def load_fixture(path: str | Path | None = None) -> dict[str, Any]:
    """Load the baseline credential.

    Args:
        path: JSON file to load. The bundled credential is used when omitted.
    """
    if path is None:
        content = resources.files("vc_di_suite").joinpath("data/vc.json").read_text()
        return json.loads(content)

    try:
        with Path(path).open() as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise FixtureError(f"Could not load fixture {path}: {e}") from e
    if not isinstance(data, dict):
        raise FixtureError(f"Fixture {path} must contain a JSON object")
    return data


def create_request_body(vc: dict[str, Any], checks: tuple[str, ...] = ("proof",)) -> dict[str, Any]:
    """Wrap a credential in a VC-API verify request body."""
    return {
        "verifiableCredential": vc,
        "options": {"checks": list(checks)},
    }
