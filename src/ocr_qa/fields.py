from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

ALTERNATIVE_SEPARATOR = "|"
PATH_SEPARATOR = "."
MISSING_DISPLAY = "—"


@dataclass(frozen=True)
class FieldSpec:
    """A required field, satisfied by the first of its alternative paths that is present."""

    paths: tuple[str, ...]
    display: str | None = None

    @classmethod
    def parse(cls, spec: str, display: str | None = None) -> FieldSpec:
        paths = tuple(path.strip() for path in spec.split(ALTERNATIVE_SEPARATOR))
        return cls(paths=paths, display=display)

    @property
    def spec(self) -> str:
        return ALTERNATIVE_SEPARATOR.join(self.paths)

    @property
    def label(self) -> str:
        if self.display:
            return self.display
        return " OR ".join(self.paths)


@dataclass(frozen=True)
class PresenceResult:
    field: FieldSpec
    present: bool
    matched_path: str | None = None
    value: Any = None

    @property
    def display_value(self) -> str:
        if not self.present:
            return MISSING_DISPLAY
        return display_value(self.value)

    def as_dict(self) -> dict[str, Any]:
        return {
            "spec": self.field.spec,
            "label": self.field.label,
            "present": self.present,
            "matched_path": self.matched_path,
            "display_value": self.display_value,
        }


def get_field(document: Any, path: str) -> Any:
    """Resolve a dotted path, returning None as soon as a segment cannot be followed."""

    current: Any = document
    for part in path.split(PATH_SEPARATOR):
        if isinstance(current, dict):
            current = current.get(part)
        else:
            return None
    return current


def is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value != ""
    if isinstance(value, list):
        return len(value) > 0
    return True


def display_value(value: Any) -> str:
    if not is_present(value):
        return MISSING_DISPLAY
    if isinstance(value, dict | list):
        return json.dumps(value, indent=2, ensure_ascii=False)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def evaluate_field(document: Any, field: FieldSpec | str) -> PresenceResult:
    spec = FieldSpec.parse(field) if isinstance(field, str) else field
    for path in spec.paths:
        value = get_field(document, path)
        if is_present(value):
            return PresenceResult(field=spec, present=True, matched_path=path, value=value)
    return PresenceResult(field=spec, present=False)
