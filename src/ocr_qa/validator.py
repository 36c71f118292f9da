from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, cast

from jsonschema import Draft202012Validator

from . import RULESET_VERSION
from .fields import FieldSpec, PresenceResult, evaluate_field
from .preprocess import JsonInputError, preprocess_json
from .rules import run_rule_packs

logger = logging.getLogger(__name__)

REGISTRY_PATH = "registry/required_fields.json"
REGISTRY_SCHEMA_PATH = "schema/required_fields_v1.json"

STATUS_SUCCESS = "success"
STATUS_PARTIAL = "partial"
STATUS_ERROR = "error"

SUCCESS_MESSAGE = "Todos os campos obrigatórios estão presentes!"
NONE_PRESENT_MESSAGE = "Nenhum campo obrigatório encontrado"


class RegistryError(ValueError):
    """Raised when the required-field registry does not match its schema."""


class UnknownCategoryError(KeyError):
    def __init__(self, category: str) -> None:
        super().__init__(category)
        self.category = category

    def __str__(self) -> str:
        return f"Unknown document category '{self.category}'"


@dataclass(frozen=True)
class Category:
    name: str
    title: str
    fields: list[FieldSpec]

    def as_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "title": self.title,
            "fields": [{"spec": spec.spec, "label": spec.label} for spec in self.fields],
        }


@dataclass(frozen=True)
class ValidationVerdict:
    status: str
    message: str
    present_fields: list[FieldSpec]
    missing_fields: list[FieldSpec]
    document: Any = None
    formatted_json: str = ""
    humanized: Any = None
    fields: list[PresenceResult] = field(default_factory=list)
    parsed: bool = True

    def as_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "parsed": self.parsed,
            "message": self.message,
            "present_fields": [spec.spec for spec in self.present_fields],
            "missing_fields": [spec.spec for spec in self.missing_fields],
            "document": self.document,
            "formatted_json": self.formatted_json,
            "humanized": self.humanized,
            "fields": [result.as_dict() for result in self.fields],
        }


def _load_json(path: str | Path) -> dict[str, Any]:
    data_path = Path(path)
    if not data_path.is_absolute():
        base_dir = Path(__file__).resolve().parents[2]
        data_path = base_dir / data_path
    with data_path.open("r", encoding="utf-8") as handle:
        return cast(dict[str, Any], json.load(handle))


def load_registry(path: str | Path = REGISTRY_PATH) -> dict[str, Category]:
    registry = _load_json(path)
    schema = _load_json(REGISTRY_SCHEMA_PATH)
    errors = list(Draft202012Validator(schema).iter_errors(registry))
    if errors:
        details = "; ".join(
            f"{'.'.join(str(p) for p in error.path) or '$'}: {error.message}" for error in errors
        )
        raise RegistryError(f"Invalid field registry {path}: {details}")

    categories: dict[str, Category] = {}
    for name, entry in registry["categories"].items():
        categories[name] = Category(
            name=name,
            title=entry.get("title", name),
            fields=[FieldSpec.parse(item["spec"], item.get("display")) for item in entry["fields"]],
        )
    return categories


def load_category(category: str, path: str | Path = REGISTRY_PATH) -> Category:
    categories = load_registry(path)
    try:
        return categories[category]
    except KeyError:
        raise UnknownCategoryError(category) from None


def load_field_specs(category: str, path: str | Path = REGISTRY_PATH) -> list[FieldSpec]:
    return load_category(category, path).fields


def _as_specs(field_specs: Sequence[FieldSpec | str]) -> list[FieldSpec]:
    return [spec if isinstance(spec, FieldSpec) else FieldSpec.parse(spec) for spec in field_specs]


def classify(
    document: Any,
    field_specs: Sequence[FieldSpec | str],
    *,
    formatted_json: str = "",
    humanized: Any = None,
) -> ValidationVerdict:
    specs = _as_specs(field_specs)
    results = [evaluate_field(document, spec) for spec in specs]
    present = [result.field for result in results if result.present]
    missing = [result.field for result in results if not result.present]

    if not missing:
        status, message = STATUS_SUCCESS, SUCCESS_MESSAGE
    elif present:
        status = STATUS_PARTIAL
        message = f"{len(present)} de {len(specs)} campos presentes"
    else:
        status, message = STATUS_ERROR, NONE_PRESENT_MESSAGE

    logger.debug("Classified document: %s (%d/%d present)", status, len(present), len(specs))
    return ValidationVerdict(
        status=status,
        message=message,
        present_fields=present,
        missing_fields=missing,
        document=document,
        formatted_json=formatted_json,
        humanized=humanized,
        fields=results,
    )


def error_verdict(message: str, field_specs: Sequence[FieldSpec | str]) -> ValidationVerdict:
    return ValidationVerdict(
        status=STATUS_ERROR,
        message=message,
        present_fields=[],
        missing_fields=_as_specs(field_specs),
        document={},
        parsed=False,
    )


def validate_json(text: str, field_specs: Sequence[FieldSpec | str]) -> ValidationVerdict:
    try:
        preprocessed = preprocess_json(text)
    except JsonInputError as exc:
        logger.info("Rejected OCR output: %s", exc)
        return error_verdict(str(exc), field_specs)
    return classify(
        preprocessed.original,
        field_specs,
        formatted_json=preprocessed.normalized_text,
        humanized=preprocessed.humanized,
    )


def review_category(text: str, category: Category) -> dict[str, Any]:
    """Validate OCR output against ``category`` and run the matching rule pack, if any."""

    verdict = validate_json(text, category.fields)
    rule_pack = run_rule_packs(verdict.document) if verdict.parsed else None
    return {
        "category": category.name,
        **verdict.as_dict(),
        "rule_pack": rule_pack.as_dict() if rule_pack is not None else None,
        "ruleset_version": RULESET_VERSION,
    }


def review(text: str, category: str, registry_path: str | Path = REGISTRY_PATH) -> dict[str, Any]:
    return review_category(text, load_category(category, registry_path))
