from __future__ import annotations

import json
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

_INVISIBLE_PATTERN = re.compile(r"[\u200b-\u200d\ufeff]")

MAX_NESTING_DEPTH = 200

ABBREVIATIONS: MappingProxyType[str, str] = MappingProxyType(
    {
        "b3": "B3",
        "cpf": "CPF",
        "cnpj": "CNPJ",
        "uf": "UF",
        "ocr": "OCR",
        "qa": "QA",
    }
)

ACCENTED_WORDS: MappingProxyType[str, str] = MappingProxyType(
    {
        "leilao": "Leilão",
        "publico": "Público",
        "orgao": "Órgão",
        "oficio": "Ofício",
        "motivo": "Motivo",
        "destinacao": "Destinação",
        "validacao": "Validação",
        "numero": "Número",
        "processos": "Processos",
        "administrativo": "Administrativo",
        "administrativos": "Administrativos",
        "veiculo": "Veículo",
        "veiculos": "Veículos",
        "solicitacao": "Solicitação",
        "solicitante": "Solicitante",
        "unidade": "Unidade",
    }
)


class JsonInputError(ValueError):
    """Raised when OCR output cannot be turned into a document."""


class EmptyInputError(JsonInputError):
    def __init__(self) -> None:
        super().__init__("JSON vazio - por favor, cole um JSON válido")


class JsonSyntaxError(JsonInputError):
    def __init__(self, diagnostic: str) -> None:
        super().__init__(f"JSON inválido: {diagnostic}")
        self.diagnostic = diagnostic


@dataclass(frozen=True)
class PreprocessedJson:
    original: Any
    humanized: Any
    normalized_text: str


def normalize_json_text(text: str) -> str:
    """Drop zero-width characters and the BOM, then trim surrounding whitespace."""

    return _INVISIBLE_PATTERN.sub("", text).strip()


def _reject_constant(name: str) -> Any:
    raise JsonSyntaxError(f"Unexpected token {name!r} (non-standard JSON constant)")


def _check_document(document: Any) -> None:
    # Iterative: the tree may be deeper than the recursion limit.
    pending: list[tuple[Any, int]] = [(document, 1)]
    while pending:
        node, depth = pending.pop()
        if isinstance(node, str):
            try:
                node.encode("utf-8")
            except UnicodeEncodeError as exc:
                raise JsonSyntaxError(
                    f"Lone surrogate {node[exc.start]!r} is not valid Unicode text"
                ) from None
            continue
        if not isinstance(node, dict | list):
            continue
        if depth > MAX_NESTING_DEPTH:
            raise JsonSyntaxError(f"Maximum nesting depth of {MAX_NESTING_DEPTH} exceeded")
        if isinstance(node, dict):
            pending.extend((key, depth) for key in node)
            pending.extend((value, depth + 1) for value in node.values())
        else:
            pending.extend((item, depth + 1) for item in node)


def parse_json(text: str) -> Any:
    normalized = normalize_json_text(text)
    if not normalized:
        raise EmptyInputError()
    try:
        document = json.loads(normalized, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        raise JsonSyntaxError(str(exc)) from exc
    except RecursionError:
        raise JsonSyntaxError(
            f"Maximum nesting depth of {MAX_NESTING_DEPTH} exceeded"
        ) from None
    _check_document(document)
    return document


def serialize_document(document: Any) -> str:
    return json.dumps(document, indent=2, ensure_ascii=False)


def _humanize_segment(segment: str) -> str:
    lowered = segment.lower()
    if lowered in ABBREVIATIONS:
        return ABBREVIATIONS[lowered]
    if lowered in ACCENTED_WORDS:
        return ACCENTED_WORDS[lowered]
    return segment[:1].upper() + segment[1:].lower()


def humanize_label(token: Any) -> Any:
    """Turn a snake_case identifier into a display title.

    ``"oficio_b3"`` becomes ``"Ofício B3"`` and ``"leilao_publico"`` becomes
    ``"Leilão Público"``. Abbreviations win over accented words, which win over
    plain capitalization. Empty segments (``"a__b"``) are dropped. Anything that
    is not a non-empty string is returned as-is.
    """

    if not isinstance(token, str) or not token:
        return token
    segments = [_humanize_segment(segment) for segment in token.split("_") if segment]
    return " ".join(segments)


def humanize_values(node: Any) -> Any:
    """Return a humanized copy of ``node`` for display; keys are left untouched."""

    if isinstance(node, dict):
        return {key: humanize_values(value) for key, value in node.items()}
    if isinstance(node, list):
        return [humanize_values(item) for item in node]
    if isinstance(node, str) and "_" in node:
        return humanize_label(node)
    return node


def preprocess_json(text: str) -> PreprocessedJson:
    original = parse_json(text)
    return PreprocessedJson(
        original=original,
        humanized=humanize_values(original),
        normalized_text=serialize_document(original),
    )
