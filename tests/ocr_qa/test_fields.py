from __future__ import annotations

from typing import Any

import pytest

from src.ocr_qa.fields import FieldSpec, evaluate_field, get_field, is_present

from .builders import oficio_b3_payload


@pytest.mark.parametrize(
    ("document", "path"),
    [
        ({}, "a.b.c"),
        ({"a": None}, "a.b"),
        ({"a": "text"}, "a.b"),
        ({"a": [{"b": 1}]}, "a.b"),
        ({"a": {"b": 1}}, "a.b.c.d.e"),
        (None, "a"),
        ([1, 2, 3], "0"),
        ("scalar", "a"),
        (42, "a.b"),
    ],
)
def test_get_field_never_raises(document: Any, path: str) -> None:
    assert get_field(document, path) is None


def test_get_field_descends_nested_mappings() -> None:
    payload = oficio_b3_payload()
    assert get_field(payload, "oficio.destinatario_b3.endereco.uf") == "SP"
    assert get_field(payload, "oficio.veiculos")[0]["placa"] == "ABC1234"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, False),
        ("", False),
        ([], False),
        (" ", True),
        ("x", True),
        (0, True),
        (False, True),
        ({}, True),
        ([None], True),
    ],
)
def test_presence_rule(value: Any, expected: bool) -> None:
    assert is_present(value) is expected


def test_field_spec_parse_and_label() -> None:
    spec = FieldSpec.parse("processo_administrativo|oficio.solicitante")
    assert spec.paths == ("processo_administrativo", "oficio.solicitante")
    assert spec.spec == "processo_administrativo|oficio.solicitante"
    assert spec.label == "processo_administrativo OR oficio.solicitante"
    assert FieldSpec.parse("nome_financiado", "pessoas_identificadas").label == "pessoas_identificadas"


def test_first_present_alternative_wins() -> None:
    document = {"a": "first", "b": "second"}
    result = evaluate_field(document, "a|b")
    assert result.present is True
    assert result.matched_path == "a"
    assert result.value == "first"


def test_later_alternative_used_when_earlier_absent() -> None:
    document = {"a": "", "b": {"c": [1]}}
    result = evaluate_field(document, "a|b.c")
    assert result.present is True
    assert result.matched_path == "b.c"
    assert result.value == [1]


def test_absent_when_no_alternative_present() -> None:
    result = evaluate_field({"a": None, "b": []}, FieldSpec.parse("a|b|c.d"))
    assert result.present is False
    assert result.matched_path is None
    assert result.value is None
    assert result.display_value == "—"


def test_display_values() -> None:
    assert evaluate_field({"a": "x"}, "a").display_value == "x"
    assert evaluate_field({"a": 5}, "a").display_value == "5"
    assert evaluate_field({"a": True}, "a").display_value == "true"
    assert evaluate_field({"a": ["São"]}, "a").display_value == '[\n  "São"\n]'


def test_presence_row_serialization() -> None:
    row = evaluate_field(oficio_b3_payload(), "validation|oficio.assunto").as_dict()
    assert row == {
        "spec": "validation|oficio.assunto",
        "label": "validation OR oficio.assunto",
        "present": True,
        "matched_path": "oficio.assunto",
        "display_value": "Baixa de gravame",
    }
