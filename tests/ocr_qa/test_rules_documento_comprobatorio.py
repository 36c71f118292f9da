from __future__ import annotations

from typing import Any

import pytest

from src.ocr_qa.rules import Rule, run_rule_packs

from .builders import documento_comprobatorio_payload

MISSING_MESSAGE = "Campo 'processo_administrativo' ausente ou vazio"
FORMAT_MESSAGE = "Formato inválido. Esperado: XXXXX.XXXXXX/YYYY-DD"


def _only_rule(processo: Any) -> Rule:
    result = run_rule_packs(documento_comprobatorio_payload(processo))
    assert result is not None
    assert result.doc_type == "documento_comprobatorio"
    assert len(result.rules) == 1
    return result.rules[0]


def test_valid_process_number() -> None:
    rule = _only_rule("12345.678901/2024-01")
    assert rule.is_valid is True
    assert rule.message == "Formato de processo administrativo válido"
    assert rule.extracted_data == {
        "Processo Administrativo": "12345.678901/2024-01",
        "Formato": "✓ Válido",
        "Padrão Esperado": "XXXXX.XXXXXX/YYYY-DD",
    }


@pytest.mark.parametrize(
    "processo",
    [
        "1234.678901/2024-01",
        "12345.678901/2024-1",
        "12345-678901/2024-01",
        "12345.678901/2024-01\n",
        " 12345.678901/2024-01",
        "١٢٣٤٥.678901/2024-01",
        12345,
    ],
)
def test_malformed_process_number(processo: Any) -> None:
    rule = _only_rule(processo)
    assert rule.is_valid is False
    assert rule.message == FORMAT_MESSAGE
    assert rule.extracted_data is not None
    assert rule.extracted_data["Formato"] == "✗ Inválido"


@pytest.mark.parametrize("processo", [None, "", "   "])
def test_missing_process_number(processo: Any) -> None:
    rule = _only_rule(processo)
    assert rule.is_valid is False
    assert rule.message == MISSING_MESSAGE
    assert rule.extracted_data == {"Processo Administrativo": "—", "Formato": "—"}


@pytest.mark.parametrize(
    "document",
    [
        {"doc_type": "outro", "processo_administrativo": "bad"},
        {"processo_administrativo": "12345.678901/2024-01"},
        {"doc_type": ["documento_comprobatorio"]},
        ["documento_comprobatorio"],
        None,
    ],
)
def test_unknown_discriminant_runs_no_pack(document: Any) -> None:
    assert run_rule_packs(document) is None
