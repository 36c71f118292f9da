from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from .fields import MISSING_DISPLAY, get_field
from .preprocess import humanize_label

DOC_TYPE_FIELD = "doc_type"
OFICIO_B3 = "oficio_b3"
DOCUMENTO_COMPROBATORIO = "documento_comprobatorio"

B3_ADDRESS: dict[str, str] = {
    "cep": "01013-001",
    "cidade": "São Paulo",
    "linha1": "Rua Quinze De Novembro, Nº 275 Centro",
    "linha2": "Cep: 01013-001 - São Paulo - Sp",
    "uf": "SP",
}

LIEN_RELEASE_PHRASE = "baixa de gravame"
LIEN_RELEASE_SUBJECT_TYPE = "baixa_gravame"

PROCESS_NUMBER_PATTERN = re.compile(r"\d{5}\.\d{6}/\d{4}-\d{2}", re.ASCII)
PROCESS_NUMBER_MASK = "XXXXX.XXXXXX/YYYY-DD"
PROCESS_NUMBER_EXAMPLE = "12345.678901/2024-01"


@dataclass(frozen=True)
class Rule:
    name: str
    is_valid: bool
    message: str
    extracted_data: dict[str, str] | None = None

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": self.name,
            "is_valid": self.is_valid,
            "message": self.message,
        }
        if self.extracted_data is not None:
            payload["extracted_data"] = self.extracted_data
        return payload


@dataclass(frozen=True)
class RulePackResult:
    doc_type: str
    rules: list[Rule] = field(default_factory=list)

    @property
    def valid_count(self) -> int:
        return sum(1 for rule in self.rules if rule.is_valid)

    @property
    def total(self) -> int:
        return len(self.rules)

    @property
    def all_valid(self) -> bool:
        return self.valid_count == self.total

    @property
    def summary(self) -> str:
        return f"{self.valid_count}/{self.total} válidos"

    def as_dict(self) -> dict[str, Any]:
        return {
            "doc_type": self.doc_type,
            "valid_count": self.valid_count,
            "total": self.total,
            "all_valid": self.all_valid,
            "summary": self.summary,
            "rules": [rule.as_dict() for rule in self.rules],
        }


def _non_blank(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def _text(value: Any) -> str:
    if value is None or value == "":
        return MISSING_DISPLAY
    return str(value)


def _label(value: Any) -> str:
    return humanize_label(_text(value))


def _section(document: dict[str, Any], key: str) -> dict[str, Any]:
    value = document.get(key)
    return value if isinstance(value, dict) else {}


def _b3_address_rule(oficio: dict[str, Any]) -> Rule:
    endereco = get_field(oficio, "destinatario_b3.endereco")
    is_valid = isinstance(endereco, dict) and all(
        endereco.get(key) == expected for key, expected in B3_ADDRESS.items()
    )
    extracted: dict[str, str] | None = None
    if isinstance(endereco, dict):
        extracted = {
            "CEP": _text(endereco.get("cep")),
            "Cidade": _text(endereco.get("cidade")),
            "Endereço": _text(endereco.get("linha1")),
            "UF": _text(endereco.get("uf")),
        }
    return Rule(
        name="Direcionado à B3",
        is_valid=is_valid,
        message=(
            "Endereço do destinatário B3 válido"
            if is_valid
            else "Endereço do destinatário B3 inválido ou incompleto"
        ),
        extracted_data=extracted,
    )


def _request_rule(oficio: dict[str, Any]) -> Rule:
    assunto = oficio.get("assunto")
    solicitacao = oficio.get("solicitacao")
    tipo_assunto = oficio.get("tipo_assunto")

    mentions_lien_release = (
        isinstance(solicitacao, str) and LIEN_RELEASE_PHRASE in solicitacao.lower()
    )
    is_valid = (
        _non_blank(assunto)
        and mentions_lien_release
        and tipo_assunto == LIEN_RELEASE_SUBJECT_TYPE
    )
    return Rule(
        name="Solicitação",
        is_valid=is_valid,
        message=(
            "Solicitação válida com assunto e tipo corretos"
            if is_valid
            else "Solicitação inválida - verifique assunto, texto e tipo"
        ),
        extracted_data={
            "Assunto": _label(assunto),
            "Tipo de Assunto": _label(tipo_assunto),
            "Contém 'Baixa de Gravame'": "Sim" if mentions_lien_release else "Não",
        },
    )


def _reason_destination_rule(oficio: dict[str, Any]) -> Rule:
    motivo = get_field(oficio, "motivo_destinacao.motivo")
    destinacao = get_field(oficio, "motivo_destinacao.destinacao")
    is_valid = _non_blank(motivo) and _non_blank(destinacao)
    return Rule(
        name="Motivo e Destinação",
        is_valid=is_valid,
        message="Motivo e destinação preenchidos" if is_valid else "Motivo ou destinação ausentes",
        extracted_data={
            "Motivo": _label(motivo),
            "Destinação": _label(destinacao),
        },
    )


def _vehicle_rule(oficio: dict[str, Any]) -> Rule:
    veiculos = oficio.get("veiculos")
    if not isinstance(veiculos, list) or not veiculos:
        return Rule(
            name="Dados do Veículo",
            is_valid=False,
            message="Nenhum veículo encontrado",
        )

    first = veiculos[0]
    veiculo = first if isinstance(first, dict) else {}
    # renavam is reported but never required
    is_valid = all(_non_blank(veiculo.get(key)) for key in ("placa", "chassi", "uf"))
    count = len(veiculos)
    plural = "s" if count > 1 else ""
    return Rule(
        name="Dados do Veículo",
        is_valid=is_valid,
        message=(
            f"Veículo válido ({count} veículo{plural} encontrado{plural})"
            if is_valid
            else "Dados do veículo incompletos (obrigatórios: placa, chassi, UF)"
        ),
        extracted_data=(
            {
                "Placa": _text(veiculo.get("placa")),
                "Chassi": _text(veiculo.get("chassi")),
                "Renavam (opcional)": _text(veiculo.get("renavam")),
                "UF": _text(veiculo.get("uf")),
            }
            if isinstance(first, dict)
            else None
        ),
    )


def _requester_rule(oficio: dict[str, Any]) -> Rule:
    orgao = get_field(oficio, "solicitante.orgao")
    unidade = get_field(oficio, "solicitante.unidade")
    is_valid = _non_blank(orgao) and _non_blank(unidade)
    return Rule(
        name="Solicitante",
        is_valid=is_valid,
        message="Dados do solicitante completos" if is_valid else "Órgão ou unidade ausentes",
        extracted_data={
            "Órgão": _text(orgao),
            "Unidade": _text(unidade),
        },
    )


def oficio_b3_rules(document: dict[str, Any]) -> list[Rule]:
    oficio = _section(document, "oficio")
    return [
        _b3_address_rule(oficio),
        _request_rule(oficio),
        _reason_destination_rule(oficio),
        _vehicle_rule(oficio),
        _requester_rule(oficio),
    ]


def _process_number_rule(document: dict[str, Any]) -> Rule:
    processo = document.get("processo_administrativo")
    if processo is None or (isinstance(processo, str) and processo.strip() == ""):
        return Rule(
            name="Processo Administrativo",
            is_valid=False,
            message="Campo 'processo_administrativo' ausente ou vazio",
            extracted_data={
                "Processo Administrativo": MISSING_DISPLAY,
                "Formato": MISSING_DISPLAY,
            },
        )

    is_valid = isinstance(processo, str) and PROCESS_NUMBER_PATTERN.fullmatch(processo) is not None
    return Rule(
        name="Processo Administrativo",
        is_valid=is_valid,
        message=(
            "Formato de processo administrativo válido"
            if is_valid
            else f"Formato inválido. Esperado: {PROCESS_NUMBER_MASK}"
        ),
        extracted_data={
            "Processo Administrativo": str(processo),
            "Formato": "✓ Válido" if is_valid else "✗ Inválido",
            "Padrão Esperado": PROCESS_NUMBER_MASK,
        },
    )


def documento_comprobatorio_rules(document: dict[str, Any]) -> list[Rule]:
    return [_process_number_rule(document)]


RULE_PACKS: dict[str, Callable[[dict[str, Any]], list[Rule]]] = {
    OFICIO_B3: oficio_b3_rules,
    DOCUMENTO_COMPROBATORIO: documento_comprobatorio_rules,
}


def run_rule_packs(document: Any) -> RulePackResult | None:
    """Run the rule pack selected by ``doc_type``; other documents get no pack at all."""

    if not isinstance(document, dict):
        return None
    doc_type = document.get(DOC_TYPE_FIELD)
    if not isinstance(doc_type, str):
        return None
    pack = RULE_PACKS.get(doc_type)
    if pack is None:
        return None
    return RulePackResult(doc_type=doc_type, rules=pack(document))
