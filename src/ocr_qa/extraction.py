from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from ..settings import Settings

logger = logging.getLogger(__name__)


class ExtractionError(RuntimeError):
    """Raised when the extraction service does not return a usable document."""


@dataclass
class ExtractionResult:
    payload: dict[str, Any]
    status_code: int
    endpoint: str


def _unwrap(data: Any) -> Any:
    # The service answers either with the object itself or with [object, status].
    if isinstance(data, list) and data:
        return data[0]
    return data


def extract_document(
    content: bytes,
    filename: str,
    *,
    settings: Settings | None = None,
    client: httpx.Client | None = None,
) -> ExtractionResult:
    settings = settings or Settings.from_env()
    files = {"file": (filename, content, "application/pdf")}
    owns_client = client is None
    http = client or httpx.Client(timeout=settings.extraction_timeout)
    try:
        response = http.post(settings.extraction_url, files=files)
    except httpx.HTTPError as exc:
        logger.warning("Extraction request to %s failed: %s", settings.extraction_url, exc)
        raise ExtractionError(f"Erro ao processar o PDF: {exc}") from exc
    finally:
        if owns_client:
            http.close()

    if not response.is_success:
        logger.warning(
            "Extraction service %s answered %s", settings.extraction_url, response.status_code
        )
        raise ExtractionError(f"Erro na requisição: {response.status_code}")

    try:
        data = response.json()
    except ValueError as exc:
        raise ExtractionError("Resposta do serviço de extração não é um JSON válido") from exc

    payload = _unwrap(data)
    if not isinstance(payload, dict):
        raise ExtractionError("Resposta do serviço de extração não contém um objeto JSON")
    return ExtractionResult(
        payload=payload,
        status_code=response.status_code,
        endpoint=settings.extraction_url,
    )
