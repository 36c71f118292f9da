from __future__ import annotations

import httpx
import pytest

from src.ocr_qa.extraction import ExtractionError, extract_document
from src.settings import Settings

from .builders import desbloqueio_payload

SETTINGS = Settings(extraction_url="https://extractor.test/vehicles", extraction_timeout=5.0)


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_extract_posts_pdf_and_unwraps_array_response() -> None:
    seen: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = request.read()
        return httpx.Response(200, json=[desbloqueio_payload(), 200])

    result = extract_document(b"%PDF-1.4", "oficio.pdf", settings=SETTINGS, client=_client(handler))

    assert seen["url"] == "https://extractor.test/vehicles"
    assert b'name="file"; filename="oficio.pdf"' in seen["body"]
    assert result.payload == desbloqueio_payload()
    assert result.status_code == 200
    assert result.endpoint == SETTINGS.extraction_url


def test_extract_accepts_plain_object_response() -> None:
    client = _client(lambda request: httpx.Response(200, json={"cpf": ["1"]}))
    result = extract_document(b"%PDF", "a.pdf", settings=SETTINGS, client=client)
    assert result.payload == {"cpf": ["1"]}


def test_extract_reports_http_status() -> None:
    client = _client(lambda request: httpx.Response(503, text="unavailable"))
    with pytest.raises(ExtractionError) as excinfo:
        extract_document(b"%PDF", "a.pdf", settings=SETTINGS, client=client)
    assert str(excinfo.value) == "Erro na requisição: 503"


def test_extract_reports_transport_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(ExtractionError) as excinfo:
        extract_document(b"%PDF", "a.pdf", settings=SETTINGS, client=_client(handler))
    assert "timed out" in str(excinfo.value)


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="<html>oops</html>"),
        httpx.Response(200, json=["not an object", 200]),
        httpx.Response(200, json=[]),
    ],
)
def test_extract_rejects_unusable_payloads(response: httpx.Response) -> None:
    client = _client(lambda request: response)
    with pytest.raises(ExtractionError):
        extract_document(b"%PDF", "a.pdf", settings=SETTINGS, client=client)
