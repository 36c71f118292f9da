from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, File, HTTPException, Request, UploadFile

from ..ocr_qa.extraction import ExtractionError, ExtractionResult, extract_document
from ..ocr_qa.validator import (
    Category,
    RegistryError,
    UnknownCategoryError,
    load_category,
    load_registry,
    review_category,
)
from ..settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/qa", tags=["ocr-qa"])


def _settings() -> Settings:
    return Settings.from_env()


def _category(name: str) -> Category:
    try:
        return load_category(name, _settings().registry_path)
    except UnknownCategoryError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except RegistryError as exc:
        logger.error("Field registry is invalid: %s", exc)
        raise HTTPException(status_code=500, detail="Field registry is invalid") from exc


@router.get("/categories")
async def list_categories() -> list[dict[str, str]]:
    try:
        categories = load_registry(_settings().registry_path)
    except RegistryError as exc:
        logger.error("Field registry is invalid: %s", exc)
        raise HTTPException(status_code=500, detail="Field registry is invalid") from exc
    return [{"name": c.name, "title": c.title} for c in categories.values()]


@router.get("/categories/{category}/fields")
async def category_fields(category: str) -> dict[str, Any]:
    return _category(category).as_dict()


@router.post("/categories/{category}/validate")
async def validate_text(category: str, request: Request) -> dict[str, Any]:
    resolved = _category(category)
    body = await request.body()
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise HTTPException(
            status_code=422, detail="O corpo da requisição não é UTF-8 válido"
        ) from exc
    return review_category(text, resolved)


@router.post("/categories/{category}/upload")
async def upload_pdf(category: str, file: UploadFile = File(...)):  # noqa: B008
    resolved = _category(category)
    filename = file.filename or ""
    if not filename.lower().endswith(".pdf"):
        raise HTTPException(status_code=422, detail="Envie um arquivo PDF")
    settings = _settings()
    content = await file.read()
    try:
        extraction: ExtractionResult = extract_document(content, filename, settings=settings)
    except ExtractionError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    text = json.dumps(extraction.payload, indent=2, ensure_ascii=False)
    return {
        "extraction_endpoint": extraction.endpoint,
        **review_category(text, resolved),
    }
