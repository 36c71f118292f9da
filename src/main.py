from __future__ import annotations

import logging

from fastapi import FastAPI

from src.api.ocr_qa import router as ocr_qa_router
from src.settings import Settings, load_env_file

load_env_file()
logging.basicConfig(level=Settings.from_env().log_level)

app = FastAPI(title="OCR Extraction QA Service")
app.include_router(ocr_qa_router)


@app.get("/health", tags=["meta"])
async def health() -> dict[str, str]:
    return {"status": "ok"}
