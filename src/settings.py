from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_EXTRACTION_URL = "https://api-desbloqueio-b3-631188825498.europe-west1.run.app/vehicles"
DEFAULT_EXTRACTION_TIMEOUT = 60.0
DEFAULT_REGISTRY_PATH = "registry/required_fields.json"
DEFAULT_LOG_LEVEL = "INFO"

_QUOTE_CHARS = {"'", '"'}


def _parse_env_line(raw_line: str) -> tuple[str, str] | None:
    line = raw_line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    key, value = (part.strip() for part in line.split("=", 1))
    if not key:
        return None
    if len(value) >= 2 and value[0] == value[-1] and value[0] in _QUOTE_CHARS:
        return key, value[1:-1]
    # Inline comments only apply to unquoted values.
    if " #" in value:
        value = value.split(" #", 1)[0].rstrip()
    return key, value


def load_env_file(path: Path | None = None, *, override: bool = False) -> dict[str, str]:
    """Load ``KEY=value`` pairs from a .env file into ``os.environ``.

    Returns the pairs that were applied. A missing file is not an error, and
    variables already set in the environment win unless ``override`` is True.
    """

    env_path = path or Path(__file__).resolve().parents[1] / ".env"
    try:
        content = env_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}

    applied: dict[str, str] = {}
    for raw_line in content.splitlines():
        parsed = _parse_env_line(raw_line)
        if parsed is None:
            continue
        key, value = parsed
        if not override and key in os.environ:
            continue
        os.environ[key] = value
        applied[key] = value
    return applied


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    extraction_url: str = DEFAULT_EXTRACTION_URL
    extraction_timeout: float = DEFAULT_EXTRACTION_TIMEOUT
    registry_path: str = DEFAULT_REGISTRY_PATH
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            extraction_url=os.getenv("OCR_QA_EXTRACTION_URL", DEFAULT_EXTRACTION_URL),
            extraction_timeout=_float_env("OCR_QA_EXTRACTION_TIMEOUT", DEFAULT_EXTRACTION_TIMEOUT),
            registry_path=os.getenv("OCR_QA_REGISTRY_PATH", DEFAULT_REGISTRY_PATH),
            log_level=os.getenv("OCR_QA_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
        )
