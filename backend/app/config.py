"""Application settings: read once from the environment.

``load_dotenv()`` runs in ``app.main`` before the first ``get_settings()``
call, so values from a local ``.env`` file are picked up here. The settings
object is passed into the generation service rather than read ad hoc, which
keeps the service testable with hand-built settings.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Tuple

from .constants import DEFAULT_CONFIDENCE

_DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000",      # Next.js dev server
    "http://127.0.0.1:3000",      # Alternative localhost
    "http://localhost:3001",      # Alternative port
)


def _env_float(key: str, default: float) -> float:
    try:
        return float(os.getenv(key, str(default)))
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    raw = os.getenv(key)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_list(key: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    openai_api_key: str = ""
    openai_model: str = "gpt-4"
    openai_base_url: str = "https://api.openai.com/v1"
    temperature: float = 0.7
    max_completion_tokens: int = 4000
    request_timeout: float = 40.0
    use_mock_model: bool = True
    confidence: float = DEFAULT_CONFIDENCE
    debug: bool = False
    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: Tuple[str, ...] = field(default=_DEFAULT_CORS_ORIGINS)

    @property
    def openai_configured(self) -> bool:
        return bool(self.openai_api_key) and self.openai_api_key != "your_openai_api_key_here"


def load_settings() -> Settings:
    """Build a fresh Settings instance from the current environment."""
    confidence = _env_float("IDEA_CONFIDENCE", DEFAULT_CONFIDENCE)
    return Settings(
        openai_api_key=os.getenv("OPENAI_API_KEY", "").strip(),
        openai_model=os.getenv("OPENAI_MODEL", "gpt-4").strip() or "gpt-4",
        openai_base_url=(
            os.getenv("OPENAI_BASE_URL", "").strip().rstrip("/") or "https://api.openai.com/v1"
        ),
        temperature=_env_float("OPENAI_TEMPERATURE", 0.7),
        max_completion_tokens=_env_int("OPENAI_MAX_COMPLETION_TOKENS", 4000),
        request_timeout=_env_float("OPENAI_REQUEST_TIMEOUT", 40.0),
        use_mock_model=_env_bool("USE_MOCK_MODEL", True),
        confidence=min(max(confidence, 0.0), 1.0),
        debug=_env_bool("DEBUG", False),
        host=os.getenv("HOST", "127.0.0.1").strip() or "127.0.0.1",
        port=_env_int("PORT", 8000),
        cors_origins=_env_list("CORS_ORIGINS", _DEFAULT_CORS_ORIGINS),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, loaded on first use."""
    return load_settings()
