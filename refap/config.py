# refap/config.py
"""
Settings loaded from the environment (and a local .env file when present).

Usage:
    from refap.config import get_settings
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

# Load .env automatically
load_dotenv()

MISTRAL_BASE_URL = "https://api.mistral.ai/v1"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    return float(raw) if raw not in (None, "") else default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    return int(raw) if raw not in (None, "") else default


@dataclass(frozen=True)
class Settings:
    """Tunable runtime settings. Defaults match the production deployment."""

    mistral_api_key: Optional[str] = None
    llm_base_url: str = MISTRAL_BASE_URL
    llm_model: str = "mistral-medium-latest"
    llm_temperature: float = 0.3
    llm_top_p: float = 0.7
    llm_max_tokens: int = 150
    llm_timeout: float = 20.0

    knowledge_path: str = "data/data.txt"
    knowledge_ttl_seconds: float = 5 * 60
    response_cache_ttl_seconds: float = 5 * 60
    response_cache_capacity: int = 1000
    context_top_k: int = 3

    app_env: str = "production"
    app_version: str = "0.1.0"
    log_level: str = "INFO"

    @property
    def is_development(self) -> bool:
        return self.app_env.lower() in {"development", "dev"}

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            mistral_api_key=os.getenv("MISTRAL_API_KEY") or None,
            llm_base_url=os.getenv("LLM_BASE_URL", MISTRAL_BASE_URL),
            llm_model=os.getenv("LLM_MODEL", cls.llm_model),
            llm_temperature=_env_float("LLM_TEMPERATURE", cls.llm_temperature),
            llm_top_p=_env_float("LLM_TOP_P", cls.llm_top_p),
            llm_max_tokens=_env_int("LLM_MAX_TOKENS", cls.llm_max_tokens),
            llm_timeout=_env_float("LLM_TIMEOUT", cls.llm_timeout),
            knowledge_path=os.getenv("KNOWLEDGE_PATH", cls.knowledge_path),
            knowledge_ttl_seconds=_env_float("KNOWLEDGE_TTL_SECONDS", cls.knowledge_ttl_seconds),
            response_cache_ttl_seconds=_env_float(
                "RESPONSE_CACHE_TTL_SECONDS", cls.response_cache_ttl_seconds
            ),
            response_cache_capacity=_env_int("RESPONSE_CACHE_CAPACITY", cls.response_cache_capacity),
            context_top_k=_env_int("CONTEXT_TOP_K", cls.context_top_k),
            app_env=os.getenv("APP_ENV", cls.app_env),
            app_version=os.getenv("APP_VERSION", cls.app_version),
            log_level=os.getenv("LOG_LEVEL", cls.log_level),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
