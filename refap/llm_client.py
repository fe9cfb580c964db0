# refap/llm_client.py
"""
Chat-completion client for the Mistral API (or any OpenAI-compatible endpoint).
Usage:
    from refap.llm_client import get_client, chat_text
"""
from __future__ import annotations

from typing import Dict, List, Optional

from openai import OpenAI

from refap.config import Settings, get_settings
from refap.errors import LLMConfigurationError


def get_client(settings: Optional[Settings] = None) -> OpenAI:
    """Return an OpenAI SDK client pointed at the configured endpoint."""
    s = settings or get_settings()
    if not s.mistral_api_key:
        raise LLMConfigurationError("MISTRAL_API_KEY is not set")
    return OpenAI(api_key=s.mistral_api_key, base_url=s.llm_base_url, timeout=s.llm_timeout)


def chat_text(
    messages: List[Dict[str, str]],
    settings: Optional[Settings] = None,
    client: Optional[OpenAI] = None,
) -> str:
    """
    Send a chat completion request and return the first choice's text,
    stripped. Returns "" when the endpoint answers without content.
    """
    s = settings or get_settings()
    client = client or get_client(s)
    response = client.chat.completions.create(
        model=s.llm_model,
        messages=messages,
        temperature=s.llm_temperature,
        top_p=s.llm_top_p,
        max_tokens=s.llm_max_tokens,
    )
    if not response.choices:
        return ""
    return (response.choices[0].message.content or "").strip()
