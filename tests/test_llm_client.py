# tests/test_llm_client.py
from types import SimpleNamespace

import pytest

from refap.config import MISTRAL_BASE_URL, Settings
from refap.errors import LLMConfigurationError
from refap.llm_client import chat_text, get_client


class FakeCompletions:
    def __init__(self, content):
        self.content = content
        self.kwargs = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        if self.content is None:
            return SimpleNamespace(choices=[])
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=self.content))])


def _client(content):
    completions = FakeCompletions(content)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


def test_get_client_requires_key():
    with pytest.raises(LLMConfigurationError):
        get_client(Settings(mistral_api_key=None))


def test_get_client_targets_configured_endpoint():
    client = get_client(Settings(mistral_api_key="test-key"))
    assert str(client.base_url).rstrip("/") == MISTRAL_BASE_URL


def test_chat_text_sends_settings_and_strips():
    settings = Settings(mistral_api_key="test-key", llm_model="mistral-small-latest", llm_max_tokens=80)
    client, completions = _client("  Depuis quand ?  \n")
    messages = [{"role": "user", "content": "bonjour"}]

    assert chat_text(messages, settings=settings, client=client) == "Depuis quand ?"
    assert completions.kwargs == {
        "model": "mistral-small-latest",
        "messages": messages,
        "temperature": 0.3,
        "top_p": 0.7,
        "max_tokens": 80,
    }


@pytest.mark.parametrize("content", [None, ""])
def test_chat_text_without_content(content):
    client, _ = _client(content)
    assert chat_text([], settings=Settings(mistral_api_key="k"), client=client) == ""
