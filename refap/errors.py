# refap/errors.py
from __future__ import annotations


class RefapError(Exception):
    """Base class for errors raised by the assistant outside the total core."""


class LexiconError(RefapError):
    """The tuning data file is missing keys or holds values of the wrong shape."""


class KnowledgeSourceError(RefapError):
    """The raw knowledge text could not be obtained from its loader."""


class LLMConfigurationError(RefapError):
    """No credentials are configured for the chat-completion endpoint."""
