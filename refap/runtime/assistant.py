# refap/runtime/assistant.py
"""
One chat turn, end to end.

  first turn  -> pre-written opener, no LLM call
  follow-up   -> analyze, build prompt, ask the LLM, degrade to a fallback
                 reply on any LLM failure or empty answer

The user always gets a reply; failures only show up in the logs.
"""
from __future__ import annotations

from functools import partial
from typing import Any, Callable, Dict, List, Optional

import openai

from refap.config import Settings, get_settings
from refap.llm_client import chat_text
from refap.log import get_logger
from refap.runtime.pipeline import Analysis, DiagnosticPipeline, context_text
from refap.runtime.prompt import build_messages
from refap.runtime.replies import (
    FALLBACK_EMPTY,
    FALLBACK_ERROR,
    FALLBACK_UNAVAILABLE,
    first_turn_topic,
    select_first_turn_reply,
)
from refap.runtime.trace import Trace

logger = get_logger(__name__)

LLMFn = Callable[[List[Dict[str, str]]], str]

FIRST_INTERACTION = {"type": "FIRST_INTERACTION", "confidence": 10}


class Assistant:
    def __init__(
        self,
        pipeline: DiagnosticPipeline,
        settings: Optional[Settings] = None,
        llm_fn: Optional[LLMFn] = None,
    ) -> None:
        self.pipeline = pipeline
        self.settings = settings or get_settings()
        self._llm_fn: LLMFn = llm_fn or partial(chat_text, settings=self.settings)

    def _debug(self, analysis: Analysis, trace: Trace) -> Dict[str, Any]:
        return {
            "queryTokens": list(analysis.query_terms[:5]),
            "topBlocks": [{"title": e.title} for e in analysis.context],
            "classification": analysis.classification.to_dict(),
            "isFirstInteraction": analysis.first_turn,
            "trace": trace.to_dict(),
        }

    def reply(self, question: str, history: Optional[str] = None) -> Dict[str, Any]:
        history = history or ""
        if self.pipeline.is_first_turn(history):
            logger.info(f"first interaction, opener={first_turn_topic(question)}")
            return {"reply": select_first_turn_reply(question), "nextAction": dict(FIRST_INTERACTION)}

        trace = Trace.start(question)
        analysis = self.pipeline.analyze(question, history)
        next_action = analysis.classification.to_dict()
        trace.add(
            "analysis",
            category=next_action["type"],
            confidence=next_action["confidence"],
            context=[e.title for e in analysis.context],
            cached=analysis.cached,
        )

        messages = build_messages(question, history, analysis.classification, context_text(analysis.context))
        try:
            content = self._llm_fn(messages)
        except openai.APIStatusError as e:
            logger.warning(f"LLM endpoint returned status {e.status_code}, using fallback reply")
            trace.add("fallback", reason="status", status=e.status_code)
            return {"reply": FALLBACK_UNAVAILABLE, "nextAction": next_action}
        except Exception as e:
            logger.error(f"LLM call failed: {e!r}")
            trace.add("fallback", reason="error")
            return {"reply": FALLBACK_ERROR, "nextAction": next_action}

        if not content or not content.strip():
            trace.add("fallback", reason="empty")
            return {"reply": FALLBACK_EMPTY, "nextAction": next_action}

        trace.add("llm", chars=len(content))
        response: Dict[str, Any] = {"reply": content.strip(), "nextAction": next_action}
        if self.settings.is_development:
            response["debug"] = self._debug(analysis, trace)
        return response
