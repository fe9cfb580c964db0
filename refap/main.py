# refap/main.py
"""
HTTP surface of the assistant.

Run with: python -m uvicorn refap.main:app --port 8000
"""
from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from refap.config import Settings, get_settings
from refap.log import get_logger
from refap.runtime.assistant import Assistant
from refap.runtime.cache import ResponseCache
from refap.runtime.knowledge_cache import KnowledgeIndexCache, text_file_loader
from refap.runtime.pipeline import DiagnosticPipeline

logger = get_logger(__name__)


class HealthResponse(BaseModel):
    status: str
    version: str


class ChatRequest(BaseModel):
    # types checked by hand so malformed questions get the 400 body clients expect
    question: Any = None
    historique: Any = None


class NextAction(BaseModel):
    type: str
    confidence: float
    symptoms: Optional[List[str]] = None


class ChatResponse(BaseModel):
    reply: str
    nextAction: NextAction
    debug: Optional[Dict[str, Any]] = None


def _error(status: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"error": message})


async def _read_chat_request(request: Request) -> Optional[ChatRequest]:
    """Parsed body, or None when it is not a JSON object."""
    raw = await request.body()
    if not raw:
        return None
    try:
        payload = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    return ChatRequest.model_validate(payload)


def create_app(
    settings: Optional[Settings] = None,
    knowledge: Optional[KnowledgeIndexCache] = None,
    cache: Optional[ResponseCache] = None,
    llm_fn: Optional[Callable[[List[Dict[str, str]]], str]] = None,
) -> FastAPI:
    settings = settings or get_settings()
    knowledge = knowledge or KnowledgeIndexCache(
        text_file_loader(settings.knowledge_path),
        ttl_seconds=settings.knowledge_ttl_seconds,
    )
    cache = cache or ResponseCache(
        ttl_seconds=settings.response_cache_ttl_seconds,
        capacity=settings.response_cache_capacity,
    )
    pipeline = DiagnosticPipeline(knowledge, cache=cache, top_k=settings.context_top_k)
    assistant = Assistant(pipeline, settings=settings, llm_fn=llm_fn)

    app = FastAPI(title="Re-Fap Assistant API", version=settings.app_version)
    app.state.assistant = assistant

    @app.on_event("shutdown")
    def shutdown_event():
        knowledge.shutdown()
        cache.clear()

    @app.get("/health", response_model=HealthResponse, tags=["Meta"])
    def health():
        return HealthResponse(status="ok", version=settings.app_version)

    @app.get("/version", tags=["Meta"])
    def version():
        return {"version": settings.app_version}

    @app.post("/api/chat", response_model=ChatResponse, response_model_exclude_none=True, tags=["Chat"])
    async def chat(request: Request):
        # the body is read by hand so every malformed payload gets the same 400
        if not settings.mistral_api_key:
            return _error(500, "MISTRAL_API_KEY manquante")
        req = await _read_chat_request(request)
        question = req.question if req else None
        if not isinstance(question, str) or not question.strip():
            return _error(400, "Question invalide")
        history = req.historique if isinstance(req.historique, str) else ""
        return await run_in_threadpool(assistant.reply, question, history)

    return app


app = create_app()
