# refap/runtime/trace.py
from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class TraceEvent:
    ts_ms: int
    step: str
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Trace:
    """Per-request record of the assistant's decisions, surfaced in debug output."""

    request_id: str
    started_ts_ms: int
    question: str
    events: List[TraceEvent] = field(default_factory=list)

    @staticmethod
    def start(question: str, request_id: Optional[str] = None) -> "Trace":
        return Trace(
            request_id=request_id or str(uuid.uuid4()),
            started_ts_ms=_now_ms(),
            question=question,
        )

    def add(self, step: str, **data: Any) -> None:
        self.events.append(TraceEvent(ts_ms=_now_ms(), step=step, data=data))

    def steps(self) -> List[str]:
        return [e.step for e in self.events]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "request_id": self.request_id,
            "started_ts_ms": self.started_ts_ms,
            "elapsed_ms": _now_ms() - self.started_ts_ms,
            "events": [{"ts_ms": e.ts_ms, "step": e.step, "data": e.data} for e in self.events],
        }
