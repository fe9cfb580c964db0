# tests/test_trace.py
from refap.runtime.trace import Trace


def test_trace_records_steps_in_order():
    t = Trace.start("il clignote", request_id="req-1")
    t.add("analysis", category="FAP_CLIGNOTANT")
    t.add("llm", chars=42)
    assert t.steps() == ["analysis", "llm"]

    d = t.to_dict()
    assert d["request_id"] == "req-1"
    assert d["elapsed_ms"] >= 0
    assert d["events"][0]["data"] == {"category": "FAP_CLIGNOTANT"}


def test_trace_generates_request_id():
    assert Trace.start("a").request_id != Trace.start("b").request_id
