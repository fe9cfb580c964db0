# tests/test_stage.py
from __future__ import annotations

from refap.runtime.stage import assistant_has_replied, is_first_turn


def test_missing_history_is_first_turn():
    assert is_first_turn("")
    assert is_first_turn(None)


def test_short_history_is_first_turn_even_with_marker():
    assert is_first_turn("je comprends")


def test_history_with_assistant_phrase_is_follow_up():
    history = (
        "Client: mon voyant clignote. Assistant: Je comprends votre inquiétude, "
        "rassurez-vous, ce n'est pas grave."
    )
    assert not is_first_turn(history)


def test_call_to_action_marker():
    history = "Cliquez sur Trouver un Carter-Cash pour prendre rendez-vous rapidement."
    assert assistant_has_replied(history)
    assert not is_first_turn(history)


def test_long_user_only_history_is_first_turn():
    history = "Client: mon voyant clignote depuis ce matin sur l'autoroute, que faire ?"
    assert len(history) >= 50
    assert is_first_turn(history)


def test_length_threshold_is_exact():
    below = "je comprends " + "a" * 36
    at = "je comprends " + "a" * 37
    assert len(below) == 49 and len(at) == 50
    assert is_first_turn(below)
    assert not is_first_turn(at)
