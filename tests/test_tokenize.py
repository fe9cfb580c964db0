# tests/test_tokenize.py
from __future__ import annotations

import pytest

from refap.shared.tokenize import base_terms, stem, term_stream, tokenize


@pytest.mark.parametrize(
    "word,expected",
    [
        ("voyant", "voy"),
        ("puissance", "puiss"),
        ("moteur", "mot"),
        ("clignotement", "clignote"),
        ("regeneration", "regenera"),
        ("particules", "particule"),
        ("paiements", "paiement"),  # one rule only, no re-stemming
        ("ration", "ration"),  # stem would be too short
        ("bus", "bus"),
        ("fap", "fap"),
    ],
)
def test_stem(word, expected):
    assert stem(word) == expected


def test_tokenize_expands_synonyms_after_base_terms():
    assert tokenize("Le voyant clignote") == [
        "voy",
        "clignote",
        "temoin",
        "lampe",
        "indicateur",
        "signal",
        "alerte",
        "clignotant",
        "clignotement",
        "flash",
    ]


def test_short_tokens_and_stopwords_are_dropped():
    assert tokenize("bonjour merci pour votre aide") == ["aide"]
    assert tokenize("très") == []
    assert base_terms("un de fap") == ["fap"]


def test_synonym_lookup_falls_back_to_raw_token():
    # "puissance" stems to "puiss", the table is keyed on the raw word
    terms = tokenize("puissance")
    assert terms[0] == "puiss"
    assert "performance" in terms


def test_duplicates_removed_but_counted_in_stream():
    assert tokenize("fap fap") == tokenize("fap")
    stream = term_stream("filtre filtre")
    assert stream.count("filtre") == 2
    assert stream.count("fap") == 2


@pytest.mark.parametrize(
    "text",
    [
        "Mon voyant FAP clignote depuis hier",
        "perte de puissance et fumée noire à l'échappement",
        "le garage propose un nettoyage",
        "rien à voir",
    ],
)
def test_expansion_is_additive(text):
    assert set(base_terms(text)) <= set(tokenize(text))


def test_deterministic():
    text = "Filtre à particules encrassé, voyant allumé"
    assert tokenize(text) == tokenize(text)
