# refap/runtime/replies.py
"""Pre-written replies: first-turn openers and LLM fallbacks."""
from __future__ import annotations

import re
from typing import Callable, Dict, List, Tuple

from refap.runtime.classifier import mentions_blinking_indicator
from refap.shared.normalize import normalize

FIRST_TURN_REPLIES: Dict[str, str] = {
    "voyant_clignotant": (
        "Bonjour ! Je comprends que voir un voyant FAP clignoter peut être inquiétant. "
        "Rassurez-vous, cela signifie que votre véhicule a détecté un filtre à particules très "
        "encrassé et s'est mis en mode de protection pour éviter des dommages. Le moteur limite "
        "sa puissance pour se protéger, mais vous pouvez encore rouler sur de courtes distances. "
        "Pour mieux vous aider, depuis combien de temps ce voyant clignote-t-il ? Et avez-vous "
        "remarqué d'autres symptômes comme une perte de puissance importante ou une fumée noire "
        "à l'échappement ?"
    ),
    "voyant_fap": (
        "Bonjour ! Je comprends votre inquiétude concernant ce voyant FAP qui s'allume. "
        "C'est effectivement préoccupant mais rassurez-vous, c'est un problème fréquent et "
        "généralement résoluble. Le FAP (filtre à particules) capture les particules polluantes "
        "de votre moteur diesel. Avec le temps, il s'encrasse progressivement, d'où ce signal "
        "d'alerte. La bonne nouvelle c'est qu'un nettoyage professionnel évite le remplacement "
        "coûteux. Pour vous orienter vers la meilleure solution, avez-vous aussi remarqué une "
        "perte de puissance ou une fumée noire à l'échappement ?"
    ),
    "dpf_sature": (
        "Bonjour ! Je vois que vous avez détecté un problème de DPF (filtre à particules) saturé. "
        "C'est un souci classique sur les diesels modernes, mais pas de panique ! Ce filtre "
        "capture les suies pour protéger l'environnement, mais il finit par se colmater. "
        "Heureusement, notre nettoyage haute pression restaure ses performances pour seulement "
        "99€ minimum, bien moins cher qu'un remplacement. Pour vous proposer la solution la plus "
        "adaptée, depuis quand observez-vous ce problème ? Et faites-vous plutôt de la ville ou "
        "de l'autoroute ?"
    ),
    "perte_puissance": (
        "Bonjour ! Cette perte de puissance que vous ressentez est effectivement frustrante au "
        "quotidien. Sur les véhicules diesel, c'est souvent lié à un filtre à particules encrassé "
        "qui empêche le moteur de respirer correctement. Imaginez un aspirateur avec un sac plein, "
        "c'est exactement ce qui arrive à votre moteur ! Pour mieux comprendre votre situation, "
        "cette perte est-elle progressive ou soudaine ? Et avez-vous un voyant FAP allumé sur "
        "votre tableau de bord ?"
    ),
    "fumee_noire": (
        "Bonjour ! Cette fumée noire que vous observez est inquiétante, je comprends. C'est "
        "généralement le signe que votre FAP (filtre à particules) ne peut plus retenir les suies "
        "correctement car il est saturé. Votre moteur rejette alors directement les particules. "
        "Pour évaluer la gravité, cette fumée apparaît-elle surtout à l'accélération ? Et depuis "
        "combien de temps l'observez-vous ?"
    ),
    "general": (
        "Bonjour ! Je suis là pour vous aider avec votre problème de FAP. Les filtres à particules "
        "sont essentiels mais peuvent s'encrasser avec le temps, surtout en conduite urbaine. La "
        "bonne nouvelle, c'est qu'un nettoyage professionnel évite le remplacement coûteux et "
        "restaure les performances. Pour vous orienter au mieux, pouvez-vous me décrire les "
        "symptômes que vous observez : voyant allumé, perte de puissance, ou fumée noire ?"
    ),
}

# Sent when the chat-completion endpoint answers with an error status.
FALLBACK_UNAVAILABLE = (
    "Je comprends votre situation. Pour affiner mon diagnostic, pouvez-vous me dire si vous "
    "faites plutôt de la ville ou de l'autoroute ? Cette information m'aidera à évaluer le "
    "niveau d'encrassement de votre FAP."
)
FALLBACK_EMPTY = "Pour mieux vous aider, pouvez-vous préciser depuis quand vous observez ces symptômes ?"
FALLBACK_ERROR = "Je comprends votre problème. Pouvez-vous me dire si vous observez d'autres symptômes ?"

# Opener topics are looser than the classifier's symptom patterns: one word is enough.
_LIT_INDICATOR = re.compile(r"voyant|temoin|allume")
_SATURATED = re.compile(r"dpf|satur|encras|colmat")
_WEAK_ENGINE = re.compile(r"perte|puissance|baisse|faible|accelerat")
_SMOKE = re.compile(r"fumee|noir|echappement")

TOPIC_RULES: List[Tuple[str, Callable[[str], bool]]] = [
    ("voyant_clignotant", mentions_blinking_indicator),
    ("voyant_fap", lambda q: bool(_LIT_INDICATOR.search(q))),
    ("dpf_sature", lambda q: bool(_SATURATED.search(q))),
    ("perte_puissance", lambda q: bool(_WEAK_ENGINE.search(q))),
    ("fumee_noire", lambda q: bool(_SMOKE.search(q))),
]


def first_turn_topic(question: str) -> str:
    q = normalize(question)
    for topic, matches in TOPIC_RULES:
        if matches(q):
            return topic
    return "general"


def select_first_turn_reply(question: str) -> str:
    return FIRST_TURN_REPLIES[first_turn_topic(question)]
