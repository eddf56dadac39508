"""
Free-form travel Q&A: model answer when it is usable, keyword rules otherwise.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable

from tripwise.core.llm_provider import CHAT_OPTIONS, GenerationFailure, LLMProvider
from tripwise.core.prompts import build_chat_prompt
from tripwise.core.response_repair import RepairFailure, repair_json_text
from tripwise.core.schemas import ChatTurn

logger = logging.getLogger(__name__)

MIN_REPLY_LENGTH = 10
MAX_SUGGESTION_LENGTH = 50
MAX_SUGGESTIONS = 4
DEFAULT_SUGGESTIONS = ["Tell me more?", "Local tips?", "Best time to visit?"]

_RELATED_PREFIX = re.compile(r"^Related question \d+:\s*", re.IGNORECASE)
_ANSWER_SUFFIX = re.compile(r"\s*Answer:.*$", re.IGNORECASE)


@dataclass
class AdvisorReply:
    response: str
    suggestions: list[str] = field(default_factory=list)
    ai_powered: bool = False


def _has(*words: str) -> Callable[[str], bool]:
    return lambda text: any(word in text for word in words)


def _all(*predicates: Callable[[str], bool]) -> Callable[[str], bool]:
    return lambda text: all(predicate(text) for predicate in predicates)


# Evaluated in order; the first matching predicate answers.
FALLBACK_RULES: list[tuple[Callable[[str], bool], str, list[str]]] = [
    (
        _all(_has("nerja"), _has("ski")),
        "Nerja is a coastal town in southern Spain, so there's no skiing nearby. The closest "
        "resort is Sierra Nevada near Granada, about 1.5 hours (120km) inland. In winter Nerja "
        "stays mild (15-18°C), which suits beach walks, the Nerja Caves and coastal hiking.",
        ["What to do in Nerja?", "December weather?", "Day trips from Nerja?", "Nerja Caves info?"],
    ),
    (
        _all(_has("nerja"), _has("malaga", "málaga"), _has("far", "distance")),
        "Nerja to Malaga is about 52km (32 miles), roughly 1 hour by car on the A-7 coastal "
        "highway. ALSA buses run regularly and take about 1.5 hours. The drive has lovely views "
        "along the Costa del Sol.",
        ["Bus schedules?", "Car rental tips?", "Coastal route stops?", "Malaga attractions?"],
    ),
    (
        _has("nerja"),
        "Nerja is a charming town on Spain's Costa del Sol, known for its beaches, the Nerja "
        "Caves and the Balcón de Europa viewpoint. Winter brings mild weather and fewer crowds.",
        ["Best beaches in Nerja?", "Nerja Caves tour?", "December activities?", "Where to eat?"],
    ),
    (
        _has("bulgaria"),
        "Bulgaria is a Balkan country with deep history, mountains and a Black Sea coast. Sofia "
        "is the lively capital and Plovdiv has Roman ruins. Try banitsa and shopska salad. It's "
        "very affordable and good value for travellers.",
        ["What to see in Sofia?", "Bulgarian food tips?", "Best time to visit?", "Cultural customs?"],
    ),
    (
        _has("sofia"),
        "Sofia blends ancient and modern. Visit Alexander Nevsky Cathedral, stroll Vitosha "
        "Boulevard, see the Roman ruins of Serdica and take a day trip up Vitosha Mountain. "
        "Museums are good and dining is affordable.",
        ["Day trips from Sofia?", "Sofia nightlife?", "Best restaurants?", "Transportation?"],
    ),
    (
        _has("plovdiv"),
        "Plovdiv is one of Europe's oldest cities. The Old Town has 19th-century houses, the "
        "Roman Theatre still hosts performances, and it was European Capital of Culture in 2019.",
        ["Old Town highlights?", "Roman Theatre events?", "Museums to visit?", "Where to stay?"],
    ),
    (
        _has("weather", "climate"),
        "Check the local forecast before you go and pack layers, as conditions can change during "
        "the day. A light rain jacket and comfortable walking shoes cover most weather.",
        ["What should I pack?", "Best time to visit?", "Seasonal activities?"],
    ),
    (
        _has("food", "restaurant", "eat"),
        "For authentic local food, step away from the tourist areas and look for places where "
        "locals eat. Street food markets and recommendations from your host are a good start.",
        ["Dietary restrictions?", "Food safety tips?", "Local specialties?", "Budget eating?"],
    ),
    (
        _has("transport", "getting around", "travel"),
        "Download the local transport apps and consider day passes. Walking is often the best way "
        "to see a city centre. For longer trips compare taxis, ride-sharing and public transport.",
        ["Airport transfers?", "Transport cards?", "Walking routes?"],
    ),
    (
        _has("safety", "safe"),
        "Keep copies of important documents, stay aware of your surroundings and trust your "
        "instincts. Read up on common scams and keep emergency contacts handy.",
        ["Emergency contacts?", "Common scams?", "Safe areas?"],
    ),
    (
        _has("culture", "customs", "etiquette"),
        "Read up on local customs before you go, since tipping, dress codes and greetings vary. "
        "A few basic phrases in the local language go a long way.",
        ["Basic phrases?", "Dress codes?", "Tipping guide?"],
    ),
    (
        _has("hidden", "gems", "secret"),
        "Ask locals for their favourite spots and check recent local blogs. The best finds are "
        "often a short walk off the main tourist routes.",
        ["Local neighborhoods?", "Off-beaten path?", "Local events?"],
    ),
    (
        _has("pack", "luggage", "bring"),
        "Pack light with clothes you can layer. Bring a portable charger, a universal adapter and "
        "any medication, and check your airline's baggage rules.",
        ["Carry-on essentials?", "Electronics?", "Clothing tips?"],
    ),
    (
        _has("money", "budget", "cost"),
        "Tell your bank your travel dates, carry some local cash for small vendors and tips, and "
        "use ATMs rather than exchange counters for better rates.",
        ["ATM locations?", "Tipping customs?", "Budget breakdown?"],
    ),
]

DEFAULT_FALLBACK = (
    "I'm here to help with any travel question, from local customs and food to getting around "
    "and hidden gems. What would you like to know about your trip?",
    ["Food recommendations?", "Transportation?", "Cultural tips?", "Safety advice?"],
)


def fallback_reply(message: str) -> AdvisorReply:
    lowered = message.lower()
    for predicate, response, suggestions in FALLBACK_RULES:
        if predicate(lowered):
            return AdvisorReply(response=response, suggestions=list(suggestions))
    response, suggestions = DEFAULT_FALLBACK
    return AdvisorReply(response=response, suggestions=list(suggestions))


def clean_suggestions(value: Any) -> list[str]:
    """Keep short string suggestions, strip model noise, cap the count."""
    if not isinstance(value, list):
        return list(DEFAULT_SUGGESTIONS)
    cleaned = []
    for item in value:
        if not isinstance(item, str) or not item or len(item) >= MAX_SUGGESTION_LENGTH:
            continue
        item = _ANSWER_SUFFIX.sub("", _RELATED_PREFIX.sub("", item)).strip()
        if item:
            cleaned.append(item)
    return cleaned[:MAX_SUGGESTIONS] or list(DEFAULT_SUGGESTIONS)


def parse_reply(raw_text: str) -> AdvisorReply | RepairFailure:
    candidate = repair_json_text(raw_text)
    if isinstance(candidate, RepairFailure):
        return candidate
    if isinstance(candidate, list) and candidate and isinstance(candidate[0], dict):
        candidate = candidate[0]
    if not isinstance(candidate, dict):
        return RepairFailure("reply is not an object")

    response = candidate.get("response")
    if not isinstance(response, str) or len(response.strip()) < MIN_REPLY_LENGTH:
        return RepairFailure("missing or too short 'response'")

    return AdvisorReply(
        response=response.strip(),
        suggestions=clean_suggestions(candidate.get("suggestions")),
        ai_powered=True,
    )


class ChatAdvisor:
    def __init__(self, llm: LLMProvider, timeout_seconds: float = 30.0):
        self.llm = llm
        self.timeout_seconds = timeout_seconds

    async def reply(
        self,
        message: str,
        history: list[ChatTurn] | None = None,
        profile: dict[str, Any] | None = None,
    ) -> AdvisorReply:
        prompt = build_chat_prompt(message, history or [], profile)
        raw = await self.llm.generate(prompt, options=CHAT_OPTIONS, timeout=self.timeout_seconds)
        if isinstance(raw, GenerationFailure):
            logger.warning(f"[Advisor] Generation failed ({raw.kind}), using rule table")
            return fallback_reply(message)

        parsed = parse_reply(raw)
        if isinstance(parsed, RepairFailure):
            logger.warning(f"[Advisor] Unusable model reply ({parsed.reason}), using rule table")
            logger.debug(f"[Advisor] Raw reply: {raw[:300]}")
            return fallback_reply(message)

        logger.info(f"[Advisor] AI reply, {len(parsed.response)} chars")
        return parsed
