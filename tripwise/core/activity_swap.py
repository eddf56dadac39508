"""
Single-activity replacement: ask the model for one alternative, otherwise
pick from a curated pool.
"""

from __future__ import annotations

import logging
import random
import uuid
from dataclasses import dataclass
from typing import Any

from tripwise.core.llm_provider import SWAP_OPTIONS, GenerationFailure, LLMProvider
from tripwise.core.normalizer import coerce_activity, normalize_time, slot_for_time
from tripwise.core.prompts import build_swap_prompt
from tripwise.core.response_repair import RepairFailure, repair_json_text
from tripwise.core.schemas import Activity, SwapPreferences

logger = logging.getLogger(__name__)

DEFAULT_SWAP_TIME = "10:00"

CURATED_ALTERNATIVES: tuple[dict[str, Any], ...] = (
    {
        "title": "Hidden Local Market Discovery",
        "description": (
            "Explore a vibrant neighbourhood market where locals shop for fresh produce, "
            "artisanal goods, and street food."
        ),
        "location": "Local Market District",
        "estimated_cost_gbp": 20,
        "duration_hours": 2,
        "confidence": 87,
        "booking_required": False,
        "local_tip": "Visit in the morning for the freshest selections and best atmosphere",
        "why_better": "More authentic and interactive than typical tourist attractions",
    },
    {
        "title": "Rooftop Café & City Views",
        "description": (
            "Enjoy panoramic city views while sipping locally roasted coffee at a hidden "
            "rooftop café. Great for photos and relaxation."
        ),
        "location": "Historic Quarter Rooftop",
        "estimated_cost_gbp": 18,
        "duration_hours": 1.5,
        "confidence": 92,
        "booking_required": False,
        "local_tip": "Best views are during golden hour, arrive 30 minutes before sunset",
        "why_better": "Combines relaxation with stunning views and great photo opportunities",
    },
    {
        "title": "Street Art & Graffiti Tour",
        "description": (
            "Discover colourful murals and street art in the creative quarter with insights "
            "into local artists and cultural movements."
        ),
        "location": "Arts District",
        "estimated_cost_gbp": 15,
        "duration_hours": 2,
        "confidence": 85,
        "booking_required": False,
        "local_tip": "Bring a camera and comfortable walking shoes",
        "why_better": "Unique cultural experience showcasing contemporary local creativity",
    },
    {
        "title": "Local Cooking Workshop",
        "description": (
            "Learn to prepare traditional dishes with a local chef in an intimate setting. "
            "Take home new skills and recipes."
        ),
        "location": "Community Kitchen",
        "estimated_cost_gbp": 45,
        "duration_hours": 3,
        "confidence": 94,
        "booking_required": True,
        "local_tip": "Book at least 24 hours in advance, dietary restrictions can be accommodated",
        "why_better": "Hands-on cultural experience with practical skills you can use at home",
    },
    {
        "title": "Vintage Shopping Adventure",
        "description": (
            "Hunt for unique treasures in local vintage shops and second-hand boutiques. "
            "Find one-of-a-kind souvenirs and fashion pieces."
        ),
        "location": "Vintage Quarter",
        "estimated_cost_gbp": 25,
        "duration_hours": 2.5,
        "confidence": 78,
        "booking_required": False,
        "local_tip": "Negotiate prices politely and check items carefully before buying",
        "why_better": "Sustainable shopping with unique finds you won't get anywhere else",
    },
    {
        "title": "Sunset Viewpoint Picnic",
        "description": (
            "Pack local cheeses, bread and fruit from a nearby deli and head to a "
            "well-loved viewpoint for an unhurried picnic."
        ),
        "location": "City Viewpoint",
        "estimated_cost_gbp": 12,
        "duration_hours": 2,
        "confidence": 83,
        "booking_required": False,
        "local_tip": "Shops close early on Sundays, so buy supplies in the morning",
        "why_better": "A relaxed, low-cost break that locals actually enjoy",
    },
)


@dataclass
class SwapResult:
    activity: Activity
    ai_powered: bool


def new_swap_id(activity_id: str) -> str:
    return f"{activity_id}_swap_{uuid.uuid4().hex[:8]}"


class ActivitySwapper:
    """Replace one activity, keeping its time slot."""

    def __init__(self, llm: LLMProvider, timeout_seconds: float = 60.0, rng: random.Random | None = None):
        self.llm = llm
        self.timeout_seconds = timeout_seconds
        self.rng = rng or random.Random()

    def _slot(self, current: dict[str, Any]) -> tuple[str, str]:
        time = normalize_time(current.get("time")) or DEFAULT_SWAP_TIME
        raw_type = current.get("type")
        if raw_type in ("morning", "afternoon", "evening"):
            return time, raw_type
        return time, slot_for_time(time)

    def _build(
        self,
        candidate: dict[str, Any],
        activity_id: str,
        current: dict[str, Any],
        destination: str,
    ) -> Activity:
        time, activity_type = self._slot(current)
        activity = coerce_activity(candidate, destination, day_number=1, position=1)
        return activity.model_copy(
            update={"id": new_swap_id(activity_id), "time": time, "type": activity_type}
        )

    def curated(self, activity_id: str, current: dict[str, Any], destination: str = "the area") -> Activity:
        choice = self.rng.choice(CURATED_ALTERNATIVES)
        return self._build(dict(choice), activity_id, current, destination)

    async def swap(
        self,
        activity_id: str,
        current: dict[str, Any] | None,
        preferences: SwapPreferences | None = None,
    ) -> SwapResult:
        """
        Return a replacement for the activity.

        The replacement keeps the original time and type and always gets a
        new id. Any generation or parsing failure falls back to the curated
        pool.
        """
        current = current or {}
        destination = (preferences.destination if preferences else None) or "the area"

        raw = await self.llm.generate(
            build_swap_prompt(current, preferences),
            options=SWAP_OPTIONS,
            timeout=self.timeout_seconds,
        )
        if isinstance(raw, GenerationFailure):
            logger.warning(f"[Swap] Generation failed ({raw.kind}), using curated pool")
            return SwapResult(self.curated(activity_id, current, destination), ai_powered=False)

        candidate = repair_json_text(raw)
        if isinstance(candidate, list) and candidate and isinstance(candidate[0], dict):
            candidate = candidate[0]
        if isinstance(candidate, RepairFailure) or not isinstance(candidate, dict):
            reason = candidate.reason if isinstance(candidate, RepairFailure) else "not an object"
            logger.warning(f"[Swap] Unusable model output ({reason}), using curated pool")
            return SwapResult(self.curated(activity_id, current, destination), ai_powered=False)

        if not str(candidate.get("title") or "").strip():
            logger.warning("[Swap] Model output has no title, using curated pool")
            return SwapResult(self.curated(activity_id, current, destination), ai_powered=False)

        activity = self._build(candidate, activity_id, current, destination)
        logger.info(f"[Swap] AI alternative for {activity_id}: {activity.title}")
        return SwapResult(activity, ai_powered=True)
