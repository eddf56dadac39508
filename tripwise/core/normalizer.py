"""
Coerce parsed generator output into the canonical itinerary shape.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any

from tripwise.core.response_repair import RepairFailure, repair_json_text
from tripwise.core.schemas import (
    Activity,
    ActivityType,
    Day,
    Itinerary,
    LocalPhrase,
    TripRequest,
)

logger = logging.getLogger(__name__)

DEFAULT_TIME = "09:00"
DEFAULT_TYPE: ActivityType = "morning"
DEFAULT_CONFIDENCE = 85
DEFAULT_COST_GBP = 20
DEFAULT_DURATION_HOURS = 2.0
DEFAULT_LOCAL_TIP = "Ask locals for their recommendations"

MIN_DURATION_HOURS = 0.5
MAX_DURATION_HOURS = 8.0

ACTIVITY_TYPES: tuple[str, ...] = ("morning", "afternoon", "evening")
FIDELITIES: tuple[str, ...] = ("ai-full", "ai-extended", "real-places-sample", "generic-sample")

DEFAULT_TRAVEL_TIPS = [
    "Download offline maps before exploring",
    "Learn basic local phrases for better interactions",
    "Carry cash for small vendors and tips",
    "Book popular restaurants and attractions in advance",
    "Check local customs and dress codes",
    "Keep copies of important documents",
]

DEFAULT_LOCAL_PHRASES = [
    {"english": "Hello", "local": "Hello", "pronunciation": "heh-LOH"},
    {"english": "Thank you", "local": "Thank you", "pronunciation": "THANK you"},
    {"english": "Excuse me", "local": "Excuse me", "pronunciation": "ek-SKYOOZ me"},
    {"english": "How much?", "local": "How much?", "pronunciation": "HOW much"},
]

_TIME = re.compile(r"^\s*(\d{1,2})(?:[:.](\d{2}))?\s*([ap]\.?m\.?)?\s*$", re.IGNORECASE)
_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")


@dataclass(frozen=True)
class NormalizationFailure:
    reason: str


# =============================================================================
# Field coercion helpers
# =============================================================================


def normalize_time(value: Any) -> str | None:
    """'9:00', '09:00', '2pm', '2:30 PM' -> 'HH:MM'; None when unreadable."""
    if not isinstance(value, str):
        return None
    match = _TIME.match(value)
    if not match:
        return None
    hour = int(match.group(1))
    minute = int(match.group(2) or 0)
    meridiem = (match.group(3) or "").lower().replace(".", "")
    if meridiem == "pm" and hour < 12:
        hour += 12
    elif meridiem == "am" and hour == 12:
        hour = 0
    if hour > 23 or minute > 59:
        return None
    return f"{hour:02d}:{minute:02d}"


def slot_for_time(time: str) -> ActivityType:
    hour = int(time.split(":")[0])
    if hour < 12:
        return "morning"
    if hour < 17:
        return "afternoon"
    return "evening"


def to_number(value: Any) -> float | None:
    """Numbers, numeric strings and '£25'-style strings; None otherwise."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        match = _NUMBER.search(value.replace(",", ""))
        if match:
            return float(match.group(0))
    return None


def to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "y", "1", "required")
    if isinstance(value, (int, float)):
        return value != 0
    return False


def _text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _first(raw: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if raw.get(key) is not None:
            return raw[key]
    return None


def clamp_duration(hours: float) -> float:
    return max(MIN_DURATION_HOURS, min(MAX_DURATION_HOURS, hours))


def coerce_activity(
    raw: dict[str, Any],
    destination: str,
    day_number: int,
    position: int,
) -> Activity:
    """
    Build an Activity from a loosely-typed dict, defaulting every missing field.

    Args:
        raw: Generator (or client) supplied activity dict
        destination: Used in default description/location text
        day_number: 1-based day, used for the default id
        position: 1-based position within the day, used for defaults
    """
    time = normalize_time(raw.get("time"))
    raw_type = raw.get("type")
    if isinstance(raw_type, str) and raw_type.strip().lower() in ACTIVITY_TYPES:
        activity_type = raw_type.strip().lower()
    elif time is not None:
        activity_type = slot_for_time(time)
    else:
        activity_type = DEFAULT_TYPE

    confidence = to_number(raw.get("confidence"))
    cost = to_number(_first(raw, "estimated_cost_gbp", "estimatedCostGBP", "cost", "price"))
    duration = to_number(_first(raw, "duration_hours", "durationHours", "duration"))

    return Activity(
        id=_text(str(raw["id"]) if raw.get("id") is not None else None)
        or f"day{day_number}_activity{position}",
        time=time or DEFAULT_TIME,
        title=_text(_first(raw, "title", "name")) or f"Local Experience {position}",
        description=_text(raw.get("description"))
        or f"Explore the local culture and attractions of {destination}.",
        location=_text(raw.get("location")) or f"{destination} Center",
        type=activity_type,
        confidence=DEFAULT_CONFIDENCE if confidence is None else int(max(0, min(100, round(confidence)))),
        estimated_cost_gbp=DEFAULT_COST_GBP if cost is None else max(0, int(round(cost))),
        duration_hours=DEFAULT_DURATION_HOURS if duration is None or duration <= 0 else clamp_duration(duration),
        booking_required=to_bool(_first(raw, "booking_required", "bookingRequired")),
        local_tip=_text(_first(raw, "local_tip", "localTip", "tip")) or DEFAULT_LOCAL_TIP,
        why_better=_text(raw.get("why_better")),
        google_place_id=_text(raw.get("google_place_id")),
    )


def ensure_unique_ids(days: list[Day]) -> list[Day]:
    """Rename repeated activity ids so every id is unique within the itinerary."""
    seen: set[str] = set()
    result = []
    for day in days:
        activities = []
        for activity in day.activities:
            new_id = activity.id
            suffix = 2
            while new_id in seen:
                new_id = f"{activity.id}_{suffix}"
                suffix += 1
            seen.add(new_id)
            if new_id != activity.id:
                activity = activity.model_copy(update={"id": new_id})
            activities.append(activity)
        result.append(day.model_copy(update={"activities": activities}))
    return result


def _travel_tips(value: Any) -> list[str]:
    if isinstance(value, list):
        tips = [tip.strip() for tip in value if isinstance(tip, str) and tip.strip()]
        if tips:
            return tips
    return list(DEFAULT_TRAVEL_TIPS)


def _local_phrases(value: Any) -> list[LocalPhrase]:
    phrases = []
    if isinstance(value, list):
        for item in value:
            if not isinstance(item, dict):
                continue
            english = _text(item.get("english"))
            local = _text(item.get("local"))
            if english and local:
                phrases.append(
                    LocalPhrase(
                        english=english,
                        local=local,
                        pronunciation=_text(item.get("pronunciation")) or "",
                    )
                )
    if phrases:
        return phrases
    return [LocalPhrase(**phrase) for phrase in DEFAULT_LOCAL_PHRASES]


# =============================================================================
# Itinerary normalization
# =============================================================================


def normalize_itinerary(
    raw: str | dict[str, Any] | list[Any],
    request: TripRequest,
) -> Itinerary | NormalizationFailure:
    """
    Coerce raw generator output into a canonical Itinerary.

    Day numbers and dates are always rebuilt from the request, activity
    fields are defaulted, and the total cost is recomputed. Days beyond the
    requested duration are dropped. A value that cannot be parsed, or has
    no usable days, yields a NormalizationFailure.
    """
    candidate: Any = raw
    if isinstance(raw, str):
        candidate = repair_json_text(raw)
        if isinstance(candidate, RepairFailure):
            return NormalizationFailure(candidate.reason)

    if isinstance(candidate, list):
        logger.info("[Normalizer] Wrapping top-level array as days")
        candidate = {"days": candidate}

    if not isinstance(candidate, dict):
        return NormalizationFailure(f"expected an object, got {type(candidate).__name__}")

    raw_days = candidate.get("days")
    if not isinstance(raw_days, list) or not raw_days:
        return NormalizationFailure("missing or empty 'days'")

    raw_days = [day for day in raw_days if isinstance(day, dict)]
    if not raw_days:
        return NormalizationFailure("'days' holds no day objects")

    if len(raw_days) > request.duration_days:
        logger.warning(
            f"[Normalizer] Model returned {len(raw_days)} days for a "
            f"{request.duration_days}-day trip, truncating"
        )
        raw_days = raw_days[: request.duration_days]

    days = []
    for index, raw_day in enumerate(raw_days):
        day_number = index + 1
        raw_activities = raw_day.get("activities")
        if not isinstance(raw_activities, list):
            raw_activities = []
        activities = [
            coerce_activity(item, request.destination, day_number, position)
            for position, item in enumerate(
                (a for a in raw_activities if isinstance(a, dict)), start=1
            )
        ]
        activities.sort(key=lambda activity: activity.time)
        days.append(
            Day(date=request.date_for(index), day_number=day_number, activities=activities)
        )

    fidelity = candidate.get("fidelity")
    itinerary = Itinerary(
        days=ensure_unique_ids(days),
        travel_tips=_travel_tips(candidate.get("travel_tips")),
        local_phrases=_local_phrases(candidate.get("local_phrases")),
        fidelity=fidelity if fidelity in FIDELITIES else "ai-full",
    )
    logger.info(
        f"[Normalizer] {len(itinerary.days)} days, "
        f"{len(itinerary.activities())} activities, total £{itinerary.total_estimated_cost_gbp}"
    )
    return itinerary
