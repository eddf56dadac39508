"""
Deterministic itinerary building: pad a short plan to the full trip length,
or build one from scratch out of places and templates.
"""

import logging

from tripwise.core.normalizer import (
    DEFAULT_LOCAL_PHRASES,
    DEFAULT_TRAVEL_TIPS,
    ensure_unique_ids,
)
from tripwise.core.schemas import Activity, Day, Itinerary, LocalPhrase, Place, TripRequest

logger = logging.getLogger(__name__)

LONG_TRIP_DAYS = 7
EVENING_EVERY = 3

SPANISH_DESTINATIONS = (
    "spain",
    "españa",
    "barcelona",
    "madrid",
    "valencia",
    "seville",
    "sevilla",
    "malaga",
    "málaga",
    "marbella",
    "nerja",
    "granada",
    "bilbao",
    "ibiza",
    "mallorca",
    "majorca",
    "tenerife",
    "alicante",
)

SPANISH_PHRASES = [
    {"english": "Hello", "local": "Hola", "pronunciation": "OH-lah"},
    {"english": "Thank you", "local": "Gracias", "pronunciation": "GRAH-see-ahs"},
    {"english": "Excuse me", "local": "Perdón", "pronunciation": "per-DOHN"},
    {"english": "How much?", "local": "¿Cuánto cuesta?", "pronunciation": "KWAN-toh KWEH-stah"},
]


def is_spanish_destination(destination: str) -> bool:
    lowered = destination.lower()
    return any(name in lowered for name in SPANISH_DESTINATIONS)


def phrases_for(destination: str) -> list[LocalPhrase]:
    phrases = SPANISH_PHRASES if is_spanish_destination(destination) else DEFAULT_LOCAL_PHRASES
    return [LocalPhrase(**phrase) for phrase in phrases]


def wants_evening(synthesized_index: int, total_days: int) -> bool:
    """Every third synthesized day gets an evening slot; long trips get one daily."""
    return total_days > LONG_TRIP_DAYS or (synthesized_index + 1) % EVENING_EVERY == 0


# =============================================================================
# Activity builders
# =============================================================================


def activity_from_place(place: Place, day_number: int, slot: str) -> Activity:
    time = "09:00" if slot == "morning" else "14:00"
    return Activity(
        id=f"day{day_number}_{slot}_{place.id}",
        time=time,
        title=place.name,
        description=place.description or f"Visit {place.name}.",
        location=place.location or place.name,
        type=slot,
        confidence=int(max(0, min(100, place.rating * 20))),
        estimated_cost_gbp=place.estimated_cost_gbp,
        duration_hours=place.duration_hours,
        booking_required=place.booking_required,
        local_tip=f"Highly rated local spot with {place.rating}/5 stars",
        google_place_id=place.google_place_id,
    )


def morning_template(request: TripRequest, day_number: int) -> Activity:
    return Activity(
        id=f"day{day_number}_morning",
        time="09:00",
        title=f"Local Breakfast Experience - Day {day_number}",
        description=(
            f"Start your {request.destination} adventure with authentic local breakfast at a "
            "neighbourhood café. Experience the morning culture and fuel up for the day ahead."
        ),
        location=f"{request.city} Café District",
        type="morning",
        confidence=90,
        estimated_cost_gbp=15,
        duration_hours=1,
        booking_required=False,
        local_tip="Arrive early to avoid crowds and get the freshest pastries",
    )


def afternoon_template(request: TripRequest, day_number: int) -> Activity:
    interests = " and ".join(request.interests) or "sightseeing"
    return Activity(
        id=f"day{day_number}_afternoon",
        time="14:00",
        title=f"Cultural Walking Tour - Day {day_number}",
        description=(
            f"Explore the historic heart of {request.destination} with a guided walking tour. "
            f"Perfect for {request.group} travellers interested in {interests}."
        ),
        location=f"{request.city} Historic Centre",
        type="afternoon",
        confidence=85,
        estimated_cost_gbp=25,
        duration_hours=2.5,
        booking_required=True,
        local_tip="Book online for better prices and guaranteed spots",
    )


def evening_template(request: TripRequest, day_number: int) -> Activity:
    return Activity(
        id=f"day{day_number}_evening",
        time="19:00",
        title=f"Evening Entertainment - Day {day_number}",
        description=f"Experience the nightlife and entertainment scene of {request.destination}.",
        location=f"{request.city} Entertainment Quarter",
        type="evening",
        confidence=92,
        estimated_cost_gbp=40,
        duration_hours=3,
        booking_required=False,
        local_tip="Check local event listings for special performances",
    )


# =============================================================================
# Extension
# =============================================================================


def _synthesize_day(
    request: TripRequest,
    day_index: int,
    synthesized_index: int,
    pool: list[Place],
) -> Day:
    day_number = day_index + 1
    activities = []

    if pool:
        activities.append(
            activity_from_place(pool[(2 * synthesized_index) % len(pool)], day_number, "morning")
        )
    else:
        activities.append(morning_template(request, day_number))

    # A single remaining place would otherwise fill both slots of the same day.
    if len(pool) > 1:
        activities.append(
            activity_from_place(
                pool[(2 * synthesized_index + 1) % len(pool)], day_number, "afternoon"
            )
        )
    else:
        activities.append(afternoon_template(request, day_number))

    if wants_evening(synthesized_index, request.duration_days):
        activities.append(evening_template(request, day_number))

    return Day(date=request.date_for(day_index), day_number=day_number, activities=activities)


def extend(partial: Itinerary, request: TripRequest, places: list[Place]) -> Itinerary:
    """
    Pad an itinerary to exactly the requested number of days.

    Existing days are kept (re-dated and re-numbered from the start date).
    Each missing day gets a morning and an afternoon activity from places the
    plan has not used yet, cycling through them, or from templates when none
    are left. Never fails.

    Args:
        partial: Itinerary with at most request.duration_days days
        request: The trip being planned
        places: Aggregated candidate places, possibly empty

    Returns:
        A new Itinerary with request.duration_days days and a recomputed total
    """
    total_days = request.duration_days
    kept = [
        day.model_copy(update={"date": request.date_for(index), "day_number": index + 1})
        for index, day in enumerate(partial.days[:total_days])
    ]

    used_titles = {activity.title.strip().lower() for day in kept for activity in day.activities}
    pool = [place for place in places if place.name.strip().lower() not in used_titles]

    missing = total_days - len(kept)
    if missing > 0:
        logger.info(
            f"[Extender] Adding {missing} days to {len(kept)} existing "
            f"({len(pool)} unused places)"
        )

    days = list(kept)
    for synthesized_index, day_index in enumerate(range(len(kept), total_days)):
        days.append(_synthesize_day(request, day_index, synthesized_index, pool))

    return Itinerary(
        days=ensure_unique_ids(days),
        travel_tips=partial.travel_tips or list(DEFAULT_TRAVEL_TIPS),
        local_phrases=partial.local_phrases or phrases_for(request.destination),
        fidelity=partial.fidelity,
    )


def build_real_places_sample(request: TripRequest, places: list[Place]) -> Itinerary:
    """Every day built from places plus templates, the same way extend() pads."""
    empty = Itinerary(fidelity="real-places-sample")
    return extend(empty, request, places)


def build_generic_sample(request: TripRequest) -> Itinerary:
    """Every day built from templates only; needs no external data."""
    empty = Itinerary(fidelity="generic-sample")
    return extend(empty, request, [])
