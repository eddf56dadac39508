"""
Prompt builders for the itinerary, swap and chat generation calls.

Prompts are short on purpose: the target is a small local model, so each
one names a single task and a fixed JSON shape to answer in.
"""

from typing import Any

from tripwise.core.schemas import ChatTurn, Place, SwapPreferences, TripRequest

CHAT_HISTORY_TURNS = 6
DISTANCE_MARKERS = ("how far", "distance", "drive", "travel time")


def _format_place(place: Place) -> str:
    return (
        f"- {place.name} ({place.location}) - {place.category} - "
        f"£{place.estimated_cost_gbp} - {place.duration_hours}h - Rating: {place.rating}/5"
    )


def build_itinerary_prompt(request: TripRequest, places: list[Place], max_days: int) -> str:
    """
    Build the itinerary prompt.

    Args:
        request: The trip being planned
        places: Aggregated places to draw from; may be empty
        max_days: Days to ask the model for (already capped by the caller)
    """
    if places:
        places_block = (
            "VERIFIED PLACES:\n"
            + "\n".join(_format_place(place) for place in places)
            + "\n\nUse ONLY the places above, with their exact names and locations. "
            "Repeat places at different times if you run out."
        )
    else:
        places_block = f"Suggest well-known, real places in {request.destination}."

    interests = ", ".join(request.interests) or "general"
    accessibility = ", ".join(request.accessibility) or "none"

    return f"""Create a {max_days}-day travel itinerary for {request.destination}.

{places_block}

Traveller:
- Budget: {request.budget}
- Group: {request.group}
- Interests: {interests}
- Accessibility needs: {accessibility}

Respond with ONLY valid JSON in this exact format, no markdown:
{{
  "days": [
    {{
      "day_number": 1,
      "activities": [
        {{
          "id": "day1_activity1",
          "time": "09:00",
          "title": "<activity name>",
          "description": "<short factual description>",
          "location": "<place or area>",
          "type": "morning",
          "confidence": 90,
          "estimated_cost_gbp": 20,
          "duration_hours": 2,
          "booking_required": false,
          "local_tip": "<one practical tip>"
        }}
      ]
    }}
  ],
  "travel_tips": ["<tip>"],
  "local_phrases": [{{"english": "Hello", "local": "<local word>", "pronunciation": "<how to say it>"}}]
}}

Give each day a morning (09:00), an afternoon (14:00) and optionally an evening (19:00) activity.
Generate exactly {max_days} days."""


def build_swap_prompt(current: dict[str, Any], preferences: SwapPreferences | None) -> str:
    preferences = preferences or SwapPreferences()
    interests = ", ".join(preferences.interests) or "general sightseeing"
    return f"""Suggest one alternative activity to replace the current one.

CURRENT ACTIVITY: {current.get("title") or "Unknown activity"}
CURRENT DESCRIPTION: {current.get("description") or "No description"}
CURRENT TIME SLOT: {current.get("type") or "any time"}
CURRENT LOCATION: {current.get("location") or "Same area"}
CURRENT BUDGET: £{current.get("estimated_cost_gbp") or 30}

TRAVELLER:
- Destination: {preferences.destination or "Current location"}
- Group: {preferences.group or "general"}
- Interests: {interests}
- Budget: {preferences.budget or "mid"}

The alternative must fit the same time slot and budget band, suit the
traveller, offer a different kind of experience, and be nearby.

Respond with ONLY valid JSON:
{{
  "title": "<activity name>",
  "description": "<short factual description>",
  "location": "<place or area>",
  "estimated_cost_gbp": 25,
  "duration_hours": 2,
  "confidence": 87,
  "booking_required": false,
  "local_tip": "<one practical tip>",
  "why_better": "<what makes it a good alternative>"
}}"""


def is_distance_question(message: str) -> bool:
    lowered = message.lower()
    return any(marker in lowered for marker in DISTANCE_MARKERS)


def _history_block(history: list[ChatTurn]) -> str:
    turns = [turn for turn in history if turn.text.strip()][-CHAT_HISTORY_TURNS:]
    if not turns:
        return ""
    lines = [f"{'User' if turn.is_user else 'Advisor'}: {turn.text.strip()}" for turn in turns]
    return "Recent conversation:\n" + "\n".join(lines) + "\n\n"


def _profile_block(profile: dict[str, Any] | None) -> str:
    if not profile:
        return ""
    details = [f"{key}: {value}" for key, value in profile.items() if value not in (None, "", [])]
    if not details:
        return ""
    return "Traveller profile: " + "; ".join(details) + "\n\n"


def build_chat_prompt(
    message: str,
    history: list[ChatTurn],
    profile: dict[str, Any] | None = None,
) -> str:
    context = _profile_block(profile) + _history_block(history)

    if is_distance_question(message):
        return f"""You are a helpful travel advisor. {context}The user asks: "{message}"

Give the distance, typical travel time and transport options.

Respond with valid JSON only:
{{
  "response": "<distance, travel time and transport options>",
  "suggestions": ["Transport options?", "Best route?", "Travel costs?"]
}}"""

    return f"""You are a helpful travel advisor. {context}Answer this travel question with specific, useful information.

Question: "{message}"

Respond with valid JSON only:
{{
  "response": "<your answer>",
  "suggestions": ["Ask about transport", "Local attractions", "Best time to visit"]
}}"""
