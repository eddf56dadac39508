from datetime import date, timedelta
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

BudgetTier = Literal["budget", "mid", "luxury"]
GroupType = Literal["solo", "couple", "family", "friends", "party"]
ActivityType = Literal["morning", "afternoon", "evening"]
Fidelity = Literal["ai-full", "ai-extended", "real-places-sample", "generic-sample"]
PlacesSource = Literal["google_places", "wikipedia", "curated"]

AI_FIDELITIES: tuple[str, ...] = ("ai-full", "ai-extended")

_BUDGET_ALIASES = {
    "mid-range": "mid",
    "midrange": "mid",
    "moderate": "mid",
    "medium": "mid",
    "cheap": "budget",
    "low": "budget",
    "high": "luxury",
}


# =============================================================================
# Trip request
# =============================================================================


class TripRequest(BaseModel):
    """Validated input for one itinerary generation."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    destination: str = Field(..., min_length=1, max_length=120)
    start_date: date = Field(..., alias="startDate")
    end_date: date = Field(..., alias="endDate")
    budget: BudgetTier
    group: GroupType
    interests: list[str] = Field(default_factory=list)
    accessibility: list[str] = Field(default_factory=list)

    @field_validator("destination")
    @classmethod
    def _strip_destination(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("destination must not be blank")
        return value

    @field_validator("budget", "group", mode="before")
    @classmethod
    def _lower_enum(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().lower()
            return _BUDGET_ALIASES.get(value, value)
        return value

    @field_validator("interests", "accessibility", mode="before")
    @classmethod
    def _normalize_tags(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple, set)):
            return value
        tags: list[str] = []
        for tag in value:
            if not isinstance(tag, str):
                continue
            tag = tag.strip().lower()
            if tag and tag not in tags:
                tags.append(tag)
        return tags

    @model_validator(mode="after")
    def _check_range(self) -> "TripRequest":
        if self.end_date <= self.start_date:
            raise ValueError("endDate must be after startDate")
        return self

    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days

    @property
    def city(self) -> str:
        """City part of the destination ('Barcelona' from 'Barcelona, Spain')."""
        return self.destination.split(",")[0].strip() or self.destination

    def date_for(self, day_index: int) -> date:
        return self.start_date + timedelta(days=day_index)


# =============================================================================
# Places
# =============================================================================


class Coordinates(BaseModel):
    lat: float
    lng: float


class Place(BaseModel):
    """A candidate point of interest. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    location: str = ""
    coordinates: Coordinates | None = None
    category: str = "attractions"
    rating: float = Field(4.0, ge=0, le=5)
    estimated_cost_gbp: int = Field(0, ge=0)
    duration_hours: float = Field(2.0, gt=0)
    booking_required: bool = False
    image: str | None = Field(None, description="Image URL")
    website: str | None = None
    google_place_id: str | None = Field(None, description="Google Place ID")


# =============================================================================
# Itinerary
# =============================================================================


class Activity(BaseModel):
    id: str
    time: str = Field("09:00", pattern=r"^([01]\d|2[0-3]):[0-5]\d$", description="24h 'HH:MM'")
    title: str
    description: str = ""
    location: str = ""
    type: ActivityType = "morning"
    confidence: int = Field(85, ge=0, le=100)
    estimated_cost_gbp: int = Field(20, ge=0)
    duration_hours: float = Field(2.0, gt=0)
    booking_required: bool = False
    local_tip: str | None = None
    why_better: str | None = Field(None, description="Set on swapped activities")
    google_place_id: str | None = None


class Day(BaseModel):
    date: date
    day_number: int = Field(..., ge=1)
    activities: list[Activity] = Field(default_factory=list)


class LocalPhrase(BaseModel):
    english: str
    local: str
    pronunciation: str = ""


class Itinerary(BaseModel):
    days: list[Day] = Field(default_factory=list)
    total_estimated_cost_gbp: int = 0
    currency: Literal["GBP"] = "GBP"
    travel_tips: list[str] = Field(default_factory=list)
    local_phrases: list[LocalPhrase] = Field(default_factory=list)
    fidelity: Fidelity = "ai-full"

    @model_validator(mode="after")
    def _recompute_total(self) -> "Itinerary":
        # The total is always derived from the activities.
        self.total_estimated_cost_gbp = sum(
            activity.estimated_cost_gbp for day in self.days for activity in day.activities
        )
        return self

    def activities(self) -> list[Activity]:
        return [activity for day in self.days for activity in day.activities]


# =============================================================================
# API request bodies
# =============================================================================


class SwapPreferences(BaseModel):
    model_config = ConfigDict(extra="ignore")

    destination: str | None = None
    group: str | None = None
    budget: str | None = None
    interests: list[str] = Field(default_factory=list)

    @field_validator("interests", mode="before")
    @classmethod
    def _none_to_list(cls, value: Any) -> Any:
        return [] if value is None else value


class SwapActivityRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    activity_id: str = Field(..., min_length=1, alias="activityId")
    current_activity: dict[str, Any] | None = Field(None, alias="currentActivity")
    user_preferences: SwapPreferences | None = Field(None, alias="userPreferences")


class ChatTurn(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    text: str = ""
    is_user: bool = Field(False, alias="isUser")


class ChatAdvisorRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    message: str
    conversation_history: list[ChatTurn] = Field(default_factory=list, alias="conversationHistory")
    user_profile: dict[str, Any] | None = Field(None, alias="userProfile")

    @field_validator("message")
    @classmethod
    def _require_message(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Message is required")
        return value.strip()

    @field_validator("conversation_history", mode="before")
    @classmethod
    def _none_to_list(cls, value: Any) -> Any:
        return [] if value is None else value
