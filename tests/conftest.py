from datetime import date

import pytest

from tripwise.core.llm_provider import GenerationFailure
from tripwise.core.place_catalog import curated_places
from tripwise.core.places_service import PlaceSearchResult
from tripwise.core.schemas import Place, TripRequest


class FakeLLM:
    """Stands in for LLMProvider; returns a fixed outcome for every call."""

    base_url = "http://ollama.test"
    model = "llama3.2:3b"

    def __init__(self, outcome=None):
        self.outcome = outcome or GenerationFailure("unavailable", "server down")
        self.prompts: list[str] = []

    async def generate(self, prompt, options=None, timeout=60.0):
        self.prompts.append(prompt)
        return self.outcome

    async def diagnose(self, include_generation=False):
        return {
            "config": {"url": self.base_url, "model": self.model},
            "tests": [{"name": "Basic Connectivity", "status": "FAIL", "details": "down"}],
            "summary": {"overall": "FAIL", "passed": 0, "total": 1, "recommendations": []},
            "full": include_generation,
        }


class FakePlacesService:
    """Two curated places per category, so food+history Barcelona yields six."""

    def __init__(self, per_category: int = 2):
        self.per_category = per_category
        self.calls: list[tuple[str, str]] = []

    def search(self, destination, category="attractions"):
        self.calls.append((destination, category))
        places = curated_places(destination, category)[: self.per_category]
        return PlaceSearchResult(places=places, source="curated")

    def diagnose(self, destination):
        return {"destination": destination, "tests": [{"name": "API Key Check", "status": "FAIL"}]}


def make_place(index: int, cost: int = 10) -> Place:
    return Place(
        id=f"place-{index}",
        name=f"Place {index}",
        description=f"Description {index}",
        location=f"Street {index}",
        rating=4.5,
        estimated_cost_gbp=cost,
        duration_hours=1.5,
        booking_required=index % 2 == 0,
    )


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def fake_places_service():
    return FakePlacesService()


@pytest.fixture
def places():
    return [make_place(i) for i in range(6)]


@pytest.fixture
def barcelona_request():
    return TripRequest(
        destination="Barcelona",
        start_date=date(2025, 6, 1),
        end_date=date(2025, 6, 4),
        budget="mid",
        group="couple",
        interests=["food", "history"],
    )


@pytest.fixture
def make_request():
    def _make(days: int = 3, destination: str = "Barcelona", **kwargs) -> TripRequest:
        start = date(2025, 6, 1)
        return TripRequest(
            destination=destination,
            start_date=start,
            end_date=date.fromordinal(start.toordinal() + days),
            budget=kwargs.pop("budget", "mid"),
            group=kwargs.pop("group", "couple"),
            **kwargs,
        )

    return _make
