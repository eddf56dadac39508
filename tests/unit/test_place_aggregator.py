import time

import pytest

from tripwise.core.place_aggregator import PlaceAggregator, categories_for_interests
from tripwise.core.places_service import PlaceSearchResult
from tripwise.core.schemas import Place


def _place(place_id, name=None, google_place_id=None):
    return Place(id=place_id, name=name or place_id, google_place_id=google_place_id)


class ScriptedService:
    def __init__(self, by_category, slow=(), broken=()):
        self.by_category = by_category
        self.slow = set(slow)
        self.broken = set(broken)

    def search(self, destination, category="attractions"):
        if category in self.broken:
            raise RuntimeError("lookup exploded")
        if category in self.slow:
            time.sleep(0.5)
        return PlaceSearchResult(places=self.by_category.get(category, []), source="curated")


def test_categories_for_interests():
    assert categories_for_interests([]) == ["attractions"]
    assert categories_for_interests(None) == ["attractions"]
    assert categories_for_interests(["food", "history"]) == ["attractions", "restaurants", "culture"]
    assert categories_for_interests(["nightlife", "beaches", "culture", "food"]) == [
        "attractions",
        "restaurants",
        "culture",
        "nature",
        "activities",
    ]


@pytest.mark.asyncio
async def test_collect_keeps_category_order_and_caps_each():
    service = ScriptedService(
        {
            "attractions": [_place(f"a{i}") for i in range(6)],
            "restaurants": [_place("r1"), _place("r2")],
        }
    )
    places = await PlaceAggregator(service).collect("Lisbon", ["food"])
    assert [p.id for p in places] == ["a0", "a1", "a2", "a3", "r1", "r2"]


@pytest.mark.asyncio
async def test_collect_dedupes_across_categories():
    shared = _place("x", google_place_id="g-1")
    service = ScriptedService(
        {"attractions": [shared], "culture": [_place("y", google_place_id="g-1"), _place("z")]}
    )
    places = await PlaceAggregator(service).collect("Rome", ["history"])
    assert [p.id for p in places] == ["x", "z"]


@pytest.mark.asyncio
async def test_slow_category_does_not_block_others():
    service = ScriptedService(
        {"attractions": [_place("a")], "culture": [_place("c")]},
        slow={"culture"},
    )
    started = time.monotonic()
    places = await PlaceAggregator(service, timeout_seconds=0.1).collect("Rome", ["history"])
    assert [p.id for p in places] == ["a"]
    assert time.monotonic() - started < 0.45


@pytest.mark.asyncio
async def test_failing_category_yields_nothing():
    service = ScriptedService({"restaurants": [_place("r")]}, broken={"attractions"})
    places = await PlaceAggregator(service).collect("Paris", ["food"])
    assert [p.id for p in places] == ["r"]


@pytest.mark.asyncio
async def test_empty_result_is_success():
    places = await PlaceAggregator(ScriptedService({})).collect("Nowhere", [])
    assert places == []
