import asyncio
import time

import httpx
import pytest
import pytest_asyncio

from tripwise.core.repository import ItineraryRepository, MemoryStore
from tripwise.core.settings import Settings
from tripwise.main import create_app

BARCELONA = {
    "destination": "Barcelona",
    "startDate": "2025-06-01",
    "endDate": "2025-06-04",
    "budget": "mid",
    "group": "couple",
    "interests": ["food", "history"],
}


@pytest.fixture
def app(fake_llm, fake_places_service):
    return create_app(
        settings=Settings(mongodb_uri="", max_trip_days=60),
        places_service=fake_places_service,
        llm_provider=fake_llm,
        itinerary_repo=ItineraryRepository(),
    )


@pytest_asyncio.fixture
async def client(app):
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.mark.asyncio
async def test_barcelona_with_model_down_uses_real_places(client, fake_places_service):
    response = await client.post("/generate-itinerary", json=BARCELONA)
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["ai_powered"] is False
    assert body["real_places"] is True
    assert body["duration"] == 3
    assert body["debug_info"]["places_found"] == 6

    itinerary = body["itinerary"]
    assert itinerary["fidelity"] == "real-places-sample"
    assert [d["date"] for d in itinerary["days"]] == ["2025-06-01", "2025-06-02", "2025-06-03"]
    costs = [a["estimated_cost_gbp"] for d in itinerary["days"] for a in d["activities"]]
    assert all(cost >= 0 for cost in costs)
    assert itinerary["total_estimated_cost_gbp"] == sum(costs)
    assert {category for _, category in fake_places_service.calls} == {
        "attractions",
        "restaurants",
        "culture",
    }


@pytest.mark.asyncio
async def test_model_itinerary_is_extended(client, fake_llm):
    fake_llm.outcome = (
        '```json\n{"days": [{"day_number": 1, "activities": '
        '[{"title": "Sagrada Família", "time": "09:00", "estimated_cost_gbp": 26}]}]}\n```'
    )
    body = (await client.post("/generate-itinerary", json=BARCELONA)).json()
    assert body["ai_powered"] is True
    assert body["itinerary"]["fidelity"] == "ai-extended"
    assert len(body["itinerary"]["days"]) == 3


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "changes",
    [
        {"endDate": "2025-06-01"},
        {"endDate": "2025-05-20"},
        {"destination": ""},
        {"budget": "unlimited"},
        {"startDate": "not-a-date"},
        {"endDate": "2025-09-01"},
    ],
)
async def test_invalid_trip_is_rejected(client, changes):
    response = await client.post("/generate-itinerary", json={**BARCELONA, **changes})
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"]


@pytest.mark.asyncio
async def test_missing_fields_and_bad_json_are_rejected(client):
    response = await client.post("/generate-itinerary", json={"destination": "Rome"})
    assert response.status_code == 400
    fields = {detail["field"] for detail in response.json()["details"]}
    assert {"startDate", "endDate", "budget", "group"} <= fields

    response = await client.post(
        "/generate-itinerary", content=b"{not json", headers={"content-type": "application/json"}
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_generated_itinerary_becomes_current(client):
    assert (await client.get("/itineraries/current")).status_code == 404

    await client.post("/generate-itinerary", json=BARCELONA)
    await client.post("/generate-itinerary", json={**BARCELONA, "endDate": "2025-06-03"})

    current = (await client.get("/itineraries/current")).json()
    assert current["version"] == 2
    assert len(current["itinerary"]["days"]) == 2

    history = (await client.get("/itineraries/history")).json()
    assert history["count"] == 2
    assert history["history"][0]["version"] == 2

    assert (await client.delete("/itineraries/current")).json() == {"success": True}
    assert (await client.get("/itineraries/current")).status_code == 404


@pytest.mark.asyncio
async def test_swap_activity(client):
    response = await client.post(
        "/swap-activity",
        json={
            "activityId": "day1_activity1",
            "currentActivity": {"time": "19:00", "type": "evening", "title": "Tapas"},
            "userPreferences": {"destination": "Barcelona", "interests": ["food"]},
        },
    )
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["ai_powered"] is False
    assert body["newActivity"]["time"] == "19:00"
    assert body["newActivity"]["type"] == "evening"
    assert body["newActivity"]["id"] != "day1_activity1"

    missing = await client.post("/swap-activity", json={"currentActivity": {}})
    assert missing.status_code == 400
    assert missing.json()["error"] == "Activity ID is required"


@pytest.mark.asyncio
async def test_chat_advisor(client):
    response = await client.post(
        "/chat-advisor",
        json={"message": "How far is Nerja from Malaga?", "conversationHistory": []},
    )
    body = response.json()
    assert body["success"] is True
    assert body["ai_powered"] is False
    assert "52km" in body["response"]
    assert body["suggestions"]

    empty = await client.post("/chat-advisor", json={"message": "   "})
    assert empty.status_code == 400
    assert empty.json()["error"] == "Message is required"


@pytest.mark.asyncio
async def test_places_endpoint(client):
    response = await client.get("/places", params={"destination": "Barcelona", "category": "restaurants"})
    body = response.json()
    assert body["success"] is True
    assert body["source"] == "curated"
    assert body["category"] == "restaurants"
    assert len(body["places"]) == 2

    assert (await client.get("/places")).status_code == 400


@pytest.mark.asyncio
async def test_diagnostics(client):
    ollama = (await client.get("/test-ollama", params={"full": "true"})).json()
    assert ollama["full"] is True
    assert ollama["summary"]["overall"] == "FAIL"

    places = (await client.get("/test-google-places")).json()
    assert places["destination"] == "Barcelona, Spain"


class SlowStore(MemoryStore):
    def write_current(self, entry):
        time.sleep(0.5)
        super().write_current(entry)


@pytest.mark.asyncio
async def test_saving_does_not_block_the_event_loop(fake_llm, fake_places_service):
    repo = ItineraryRepository(SlowStore())
    app = create_app(
        settings=Settings(mongodb_uri="", max_trip_days=60),
        places_service=fake_places_service,
        llm_provider=fake_llm,
        itinerary_repo=repo,
    )
    gaps = []

    async def ticker(stop):
        last = time.perf_counter()
        while not stop.is_set():
            await asyncio.sleep(0.02)
            now = time.perf_counter()
            gaps.append(now - last)
            last = now

    stop = asyncio.Event()
    tick = asyncio.create_task(ticker(stop))
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        response = await ac.post("/generate-itinerary", json=BARCELONA)
    stop.set()
    await tick

    assert response.status_code == 200
    assert repo.get_current() is not None
    assert max(gaps) < 0.3


def test_app_module_leaves_env_loading_to_settings():
    import tripwise.main

    assert "load_dotenv" not in vars(tripwise.main)
