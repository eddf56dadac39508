import json

import pytest

from tripwise.core.llm_provider import GenerationFailure
from tripwise.core.orchestrator import ItineraryOrchestrator
from tripwise.core.settings import Settings


class StaticAggregator:
    def __init__(self, places=None, error=None):
        self.places = places or []
        self.error = error

    async def collect(self, destination, interests):
        if self.error:
            raise self.error
        return list(self.places)


def _orchestrator(llm, places=None, error=None):
    return ItineraryOrchestrator(StaticAggregator(places, error), llm, Settings(ai_max_days=3))


def _model_days(count):
    return json.dumps(
        {
            "days": [
                {
                    "day_number": n + 1,
                    "activities": [
                        {"title": f"Model stop {n}", "time": "10:00", "estimated_cost_gbp": 15}
                    ],
                }
                for n in range(count)
            ],
            "total_estimated_cost_gbp": 1,
        }
    )


@pytest.mark.asyncio
async def test_unavailable_model_degrades_to_real_places(fake_llm, barcelona_request, places):
    result = await _orchestrator(fake_llm, places).generate(barcelona_request)
    assert result.fidelity == "real-places-sample"
    assert result.ai_powered is False
    assert result.real_places is True
    assert len(result.itinerary.days) == 3
    assert result.debug_info["failure"] == "unavailable"


@pytest.mark.asyncio
async def test_short_model_output_is_extended(fake_llm, make_request, places):
    fake_llm.outcome = _model_days(3)
    result = await _orchestrator(fake_llm, places).generate(make_request(days=6))
    assert result.fidelity == "ai-extended"
    assert len(result.itinerary.days) == 6
    assert result.itinerary.days[0].activities[0].title == "Model stop 0"
    assert result.itinerary.total_estimated_cost_gbp == sum(
        a.estimated_cost_gbp for a in result.itinerary.activities()
    )


@pytest.mark.asyncio
async def test_model_covering_every_day_is_ai_full(fake_llm, barcelona_request, places):
    fake_llm.outcome = _model_days(3)
    result = await _orchestrator(fake_llm, places).generate(barcelona_request)
    assert result.fidelity == "ai-full"
    assert result.ai_powered is True


@pytest.mark.asyncio
async def test_prompt_caps_requested_days(fake_llm, make_request):
    await _orchestrator(fake_llm).generate(make_request(days=10))
    assert "Generate exactly 3 days." in fake_llm.prompts[0]


@pytest.mark.asyncio
async def test_malformed_output_degrades(fake_llm, barcelona_request, places):
    fake_llm.outcome = "Here is a lovely trip! Day 1: beach."
    result = await _orchestrator(fake_llm, places).generate(barcelona_request)
    assert result.fidelity == "real-places-sample"
    assert result.debug_info["failure"] == "malformed"


@pytest.mark.asyncio
async def test_no_places_and_no_model_is_generic(fake_llm, barcelona_request):
    result = await _orchestrator(fake_llm, []).generate(barcelona_request)
    assert result.fidelity == "generic-sample"
    assert result.real_places is False
    assert len(result.itinerary.days) == 3


@pytest.mark.asyncio
async def test_unexpected_error_is_generic_with_details(fake_llm, barcelona_request):
    orchestrator = _orchestrator(fake_llm, error=RuntimeError("aggregator blew up"))
    result = await orchestrator.generate(barcelona_request)
    assert result.fidelity == "generic-sample"
    assert result.error_details == "aggregator blew up"
    assert len(result.itinerary.days) == 3


@pytest.mark.asyncio
@pytest.mark.parametrize("kind", ["unavailable", "timeout", "empty", "http-error"])
async def test_every_generation_failure_still_returns_itinerary(
    fake_llm, barcelona_request, places, kind
):
    fake_llm.outcome = GenerationFailure(kind, "forced")
    result = await _orchestrator(fake_llm, places).generate(barcelona_request)
    assert result.fidelity in ("real-places-sample", "generic-sample")
    assert all(a.estimated_cost_gbp >= 0 for a in result.itinerary.activities())
