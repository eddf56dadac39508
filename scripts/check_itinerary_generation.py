#!/usr/bin/env python3
"""
Run one itinerary generation against the configured Ollama server and
places services, and print the tier that answered.

Usage:
    python scripts/check_itinerary_generation.py Barcelona 2025-06-01 2025-06-04
"""
import asyncio
import os
import sys
from datetime import date

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from tripwise.core.llm_provider import LLMProvider
from tripwise.core.orchestrator import ItineraryOrchestrator
from tripwise.core.place_aggregator import PlaceAggregator
from tripwise.core.places_service import PlacesService
from tripwise.core.schemas import TripRequest
from tripwise.core.settings import get_settings


def print_section(title: str):
    print("\n" + "=" * 80)
    print(f"  {title}")
    print("=" * 80 + "\n")


async def check_itinerary_generation(destination: str, start: str, end: str):
    settings = get_settings()
    llm = LLMProvider(settings.ollama_url, settings.ollama_model, settings.probe_timeout_seconds)
    orchestrator = ItineraryOrchestrator(
        PlaceAggregator(PlacesService(settings.google_places_api_key), settings.places_timeout_seconds),
        llm,
        settings,
    )
    request = TripRequest(
        destination=destination,
        start_date=date.fromisoformat(start),
        end_date=date.fromisoformat(end),
        budget="mid",
        group="couple",
        interests=["food", "history"],
    )

    print_section(f"Generating {request.duration_days} days for {destination}")
    result = await orchestrator.generate(request)

    print(f"Fidelity: {result.fidelity}")
    print(f"Debug: {result.debug_info}")
    for day in result.itinerary.days:
        print(f"\nDay {day.day_number} ({day.date})")
        for activity in day.activities:
            print(f"  {activity.time} {activity.title} - £{activity.estimated_cost_gbp}")
    print(f"\nTotal: £{result.itinerary.total_estimated_cost_gbp}")


if __name__ == "__main__":
    args = sys.argv[1:] or ["Barcelona", "2025-06-01", "2025-06-04"]
    asyncio.run(check_itinerary_generation(*args))
