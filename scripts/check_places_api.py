"""
Quick check of the places lookup tiers against the live services.

Usage:
    python scripts/check_places_api.py "Barcelona, Spain"
"""

import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from tripwise.core.places_service import CATEGORY_TYPES, PlacesService
from tripwise.core.settings import get_settings


def check_places_api(destination: str):
    service = PlacesService(get_settings().google_places_api_key)
    print(f"Google key configured: {service.has_google_key}")

    for category in CATEGORY_TYPES:
        result = service.search(destination, category)
        print(f"\n--- {category}: {len(result.places)} places (source: {result.source}) ---")
        for i, place in enumerate(result.places[:3], 1):
            print(f"{i}. {place.name} (Rating: {place.rating}, £{place.estimated_cost_gbp})")

    print("\n--- Diagnostics ---")
    for check in service.diagnose(destination)["tests"]:
        print(f"{check['name']}: {check['status']} - {check['details']}")


if __name__ == "__main__":
    check_places_api(sys.argv[1] if len(sys.argv) > 1 else "Barcelona, Spain")
