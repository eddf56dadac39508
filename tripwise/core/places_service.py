"""
Points-of-interest lookup: Google Places first, Wikipedia second, curated data last.
"""

import logging
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import requests

from tripwise.core.place_catalog import (
    curated_places,
    default_image,
    estimate_cost,
    estimate_cost_from_price_level,
    estimate_duration,
)
from tripwise.core.schemas import Coordinates, Place, PlacesSource

logger = logging.getLogger(__name__)

PLACES_API_BASE = "https://maps.googleapis.com/maps/api/place"
WIKIPEDIA_SUMMARY_URL = "https://en.wikipedia.org/api/rest_v1/page/summary"

CATEGORY_TYPES = {
    "attractions": "tourist_attraction",
    "restaurants": "restaurant",
    "culture": "museum",
    "activities": "amusement_park",
    "nature": "park",
    "hotels": "lodging",
    "shopping": "shopping_mall",
    "nightlife": "night_club",
}

GOOGLE_RESULT_LIMIT = 5
NEARBY_RADIUS_METERS = 10000


@dataclass
class PlaceSearchResult:
    places: list[Place] = field(default_factory=list)
    source: PlacesSource = "curated"


def describe_place(place: dict[str, Any]) -> str:
    """Short description built from the Google place types."""
    name = place.get("name", "This place")
    rating = f"{place['rating']}/5 stars" if place.get("rating") else "highly rated"
    types = place.get("types") or []

    if "restaurant" in types or "food" in types:
        return (
            f"{name} is a popular dining spot offering delicious local cuisine. With "
            f"{rating}, it's a great choice for experiencing authentic flavors and local "
            "culinary traditions."
        )
    if "tourist_attraction" in types or "museum" in types:
        return (
            f"{name} is a must-visit attraction that showcases the local culture and "
            f"history. Rated {rating}, it offers visitors an enriching and memorable experience."
        )
    if "park" in types or "natural_feature" in types:
        return (
            f"{name} is a beautiful natural space perfect for relaxation and outdoor "
            f"activities. With {rating}, it's an ideal spot to enjoy nature and scenic views."
        )
    if "shopping_mall" in types or "store" in types:
        return (
            f"{name} is a popular shopping destination offering a variety of goods and "
            f"local products. Rated {rating}, it's perfect for finding unique items and souvenirs."
        )
    if "lodging" in types:
        return (
            f"{name} provides comfortable accommodation with excellent service. With "
            f"{rating}, it's a great base for exploring the local area."
        )
    return (
        f"{name} is a popular local destination that offers visitors an authentic "
        f"experience. Rated {rating}, it's well worth a visit during your stay."
    )


def requires_booking(place: dict[str, Any], category: str) -> bool:
    types = place.get("types") or []
    price_level = place.get("price_level") or 0
    rating = place.get("rating") or 0

    if "restaurant" in types and price_level >= 2:
        return True
    if any(t in types for t in ("museum", "amusement_park", "lodging", "spa")):
        return True
    if "tourist_attraction" in types and rating >= 4.5:
        return True
    return category in ("restaurants", "culture", "hotels")


class PlacesService:
    """Service for looking up candidate places for a destination and category."""

    def __init__(self, api_key: str | None = None, session: requests.Session | None = None):
        self.api_key = (api_key or "").strip()
        # Unset means one requests.get per call, never a shared Session
        self.session = session

    def _get(self, url: str, **kwargs) -> requests.Response:
        if self.session is not None:
            return self.session.get(url, **kwargs)
        return requests.get(url, **kwargs)

    @property
    def has_google_key(self) -> bool:
        return bool(self.api_key) and self.api_key != "undefined"

    def search(self, destination: str, category: str = "attractions") -> PlaceSearchResult:
        """
        Find places for a destination/category, degrading through the tiers.

        Args:
            destination: Free-text destination (e.g., "Barcelona, Spain")
            category: One of the CATEGORY_TYPES keys

        Returns:
            PlaceSearchResult with the places and the tier that answered
        """
        try:
            google_places = self.fetch_google_places(destination, category)
            if google_places:
                logger.info(
                    f"[Places] {len(google_places)} Google places for {destination} ({category})"
                )
                return PlaceSearchResult(places=google_places, source="google_places")

            wiki_places = self.fetch_wikipedia_places(destination, category)
            if wiki_places:
                logger.info(f"[Places] Wikipedia answered for {destination} ({category})")
                return PlaceSearchResult(places=wiki_places, source="wikipedia")
        except Exception as e:
            logger.error(f"[Places] Error fetching real places: {e}")

        places = curated_places(destination, category)
        logger.info(f"[Places] {len(places)} curated places for {destination} ({category})")
        return PlaceSearchResult(places=places, source="curated")

    def locate(self, destination: str) -> dict[str, float] | None:
        """Resolve the destination centre with Text Search."""
        response = self._get(
            f"{PLACES_API_BASE}/textsearch/json",
            params={"query": destination, "key": self.api_key},
            timeout=10,
        )
        response.raise_for_status()
        data = response.json()

        status = data.get("status")
        if status in ("REQUEST_DENIED", "OVER_QUERY_LIMIT"):
            logger.error(f"[Places] Text search refused: {status}")
            return None
        results = data.get("results") or []
        if not results:
            logger.info(f"[Places] No location found for {destination}")
            return None
        return results[0]["geometry"]["location"]

    def fetch_google_places(self, destination: str, category: str) -> list[Place]:
        if not self.has_google_key:
            logger.debug("[Places] GOOGLE_PLACES_API_KEY not set, skipping Google")
            return []

        try:
            location = self.locate(destination)
            if not location:
                return []

            place_type = CATEGORY_TYPES.get(category, "tourist_attraction")
            response = self._get(
                f"{PLACES_API_BASE}/nearbysearch/json",
                params={
                    "location": f"{location['lat']},{location['lng']}",
                    "radius": NEARBY_RADIUS_METERS,
                    "type": place_type,
                    "key": self.api_key,
                },
                timeout=10,
            )
            response.raise_for_status()
            data = response.json()

            if data.get("status") == "REQUEST_DENIED":
                logger.error("[Places] Nearby search request denied")
                return []

            results = data.get("results") or []
            return [
                self._from_google(result, destination, category)
                for result in results[:GOOGLE_RESULT_LIMIT]
            ]
        except Exception as e:
            logger.error(f"[Places] Google Places API error: {e}")
            return []

    def _from_google(self, place: dict[str, Any], destination: str, category: str) -> Place:
        image = default_image(category)
        photos = place.get("photos") or []
        if photos and photos[0].get("photo_reference"):
            image = (
                f"{PLACES_API_BASE}/photo?maxwidth=400"
                f"&photoreference={photos[0]['photo_reference']}&key={self.api_key}"
            )

        geometry = (place.get("geometry") or {}).get("location") or {}
        coordinates = None
        if geometry.get("lat") is not None and geometry.get("lng") is not None:
            coordinates = Coordinates(lat=geometry["lat"], lng=geometry["lng"])

        rating = place.get("rating") or 4.0
        return Place(
            id=place.get("place_id") or "google-" + "-".join(str(place.get("name", "")).lower().split()),
            name=place.get("name") or destination,
            description=describe_place(place),
            location=place.get("vicinity") or place.get("formatted_address") or destination,
            coordinates=coordinates,
            category=category,
            rating=max(0.0, min(5.0, float(rating))),
            estimated_cost_gbp=estimate_cost_from_price_level(place.get("price_level"), category),
            duration_hours=estimate_duration(category),
            booking_required=requires_booking(place, category),
            image=image,
            google_place_id=place.get("place_id"),
        )

    def fetch_wikipedia_places(self, destination: str, category: str) -> list[Place]:
        try:
            response = self._get(
                f"{WIKIPEDIA_SUMMARY_URL}/{quote(destination)}",
                timeout=3,
            )
            if not response.ok:
                return []
            summary = response.json()
        except Exception as e:
            logger.error(f"[Places] Wikipedia API error: {e}")
            return []

        title = summary.get("title")
        if not title:
            return []
        return [
            Place(
                id=f"wiki-{'-'.join(destination.lower().split())}",
                name=title,
                description=summary.get("extract") or f"Explore the highlights of {destination}",
                location=destination,
                category=category,
                rating=4.3,
                estimated_cost_gbp=estimate_cost(category),
                duration_hours=estimate_duration(category),
                booking_required=False,
                website=((summary.get("content_urls") or {}).get("desktop") or {}).get("page"),
                image=(summary.get("thumbnail") or {}).get("source") or default_image(category),
            )
        ]

    def diagnose(self, destination: str) -> dict[str, Any]:
        """Run the Google Places capability checks used by the diagnostics endpoint."""
        results: dict[str, Any] = {
            "destination": destination,
            "environment": {
                "GOOGLE_PLACES_API_KEY": "SET" if self.has_google_key else "NOT SET",
                "finalKey": f"{self.api_key[:6]}..." if self.has_google_key else "NOT FOUND",
            },
            "tests": [],
        }
        tests = results["tests"]

        if not self.has_google_key:
            tests.append(
                {
                    "name": "API Key Check",
                    "status": "FAIL",
                    "details": "No valid Google Places API key found",
                    "solution": "Add GOOGLE_PLACES_API_KEY=your_key to .env file",
                }
            )
            return results
        tests.append(
            {
                "name": "API Key Check",
                "status": "PASS",
                "details": f"API key found ({len(self.api_key)} characters)",
            }
        )

        try:
            location = self.locate(destination)
        except Exception as e:
            tests.append({"name": "Text Search API", "status": "ERROR", "details": str(e)})
            return results
        if not location:
            tests.append(
                {
                    "name": "Text Search API",
                    "status": "FAIL",
                    "details": f"No location resolved for {destination}",
                    "solution": "Enable Places API in Google Cloud Console and check billing",
                }
            )
            return results
        tests.append(
            {
                "name": "Text Search API",
                "status": "PASS",
                "details": f"Resolved {destination}",
                "location": location,
            }
        )

        places = self.fetch_google_places(destination, "attractions")
        if places:
            tests.append(
                {
                    "name": "Nearby Search API",
                    "status": "PASS",
                    "details": f"Found {len(places)} attractions",
                    "sample": [p.name for p in places[:3]],
                }
            )
        else:
            tests.append(
                {
                    "name": "Nearby Search API",
                    "status": "FAIL",
                    "details": "No attractions returned",
                }
            )
        return results
