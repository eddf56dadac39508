"""
Collect candidate places for a trip across the interest categories.
"""

import asyncio
import logging

from tripwise.core.places_service import PlacesService
from tripwise.core.schemas import Place

logger = logging.getLogger(__name__)

PLACES_PER_CATEGORY = 4

# Interest tag -> extra lookup category. "attractions" is always searched first.
INTEREST_CATEGORIES = (
    ("restaurants", ("food",)),
    ("culture", ("history", "culture")),
    ("nature", ("nature", "beaches")),
    ("activities", ("nightlife",)),
)


def categories_for_interests(interests: list[str] | None) -> list[str]:
    """
    Map interest tags to lookup categories, in a fixed order.

    Args:
        interests: Trip interest tags (e.g., ["food", "history"])

    Returns:
        Categories to query, always starting with "attractions"
    """
    tags = {tag.lower() for tag in interests or []}
    categories = ["attractions"]
    for category, triggers in INTEREST_CATEGORIES:
        if tags.intersection(triggers):
            categories.append(category)
    return categories


class PlaceAggregator:
    """Fans out one lookup per category and merges whatever comes back."""

    def __init__(self, places_service: PlacesService, timeout_seconds: float = 8.0):
        self.places_service = places_service
        self.timeout_seconds = timeout_seconds

    async def _lookup(self, destination: str, category: str) -> list[Place]:
        try:
            result = await asyncio.wait_for(
                asyncio.to_thread(self.places_service.search, destination, category),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"[Aggregator] {category} lookup timed out after {self.timeout_seconds}s"
            )
            return []
        except Exception as e:
            logger.warning(f"[Aggregator] {category} lookup failed: {e}")
            return []

        logger.info(
            f"[Aggregator] {len(result.places)} {category} places (source: {result.source})"
        )
        return list(result.places[:PLACES_PER_CATEGORY])

    async def collect(self, destination: str, interests: list[str] | None) -> list[Place]:
        """
        Return up to four places per category, de-duplicated, never raising.

        Categories are looked up concurrently; a slow or failing category
        yields nothing without holding back the others.
        """
        categories = categories_for_interests(interests)
        per_category = await asyncio.gather(
            *(self._lookup(destination, category) for category in categories)
        )

        places: list[Place] = []
        seen: set[str] = set()
        for category_places in per_category:
            for place in category_places:
                key = place.google_place_id or place.id
                if key in seen:
                    continue
                seen.add(key)
                places.append(place)

        logger.info(f"[Aggregator] {len(places)} total places for {destination}")
        return places
