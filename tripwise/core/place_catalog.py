"""
Curated places and generic templates used when no live lookup answers.
"""

from typing import Any

from tripwise.core.schemas import Coordinates, Place

DEFAULT_IMAGES = {
    "attractions": "https://images.pexels.com/photos/1388030/pexels-photo-1388030.jpeg",
    "restaurants": "https://images.pexels.com/photos/1640777/pexels-photo-1640777.jpeg",
    "culture": "https://images.pexels.com/photos/1388030/pexels-photo-1388030.jpeg",
    "activities": "https://images.pexels.com/photos/1388030/pexels-photo-1388030.jpeg",
    "nature": "https://images.pexels.com/photos/1388030/pexels-photo-1388030.jpeg",
}

# Cost in GBP per Google price level (0-4), by category
PRICE_LEVEL_COSTS = {
    "attractions": [0, 8, 15, 25, 40],
    "restaurants": [10, 20, 35, 55, 85],
    "culture": [0, 5, 12, 20, 35],
    "activities": [5, 15, 30, 50, 80],
    "nature": [0, 3, 8, 15, 25],
    "hotels": [40, 80, 120, 180, 300],
    "shopping": [5, 15, 30, 60, 120],
    "nightlife": [10, 20, 40, 70, 120],
}

CATEGORY_COSTS = {
    "attractions": 18,
    "restaurants": 40,
    "hotels": 120,
    "activities": 28,
    "culture": 14,
    "nature": 8,
}

CATEGORY_DURATIONS = {
    "attractions": 1.5,
    "restaurants": 1.5,
    "activities": 3.0,
    "culture": 1.5,
    "nature": 3.0,
}


def default_image(category: str) -> str:
    return DEFAULT_IMAGES.get(category, DEFAULT_IMAGES["attractions"])


def estimate_cost(category: str) -> int:
    return CATEGORY_COSTS.get(category, 20)


def estimate_duration(category: str) -> float:
    return CATEGORY_DURATIONS.get(category, 2.0)


def estimate_cost_from_price_level(price_level: int | None, category: str) -> int:
    if price_level is None:
        return estimate_cost(category)
    costs = PRICE_LEVEL_COSTS.get(category, PRICE_LEVEL_COSTS["attractions"])
    return costs[max(0, min(int(price_level), 4))]


_SAGRADA = "https://images.pexels.com/photos/1388030/pexels-photo-1388030.jpeg"
_DINING = "https://images.pexels.com/photos/1640777/pexels-photo-1640777.jpeg"

CURATED_PLACES: dict[str, dict[str, list[dict[str, Any]]]] = {
    "barcelona": {
        "attractions": [
            {
                "id": "sagrada-familia",
                "name": "Sagrada Família",
                "description": (
                    "Antoni Gaudí's masterpiece basilica, a UNESCO World Heritage site "
                    "with stunning architecture."
                ),
                "location": "Carrer de Mallorca, 401, Eixample, Barcelona",
                "coordinates": {"lat": 41.4036, "lng": 2.1744},
                "rating": 4.8,
                "estimated_cost_gbp": 26,
                "duration_hours": 2,
                "booking_required": True,
                "image": _SAGRADA,
            },
            {
                "id": "park-guell",
                "name": "Park Güell",
                "description": (
                    "Whimsical park designed by Gaudí featuring colorful mosaics and "
                    "panoramic city views."
                ),
                "location": "Carrer d'Olot, s/n, Gràcia, Barcelona",
                "coordinates": {"lat": 41.4145, "lng": 2.1527},
                "rating": 4.6,
                "estimated_cost_gbp": 10,
                "duration_hours": 2.5,
                "booking_required": True,
                "image": _SAGRADA,
            },
            {
                "id": "casa-batllo",
                "name": "Casa Batlló",
                "description": "Gaudí's dragon-roofed modernist house on Passeig de Gràcia.",
                "location": "Passeig de Gràcia, 43, Eixample, Barcelona",
                "coordinates": {"lat": 41.3917, "lng": 2.1649},
                "rating": 4.7,
                "estimated_cost_gbp": 30,
                "duration_hours": 1.5,
                "booking_required": True,
                "image": _SAGRADA,
            },
        ],
        "restaurants": [
            {
                "id": "cal-pep",
                "name": "Cal Pep",
                "description": (
                    "Legendary tapas bar serving exceptional seafood and traditional "
                    "Catalan dishes."
                ),
                "location": "Plaça de les Olles, 8, Born, Barcelona",
                "coordinates": {"lat": 41.3833, "lng": 2.1833},
                "rating": 4.7,
                "estimated_cost_gbp": 45,
                "duration_hours": 1.5,
                "booking_required": False,
                "image": _DINING,
            },
            {
                "id": "la-boqueria",
                "name": "Mercat de la Boqueria",
                "description": "Bustling covered market off La Rambla with tapas counters.",
                "location": "La Rambla, 91, Ciutat Vella, Barcelona",
                "coordinates": {"lat": 41.3817, "lng": 2.1716},
                "rating": 4.5,
                "estimated_cost_gbp": 20,
                "duration_hours": 1.5,
                "booking_required": False,
                "image": _DINING,
            },
        ],
        "culture": [
            {
                "id": "museu-picasso",
                "name": "Museu Picasso",
                "description": "Extensive collection of Picasso's early works in medieval palaces.",
                "location": "Carrer de Montcada, 15-23, Born, Barcelona",
                "coordinates": {"lat": 41.3852, "lng": 2.1810},
                "rating": 4.4,
                "estimated_cost_gbp": 12,
                "duration_hours": 2,
                "booking_required": True,
                "image": _SAGRADA,
            },
            {
                "id": "barri-gotic",
                "name": "Gothic Quarter",
                "description": "Medieval lanes, Roman walls and the Barcelona Cathedral.",
                "location": "Barri Gòtic, Barcelona",
                "coordinates": {"lat": 41.3833, "lng": 2.1769},
                "rating": 4.6,
                "estimated_cost_gbp": 0,
                "duration_hours": 2,
                "booking_required": False,
                "image": _SAGRADA,
            },
        ],
        "nature": [
            {
                "id": "montjuic",
                "name": "Montjuïc",
                "description": "Hilltop gardens, castle and viewpoints over the port.",
                "location": "Montjuïc, Sants-Montjuïc, Barcelona",
                "coordinates": {"lat": 41.3636, "lng": 2.1578},
                "rating": 4.6,
                "estimated_cost_gbp": 0,
                "duration_hours": 3,
                "booking_required": False,
                "image": _SAGRADA,
            },
        ],
    },
    "marbella": {
        "attractions": [
            {
                "id": "marbella-old-town",
                "name": "Marbella Old Town (Casco Antiguo)",
                "description": (
                    "Charming historic quarter with narrow cobblestone streets, "
                    "whitewashed buildings, and traditional Andalusian architecture."
                ),
                "location": "Casco Antiguo, Marbella",
                "coordinates": {"lat": 36.5108, "lng": -4.8856},
                "rating": 4.6,
                "estimated_cost_gbp": 0,
                "duration_hours": 2,
                "booking_required": False,
                "image": _SAGRADA,
            },
            {
                "id": "puerto-banus",
                "name": "Puerto Banús Marina",
                "description": (
                    "Luxury marina famous for its upscale shops, restaurants, and "
                    "impressive yachts."
                ),
                "location": "Puerto Banús, Marbella",
                "coordinates": {"lat": 36.4848, "lng": -4.9516},
                "rating": 4.4,
                "estimated_cost_gbp": 0,
                "duration_hours": 2.5,
                "booking_required": False,
                "image": _SAGRADA,
            },
        ],
        "restaurants": [
            {
                "id": "dani-garcia",
                "name": "Dani García Restaurant",
                "description": (
                    "Michelin-starred restaurant offering innovative Andalusian cuisine "
                    "with modern techniques."
                ),
                "location": "Puente Romano, Marbella",
                "coordinates": {"lat": 36.4977, "lng": -4.9089},
                "rating": 4.8,
                "estimated_cost_gbp": 150,
                "duration_hours": 3,
                "booking_required": True,
                "image": _DINING,
            },
        ],
    },
    "valencia": {
        "attractions": [
            {
                "id": "city-of-arts-sciences",
                "name": "City of Arts and Sciences",
                "description": (
                    "Futuristic architectural complex featuring the Oceanogràfic "
                    "aquarium and Science Museum."
                ),
                "location": "Av. del Professor López Piñero, 7, Valencia",
                "coordinates": {"lat": 39.4561, "lng": -0.3545},
                "rating": 4.7,
                "estimated_cost_gbp": 35,
                "duration_hours": 4,
                "booking_required": True,
                "image": _SAGRADA,
            },
        ],
        "restaurants": [
            {
                "id": "casa-roberto-valencia",
                "name": "Casa Roberto",
                "description": "Authentic Valencian restaurant famous for traditional paella valenciana.",
                "location": "Carrer de Mestre Gozalbo, 19, Valencia",
                "coordinates": {"lat": 39.4699, "lng": -0.3763},
                "rating": 4.6,
                "estimated_cost_gbp": 35,
                "duration_hours": 1.5,
                "booking_required": True,
                "image": _DINING,
            },
        ],
    },
}

# Templates interpolated with the city name: (name, description, cost, hours, booking)
GENERIC_TEMPLATES: dict[str, list[tuple[str, str, int, float, bool]]] = {
    "attractions": [
        (
            "{city} Historic Center",
            "Explore the charming historic center of {city} with its traditional "
            "architecture and cultural landmarks.",
            0,
            2,
            False,
        ),
        (
            "{city} Main Square",
            "The heart of {city}, featuring beautiful architecture and vibrant atmosphere.",
            0,
            1,
            False,
        ),
    ],
    "restaurants": [
        (
            "Local Flavors of {city}",
            "Authentic local restaurant serving traditional {city} cuisine with fresh, "
            "regional ingredients.",
            35,
            1.5,
            True,
        ),
    ],
    "culture": [
        (
            "{city} Cultural Center",
            "Local cultural center showcasing the history, art, and traditions of {city}.",
            8,
            1.5,
            False,
        ),
    ],
    "activities": [
        (
            "{city} Walking Tour",
            "Guided walking tour showcasing the best of {city} with local insights and hidden gems.",
            20,
            3,
            True,
        ),
    ],
    "nature": [
        (
            "{city} Natural Area",
            "Beautiful natural area perfect for relaxation and enjoying the local landscape.",
            0,
            2,
            False,
        ),
    ],
}


def _destination_key(destination: str) -> str:
    return destination.lower().replace(",", "").replace(" ", "")


def _slug(value: str) -> str:
    return "-".join(value.lower().split())


def generic_places(destination: str, category: str) -> list[Place]:
    """Templated places for destinations without curated data."""
    city = destination.split(",")[0].strip() or destination
    templates = GENERIC_TEMPLATES.get(category, GENERIC_TEMPLATES["attractions"])
    places = []
    for index, (name, description, cost, hours, booking) in enumerate(templates):
        places.append(
            Place(
                id=f"{_slug(city)}-{category}-{index + 1}",
                name=name.format(city=city),
                description=description.format(city=city),
                location=f"{city} City Center",
                category=category,
                rating=round(4.4 - 0.2 * index, 1),
                estimated_cost_gbp=cost,
                duration_hours=hours,
                booking_required=booking,
                image=default_image(category),
            )
        )
    return places


def curated_places(destination: str, category: str) -> list[Place]:
    """
    Look up the curated database, falling back to generic templates.

    Exact key match first ('barcelona'), then partial matches in either
    direction so 'Barcelona, Spain' still resolves.
    """
    dest_key = _destination_key(destination)
    entries = CURATED_PLACES.get(dest_key, {}).get(category, [])

    if not entries:
        city_key = _destination_key(destination.split(",")[0])
        for key, data in CURATED_PLACES.items():
            if key in dest_key or (city_key and city_key in key):
                entries = data.get(category, [])
                if entries:
                    break

    if not entries:
        return generic_places(destination, category)

    places = []
    for entry in entries:
        fields = dict(entry)
        coords = fields.pop("coordinates", None)
        places.append(
            Place(
                **fields,
                coordinates=Coordinates(**coords) if coords else None,
                category=category,
            )
        )
    return places
