from unittest.mock import MagicMock, patch

import requests

from tripwise.core.places_service import PlacesService, describe_place, requires_booking


def _response(payload, ok=True):
    response = MagicMock()
    response.ok = ok
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


def _session(routes):
    """routes: list of (url fragment, response or exception)"""
    session = MagicMock(spec=requests.Session)

    def get(url, params=None, timeout=None):
        for fragment, outcome in routes:
            if fragment in url:
                if isinstance(outcome, Exception):
                    raise outcome
                return outcome
        raise AssertionError(f"unexpected GET {url}")

    session.get.side_effect = get
    return session


GOOGLE_RESTAURANT = {
    "place_id": "ChIJ-cal-pep",
    "name": "Cal Pep",
    "vicinity": "Plaça de les Olles, 8",
    "rating": 4.6,
    "price_level": 3,
    "types": ["restaurant", "food"],
    "geometry": {"location": {"lat": 41.384, "lng": 2.183}},
    "photos": [{"photo_reference": "abc"}],
}


def test_google_results_are_mapped():
    session = _session(
        [
            ("textsearch", _response({"status": "OK", "results": [{"geometry": {"location": {"lat": 41.3, "lng": 2.1}}}]})),
            ("nearbysearch", _response({"status": "OK", "results": [GOOGLE_RESTAURANT]})),
        ]
    )
    result = PlacesService("test-key", session=session).search("Barcelona", "restaurants")
    assert result.source == "google_places"
    place = result.places[0]
    assert place.id == "ChIJ-cal-pep"
    assert place.google_place_id == "ChIJ-cal-pep"
    assert place.booking_required is True
    assert place.estimated_cost_gbp >= 0
    assert place.coordinates.lat == 41.384
    assert "photoreference=abc" in place.image


def test_without_key_wikipedia_answers():
    session = _session(
        [
            (
                "wikipedia.org",
                _response({"title": "Lisbon", "extract": "Capital of Portugal", "thumbnail": {"source": "http://img"}}),
            )
        ]
    )
    result = PlacesService("", session=session).search("Lisbon", "attractions")
    assert result.source == "wikipedia"
    assert result.places[0].name == "Lisbon"
    assert result.places[0].image == "http://img"


def test_curated_when_remote_tiers_fail():
    session = _session([("wikipedia.org", requests.ConnectionError("offline"))])
    result = PlacesService(None, session=session).search("Barcelona, Spain", "attractions")
    assert result.source == "curated"
    assert "Sagrada Família" in [p.name for p in result.places]


def test_unknown_destination_gets_generic_places():
    session = _session([("wikipedia.org", _response({}, ok=False))])
    result = PlacesService("", session=session).search("Tromsø", "restaurants")
    assert result.source == "curated"
    assert result.places
    assert all("Tromsø" in p.location for p in result.places)
    assert all(p.estimated_cost_gbp >= 0 for p in result.places)


def test_denied_google_request_falls_through():
    session = _session(
        [
            ("textsearch", _response({"status": "REQUEST_DENIED"})),
            ("wikipedia.org", _response({}, ok=False)),
        ]
    )
    result = PlacesService("bad-key", session=session).search("Valencia", "attractions")
    assert result.source == "curated"


def test_requires_booking_rules():
    assert requires_booking({"types": ["restaurant"], "price_level": 2}, "attractions")
    assert requires_booking({"types": ["museum"]}, "attractions")
    assert requires_booking({"types": ["tourist_attraction"], "rating": 4.7}, "attractions")
    assert not requires_booking({"types": ["park"], "rating": 4.0}, "nature")
    assert requires_booking({"types": []}, "hotels")


def test_describe_place_uses_types():
    assert "dining" in describe_place({"name": "X", "types": ["restaurant"]})
    assert "natural space" in describe_place({"name": "Y", "types": ["park"], "rating": 4.2})


def test_diagnose_without_key():
    results = PlacesService("", session=_session([])).diagnose("Barcelona")
    assert results["environment"]["GOOGLE_PLACES_API_KEY"] == "NOT SET"
    assert results["tests"][0]["status"] == "FAIL"


def test_default_service_calls_requests_get_per_lookup():
    fake = _session(
        [("wikipedia.org", _response({"title": "Lisbon", "extract": "Capital of Portugal"}))]
    )
    service = PlacesService("")
    assert service.session is None
    with patch("tripwise.core.places_service.requests.get", side_effect=fake.get.side_effect) as get:
        service.search("Lisbon", "attractions")
        service.search("Lisbon", "culture")
    assert get.call_count == 2
