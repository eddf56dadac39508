from fastapi import APIRouter, Query, Request

from tripwise.api.responses import bad_request

router = APIRouter(tags=["places"])


@router.get("/places")
def get_places(
    request: Request,
    destination: str | None = Query(None, max_length=120),
    category: str = Query("attractions", max_length=40),
):
    """Places for a destination/category, reporting which source answered."""
    if not destination or not destination.strip():
        return bad_request(
            "Destination is required",
            [{"field": "destination", "message": "Field required"}],
        )

    category = category.strip().lower() or "attractions"
    result = request.app.state.places_service.search(destination.strip(), category)
    return {
        "success": True,
        "places": [place.model_dump(mode="json") for place in result.places],
        "source": result.source,
        "destination": destination.strip(),
        "category": category,
    }
