import asyncio
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from tripwise.api.responses import BadRequest, bad_request, read_json_object, validation_details
from tripwise.core.schemas import TripRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["itineraries"])

FIDELITY_MESSAGES = {
    "ai-full": "AI-generated itinerary",
    "ai-extended": "AI-generated itinerary, extended to the full trip length",
    "real-places-sample": "Itinerary built from real places (AI unavailable)",
    "generic-sample": "Sample itinerary (AI and place data unavailable)",
}


@router.post("/generate-itinerary")
async def generate_itinerary(request: Request):
    """
    Generate a complete itinerary for a trip.

    Always 200 with a usable itinerary, except 400 for invalid input.
    """
    try:
        body = await read_json_object(request)
    except BadRequest as e:
        return bad_request(e.error, e.details)

    try:
        trip = TripRequest.model_validate(body)
    except ValidationError as e:
        return bad_request("Invalid trip request", validation_details(e))

    settings = request.app.state.settings
    if trip.duration_days > settings.max_trip_days:
        return bad_request(
            f"Trip too long: {trip.duration_days} days (maximum {settings.max_trip_days})",
            [{"field": "endDate", "message": "trip exceeds maximum length"}],
        )

    logger.info(
        f"[Itineraries] Generating {trip.duration_days}-day trip to {trip.destination} "
        f"({trip.budget}, {trip.group})"
    )
    result = await request.app.state.orchestrator.generate(trip)

    try:
        await asyncio.to_thread(request.app.state.itinerary_repo.save, result.itinerary, trip)
    except Exception as e:
        logger.warning(f"[Itineraries] Could not save current itinerary: {e}")

    payload = {
        "success": True,
        "itinerary": result.itinerary.model_dump(mode="json"),
        "ai_powered": result.ai_powered,
        "real_places": result.real_places,
        "fidelity": result.fidelity,
        "duration": trip.duration_days,
        "destination": trip.destination,
        "startDate": trip.start_date.isoformat(),
        "endDate": trip.end_date.isoformat(),
        "message": FIDELITY_MESSAGES[result.fidelity],
        "debug_info": result.debug_info,
    }
    if result.error_details:
        payload["error_details"] = result.error_details
    return payload


@router.get("/itineraries/current")
def get_current_itinerary(request: Request):
    entry = request.app.state.itinerary_repo.get_current()
    if entry is None:
        return JSONResponse(
            status_code=404, content={"success": False, "error": "No current itinerary"}
        )
    return {"success": True, **entry}


@router.get("/itineraries/history")
def get_itinerary_history(request: Request):
    """Recent itineraries, newest first."""
    entries = request.app.state.itinerary_repo.history()
    return {"success": True, "history": entries, "count": len(entries)}


@router.delete("/itineraries/current")
def clear_current_itinerary(request: Request):
    request.app.state.itinerary_repo.clear_current()
    return {"success": True}
