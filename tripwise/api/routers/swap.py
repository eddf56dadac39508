import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from tripwise.api.responses import BadRequest, bad_request, read_json_object, validation_details
from tripwise.core.schemas import SwapActivityRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["activities"])


@router.post("/swap-activity")
async def swap_activity(request: Request):
    """Replace one activity, keeping its time slot."""
    try:
        body = await read_json_object(request)
        swap_request = SwapActivityRequest.model_validate(body)
    except BadRequest as e:
        return bad_request(e.error, e.details)
    except ValidationError as e:
        return bad_request("Activity ID is required", validation_details(e))

    try:
        result = await request.app.state.swapper.swap(
            swap_request.activity_id,
            swap_request.current_activity,
            swap_request.user_preferences,
        )
    except Exception as e:
        logger.exception(f"[Swap] Error swapping activity: {e}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Failed to generate alternative activity"},
        )

    return {
        "success": True,
        "newActivity": result.activity.model_dump(mode="json", exclude_none=True),
        "ai_powered": result.ai_powered,
    }
