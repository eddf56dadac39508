import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from tripwise.api.responses import BadRequest, bad_request, read_json_object, validation_details
from tripwise.core.schemas import ChatAdvisorRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


@router.post("/chat-advisor")
async def chat_advisor(request: Request):
    try:
        body = await read_json_object(request)
        chat_request = ChatAdvisorRequest.model_validate(body)
    except BadRequest as e:
        return bad_request(e.error, e.details)
    except ValidationError as e:
        return bad_request("Message is required", validation_details(e))

    try:
        reply = await request.app.state.advisor.reply(
            chat_request.message,
            chat_request.conversation_history,
            chat_request.user_profile,
        )
    except Exception as e:
        logger.exception(f"[Advisor] Error handling message: {e}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Failed to process your message"},
        )

    return {
        "success": True,
        "response": reply.response,
        "suggestions": reply.suggestions,
        "ai_powered": reply.ai_powered,
    }
