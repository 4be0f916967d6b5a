import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from config import settings
from api.schemas import ChatRequest, ChatResponse, ErrorResponse, StatusResponse
from services.chat_service import ChatService
from services.factory import get_chat_service

logger = logging.getLogger(settings.LOGGER_NAME)

router = APIRouter(prefix="/api")


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


# API Endpoints
@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def chat_endpoint(
    request: ChatRequest,
    chat_service: ChatService = Depends(get_chat_service)
):
    if not request.message:
        return error_response(400, "Message is required")

    try:
        answer = await chat_service.respond(request.message, request.history or [])
    except Exception as e:
        logger.error(f"Chat error: {e}", exc_info=True)
        return error_response(500, "Failed to get response")

    return ChatResponse(response=answer)


@router.get("/status", response_model=StatusResponse)
async def get_status(
    chat_service: ChatService = Depends(get_chat_service)
) -> StatusResponse:
    return StatusResponse(**chat_service.status())
