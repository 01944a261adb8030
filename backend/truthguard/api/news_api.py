import asyncio
import logging
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from truthguard.core.container import Services
from truthguard.models.claim import ChatReply, ChatRequest, Scope

logger = logging.getLogger(__name__)

router = APIRouter()


def get_services(request: Request) -> Services:
    return request.app.state.services


async def _run_scope(services: Services, scope: Scope):
    # Pipeline is blocking (requests, pymongo, sleeps); keep it off the event loop
    loop = asyncio.get_event_loop()
    try:
        records = await loop.run_in_executor(None, services.pipeline.run, scope)
    except Exception:
        logger.exception(f"[API] {scope.value} verification cycle failed")
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=[])
    return [record.model_dump(mode="json") for record in records]


@router.get("/verify-news")
async def verify_news(services: Services = Depends(get_services)):
    """Verified claims from regional feeds, newest first."""
    return await _run_scope(services, Scope.LOCAL)


@router.get("/global-news")
async def global_news(services: Services = Depends(get_services)):
    """Verified claims from international feeds, newest first."""
    return await _run_scope(services, Scope.GLOBAL)


@router.post("/chat-agent", response_model=ChatReply)
async def chat_agent(data: ChatRequest, services: Services = Depends(get_services)):
    loop = asyncio.get_event_loop()
    try:
        reply = await loop.run_in_executor(None, services.chat.reply, data.message)
    except Exception:
        logger.exception("[API] Chat agent failed")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"reply": "Error."},
        )
    return ChatReply(reply=reply)
