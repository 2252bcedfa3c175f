"""
Voice navigation endpoints
"""
import logging
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from typing import Any, Dict, Optional

from sarthi.agents.voice_navigator.agent import VoiceNavigatorAgent, error_response
from sarthi.config import get_settings
from sarthi.exceptions import AIServiceError, AIServiceUnavailable

logger = logging.getLogger(__name__)

router = APIRouter()


class VoiceCommand(BaseModel):
    command: Any = None
    current_page: Optional[str] = None
    website_structure: Optional[Dict[str, Any]] = None
    conversation_mode: bool = False
    user_id: Optional[str] = None


def get_voice_navigator(request: Request) -> VoiceNavigatorAgent:
    """One navigator (and response cache) per application instance"""
    agent = getattr(request.app.state, "voice_navigator", None)
    if agent is None:
        agent = VoiceNavigatorAgent()
        request.app.state.voice_navigator = agent
    return agent


@router.post("/process")
async def process_command(
    data: VoiceCommand,
    agent: VoiceNavigatorAgent = Depends(get_voice_navigator),
):
    """Turn a spoken command into a site action"""
    if not data.command or not isinstance(data.command, str):
        return JSONResponse(
            status_code=400,
            content={
                "error": "Invalid command format",
                **error_response("I didn't receive a valid command. Please try again."),
            },
        )

    try:
        return await agent.process(data.model_dump())
    except (AIServiceUnavailable, AIServiceError) as e:
        logger.error(f"Voice command '{data.command}' failed: {e.message}")
        return JSONResponse(
            status_code=500,
            content=error_response(
                "I encountered an unexpected error. Please try again or contact support if the problem persists."
            ),
        )


@router.get("/cache/stats")
async def cache_stats(agent: VoiceNavigatorAgent = Depends(get_voice_navigator)):
    return {
        "size": len(agent.cache),
        "max_entries": agent.cache.max_entries,
        "max_age_seconds": get_settings().VOICE_CACHE_TTL_SECONDS,
        "entries": agent.cache.keys(limit=10),
    }


@router.post("/cache/clear")
async def clear_cache(agent: VoiceNavigatorAgent = Depends(get_voice_navigator)):
    cleared = agent.cache.clear()
    return {"message": "Cache cleared successfully", "cleared_entries": cleared}
