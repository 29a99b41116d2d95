"""
API Routes — the debate endpoint and the style catalogue.

ENDPOINTS:
- POST /api/debate  → one debate turn: argument in, rebuttal + scores out
- GET  /api/styles  → which opponent personas exist (for the style picker)

ERRORS:
Routes don't build error responses themselves. DebateError exceptions raised
by the handler are turned into {"error": "..."} with the right status code by
the exception handler registered in main.py.
"""

import logging

from fastapi import APIRouter, Depends, Request

from app.config import get_settings
from app.models.schemas import (
    DebateTurnRequest,
    DebateTurnResponse,
    ErrorResponse,
    StyleInfo,
    StylesResponse,
)
from app.services.debate_turn import DebateTurnHandler
from app.services.personas import DEFAULT_STYLE, MAX_TURNS, STYLE_PROMPTS, get_style_label
from app.services.quota import QuotaService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])


def get_turn_handler(request: Request) -> DebateTurnHandler:
    """
    Dependency that builds a handler around the process-wide clients.

    The completion client and quota store are created once in the app
    lifespan and live on app.state. Tests override this dependency.
    """
    settings = get_settings()
    state = request.app.state
    return DebateTurnHandler(
        completion_client=state.completion_client,
        quota=QuotaService(state.quota_store, settings),
        settings=settings,
    )


# =============================================================================
# DEBATE TURN
# =============================================================================

@router.post(
    "/debate",
    response_model=DebateTurnResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing required fields"},
        429: {"model": ErrorResponse, "description": "Daily topic or token limit reached"},
        500: {"model": ErrorResponse, "description": "Model provider or internal failure"},
    },
)
async def debate_turn(
    body: DebateTurnRequest,
    handler: DebateTurnHandler = Depends(get_turn_handler),
) -> DebateTurnResponse:
    """
    Run one debate turn.

    Example:
        POST /api/debate
        {"theme": "Remote work", "message": "It boosts productivity",
         "style": "devil", "user_token": "guest_abc", "is_new_session": true}

        Returns {"reply": "RESPONSE: ...", "rebuttal": "...",
                 "scores": {"Logical Consistency": 3, ...}, "feedback": "..."}
    """
    return await handler.handle(body)


# =============================================================================
# STYLE CATALOGUE
# =============================================================================

@router.get("/styles", response_model=StylesResponse)
async def list_styles() -> StylesResponse:
    """Personas the client can offer, with display labels and turn cap."""
    return StylesResponse(
        styles=[StyleInfo(style=style, label=get_style_label(style)) for style in STYLE_PROMPTS],
        default_style=DEFAULT_STYLE,
        max_turns=MAX_TURNS,
    )
