"""
Pydantic schemas for API request/response validation.

These define the shape of data that goes in and out of the API.

FLOW OVERVIEW:
==============
1. Client sends DebateTurnRequest to POST /api/debate
2. Handler checks quotas, calls the model, parses its reply
3. Client gets back DebateTurnResponse (or ErrorResponse)
4. GET /api/styles tells the client which personas exist
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# DEBATE TURN
# =============================================================================
#
# WHEN USED:
# - DebateTurnRequest: every message the user sends in a debate
# - RubricScores: five 1-5 scores, serialised under their display names
# - DebateTurnResponse: the model's reply + evaluation for that message
#

class DebateTurnRequest(BaseModel):
    """
    Request body for POST /api/debate.

    The string fields are Optional on purpose: a missing field is reported
    by the handler as "Missing required fields" (400), same as an empty one,
    rather than as a framework validation error.

    Example:
        {"theme": "Remote work", "message": "It boosts productivity",
         "style": "devil", "user_token": "guest_abc", "is_new_session": true}
    """
    theme: Optional[str] = Field(default=None, description="Debate topic")
    message: Optional[str] = Field(default=None, description="The user's argument")
    style: Optional[str] = Field(
        default=None,
        description="Opponent persona: kind, teacher or devil (unknown values act as teacher)",
    )
    user_token: Optional[str] = Field(
        default=None,
        description="Opaque per-browser session token, used only for quotas",
    )
    is_new_session: bool = Field(
        default=False,
        description="True on the first turn of a topic; counts against the daily limit",
    )


class RubricScores(BaseModel):
    """The five rubric categories, each scored 1-5."""

    model_config = ConfigDict(populate_by_name=True)

    logical_consistency: int = Field(default=1, ge=1, le=5, alias="Logical Consistency")
    persuasiveness: int = Field(default=1, ge=1, le=5, alias="Persuasiveness")
    factual_accuracy: int = Field(default=1, ge=1, le=5, alias="Factual Accuracy")
    structural_coherence: int = Field(default=1, ge=1, le=5, alias="Structural Coherence")
    rebuttal_resilience: int = Field(default=1, ge=1, le=5, alias="Rebuttal Resilience")


class DebateTurnResponse(BaseModel):
    """
    Response body for a successful turn.

    `reply` is the model's raw text, unparsed. `rebuttal` is just the
    RESPONSE: part of it, for clients that don't want to parse it themselves.
    """
    reply: str
    rebuttal: str
    scores: RubricScores
    feedback: str


class ErrorResponse(BaseModel):
    """Body of every non-200 response."""
    error: str


# =============================================================================
# STYLE CATALOGUE
# =============================================================================

class StyleInfo(BaseModel):
    style: str
    label: str


class StylesResponse(BaseModel):
    """Response body for GET /api/styles."""
    styles: list[StyleInfo]
    default_style: str
    max_turns: int = Field(description="Turns per debate session (enforced by the client)")
