# API schemas
from app.models.schemas import (
    DebateTurnRequest,
    DebateTurnResponse,
    RubricScores,
    ErrorResponse,
    StylesResponse,
)

__all__ = [
    "DebateTurnRequest",
    "DebateTurnResponse",
    "RubricScores",
    "ErrorResponse",
    "StylesResponse",
]
