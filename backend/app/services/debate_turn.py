"""
Debate Turn Handler — one user message in, one evaluated rebuttal out.

WHAT THIS DOES:
Runs a single debate turn end to end. This is the whole backend; the routes
just hand requests to it.

STEPS:
1. Validate: theme, message, style, user_token must be non-empty
2. Daily limit (only when is_new_session): 1 new topic per token per UTC day
3. Token budget: 8000 tokens per (token, day, topic)
4. Pick the persona for the style (unknown → teacher)
5. Build the evaluator prompt
6. Call the model (temperature 0.7, bounded max_tokens)
7. Parse scores / feedback / rebuttal out of the reply (never fails)
8. Add the reported token usage to the topic's counter
9. Return the reply, rebuttal, scores and feedback

Steps 2, 3 and 8 are skipped when the quota store is missing or down.

ERRORS:
DebateError subclasses pass through unchanged. Anything else is logged and
re-raised as UpstreamError carrying the original message, so the route
always has something to report and the process never crashes.

USAGE:
    handler = DebateTurnHandler(completion_client, quota_service, settings)
    response = await handler.handle(DebateTurnRequest(...))
"""

import logging
from dataclasses import dataclass

from app.config import Settings
from app.models.schemas import DebateTurnRequest, DebateTurnResponse, RubricScores
from app.services.completion import CompletionClient
from app.services.errors import DebateError, InvalidRequest, UpstreamError
from app.services.parser import extract_rebuttal, parse_evaluation
from app.services.personas import build_user_prompt, get_persona
from app.services.quota import QuotaService

logger = logging.getLogger(__name__)


@dataclass
class Turn:
    """A validated request: every string is present and non-empty."""
    topic: str
    message: str
    style: str
    session_token: str
    is_new_session: bool


def validate_request(request: DebateTurnRequest) -> Turn:
    """Raise InvalidRequest if any required field is missing or empty."""
    if not (request.theme and request.message and request.style and request.user_token):
        raise InvalidRequest()
    return Turn(
        topic=request.theme,
        message=request.message,
        style=request.style,
        session_token=request.user_token,
        is_new_session=request.is_new_session,
    )


class DebateTurnHandler:
    """Validates, rate-limits, calls the model and parses the result."""

    def __init__(
        self,
        completion_client: CompletionClient,
        quota: QuotaService,
        settings: Settings,
    ):
        self.completion_client = completion_client
        self.quota = quota
        self.max_tokens = settings.openai_max_tokens
        self.temperature = settings.openai_temperature

    async def handle(self, request: DebateTurnRequest) -> DebateTurnResponse:
        try:
            return await self._run(request)
        except DebateError:
            raise
        except Exception as e:
            logger.exception("Debate turn failed unexpectedly")
            raise UpstreamError(str(e)) from e

    async def _run(self, request: DebateTurnRequest) -> DebateTurnResponse:
        turn = validate_request(request)
        day = self.quota.today_key()

        # Quotas (skipped silently when the store is unavailable)
        if turn.is_new_session:
            await self.quota.claim_daily_slot(turn.session_token, day)
        await self.quota.ensure_token_budget(turn.session_token, day, turn.topic)

        system_instruction = get_persona(turn.style)
        user_prompt = build_user_prompt(turn.topic, turn.message)

        logger.info(f"Debate turn: style={turn.style} topic='{turn.topic}'")
        completion = await self.completion_client.complete(
            system_instruction,
            user_prompt,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )

        evaluation = parse_evaluation(completion.text)

        await self.quota.record_usage(
            turn.session_token, day, turn.topic, completion.token_usage
        )
        logger.info(f"Debate turn done: {completion.token_usage} tokens")

        return DebateTurnResponse(
            reply=completion.text,
            rebuttal=extract_rebuttal(completion.text),
            scores=RubricScores.model_validate(evaluation.scores),
            feedback=evaluation.feedback,
        )
