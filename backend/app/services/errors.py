"""
Debate turn errors.

Every failure the debate endpoint can report is one of these exceptions.
Services raise them; main.py turns them into `{"error": message}` responses
with the matching HTTP status. Nothing else in the app knows about status codes.

    InvalidRequest          400  missing theme / message / style / user_token
    DailyLimitExceeded      429  session already started a topic today
    TokenLimitExceeded      429  topic used up its token budget today
    UpstreamQuotaExhausted  500  OpenAI account is out of quota (billing)
    UpstreamError           500  anything else that went wrong

QuotaStoreError is different: it never reaches the caller. The quota service
catches it and carries on without enforcement.
"""


class DebateError(Exception):
    """Base class for errors reported to the caller."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRequest(DebateError):
    status_code = 400
    default_message = "Missing required fields"


class DailyLimitExceeded(DebateError):
    status_code = 429
    default_message = "Usage limit reached for today."


class TokenLimitExceeded(DebateError):
    status_code = 429
    default_message = "Token limit reached for this theme today."


class UpstreamQuotaExhausted(DebateError):
    status_code = 500
    default_message = "OpenAI API quota exceeded. Please check your billing."


class UpstreamError(DebateError):
    status_code = 500


class QuotaStoreError(Exception):
    """The quota store could not be reached or returned garbage."""
