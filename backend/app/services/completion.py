"""
Completion Client — the one place that talks to OpenAI.

WHAT THIS DOES:
Sends (persona, prompt) to the chat completions API and returns the reply
text plus how many tokens it cost.

HOW IT WORKS:
- One AsyncOpenAI client per process, created at startup (see main.py).
  It's safe to share between concurrent requests.
- SDK retries are turned off (max_retries=0). A failed call is reported
  straight away; nothing in this app retries.
- The timeout comes from settings so a slow provider can't hang a request.

ERRORS:
- OpenAI error code "insufficient_quota" → UpstreamQuotaExhausted
  (the account is out of credit: a billing/config problem on our side)
- Any other openai.APIError → UpstreamError with the SDK's message

USAGE:
    client = CompletionClient.from_settings(get_settings())
    completion = await client.complete(system, user, max_tokens=1500, temperature=0.7)
    completion.text         # raw model reply
    completion.token_usage  # total tokens (default 1200 if not reported)
"""

import logging
from dataclasses import dataclass
from typing import Optional

import openai
from openai import AsyncOpenAI

from app.config import Settings
from app.services.errors import UpstreamError, UpstreamQuotaExhausted

logger = logging.getLogger(__name__)

INSUFFICIENT_QUOTA = "insufficient_quota"


@dataclass
class Completion:
    """Raw reply text and the tokens it used."""
    text: str
    token_usage: int


class CompletionClient:
    """Thin wrapper around AsyncOpenAI chat completions."""

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str,
        default_token_usage: int = 1200,
    ):
        self.client = client
        self.model = model
        self.default_token_usage = default_token_usage

    @classmethod
    def from_settings(cls, settings: Settings) -> "CompletionClient":
        client = AsyncOpenAI(
            api_key=settings.openai_api_key,
            timeout=settings.openai_timeout_seconds,
            max_retries=0,
        )
        return cls(client, settings.openai_model, settings.default_token_usage)

    async def complete(
        self,
        system_instruction: str,
        user_text: str,
        max_tokens: int,
        temperature: float,
    ) -> Completion:
        """
        Run one chat completion.

        Args:
            system_instruction: Persona text (system role)
            user_text: The evaluation prompt (user role)
            max_tokens: Cap on generated tokens
            temperature: Sampling temperature

        Returns:
            Completion with the reply text ("" if the model sent nothing)
            and total token usage
        """
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_instruction},
                    {"role": "user", "content": user_text},
                ],
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except openai.APIError as e:
            if getattr(e, "code", None) == INSUFFICIENT_QUOTA:
                logger.error(f"OpenAI quota exhausted: {e}")
                raise UpstreamQuotaExhausted() from e
            logger.error(f"OpenAI call failed: {e}")
            raise UpstreamError(str(e)) from e

        text = ""
        if response.choices:
            text = response.choices[0].message.content or ""

        return Completion(text=text, token_usage=self._usage(response))

    def _usage(self, response) -> int:
        """Total tokens reported by the API, or the default when missing/zero."""
        usage: Optional[object] = getattr(response, "usage", None)
        total = getattr(usage, "total_tokens", None) if usage else None
        return total or self.default_token_usage

    async def close(self) -> None:
        await self.client.close()
