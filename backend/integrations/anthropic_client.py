"""Anthropic API client wrapper for single-shot text completions"""

import logging
from typing import Optional

import anthropic

from config import config
from utils.errors import UpstreamProviderError
from utils.retry import RetryPolicy, call_with_retry, default_llm_policy

logger = logging.getLogger(__name__)

# Transient failures worth another attempt when the policy allows more than one
RETRYABLE_ERRORS = (
    anthropic.APIConnectionError,
    anthropic.RateLimitError,
    anthropic.InternalServerError,
)


def create_anthropic_client(api_key: Optional[str] = None) -> Optional[anthropic.Anthropic]:
    """Create Anthropic client with proper configuration"""
    key = api_key or config.ANTHROPIC_API_KEY

    if not key:
        logger.warning("ANTHROPIC_API_KEY not found")
        return None

    return anthropic.Anthropic(api_key=key, max_retries=0)


class LLMClient:
    """
    One system instruction + one user prompt in, one block of text out.

    No streaming, no tool use: structure is imposed by the prompt and
    recovered afterwards by the response extractor.
    """

    def __init__(self, client: Optional[anthropic.Anthropic] = None,
                 model: Optional[str] = None,
                 max_tokens: Optional[int] = None,
                 retry_policy: Optional[RetryPolicy] = None):
        self.client = client or create_anthropic_client()
        self.model = model or config.LLM_MODEL
        self.max_tokens = max_tokens or config.LLM_MAX_TOKENS
        self.retry_policy = retry_policy or default_llm_policy(RETRYABLE_ERRORS)

    def complete(self, system: str, prompt: str, temperature: float) -> str:
        if self.client is None:
            raise UpstreamProviderError("LLM provider is not configured")

        logger.info(f"Calling {self.model} (temperature={temperature}, prompt={len(prompt)} chars)")

        try:
            response = call_with_retry(
                lambda: self.client.messages.create(
                    model=self.model,
                    max_tokens=self.max_tokens,
                    temperature=temperature,
                    system=system,
                    messages=[{"role": "user", "content": prompt}],
                ),
                self.retry_policy,
            )
        except anthropic.APIStatusError as e:
            body = e.response.text if e.response is not None else str(e)
            logger.error(f"LLM request failed ({e.status_code}): {body[:500]}")
            raise UpstreamProviderError(
                f"AI request failed ({e.status_code}): {body}",
                status=e.status_code,
                body=body,
            )
        except anthropic.APIConnectionError as e:
            logger.error(f"LLM provider unreachable: {e}")
            raise UpstreamProviderError(f"AI provider unreachable: {e}")

        text = self._extract_response_text(response)
        logger.info(f"LLM response received ({len(text)} chars)")
        return text

    @staticmethod
    def _extract_response_text(response) -> str:
        """Concatenate the text blocks of a Messages API response."""
        parts = []
        for block in getattr(response, "content", None) or []:
            if getattr(block, "type", None) == "text":
                parts.append(block.text)
        return "".join(parts)
