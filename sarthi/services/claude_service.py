"""
Claude API service wrapper
"""
import json
import logging
from typing import Optional, Dict, Any

from anthropic import (
    AsyncAnthropic,
    APIConnectionError,
    APIError,
    InternalServerError,
    RateLimitError,
)
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from sarthi.config import get_settings
from sarthi.exceptions import AIServiceError, AIServiceUnavailable

settings = get_settings()
logger = logging.getLogger(__name__)

# Transient failures worth another attempt; APITimeoutError subclasses APIConnectionError
RETRYABLE_ERRORS = (APIConnectionError, RateLimitError, InternalServerError)


class ClaudeService:
    def __init__(self, api_key: Optional[str] = None, max_retries: Optional[int] = None):
        api_key = api_key or settings.ANTHROPIC_API_KEY or None
        self.model = settings.CLAUDE_MODEL
        self.max_tokens = settings.CLAUDE_MAX_TOKENS
        self.max_retries = max_retries or settings.AI_MAX_RETRIES
        self.retry_wait = wait_exponential(multiplier=1, min=1, max=10)
        self._available = bool(api_key)
        if self._available:
            self.client = AsyncAnthropic(api_key=api_key)
        else:
            self.client = None

    @property
    def is_available(self) -> bool:
        return self._available

    async def generate_response(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 1.0,
        max_tokens: Optional[int] = None
    ) -> str:
        """
        Generate a response from Claude, retrying transient API failures
        """
        if not self.is_available:
            raise AIServiceUnavailable("AI service not configured: ANTHROPIC_API_KEY is not set")

        messages = [{"role": "user", "content": prompt}]

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_retries),
                wait=self.retry_wait,
                retry=retry_if_exception_type(RETRYABLE_ERRORS),
                before_sleep=before_sleep_log(logger, logging.WARNING),
                reraise=True,
            ):
                with attempt:
                    response = await self.client.messages.create(
                        model=self.model,
                        max_tokens=max_tokens or self.max_tokens,
                        temperature=temperature,
                        system=system_prompt if system_prompt else "",
                        messages=messages
                    )
        except APIError as e:
            logger.error(f"Claude request failed after {self.max_retries} attempts: {e}")
            raise AIServiceError(f"AI service request failed: {e}")

        text = response.content[0].text if response.content else ""
        if not text or not text.strip():
            raise AIServiceError("Empty response from AI service")
        return text

    async def generate_structured_response(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        response_format: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Generate a structured JSON response from Claude
        """
        structured_prompt = f"""{prompt}

IMPORTANT: Respond with ONLY a valid JSON object matching this schema:
{json.dumps(response_format, indent=2)}

Do not include any markdown formatting, code blocks, or explanatory text.
Just return the raw JSON."""

        response_text = await self.generate_response(
            prompt=structured_prompt,
            system_prompt=system_prompt
        )

        # Clean up response (remove markdown if present)
        response_text = response_text.strip()
        if response_text.startswith("```json"):
            response_text = response_text[7:]
        if response_text.endswith("```"):
            response_text = response_text[:-3]
        response_text = response_text.strip()

        try:
            return json.loads(response_text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Failed to parse Claude response as JSON: {e}\n\nResponse: {response_text}")


# Singleton instance
claude_service = ClaudeService()
