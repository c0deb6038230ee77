"""
LLM Service Module

Thin wrapper around the OpenAI async client used by every agent.

Key Features:
- Grounded free-text generation through the Responses API web-search tool
- Schema-constrained JSON generation
- Exponential-backoff retries on rate limits and transient server errors
"""

import re
import json
from typing import Dict, Any, Optional

import openai
from openai import AsyncOpenAI
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ..utils.config import settings, mask_secret
from ..utils.logger import llm_logger as logger

TRANSIENT_MARKERS = (
    "429",
    "503",
    "Too Many Requests",
    "Service Unavailable",
    "overloaded",
    "Resource exhausted",
)

_FENCE_RE = re.compile(r"```(?:json)?\n?|\n?```")


class LLMResponseError(Exception):
    """Raised when the model returns text that is not valid JSON."""

    def __init__(self, message: str, raw_content: Optional[str] = None):
        super().__init__(message)
        self.raw_content = raw_content


def _is_transient(error: BaseException) -> bool:
    """Rate limits, 5xx and connection problems are worth another attempt"""
    if isinstance(error, (
        openai.RateLimitError,
        openai.InternalServerError,
        openai.APIConnectionError,
    )):
        return True
    message = str(error)
    return any(marker in message for marker in TRANSIENT_MARKERS)


def clean_json(text: str) -> str:
    """Strip markdown code fences around a JSON payload"""
    return _FENCE_RE.sub("", text or "").strip()


class LLMService:
    """
    Service for calling OpenAI language models.
    Grounded calls let the model search the web before answering.
    """

    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        model: Optional[str] = None,
        max_retries: Optional[int] = None,
        initial_backoff: Optional[float] = None,
    ):
        if client is None:
            if not settings.OPENAI_API_KEY:
                raise ValueError("OPENAI_API_KEY is required")
            client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY)
            logger.info(f"OpenAI client created with key {mask_secret(settings.OPENAI_API_KEY)}")

        self.client = client
        self.model = model or settings.OPENAI_MODEL
        self.temperature = settings.OPENAI_TEMPERATURE
        self.max_retries = settings.LLM_MAX_RETRIES if max_retries is None else max_retries
        self.initial_backoff = settings.LLM_INITIAL_BACKOFF if initial_backoff is None else initial_backoff

        logger.info(f"LLMService initialized with model: {self.model}")

    async def _with_retry(self, operation, *args, **kwargs):
        """Run an API call, retrying transient failures with exponential backoff"""
        async for attempt in AsyncRetrying(
            retry=retry_if_exception(_is_transient),
            wait=wait_exponential(multiplier=self.initial_backoff, max=60),
            stop=stop_after_attempt(self.max_retries + 1),
            before_sleep=self._log_retry,
            reraise=True,
        ):
            with attempt:
                return await operation(*args, **kwargs)

    def _log_retry(self, retry_state) -> None:
        error = retry_state.outcome.exception()
        delay = retry_state.next_action.sleep if retry_state.next_action else 0
        logger.warning(
            f"LLM API error ({type(error).__name__}). Retrying in {delay:.0f}s "
            f"(Attempt {retry_state.attempt_number}/{self.max_retries})..."
        )

    async def generate_content(self, prompt: str, grounded: bool = True) -> str:
        """
        Generate free text for a prompt.

        Args:
            prompt: Full prompt text
            grounded: Attach the web-search tool so answers cite live sources

        Returns:
            The model's text output
        """
        if grounded:
            return await self._with_retry(self._grounded_text, prompt)
        return await self._with_retry(self._chat_text, prompt)

    async def generate_structured(
        self,
        prompt: str,
        schema: Dict[str, Any],
        name: str = "result",
        grounded: bool = False,
    ) -> Dict[str, Any]:
        """
        Generate a JSON object matching `schema`.

        Raises:
            LLMResponseError: The model output could not be parsed as JSON
        """
        if grounded:
            text = await self._with_retry(self._grounded_structured, prompt, schema, name)
        else:
            text = await self._with_retry(self._chat_structured, prompt, schema, name)
        return self._parse(text)

    async def _grounded_text(self, prompt: str) -> str:
        response = await self.client.responses.create(
            model=self.model,
            input=prompt,
            tools=[{"type": "web_search_preview"}],
        )
        return response.output_text or ""

    async def _chat_text(self, prompt: str) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.temperature,
        )
        return response.choices[0].message.content or ""

    async def _grounded_structured(self, prompt: str, schema: Dict[str, Any], name: str) -> str:
        response = await self.client.responses.create(
            model=self.model,
            input=prompt,
            tools=[{"type": "web_search_preview"}],
            text={"format": {"type": "json_schema", "name": name, "schema": schema, "strict": False}},
        )
        return response.output_text or ""

    async def _chat_structured(self, prompt: str, schema: Dict[str, Any], name: str) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": "Respond only with JSON matching the provided schema."},
                {"role": "user", "content": prompt},
            ],
            temperature=self.temperature,
            response_format={
                "type": "json_schema",
                "json_schema": {"name": name, "schema": schema, "strict": False},
            },
        )
        return response.choices[0].message.content or ""

    def _parse(self, text: str) -> Dict[str, Any]:
        cleaned = clean_json(text)
        try:
            return json.loads(cleaned)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse LLM response as JSON ({len(text)} chars)")
            raise LLMResponseError(f"Failed to parse response: {str(e)}", raw_content=text) from e
