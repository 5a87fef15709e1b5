"""
OpenAI client wrapper for the Idea Advisor service.

Two call shapes are used by the pipeline:
- plain chat completions returning text (delegated similarity ranking,
  which parses the model's JSON itself)
- structured chat completions parsed into a Pydantic model (ingestion)

Transport failures (connection errors, timeouts, rate limits) are retried
with exponential backoff; anything still failing is raised as OpenAIError.
"""

import os
from typing import Any, Awaitable, Callable, TypeVar

from openai import APIConnectionError, APITimeoutError, AsyncOpenAI, RateLimitError
from pydantic import BaseModel
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..errors import wrap_openai_error

T = TypeVar('T', bound=BaseModel)

RETRYABLE_ERRORS = (APIConnectionError, APITimeoutError, RateLimitError)

DEFAULT_CHAT_MODEL = 'gpt-4o-mini'


class OpenAIClient:
    """
    Async chat client with retries.

    Settings fall back to OPENAI_API_KEY, OPENAI_CHAT_MODEL,
    OPENAI_TEMPERATURE and OPENAI_MAX_ATTEMPTS. A missing key is a
    construction error, so callers decide up front whether delegated
    scoring is available.
    """

    def __init__(
        self,
        api_key: str | None = None,
        chat_model: str | None = None,
        temperature: float | None = None,
        max_attempts: int | None = None,
    ):
        self.api_key = (api_key or os.getenv('OPENAI_API_KEY') or '').strip()
        if not self.api_key:
            raise ValueError('OPENAI_API_KEY environment variable is required')

        self.chat_model = chat_model or os.getenv('OPENAI_CHAT_MODEL', DEFAULT_CHAT_MODEL)
        if temperature is None:
            temperature = float(os.getenv('OPENAI_TEMPERATURE', '0.3'))
        self.temperature = temperature
        self.max_attempts = max_attempts or int(os.getenv('OPENAI_MAX_ATTEMPTS', '3'))

        self._client = AsyncOpenAI(api_key=self.api_key)

    async def _request(self, call: Callable[..., Awaitable[Any]], **kwargs: Any) -> Any:
        """Run one SDK call under the retry policy, wrapping the final failure."""
        model = kwargs.get('model') or self.chat_model
        kwargs['model'] = model
        if kwargs.get('temperature') is None:
            kwargs['temperature'] = self.temperature

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    return await call(**kwargs)
        except Exception as e:
            raise wrap_openai_error(e, context={'model': model}) from e

    async def chat_completion(
        self,
        messages: list[dict[str, str]],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """
        Return the assistant's reply text ('' when the model sends none).

        Raises:
            OpenAIError: If the request still fails after retries
        """
        response = await self._request(
            self._client.chat.completions.create,
            messages=messages,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        return response.choices[0].message.content or ''

    async def chat_completion_structured(
        self,
        messages: list[dict[str, str]],
        response_model: type[T],
        model: str | None = None,
        temperature: float | None = None,
    ) -> T:
        """
        Return the reply parsed into ``response_model`` via native structured output.

        Raises:
            OpenAIError: If the request still fails after retries
            ValueError: If the model returned nothing parseable
        """
        response = await self._request(
            self._client.beta.chat.completions.parse,
            messages=messages,
            response_format=response_model,
            model=model,
            temperature=temperature,
        )
        parsed = response.choices[0].message.parsed
        if parsed is None:
            raise ValueError('Failed to parse structured response')
        return parsed

    async def health_check(self) -> dict[str, bool | str]:
        try:
            await self._client.models.retrieve(self.chat_model)
        except Exception as e:
            return {'healthy': False, 'error': str(e)}
        return {'healthy': True, 'chat_model': self.chat_model}

    async def close(self) -> None:
        await self._client.close()
