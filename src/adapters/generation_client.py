"""Adaptador para el proveedor IA (SDK OpenAI compatible).

Responsabilidad:
- Llamar a chat completions con el par de prompts (system/user).
- Reintentar fallos transitorios con espera lineal (`intento * 0.5s`).
- Devolver un `GenerationTrial` con todos los intentos; la interpretación
  (éxito, fallo upstream, 429) la hace el pipeline.

Política:
- Red/timeout, 5xx y 429 -> reintentable.
- Cualquier otro 4xx -> terminal, sin más intentos.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

import httpx
from openai import APIConnectionError, APIStatusError, AsyncOpenAI

from core.config import AppSettings
from core.domain.models import MAX_GENERATION_ATTEMPTS, AttemptOutcome, GenerationAttempt, GenerationTrial

logger = logging.getLogger(__name__)

Sleeper = Callable[[float], Awaitable[Any]]


def build_openai_client(
    settings: AppSettings,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> AsyncOpenAI:
    # Los reintentos los gestionamos nosotros: el SDK no debe reintentar por su cuenta.
    return AsyncOpenAI(
        api_key=(settings.ai_api_key or "").strip() or "missing",
        base_url=settings.ai_base_url,
        timeout=settings.ai_timeout_seconds,
        max_retries=0,
        http_client=http_client,
    )


def is_retryable_status(status: int | None) -> bool:
    if status is None:
        return True
    return status == 429 or status >= 500


def _first_choice_text(response: Any) -> str:
    choices = getattr(response, "choices", None) or []
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    return content if isinstance(content, str) else ""


class GenerationClient:
    """Cliente con reintentos acotados sobre `AsyncOpenAI`."""

    def __init__(
        self,
        client: AsyncOpenAI,
        *,
        model: str,
        max_attempts: int = 3,
        backoff_step_seconds: float = 0.5,
        temperature: float = 0.9,
        max_tokens: int = 400,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self._client = client
        self._model = model
        self._max_attempts = max(1, min(max_attempts, MAX_GENERATION_ATTEMPTS))
        self._backoff_step_seconds = backoff_step_seconds
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls,
        settings: AppSettings,
        *,
        http_client: httpx.AsyncClient | None = None,
        sleep: Sleeper = asyncio.sleep,
    ) -> "GenerationClient":
        return cls(
            build_openai_client(settings, http_client=http_client),
            model=settings.ai_model,
            max_attempts=settings.ai_max_attempts,
            backoff_step_seconds=settings.ai_backoff_step_seconds,
            temperature=settings.ai_temperature,
            max_tokens=settings.ai_max_tokens,
            sleep=sleep,
        )

    async def _attempt(self, number: int, messages: list[dict[str, str]]) -> GenerationAttempt:
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=messages,  # type: ignore[arg-type]
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
        except APIStatusError as exc:
            status = exc.status_code
            outcome = AttemptOutcome.RETRYABLE if is_retryable_status(status) else AttemptOutcome.TERMINAL
            return GenerationAttempt(number=number, outcome=outcome, status_code=status, error=type(exc).__name__)
        except APIConnectionError as exc:
            # Incluye APITimeoutError: no hubo respuesta HTTP.
            return GenerationAttempt(number=number, outcome=AttemptOutcome.RETRYABLE, error=type(exc).__name__)

        return GenerationAttempt(
            number=number,
            outcome=AttemptOutcome.SUCCESS,
            status_code=200,
            body=_first_choice_text(response),
        )

    async def aclose(self) -> None:
        await self._client.close()

    async def generate(self, *, system_prompt: str, user_prompt: str) -> GenerationTrial:
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        attempts: list[GenerationAttempt] = []

        for number in range(1, self._max_attempts + 1):
            attempt = await self._attempt(number, messages)
            attempts.append(attempt)
            logger.info(
                "generation attempt %d/%d: %s (status=%s)",
                number,
                self._max_attempts,
                attempt.outcome.value,
                attempt.status_code,
            )

            if attempt.outcome is not AttemptOutcome.RETRYABLE:
                break
            if number >= self._max_attempts:
                break

            delay = number * self._backoff_step_seconds
            logger.info("retrying generation in %.1fs", delay)
            await self._sleep(delay)

        return GenerationTrial(attempts=tuple(attempts))
