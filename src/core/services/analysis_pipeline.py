"""Orquestación por request: handle -> ranking validado.

Flujo lineal: rate limiter -> validación -> directorio -> timeline -> prompt ->
generación -> parseo. Cada etapa devuelve su valor o levanta un
`PipelineError`; aquí se traducen a `PipelineOutcome` en un único punto, así
que el llamador (API/CLI) siempre recibe exactamente una variante.

Las llamadas upstream son secuenciales dentro de una request. Si la request se
cancela, `asyncio.CancelledError` atraviesa el pipeline sin tocarlo.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from core.domain.models import ContentBatch, RequestContext
from core.domain.outcomes import (
    InternalError,
    NothingToAnalyze,
    PipelineOutcome,
    Stage,
    Success,
)
from core.errors import OutputParseError, PipelineError, RateLimitExceededError, UpstreamError
from core.interfaces.providers import DirectoryProvider, TextGenerator, TimelineProvider
from core.services.output_parser import parse_analysis
from core.services.prompt_builder import build_prompts
from core.services.rate_limiter import RateLimiter
from core.services.validation import DEMO_CONTENT, is_demo_identifier, validate_identifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PostsListing:
    """Resultado de `list_posts`: handle validado + lote recuperado."""

    identifier: str
    batch: ContentBatch
    avatar_url: str | None = None


class AnalysisPipeline:
    def __init__(
        self,
        *,
        rate_limiter: RateLimiter,
        directory: DirectoryProvider,
        timeline: TimelineProvider,
        generator: TextGenerator,
    ) -> None:
        self._rate_limiter = rate_limiter
        self._directory = directory
        self._timeline = timeline
        self._generator = generator

    async def run(self, context: RequestContext) -> PipelineOutcome:
        """Ejecuta el pipeline completo. Nunca levanta salvo cancelación."""

        try:
            return await self._run(context)
        except PipelineError as exc:
            outcome = exc.to_outcome()
            logger.info("request for %r ended with %s", context.raw_identifier, type(outcome).__name__)
            return outcome
        except Exception:
            logger.exception("unexpected error analysing %r", context.raw_identifier)
            return InternalError()

    async def _admit(self, context: RequestContext) -> None:
        if not await self._rate_limiter.allow(context.client_key):
            raise RateLimitExceededError(context.client_key)

    async def _collect(self, identifier: str) -> PostsListing:
        if is_demo_identifier(identifier):
            logger.info("demo identifier, skipping X lookups")
            return PostsListing(identifier=identifier, batch=DEMO_CONTENT)

        subject = await self._directory.lookup(identifier)
        batch = await self._timeline.fetch_recent(subject.subject_id)
        return PostsListing(identifier=identifier, batch=batch, avatar_url=subject.avatar_url)

    async def _run(self, context: RequestContext) -> PipelineOutcome:
        await self._admit(context)
        identifier = validate_identifier(context.raw_identifier)

        listing = await self._collect(identifier)
        if listing.batch.is_empty():
            return NothingToAnalyze(avatar_url=listing.avatar_url)

        prompts = build_prompts(listing.batch, identifier)
        trial = await self._generator.generate(system_prompt=prompts.system, user_prompt=prompts.user)
        if not trial.succeeded:
            raise UpstreamError(Stage.GENERATION, trial.last_status, rate_limited=trial.rate_limited)

        if not trial.body:
            raise OutputParseError("empty_completion")
        result = parse_analysis(trial.body)
        return Success(result=result, avatar_url=listing.avatar_url)

    async def list_posts(self, context: RequestContext) -> PostsListing | PipelineOutcome:
        """Solo admisión + validación + X: la vista de posts sin ranking."""

        try:
            await self._admit(context)
            identifier = validate_identifier(context.raw_identifier)
            return await self._collect(identifier)
        except PipelineError as exc:
            return exc.to_outcome()
        except Exception:
            logger.exception("unexpected error listing posts for %r", context.raw_identifier)
            return InternalError()
