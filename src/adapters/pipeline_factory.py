"""Cableado de adaptadores concretos -> `AnalysisPipeline`.

API (lifespan) y CLI comparten este punto: abre el cliente HTTP de X, el
cliente IA y el almacén de contadores, y los cierra al salir.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx

from adapters.counter_stores import build_counter_store
from adapters.generation_client import GenerationClient
from adapters.http_client import build_x_client
from adapters.x_sources import XDirectory, XTimeline
from core.config import AppSettings
from core.interfaces.providers import CounterStore
from core.services.analysis_pipeline import AnalysisPipeline
from core.services.rate_limiter import RateLimiter


def build_pipeline(
    settings: AppSettings,
    *,
    x_client: httpx.AsyncClient,
    store: CounterStore,
    generator: GenerationClient,
) -> AnalysisPipeline:
    return AnalysisPipeline(
        rate_limiter=RateLimiter.from_settings(store, settings),
        directory=XDirectory(x_client),
        timeline=XTimeline(x_client, max_results=settings.timeline_max_results),
        generator=generator,
    )


@asynccontextmanager
async def open_pipeline(
    settings: AppSettings,
    *,
    store: CounterStore | None = None,
) -> AsyncIterator[AnalysisPipeline]:
    store = store or build_counter_store(settings)
    generator = GenerationClient.from_settings(settings)
    try:
        async with build_x_client(settings) as x_client:
            yield build_pipeline(settings, x_client=x_client, store=store, generator=generator)
    finally:
        await generator.aclose()
        aclose = getattr(store, "aclose", None)
        if aclose is not None:
            await aclose()
