"""API HTTP (FastAPI).

Capa fina: traduce la request HTTP a `RequestContext`, ejecuta el pipeline y
mapea el resultado con `assemble_response`. Toda la lógica vive en el Core.

Recursos compartidos (cliente HTTP de X, cliente IA, rate limiter) se crean una
vez en el lifespan y se cuelgan de `app.state`.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, TypeVar

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse, Response

from adapters.pipeline_factory import open_pipeline
from core.config import AppSettings
from core.domain.models import RequestContext
from core.domain.outcomes import InternalError
from core.logging_config import configure_logging
from core.services.analysis_pipeline import AnalysisPipeline, PostsListing
from core.services.rate_limiter import client_key_from_headers
from core.services.response_assembler import assemble_response

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Status no estándar (nginx) para "el cliente se fue antes de la respuesta".
CLIENT_CLOSED_REQUEST = 499


class ClientDisconnected(Exception):
    pass


async def run_until_disconnect(request: Request, work: Awaitable[T], *, poll_interval: float = 0.25) -> T:
    """Ejecuta `work` y lo cancela si el cliente cierra la conexión.

    La cancelación se propaga a las llamadas upstream en vuelo y a las esperas
    entre reintentos del cliente IA.
    """

    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_interval)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.info("client disconnected, cancelling pipeline")
                raise ClientDisconnected()
    finally:
        if not task.done():
            task.cancel()


def get_pipeline(request: Request) -> AnalysisPipeline:
    return request.app.state.pipeline


def _request_context(request: Request, username: str | None) -> RequestContext:
    return RequestContext(
        client_key=client_key_from_headers(request.headers),
        raw_identifier=username or "",
    )


def create_app(
    settings: AppSettings | None = None,
    *,
    pipeline: AnalysisPipeline | None = None,
) -> FastAPI:
    """Factory de la app. Con `pipeline` inyectado no se crean recursos externos."""

    settings = settings or AppSettings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(settings.log_level)
        if pipeline is not None:
            app.state.pipeline = pipeline
            yield
            return

        async with open_pipeline(settings) as built:
            app.state.pipeline = built
            yield

    app = FastAPI(title="CogSec Checker", version="0.1.0", lifespan=lifespan)

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled error on %s", request.url.path)
        response = assemble_response(InternalError())
        return JSONResponse(status_code=response.status_code, content=response.body)

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/analyze")
    async def analyze(
        request: Request,
        username: str | None = Query(default=None),
        service: AnalysisPipeline = Depends(get_pipeline),
    ) -> Response:
        context = _request_context(request, username)
        try:
            outcome = await run_until_disconnect(request, service.run(context))
        except ClientDisconnected:
            return Response(status_code=CLIENT_CLOSED_REQUEST)

        response = assemble_response(outcome)
        return JSONResponse(status_code=response.status_code, content=response.body)

    @app.get("/api/x-user-posts")
    async def x_user_posts(
        request: Request,
        username: str | None = Query(default=None),
        service: AnalysisPipeline = Depends(get_pipeline),
    ) -> Response:
        context = _request_context(request, username)
        try:
            result = await run_until_disconnect(request, service.list_posts(context))
        except ClientDisconnected:
            return Response(status_code=CLIENT_CLOSED_REQUEST)

        if isinstance(result, PostsListing):
            posts = [{"id": item.item_id, "text": item.text} for item in result.batch.items]
            return JSONResponse(status_code=200, content={"posts": posts})

        response = assemble_response(result)
        return JSONResponse(status_code=response.status_code, content=response.body)

    return app
