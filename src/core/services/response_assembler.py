"""Mapeo `PipelineOutcome` -> respuesta externa (status + cuerpo JSON).

Sin lógica de negocio: una sola función, un caso por variante.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from core.domain.outcomes import (
    InternalError,
    InvalidInput,
    NothingToAnalyze,
    ParseFailure,
    PipelineOutcome,
    RateLimited,
    Stage,
    SubjectNotFound,
    Success,
    UpstreamFailure,
)
from core.services.validation import INVALID_IDENTIFIER_MESSAGE

RATE_LIMITED_MESSAGE = "Whoa! Too many requests. Did you just try and CogSec us?"
NOTHING_TO_ANALYZE_MESSAGE = "No posts to analyze. Post something first, then get CogSecced."

_UPSTREAM_MESSAGES: dict[Stage, str] = {
    Stage.IDENTITY: "Failed to look up user",
    Stage.CONTENT: "Failed to fetch posts",
    Stage.GENERATION: "Failed to generate a ranking",
}


@dataclass(frozen=True)
class AssembledResponse:
    status_code: int
    body: dict[str, Any] = field(default_factory=dict)


def _upstream_status(status: int | None) -> int:
    if status is not None and 400 <= status <= 599:
        return status
    return 500


def assemble_response(outcome: PipelineOutcome) -> AssembledResponse:
    if isinstance(outcome, Success):
        body: dict[str, Any] = {
            "x": outcome.result.x,
            "y": outcome.result.y,
            "explanation": outcome.result.explanation,
        }
        if outcome.avatar_url:
            body["avatar_url"] = outcome.avatar_url
        return AssembledResponse(200, body)

    if isinstance(outcome, NothingToAnalyze):
        body = {"status": "no_posts", "message": NOTHING_TO_ANALYZE_MESSAGE}
        if outcome.avatar_url:
            body["avatar_url"] = outcome.avatar_url
        return AssembledResponse(200, body)

    if isinstance(outcome, RateLimited):
        return AssembledResponse(429, {"error": RATE_LIMITED_MESSAGE})

    if isinstance(outcome, InvalidInput):
        return AssembledResponse(400, {"error": INVALID_IDENTIFIER_MESSAGE})

    if isinstance(outcome, SubjectNotFound):
        return AssembledResponse(404, {"error": "User not found"})

    if isinstance(outcome, UpstreamFailure):
        body = {"error": _UPSTREAM_MESSAGES[outcome.stage], "stage": outcome.stage.value}
        if outcome.stage is Stage.GENERATION and outcome.rate_limited:
            body["error"] = "The ranking service is busy, try again in a minute"
            return AssembledResponse(429, body)
        return AssembledResponse(_upstream_status(outcome.status), body)

    if isinstance(outcome, ParseFailure):
        return AssembledResponse(500, {"error": "The ranking came back garbled, try again"})

    if isinstance(outcome, InternalError):
        return AssembledResponse(500, {"error": "Internal server error"})

    raise TypeError(f"unknown pipeline outcome: {outcome!r}")
