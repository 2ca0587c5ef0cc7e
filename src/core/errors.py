"""Errores tipados del pipeline.

Cada etapa levanta uno de estos errores cuando corta el flujo; el pipeline los
traduce a su variante de `PipelineOutcome` en un único punto.
"""

from __future__ import annotations

from core.domain.outcomes import (
    InvalidInput,
    ParseFailure,
    PipelineOutcome,
    RateLimited,
    Stage,
    SubjectNotFound,
    UpstreamFailure,
)


class PipelineError(Exception):
    """Base: un error que termina la request con un resultado conocido."""

    def to_outcome(self) -> PipelineOutcome:  # pragma: no cover - abstracto
        raise NotImplementedError


class RateLimitExceededError(PipelineError):
    def __init__(self, client_key: str) -> None:
        super().__init__(f"rate limit exceeded for {client_key!r}")
        self.client_key = client_key

    def to_outcome(self) -> PipelineOutcome:
        return RateLimited(client_key=self.client_key)


class InvalidIdentifierError(PipelineError):
    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason

    def to_outcome(self) -> PipelineOutcome:
        return InvalidInput(reason=self.reason)


class SubjectNotFoundError(PipelineError):
    def __init__(self, identifier: str) -> None:
        super().__init__(f"subject not found: {identifier}")
        self.identifier = identifier

    def to_outcome(self) -> PipelineOutcome:
        return SubjectNotFound(identifier=self.identifier)


class UpstreamError(PipelineError):
    def __init__(self, stage: Stage, status: int | None = None, *, rate_limited: bool = False) -> None:
        super().__init__(f"{stage.value} upstream failed (status={status})")
        self.stage = stage
        self.status = status
        self.rate_limited = rate_limited

    def to_outcome(self) -> PipelineOutcome:
        return UpstreamFailure(stage=self.stage, status=self.status, rate_limited=self.rate_limited)


class OutputParseError(PipelineError):
    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason

    def to_outcome(self) -> PipelineOutcome:
        return ParseFailure(reason=self.reason)
