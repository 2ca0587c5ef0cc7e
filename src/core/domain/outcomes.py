"""Resultado terminal de una request (variante etiquetada).

Cada request produce exactamente una de estas variantes; el ensamblador de
respuestas es el único consumidor.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from core.domain.models import AnalysisResult


class Stage(str, Enum):
    """Etapa upstream que falló."""

    IDENTITY = "identity"
    CONTENT = "content"
    GENERATION = "generation"


@dataclass(frozen=True)
class Success:
    result: AnalysisResult
    avatar_url: str | None = None


@dataclass(frozen=True)
class NothingToAnalyze:
    """El usuario existe pero no tiene posts: no hay ranking que mostrar."""

    avatar_url: str | None = None


@dataclass(frozen=True)
class RateLimited:
    client_key: str = "unknown"


@dataclass(frozen=True)
class InvalidInput:
    reason: str = "invalid_identifier"


@dataclass(frozen=True)
class SubjectNotFound:
    identifier: str


@dataclass(frozen=True)
class UpstreamFailure:
    stage: Stage
    status: int | None = None
    # Solo aplica a generación: el proveedor IA nos limitó (429) en algún intento.
    rate_limited: bool = False


@dataclass(frozen=True)
class ParseFailure:
    reason: str


@dataclass(frozen=True)
class InternalError:
    detail: str = "internal_error"


PipelineOutcome = Union[
    Success,
    NothingToAnalyze,
    RateLimited,
    InvalidInput,
    SubjectNotFound,
    UpstreamFailure,
    ParseFailure,
    InternalError,
]
