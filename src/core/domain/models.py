"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O.
- Las cotas del ranking viven en el propio modelo: un `AnalysisResult` fuera de
  rango no se puede construir.

Nota:
- Estos modelos describen *qué* es la información, no *cómo* se obtiene.
- Ninguno sobrevive a la request que lo creó.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

SCORE_MIN = -10
SCORE_MAX = 10
MAX_BATCH_ITEMS = 10
MAX_GENERATION_ATTEMPTS = 3


class RequestContext(BaseModel):
    """Datos de entrada de una request: quién llama y qué handle pide."""

    model_config = ConfigDict(frozen=True)

    client_key: str = Field(
        default="unknown",
        min_length=1,
        description="Identidad de red del cliente (clave del rate limiter).",
    )
    raw_identifier: str = Field(
        default="",
        description="Handle tal y como lo envió el usuario (sin validar).",
    )


class ResolvedSubject(BaseModel):
    """Resultado del directorio: id opaco + avatar opcional."""

    model_config = ConfigDict(frozen=True)

    subject_id: str = Field(
        ...,
        min_length=1,
        description="Identificador interno opaco del proveedor.",
    )
    handle: str = Field(
        ...,
        min_length=1,
        max_length=15,
        description="Handle validado a partir del cual se resolvió.",
    )
    avatar_url: str | None = Field(
        default=None,
        description="URL de avatar en la mayor resolución disponible.",
    )


class ContentItem(BaseModel):
    """Un post recuperado del timeline."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(..., description="Cuerpo de texto del post.")
    item_id: str | None = Field(
        default=None,
        description="Id del post en el proveedor (si lo trae).",
    )


class ContentBatch(BaseModel):
    """Secuencia ordenada (orden del proveedor) de hasta 10 posts."""

    model_config = ConfigDict(frozen=True)

    items: tuple[ContentItem, ...] = Field(
        default_factory=tuple,
        max_length=MAX_BATCH_ITEMS,
        description="Posts en el orden devuelto por el proveedor.",
    )

    @classmethod
    def from_texts(cls, texts: list[str]) -> "ContentBatch":
        return cls(items=tuple(ContentItem(text=t) for t in texts))

    def is_empty(self) -> bool:
        return not self.items

    def __len__(self) -> int:
        return len(self.items)


class AnalysisResult(BaseModel):
    """Ranking final: dos enteros acotados + explicación libre."""

    model_config = ConfigDict(frozen=True)

    x: int = Field(..., ge=SCORE_MIN, le=SCORE_MAX, description="Eje X del ranking.")
    y: int = Field(..., ge=SCORE_MIN, le=SCORE_MAX, description="Eje Y del ranking.")
    explanation: str = Field(
        ...,
        min_length=1,
        description="Explicación/roast generado por el modelo.",
    )


class AttemptOutcome(str, Enum):
    SUCCESS = "success"
    RETRYABLE = "retryable"
    TERMINAL = "terminal"


class GenerationAttempt(BaseModel):
    """Registro de un intento contra el proveedor IA.

    Fallos de red y respuestas no-ok comparten forma: solo cambia `status_code`
    (None cuando no hubo respuesta HTTP).
    """

    model_config = ConfigDict(frozen=True)

    number: int = Field(..., ge=1)
    outcome: AttemptOutcome
    status_code: int | None = None
    body: str | None = None
    error: str | None = None


class GenerationTrial(BaseModel):
    """Secuencia de intentos (como máximo 3) de una misma request."""

    model_config = ConfigDict(frozen=True)

    attempts: tuple[GenerationAttempt, ...] = Field(
        default_factory=tuple,
        max_length=MAX_GENERATION_ATTEMPTS,
        description="Intentos en orden; el último decide el resultado.",
    )

    @property
    def succeeded(self) -> bool:
        return bool(self.attempts) and self.attempts[-1].outcome is AttemptOutcome.SUCCESS

    @property
    def body(self) -> str | None:
        if not self.succeeded:
            return None
        return self.attempts[-1].body

    @property
    def last_status(self) -> int | None:
        if not self.attempts:
            return None
        return self.attempts[-1].status_code

    @property
    def rate_limited(self) -> bool:
        """True si *cualquier* intento recibió 429 (el primer 429 manda)."""

        return any(a.status_code == 429 for a in self.attempts)
