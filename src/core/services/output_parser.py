"""Parseo estricto de la respuesta libre del modelo.

El proveedor IA no es de fiar: puede cambiar mayúsculas, meter espacios, añadir
texto antes del formato o directamente ignorarlo. Todo lo que no encaje con la
gramática `x:` / `y:` / `Explanation:` termina en `OutputParseError`; nunca en
otra excepción.
"""

from __future__ import annotations

import logging
import re

from pydantic import ValidationError

from core.domain.models import SCORE_MAX, SCORE_MIN, AnalysisResult
from core.errors import OutputParseError

logger = logging.getLogger(__name__)

_GRAMMAR_RE = re.compile(
    r"^[ \t]*x[ \t]*:[ \t]*(?P<x>[^\n]*?)[ \t]*\r?\n"
    r"\s*y[ \t]*:[ \t]*(?P<y>[^\n]*?)[ \t]*\r?\n"
    r"\s*explanation[ \t]*:(?P<explanation>.*)\Z",
    re.IGNORECASE | re.DOTALL | re.MULTILINE,
)
# Solo dígitos ASCII: `\d` aceptaría también "٥" o "５".
_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def _parse_score(raw: str, label: str) -> int:
    token = raw.strip()
    if not _INTEGER_RE.fullmatch(token):
        raise OutputParseError(f"{label}_not_an_integer")
    value = int(token)
    if not SCORE_MIN <= value <= SCORE_MAX:
        raise OutputParseError(f"{label}_out_of_range")
    return value


def parse_analysis(text: str | None) -> AnalysisResult:
    """Convierte la respuesta del modelo en un `AnalysisResult` validado."""

    body = (text or "").strip()
    if not body:
        raise OutputParseError("empty_completion")

    match = _GRAMMAR_RE.search(body)
    if match is None:
        logger.warning("model output does not match grammar: %r", body[:200])
        raise OutputParseError("grammar_mismatch")

    x = _parse_score(match.group("x"), "x")
    y = _parse_score(match.group("y"), "y")
    explanation = match.group("explanation").strip()
    if not explanation:
        raise OutputParseError("empty_explanation")

    try:
        return AnalysisResult(x=x, y=y, explanation=explanation)
    except ValidationError as exc:  # pragma: no cover - las cotas ya se comprobaron arriba
        raise OutputParseError("invalid_result") from exc
