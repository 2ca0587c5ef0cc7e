"""Validación sintáctica del handle antes de cualquier llamada de red.

Handle demo
-----------
`DEMO_IDENTIFIER` ("test123") es un valor reservado: salta el directorio y el
timeline de X y usa `DEMO_CONTENT` como lote fijo. Sirve para ejercitar prompt,
generación, parseo y respuesta sin gastar cuota de la API de X. La comparación
es exacta (sensible a mayúsculas), así que "Test123" sigue el camino normal.
"""

from __future__ import annotations

import re

from core.domain.models import ContentBatch
from core.errors import InvalidIdentifierError

IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9_]{1,15}$")

DEMO_IDENTIFIER = "test123"

DEMO_CONTENT = ContentBatch.from_texts(
    [
        "Just read a thread that changed my whole worldview. Sharing before I finish it.",
        "If the algorithm shows it to me, it must be important, right?",
        "Reminder: always check the source. Unless it agrees with me.",
        "New study proves everything I already believed. Science is amazing.",
        "Unpopular opinion: I have never been wrong about anything on this app.",
    ]
)

INVALID_IDENTIFIER_MESSAGE = (
    "Invalid username. Usernames must be 1-15 characters, letters, numbers, or underscores."
)


def validate_identifier(raw: str | None) -> str:
    """Devuelve el handle recortado o levanta `InvalidIdentifierError`."""

    value = (raw or "").strip()
    if not value:
        raise InvalidIdentifierError("empty_identifier")
    if len(value) > 15:
        raise InvalidIdentifierError("identifier_too_long")
    if not IDENTIFIER_RE.fullmatch(value):
        raise InvalidIdentifierError("identifier_has_invalid_characters")
    return value


def is_demo_identifier(identifier: str) -> bool:
    return identifier == DEMO_IDENTIFIER
