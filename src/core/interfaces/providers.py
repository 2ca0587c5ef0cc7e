"""Contratos de los colaboradores externos del pipeline.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- Permite que adaptadores (X API, OpenAI, Redis) sean intercambiables
  y testeables sin acoplar el Core a implementaciones concretas.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import ContentBatch, GenerationTrial, ResolvedSubject


@runtime_checkable
class CounterStore(Protocol):
    """Almacén de marcas de tiempo por clave (ventana deslizante).

    Reglas de diseño:
    - `hit` debe ser atómico respecto de otras llamadas con la misma clave
      (o, como mucho, dejar pasar una llamada extra por ventana).
    """

    async def hit(self, key: str, *, now: float, window_seconds: float, limit: int) -> bool:
        """Registra un intento en `now` y devuelve True si queda dentro del límite."""

        ...


@runtime_checkable
class DirectoryProvider(Protocol):
    async def lookup(self, handle: str) -> ResolvedSubject:
        """Resuelve un handle validado a su id opaco (+ avatar)."""

        ...


@runtime_checkable
class TimelineProvider(Protocol):
    async def fetch_recent(self, subject_id: str) -> ContentBatch:
        """Devuelve los posts más recientes (como máximo 10), en orden del proveedor."""

        ...


@runtime_checkable
class TextGenerator(Protocol):
    async def generate(self, *, system_prompt: str, user_prompt: str) -> GenerationTrial:
        """Llama al proveedor IA con reintentos acotados."""

        ...
