"""Fuentes de X (API v2).

Por qué un paquete:
- Agrupa los dos colaboradores de X que usa el pipeline: directorio (handle -> id)
  y timeline (id -> posts recientes).
- Cada módulo implementa un contrato de `core.interfaces.providers`.
"""

from adapters.x_sources.directory import XDirectory, upscale_avatar_url
from adapters.x_sources.timeline import XTimeline

__all__ = [
	"XDirectory",
	"XTimeline",
	"upscale_avatar_url",
]
