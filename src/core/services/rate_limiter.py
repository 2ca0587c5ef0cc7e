"""Control de admisión por cliente (ventana deslizante).

El limitador es el único estado compartido entre requests. Se crea una vez al
arrancar el proceso y se inyecta en el pipeline; el almacenamiento real vive
detrás de `CounterStore` (memoria del proceso o Redis).
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Mapping

from core.config import AppSettings
from core.interfaces.providers import CounterStore

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"


def client_key_from_headers(headers: Mapping[str, str]) -> str:
    """Deriva la clave del cliente a partir de cabeceras de proxy.

    Orden: primer valor de `X-Forwarded-For`, luego `X-Real-IP`, luego "unknown".
    Las cabeceras de Starlette ya son case-insensitive; para dicts usar minúsculas.
    """

    forwarded = headers.get("x-forwarded-for")
    if forwarded and forwarded.strip():
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()
    return UNKNOWN_CLIENT


class RateLimiter:
    """Como máximo `max_calls` por clave dentro de `window_seconds`."""

    def __init__(
        self,
        store: CounterStore,
        *,
        max_calls: int = 1,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.time,
        prefix: str = "cogsec:ratelimit",
    ) -> None:
        if max_calls < 1:
            raise ValueError("max_calls must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")
        self._store = store
        self._max_calls = max_calls
        self._window_seconds = window_seconds
        self._clock = clock
        self._prefix = prefix

    @classmethod
    def from_settings(cls, store: CounterStore, settings: AppSettings) -> "RateLimiter":
        return cls(
            store,
            max_calls=settings.rate_limit_max_calls,
            window_seconds=settings.rate_limit_window_seconds,
        )

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    async def allow(self, client_key: str) -> bool:
        key = f"{self._prefix}:{client_key or UNKNOWN_CLIENT}"
        allowed = await self._store.hit(
            key,
            now=self._clock(),
            window_seconds=self._window_seconds,
            limit=self._max_calls,
        )
        if not allowed:
            logger.info("rate limit hit for client %s", client_key)
        return allowed
