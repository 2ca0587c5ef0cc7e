"""Almacenes de contadores para el rate limiter.

- `InMemoryCounterStore`: un proceso, protegido con `asyncio.Lock`. Default sin
  Redis y el que usan los tests con reloj simulado.
- `RedisCounterStore`: log deslizante en un sorted set, compartido entre
  workers/instancias. Limpieza + alta + conteo van en una transacción MULTI/EXEC.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections import deque
from typing import TYPE_CHECKING

from core.config import AppSettings
from core.interfaces.providers import CounterStore

if TYPE_CHECKING:  # pragma: no cover
    from redis.asyncio import Redis

logger = logging.getLogger(__name__)


class InMemoryCounterStore:
    """Contadores por clave en memoria del proceso.

    Solo guarda claves con marcas dentro de la ventana: las vacías se borran
    al tocarlas y, una vez por ventana, se barren todas las caducadas. La
    clave sale de cabeceras que controla el cliente.
    """

    def __init__(self) -> None:
        self._hits: dict[str, deque[float]] = {}
        self._lock = asyncio.Lock()
        self._next_sweep = 0.0

    def __len__(self) -> int:
        return len(self._hits)

    def _sweep(self, cutoff: float) -> None:
        expired = [key for key, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for key in expired:
            del self._hits[key]

    async def hit(self, key: str, *, now: float, window_seconds: float, limit: int) -> bool:
        async with self._lock:
            cutoff = now - window_seconds
            if now >= self._next_sweep:
                self._sweep(cutoff)
                self._next_sweep = now + window_seconds

            hits = self._hits.get(key)
            if hits is not None:
                while hits and hits[0] <= cutoff:
                    hits.popleft()
                if not hits:
                    del self._hits[key]
                    hits = None

            if hits is not None and len(hits) >= limit:
                return False
            if hits is None:
                hits = self._hits[key] = deque()
            hits.append(now)
            return True

    def clear(self) -> None:
        self._hits.clear()
        self._next_sweep = 0.0


class RedisCounterStore:
    """Ventana deslizante sobre Redis.

    Un intento rechazado no queda registrado: se elimina su marca tras contar.
    Mientras esa marca existe otra request concurrente puede ser rechazada de
    más, nunca admitida de más.
    """

    def __init__(self, client: "Redis") -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisCounterStore":
        from redis.asyncio import Redis

        return cls(Redis.from_url(url))

    async def hit(self, key: str, *, now: float, window_seconds: float, limit: int) -> bool:
        member = f"{now:.6f}:{uuid.uuid4().hex}"
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.zremrangebyscore(key, 0, now - window_seconds)
            pipe.zadd(key, {member: now})
            pipe.zcard(key)
            pipe.expire(key, max(1, int(window_seconds) + 1))
            _, _, count, _ = await pipe.execute()

        if int(count) > limit:
            await self._client.zrem(key, member)
            return False
        return True

    async def ping(self) -> bool:
        return bool(await self._client.ping())

    async def aclose(self) -> None:
        await self._client.aclose()


def build_counter_store(settings: AppSettings) -> CounterStore:
    """Redis si hay `redis_url`; si no, memoria del proceso."""

    if settings.redis_url:
        logger.info("using redis counter store")
        return RedisCounterStore.from_url(settings.redis_url)
    logger.info("no redis_url configured, using in-process counter store")
    return InMemoryCounterStore()
