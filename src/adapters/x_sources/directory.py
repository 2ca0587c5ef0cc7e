"""Directorio de X: handle -> id opaco + avatar.

Endpoint: `GET /2/users/by/username/{handle}?user.fields=profile_image_url`.

Nota:
- X a veces responde 200 con un bloque `errors` y sin `data` para usuarios que
  no existen o están suspendidos; eso también cuenta como "no encontrado".
"""

from __future__ import annotations

import logging
import re
from typing import Any

import httpx

from core.domain.models import ResolvedSubject
from core.domain.outcomes import Stage
from core.errors import SubjectNotFoundError, UpstreamError

logger = logging.getLogger(__name__)

_NOT_FOUND_STATUSES = frozenset({404, 410})
_SMALL_AVATAR_RE = re.compile(r"_normal(\.[A-Za-z0-9]+)?$")


def upscale_avatar_url(url: str | None) -> str | None:
    """Reescribe `..._normal.jpg` a `..._400x400.jpg` (mayor resolución de X)."""

    if not url:
        return None
    return _SMALL_AVATAR_RE.sub(lambda m: "_400x400" + (m.group(1) or ""), url)


class XDirectory:
    """Resuelve handles validados contra la API v2 de X."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def lookup(self, handle: str) -> ResolvedSubject:
        try:
            response = await self._client.get(
                f"/2/users/by/username/{handle}",
                params={"user.fields": "profile_image_url"},
            )
        except httpx.HTTPError as exc:
            logger.warning("directory lookup for %s failed: %s", handle, exc)
            raise UpstreamError(Stage.IDENTITY) from exc

        status = response.status_code
        if status in _NOT_FOUND_STATUSES:
            raise SubjectNotFoundError(handle)
        if not response.is_success:
            logger.warning("directory lookup for %s returned HTTP %s", handle, status)
            raise UpstreamError(Stage.IDENTITY, status)

        try:
            payload: Any = response.json()
        except ValueError as exc:
            raise UpstreamError(Stage.IDENTITY, status) from exc

        data = payload.get("data") if isinstance(payload, dict) else None
        subject_id = data.get("id") if isinstance(data, dict) else None
        if not isinstance(subject_id, str) or not subject_id:
            raise SubjectNotFoundError(handle)

        avatar = data.get("profile_image_url")
        return ResolvedSubject(
            subject_id=subject_id,
            handle=handle,
            avatar_url=upscale_avatar_url(avatar if isinstance(avatar, str) else None),
        )
