"""Timeline de X: id -> posts recientes.

Endpoint: `GET /2/users/{id}/tweets?max_results=N&tweet.fields=text`.
Un timeline vacío no es un error: devuelve un `ContentBatch` vacío.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from core.domain.models import MAX_BATCH_ITEMS, ContentBatch, ContentItem
from core.domain.outcomes import Stage
from core.errors import UpstreamError

logger = logging.getLogger(__name__)


class XTimeline:
    def __init__(self, client: httpx.AsyncClient, *, max_results: int = MAX_BATCH_ITEMS) -> None:
        self._client = client
        self._max_results = max(1, min(max_results, MAX_BATCH_ITEMS))

    async def fetch_recent(self, subject_id: str) -> ContentBatch:
        # La API exige max_results >= 5; recortamos localmente si pedimos menos.
        try:
            response = await self._client.get(
                f"/2/users/{subject_id}/tweets",
                params={"max_results": max(5, self._max_results), "tweet.fields": "text"},
            )
        except httpx.HTTPError as exc:
            logger.warning("timeline fetch for %s failed: %s", subject_id, exc)
            raise UpstreamError(Stage.CONTENT) from exc

        if not response.is_success:
            logger.warning("timeline fetch for %s returned HTTP %s", subject_id, response.status_code)
            raise UpstreamError(Stage.CONTENT, response.status_code)

        try:
            payload: Any = response.json()
        except ValueError as exc:
            raise UpstreamError(Stage.CONTENT, response.status_code) from exc

        raw_items = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(raw_items, list):
            return ContentBatch()

        items: list[ContentItem] = []
        for raw in raw_items:
            if not isinstance(raw, dict):
                continue
            text = raw.get("text")
            if not isinstance(text, str) or not text.strip():
                continue
            item_id = raw.get("id")
            items.append(ContentItem(text=text, item_id=item_id if isinstance(item_id, str) else None))
            if len(items) >= self._max_results:
                break

        return ContentBatch(items=tuple(items))
