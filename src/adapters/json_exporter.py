"""Exportación JSON de una respuesta ensamblada.

Por qué JSON:
- Es exactamente el contrato que devuelve la API: lo que se guarda en disco desde
  la CLI es comparable con lo que vería un cliente HTTP.
"""

from __future__ import annotations

import json
from pathlib import Path

from core.services.response_assembler import AssembledResponse


def export_response_json(*, identifier: str, response: AssembledResponse, output_path: Path) -> Path:
    """Exporta `AssembledResponse` a JSON UTF-8 con formato estable."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "username": identifier,
        "status_code": response.status_code,
        "body": response.body,
    }
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path
