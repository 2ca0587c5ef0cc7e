"""Configuración de logging.

Un único punto de entrada para API y CLI: `RichHandler` en consola, un logger
por módulo (`logging.getLogger(__name__)`).
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_CONFIGURED = False


def configure_logging(level: str = "INFO") -> None:
    """Instala el handler de Rich en el root logger (idempotente)."""

    global _CONFIGURED
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO

    root = logging.getLogger()
    root.setLevel(resolved)
    if _CONFIGURED:
        return

    # stderr: stdout queda libre para `cogsec analyze --json`.
    handler = RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(handler)

    # httpx registra cada request a nivel INFO; demasiado ruido para nosotros.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    _CONFIGURED = True
