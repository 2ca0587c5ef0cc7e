"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI ni la API.
- Permite que adaptadores (X, IA, contador) lean config de forma consistente.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "cogsec-checker"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "cogsec-checker"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "cogsec-checker"
    return Path.home() / ".config" / "cogsec-checker"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str], *, env_path: Path | None = None) -> Path:
    """Escribe/actualiza variables en el .env global del usuario."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v})

    lines = ["# CogSec Checker user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para API/CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="COGSEC_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    http_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        description="Timeout por request hacia la API de X (segundos).",
    )
    user_agent: str = Field(
        default="cogsec-checker/0.1",
        min_length=1,
        description="User-Agent para peticiones salientes.",
    )

    x_api_base_url: str = Field(
        default="https://api.x.com",
        min_length=8,
        description="Base URL de la API v2 de X.",
    )
    x_bearer_token: str | None = Field(
        default=None,
        description="Bearer token de la API de X (directorio + timeline).",
    )
    timeline_max_results: int = Field(
        default=10,
        ge=1,
        le=10,
        description="Posts recientes a solicitar por usuario (máximo 10).",
    )

    ai_api_key: str | None = Field(
        default=None,
        description="API key para el proveedor IA (compatible OpenAI).",
    )
    ai_base_url: str = Field(
        default="https://api.openai.com/v1",
        min_length=8,
        description="Base URL compatible OpenAI.",
    )
    ai_model: str = Field(
        default="gpt-4o-mini",
        min_length=1,
        description="Modelo usado para el ranking.",
    )
    ai_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout para llamadas al proveedor IA (segundos).",
    )
    ai_max_attempts: int = Field(
        default=3,
        ge=1,
        le=3,
        description="Intentos máximos contra el proveedor IA (incluye el primero).",
    )
    ai_backoff_step_seconds: float = Field(
        default=0.5,
        ge=0.0,
        le=0.5,
        description="Espera entre intentos: numero_de_intento * este valor.",
    )
    ai_temperature: float = Field(
        default=0.9,
        ge=0.0,
        le=2.0,
        description="Temperatura de muestreo del modelo.",
    )
    ai_max_tokens: int = Field(
        default=400,
        ge=16,
        le=4096,
        description="Tokens máximos de la respuesta.",
    )

    rate_limit_max_calls: int = Field(
        default=1,
        ge=1,
        description="Llamadas admitidas por cliente dentro de la ventana.",
    )
    rate_limit_window_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Tamaño de la ventana deslizante (segundos).",
    )
    redis_url: str | None = Field(
        default=None,
        description="URL de Redis para los contadores; sin valor se usa memoria del proceso.",
    )

    log_level: str = Field(
        default="INFO",
        description="Nivel de logging (DEBUG, INFO, WARNING...).",
    )
    api_host: str = Field(default="127.0.0.1", description="Host para `cogsec serve`.")
    api_port: int = Field(default=8000, ge=1, le=65535, description="Puerto para `cogsec serve`.")
