"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.counter_stores import RedisCounterStore
from adapters.http_client import build_x_client
from core.config import AppSettings, write_user_env_vars

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_x_api(settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_x_client(settings) as client:
            response = await client.get("/2/users/by/username/x")
        return response.is_success, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc)


async def _check_redis(url: str) -> tuple[bool, str]:
    store = RedisCounterStore.from_url(url)
    try:
        return await store.ping(), "PONG"
    except Exception as exc:
        return False, str(exc)
    finally:
        await store.aclose()


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="CogSec Checker Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    table.add_row(
        "X bearer token",
        "OK" if settings.x_bearer_token else "MISSING",
        "Set COGSEC_X_BEARER_TOKEN" if not settings.x_bearer_token else "configured",
    )
    table.add_row(
        "AI key",
        "OK" if settings.ai_api_key else "MISSING",
        "Set COGSEC_AI_API_KEY" if not settings.ai_api_key else "configured",
    )
    table.add_row("AI base_url", "OK", settings.ai_base_url)
    table.add_row("AI model", "OK", settings.ai_model)
    table.add_row(
        "Rate limit",
        "OK",
        f"{settings.rate_limit_max_calls} call(s) / {settings.rate_limit_window_seconds:g}s per client",
    )

    # Counter store
    if settings.redis_url:
        ok_redis, detail_redis = asyncio.run(_check_redis(settings.redis_url))
        table.add_row("Redis", "OK" if ok_redis else "FAIL", detail_redis)
    else:
        table.add_row("Redis", "OPTIONAL", "No COGSEC_REDIS_URL -> in-process counters (single worker only)")

    # Connectivity (best-effort)
    if settings.x_bearer_token:
        ok_x, detail_x = asyncio.run(_check_x_api(settings))
        table.add_row("X API", "OK" if ok_x else "FAIL", detail_x)

    _console.print(table)


@app.command(name="setup")
def setup() -> None:
    """Interactive setup (stores credentials in the user config .env)."""

    bearer = typer.prompt("X API bearer token", hide_input=True).strip()
    base_url = typer.prompt("AI base URL", default="https://api.openai.com/v1", show_default=True).strip()
    model = typer.prompt("AI model", default="gpt-4o-mini", show_default=True).strip()
    api_key = typer.prompt("AI API key", hide_input=True).strip()
    redis_url = typer.prompt("Redis URL (empty for in-process counters)", default="", show_default=False).strip()

    if not base_url or not model:
        raise typer.BadParameter("base_url and model are required")

    env_path = write_user_env_vars(
        {
            "COGSEC_X_BEARER_TOKEN": bearer,
            "COGSEC_AI_BASE_URL": base_url,
            "COGSEC_AI_MODEL": model,
            "COGSEC_AI_API_KEY": api_key,
            "COGSEC_REDIS_URL": redis_url,
        }
    )

    _console.print(f"[green]Saved config to:[/green] {env_path}")
