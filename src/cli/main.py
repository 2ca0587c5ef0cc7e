"""CLI (Typer + Rich).

Comandos:
- `analyze HANDLE`: ejecuta el pipeline completo en local y muestra el ranking.
- `posts HANDLE`: solo directorio + timeline (los posts que verá el modelo).
- `serve`: levanta la API con uvicorn.
- `doctor ...`: diagnóstico y configuración (ver `cli.doctor`).
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from adapters.counter_stores import InMemoryCounterStore
from adapters.json_exporter import export_response_json
from adapters.pipeline_factory import open_pipeline
from cli import doctor
from cli.ui_components import build_posts_table, build_result_panel, print_banner
from core.config import AppSettings
from core.domain.models import RequestContext
from core.logging_config import configure_logging
from core.services.analysis_pipeline import PostsListing
from core.services.response_assembler import AssembledResponse, assemble_response

app = typer.Typer(no_args_is_help=True, help="CogSec Checker: rank an X account's cognitive security.")
app.add_typer(doctor.app, name="doctor")

_console = Console()

# En local no hay cliente remoto que limitar: clave fija y contador en memoria.
_CLI_CLIENT_KEY = "cli"


async def _analyze(settings: AppSettings, username: str) -> AssembledResponse:
    async with open_pipeline(settings, store=InMemoryCounterStore()) as pipeline:
        outcome = await pipeline.run(RequestContext(client_key=_CLI_CLIENT_KEY, raw_identifier=username))
    return assemble_response(outcome)


async def _posts(settings: AppSettings, username: str) -> PostsListing | AssembledResponse:
    async with open_pipeline(settings, store=InMemoryCounterStore()) as pipeline:
        result = await pipeline.list_posts(RequestContext(client_key=_CLI_CLIENT_KEY, raw_identifier=username))
    if isinstance(result, PostsListing):
        return result
    return assemble_response(result)


@app.command()
def analyze(
    username: str = typer.Argument(..., help="X handle, sin '@'."),
    as_json: bool = typer.Option(False, "--json", help="Imprime la respuesta JSON cruda."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Guarda la respuesta en un fichero JSON."),
) -> None:
    """Get the official CogSec ranking for USERNAME."""

    settings = AppSettings()
    configure_logging("WARNING" if as_json else settings.log_level)
    handle = username.strip().lstrip("@")

    if not as_json:
        print_banner(_console)

    response = asyncio.run(_analyze(settings, handle))

    if as_json:
        typer.echo(json.dumps(response.body, ensure_ascii=False, indent=2))
    else:
        _console.print(build_result_panel(handle, response))

    if output is not None:
        path = export_response_json(identifier=handle, response=response, output_path=output)
        if not as_json:
            _console.print(f"[dim]Saved to {path}[/dim]")

    if response.status_code >= 400:
        raise typer.Exit(code=1)


@app.command()
def posts(username: str = typer.Argument(..., help="X handle, sin '@'.")) -> None:
    """List the recent posts that would be ranked for USERNAME."""

    settings = AppSettings()
    configure_logging(settings.log_level)
    handle = username.strip().lstrip("@")

    result = asyncio.run(_posts(settings, handle))
    if isinstance(result, PostsListing):
        if result.batch.is_empty():
            _console.print("[yellow]No posts found.[/yellow]")
            return
        _console.print(build_posts_table(result.identifier, result.batch))
        return

    _console.print(build_result_panel(handle, result))
    raise typer.Exit(code=1)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Host (default: COGSEC_API_HOST)."),
    port: Optional[int] = typer.Option(None, help="Puerto (default: COGSEC_API_PORT)."),
) -> None:
    """Run the HTTP API with uvicorn."""

    import uvicorn  # noqa: PLC0415

    settings = AppSettings()
    configure_logging(settings.log_level)
    uvicorn.run(
        "api.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        log_config=None,
    )


def run() -> None:
    app()


if __name__ == "__main__":
    run()
