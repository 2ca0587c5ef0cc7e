"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from typing import Any

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import ContentBatch
from core.services.response_assembler import AssembledResponse


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida (se omite en modo `--json`)."""

    title = Text("CogSec Checker", style="bold green")
    subtitle = Text("Get your official CogSec ranking", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="green", padding=(1, 4)))


def _score_bar(value: int) -> str:
    # -10..10 -> 21 celdas con un marcador en la posición del valor.
    cells = ["─"] * 21
    cells[value + 10] = "●"
    return "".join(cells)


def build_result_panel(identifier: str, response: AssembledResponse) -> Panel:
    """Panel para presentar una respuesta ensamblada (ranking, sin posts o error)."""

    body: dict[str, Any] = response.body
    text = Text()

    if response.status_code == 200 and "x" in body:
        text.append(f"x: {body['x']:+d}  ", style="bold")
        text.append(_score_bar(int(body["x"])) + "\n", style="green")
        text.append(f"y: {body['y']:+d}  ", style="bold")
        text.append(_score_bar(int(body["y"])) + "\n\n", style="green")
        text.append(str(body["explanation"]).strip())
        if body.get("avatar_url"):
            text.append(f"\n\nAvatar: {body['avatar_url']}", style="dim")
        return Panel(text, title=Text(f"@{identifier}", style="bold green"), border_style="green")

    if response.status_code == 200:
        text.append(str(body.get("message", "")))
        return Panel(text, title=Text(f"@{identifier}", style="bold yellow"), border_style="yellow")

    text.append(str(body.get("error", "Unknown error")))
    if body.get("stage"):
        text.append(f"\nStage: {body['stage']}", style="dim")
    text.append(f"\nHTTP {response.status_code}", style="dim")
    return Panel(text, title=Text("Error", style="bold red"), border_style="red")


def build_posts_table(identifier: str, batch: ContentBatch) -> Table:
    table = Table(title=f"Recent posts from @{identifier}")
    table.add_column("#", style="cyan", no_wrap=True)
    table.add_column("Id", style="dim", no_wrap=True)
    table.add_column("Text", style="white")
    for index, item in enumerate(batch.items, start=1):
        table.add_row(str(index), item.item_id or "-", item.text)
    return table
