"""`python main.py ...` desde un checkout sin instalar.

Equivale al script `cogsec`: añade `src/` al path y delega en `cli.main.run`.
"""

from __future__ import annotations

import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parent / "src"


def main(argv: list[str] | None = None) -> None:
    if str(SRC_DIR) not in sys.path:
        sys.path.insert(0, str(SRC_DIR))
    if argv is not None:
        sys.argv = [sys.argv[0], *argv]

    from cli.main import run  # noqa: PLC0415

    run()


if __name__ == "__main__":
    main()
