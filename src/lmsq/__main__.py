"""Entry point for the lmsq command line."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

from lmsq.interfases.cli.app import main as cli_main

if TYPE_CHECKING:
    from collections.abc import Sequence


def main(argv: Sequence[str] | None = None) -> NoReturn:
    """Run the CLI and exit with its status code."""
    raise SystemExit(cli_main(argv))


if __name__ == "__main__":  # pragma: no cover - manual execution guard
    main()
