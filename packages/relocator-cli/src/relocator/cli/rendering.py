from typing import Dict, Optional

import typer

from relocator.common.messaging import protocols

LEVEL_COLORS: Dict[str, Optional[str]] = {
    "debug": typer.colors.BRIGHT_BLACK,
    "info": None,
    "success": typer.colors.GREEN,
    "warning": typer.colors.YELLOW,
    "error": typer.colors.RED,
}

STDERR_LEVELS = frozenset({"warning", "error"})


class CliRenderer(protocols.Renderer):
    """Prints bus messages; warnings and errors go to stderr, debug needs `-v`."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def render(self, message: str, level: str) -> None:
        if level == "debug" and not self.verbose:
            return
        typer.secho(message, fg=LEVEL_COLORS.get(level), err=level in STDERR_LEVELS)
