import typer

from relocator.common import bus
from relocator.needle import L, needle
from .rendering import CliRenderer
from .commands.move import move_command

app = typer.Typer(
    name="relocator",
    help=needle.get(L.cli.app.description),
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help=needle.get(L.cli.option.verbose.help)
    ),
):
    # The renderer is chosen here so the global verbose flag reaches every command.
    bus.set_renderer(CliRenderer(verbose=verbose))


app.command(name="move", help=needle.get(L.cli.command.move.help))(move_command)


if __name__ == "__main__":
    app()
