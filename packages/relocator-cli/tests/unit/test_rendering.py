from unittest.mock import patch

import pytest

from relocator.cli.rendering import CliRenderer


@pytest.mark.parametrize(
    "level, to_stderr",
    [("info", False), ("success", False), ("warning", True), ("error", True)],
)
def test_levels_route_to_the_right_stream(capsys, level, to_stderr):
    CliRenderer().render("hello", level)

    captured = capsys.readouterr()
    assert ("hello" in captured.err) is to_stderr
    assert ("hello" in captured.out) is not to_stderr


def test_debug_requires_verbose():
    with patch("relocator.cli.rendering.typer.secho") as secho:
        CliRenderer(verbose=False).render("quiet", "debug")
        secho.assert_not_called()

        CliRenderer(verbose=True).render("loud", "debug")
        secho.assert_called_once()
