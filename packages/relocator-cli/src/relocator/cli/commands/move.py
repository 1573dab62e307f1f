from pathlib import Path
from typing import Optional

import typer

from relocator.common import bus
from relocator.common.transaction import TransactionManager
from relocator.config import load_config_from_path
from relocator.needle import L, needle
from relocator.refactor import CommandFormatter, MoveError, MoveRequest, move_files
from relocator.workspace import Tree, Workspace, WorkspaceError, find_workspace_root


def move_command(
    file: str = typer.Argument(..., help=needle.get(L.cli.argument.file.help)),
    project: str = typer.Option(
        ..., "--project", "-p", help=needle.get(L.cli.option.project.help)
    ),
    project_directory: Optional[str] = typer.Option(
        None, "--project-directory", help=needle.get(L.cli.option.project_directory.help)
    ),
    derive_project_directory: bool = typer.Option(
        False,
        "--derive-project-directory",
        help=needle.get(L.cli.option.derive_project_directory.help),
    ),
    skip_export: Optional[bool] = typer.Option(
        None, "--skip-export/--export", help=needle.get(L.cli.option.skip_export.help)
    ),
    skip_format: Optional[bool] = typer.Option(
        None, "--skip-format/--format", help=needle.get(L.cli.option.skip_format.help)
    ),
    allow_unicode: Optional[bool] = typer.Option(
        None,
        "--allow-unicode/--no-allow-unicode",
        help=needle.get(L.cli.option.allow_unicode.help),
    ),
    remove_empty_project: Optional[bool] = typer.Option(
        None,
        "--remove-empty-project/--keep-empty-project",
        help=needle.get(L.cli.option.remove_empty_project.help),
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help=needle.get(L.cli.option.dry_run.help)
    ),
    yes: bool = typer.Option(
        False, "-y", "--yes", help=needle.get(L.cli.option.yes.help)
    ),
):
    try:
        root_path = find_workspace_root(Path.cwd())
        config = load_config_from_path(root_path)

        def _flag(value: Optional[bool], default: bool) -> bool:
            return default if value is None else value

        request = MoveRequest(
            file=file,
            project=project,
            project_directory=project_directory,
            derive_project_directory=derive_project_directory,
            skip_export=_flag(skip_export, config.skip_export),
            skip_format=_flag(skip_format, config.skip_format),
            allow_unicode=_flag(allow_unicode, config.allow_unicode),
            remove_empty_project=_flag(remove_empty_project, config.remove_empty_project),
        )

        bus.info(L.move.run.loading_workspace, root=str(root_path))
        tree = Tree(root_path, ignore=config.ignore)
        workspace = Workspace(tree)
        bus.debug(L.move.debug.projects_discovered, count=len(workspace.projects))

        result = move_files(
            tree,
            request,
            workspace.projects,
            formatter=CommandFormatter(config.formatter),
            tsconfig_files=config.tsconfig_files,
        )

        tm = TransactionManager(root_path)
        tree.stage(tm)
        if not tm.pending_count:
            bus.success(L.move.run.no_changes)
            return

        bus.warning(L.move.run.preview_header, count=tm.pending_count)
        for desc in tm.preview():
            typer.echo(f"  {desc}")

        if dry_run:
            return

        confirmed = yes or typer.confirm(needle.get(L.move.run.confirm), default=False)
        if not confirmed:
            bus.error(L.move.run.aborted)
            raise typer.Exit(code=1)

        tm.commit()
        bus.success(L.move.run.success, count=len(result.moved))

    except (MoveError, WorkspaceError, ValueError) as e:
        bus.error(L.error.generic, error=str(e))
        raise typer.Exit(code=1)
