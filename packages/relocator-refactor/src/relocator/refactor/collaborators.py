import json
import logging
import subprocess
from typing import Dict, List, Optional, Protocol, Sequence

from relocator.common import bus
from relocator.needle import L
from relocator.workspace.project import Project
from relocator.workspace.tree import Tree
from .analysis import find_alias_table_file, get_project_import_path, loads_jsonc
from .engine.writer import WorkspaceWriter
from .paths import has_source_file_extension

log = logging.getLogger(__name__)

FILE_PLACEHOLDER = "{file}"


class Formatter(Protocol):
    def format(self, tree: Tree) -> None: ...


class ProjectRemover(Protocol):
    def remove(self, project: Project) -> None: ...


class CommandFormatter:
    """
    Pipes every changed source file through an external formatter.

    The command reads the file on stdin and prints the formatted text;
    `{file}` in any argument is replaced by the workspace-relative path,
    e.g. `["npx", "prettier", "--stdin-filepath", "{file}"]`. Results are
    written back into the tree, so nothing reaches disk before commit.
    """

    def __init__(self, command: Optional[Sequence[str]] = None):
        self.command = list(command or [])

    def _argv(self, path: str) -> List[str]:
        return [arg.replace(FILE_PLACEHOLDER, path) for arg in self.command]

    def format(self, tree: Tree) -> None:
        if not self.command:
            bus.debug(L.format.skipped)
            return

        files = [f for f in tree.changed_files() if has_source_file_extension(f)]
        formatted: Dict[str, str] = {}
        for path in files:
            content = tree.read(path)
            if content is None:
                continue
            try:
                result = subprocess.run(
                    self._argv(path),
                    input=content,
                    cwd=tree.root,
                    capture_output=True,
                    text=True,
                    check=True,
                )
            except (OSError, subprocess.CalledProcessError) as e:
                log.warning(f"Formatter failed on {path}: {e}")
                bus.warning(L.format.failed, command=" ".join(self.command), error=str(e))
                return
            if result.stdout and result.stdout != content:
                formatted[path] = result.stdout

        for path, content in formatted.items():
            tree.write(path, content)
        bus.debug(L.format.done, count=len(formatted))


class TreeProjectRemover:
    """Deletes a project's directory and its entry in the alias table."""

    def __init__(self, writer: WorkspaceWriter, tsconfig_files: Sequence[str] = ()):
        self.writer = writer
        self.tsconfig_files = tsconfig_files

    def remove(self, project: Project) -> None:
        if project.root in ("", "."):
            raise ValueError(f"Refusing to remove the workspace root as project '{project.name}'")
        alias = get_project_import_path(self.writer, project, self.tsconfig_files)

        self.writer.delete_directory(project.root)
        if alias:
            self._drop_alias(alias)
        self.writer.caches.compiler_paths.clear()

    def _drop_alias(self, alias: str) -> None:
        table_file = find_alias_table_file(self.writer, self.tsconfig_files)
        if table_file is None:
            return
        tsconfig = loads_jsonc(self.writer.read(table_file) or "{}")
        paths = tsconfig.get("compilerOptions", {}).get("paths", {})
        if alias not in paths:
            return
        del paths[alias]
        # Comments in the alias table file are not preserved.
        self.writer.write(table_file, json.dumps(tsconfig, indent=2) + "\n")
