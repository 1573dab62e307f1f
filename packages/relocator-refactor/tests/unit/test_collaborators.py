import json
import sys

import pytest

from relocator.needle import L
from relocator.refactor import WorkspaceWriter
from relocator.refactor.collaborators import CommandFormatter, TreeProjectRemover
from relocator.test_utils import SpyBus, load_workspace
from relocator.workspace import Project

UPPERCASE = [sys.executable, "-c", "import sys; sys.stdout.write(sys.stdin.read().upper())"]


@pytest.fixture
def spy_bus(monkeypatch):
    spy = SpyBus()
    with spy.patch(monkeypatch):
        yield spy


def test_command_formatter_rewrites_changed_sources_in_tree(tmp_path):
    # Arrange
    (tmp_path / "keep.ts").write_text("const untouched = 1;\n")
    tree, _ = load_workspace(tmp_path)
    tree.write("libs/a/src/x.ts", "const x = 1;\n")
    tree.write("libs/a/README.md", "notes\n")

    # Act
    CommandFormatter(UPPERCASE).format(tree)

    # Assert
    assert tree.read("libs/a/src/x.ts") == "CONST X = 1;\n"
    assert tree.read("libs/a/README.md") == "notes\n"
    assert tree.read("keep.ts") == "const untouched = 1;\n"
    assert not (tmp_path / "libs").exists()


def test_command_formatter_substitutes_file_placeholder(tmp_path):
    tree, _ = load_workspace(tmp_path)
    tree.write("a.ts", "")
    echo_path = [sys.executable, "-c", "import sys; print(sys.argv[1], end='')", "{file}"]

    CommandFormatter(echo_path).format(tree)

    assert tree.read("a.ts") == "a.ts"


def test_command_formatter_without_command_is_noop(tmp_path, spy_bus):
    tree, _ = load_workspace(tmp_path)
    tree.write("a.ts", "x\n")

    CommandFormatter().format(tree)

    assert tree.read("a.ts") == "x\n"
    spy_bus.assert_id_called(L.format.skipped, level="debug")


def test_command_formatter_failure_is_a_warning(tmp_path, spy_bus):
    tree, _ = load_workspace(tmp_path)
    tree.write("a.ts", "x\n")

    CommandFormatter([sys.executable, "-c", "raise SystemExit(2)"]).format(tree)

    assert tree.read("a.ts") == "x\n"
    spy_bus.assert_id_called(L.format.failed, level="warning")


def test_tree_project_remover_drops_directory_and_alias(workspace_factory, tmp_path):
    workspace_factory.with_library("lib1", alias="@test/lib1").with_library(
        "lib2", alias="@test/lib2"
    ).build()
    tree, workspace = load_workspace(tmp_path)
    writer = WorkspaceWriter(tree)
    TreeProjectRemover(writer).remove(workspace.projects["lib1"])

    assert not tree.exists("packages/lib1/src/index.ts")
    paths = json.loads(tree.read("tsconfig.base.json"))["compilerOptions"]["paths"]
    assert list(paths) == ["@test/lib2"]


def test_tree_project_remover_refuses_workspace_root(tmp_path):
    tree, _ = load_workspace(tmp_path)
    with pytest.raises(ValueError, match="workspace root"):
        TreeProjectRemover(WorkspaceWriter(tree)).remove(Project("root", ""))
