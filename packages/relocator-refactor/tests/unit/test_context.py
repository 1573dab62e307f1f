import pytest

from relocator.refactor.context import MoveRequest, resolve_move_context
from relocator.refactor.engine.writer import WorkspaceWriter
from relocator.refactor.errors import MoveResolutionError, MoveValidationError
from relocator.test_utils import load_workspace

HELPER = "packages/lib1/src/lib/utils/helper.ts"


@pytest.fixture
def env(workspace_factory, tmp_path):
    workspace_factory.with_library(
        "lib1", alias="@test/lib1", index="export * from './lib/utils/helper';\n"
    ).with_library("lib2", alias="@test/lib2").with_library("lib3").with_application(
        "app1"
    ).with_source(
        HELPER, "export const helper = 1;\n"
    ).with_source(
        "packages/lib1/src/lib/empty.ts", ""
    ).with_source(
        "packages/lib2/src/lib/uses-lib1.ts", "import { helper } from '@test/lib1';\n"
    ).with_source(
        "packages/lib2/src/lib/existing.ts", "export {};\n"
    ).build()
    tree, workspace = load_workspace(tmp_path)
    return WorkspaceWriter(tree), workspace.projects


def test_resolves_full_context(env):
    # Arrange
    writer, projects = env
    request = MoveRequest(file=HELPER, project="lib2")

    # Act
    ctx = resolve_move_context(writer, projects, request, HELPER)

    # Assert
    assert ctx.source_path == HELPER
    assert ctx.target_path == "packages/lib2/src/lib/helper.ts"
    assert ctx.source_project_name == "lib1"
    assert ctx.target_project_name == "lib2"
    assert ctx.content == "export const helper = 1;\n"
    assert ctx.source_root == "packages/lib1/src"
    assert ctx.relative_path_in_source == "lib/utils/helper.ts"
    assert ctx.is_exported
    assert ctx.source_import_path == "@test/lib1"
    assert ctx.target_import_path == "@test/lib2"
    assert ctx.has_imports_in_target
    assert not ctx.is_same_project
    assert writer.tree.list_changes() == []


def test_project_directory_options(env):
    writer, projects = env

    explicit = resolve_move_context(
        writer, projects, MoveRequest(file=HELPER, project="app1", project_directory="shared/x"), HELPER
    )
    derived = resolve_move_context(
        writer, projects, MoveRequest(file=HELPER, project="lib3", derive_project_directory=True), HELPER
    )

    assert explicit.target_path == "apps/app1/src/app/shared/x/helper.ts"
    assert derived.target_path == "packages/lib3/src/lib/utils/helper.ts"
    assert derived.target_import_path is None
    assert not derived.has_imports_in_target


@pytest.mark.parametrize(
    "request_kwargs, file_path, error, message",
    [
        ({"project": "lib2"}, "packages/lib1/src/x;y.ts", MoveValidationError,
         "Invalid path input for 'file': contains disallowed characters: \"packages/lib1/src/x;y.ts\""),
        ({"project": "lib|2"}, HELPER, MoveValidationError,
         'Invalid project name: contains disallowed characters: "lib|2"'),
        ({"project": "nope"}, HELPER, MoveResolutionError,
         'Target project "nope" not found in workspace'),
        ({"project": "lib2", "project_directory": "a", "derive_project_directory": True}, HELPER,
         MoveValidationError,
         'Cannot use both "deriveProjectDirectory" and "projectDirectory" options at the same time'),
        ({"project": "lib2", "project_directory": "a;b"}, HELPER, MoveValidationError,
         "Invalid path input for 'projectDirectory'"),
        ({"project": "lib2", "project_directory": "../../escape"}, HELPER, MoveValidationError,
         "path traversal detected"),
        ({"project": "lib2"}, "packages/lib1/src/missing.ts", MoveResolutionError,
         'Source file "packages/lib1/src/missing.ts" not found'),
        ({"project": "lib2"}, "nx.json", MoveResolutionError,
         'Could not determine source project for file "nx.json"'),
        ({"project": "lib2"}, "packages/lib1/src/lib/empty.ts", MoveResolutionError,
         'Could not read file "packages/lib1/src/lib/empty.ts"'),
    ],
)
def test_validation_and_resolution_errors(env, request_kwargs, file_path, error, message):
    writer, projects = env
    request = MoveRequest(file=file_path, **request_kwargs)

    with pytest.raises(error) as exc_info:
        resolve_move_context(writer, projects, request, file_path)

    assert message in str(exc_info.value)
    assert writer.tree.list_changes() == []


def test_existing_target_is_rejected(env, tmp_path):
    writer, projects = env
    (tmp_path / "packages/lib2/src/lib/helper.ts").write_text("export {};\n")

    with pytest.raises(MoveResolutionError, match='Target file "packages/lib2/src/lib/helper.ts" already exists'):
        resolve_move_context(writer, projects, MoveRequest(file=HELPER, project="lib2"), HELPER)
