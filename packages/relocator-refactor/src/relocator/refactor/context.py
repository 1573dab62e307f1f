import posixpath
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

from relocator.workspace.project import Project
from .analysis import (
    derive_project_directory_from_source,
    find_project_for_file,
    get_project_import_path,
)
from .engine.writer import WorkspaceWriter
from .errors import MoveResolutionError, MoveValidationError
from .exports import is_file_exported
from .imports import check_for_imports_in_project, check_for_relative_imports_in_project
from .paths import build_target_path, join_posix
from .security import is_valid_path_input, sanitize_path


@dataclass(frozen=True)
class MoveRequest:
    """One invocation: what to move, where, and how."""

    file: str
    project: str
    project_directory: Optional[str] = None
    derive_project_directory: bool = False
    skip_export: bool = False
    skip_format: bool = False
    allow_unicode: bool = False
    remove_empty_project: bool = False


@dataclass(frozen=True)
class MoveContext:
    source_path: str
    target_path: str
    source_project: Project
    target_project: Project
    content: str
    source_root: str
    relative_path_in_source: str
    is_exported: bool
    source_import_path: Optional[str]
    target_import_path: Optional[str]
    has_imports_in_target: bool

    @property
    def source_project_name(self) -> str:
        return self.source_project.name

    @property
    def target_project_name(self) -> str:
        return self.target_project.name

    @property
    def is_same_project(self) -> bool:
        return self.source_project.name == self.target_project.name


def validate_file_input(value: str, allow_unicode: bool = False, is_glob: bool = False) -> None:
    if not is_valid_path_input(value, allow_unicode=allow_unicode, allow_glob=is_glob):
        raise MoveValidationError(
            f"Invalid path input for 'file': contains disallowed characters: \"{value}\""
        )


def validate_request(request: MoveRequest, projects: Dict[str, Project]) -> Project:
    """Checks the options shared by every file of a request. Returns the target project."""
    if not is_valid_path_input(request.project, allow_unicode=request.allow_unicode):
        raise MoveValidationError(
            f'Invalid project name: contains disallowed characters: "{request.project}"'
        )

    target_project = projects.get(request.project)
    if target_project is None:
        raise MoveResolutionError(
            f'Target project "{request.project}" not found in workspace'
        )

    if request.derive_project_directory and request.project_directory:
        raise MoveValidationError(
            'Cannot use both "deriveProjectDirectory" and "projectDirectory" options at the same time'
        )
    if request.project_directory and not is_valid_path_input(
        request.project_directory, allow_unicode=request.allow_unicode
    ):
        raise MoveValidationError(
            "Invalid path input for 'projectDirectory': contains disallowed "
            f'characters: "{request.project_directory}"'
        )
    return target_project


def _target_base_root(project: Project) -> str:
    return project.source_root or join_posix(project.root, "src")


def resolve_move_context(
    writer: WorkspaceWriter,
    projects: Dict[str, Project],
    request: MoveRequest,
    file_path: str,
    is_glob: bool = False,
    tsconfig_files: Sequence[str] = (),
) -> MoveContext:
    """
    Validates one file of a request and describes its relocation.

    Reads only; the returned context reflects the workspace as it was when
    this was called.
    """
    validate_file_input(file_path, request.allow_unicode, is_glob)
    target_project = validate_request(request, projects)

    source_path = sanitize_path(file_path)
    if not writer.exists(source_path):
        raise MoveResolutionError(f'Source file "{source_path}" not found')

    source_project = find_project_for_file(projects, source_path)
    if source_project is None:
        raise MoveResolutionError(
            f'Could not determine source project for file "{source_path}"'
        )

    project_directory: Optional[str] = None
    if request.derive_project_directory:
        derived = derive_project_directory_from_source(source_path, source_project)
        project_directory = sanitize_path(derived) if derived else None
    elif request.project_directory:
        project_directory = sanitize_path(request.project_directory)

    target_path = build_target_path(
        _target_base_root(target_project),
        target_project.base_dir,
        posixpath.basename(source_path),
        project_directory,
    )
    if writer.exists(target_path):
        raise MoveResolutionError(f'Target file "{target_path}" already exists')

    content = writer.read(source_path)
    if not content:
        raise MoveResolutionError(f'Could not read file "{source_path}"')

    source_root = source_project.effective_source_root
    source_import_path = get_project_import_path(writer, source_project, tsconfig_files)
    target_import_path = get_project_import_path(writer, target_project, tsconfig_files)

    has_imports_in_target = False
    if target_import_path:
        if source_import_path:
            has_imports_in_target = check_for_imports_in_project(
                writer, target_project, source_import_path
            )
        else:
            has_imports_in_target = check_for_relative_imports_in_project(
                writer, target_project, source_path
            )

    return MoveContext(
        source_path=source_path,
        target_path=target_path,
        source_project=source_project,
        target_project=target_project,
        content=content,
        source_root=source_root,
        relative_path_in_source=posixpath.relpath(source_path, source_root or "."),
        is_exported=is_file_exported(writer, source_project, source_path, tsconfig_files),
        source_import_path=source_import_path,
        target_import_path=target_import_path,
        has_imports_in_target=has_imports_in_target,
    )
