import logging
import posixpath
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from relocator.common import bus
from relocator.needle import L
from relocator.workspace.project import Project
from .engine.syntax import apply_replacements, find_specifiers, may_contain_specifiers
from .engine.writer import WorkspaceWriter
from .exports import is_file_exported
from .graph import LazyProjectGraph
from .paths import (
    comparison_key,
    get_relative_import_specifier,
    remove_source_file_extension,
    resolve_specifier,
)

log = logging.getLogger(__name__)

Predicate = Callable[[str], bool]
Rewrite = Callable[[str], str]


def is_relative(specifier: str) -> bool:
    return specifier.startswith(".")


def references_file(importer: str, specifier: str, file_path: str) -> bool:
    """True when a relative specifier in `importer` resolves to `file_path`, ignoring extensions."""
    if not is_relative(specifier):
        return False
    return comparison_key(resolve_specifier(importer, specifier)) == comparison_key(file_path)


def _may_reference(content: str, file_path: str) -> bool:
    stem = posixpath.basename(remove_source_file_extension(file_path))
    return stem in content


def update_specifiers_matching(
    writer: WorkspaceWriter, file_path: str, predicate: Predicate, rewrite: Rewrite
) -> bool:
    """Rewrites every matching specifier in one file. Returns True if the file changed."""
    content = writer.read(file_path)
    if not content or not may_contain_specifiers(content):
        return False
    syntax = writer.syntax(file_path)
    if syntax is None:
        return False

    replacements = []
    for site in find_specifiers(syntax, predicate):
        new_value = rewrite(site.value)
        if new_value != site.value:
            replacements.append((site, new_value))
    if not replacements:
        return False

    writer.write(file_path, apply_replacements(syntax.source, replacements))
    return True


def has_import_specifier(writer: WorkspaceWriter, file_path: str, specifier: str) -> bool:
    content = writer.read(file_path)
    if not content or specifier not in content:
        return False
    syntax = writer.syntax(file_path)
    return syntax is not None and bool(find_specifiers(syntax, lambda s: s == specifier))


def has_relative_reference(writer: WorkspaceWriter, importer: str, file_path: str) -> bool:
    content = writer.read(importer)
    if not content or not _may_reference(content, file_path):
        return False
    syntax = writer.syntax(importer)
    return syntax is not None and bool(
        find_specifiers(syntax, lambda s: references_file(importer, s, file_path))
    )


def check_for_imports_in_project(
    writer: WorkspaceWriter, project: Project, import_path: str
) -> bool:
    """True when any source file of the project uses `import_path` verbatim."""
    return any(
        has_import_specifier(writer, f, import_path)
        for f in writer.project_source_files(project.root)
    )


def check_for_relative_imports_in_project(
    writer: WorkspaceWriter, project: Project, file_path: str
) -> bool:
    return any(
        has_relative_reference(writer, f, file_path)
        for f in writer.project_source_files(project.root)
        if f != file_path
    )


def _files_to_scan(
    writer: WorkspaceWriter, project: Project, exclude: Iterable[str]
) -> List[str]:
    excluded = set(exclude)
    return [f for f in writer.project_source_files(project.root) if f not in excluded]


def update_import_paths_in_project(
    writer: WorkspaceWriter, project: Project, source_file: str, target_file: str
) -> int:
    """Points relative references to `source_file` at `target_file`."""
    changed = 0
    for importer in _files_to_scan(writer, project, (source_file, target_file)):
        content = writer.read(importer)
        if not content or not _may_reference(content, source_file):
            continue
        new_specifier = get_relative_import_specifier(importer, target_file)
        if update_specifiers_matching(
            writer,
            importer,
            lambda s, importer=importer: references_file(importer, s, source_file),
            lambda _: new_specifier,
        ):
            changed += 1
    return changed


def update_import_paths_to_package_alias(
    writer: WorkspaceWriter,
    project: Project,
    source_file: str,
    alias: str,
    exclude: Sequence[str] = (),
) -> int:
    """Replaces relative references to `source_file` with `alias`."""
    changed = 0
    for importer in _files_to_scan(writer, project, (source_file, *exclude)):
        content = writer.read(importer)
        if not content or not _may_reference(content, source_file):
            continue
        if update_specifiers_matching(
            writer,
            importer,
            lambda s, importer=importer: references_file(importer, s, source_file),
            lambda _: alias,
        ):
            changed += 1
    return changed


def update_imports_by_alias_in_project(
    writer: WorkspaceWriter, project: Project, source_alias: str, target_alias: str
) -> int:
    changed = 0
    for importer in writer.project_source_files(project.root):
        content = writer.read(importer)
        if not content or source_alias not in content:
            continue
        if update_specifiers_matching(
            writer, importer, lambda s: s == source_alias, lambda _: target_alias
        ):
            changed += 1
    return changed


def update_imports_to_relative(
    writer: WorkspaceWriter,
    project: Project,
    source_alias: str,
    target_file: str,
    exclude: Sequence[str] = (),
) -> int:
    """Replaces `source_alias` with a relative specifier to `target_file`."""
    changed = 0
    for importer in _files_to_scan(writer, project, exclude):
        content = writer.read(importer)
        if not content or source_alias not in content:
            continue
        new_specifier = get_relative_import_specifier(importer, target_file)
        if update_specifiers_matching(
            writer, importer, lambda s: s == source_alias, lambda _: new_specifier
        ):
            changed += 1
    return changed


def update_import_paths_in_dependent_projects(
    writer: WorkspaceWriter,
    graph: LazyProjectGraph,
    projects: Dict[str, Project],
    source_project_name: str,
    source_alias: str,
    target_alias: str,
    target_project_name: Optional[str] = None,
    target_file: Optional[str] = None,
) -> List[str]:
    """
    Rewrites `source_alias` imports in every project depending on the source.

    Without graph information every project is scanned for the alias
    instead. The target project itself receives relative specifiers.
    Returns the names of the projects that were visited.
    """
    dependents = sorted(graph.dependents_of(source_project_name))
    if dependents:
        candidates = [projects[name] for name in dependents if name in projects]
    else:
        log.debug(f"No graph dependents for {source_project_name}, scanning all projects")
        candidates = [
            p
            for p in projects.values()
            if check_for_imports_in_project(writer, p, source_alias)
        ]

    for project in candidates:
        bus.debug(L.move.debug.updating_dependent, project=project.name)
        if target_project_name and target_file and project.name == target_project_name:
            update_imports_to_relative(
                writer, project, source_alias, target_file, exclude=(target_file,)
            )
        else:
            update_imports_by_alias_in_project(writer, project, source_alias, target_alias)
    return [p.name for p in candidates]


def update_relative_imports_in_moved_file(
    writer: WorkspaceWriter, source_file: str, target_file: str
) -> bool:
    """Re-anchors the moved file's relative specifiers at its new location."""

    def _rewrite(specifier: str) -> str:
        resolved = resolve_specifier(source_file, specifier)
        new_specifier = get_relative_import_specifier(target_file, resolved)
        if new_specifier != specifier:
            bus.debug(L.move.debug.rewrote_specifier, old=specifier, new=new_specifier, file=target_file)
        return new_specifier

    return update_specifiers_matching(writer, target_file, is_relative, _rewrite)


def update_relative_imports_to_alias_in_moved_file(
    writer: WorkspaceWriter,
    source_file: str,
    target_file: str,
    source_project: Project,
    source_alias: str,
    tsconfig_files: Sequence[str] = (),
) -> bool:
    """
    Turns the moved file's relative imports back into its old project into
    `source_alias` imports. Files not exported through that alias still get
    rewritten, with a warning.
    """
    source_root = source_project.effective_source_root

    def _points_into_source(specifier: str) -> bool:
        if not is_relative(specifier):
            return False
        resolved = resolve_specifier(source_file, specifier)
        return source_root == "" or resolved.startswith(source_root + "/")

    def _rewrite(specifier: str) -> str:
        resolved = resolve_specifier(source_file, specifier)
        if not is_file_exported(writer, source_project, resolved, tsconfig_files):
            bus.warning(
                L.move.warning.unexported_alias_import,
                specifier=specifier,
                file=target_file,
                alias=source_alias,
            )
        return source_alias

    return update_specifiers_matching(writer, target_file, _points_into_source, _rewrite)



@dataclass(frozen=True)
class UnexportedDependency:
    specifier: str
    resolved_path: str
    relative_path_in_project: str


def check_for_unexported_relative_dependencies(
    writer: WorkspaceWriter,
    file_path: str,
    project: Project,
    tsconfig_files: Sequence[str] = (),
) -> List[UnexportedDependency]:
    """Relative dependencies of `file_path` that its project's entrypoint does not export."""
    syntax = writer.syntax(file_path)
    if syntax is None:
        return []

    own_key = comparison_key(file_path)
    source_root = project.effective_source_root
    found: List[UnexportedDependency] = []
    for site in find_specifiers(syntax, is_relative):
        resolved = comparison_key(resolve_specifier(file_path, site.value))
        if resolved == own_key:
            continue
        if is_file_exported(writer, project, resolved, tsconfig_files):
            continue
        found.append(
            UnexportedDependency(
                specifier=site.value,
                resolved_path=resolved,
                relative_path_in_project=posixpath.relpath(resolved, source_root or "."),
            )
        )
    return found
