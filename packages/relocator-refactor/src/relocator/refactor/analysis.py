import json
import logging
import posixpath
import re
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from relocator.workspace.project import Project
from .engine.writer import WorkspaceWriter
from .paths import (
    PRIMARY_ENTRY_BASE_NAMES,
    build_file_names,
    build_patterns,
    has_source_file_extension,
    join_posix,
)

log = logging.getLogger(__name__)

DEFAULT_TSCONFIG_FILES = ("tsconfig.base.json", "tsconfig.json")

PRIMARY_ENTRY_FILE_NAMES = build_file_names(PRIMARY_ENTRY_BASE_NAMES)
INDEX_FILE_PATTERNS = build_patterns(
    ["", "src/", "lib/"], PRIMARY_ENTRY_FILE_NAMES
) + build_patterns(["", "src/"], build_file_names(["main"]))

_JSONC_TOKENS = re.compile(
    r'"(?:\\.|[^"\\])*"|//[^\n]*|/\*.*?\*/|,(?=\s*[}\]])', re.DOTALL
)


def loads_jsonc(text: str) -> Any:
    """json.loads for tsconfig files: tolerates comments and trailing commas."""

    def _keep_strings(match: "re.Match[str]") -> str:
        token = match.group(0)
        return token if token.startswith('"') else ""

    return json.loads(_JSONC_TOKENS.sub(_keep_strings, text))


def _within(path: str, directory: str) -> bool:
    return directory == "" or path == directory or path.startswith(directory + "/")


# --- Project ownership ---


def find_project_for_file(
    projects: Dict[str, Project], file_path: str
) -> Optional[Project]:
    """The project whose root or source root is the longest prefix of `file_path`."""
    best: Optional[Project] = None
    best_len = -1
    for project in projects.values():
        for root in {project.root, project.effective_source_root}:
            if root and not file_path.startswith(root + "/"):
                continue
            if len(root) > best_len:
                best, best_len = project, len(root)
    return best


def derive_project_directory_from_source(
    source_file_path: str, project: Project
) -> Optional[str]:
    relative = posixpath.relpath(source_file_path, project.effective_source_root or ".")
    prefix = project.base_dir + "/"
    if not relative.startswith(prefix):
        return None
    directory = posixpath.dirname(relative[len(prefix):])
    return directory or None


# --- Alias table ---


def _tsconfig_candidates(writer: WorkspaceWriter, candidates: Sequence[str]) -> List[str]:
    if candidates:
        return list(candidates)
    files = list(DEFAULT_TSCONFIG_FILES)
    files += [
        name
        for name in writer.children("")
        if name.startswith("tsconfig.") and name.endswith(".json") and name not in files
    ]
    return files


def _iter_alias_tables(
    writer: WorkspaceWriter, candidates: Sequence[str]
) -> Iterator[Tuple[str, Dict[str, Any]]]:
    for tsconfig_path in _tsconfig_candidates(writer, candidates):
        content = writer.read(tsconfig_path)
        if not content:
            continue
        try:
            tsconfig = loads_jsonc(content)
        except ValueError as e:
            log.warning(f"Could not parse {tsconfig_path}: {e}")
            continue
        if not isinstance(tsconfig, dict):
            continue
        paths = (tsconfig.get("compilerOptions") or {}).get("paths")
        if isinstance(paths, dict) and paths:
            yield tsconfig_path, paths


def read_compiler_paths(
    writer: WorkspaceWriter, candidates: Sequence[str] = ()
) -> Optional[Dict[str, Any]]:
    """The first `compilerOptions.paths` table found, memoized for the run."""
    return writer.caches.compiler_paths.get_or_load(
        lambda: next((paths for _, paths in _iter_alias_tables(writer, candidates)), None)
    )


def find_alias_table_file(
    writer: WorkspaceWriter, candidates: Sequence[str] = ()
) -> Optional[str]:
    return next((path for path, _ in _iter_alias_tables(writer, candidates)), None)


def to_first_path(entry: Any) -> Optional[str]:
    if isinstance(entry, str):
        return entry
    if isinstance(entry, list):
        return next((e for e in entry if isinstance(e, str)), None)
    return None


def is_wildcard_alias(alias: str, path: str) -> bool:
    return "*" in alias and "*" in path


def is_index_file_path(path: str) -> bool:
    return any(
        path == pattern or path.endswith("/" + pattern) for pattern in INDEX_FILE_PATTERNS
    )


def points_to_project_index(
    writer: WorkspaceWriter, path: str, source_root: str
) -> bool:
    normalized = posixpath.normpath(path)
    if not _within(normalized, source_root):
        return False
    if writer.exists(normalized):
        return True
    return is_index_file_path(normalized)


def _wildcard_candidates(project: Project) -> List[str]:
    names = [posixpath.basename(project.root), project.name]
    return [n for i, n in enumerate(names) if n and n not in names[:i]]


def get_project_import_path(
    writer: WorkspaceWriter, project: Project, candidates: Sequence[str] = ()
) -> Optional[str]:
    """
    The alias other projects use to import `project`, if any.

    Wildcard entries (`"@scope/*": ["libs/*/src/index.ts"]`) are matched by
    substituting the project's directory name, then its name. This is a
    heuristic and does not implement TypeScript's full pattern semantics.
    """
    paths = read_compiler_paths(writer, candidates)
    if not paths:
        return None

    source_root = project.effective_source_root
    for alias, entry in paths.items():
        path = to_first_path(entry)
        if not path:
            continue
        if is_wildcard_alias(alias, path):
            for substitute in _wildcard_candidates(project):
                if points_to_project_index(
                    writer, path.replace("*", substitute), source_root
                ):
                    return alias.replace("*", substitute)
            continue
        if points_to_project_index(writer, path, source_root):
            return alias
    return None


# --- Entrypoints ---


def get_fallback_entry_point_paths(project: Project) -> List[str]:
    source_root = project.effective_source_root
    return [join_posix(source_root, name) for name in PRIMARY_ENTRY_FILE_NAMES] + [
        join_posix(project.root, "src", name) for name in PRIMARY_ENTRY_FILE_NAMES
    ]


def get_project_entry_point_paths(
    writer: WorkspaceWriter, project: Project, candidates: Sequence[str] = ()
) -> List[str]:
    """All candidate entrypoints, alias targets first, de-duplicated in order."""
    found: List[str] = []

    def _add(values: Iterable[str]) -> None:
        for value in values:
            normalized = posixpath.normpath(value)
            if normalized not in found:
                found.append(normalized)

    source_root = project.effective_source_root
    paths = read_compiler_paths(writer, candidates) or {}
    for alias, entry in paths.items():
        path = to_first_path(entry)
        if not path:
            continue
        if is_wildcard_alias(alias, path):
            path = next(
                (
                    path.replace("*", sub)
                    for sub in _wildcard_candidates(project)
                    if points_to_project_index(writer, path.replace("*", sub), source_root)
                ),
                "",
            )
        if path and points_to_project_index(writer, path, source_root):
            _add([path])

    _add(get_fallback_entry_point_paths(project))
    return found


def is_project_empty(
    writer: WorkspaceWriter, project: Project, candidates: Sequence[str] = ()
) -> bool:
    """True when no source file other than an entrypoint remains in the project."""
    entrypoints = set(get_project_entry_point_paths(writer, project, candidates))
    if not entrypoints:
        entrypoints.add(join_posix(project.effective_source_root, PRIMARY_ENTRY_FILE_NAMES[0]))

    # Read the tree directly: this runs after deletions and must see current state.
    for file_path in writer.tree.visit_not_ignored_files(project.effective_source_root):
        if has_source_file_extension(file_path) and file_path not in entrypoints:
            return False
    return True
