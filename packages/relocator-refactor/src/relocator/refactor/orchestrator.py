import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set

from relocator.common import bus
from relocator.needle import L
from relocator.workspace.project import Project
from relocator.workspace.tree import Tree, normalize_path
from .analysis import is_project_empty
from .collaborators import Formatter, ProjectRemover, TreeProjectRemover
from .context import (
    MoveContext,
    MoveRequest,
    resolve_move_context,
    validate_file_input,
    validate_request,
)
from .engine.cache import MoveCaches
from .engine.writer import WorkspaceWriter
from .errors import MoveResolutionError, MoveValidationError, PatternError
from .graph import DependencyGraphProvider, LazyProjectGraph, WorkspaceGraphProvider
from .paths import glob_to_regex, split_patterns
from .security import is_glob_pattern, sanitize_path
from .strategy import MoveSession, MoveStrategy, execute_move, select_strategy

log = logging.getLogger(__name__)


@dataclass
class MoveResult:
    moved: Dict[str, str] = field(default_factory=dict)
    strategies: Dict[str, MoveStrategy] = field(default_factory=dict)
    removed_projects: List[str] = field(default_factory=list)
    graph_fetched: bool = False


def expand_patterns(tree: Tree, patterns: Sequence[str]) -> List[str]:
    """
    Literal paths pass through; globs are matched against every visible file.

    Order of first appearance is kept and duplicates are dropped, comparing
    normalised paths so `./a.ts` and `a.ts` count once. A glob matching
    nothing raises PatternError.
    """
    files: List[str] = []
    all_files: Optional[List[str]] = None
    for pattern in patterns:
        if not is_glob_pattern(pattern):
            matches = [pattern]
        else:
            if all_files is None:
                all_files = tree.all_files()
            regex = glob_to_regex(normalize_path(pattern))
            matches = [f for f in all_files if regex.match(f)]
            if not matches:
                raise PatternError(pattern)
        for match in matches:
            normalized = sanitize_path(match)
            if normalized not in files:
                files.append(normalized)
    return files


def move_files(
    tree: Tree,
    request: MoveRequest,
    projects: Dict[str, Project],
    graph_provider: Optional[DependencyGraphProvider] = None,
    formatter: Optional[Formatter] = None,
    remover: Optional[ProjectRemover] = None,
    caches: Optional[MoveCaches] = None,
    tsconfig_files: Sequence[str] = (),
) -> MoveResult:
    """
    Moves every file named by the request into the target project.

    All contexts are resolved before the first write, so a failing file
    aborts the batch with the tree untouched. Sources are deleted only after
    every target exists and every reference has been rewritten.
    """
    patterns = split_patterns(request.file)
    if not patterns:
        raise MoveValidationError("At least one file path must be provided")

    for pattern in patterns:
        validate_file_input(pattern, request.allow_unicode, is_glob_pattern(pattern))
    validate_request(request, projects)
    files = expand_patterns(tree, patterns)

    writer = WorkspaceWriter(tree, caches or MoveCaches())
    contexts = _resolve_contexts(writer, projects, request, files, tsconfig_files)

    graph = LazyProjectGraph(
        graph_provider or WorkspaceGraphProvider(writer, projects, tsconfig_files)
    )
    # Dependents must reflect the workspace before this batch adds any import.
    if any(select_strategy(ctx) is MoveStrategy.EXPORTED for ctx in contexts):
        graph.reverse_graph()
    session = MoveSession(writer, projects, graph, tsconfig_files)
    result = MoveResult()

    for ctx in contexts:
        strategy = execute_move(session, ctx, skip_export=request.skip_export)
        result.moved[ctx.source_path] = ctx.target_path
        result.strategies[ctx.source_path] = strategy
        bus.info(L.move.file_moved, source=ctx.source_path, target=ctx.target_path)

    for ctx in contexts:
        writer.delete(ctx.source_path)

    if request.remove_empty_project:
        result.removed_projects = _remove_empty_projects(
            writer,
            contexts,
            remover or TreeProjectRemover(writer, tsconfig_files),
            tsconfig_files,
        )

    if not request.skip_format and formatter is not None:
        formatter.format(tree)

    result.graph_fetched = graph.fetched
    log.debug(f"Cache stats: {writer.caches.stats()}")
    return result


def _resolve_contexts(
    writer: WorkspaceWriter,
    projects: Dict[str, Project],
    request: MoveRequest,
    files: Sequence[str],
    tsconfig_files: Sequence[str],
) -> List[MoveContext]:
    contexts: List[MoveContext] = []
    claimed: Set[str] = set()
    for file_path in files:
        ctx = resolve_move_context(
            writer,
            projects,
            request,
            file_path,
            is_glob=is_glob_pattern(file_path),
            tsconfig_files=tsconfig_files,
        )
        if ctx.target_path in claimed:
            raise MoveResolutionError(f'Target file "{ctx.target_path}" already exists')
        claimed.add(ctx.target_path)
        contexts.append(ctx)
    return contexts


def _remove_empty_projects(
    writer: WorkspaceWriter,
    contexts: Sequence[MoveContext],
    remover: ProjectRemover,
    tsconfig_files: Sequence[str],
) -> List[str]:
    removed: List[str] = []
    seen = set()
    for ctx in contexts:
        project = ctx.source_project
        if project.name in seen or ctx.is_same_project:
            continue
        seen.add(project.name)
        if not is_project_empty(writer, project, tsconfig_files):
            continue
        try:
            remover.remove(project)
        except Exception as e:
            bus.warning(L.move.warning.remove_project_failed, project=project.name, error=str(e))
            continue
        removed.append(project.name)
        bus.info(L.move.project_removed, project=project.name)
    return removed
