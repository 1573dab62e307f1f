import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Sequence

from relocator.common import bus
from relocator.needle import L
from relocator.workspace.project import Project
from .context import MoveContext
from .engine.writer import WorkspaceWriter
from .exports import ensure_file_exported, remove_file_export
from .graph import LazyProjectGraph
from .imports import (
    references_file,
    update_import_paths_in_dependent_projects,
    update_import_paths_in_project,
    update_import_paths_to_package_alias,
    update_imports_to_relative,
    update_relative_imports_in_moved_file,
    update_relative_imports_to_alias_in_moved_file,
    update_specifiers_matching,
)
from .paths import get_relative_import_specifier

log = logging.getLogger(__name__)


class MoveStrategy(str, Enum):
    SAME_PROJECT = "same-project"
    EXPORTED = "exported"
    NON_EXPORTED_ALIAS = "non-exported-alias"
    FALLBACK = "fallback"


def select_strategy(ctx: MoveContext) -> MoveStrategy:
    if ctx.is_same_project:
        return MoveStrategy.SAME_PROJECT
    if ctx.is_exported and ctx.source_import_path and ctx.target_import_path:
        return MoveStrategy.EXPORTED
    if ctx.target_import_path:
        return MoveStrategy.NON_EXPORTED_ALIAS
    return MoveStrategy.FALLBACK


def should_export_file(ctx: MoveContext, skip_export: bool = False) -> bool:
    if skip_export:
        return False
    if ctx.is_same_project:
        return ctx.is_exported
    return ctx.is_exported or ctx.has_imports_in_target


@dataclass
class MoveSession:
    """State shared by every file of one batch."""

    writer: WorkspaceWriter
    projects: Dict[str, Project]
    graph: LazyProjectGraph
    tsconfig_files: Sequence[str] = ()
    strategies_used: List[MoveStrategy] = field(default_factory=list)


def _handle_same_project(session: MoveSession, ctx: MoveContext) -> None:
    update_import_paths_in_project(
        session.writer, ctx.source_project, ctx.source_path, ctx.target_path
    )


def _handle_exported(session: MoveSession, ctx: MoveContext) -> None:
    if not ctx.source_import_path or not ctx.target_import_path:
        return
    update_import_paths_in_dependent_projects(
        session.writer,
        session.graph,
        session.projects,
        ctx.source_project_name,
        ctx.source_import_path,
        ctx.target_import_path,
        target_project_name=ctx.target_project_name,
        target_file=ctx.target_path,
    )
    remove_file_export(
        session.writer, ctx.source_project, ctx.source_path, session.tsconfig_files
    )
    update_import_paths_to_package_alias(
        session.writer,
        ctx.source_project,
        ctx.source_path,
        ctx.target_import_path,
        exclude=(ctx.target_path,),
    )


def _handle_non_exported_alias(session: MoveSession, ctx: MoveContext) -> None:
    if not ctx.target_import_path:
        return
    update_import_paths_to_package_alias(
        session.writer,
        ctx.source_project,
        ctx.source_path,
        ctx.target_import_path,
        exclude=(ctx.target_path,),
    )


def _handle_fallback(session: MoveSession, ctx: MoveContext) -> None:
    update_import_paths_in_project(
        session.writer, ctx.source_project, ctx.source_path, ctx.target_path
    )


_HANDLERS: Dict[MoveStrategy, Callable[[MoveSession, MoveContext], None]] = {
    MoveStrategy.SAME_PROJECT: _handle_same_project,
    MoveStrategy.EXPORTED: _handle_exported,
    MoveStrategy.NON_EXPORTED_ALIAS: _handle_non_exported_alias,
    MoveStrategy.FALLBACK: _handle_fallback,
}


def update_moved_file_imports_if_needed(session: MoveSession, ctx: MoveContext) -> None:
    if ctx.is_same_project:
        update_relative_imports_in_moved_file(
            session.writer, ctx.source_path, ctx.target_path
        )
    elif ctx.source_import_path:
        update_relative_imports_to_alias_in_moved_file(
            session.writer,
            ctx.source_path,
            ctx.target_path,
            ctx.source_project,
            ctx.source_import_path,
            session.tsconfig_files,
        )


def update_target_project_imports_if_needed(session: MoveSession, ctx: MoveContext) -> None:
    """Points the target project's existing references to the file at its new location."""
    if ctx.is_same_project or not ctx.has_imports_in_target or not ctx.target_import_path:
        return

    bus.debug(L.move.debug.target_to_relative, project=ctx.target_project_name)
    if ctx.source_import_path:
        update_imports_to_relative(
            session.writer,
            ctx.target_project,
            ctx.source_import_path,
            ctx.target_path,
            exclude=(ctx.target_path,),
        )
        return

    for importer in session.writer.project_source_files(ctx.target_project.root):
        if importer == ctx.target_path:
            continue
        new_specifier = get_relative_import_specifier(importer, ctx.target_path)
        update_specifiers_matching(
            session.writer,
            importer,
            lambda s, importer=importer: references_file(importer, s, ctx.source_path),
            lambda _: new_specifier,
        )


def execute_move(session: MoveSession, ctx: MoveContext, skip_export: bool = False) -> MoveStrategy:
    """
    Applies one move context: creates the target, rewrites references and
    maintains entrypoints. The source file is left in place; the batch
    deletes every source once all contexts have run.
    """
    writer = session.writer
    writer.write(ctx.target_path, ctx.content)
    update_moved_file_imports_if_needed(session, ctx)

    strategy = select_strategy(ctx)
    log.debug(f"Moving {ctx.source_path} -> {ctx.target_path} ({strategy.value})")
    _HANDLERS[strategy](session, ctx)
    session.strategies_used.append(strategy)

    update_target_project_imports_if_needed(session, ctx)

    if should_export_file(ctx, skip_export) and ctx.target_import_path:
        entrypoint = ensure_file_exported(
            writer, ctx.target_project, ctx.target_path, session.tsconfig_files
        )
        if entrypoint:
            bus.debug(L.move.debug.export_added, file=ctx.target_path, entrypoint=entrypoint)
    return strategy
