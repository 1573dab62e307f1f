import logging
from dataclasses import dataclass, field
from typing import Any, FrozenSet, List, Optional, Sequence, Set

from relocator.workspace.project import Project
from .analysis import get_project_entry_point_paths
from .engine.syntax import SyntaxTree
from .engine.writer import WorkspaceWriter
from .paths import comparison_key, get_relative_import_specifier, resolve_specifier

log = logging.getLogger(__name__)

ANONYMOUS_DEFAULT = "<anonymous>"
EXPRESSION_DEFAULT = "<default>"
EMPTY_MODULE_MARKER = "export {};\n"

_NAMED_DEFAULT_TYPES = {
    "function_expression",
    "function",
    "generator_function",
    "class",
}
_PATTERN_NAME_TYPES = {"identifier", "shorthand_property_identifier_pattern"}


@dataclass(frozen=True)
class ExportLedger:
    """What one entrypoint exports."""

    reexports: FrozenSet[str] = field(default_factory=frozenset)
    exports: FrozenSet[str] = field(default_factory=frozenset)
    default_export: Optional[str] = None


def _pattern_names(syntax: SyntaxTree, node: Any) -> List[str]:
    if node.type in _PATTERN_NAME_TYPES:
        return [syntax.text(node)]
    names: List[str] = []
    for child in node.named_children:
        if child.type == "pair_pattern":
            value = child.child_by_field_name("value")
            if value is not None:
                names.extend(_pattern_names(syntax, value))
        elif child.type in ("assignment_pattern", "object_assignment_pattern"):
            left = child.child_by_field_name("left")
            if left is not None:
                names.extend(_pattern_names(syntax, left))
        else:
            names.extend(_pattern_names(syntax, child))
    return names


def _declared_names(syntax: SyntaxTree, declaration: Any) -> List[str]:
    if declaration.type in ("lexical_declaration", "variable_declaration"):
        names: List[str] = []
        for declarator in declaration.named_children:
            if declarator.type != "variable_declarator":
                continue
            name = declarator.child_by_field_name("name")
            if name is not None:
                names.extend(_pattern_names(syntax, name))
        return names
    if declaration.type == "ambient_declaration":
        names = []
        for child in declaration.named_children:
            names.extend(_declared_names(syntax, child))
        return names
    name = declaration.child_by_field_name("name")
    return [syntax.text(name)] if name is not None else []


def _default_name(syntax: SyntaxTree, node: Optional[Any]) -> str:
    if node is None:
        return EXPRESSION_DEFAULT
    if node.type == "identifier":
        return syntax.text(node)
    if node.type == "arrow_function":
        return ANONYMOUS_DEFAULT
    name = node.child_by_field_name("name")
    if name is not None:
        return syntax.text(name)
    if node.type in _NAMED_DEFAULT_TYPES or node.type.endswith("_declaration"):
        return ANONYMOUS_DEFAULT
    return EXPRESSION_DEFAULT


def parse_export_ledger(syntax: SyntaxTree) -> ExportLedger:
    reexports: Set[str] = set()
    exports: Set[str] = set()
    default_export: Optional[str] = None

    for node in syntax.root_node.named_children:
        if node.type != "export_statement":
            continue

        source = node.child_by_field_name("source")
        if source is not None:
            reexports.add(syntax.text(source)[1:-1])
            continue

        declaration = node.child_by_field_name("declaration")
        if any(child.type == "default" for child in node.children):
            default_export = _default_name(
                syntax, declaration or node.child_by_field_name("value")
            )
            continue

        if declaration is not None:
            exports.update(_declared_names(syntax, declaration))

        for clause in node.named_children:
            if clause.type != "export_clause":
                continue
            for spec in clause.named_children:
                if spec.type != "export_specifier":
                    continue
                local = spec.child_by_field_name("name")
                alias = spec.child_by_field_name("alias")
                exported = syntax.text(alias or local)
                if exported == "default":
                    default_export = syntax.text(local)
                else:
                    exports.add(exported)

    return ExportLedger(frozenset(reexports), frozenset(exports), default_export)


def get_export_ledger(writer: WorkspaceWriter, entrypoint: str) -> ExportLedger:
    content = writer.read(entrypoint) or ""
    cached = writer.caches.export_ledger.lookup(entrypoint, content)
    if cached is not None:
        return cached

    syntax = writer.syntax(entrypoint) if content else None
    ledger = parse_export_ledger(syntax) if syntax is not None else ExportLedger()
    writer.caches.export_ledger.store(entrypoint, content, ledger)
    return ledger


def specifier_targets_file(entrypoint: str, specifier: str, file_path: str) -> bool:
    """Extension-insensitive check that a relative re-export points at `file_path`."""
    if not specifier.startswith("."):
        return False
    return comparison_key(resolve_specifier(entrypoint, specifier)) == comparison_key(
        file_path
    )


def is_file_exported(
    writer: WorkspaceWriter,
    project: Project,
    file_path: str,
    tsconfig_files: Sequence[str] = (),
) -> bool:
    for entrypoint in get_project_entry_point_paths(writer, project, tsconfig_files):
        if not writer.exists(entrypoint):
            continue
        ledger = get_export_ledger(writer, entrypoint)
        if any(specifier_targets_file(entrypoint, s, file_path) for s in ledger.reexports):
            return True
    return False


def ensure_file_exported(
    writer: WorkspaceWriter,
    project: Project,
    file_path: str,
    tsconfig_files: Sequence[str] = (),
) -> Optional[str]:
    """
    Appends `export * from '<file>';` to the project's entrypoint.

    The first existing entrypoint candidate is used, or the first candidate
    when none exists yet. Returns the entrypoint written, or None when the
    file was already exported from it.
    """
    candidates = get_project_entry_point_paths(writer, project, tsconfig_files)
    entrypoint = next((c for c in candidates if writer.exists(c)), candidates[0])

    content = (writer.read(entrypoint) or "") if writer.exists(entrypoint) else ""
    if content:
        ledger = get_export_ledger(writer, entrypoint)
        if any(specifier_targets_file(entrypoint, s, file_path) for s in ledger.reexports):
            return None

    if content.strip() == EMPTY_MODULE_MARKER.strip():
        content = ""
    elif content and not content.endswith("\n"):
        content += "\n"

    specifier = get_relative_import_specifier(entrypoint, file_path)
    writer.write(entrypoint, f"{content}export * from '{specifier}';\n")
    log.debug(f"Added export of {file_path} to {entrypoint}")
    return entrypoint


def _statement_end(source: bytes, end: int) -> int:
    """Extends a statement span over trailing blanks and one line break."""
    while end < len(source) and source[end : end + 1] in (b" ", b"\t"):
        end += 1
    if source[end : end + 2] == b"\r\n":
        return end + 2
    if source[end : end + 1] == b"\n":
        return end + 1
    return end


def remove_file_export(
    writer: WorkspaceWriter,
    project: Project,
    file_path: str,
    tsconfig_files: Sequence[str] = (),
) -> List[str]:
    """
    Drops every re-export of `file_path` from every entrypoint candidate.

    An entrypoint left without content becomes `export {};` so it still
    loads as a module. Returns the entrypoints written.
    """
    written: List[str] = []
    for entrypoint in get_project_entry_point_paths(writer, project, tsconfig_files):
        if not writer.exists(entrypoint):
            continue
        syntax = writer.syntax(entrypoint)
        if syntax is None:
            continue

        spans = []
        has_statements = False
        for node in syntax.root_node.named_children:
            source = (
                node.child_by_field_name("source")
                if node.type == "export_statement"
                else None
            )
            if source is not None and specifier_targets_file(
                entrypoint, syntax.text(source)[1:-1], file_path
            ):
                spans.append((node.start_byte, _statement_end(syntax.source, node.end_byte)))
            elif node.type != "comment":
                has_statements = True

        if not spans:
            continue

        buffer = bytearray(syntax.source)
        for start, end in sorted(spans, reverse=True):
            del buffer[start:end]
        updated = buffer.decode("utf-8")
        if not has_statements:
            # Keep the entrypoint a module even when only comments remain.
            updated = (
                f"{updated.rstrip()}\n{EMPTY_MODULE_MARKER}"
                if updated.strip()
                else EMPTY_MODULE_MARKER
            )

        writer.write(entrypoint, updated)
        written.append(entrypoint)
        log.debug(f"Removed export of {file_path} from {entrypoint}")
    return written
