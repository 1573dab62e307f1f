import logging
import posixpath
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, Callable, Iterator, List, Optional, Sequence, Tuple

from tree_sitter_language_pack import get_parser

log = logging.getLogger(__name__)

LANGUAGE_BY_EXTENSION = {
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
}

# Any file holding a specifier contains one of these words.
SPECIFIER_KEYWORDS = ("import", "export", "require")


class SpecifierKind(str, Enum):
    IMPORT = "import"
    EXPORT = "export"
    DYNAMIC_IMPORT = "dynamic-import"
    REQUIRE = "require"


@dataclass(frozen=True)
class SpecifierSite:
    """A module specifier and the byte span of its text inside the quotes."""

    value: str
    kind: SpecifierKind
    start: int
    end: int


@dataclass
class SyntaxTree:
    path: str
    source: bytes
    tree: Any

    @property
    def root_node(self) -> Any:
        return self.tree.root_node

    def text(self, node: Any) -> str:
        return self.source[node.start_byte : node.end_byte].decode("utf-8")


@lru_cache(maxsize=None)
def _load_parser(language_name: str):
    return get_parser(language_name)


def language_for_path(path: str) -> str:
    _, ext = posixpath.splitext(path)
    return LANGUAGE_BY_EXTENSION.get(ext.lower(), "typescript")


def parse_source(path: str, content: str) -> Optional[SyntaxTree]:
    """Returns None when no parser can handle the file."""
    source = content.encode("utf-8")
    try:
        parser = _load_parser(language_for_path(path))
        tree = parser.parse(source)
    except (LookupError, ValueError, RuntimeError) as e:
        log.warning(f"Could not parse {path}: {e}")
        return None

    if tree.root_node.has_error:
        # Import statements are still recoverable from a partially broken file.
        log.debug(f"Syntax errors in {path}; continuing with recovered tree")
    return SyntaxTree(path=path, source=source, tree=tree)


def may_contain_specifiers(content: str) -> bool:
    return any(keyword in content for keyword in SPECIFIER_KEYWORDS)


def _first_argument(call: Any) -> Optional[Any]:
    args = call.child_by_field_name("arguments")
    if args is None:
        return None
    for child in args.named_children:
        if child.type != "comment":
            return child
    return None


def _is_require_callee(syntax: SyntaxTree, callee: Any) -> bool:
    if callee.type == "identifier":
        return syntax.text(callee) == "require"
    if callee.type == "member_expression":
        obj = callee.child_by_field_name("object")
        prop = callee.child_by_field_name("property")
        return (
            obj is not None
            and prop is not None
            and syntax.text(obj) == "require"
            and syntax.text(prop) == "resolve"
        )
    return False


def _string_site(syntax: SyntaxTree, node: Any, kind: SpecifierKind) -> Optional[SpecifierSite]:
    if node is None or node.type != "string":
        return None
    raw = syntax.source[node.start_byte : node.end_byte]
    if len(raw) < 2 or raw[:1] not in (b"'", b'"'):
        return None
    start, end = node.start_byte + 1, node.end_byte - 1
    return SpecifierSite(
        value=syntax.source[start:end].decode("utf-8"), kind=kind, start=start, end=end
    )


def _site_for_node(syntax: SyntaxTree, node: Any) -> Optional[SpecifierSite]:
    if node.type == "import_statement":
        source = node.child_by_field_name("source")
        if source is None:
            for child in node.named_children:
                if child.type == "import_require_clause":
                    source = child.child_by_field_name("source") or next(
                        (c for c in child.named_children if c.type == "string"), None
                    )
        return _string_site(syntax, source, SpecifierKind.IMPORT)

    if node.type == "export_statement":
        return _string_site(
            syntax, node.child_by_field_name("source"), SpecifierKind.EXPORT
        )

    if node.type == "call_expression":
        callee = node.child_by_field_name("function")
        if callee is None:
            return None
        if callee.type == "import":
            kind = SpecifierKind.DYNAMIC_IMPORT
        elif _is_require_callee(syntax, callee):
            kind = SpecifierKind.REQUIRE
        else:
            return None
        return _string_site(syntax, _first_argument(node), kind)

    return None


def iter_specifier_sites(syntax: SyntaxTree) -> Iterator[SpecifierSite]:
    """Yields every static, re-export, dynamic import and require specifier in source order."""
    stack = [syntax.root_node]
    while stack:
        node = stack.pop()
        site = _site_for_node(syntax, node)
        if site is not None:
            yield site
        if node.type == "string":
            continue
        stack.extend(reversed(node.named_children))


def find_specifiers(
    syntax: SyntaxTree, predicate: Optional[Callable[[str], bool]] = None
) -> List[SpecifierSite]:
    return [
        site
        for site in iter_specifier_sites(syntax)
        if predicate is None or predicate(site.value)
    ]


def apply_replacements(
    source: bytes, replacements: Sequence[Tuple[SpecifierSite, str]]
) -> str:
    """Splices new specifier text in, last site first so earlier offsets stay valid."""
    buffer = bytearray(source)
    for site, new_value in sorted(replacements, key=lambda r: r[0].start, reverse=True):
        buffer[site.start : site.end] = new_value.encode("utf-8")
    return buffer.decode("utf-8")
