import posixpath
import re
from typing import Iterable, List, Optional

ENTRYPOINT_EXTENSIONS = ("ts", "mts", "cts", "mjs", "cjs", "js", "tsx", "jsx")
PRIMARY_ENTRY_BASE_NAMES = ("public-api", "index")
SOURCE_FILE_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx", ".mts", ".mjs", ".cts", ".cjs")
# `.mjs`/`.cjs`/`.mts`/`.cts` specifiers must keep their extension.
STRIPPABLE_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx")


def build_file_names(base_names: Iterable[str]) -> List[str]:
    return [f"{base}.{ext}" for base in base_names for ext in ENTRYPOINT_EXTENSIONS]


def build_patterns(prefixes: Iterable[str], file_names: Iterable[str]) -> List[str]:
    names = list(file_names)
    return [f"{prefix}{name}" for prefix in prefixes for name in names]


def has_source_file_extension(file_path: str) -> bool:
    return file_path.endswith(SOURCE_FILE_EXTENSIONS)


def _strip(file_path: str, extensions: Iterable[str]) -> str:
    for ext in extensions:
        if file_path.endswith(ext):
            return file_path[: -len(ext)]
    return file_path


def strip_file_extension(file_path: str) -> str:
    """Drops only extensions that may be omitted inside a specifier."""
    return _strip(file_path, STRIPPABLE_EXTENSIONS)


def remove_source_file_extension(file_path: str) -> str:
    """Drops any source extension; used to build comparison keys."""
    return _strip(file_path, SOURCE_FILE_EXTENSIONS)


def join_posix(*parts: str) -> str:
    present = [p for p in parts if p]
    return posixpath.normpath(posixpath.join(*present)) if present else ""


def resolve_specifier(importer_path: str, specifier: str) -> str:
    """Absolute, workspace-relative location a relative specifier points at."""
    return posixpath.normpath(posixpath.join(posixpath.dirname(importer_path), specifier))


def comparison_key(file_path: str) -> str:
    return posixpath.normpath(remove_source_file_extension(file_path))


def get_relative_import_specifier(from_file: str, to_file: str) -> str:
    """Shortest `./`- or `../`-prefixed specifier from one file to another."""
    from_dir = posixpath.dirname("/" + from_file)
    relative = posixpath.relpath("/" + to_file, from_dir)
    if not relative.startswith("."):
        relative = "./" + relative
    return strip_file_extension(relative)


def build_target_path(
    target_root: str,
    base_dir: str,
    file_name: str,
    project_directory: Optional[str] = None,
) -> str:
    return join_posix(target_root, base_dir, project_directory or "", file_name)


def split_patterns(value: str) -> List[str]:
    """Splits on commas that are not inside `{...}` brace groups."""
    patterns: List[str] = []
    current = ""
    depth = 0
    for ch in value:
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
        elif ch == "," and depth == 0:
            if current.strip():
                patterns.append(current.strip())
            current = ""
            continue
        current += ch
    if current.strip():
        patterns.append(current.strip())
    return patterns


def glob_to_regex(pattern: str) -> "re.Pattern[str]":
    """
    Translates a workspace glob to a regex over POSIX paths.

    Supports `**` (any depth, including none), `*`, `?`, `[...]` classes
    and `{a,b}` alternation.
    """
    i, n = 0, len(pattern)
    out = ["^"]
    depth = 0
    while i < n:
        ch = pattern[i]
        if ch == "*":
            if pattern[i : i + 2] == "**":
                i += 2
                if pattern[i : i + 1] == "/":
                    i += 1
                    out.append("(?:.*/)?")
                else:
                    out.append(".*")
                continue
            out.append("[^/]*")
        elif ch == "?":
            out.append("[^/]")
        elif ch == "[":
            end = pattern.find("]", i + 1)
            if end == -1:
                out.append(re.escape(ch))
            else:
                body = pattern[i + 1 : end]
                if body.startswith("!"):
                    body = "^" + body[1:]
                out.append(f"[{body}]")
                i = end
        elif ch == "{":
            depth += 1
            out.append("(?:")
        elif ch == "}" and depth:
            depth -= 1
            out.append(")")
        elif ch == "," and depth:
            out.append("|")
        else:
            out.append(re.escape(ch))
        i += 1
    out.append("$")
    return re.compile("".join(out))
