import posixpath
import re
import sys
import unicodedata

from .errors import MoveValidationError

UNIX_ONLY_CHARS = "<>:"
GLOB_CHARS = "*?[]{}"
_GLOB_PATTERN = re.compile(r"[*?\[\]{}]")


def is_glob_pattern(value: str) -> bool:
    return bool(_GLOB_PATTERN.search(value))


def _allowed_punctuation(allow_glob: bool) -> str:
    chars = "_@./\\ -"
    if sys.platform != "win32":
        chars += UNIX_ONLY_CHARS
    if allow_glob:
        chars += GLOB_CHARS + ","
    return chars


def is_valid_path_input(
    value: str, allow_unicode: bool = False, allow_glob: bool = False
) -> bool:
    """
    Whitelist check for user supplied paths and project names.

    ASCII mode accepts letters, digits and `_@./\\ -` (plus `<>:` off
    Windows). Unicode mode widens letters and digits to every Unicode
    letter, number, mark and connector punctuation.
    """
    if not isinstance(value, str):
        return False

    punctuation = _allowed_punctuation(allow_glob)
    for ch in value:
        if ch in punctuation:
            continue
        if ch.isascii() and ch.isalnum():
            continue
        if allow_unicode:
            category = unicodedata.category(ch)
            if category[0] in "LNM" or category == "Pc":
                continue
        return False
    return True


def sanitize_path(file_path: str) -> str:
    """Workspace-relative POSIX path; refuses anything that climbs out of the root."""
    normalized = file_path.replace("\\", "/")
    normalized = re.sub(r"^/", "", normalized)
    normalized = posixpath.normpath(normalized) if normalized else "."

    if normalized.startswith("..") or "/../" in normalized:
        raise MoveValidationError(
            f'Invalid path: path traversal detected in "{file_path}"'
        )
    return normalized

