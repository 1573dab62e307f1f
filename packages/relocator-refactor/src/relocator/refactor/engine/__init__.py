from .cache import CacheStats, MoveCaches
from .syntax import SpecifierKind, SpecifierSite, SyntaxTree, parse_source
from .writer import WorkspaceWriter

__all__ = [
    "CacheStats",
    "MoveCaches",
    "SpecifierKind",
    "SpecifierSite",
    "SyntaxTree",
    "parse_source",
    "WorkspaceWriter",
]
