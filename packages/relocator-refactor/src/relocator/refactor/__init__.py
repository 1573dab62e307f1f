__path__ = __import__("pkgutil").extend_path(__path__, __name__)

from .collaborators import CommandFormatter, Formatter, ProjectRemover, TreeProjectRemover
from .context import MoveContext, MoveRequest, resolve_move_context
from .engine import MoveCaches, WorkspaceWriter
from .errors import MoveError, MoveResolutionError, MoveValidationError, PatternError
from .graph import DependencyEdge, LazyProjectGraph, WorkspaceGraphProvider
from .orchestrator import MoveResult, expand_patterns, move_files
from .strategy import MoveStrategy, select_strategy

__all__ = [
    "CommandFormatter",
    "Formatter",
    "ProjectRemover",
    "TreeProjectRemover",
    "MoveContext",
    "MoveRequest",
    "resolve_move_context",
    "MoveCaches",
    "WorkspaceWriter",
    "MoveError",
    "MoveResolutionError",
    "MoveValidationError",
    "PatternError",
    "DependencyEdge",
    "LazyProjectGraph",
    "WorkspaceGraphProvider",
    "MoveResult",
    "expand_patterns",
    "move_files",
    "MoveStrategy",
    "select_strategy",
]
