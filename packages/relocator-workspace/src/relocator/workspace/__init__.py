__path__ = __import__("pkgutil").extend_path(__path__, __name__)

from .core import Workspace
from .exceptions import WorkspaceError, WorkspaceNotFoundError
from .project import Project, ProjectType
from .tree import Tree, FileChange
from .utils import find_workspace_root

__all__ = [
    "Workspace",
    "WorkspaceError",
    "WorkspaceNotFoundError",
    "Project",
    "ProjectType",
    "Tree",
    "FileChange",
    "find_workspace_root",
]
