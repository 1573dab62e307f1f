from pathlib import Path
from typing import Optional

from .exceptions import WorkspaceNotFoundError

ROOT_MARKERS = ("nx.json", ".git")


def find_workspace_root(start_path: Optional[Path] = None) -> Path:
    start = (start_path or Path.cwd()).resolve()
    # nx.json is the stronger signal, so a nested git checkout does not win.
    for marker in ROOT_MARKERS:
        current = start
        while True:
            if (current / marker).exists():
                return current
            if current.parent == current:
                break
            current = current.parent
    raise WorkspaceNotFoundError(str(start))
