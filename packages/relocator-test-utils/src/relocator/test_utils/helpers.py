from pathlib import Path
from typing import Optional, Tuple

from relocator.refactor import MoveCaches, WorkspaceWriter
from relocator.workspace import Tree, Workspace


def load_workspace(root: Path) -> Tuple[Tree, Workspace]:
    tree = Tree(root, use_git=False)
    return tree, Workspace(tree)


def make_writer(root: Path, caches: Optional[MoveCaches] = None) -> WorkspaceWriter:
    return WorkspaceWriter(Tree(root, use_git=False), caches)
