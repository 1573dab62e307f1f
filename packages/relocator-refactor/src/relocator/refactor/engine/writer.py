from typing import List, Optional

from relocator.workspace.tree import Tree, normalize_path
from .cache import MoveCaches
from .syntax import SyntaxTree


class WorkspaceWriter:
    """
    The single gateway between the move engine and the tree.

    Every write or delete invalidates the caches for the touched path in the
    same call, so no caller can forget to.
    """

    def __init__(self, tree: Tree, caches: Optional[MoveCaches] = None):
        self.tree = tree
        self.caches = caches or MoveCaches()

    # --- Reads ---

    def read(self, path: str) -> Optional[str]:
        return self.caches.content.read(self.tree, normalize_path(path))

    def exists(self, path: str) -> bool:
        return self.caches.existence.exists(self.tree, normalize_path(path))

    def syntax(self, path: str) -> Optional[SyntaxTree]:
        return self.caches.syntax.parse(self.tree, normalize_path(path))

    def children(self, path: str) -> List[str]:
        return self.tree.children(normalize_path(path))

    def project_source_files(self, project_root: str) -> List[str]:
        return self.caches.project_files.files(self.tree, normalize_path(project_root))

    # --- Writes ---

    def write(self, path: str, content: str) -> None:
        p = normalize_path(path)
        created = not self.exists(p)
        self.tree.write(p, content)
        self.caches.invalidate_path(p)
        self.caches.existence.set(p, True)
        if created:
            self.caches.project_files.add_file(p)

    def delete(self, path: str) -> None:
        p = normalize_path(path)
        self.tree.delete(p)
        self.caches.invalidate_path(p)
        self.caches.existence.set(p, False)
        self.caches.project_files.remove_file(p)

    def delete_directory(self, path: str) -> None:
        p = normalize_path(path)
        for file_path in list(self.tree.visit_not_ignored_files(p)):
            self.caches.invalidate_path(file_path)
        self.tree.delete(p)
        self.caches.existence.clear()
        self.caches.project_files.remove_directory(p)
