import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Protocol


class ChangeKind(str, Enum):
    DELETE_DIR = "DELETE_DIR"
    DELETE = "DELETE"
    CREATE = "CREATE"
    UPDATE = "UPDATE"


# Removals run before writes so a new file never lands in a doomed directory.
_APPLY_ORDER = {
    ChangeKind.DELETE_DIR: 0,
    ChangeKind.DELETE: 1,
    ChangeKind.CREATE: 2,
    ChangeKind.UPDATE: 2,
}


@dataclass(frozen=True)
class FileChange:
    """One pending change to a workspace-relative POSIX path."""

    path: str
    kind: ChangeKind
    content: Optional[str] = None

    @property
    def is_write(self) -> bool:
        return self.kind in (ChangeKind.CREATE, ChangeKind.UPDATE)

    def describe(self) -> str:
        return f"[{self.kind.value}] {self.path}"


class FileSystemAdapter(Protocol):
    def write_text(self, path: Path, content: str) -> None: ...
    def unlink(self, path: Path) -> None: ...
    def rmtree(self, path: Path) -> None: ...


class RealFileSystem:
    def write_text(self, path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")

    def unlink(self, path: Path) -> None:
        if path.is_file():
            path.unlink()

    def rmtree(self, path: Path) -> None:
        if path.is_dir():
            shutil.rmtree(path)


class TransactionManager:
    """
    Holds the changes of one move run until they are committed to disk.

    Changes are keyed by path; recording a second change for the same path
    replaces the first. `preview` and `commit` share one order: directory
    removals, file removals, then writes, each group sorted by path.
    """

    def __init__(self, root_path: Path, fs: Optional[FileSystemAdapter] = None):
        self.root_path = root_path
        self.fs = fs or RealFileSystem()
        self._changes: Dict[str, FileChange] = {}

    def record(self, change: FileChange) -> None:
        self._changes[change.path] = change

    def pending(self) -> List[FileChange]:
        return sorted(
            self._changes.values(), key=lambda c: (_APPLY_ORDER[c.kind], c.path)
        )

    def preview(self) -> List[str]:
        return [change.describe() for change in self.pending()]

    def commit(self) -> None:
        for change in self.pending():
            target = self.root_path / change.path
            if change.kind is ChangeKind.DELETE_DIR:
                self.fs.rmtree(target)
            elif change.kind is ChangeKind.DELETE:
                self.fs.unlink(target)
            else:
                self.fs.write_text(target, change.content or "")
        self._changes.clear()

    @property
    def pending_count(self) -> int:
        return len(self._changes)
