import fnmatch
import logging
import os
import posixpath
import subprocess
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Set, Union

from relocator.common.transaction import ChangeKind, FileChange, TransactionManager

log = logging.getLogger(__name__)

DEFAULT_IGNORED_DIRS = frozenset(
    {"node_modules", "dist", "tmp", "coverage", ".git", ".nx", ".relocator"}
)

PathLike = Union[str, Path]


def normalize_path(path: PathLike) -> str:
    """Workspace-relative POSIX form without a leading slash or `./` segments."""
    text = str(path).replace("\\", "/")
    if not text:
        return ""
    normalized = posixpath.normpath(text).lstrip("/")
    return "" if normalized == "." else normalized


class Tree:
    """
    An in-memory overlay over the workspace directory.

    Reads fall through to disk until a path is written or deleted; nothing
    reaches disk until the collected changes are staged into a
    TransactionManager and committed.
    """

    def __init__(
        self, root: Path, ignore: Iterable[str] = (), use_git: bool = True
    ):
        self.root = root
        self._ignore_patterns: List[str] = list(ignore)
        self._use_git = use_git
        self._disk_files: Optional[Set[str]] = None
        self._writes: Dict[str, str] = {}
        self._deleted: Set[str] = set()
        self._deleted_dirs: Set[str] = set()

    # --- Discovery ---

    def _discover_disk_files(self) -> Set[str]:
        if self._disk_files is not None:
            return self._disk_files

        paths: Set[str] = set()
        used_git = False
        if self._use_git and (self.root / ".git").exists():
            try:
                result = subprocess.run(
                    ["git", "ls-files", "--cached", "--others", "--exclude-standard"],
                    cwd=self.root,
                    capture_output=True,
                    text=True,
                    check=True,
                )
                paths = {
                    line.strip()
                    for line in result.stdout.splitlines()
                    if line.strip() and (self.root / line.strip()).is_file()
                }
                used_git = True
            except (subprocess.CalledProcessError, FileNotFoundError):
                log.warning("Git discovery failed, falling back to OS walk.")

        if not used_git:
            gitignore = self._read_gitignore()
            for dirpath, dirs, files in os.walk(self.root):
                dirs[:] = [
                    d for d in dirs
                    if not d.startswith(".") and d not in DEFAULT_IGNORED_DIRS
                ]
                for name in files:
                    rel = (Path(dirpath) / name).relative_to(self.root).as_posix()
                    if not _matches_any(rel, gitignore):
                        paths.add(rel)

        self._disk_files = {p for p in paths if not self.is_ignored(p)}
        return self._disk_files

    def _read_gitignore(self) -> List[str]:
        gitignore = self.root / ".gitignore"
        if not gitignore.is_file():
            return []
        patterns = []
        for line in gitignore.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if line and not line.startswith(("#", "!")):
                patterns.append(line.strip("/"))
        return patterns

    def is_ignored(self, path: PathLike) -> bool:
        normalized = normalize_path(path)
        if any(part in DEFAULT_IGNORED_DIRS for part in normalized.split("/")):
            return True
        return _matches_any(normalized, self._ignore_patterns)

    # --- Primitive file operations ---

    def _is_deleted(self, path: str) -> bool:
        if path in self._deleted:
            return True
        return any(_is_within(path, d) for d in self._deleted_dirs)

    def is_file(self, path: PathLike) -> bool:
        p = normalize_path(path)
        if p in self._writes:
            return True
        if self._is_deleted(p):
            return False
        return (self.root / p).is_file()

    def is_dir(self, path: PathLike) -> bool:
        p = normalize_path(path)
        if p == "":
            return True
        return not self.is_file(p) and bool(self.children(p))

    def exists(self, path: PathLike) -> bool:
        return self.is_file(path) or self.is_dir(path)

    def read(self, path: PathLike) -> Optional[str]:
        p = normalize_path(path)
        if p in self._writes:
            return self._writes[p]
        if self._is_deleted(p):
            return None
        try:
            return (self.root / p).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return None

    def write(self, path: PathLike, content: str) -> None:
        p = normalize_path(path)
        self._writes[p] = content
        self._deleted.discard(p)

    def delete(self, path: PathLike) -> None:
        p = normalize_path(path)
        if self.is_file(p):
            self._writes.pop(p, None)
            if (self.root / p).is_file():
                self._deleted.add(p)
            return

        for written in [w for w in self._writes if _is_within(w, p)]:
            del self._writes[written]
        if (self.root / p).is_dir():
            self._deleted_dirs.add(p)

    def children(self, path: PathLike) -> List[str]:
        p = normalize_path(path)
        names: Set[str] = set()

        disk_dir = self.root / p
        if disk_dir.is_dir() and not self._is_deleted(p):
            for entry in disk_dir.iterdir():
                child = f"{p}/{entry.name}" if p else entry.name
                if not self._is_deleted(child):
                    names.add(entry.name)

        prefix = f"{p}/" if p else ""
        for written in self._writes:
            if written.startswith(prefix):
                names.add(written[len(prefix):].split("/", 1)[0])
        return sorted(names)

    # --- Enumeration ---

    def all_files(self) -> List[str]:
        files = {f for f in self._discover_disk_files() if not self._is_deleted(f)}
        files.update(w for w in self._writes if not self.is_ignored(w))
        return sorted(files)

    def visit_not_ignored_files(self, directory: PathLike) -> Iterator[str]:
        d = normalize_path(directory)
        for f in self.all_files():
            if d == "" or _is_within(f, d):
                yield f

    # --- Change tracking ---

    def list_changes(self) -> List[FileChange]:
        changes: List[FileChange] = []
        for d in sorted(self._deleted_dirs):
            changes.append(FileChange(d, ChangeKind.DELETE_DIR))
        for f in sorted(self._deleted):
            if not any(_is_within(f, d) for d in self._deleted_dirs):
                changes.append(FileChange(f, ChangeKind.DELETE))
        for f in sorted(self._writes):
            disk_path = self.root / f
            if not disk_path.is_file() or f in self._deleted or any(
                _is_within(f, d) for d in self._deleted_dirs
            ):
                changes.append(FileChange(f, ChangeKind.CREATE, self._writes[f]))
            elif disk_path.read_text(encoding="utf-8") != self._writes[f]:
                changes.append(FileChange(f, ChangeKind.UPDATE, self._writes[f]))
        return changes

    def changed_files(self) -> List[str]:
        return [c.path for c in self.list_changes() if c.is_write]

    def stage(self, tm: TransactionManager) -> int:
        changes = self.list_changes()
        for change in changes:
            tm.record(change)
        return len(changes)

    def commit(self) -> None:
        tm = TransactionManager(self.root)
        self.stage(tm)
        tm.commit()
        self._writes.clear()
        self._deleted.clear()
        self._deleted_dirs.clear()
        self._disk_files = None


def _is_within(path: str, directory: str) -> bool:
    return directory == "" or path == directory or path.startswith(directory + "/")


def _matches_any(path: str, patterns: Iterable[str]) -> bool:
    name = path.rsplit("/", 1)[-1]
    for pattern in patterns:
        pattern = pattern.strip("/")
        if not pattern:
            continue
        if fnmatch.fnmatch(path, pattern) or fnmatch.fnmatch(name, pattern):
            return True
        if _is_within(path, pattern):
            return True
    return False
