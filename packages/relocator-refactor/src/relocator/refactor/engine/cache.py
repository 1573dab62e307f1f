import hashlib
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, List, Optional, Set, TypeVar

from relocator.workspace.tree import Tree
from ..paths import has_source_file_extension
from .syntax import SyntaxTree, parse_source

V = TypeVar("V")

_UNSET: Any = object()


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    size: int = 0


class MemoCache(Generic[V]):
    """A path-keyed memo table with explicit invalidation and no eviction."""

    def __init__(self) -> None:
        self._entries: Dict[str, V] = {}
        self._hits = 0
        self._misses = 0

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def get(self, key: str, default: Optional[V] = None) -> Optional[V]:
        if key in self._entries:
            self._hits += 1
            return self._entries[key]
        self._misses += 1
        return default

    def set(self, key: str, value: V) -> None:
        self._entries[key] = value

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()
        self._hits = 0
        self._misses = 0

    def stats(self) -> CacheStats:
        return CacheStats(hits=self._hits, misses=self._misses, size=len(self._entries))


class ContentCache(MemoCache[Optional[str]]):
    def read(self, tree: Tree, path: str) -> Optional[str]:
        if path in self._entries:
            self._hits += 1
            return self._entries[path]
        self._misses += 1
        content = tree.read(path)
        self._entries[path] = content
        return content


class SyntaxCache(MemoCache[SyntaxTree]):
    """Parsed trees derived from ContentCache; parse failures are remembered too."""

    def __init__(self, content: ContentCache) -> None:
        super().__init__()
        self._content = content
        self._failures: Set[str] = set()

    def parse(self, tree: Tree, path: str) -> Optional[SyntaxTree]:
        if path in self._failures:
            self._hits += 1
            return None
        cached = self.get(path)
        if cached is not None:
            return cached

        content = self._content.read(tree, path)
        if content is None:
            return None
        syntax = parse_source(path, content)
        if syntax is None:
            self._failures.add(path)
            return None
        self.set(path, syntax)
        return syntax

    def invalidate(self, key: str) -> None:
        super().invalidate(key)
        self._failures.discard(key)

    def clear(self) -> None:
        super().clear()
        self._failures.clear()


class CompilerPathsCache:
    """The workspace alias table, loaded once and dropped only on request."""

    def __init__(self) -> None:
        self._value: Any = _UNSET
        self._loads = 0

    def get_or_load(
        self, loader: Callable[[], Optional[Dict[str, Any]]]
    ) -> Optional[Dict[str, Any]]:
        if self._value is _UNSET:
            self._value = loader()
            self._loads += 1
        return self._value

    def clear(self) -> None:
        self._value = _UNSET

    def stats(self) -> CacheStats:
        loaded = self._value is not _UNSET
        return CacheStats(hits=0, misses=self._loads, size=1 if loaded else 0)


def content_digest(content: str) -> str:
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


class ExportLedgerCache(MemoCache[Any]):
    """Parsed entrypoint ledgers, each tied to the digest of the content it came from."""

    def lookup(self, path: str, content: str) -> Optional[Any]:
        entry = self.get(path)
        if entry is None:
            return None
        digest, ledger = entry
        if digest != content_digest(content):
            self.invalidate(path)
            return None
        return ledger

    def store(self, path: str, content: str, ledger: Any) -> None:
        self.set(path, (content_digest(content), ledger))


class FileExistenceCache(MemoCache[bool]):
    def exists(self, tree: Tree, path: str) -> bool:
        if path in self._entries:
            self._hits += 1
            return self._entries[path]
        self._misses += 1
        result = tree.exists(path)
        self._entries[path] = result
        return result


class ProjectFilesCache(MemoCache[List[str]]):
    """Source files per project root, kept in step with creations and deletions."""

    def files(self, tree: Tree, project_root: str) -> List[str]:
        cached = self.get(project_root)
        if cached is not None:
            return cached
        files = [
            path
            for path in tree.visit_not_ignored_files(project_root)
            if has_source_file_extension(path)
        ]
        self.set(project_root, files)
        return files

    def add_file(self, path: str) -> None:
        if not has_source_file_extension(path):
            return
        for root, files in self._entries.items():
            if _within(path, root) and path not in files:
                files.append(path)

    def remove_file(self, path: str) -> None:
        for root, files in self._entries.items():
            if path in files:
                files.remove(path)

    def remove_directory(self, directory: str) -> None:
        for root in list(self._entries):
            if _within(root, directory):
                del self._entries[root]
            else:
                self._entries[root] = [
                    f for f in self._entries[root] if not _within(f, directory)
                ]


def _within(path: str, directory: str) -> bool:
    return directory == "" or path == directory or path.startswith(directory + "/")


@dataclass
class MoveCaches:
    content: ContentCache = field(default_factory=ContentCache)
    syntax: SyntaxCache = field(init=False)
    compiler_paths: CompilerPathsCache = field(default_factory=CompilerPathsCache)
    export_ledger: ExportLedgerCache = field(default_factory=ExportLedgerCache)
    existence: FileExistenceCache = field(default_factory=FileExistenceCache)
    project_files: ProjectFilesCache = field(default_factory=ProjectFilesCache)

    def __post_init__(self) -> None:
        self.syntax = SyntaxCache(self.content)

    def invalidate_path(self, path: str) -> None:
        self.content.invalidate(path)
        self.syntax.invalidate(path)
        self.export_ledger.invalidate(path)
        self.existence.invalidate(path)

    def clear(self) -> None:
        self.content.clear()
        self.syntax.clear()
        self.compiler_paths.clear()
        self.export_ledger.clear()
        self.existence.clear()
        self.project_files.clear()

    def stats(self) -> Dict[str, CacheStats]:
        return {
            "content": self.content.stats(),
            "syntax": self.syntax.stats(),
            "compiler_paths": self.compiler_paths.stats(),
            "export_ledger": self.export_ledger.stats(),
            "existence": self.existence.stats(),
            "project_files": self.project_files.stats(),
        }
