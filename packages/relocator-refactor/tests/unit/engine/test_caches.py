from unittest.mock import Mock

from relocator.refactor.engine.cache import (
    CompilerPathsCache,
    ExportLedgerCache,
    MemoCache,
    MoveCaches,
)
from relocator.refactor.engine.writer import WorkspaceWriter
from relocator.workspace import Tree


def _tree(tmp_path, files):
    for path, content in files.items():
        target = tmp_path / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    return Tree(tmp_path, use_git=False)


def test_memo_cache_counts_hits_and_misses():
    cache = MemoCache()
    assert cache.get("a") is None
    cache.set("a", 1)
    assert cache.get("a") == 1
    cache.invalidate("a")
    assert "a" not in cache

    stats = cache.stats()
    assert (stats.hits, stats.misses, stats.size) == (1, 1, 0)


def test_compiler_paths_load_once_until_cleared():
    cache = CompilerPathsCache()
    loader = Mock(return_value={"@a/x": ["libs/x/src/index.ts"]})

    cache.get_or_load(loader)
    cache.get_or_load(loader)
    assert loader.call_count == 1

    cache.clear()
    cache.get_or_load(loader)
    assert loader.call_count == 2


def test_compiler_paths_remember_missing_table():
    cache = CompilerPathsCache()
    loader = Mock(return_value=None)

    assert cache.get_or_load(loader) is None
    assert cache.get_or_load(loader) is None
    assert loader.call_count == 1


def test_export_ledger_entries_are_tied_to_content():
    cache = ExportLedgerCache()
    cache.store("index.ts", "export * from './a';", "ledger-a")

    assert cache.lookup("index.ts", "export * from './a';") == "ledger-a"
    assert cache.lookup("index.ts", "export * from './b';") is None
    assert "index.ts" not in cache


def test_writer_write_invalidates_content_and_syntax(tmp_path):
    # Arrange
    writer = WorkspaceWriter(_tree(tmp_path, {"libs/a/src/x.ts": "import './one';\n"}))
    first = writer.syntax("libs/a/src/x.ts")
    assert writer.syntax("libs/a/src/x.ts") is first

    # Act
    writer.write("libs/a/src/x.ts", "import './two';\n")

    # Assert
    assert writer.read("libs/a/src/x.ts") == "import './two';\n"
    second = writer.syntax("libs/a/src/x.ts")
    assert second is not first
    assert b"./two" in second.source


def test_writer_keeps_existence_and_project_files_in_step(tmp_path):
    # Arrange
    writer = WorkspaceWriter(_tree(tmp_path, {"libs/a/src/x.ts": "", "libs/a/README.md": ""}))
    assert writer.project_source_files("libs/a") == ["libs/a/src/x.ts"]
    assert not writer.exists("libs/a/src/y.ts")

    # Act
    writer.write("libs/a/src/y.ts", "export const y = 1;\n")
    writer.delete("libs/a/src/x.ts")

    # Assert
    assert writer.exists("libs/a/src/y.ts")
    assert not writer.exists("libs/a/src/x.ts")
    assert writer.project_source_files("libs/a") == ["libs/a/src/y.ts"]


def test_writer_delete_directory_drops_nested_roots(tmp_path):
    writer = WorkspaceWriter(
        _tree(tmp_path, {"libs/a/src/x.ts": "", "libs/b/src/y.ts": ""})
    )
    writer.project_source_files("libs/a")
    writer.project_source_files("libs/b")

    writer.delete_directory("libs/a")

    assert writer.project_source_files("libs/a") == []
    assert writer.project_source_files("libs/b") == ["libs/b/src/y.ts"]
    assert not writer.exists("libs/a/src/x.ts")


def test_move_caches_stats_and_clear(tmp_path):
    caches = MoveCaches()
    writer = WorkspaceWriter(_tree(tmp_path, {"x.ts": "export {};\n"}), caches)
    writer.read("x.ts")
    writer.read("x.ts")

    assert caches.stats()["content"].hits == 1
    caches.clear()
    assert caches.stats()["content"].size == 0
