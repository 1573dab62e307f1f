from pathlib import Path
from unittest.mock import Mock, call

from relocator.common.transaction import (
    ChangeKind,
    FileChange,
    FileSystemAdapter,
    TransactionManager,
)


def test_preview_orders_removals_before_writes():
    # Arrange
    tm = TransactionManager(Path("/ws"), fs=Mock(spec=FileSystemAdapter))

    # Act
    tm.record(FileChange("libs/b/src/lib/x.ts", ChangeKind.CREATE, "export const x = 1;"))
    tm.record(FileChange("libs/b/src/index.ts", ChangeKind.UPDATE, "export * from './lib/x';"))
    tm.record(FileChange("libs/a/src/lib/x.ts", ChangeKind.DELETE))
    tm.record(FileChange("libs/a", ChangeKind.DELETE_DIR))

    # Assert
    assert tm.preview() == [
        "[DELETE_DIR] libs/a",
        "[DELETE] libs/a/src/lib/x.ts",
        "[UPDATE] libs/b/src/index.ts",
        "[CREATE] libs/b/src/lib/x.ts",
    ]
    assert tm.pending_count == 4


def test_later_change_to_same_path_replaces_earlier():
    tm = TransactionManager(Path("/ws"), fs=Mock(spec=FileSystemAdapter))

    tm.record(FileChange("a.ts", ChangeKind.CREATE, "v1"))
    tm.record(FileChange("a.ts", ChangeKind.CREATE, "v2"))

    assert tm.pending_count == 1
    assert tm.pending()[0].content == "v2"


def test_commit_drives_the_file_system_adapter():
    # Arrange
    mock_fs = Mock(spec=FileSystemAdapter)
    root = Path("/ws")
    tm = TransactionManager(root, fs=mock_fs)
    tm.record(FileChange("new.ts", ChangeKind.CREATE, "content"))
    tm.record(FileChange("old.ts", ChangeKind.DELETE))
    tm.record(FileChange("libs/gone", ChangeKind.DELETE_DIR))

    # Act
    tm.commit()

    # Assert
    assert mock_fs.mock_calls == [
        call.rmtree(root / "libs/gone"),
        call.unlink(root / "old.ts"),
        call.write_text(root / "new.ts", "content"),
    ]
    assert tm.pending_count == 0


def test_real_file_system_applies_changes(tmp_path):
    # Arrange
    (tmp_path / "gone").mkdir()
    (tmp_path / "gone" / "file.ts").write_text("x", encoding="utf-8")
    (tmp_path / "old.ts").write_text("old", encoding="utf-8")
    tm = TransactionManager(tmp_path)

    # Act
    tm.record(FileChange("nested/dir/new.ts", ChangeKind.CREATE, "new"))
    tm.record(FileChange("old.ts", ChangeKind.DELETE))
    tm.record(FileChange("gone", ChangeKind.DELETE_DIR))
    tm.record(FileChange("never-existed.ts", ChangeKind.DELETE))
    tm.commit()

    # Assert
    assert (tmp_path / "nested/dir/new.ts").read_text(encoding="utf-8") == "new"
    assert not (tmp_path / "old.ts").exists()
    assert not (tmp_path / "gone").exists()
