from unittest.mock import MagicMock

import pytest

from relocator.refactor.context import MoveContext
from relocator.refactor.strategy import (
    MoveStrategy,
    _handle_exported,
    _handle_non_exported_alias,
    select_strategy,
    should_export_file,
)
from relocator.workspace import Project

LIB1 = Project("lib1", "packages/lib1", "packages/lib1/src")
LIB2 = Project("lib2", "packages/lib2", "packages/lib2/src")


def _ctx(target=LIB2, exported=False, source_alias=None, target_alias=None, in_target=False):
    return MoveContext(
        source_path="packages/lib1/src/lib/x.ts",
        target_path=f"{target.source_root}/lib/x.ts",
        source_project=LIB1,
        target_project=target,
        content="export const x = 1;\n",
        source_root=LIB1.source_root,
        relative_path_in_source="lib/x.ts",
        is_exported=exported,
        source_import_path=source_alias,
        target_import_path=target_alias,
        has_imports_in_target=in_target,
    )


@pytest.mark.parametrize(
    "ctx, expected",
    [
        (_ctx(target=LIB1, exported=True, source_alias="@a", target_alias="@a"), MoveStrategy.SAME_PROJECT),
        (_ctx(exported=True, source_alias="@a", target_alias="@b"), MoveStrategy.EXPORTED),
        (_ctx(exported=True, target_alias="@b"), MoveStrategy.NON_EXPORTED_ALIAS),
        (_ctx(exported=False, source_alias="@a", target_alias="@b"), MoveStrategy.NON_EXPORTED_ALIAS),
        (_ctx(exported=True, source_alias="@a"), MoveStrategy.FALLBACK),
        (_ctx(), MoveStrategy.FALLBACK),
    ],
)
def test_strategy_precedence(ctx, expected):
    assert select_strategy(ctx) is expected


def test_should_export_file():
    assert should_export_file(_ctx(exported=True))
    assert should_export_file(_ctx(in_target=True))
    assert not should_export_file(_ctx())
    assert not should_export_file(_ctx(exported=True), skip_export=True)

    # Same-project moves only keep an export that already existed.
    assert should_export_file(_ctx(target=LIB1, exported=True))
    assert not should_export_file(_ctx(target=LIB1, in_target=True))


@pytest.mark.parametrize(
    "handler, ctx",
    [
        (_handle_exported, _ctx(exported=True, target_alias="@b")),
        (_handle_exported, _ctx(exported=True, source_alias="@a")),
        (_handle_non_exported_alias, _ctx(source_alias="@a")),
    ],
)
def test_alias_handlers_do_nothing_without_aliases(handler, ctx):
    session = MagicMock()

    handler(session, ctx)

    assert session.mock_calls == []
    assert session.writer.mock_calls == []
