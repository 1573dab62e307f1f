import sys

import pytest

from relocator.refactor.errors import MoveValidationError
from relocator.refactor.security import (
    is_glob_pattern,
    is_valid_path_input,
    sanitize_path,
)


@pytest.mark.parametrize(
    "value",
    ["libs/a/src/lib/x.ts", "@scope/pkg", "my file.ts", "a_b-c.d", "libs\\a\\x.ts"],
)
def test_ascii_whitelist_accepts_plain_paths(value):
    assert is_valid_path_input(value)


@pytest.mark.parametrize("value", ["x;rm -rf", "a|b", "$(cmd)", "a\nb", "ä.ts", "a,b"])
def test_ascii_whitelist_rejects_other_characters(value):
    assert not is_valid_path_input(value)


def test_unicode_mode_accepts_letters_from_any_script():
    assert is_valid_path_input("libs/ünïcode/文件.ts", allow_unicode=True)
    assert not is_valid_path_input("libs/x;y.ts", allow_unicode=True)


def test_glob_characters_only_with_glob_flag():
    pattern = "libs/a/src/**/*.{ts,tsx}"
    assert not is_valid_path_input(pattern)
    assert is_valid_path_input(pattern, allow_glob=True)


@pytest.mark.skipif(sys.platform == "win32", reason="angle brackets are reserved on Windows")
def test_unix_only_characters():
    assert is_valid_path_input("a<b>:c")


def test_is_glob_pattern():
    assert is_glob_pattern("libs/**/*.ts")
    assert is_glob_pattern("libs/{a,b}.ts")
    assert is_glob_pattern("libs/x?.ts")
    assert not is_glob_pattern("libs/a/x.ts")


def test_sanitize_path_normalizes():
    assert sanitize_path("/libs//a/./src/x.ts") == "libs/a/src/x.ts"
    assert sanitize_path("libs\\a\\x.ts") == "libs/a/x.ts"
    assert sanitize_path("libs/a/../b/x.ts") == "libs/b/x.ts"


@pytest.mark.parametrize("value", ["../outside.ts", "libs/../../etc/passwd"])
def test_sanitize_path_rejects_traversal(value):
    with pytest.raises(MoveValidationError, match="path traversal detected"):
        sanitize_path(value)

