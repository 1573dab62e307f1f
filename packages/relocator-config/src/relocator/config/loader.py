import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

if sys.version_info < (3, 11):
    import tomli as tomllib
else:
    import tomllib

CONFIG_FILE_NAME = "relocator.toml"


@dataclass
class RelocatorConfig:
    formatter: List[str] = field(default_factory=list)
    skip_format: bool = False
    skip_export: bool = False
    allow_unicode: bool = False
    remove_empty_project: bool = False
    ignore: List[str] = field(default_factory=list)
    tsconfig_files: List[str] = field(default_factory=list)
    source_path: Optional[Path] = None


def _find_config_file(search_path: Path) -> Path:
    current_dir = search_path.resolve()
    while True:
        candidate = current_dir / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
        pyproject = current_dir / "pyproject.toml"
        if pyproject.is_file() and "relocator" in _read_toml(pyproject).get("tool", {}):
            return pyproject
        if current_dir.parent == current_dir:
            break
        current_dir = current_dir.parent
    raise FileNotFoundError(
        f"Could not find {CONFIG_FILE_NAME} or [tool.relocator] in any parent directory."
    )


def _read_toml(path: Path) -> Dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _as_str_list(value: Any, key: str) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return list(value)
    raise ValueError(f"Config key '{key}' must be a string or a list of strings.")


def load_config_from_path(search_path: Path) -> RelocatorConfig:
    try:
        config_path = _find_config_file(search_path)
    except FileNotFoundError:
        return RelocatorConfig()

    data = _read_toml(config_path)
    if config_path.name == "pyproject.toml":
        data = data["tool"]["relocator"]

    return RelocatorConfig(
        formatter=_as_str_list(data.get("formatter"), "formatter"),
        skip_format=bool(data.get("skip_format", False)),
        skip_export=bool(data.get("skip_export", False)),
        allow_unicode=bool(data.get("allow_unicode", False)),
        remove_empty_project=bool(data.get("remove_empty_project", False)),
        ignore=_as_str_list(data.get("ignore"), "ignore"),
        tsconfig_files=_as_str_list(data.get("tsconfig_files"), "tsconfig_files"),
        source_path=config_path,
    )
