import json
from pathlib import Path
from typing import Any, Dict


def flatten_keys(data: Dict[str, Any], prefix: str = "") -> Dict[str, str]:
    """`{"move": {"file_moved": "..."}}` becomes `{"move.file_moved": "..."}`."""
    flat: Dict[str, str] = {}
    for key, value in data.items():
        full_key = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict):
            flat.update(flatten_keys(value, full_key))
        else:
            flat[full_key] = str(value)
    return flat


class JsonHandler:
    def match(self, path: Path) -> bool:
        return path.suffix.lower() == ".json"

    def load(self, path: Path) -> Dict[str, str]:
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object in {path}")
        return flatten_keys(data)
