from pathlib import Path
from typing import Any, Dict, Protocol


class FileHandler(Protocol):
    """Parses one message asset format into a flat key -> template mapping."""

    def match(self, path: Path) -> bool: ...

    def load(self, path: Path) -> Dict[str, Any]: ...
