import logging
from pathlib import Path
from typing import Dict, List, Optional

from .interfaces import FileHandler
from .handlers import JsonHandler

log = logging.getLogger(__name__)


class Loader:
    def __init__(self, handlers: Optional[List[FileHandler]] = None):
        self.handlers = handlers or [JsonHandler()]

    def _merge_file(self, path: Path, registry: Dict[str, str]) -> None:
        handler = next((h for h in self.handlers if h.match(path)), None)
        if handler is None:
            return
        try:
            content = handler.load(path)
        except (OSError, ValueError) as e:
            # A broken asset must not take the whole CLI down.
            log.warning(f"Skipping malformed message file {path}: {e}")
            return
        for key, value in content.items():
            registry[key] = str(value)

    def load_directory(self, root_path: Path) -> Dict[str, str]:
        registry: Dict[str, str] = {}
        if not root_path.is_dir():
            return registry

        # Sorted so that later files win deterministically.
        for file_path in sorted(p for p in root_path.rglob("*") if p.is_file()):
            self._merge_file(file_path, registry)
        return registry
