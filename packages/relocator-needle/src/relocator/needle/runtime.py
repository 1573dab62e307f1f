import os
from pathlib import Path
from typing import Dict, List, Optional, Set, Union

from .loader import Loader
from .pointer import SemanticPointer

LANG_ENV_VAR = "RELOCATOR_LANG"
ROOT_MARKERS = ("nx.json", ".git")


class Needle:
    """
    Resolves semantic pointers to message templates.

    Roots are searched in order. Each root may provide `needle/<lang>/`
    (packaged assets) and `.relocator/needle/<lang>/` (workspace overrides);
    later roots override earlier ones.
    """

    def __init__(self, roots: Optional[List[Path]] = None):
        self.default_lang = "en"
        self.roots: List[Path] = list(roots) if roots else [self._find_workspace_root()]
        self._registry: Dict[str, Dict[str, str]] = {}
        self._loaded_langs: Set[str] = set()
        self._loader = Loader()

    def add_root(self, path: Path) -> None:
        """Registers a lower-priority root (e.g. a package's asset directory)."""
        if path not in self.roots:
            self.roots.insert(0, path)
            self.reset()

    def reset(self) -> None:
        self._registry.clear()
        self._loaded_langs.clear()

    def _find_workspace_root(self, start_dir: Optional[Path] = None) -> Path:
        start = (start_dir or Path.cwd()).resolve()
        current = start
        while current.parent != current:
            if any((current / marker).exists() for marker in ROOT_MARKERS):
                return current
            current = current.parent
        return start

    def _ensure_lang_loaded(self, lang: str) -> None:
        if lang in self._loaded_langs:
            return

        merged: Dict[str, str] = {}
        for root in self.roots:
            merged.update(self._loader.load_directory(root / "needle" / lang))
            merged.update(
                self._loader.load_directory(root / ".relocator" / "needle" / lang)
            )

        self._registry[lang] = merged
        self._loaded_langs.add(lang)

    def get(
        self, pointer: Union[SemanticPointer, str], lang: Optional[str] = None
    ) -> str:
        """
        Lookup order: requested language, then the default language, then
        the key itself.
        """
        key = str(pointer)
        target_lang = lang or os.getenv(LANG_ENV_VAR, self.default_lang)

        self._ensure_lang_loaded(target_lang)
        value = self._registry[target_lang].get(key)
        if value is not None:
            return value

        if target_lang != self.default_lang:
            self._ensure_lang_loaded(self.default_lang)
            value = self._registry[self.default_lang].get(key)
            if value is not None:
                return value

        return key


needle = Needle()
