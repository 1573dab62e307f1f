from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Union

# The singleton is patched in place; modules hold their own reference to it.
import relocator.common
from relocator.common.messaging.protocols import Renderer
from relocator.needle import SemanticPointer


class SpyRenderer(Renderer):
    def __init__(self):
        self.messages: List[Dict[str, Any]] = []

    def render(self, message: str, level: str) -> None:
        pass

    def record(self, level: str, msg_id: SemanticPointer, params: Dict[str, Any]):
        self.messages.append({"level": level, "id": str(msg_id), "params": params})


class SpyBus:
    """
    Records every message sent through the global `relocator.common.bus`.

    The bus instance's methods are patched rather than the instance replaced,
    so modules that did `from relocator.common import bus` are covered too.
    """

    def __init__(self):
        self._spy_renderer = SpyRenderer()

    @contextmanager
    def patch(self, monkeypatch: Any):
        real_bus = relocator.common.bus

        def intercept_render(
            level: str, msg_id: Union[str, SemanticPointer], **kwargs: Any
        ) -> None:
            if isinstance(msg_id, SemanticPointer):
                self._spy_renderer.record(level, msg_id, kwargs)

        monkeypatch.setattr(real_bus, "_render", intercept_render)
        monkeypatch.setattr(real_bus, "_renderer", self._spy_renderer)
        yield self

    def get_messages(self, level: Optional[str] = None) -> List[Dict[str, Any]]:
        return [
            m for m in self._spy_renderer.messages if level is None or m["level"] == level
        ]

    def assert_id_called(self, msg_id: SemanticPointer, level: Optional[str] = None):
        key = str(msg_id)
        captured = self.get_messages()
        if not any(
            m["id"] == key and (level is None or m["level"] == level) for m in captured
        ):
            ids_seen = [m["id"] for m in captured]
            raise AssertionError(
                f"Message with ID '{key}' was not sent.\nCaptured IDs: {ids_seen}"
            )

    def assert_id_not_called(self, msg_id: SemanticPointer):
        key = str(msg_id)
        if any(m["id"] == key for m in self.get_messages()):
            raise AssertionError(f"Message with ID '{key}' was sent unexpectedly.")
