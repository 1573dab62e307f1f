from typing import Any, Optional, Union

from relocator.needle import SemanticPointer, needle
from .protocols import Renderer

MessageId = Union[str, SemanticPointer]


class MessageBus:
    def __init__(self):
        self._renderer: Optional[Renderer] = None

    def set_renderer(self, renderer: Optional[Renderer]) -> None:
        self._renderer = renderer

    def _render(self, level: str, msg_id: MessageId, **kwargs: Any) -> None:
        if not self._renderer:
            return

        template = needle.get(msg_id)
        try:
            message = template.format(**kwargs)
        except (KeyError, IndexError):
            message = f"<formatting_error for '{msg_id}'>"

        self._renderer.render(message, level)

    def debug(self, msg_id: MessageId, **kwargs: Any) -> None:
        self._render("debug", msg_id, **kwargs)

    def info(self, msg_id: MessageId, **kwargs: Any) -> None:
        self._render("info", msg_id, **kwargs)

    def success(self, msg_id: MessageId, **kwargs: Any) -> None:
        self._render("success", msg_id, **kwargs)

    def warning(self, msg_id: MessageId, **kwargs: Any) -> None:
        self._render("warning", msg_id, **kwargs)

    def error(self, msg_id: MessageId, **kwargs: Any) -> None:
        self._render("error", msg_id, **kwargs)


bus = MessageBus()
