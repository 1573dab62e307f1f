from typing import Any


class SemanticPointer:
    """
    A dotted message address built by attribute access.

    `L.move.error.source_not_found` is the pointer for the key
    "move.error.source_not_found". Pointers are immutable and hashable so
    they can be used as dictionary keys in tests.
    """

    __slots__ = ("_segments",)

    def __init__(self, *segments: str):
        object.__setattr__(self, "_segments", tuple(segments))

    def __getattr__(self, name: str) -> "SemanticPointer":
        if name.startswith("__"):
            raise AttributeError(name)
        return SemanticPointer(*self._segments, name)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("SemanticPointer is immutable")

    def __str__(self) -> str:
        return ".".join(self._segments)

    def __repr__(self) -> str:
        return f"<SemanticPointer: '{self}'>"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, SemanticPointer):
            return self._segments == other._segments
        return str(other) == str(self)

    def __hash__(self) -> int:
        return hash(str(self))


# Root anchor for all message addresses.
L = SemanticPointer()
