__path__ = __import__("pkgutil").extend_path(__path__, __name__)

from .bus import SpyBus
from .needle import MockNeedle
from .workspace import WorkspaceFactory
from .helpers import load_workspace, make_writer

__all__ = [
    "SpyBus",
    "MockNeedle",
    "WorkspaceFactory",
    "load_workspace",
    "make_writer",
]
