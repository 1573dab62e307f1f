__path__ = __import__("pkgutil").extend_path(__path__, __name__)

from pathlib import Path

from relocator.needle import needle
from .messaging.bus import bus, MessageBus

# Packaged templates act as the lowest-priority root.
needle.add_root(Path(__file__).parent / "assets")

__all__ = ["bus", "MessageBus"]
