import importlib

from relocator.common import MessageBus
from relocator.needle import L
from relocator.test_utils import MockNeedle


class RecordingRenderer:
    def __init__(self):
        self.rendered = []

    def render(self, message: str, level: str) -> None:
        self.rendered.append((level, message))


def test_bus_renders_templates_with_params(monkeypatch):
    # Arrange
    bus = MessageBus()
    renderer = RecordingRenderer()
    bus.set_renderer(renderer)

    # Act
    with MockNeedle({"move.file_moved": "Moved {source} -> {target}"}).patch(monkeypatch):
        bus.info(L.move.file_moved, source="a.ts", target="b.ts")
        bus.warning(L.unknown.key)

    # Assert
    assert renderer.rendered == [
        ("info", "Moved a.ts -> b.ts"),
        ("warning", "unknown.key"),
    ]


def test_bus_reports_formatting_errors_instead_of_raising(monkeypatch):
    bus = MessageBus()
    renderer = RecordingRenderer()
    bus.set_renderer(renderer)

    with MockNeedle({"x": "needs {param}"}).patch(monkeypatch):
        bus.error(L.x)

    assert renderer.rendered == [("error", "<formatting_error for 'x'>")]


def test_bus_without_renderer_is_silent():
    bus = MessageBus()
    bus.success(L.anything, value=1)


def test_packaged_assets_are_registered():
    from relocator.needle import needle

    template = needle.get(L.move.warning.unexported_alias_import, lang="en")
    assert "is not exported from the source project's entrypoint" in template


def test_bus_module_is_reachable_by_dotted_path():
    module = importlib.import_module("relocator.common.messaging.bus")

    assert isinstance(module.bus, MessageBus)
    assert hasattr(module.needle, "get")
