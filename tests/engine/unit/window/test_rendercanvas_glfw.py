from __future__ import annotations

import sys
from types import ModuleType, SimpleNamespace

import pytest

from engine.api.input_events import KeyEvent
from engine.api.window import WindowCloseEvent, WindowResizeEvent
from engine.window.rendercanvas_glfw import (
    RenderCanvasWindow,
    create_rendercanvas_window,
    run_backend_loop,
    stop_backend_loop,
)


class _Loop:
    def __init__(self) -> None:
        self.ran = 0
        self.stopped = 0

    def run(self) -> None:
        self.ran += 1

    def stop(self) -> None:
        self.stopped += 1


class _AutoWithLoop:
    def __init__(self) -> None:
        self.loop = _Loop()


class _AutoWithRun:
    def __init__(self) -> None:
        self.ran = 0

    def run(self) -> None:
        self.ran += 1


class _Canvas:
    def __init__(self, physical_size: tuple[int, int] = (640, 480)) -> None:
        self.handlers: dict[str, list] = {}
        self.closed = 0
        self.request_draw_calls = 0
        self.draw_functions: list[object] = []
        self.contexts: list[str] = []
        self._physical_size = physical_size

    def add_event_handler(self, handler, *event_types: str) -> None:
        for event_type in event_types:
            self.handlers.setdefault(event_type, []).append(handler)

    def close(self) -> None:
        self.closed += 1

    def request_draw(self, draw_function=None) -> None:
        if draw_function is not None:
            self.draw_functions.append(draw_function)
            return
        self.request_draw_calls += 1

    def get_physical_size(self) -> tuple[int, int]:
        return self._physical_size

    def get_context(self, kind: str) -> object:
        self.contexts.append(kind)
        return object()

    def emit(self, event_type: str, **payload) -> None:
        event = {"event_type": event_type, **payload}
        for handler in self.handlers.get(event_type, []):
            handler(event)

    def emit_obj(self, event_type: str, **payload) -> None:
        event = SimpleNamespace(event_type=event_type, **payload)
        for handler in self.handlers.get(event_type, []):
            handler(event)


def _window(canvas: _Canvas, auto: object | None = None, **kwargs) -> RenderCanvasWindow:
    return RenderCanvasWindow(canvas=canvas, _rc_auto=auto or _AutoWithLoop(), **kwargs)


def test_run_and_stop_backend_loop_helpers() -> None:
    with_loop = _AutoWithLoop()
    run_backend_loop(with_loop)
    assert with_loop.loop.ran == 1
    stop_backend_loop(with_loop)
    assert with_loop.loop.stopped == 1

    with_run = _AutoWithRun()
    run_backend_loop(with_run)
    assert with_run.ran == 1


def test_run_backend_loop_raises_when_no_entrypoint() -> None:
    with pytest.raises(RuntimeError):
        run_backend_loop(object())


def test_window_binds_resize_close_and_key_handlers() -> None:
    canvas = _Canvas()
    _window(canvas)

    assert set(canvas.handlers) == {"resize", "close", "key_down", "key_up"}


def test_window_binds_catch_all_handler_when_tracing() -> None:
    canvas = _Canvas()
    _window(canvas, _debug_events=True)

    assert "*" in canvas.handlers


def test_window_surface_exposes_canvas_as_provider() -> None:
    canvas = _Canvas()
    window = _window(canvas)

    surface = window.create_surface()

    assert surface.backend == "rendercanvas.glfw"
    assert surface.provider is canvas
    assert surface.surface_id == str(id(canvas))


def test_window_normalizes_resize_with_pixel_ratio() -> None:
    canvas = _Canvas()
    window = _window(canvas)

    canvas.emit("resize", size=(640.0, 480.0), pixel_ratio=1.5)

    assert window.poll_events() == (
        WindowResizeEvent(
            logical_width=640.0,
            logical_height=480.0,
            physical_width=960,
            physical_height=720,
            dpi_scale=1.5,
        ),
    )
    assert window.poll_events() == ()
    assert canvas.request_draw_calls == 1


def test_window_resize_accepts_width_height_objects() -> None:
    canvas = _Canvas()
    window = _window(canvas)

    canvas.emit_obj("resize", width=320, height=240, pixel_ratio=0)

    (event,) = window.poll_events()
    assert isinstance(event, WindowResizeEvent)
    assert (event.physical_width, event.physical_height) == (320, 240)
    assert event.dpi_scale == 1.0


def test_window_ignores_malformed_resize() -> None:
    canvas = _Canvas()
    window = _window(canvas)

    canvas.emit("resize", size="bad")

    assert window.poll_events() == ()


def test_window_queues_close_and_key_events_in_order() -> None:
    canvas = _Canvas()
    window = _window(canvas)

    canvas.emit("key_down", key="Escape", modifiers=["Shift"])
    canvas.emit_obj("key_up", key="Escape")
    canvas.emit("key_down", key=None)
    canvas.emit("close")

    assert window.poll_events() == (
        KeyEvent("key_down", "Escape", ("Shift",)),
        KeyEvent("key_up", "Escape", ()),
        WindowCloseEvent(),
    )
    assert canvas.request_draw_calls == 3


def test_window_set_draw_handler_registers_draw_function() -> None:
    canvas = _Canvas()
    window = _window(canvas)

    def _draw() -> None:
        return

    window.set_draw_handler(_draw)

    assert canvas.draw_functions == [_draw]


def test_window_set_draw_handler_requires_request_draw() -> None:
    window = _window(SimpleNamespace())  # type: ignore[arg-type]

    with pytest.raises(RuntimeError):
        window.set_draw_handler(lambda: None)


def test_window_physical_size_clamps_to_one_pixel() -> None:
    window = _window(_Canvas(physical_size=(1280, 960)))

    assert window.physical_size() == (1280, 960)
    assert _window(_Canvas(physical_size=(0, 0))).physical_size() == (1, 1)


def test_window_run_and_close_drive_backend_loop() -> None:
    auto = _AutoWithLoop()
    canvas = _Canvas()
    window = _window(canvas, auto)

    window.run_loop()
    window.close()
    window.close()
    window.request_draw()

    assert auto.loop.ran == 1
    assert auto.loop.stopped == 1
    assert canvas.closed == 1
    assert canvas.request_draw_calls == 0


def _install_fake_rendercanvas_auto(monkeypatch: pytest.MonkeyPatch, canvas_cls: type) -> ModuleType:
    rendercanvas_mod = ModuleType("rendercanvas")
    auto_mod = ModuleType("rendercanvas.auto")
    auto_mod.RenderCanvas = canvas_cls
    auto_mod.loop = _Loop()
    rendercanvas_mod.auto = auto_mod
    monkeypatch.setitem(sys.modules, "rendercanvas", rendercanvas_mod)
    monkeypatch.setitem(sys.modules, "rendercanvas.auto", auto_mod)
    return auto_mod


def test_create_rendercanvas_window_passes_canvas_options(monkeypatch: pytest.MonkeyPatch) -> None:
    created: list[dict[str, object]] = []

    class _ConfiguredCanvas(_Canvas):
        def __init__(self, **kwargs) -> None:
            super().__init__()
            created.append(kwargs)

    auto_mod = _install_fake_rendercanvas_auto(monkeypatch, _ConfiguredCanvas)

    window = create_rendercanvas_window(
        width=640,
        height=480,
        title="Hello Pixels",
        update_mode="ondemand",
        max_fps=60.0,
        vsync=False,
    )

    assert created == [
        {
            "size": (640, 480),
            "title": "Hello Pixels",
            "update_mode": "ondemand",
            "min_fps": 0.0,
            "max_fps": 60.0,
            "vsync": False,
        }
    ]
    window.run_loop()
    assert auto_mod.loop.ran == 1


def test_create_rendercanvas_window_falls_back_to_basic_canvas_kwargs(monkeypatch: pytest.MonkeyPatch) -> None:
    created: list[dict[str, object]] = []

    class _BasicCanvas(_Canvas):
        def __init__(self, *, size, title) -> None:
            super().__init__()
            created.append({"size": size, "title": title})

    _install_fake_rendercanvas_auto(monkeypatch, _BasicCanvas)

    create_rendercanvas_window(width=320, height=240, title="x")

    assert created == [{"size": (320, 240), "title": "x"}]


def test_create_rendercanvas_window_reports_missing_backend(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "rendercanvas.auto", None)

    with pytest.raises(RuntimeError, match="Render canvas backend unavailable"):
        create_rendercanvas_window()
