"""Rendercanvas/GLFW-backed window layer implementation."""

from __future__ import annotations

from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
import logging
from typing import Any

from engine.api.input_events import KeyEvent
from engine.api.window import (
    SurfaceHandle,
    WindowCloseEvent,
    WindowPort,
    WindowResizeEvent,
)

_LOG = logging.getLogger("engine.window")

_KEY_EVENT_TYPES = ("key_down", "key_up")


def _loop_method(rc_auto: Any, name: str) -> Callable[[], None] | None:
    # rendercanvas >= 2 exposes ``auto.loop``; older releases a module-level ``run``.
    method = getattr(getattr(rc_auto, "loop", None), name, None)
    if callable(method):
        return method
    if name == "run":
        method = getattr(rc_auto, "run", None)
        return method if callable(method) else None
    return None


def run_backend_loop(rc_auto: Any) -> None:
    """Block in the rendercanvas event loop until it is stopped."""
    run = _loop_method(rc_auto, "run")
    if run is None:
        raise RuntimeError("rendercanvas.auto did not expose a runnable loop.")
    run()


def stop_backend_loop(rc_auto: Any) -> None:
    """Ask the rendercanvas loop to exit, when the backend supports it."""
    stop = _loop_method(rc_auto, "stop")
    if stop is not None:
        stop()


@dataclass(slots=True)
class RenderCanvasWindow(WindowPort):
    """Window-layer adapter over an existing rendercanvas canvas."""

    canvas: Any
    backend: str = "rendercanvas.glfw"
    _events: deque[WindowResizeEvent | WindowCloseEvent | KeyEvent] = field(default_factory=deque)
    _rc_auto: Any | None = field(default=None, repr=False)
    _debug_events: bool = field(default=False, repr=False)
    _closed: bool = field(default=False, repr=False)

    def __post_init__(self) -> None:
        if self._rc_auto is None:
            try:
                import rendercanvas.auto as rc_auto
            except ImportError:
                rc_auto = None
            self._rc_auto = rc_auto
        self._bind_window_events()

    def create_surface(self) -> SurfaceHandle:
        return SurfaceHandle(surface_id=f"{id(self.canvas)}", backend=self.backend, provider=self.canvas)

    def poll_events(self) -> tuple[WindowResizeEvent | WindowCloseEvent | KeyEvent, ...]:
        drained = tuple(self._events)
        self._events.clear()
        return drained

    def set_draw_handler(self, handler: Callable[[], None]) -> None:
        request_draw = getattr(self.canvas, "request_draw", None)
        if not callable(request_draw):
            raise RuntimeError("canvas does not support request_draw(draw_function)")
        request_draw(handler)

    def request_draw(self) -> None:
        if self._closed:
            return
        request_draw = getattr(self.canvas, "request_draw", None)
        if callable(request_draw):
            request_draw()

    def physical_size(self) -> tuple[int, int]:
        getter = getattr(self.canvas, "get_physical_size", None)
        if not callable(getter):
            return (1, 1)
        size = getter()
        if not (isinstance(size, (tuple, list)) and len(size) >= 2):
            return (1, 1)
        return (max(1, int(size[0])), max(1, int(size[1])))

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.stop_loop()
        closer = getattr(self.canvas, "close", None)
        if callable(closer):
            closer()

    def run_loop(self) -> None:
        if self._rc_auto is None:
            return
        run_backend_loop(self._rc_auto)

    def stop_loop(self) -> None:
        if self._rc_auto is None:
            return
        stop_backend_loop(self._rc_auto)

    def _bind_window_events(self) -> None:
        add_handler = getattr(self.canvas, "add_event_handler", None)
        if not callable(add_handler):
            return
        add_handler(self._on_resize, "resize")
        add_handler(self._on_close, "close")
        add_handler(self._on_key, *_KEY_EVENT_TYPES)
        if self._debug_events:
            add_handler(self._on_any_event, "*")

    def _on_resize(self, event: object) -> None:
        parsed = _parse_resize_event(event)
        if parsed is not None:
            self._events.append(parsed)
            self.request_draw()

    def _on_close(self, event: object) -> None:
        _ = event
        self._events.append(WindowCloseEvent())
        self.request_draw()

    def _on_key(self, event: object) -> None:
        parsed = _parse_key_event(event)
        if parsed is not None:
            self._events.append(parsed)
            self.request_draw()

    def _on_any_event(self, event: object) -> None:
        event_type = str(_event_value(event, "event_type", ""))
        if event_type in {"before_draw", "animate"}:
            return
        _LOG.debug("window_event type=%s payload=%r", event_type, event)


def create_rendercanvas_window(
    canvas: Any | None = None,
    *,
    width: int = 640,
    height: int = 480,
    title: str = "Hello Pixels",
    update_mode: str = "continuous",
    min_fps: float = 0.0,
    max_fps: float = 240.0,
    vsync: bool = True,
    debug_events: bool = False,
) -> RenderCanvasWindow:
    """Create window adapter over an existing or newly created rendercanvas canvas."""
    if canvas is not None:
        return RenderCanvasWindow(canvas=canvas, _debug_events=debug_events)
    try:
        import rendercanvas.auto as rc_auto
    except ImportError as exc:
        raise RuntimeError(
            "Render canvas backend unavailable. Install a desktop backend such as glfw."
        ) from exc
    canvas_cls = getattr(rc_auto, "RenderCanvas", None)
    if canvas_cls is None:
        raise RuntimeError("rendercanvas.auto did not expose RenderCanvas.")
    try:
        canvas = canvas_cls(
            size=(int(width), int(height)),
            title=title,
            update_mode=update_mode,
            min_fps=float(min_fps),
            max_fps=float(max_fps),
            vsync=bool(vsync),
        )
    except TypeError:
        canvas = canvas_cls(size=(int(width), int(height)), title=title)
    _LOG.info(
        "window_created backend=%s size=%dx%d update_mode=%s",
        type(canvas).__name__,
        int(width),
        int(height),
        update_mode,
    )
    return RenderCanvasWindow(canvas=canvas, _rc_auto=rc_auto, _debug_events=debug_events)


def _parse_resize_event(event: object) -> WindowResizeEvent | None:
    """Normalize a rendercanvas resize payload; ``None`` when it carries no usable size."""
    size = _event_value(event, "size")
    if not (isinstance(size, (tuple, list)) and len(size) >= 2):
        size = (_event_value(event, "width"), _event_value(event, "height"))
    if not all(isinstance(value, (int, float)) for value in size[:2]):
        return None
    logical = (float(size[0]), float(size[1]))
    ratio = _event_value(event, "pixel_ratio", 1.0)
    scale = float(ratio) if isinstance(ratio, (int, float)) and ratio > 0 else 1.0
    return WindowResizeEvent(
        logical_width=logical[0],
        logical_height=logical[1],
        physical_width=max(1, int(logical[0] * scale)),
        physical_height=max(1, int(logical[1] * scale)),
        dpi_scale=scale,
    )


def _parse_key_event(event: object) -> KeyEvent | None:
    event_type = str(_event_value(event, "event_type", ""))
    if event_type not in _KEY_EVENT_TYPES:
        return None
    key = _event_value(event, "key")
    if not isinstance(key, str):
        return None
    raw_modifiers = _event_value(event, "modifiers", ())
    modifiers = (
        tuple(str(item) for item in raw_modifiers)
        if isinstance(raw_modifiers, (tuple, list))
        else ()
    )
    return KeyEvent(event_type, key, modifiers)


def _event_value(event: object, key: str, default: object | None = None) -> object | None:
    if isinstance(event, dict):
        return event.get(key, default)
    return getattr(event, key, default)
