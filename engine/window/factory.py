"""Window backend selection and factory helpers."""

from __future__ import annotations

from engine.api.window import WindowPort
from engine.runtime.config import RuntimeConfig
from engine.window.rendercanvas_glfw import create_rendercanvas_window


def create_window_layer(config: RuntimeConfig) -> WindowPort:
    """Create the configured window layer."""
    backend = config.window.backend
    if backend == "rendercanvas_glfw":
        fps_cap = config.render.fps_cap
        return create_rendercanvas_window(
            width=int(config.window.width),
            height=int(config.window.height),
            title=config.window.title,
            update_mode=config.render.loop_mode,
            min_fps=0.0,
            max_fps=float(fps_cap) if fps_cap > 0.0 else 240.0,
            vsync=bool(config.render.vsync),
            debug_events=bool(config.window.events_trace_enabled),
        )
    raise RuntimeError(f"Unsupported ENGINE_WINDOW_BACKEND: {backend!r}")


__all__ = ["create_window_layer"]
