"""Window subsystem runtime adapters."""

from engine.window.factory import create_window_layer
from engine.window.rendercanvas_glfw import RenderCanvasWindow, create_rendercanvas_window

__all__ = ["RenderCanvasWindow", "create_rendercanvas_window", "create_window_layer"]
