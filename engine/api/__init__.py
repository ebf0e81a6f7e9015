"""Public engine API contracts."""

from engine.api.app_module import AppFactory, AppModule, HostControl, PixelSurfacePort
from engine.api.input_events import KeyEvent
from engine.api.logging import EngineLoggingConfig, get_logger
from engine.api.window import (
    RedrawRequestedEvent,
    SurfaceHandle,
    WindowCloseEvent,
    WindowEvent,
    WindowPort,
    WindowResizeEvent,
)

__all__ = [
    "AppFactory",
    "AppModule",
    "EngineLoggingConfig",
    "HostControl",
    "KeyEvent",
    "PixelSurfacePort",
    "RedrawRequestedEvent",
    "SurfaceHandle",
    "WindowCloseEvent",
    "WindowEvent",
    "WindowPort",
    "WindowResizeEvent",
    "get_logger",
]
