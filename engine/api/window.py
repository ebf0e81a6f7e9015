"""Window and surface contracts."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from engine.api.input_events import KeyEvent


@dataclass(frozen=True, slots=True)
class SurfaceHandle:
    """Opaque renderer-attachable surface handle."""

    surface_id: str
    backend: str
    provider: object | None = None


@dataclass(frozen=True, slots=True)
class WindowResizeEvent:
    """Normalized resize/DPI event in logical and physical units."""

    logical_width: float
    logical_height: float
    physical_width: int
    physical_height: int
    dpi_scale: float


@dataclass(frozen=True, slots=True)
class WindowCloseEvent:
    """Normalized close-request event."""

    requested: bool = True


@dataclass(frozen=True, slots=True)
class RedrawRequestedEvent:
    """One redraw tick issued by the host."""

    frame_index: int


WindowEvent = WindowResizeEvent | WindowCloseEvent | KeyEvent | RedrawRequestedEvent


class WindowPort(Protocol):
    """Engine-facing window/event-loop ownership contract."""

    def create_surface(self) -> SurfaceHandle:
        """Create a surface handle used by the pixel surface backend."""

    def poll_events(self) -> tuple[WindowResizeEvent | WindowCloseEvent | KeyEvent, ...]:
        """Poll and return normalized window and key events."""

    def set_draw_handler(self, handler: Callable[[], None]) -> None:
        """Install the callback invoked for each redraw."""

    def request_draw(self) -> None:
        """Ask the backend to schedule another redraw."""

    def physical_size(self) -> tuple[int, int]:
        """Return current surface size in physical pixels."""

    def run_loop(self) -> None:
        """Run the OS/backend event loop."""

    def stop_loop(self) -> None:
        """Stop the OS/backend event loop when supported."""

    def close(self) -> None:
        """Close window and release backend resources."""


__all__ = [
    "RedrawRequestedEvent",
    "SurfaceHandle",
    "WindowCloseEvent",
    "WindowEvent",
    "WindowPort",
    "WindowResizeEvent",
]
