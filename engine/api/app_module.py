"""Engine-hosted application contracts."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from engine.api.window import WindowEvent, WindowPort


@runtime_checkable
class HostControl(Protocol):
    """Host control surface exposed to hosted apps."""

    def close(self, exit_code: int = 0) -> None:
        """Request host shutdown; non-zero ``exit_code`` marks a failure."""

    def is_closed(self) -> bool:
        """Return whether shutdown was requested."""


@runtime_checkable
class AppModule(Protocol):
    """Engine-facing application event hooks."""

    def on_start(self, host: HostControl) -> None:
        """Capture host control before the first event is dispatched."""

    def on_event(self, event: WindowEvent) -> None:
        """Handle one normalized window event."""

    def on_shutdown(self) -> None:
        """Release resources and finalize state."""


class PixelSurfacePort(Protocol):
    """Frame-buffer surface an app draws into and presents."""

    width: int
    height: int

    @property
    def frame(self) -> bytearray:
        """Writable RGBA8 frame buffer of ``width * height * 4`` bytes."""

    def render(self) -> None:
        """Upload the frame buffer and present it."""

    def resize_surface(self, width: int, height: int) -> None:
        """Resize the presentation surface in physical pixels."""

    def close(self) -> None:
        """Release surface resources."""


AppFactory = Callable[[WindowPort, PixelSurfacePort], AppModule]


__all__ = ["AppFactory", "AppModule", "HostControl", "PixelSurfacePort"]
