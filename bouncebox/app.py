"""Bouncing box app wired to the engine window and pixel surface."""

from __future__ import annotations

import logging

from engine.api.app_module import AppModule, HostControl, PixelSurfacePort
from engine.api.input_events import KeyEvent
from engine.api.window import (
    RedrawRequestedEvent,
    WindowCloseEvent,
    WindowEvent,
    WindowPort,
    WindowResizeEvent,
)
from engine.rendering.pixels import PixelsError
from engine.runtime.errors import log_error

from bouncebox.world import World

_LOG = logging.getLogger("bouncebox.app")

EXIT_KEY = "Escape"


class BounceApp(AppModule):
    """Ready-state app; only constructed once window and pixels exist."""

    def __init__(self, window: WindowPort, pixels: PixelSurfacePort, world: World | None = None) -> None:
        self._window = window
        self._pixels = pixels
        self._world = world or World(width=pixels.width, height=pixels.height)
        self._host: HostControl | None = None

    @property
    def world(self) -> World:
        return self._world

    def on_start(self, host: HostControl) -> None:
        self._host = host
        _LOG.info(
            "bouncebox_start surface=%dx%d box=%d state=%s",
            *self._world.size,
            self._world.box_size,
            self._world.state,
        )

    def on_event(self, event: WindowEvent) -> None:
        if isinstance(event, WindowCloseEvent):
            self._exit()
            return
        if isinstance(event, RedrawRequestedEvent):
            self._redraw()
            return
        if isinstance(event, WindowResizeEvent):
            self._resize(event)
            return
        if isinstance(event, KeyEvent):
            if event.pressed and event.key == EXIT_KEY:
                self._exit()
            return
        raise TypeError(f"unhandled window event: {event!r}")

    def on_shutdown(self) -> None:
        _LOG.info("bouncebox_shutdown state=%s", self._world.state)

    def _redraw(self) -> None:
        self._world.update()
        self._world.draw(self._pixels.frame)
        try:
            self._pixels.render()
        except PixelsError as exc:
            log_error(_LOG, "pixels.render", exc)
            self._exit(exit_code=1)
            return
        self._window.request_draw()

    def _resize(self, event: WindowResizeEvent) -> None:
        try:
            self._pixels.resize_surface(event.physical_width, event.physical_height)
        except PixelsError as exc:
            log_error(_LOG, "pixels.resize_surface", exc)
            self._exit(exit_code=1)

    def _exit(self, exit_code: int = 0) -> None:
        if self._host is not None:
            self._host.close(exit_code)


def create_app(window: WindowPort, pixels: PixelSurfacePort) -> BounceApp:
    """App factory used by the engine bootstrap."""
    return BounceApp(window=window, pixels=pixels)
