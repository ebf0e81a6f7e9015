"""Engine runtime window frontend."""

from __future__ import annotations

import logging

from engine.api.app_module import PixelSurfacePort
from engine.api.window import WindowPort
from engine.runtime.host import EngineHost

_LOG = logging.getLogger("engine.runtime")


class HostedWindowFrontend:
    """Frontend adapter over the window event loop and the engine host."""

    def __init__(self, window: WindowPort, pixels: PixelSurfacePort, host: EngineHost) -> None:
        self._window = window
        self._pixels = pixels
        self._host = host
        self._shut_down = False

    def run(self) -> None:
        try:
            self._host.start()
            self._window.set_draw_handler(self._draw_frame)
            self._window.request_draw()
            self._window.run_loop()
        finally:
            self._shutdown()

    def _draw_frame(self) -> None:
        if self._shut_down:
            return
        for event in self._window.poll_events():
            self._host.dispatch(event)
            if self._host.is_closed():
                break
        if not self._host.is_closed():
            self._host.frame()
        if self._host.is_closed():
            self._shutdown()

    def _shutdown(self) -> None:
        if self._shut_down:
            return
        self._shut_down = True
        if not self._host.is_closed():
            self._host.close()
        _LOG.debug("frontend_shutdown frame=%d", self._host.current_frame_index())
        self._pixels.close()
        self._window.close()


def create_window_frontend(
    *,
    window: WindowPort,
    pixels: PixelSurfacePort,
    host: EngineHost,
) -> HostedWindowFrontend:
    """Build frontend window from precomposed engine host/runtime services."""
    return HostedWindowFrontend(window=window, pixels=pixels, host=host)
