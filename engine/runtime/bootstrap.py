"""Engine-owned runtime bootstrap for hosted execution."""

from __future__ import annotations

import logging
from collections.abc import Callable

from engine.api.app_module import AppFactory, PixelSurfacePort
from engine.api.window import SurfaceHandle, WindowPort
from engine.rendering.pixels import PixelSurface, PixelsError
from engine.runtime.config import RuntimeConfig, get_runtime_config
from engine.runtime.errors import log_error
from engine.runtime.host import EngineHost, EngineHostConfig
from engine.runtime.window_frontend import create_window_frontend
from engine.window import create_window_layer

_LOG = logging.getLogger("engine.runtime")

EXIT_OK = 0
EXIT_FAILURE = 1


def run_hosted_runtime(
    *,
    app_factory: AppFactory,
    buffer_size: tuple[int, int],
    runtime_name: str = "engine",
    config: RuntimeConfig | None = None,
) -> int:
    """Create window and pixel surface, build the ready app, and run the loop.

    Returns the process exit code: ``EXIT_OK`` on a normal close and
    ``EXIT_FAILURE`` when startup or a frame operation failed.
    """
    cfg = config or get_runtime_config()
    host_config = EngineHostConfig(
        runtime_name=runtime_name,
        frame_stats_interval=int(cfg.host.frame_stats_interval),
    )
    if cfg.bootstrap.headless:
        return _run_headless(
            app_factory=app_factory,
            buffer_size=buffer_size,
            host_config=host_config,
            frames=int(cfg.bootstrap.headless_frames),
        )

    window = create_window_layer(cfg)
    surface = window.create_surface()
    try:
        pixels = PixelSurface(
            width=int(buffer_size[0]),
            height=int(buffer_size[1]),
            surface=surface,
            surface_size=window.physical_size(),
            wgpu_backends=cfg.bootstrap.wgpu_backends,
        )
    except PixelsError as exc:
        log_error(_LOG, "pixels.new", exc)
        _LOG.debug("pixels_init_details %r", exc.details)
        window.close()
        return EXIT_FAILURE

    try:
        module = app_factory(window, pixels)
        host = EngineHost(module=module, config=host_config)
        frontend = create_window_frontend(window=window, pixels=pixels, host=host)
    except Exception:
        pixels.close()
        window.close()
        raise
    frontend.run()
    return EXIT_OK if host.exit_code == 0 else EXIT_FAILURE


def _run_headless(
    *,
    app_factory: AppFactory,
    buffer_size: tuple[int, int],
    host_config: EngineHostConfig,
    frames: int,
) -> int:
    window: WindowPort = _HeadlessWindow(size=buffer_size)
    pixels: PixelSurfacePort = PixelSurface(width=int(buffer_size[0]), height=int(buffer_size[1]))
    host: EngineHost | None = None
    try:
        module = app_factory(window, pixels)
        host = EngineHost(module=module, config=host_config)
        _LOG.info("headless_run frames=%d", frames)
        while not host.is_closed() and host.current_frame_index() < frames:
            host.frame()
    finally:
        if host is not None and not host.is_closed():
            host.close()
        pixels.close()
        window.close()
    return EXIT_OK if host.exit_code == 0 else EXIT_FAILURE


class _HeadlessWindow(WindowPort):
    """WindowPort implementation for headless runtime execution."""

    def __init__(self, size: tuple[int, int]) -> None:
        self._size = (max(1, int(size[0])), max(1, int(size[1])))

    def create_surface(self) -> SurfaceHandle:
        return SurfaceHandle(surface_id="headless", backend="headless")

    def poll_events(self) -> tuple[()]:
        return ()

    def set_draw_handler(self, handler: Callable[[], None]) -> None:
        _ = handler

    def request_draw(self) -> None:
        return

    def physical_size(self) -> tuple[int, int]:
        return self._size

    def run_loop(self) -> None:
        return

    def stop_loop(self) -> None:
        return

    def close(self) -> None:
        return
