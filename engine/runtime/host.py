"""Engine-hosted runtime shell for app execution."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from importlib.metadata import PackageNotFoundError, version

from engine.api.app_module import AppModule, HostControl
from engine.api.window import RedrawRequestedEvent, WindowEvent
from engine.runtime.time import FrameClock, FrameStats

_LOG = logging.getLogger("engine.runtime")


@dataclass(frozen=True, slots=True)
class EngineHostConfig:
    """Host runtime configuration."""

    runtime_name: str = "engine"
    frame_stats_interval: int = 0


class EngineHost(HostControl):
    """Lifecycle shell dispatching window events to one app module."""

    def __init__(
        self,
        module: AppModule,
        config: EngineHostConfig | None = None,
        *,
        clock: FrameClock | None = None,
    ) -> None:
        self._module = module
        self._config = config or EngineHostConfig()
        self._clock = clock or FrameClock()
        self._frame_stats = FrameStats(self._config.frame_stats_interval)
        self._frame_index = 0
        self._closed = False
        self._started = False
        self._exit_code = 0

    @property
    def config(self) -> EngineHostConfig:
        return self._config

    def current_frame_index(self) -> int:
        return self._frame_index

    def start(self) -> None:
        """Start module lifecycle."""
        if self._started:
            return
        self._started = True
        _LOG.info(
            "host_start runtime=%s versions=%s",
            self._config.runtime_name,
            self._runtime_versions(),
        )
        self._module.on_start(self)

    def dispatch(self, event: WindowEvent) -> None:
        """Forward one normalized window event to the module."""
        if not self._started:
            self.start()
        if self._closed:
            return
        self._module.on_event(event)

    def frame(self) -> None:
        """Dispatch one redraw tick."""
        if not self._started:
            self.start()
        if self._closed:
            return
        time_context = self._clock.next(self._frame_index)
        self._module.on_event(RedrawRequestedEvent(frame_index=self._frame_index))
        self._frame_index += 1
        report = self._frame_stats.record(time_context.delta_seconds)
        if report is not None:
            _LOG.debug(
                "frame_stats frame=%d frames=%d avg_ms=%.3f fps=%.2f",
                self._frame_index,
                report.frames,
                report.average_ms,
                report.fps,
            )

    @property
    def exit_code(self) -> int:
        return self._exit_code

    def close(self, exit_code: int = 0) -> None:
        if self._closed:
            return
        self._closed = True
        self._exit_code = int(exit_code)
        _LOG.info("host_close frames=%d exit_code=%d", self._frame_index, self._exit_code)
        self._module.on_shutdown()

    def is_closed(self) -> bool:
        return self._closed

    @staticmethod
    def _runtime_versions() -> dict[str, str]:
        versions: dict[str, str] = {}
        for pkg in ("wgpu", "rendercanvas", "numpy"):
            try:
                versions[pkg] = version(pkg)
            except PackageNotFoundError:
                versions[pkg] = "unknown"
        return versions
