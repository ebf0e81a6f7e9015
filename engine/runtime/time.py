"""Engine runtime timing primitives."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from time import monotonic


@dataclass(frozen=True, slots=True)
class TimeContext:
    """Per-frame timing context produced by :class:`FrameClock`."""

    frame_index: int
    delta_seconds: float
    elapsed_seconds: float


class FrameClock:
    """Monotonic frame clock with bounded frame deltas."""

    def __init__(
        self,
        *,
        time_source: Callable[[], float] | None = None,
        max_delta_seconds: float = 0.25,
    ) -> None:
        self._time_source = time_source or monotonic
        self._max_delta_seconds = max_delta_seconds
        self._last_seconds: float | None = None
        self._elapsed_seconds = 0.0

    def next(self, frame_index: int) -> TimeContext:
        """Advance the clock and return the next frame context."""
        now = self._time_source()
        if self._last_seconds is None:
            delta = 0.0
        else:
            raw_delta = now - self._last_seconds
            non_negative_delta = max(0.0, raw_delta)
            delta = min(non_negative_delta, self._max_delta_seconds)
        self._last_seconds = now
        self._elapsed_seconds += delta
        return TimeContext(
            frame_index=frame_index,
            delta_seconds=delta,
            elapsed_seconds=self._elapsed_seconds,
        )


@dataclass(frozen=True, slots=True)
class FrameStatsReport:
    """Frame timing summary over one reporting window."""

    frames: int
    average_ms: float
    fps: float


class FrameStats:
    """Accumulates frame deltas and reports every ``interval`` frames."""

    def __init__(self, interval: int) -> None:
        self._interval = max(0, int(interval))
        self._frames = 0
        self._seconds = 0.0

    @property
    def enabled(self) -> bool:
        return self._interval > 0

    def record(self, delta_seconds: float) -> FrameStatsReport | None:
        """Add one frame; return a report when the window is full."""
        if not self.enabled:
            return None
        self._frames += 1
        self._seconds += max(0.0, delta_seconds)
        if self._frames < self._interval:
            return None
        average = self._seconds / self._frames
        report = FrameStatsReport(
            frames=self._frames,
            average_ms=average * 1000.0,
            fps=(1.0 / average) if average > 0.0 else 0.0,
        )
        self._frames = 0
        self._seconds = 0.0
        return report
