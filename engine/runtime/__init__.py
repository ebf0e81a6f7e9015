"""Engine runtime modules."""

from engine.runtime.config import RuntimeConfig, get_runtime_config, load_runtime_config
from engine.runtime.errors import error_sources, log_error
from engine.runtime.host import EngineHost, EngineHostConfig
from engine.runtime.logging import configure_engine_logging, stop_engine_logging
from engine.runtime.time import FrameClock, FrameStats, TimeContext

__all__ = [
    "EngineHost",
    "EngineHostConfig",
    "FrameClock",
    "FrameStats",
    "RuntimeConfig",
    "TimeContext",
    "configure_engine_logging",
    "error_sources",
    "get_runtime_config",
    "load_runtime_config",
    "log_error",
    "stop_engine_logging",
]
