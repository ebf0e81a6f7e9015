"""Centralized runtime configuration ownership for engine execution."""

from __future__ import annotations

import os
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Mapping, TypeVar

from engine.api.logging import EngineLoggingConfig


@dataclass(frozen=True, slots=True)
class RuntimeBootstrapConfig:
    headless: bool
    headless_frames: int
    wgpu_backends: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class RuntimeRenderConfig:
    vsync: bool
    loop_mode: str
    fps_cap: float


@dataclass(frozen=True, slots=True)
class RuntimeWindowConfig:
    backend: str
    title: str
    width: int
    height: int
    events_trace_enabled: bool


@dataclass(frozen=True, slots=True)
class RuntimeHostConfig:
    frame_stats_interval: int


@dataclass(frozen=True, slots=True)
class RuntimeConfig:
    bootstrap: RuntimeBootstrapConfig
    render: RuntimeRenderConfig
    window: RuntimeWindowConfig
    host: RuntimeHostConfig
    logging: EngineLoggingConfig


_RUNTIME_CONFIG: ContextVar[RuntimeConfig | None] = ContextVar("engine_runtime_config", default=None)


def _raw(name: str, *, env: Mapping[str, str] | None = None) -> str | None:
    value = os.getenv(name) if env is None else env.get(name)
    return None if value is None else str(value)


def _flag(name: str, default: bool, *, env: Mapping[str, str] | None = None) -> bool:
    raw = _raw(name, env=env)
    if raw is None:
        return bool(default)
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    return bool(default)


_N = TypeVar("_N", int, float)


def _number(
    name: str,
    default: _N,
    *,
    minimum: _N,
    env: Mapping[str, str] | None = None,
) -> _N:
    """Parse ``name`` as the type of ``default``; unparsable values fall back to it."""
    cast = type(default)
    raw = _raw(name, env=env)
    try:
        value = cast(raw.strip()) if raw is not None else default
    except ValueError:
        value = default
    return max(minimum, value)


def _text(name: str, default: str, *, env: Mapping[str, str] | None = None) -> str:
    raw = _raw(name, env=env)
    if raw is None:
        return str(default)
    value = raw.strip()
    return value if value else str(default)


def _csv(name: str, *, env: Mapping[str, str] | None = None) -> tuple[str, ...]:
    raw = _text(name, "", env=env)
    if not raw:
        return ()
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _normalize_window_backend(raw: str) -> str:
    value = str(raw).strip().lower()
    if value in {"rendercanvas", "rendercanvas_glfw", "glfw"}:
        return "rendercanvas_glfw"
    return value


def _normalize_loop_mode(raw: str, fallback: str) -> str:
    value = str(raw).strip().lower().replace("_", "")
    if value == "ondemand":
        return "ondemand"
    if value == "continuous":
        return "continuous"
    return str(fallback)


def _normalize_log_format(raw: str) -> str:
    value = str(raw).strip().lower()
    return value if value in {"text", "json"} else "text"


def resolve_log_level_name(default: str = "INFO", *, env: Mapping[str, str] | None = None) -> str:
    """Resolve runtime log level with engine-prefixed override."""
    value = _raw("ENGINE_LOG_LEVEL", env=env)
    if value is None:
        value = _raw("LOG_LEVEL", env=env) or default
    return value.strip().upper()


def load_runtime_config(*, env: Mapping[str, str] | None = None) -> RuntimeConfig:
    scope_env = env

    wgpu_backends_csv = _csv("ENGINE_WGPU_BACKENDS", env=scope_env)
    wgpu_backends = (
        tuple(item.lower() for item in wgpu_backends_csv)
        if wgpu_backends_csv
        else ("vulkan", "metal", "dx12")
    )
    log_file = _text("ENGINE_LOG_FILE", "", env=scope_env)

    return RuntimeConfig(
        bootstrap=RuntimeBootstrapConfig(
            headless=_flag("ENGINE_HEADLESS", False, env=scope_env),
            headless_frames=_number("ENGINE_HEADLESS_FRAMES", 600, minimum=1, env=scope_env),
            wgpu_backends=wgpu_backends,
        ),
        render=RuntimeRenderConfig(
            vsync=_flag("ENGINE_RENDER_VSYNC", True, env=scope_env),
            loop_mode=_normalize_loop_mode(
                _text("ENGINE_RENDER_LOOP_MODE", "continuous", env=scope_env),
                "continuous",
            ),
            fps_cap=_number("ENGINE_RENDER_FPS_CAP", 0.0, minimum=0.0, env=scope_env),
        ),
        window=RuntimeWindowConfig(
            backend=_normalize_window_backend(
                _text("ENGINE_WINDOW_BACKEND", "rendercanvas_glfw", env=scope_env)
            ),
            title=_text("ENGINE_WINDOW_TITLE", "Hello Pixels", env=scope_env),
            width=_number("ENGINE_WINDOW_WIDTH", 640, minimum=1, env=scope_env),
            height=_number("ENGINE_WINDOW_HEIGHT", 480, minimum=1, env=scope_env),
            events_trace_enabled=_flag("ENGINE_WINDOW_EVENTS_TRACE_ENABLED", False, env=scope_env),
        ),
        host=RuntimeHostConfig(
            frame_stats_interval=_number("ENGINE_FRAME_STATS_INTERVAL", 0, minimum=0, env=scope_env),
        ),
        logging=EngineLoggingConfig(
            level_name=resolve_log_level_name(default="INFO", env=scope_env),
            console_format=_normalize_log_format(_text("ENGINE_LOG_FORMAT", "text", env=scope_env)),
            file_path=log_file or None,
            file_format="json",
        ),
    )


def initialize_runtime_config(*, env: Mapping[str, str] | None = None) -> RuntimeConfig:
    config = load_runtime_config(env=env)
    _RUNTIME_CONFIG.set(config)
    return config


def set_runtime_config(config: RuntimeConfig) -> RuntimeConfig:
    _RUNTIME_CONFIG.set(config)
    return config


def get_runtime_config() -> RuntimeConfig:
    config = _RUNTIME_CONFIG.get()
    if config is not None:
        return config
    return initialize_runtime_config()


__all__ = [
    "RuntimeBootstrapConfig",
    "RuntimeConfig",
    "RuntimeHostConfig",
    "RuntimeRenderConfig",
    "RuntimeWindowConfig",
    "get_runtime_config",
    "initialize_runtime_config",
    "load_runtime_config",
    "resolve_log_level_name",
    "set_runtime_config",
]
