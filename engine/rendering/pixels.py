"""WGPU-backed software frame buffer surface.

The surface owns a linear RGBA8 frame buffer of fixed logical size. Each
``render()`` uploads the buffer to an ``rgba8unorm-srgb`` texture and draws it
onto the window surface through a scaling pass: the texture is scaled by the
largest integer factor that fits, centered, and everything outside the scaled
image is cleared to opaque black.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

import numpy as np

from engine.api.window import SurfaceHandle

_LOG = logging.getLogger("engine.pixels")

TEXTURE_FORMAT = "rgba8unorm-srgb"
CLEAR_COLOR = (0.0, 0.0, 0.0, 1.0)

_SCALING_WGSL = """
struct Locals {
    transform: mat4x4<f32>,
};

@group(0) @binding(0) var r_tex_color: texture_2d<f32>;
@group(0) @binding(1) var r_tex_sampler: sampler;
@group(0) @binding(2) var<uniform> r_locals: Locals;

struct VertexOutput {
    @builtin(position) position: vec4<f32>,
    @location(0) tex_coord: vec2<f32>,
};

@vertex
fn vs_main(@builtin(vertex_index) vertex_index: u32) -> VertexOutput {
    var positions = array<vec2<f32>, 3>(
        vec2<f32>(-1.0, -1.0),
        vec2<f32>(3.0, -1.0),
        vec2<f32>(-1.0, 3.0),
    );
    let pos = positions[vertex_index];
    var out: VertexOutput;
    out.tex_coord = vec2<f32>((pos.x + 1.0) * 0.5, 1.0 - (pos.y + 1.0) * 0.5);
    out.position = r_locals.transform * vec4<f32>(pos, 0.0, 1.0);
    return out;
}

@fragment
fn fs_main(in: VertexOutput) -> @location(0) vec4<f32> {
    return textureSample(r_tex_color, r_tex_sampler, in.tex_coord);
}
"""


class PixelsError(RuntimeError):
    """Pixel surface failure with structured details."""

    def __init__(self, message: str, *, details: dict[str, object] | None = None) -> None:
        super().__init__(message)
        self.details: dict[str, object] = dict(details or {})


@dataclass(frozen=True, slots=True)
class ScalingMatrix:
    """Integer-scaling transform from texture space onto a surface."""

    scale: float
    transform: tuple[float, ...]
    clip_rect: tuple[int, int, int, int]
    texture_size: tuple[int, int]
    surface_size: tuple[int, int]

    @classmethod
    def for_sizes(
        cls,
        texture_size: tuple[int, int],
        surface_size: tuple[int, int],
    ) -> ScalingMatrix:
        texture_width = float(max(1, int(texture_size[0])))
        texture_height = float(max(1, int(texture_size[1])))
        screen_width = float(max(1, int(surface_size[0])))
        screen_height = float(max(1, int(surface_size[1])))

        width_ratio = screen_width / texture_width
        height_ratio = screen_height / texture_height
        scale = float(math.floor(max(1.0, min(width_ratio, height_ratio))))

        scaled_width = texture_width * scale
        scaled_height = texture_height * scale
        sw = scaled_width / screen_width
        sh = scaled_height / screen_height
        # Half-pixel offset keeps odd-sized surfaces on pixel centers.
        tx = math.modf(screen_width / 2.0)[0] / screen_width
        ty = math.modf(screen_height / 2.0)[0] / screen_height
        transform = (
            sw, 0.0, 0.0, 0.0,
            0.0, sh, 0.0, 0.0,
            0.0, 0.0, 1.0, 0.0,
            tx, ty, 0.0, 1.0,
        )

        clip_width = min(scaled_width, screen_width)
        clip_height = min(scaled_height, screen_height)
        clip_rect = (
            int((screen_width - clip_width) / 2.0),
            int((screen_height - clip_height) / 2.0),
            int(clip_width),
            int(clip_height),
        )
        return cls(
            scale=scale,
            transform=transform,
            clip_rect=clip_rect,
            texture_size=(int(texture_width), int(texture_height)),
            surface_size=(int(screen_width), int(screen_height)),
        )

    def uniform_bytes(self) -> bytes:
        """Return the column-major transform as a 64-byte float32 block."""
        return np.asarray(self.transform, dtype=np.float32).tobytes()


class _Backend(Protocol):
    """Private backend contract for the pixel surface internals."""

    def upload(self, frame: memoryview) -> None:
        """Copy the frame buffer into the GPU texture."""

    def present(self, scaling: ScalingMatrix) -> None:
        """Draw the texture onto the surface with ``scaling``."""

    def resize(self, scaling: ScalingMatrix) -> None:
        """Apply a new surface size."""

    def close(self) -> None:
        """Release backend resources."""


BackendFactory = Callable[["PixelSurface"], _Backend]


@dataclass(slots=True)
class PixelSurface:
    """Fixed-size RGBA8 frame buffer presented through a scaling pass."""

    width: int
    height: int
    surface: SurfaceHandle | None = None
    surface_size: tuple[int, int] | None = None
    wgpu_backends: tuple[str, ...] = ("vulkan", "metal", "dx12")
    _backend_factory: BackendFactory | None = None
    _frame: bytearray = field(init=False)
    _backend: _Backend = field(init=False)
    _scaling: ScalingMatrix = field(init=False)
    _closed: bool = field(init=False, default=False)
    _frames_rendered: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        if int(self.width) <= 0 or int(self.height) <= 0:
            raise PixelsError(
                "pixel buffer dimensions must be positive",
                details={"width": int(self.width), "height": int(self.height)},
            )
        self.width = int(self.width)
        self.height = int(self.height)
        self._frame = bytearray(self.width * self.height * 4)
        initial_size = self.surface_size or (self.width, self.height)
        self.surface_size = (max(1, int(initial_size[0])), max(1, int(initial_size[1])))
        self._scaling = ScalingMatrix.for_sizes((self.width, self.height), self.surface_size)
        factory = self._backend_factory or _create_default_backend
        try:
            self._backend = factory(self)
        except PixelsError:
            raise
        except Exception as exc:
            raise PixelsError(
                "pixel surface backend initialization failed",
                details=_exception_details(exc),
            ) from exc
        _LOG.info(
            "pixels_ready buffer=%dx%d surface=%dx%d scale=%.0f",
            self.width,
            self.height,
            self.surface_size[0],
            self.surface_size[1],
            self._scaling.scale,
        )

    @property
    def frame(self) -> bytearray:
        return self._frame

    @property
    def scaling(self) -> ScalingMatrix:
        return self._scaling

    @property
    def frames_rendered(self) -> int:
        return self._frames_rendered

    @property
    def closed(self) -> bool:
        return self._closed

    def render(self) -> None:
        """Upload the frame buffer and present it."""
        if self._closed:
            raise PixelsError("pixel surface is closed")
        try:
            self._backend.upload(memoryview(self._frame))
            self._backend.present(self._scaling)
        except PixelsError:
            raise
        except Exception as exc:
            raise PixelsError("frame presentation failed", details=_exception_details(exc)) from exc
        self._frames_rendered += 1

    def resize_surface(self, width: int, height: int) -> None:
        """Resize the presentation surface in physical pixels."""
        if self._closed:
            raise PixelsError("pixel surface is closed")
        size = (max(1, int(width)), max(1, int(height)))
        scaling = ScalingMatrix.for_sizes((self.width, self.height), size)
        try:
            self._backend.resize(scaling)
        except PixelsError:
            raise
        except Exception as exc:
            details = _exception_details(exc)
            details["requested_size"] = size
            raise PixelsError("surface resize failed", details=details) from exc
        self.surface_size = size
        self._scaling = scaling
        _LOG.debug("pixels_resize surface=%dx%d scale=%.0f", size[0], size[1], scaling.scale)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._backend.close()


@dataclass(slots=True)
class _NullPixelsBackend:
    """Backend without GPU output, used for headless runs."""

    uploads: int = 0
    presents: int = 0
    resizes: int = 0
    last_frame: bytes = b""
    last_scaling: ScalingMatrix | None = None

    def upload(self, frame: memoryview) -> None:
        self.uploads += 1
        self.last_frame = bytes(frame)

    def present(self, scaling: ScalingMatrix) -> None:
        self.presents += 1
        self.last_scaling = scaling

    def resize(self, scaling: ScalingMatrix) -> None:
        self.resizes += 1
        self.last_scaling = scaling

    def close(self) -> None:
        self.last_frame = b""


@dataclass(slots=True)
class _WgpuPixelsBackend:
    """Texture upload plus scaling render pass on a wgpu canvas context."""

    surface: SurfaceHandle
    texture_width: int
    texture_height: int
    backend_priority: tuple[str, ...] = ("vulkan", "metal", "dx12")
    _wgpu: object = field(init=False)
    _adapter: object = field(init=False)
    _device: object = field(init=False)
    _queue: object = field(init=False)
    _context: object = field(init=False)
    _surface_format: str = field(init=False, default="bgra8unorm-srgb")
    _texture: object = field(init=False)
    _texture_view: object = field(init=False)
    _sampler: object = field(init=False)
    _uniform_buffer: object = field(init=False)
    _pipeline: object = field(init=False)
    _bind_group: object = field(init=False)
    _uniform_scaling: ScalingMatrix | None = field(init=False, default=None)
    _selected_backend: str = field(init=False, default="unknown")
    _adapter_info: dict[str, object] = field(init=False, default_factory=dict)

    def __post_init__(self) -> None:
        try:
            import wgpu
        except ImportError as exc:
            raise PixelsError(
                "wgpu dependency unavailable",
                details={"selected_backend": "unknown", "adapter_info": {}, **_exception_details(exc)},
            ) from exc
        self._wgpu = wgpu
        try:
            self._adapter, self._selected_backend = self._request_adapter()
            self._adapter_info = _extract_adapter_info(self._adapter)
            self._device = self._adapter.request_device_sync(label="engine.pixels.device")
            self._queue = self._device.queue
            self._configure_context()
            self._create_texture()
            self._create_pipeline()
        except PixelsError as exc:
            exc.details.setdefault("selected_backend", self._selected_backend)
            exc.details.setdefault("adapter_info", dict(self._adapter_info))
            raise
        except Exception as exc:
            details: dict[str, object] = {
                "selected_backend": self._selected_backend,
                "adapter_info": dict(self._adapter_info),
                "surface_id": str(self.surface.surface_id),
                **_exception_details(exc),
            }
            raise PixelsError("wgpu pixel surface initialization failed", details=details) from exc
        _LOG.info(
            "wgpu_ready backend=%s surface_format=%s texture_format=%s",
            self._selected_backend,
            self._surface_format,
            TEXTURE_FORMAT,
        )

    def upload(self, frame: memoryview) -> None:
        self._queue.write_texture(
            {"texture": self._texture, "mip_level": 0, "origin": (0, 0, 0)},
            frame,
            {
                "offset": 0,
                "bytes_per_row": int(self.texture_width) * 4,
                "rows_per_image": int(self.texture_height),
            },
            (int(self.texture_width), int(self.texture_height), 1),
        )

    def present(self, scaling: ScalingMatrix) -> None:
        current = self._context.get_current_texture()
        actual = (int(current.size[0]), int(current.size[1]))
        if actual != scaling.surface_size:
            scaling = ScalingMatrix.for_sizes((self.texture_width, self.texture_height), actual)
        self._write_uniform(scaling)

        encoder = self._device.create_command_encoder(label="engine.pixels.frame")
        render_pass = encoder.begin_render_pass(
            color_attachments=[
                {
                    "view": current.create_view(),
                    "resolve_target": None,
                    "clear_value": CLEAR_COLOR,
                    "load_op": "clear",
                    "store_op": "store",
                }
            ],
        )
        render_pass.set_pipeline(self._pipeline)
        render_pass.set_bind_group(0, self._bind_group)
        x, y, w, h = scaling.clip_rect
        render_pass.set_scissor_rect(x, y, w, h)
        render_pass.draw(3, 1, 0, 0)
        render_pass.end()
        self._queue.submit([encoder.finish()])

    def resize(self, scaling: ScalingMatrix) -> None:
        self._write_uniform(scaling)

    def close(self) -> None:
        unconfigure = getattr(self._context, "unconfigure", None)
        if callable(unconfigure):
            unconfigure()
        destroy = getattr(self._texture, "destroy", None)
        if callable(destroy):
            destroy()

    def _request_adapter(self) -> tuple[object, str]:
        gpu = getattr(self._wgpu, "gpu", None)
        if gpu is None:
            raise PixelsError("wgpu.gpu entrypoint unavailable")
        request_adapter_sync = gpu.request_adapter_sync
        for backend_name in self.backend_priority:
            try:
                adapter = request_adapter_sync(
                    power_preference="high-performance",
                    backend=backend_name,
                )
            except TypeError:
                adapter = request_adapter_sync(power_preference="high-performance")
                if adapter is not None:
                    return adapter, "auto"
                break
            if adapter is not None:
                return adapter, str(backend_name)
        raise PixelsError(
            "wgpu adapter request returned None",
            details={"attempted_backends": tuple(self.backend_priority)},
        )

    def _configure_context(self) -> None:
        provider = self.surface.provider
        get_context = getattr(provider, "get_context", None)
        if not callable(get_context):
            raise PixelsError(
                "surface provider does not expose get_context('wgpu')",
                details={"surface_backend": str(self.surface.backend)},
            )
        self._context = get_context("wgpu")
        self._surface_format = _srgb_surface_format(
            str(self._context.get_preferred_format(self._adapter))
        )
        try:
            self._context.configure(
                device=self._device,
                format=self._surface_format,
                alpha_mode="opaque",
            )
        except TypeError:
            self._context.configure(device=self._device, format=self._surface_format)

    def _create_texture(self) -> None:
        usage = self._wgpu.TextureUsage
        self._texture = self._device.create_texture(
            label="engine.pixels.texture",
            size=(int(self.texture_width), int(self.texture_height), 1),
            format=TEXTURE_FORMAT,
            usage=usage.TEXTURE_BINDING | usage.COPY_DST,
            dimension="2d",
            mip_level_count=1,
            sample_count=1,
        )
        self._texture_view = self._texture.create_view()
        self._sampler = self._device.create_sampler(
            label="engine.pixels.sampler",
            mag_filter="nearest",
            min_filter="nearest",
            mipmap_filter="nearest",
            address_mode_u="clamp-to-edge",
            address_mode_v="clamp-to-edge",
        )

    def _create_pipeline(self) -> None:
        buffer_usage = self._wgpu.BufferUsage
        initial = ScalingMatrix.for_sizes(
            (self.texture_width, self.texture_height),
            (self.texture_width, self.texture_height),
        )
        self._uniform_buffer = self._device.create_buffer_with_data(
            data=initial.uniform_bytes(),
            usage=buffer_usage.UNIFORM | buffer_usage.COPY_DST,
        )
        self._uniform_scaling = initial
        shader = self._device.create_shader_module(label="engine.pixels.scaling", code=_SCALING_WGSL)
        self._pipeline = self._device.create_render_pipeline(
            label="engine.pixels.pipeline",
            layout="auto",
            vertex={"module": shader, "entry_point": "vs_main", "buffers": []},
            fragment={
                "module": shader,
                "entry_point": "fs_main",
                "targets": [{"format": self._surface_format, "write_mask": 0xF}],
            },
            primitive={"topology": "triangle-list"},
        )
        self._bind_group = self._device.create_bind_group(
            label="engine.pixels.bind_group",
            layout=self._pipeline.get_bind_group_layout(0),
            entries=[
                {"binding": 0, "resource": self._texture_view},
                {"binding": 1, "resource": self._sampler},
                {
                    "binding": 2,
                    "resource": {"buffer": self._uniform_buffer, "offset": 0, "size": 64},
                },
            ],
        )

    def _write_uniform(self, scaling: ScalingMatrix) -> None:
        if self._uniform_scaling == scaling:
            return
        self._queue.write_buffer(self._uniform_buffer, 0, scaling.uniform_bytes())
        self._uniform_scaling = scaling


def _create_default_backend(pixels: PixelSurface) -> _Backend:
    surface = pixels.surface
    if surface is None or surface.provider is None:
        return _NullPixelsBackend()
    return _WgpuPixelsBackend(
        surface=surface,
        texture_width=pixels.width,
        texture_height=pixels.height,
        backend_priority=tuple(pixels.wgpu_backends),
    )


def _srgb_surface_format(preferred: str) -> str:
    value = preferred.strip().lower()
    if value in {"bgra8unorm", "rgba8unorm"}:
        return f"{value}-srgb"
    return value


def _extract_adapter_info(adapter: object) -> dict[str, object]:
    info = getattr(adapter, "info", None)
    if isinstance(info, dict):
        return {str(key): value for key, value in info.items()}
    return {}


def _exception_details(exc: BaseException) -> dict[str, object]:
    return {
        "exception_type": exc.__class__.__name__,
        "exception_message": str(exc),
    }


__all__ = ["CLEAR_COLOR", "PixelSurface", "PixelsError", "ScalingMatrix", "TEXTURE_FORMAT"]
