"""Bouncing box simulation and frame rasterizer."""

from __future__ import annotations

from dataclasses import dataclass, replace

import numpy as np

WIDTH = 320
HEIGHT = 240
BOX_SIZE = 64

BOX_COLOR = (0x5E, 0x48, 0xE8, 0xFF)
BACKGROUND_COLOR = (0x48, 0xB2, 0xE8, 0xFF)


@dataclass(frozen=True, slots=True)
class BoxState:
    """Box position and velocity in surface pixels."""

    x: int
    y: int
    velocity_x: int
    velocity_y: int


INITIAL_STATE = BoxState(x=24, y=16, velocity_x=1, velocity_y=1)


def advance(state: BoxState, *, width: int, height: int, size: int) -> BoxState:
    """Return the state one tick later.

    Each axis reflects when the box is at or past an edge *before* moving, then
    the position moves by the (possibly flipped) velocity. The box can sit one
    pixel outside the surface for a single tick before it comes back.
    """
    velocity_x = state.velocity_x
    velocity_y = state.velocity_y
    if state.x <= 0 or state.x + size > width:
        velocity_x = -velocity_x
    if state.y <= 0 or state.y + size > height:
        velocity_y = -velocity_y
    return replace(
        state,
        x=state.x + velocity_x,
        y=state.y + velocity_y,
        velocity_x=velocity_x,
        velocity_y=velocity_y,
    )


def draw(state: BoxState, width: int, height: int, frame: bytearray | memoryview, *, size: int) -> None:
    """Fill ``frame`` (``width * height * 4`` RGBA bytes) with the box over the background."""
    pixels = np.frombuffer(frame, dtype=np.uint8).reshape(height, width, 4)
    pixels[:, :] = BACKGROUND_COLOR
    left = min(max(state.x, 0), width)
    top = min(max(state.y, 0), height)
    right = min(max(state.x + size, 0), width)
    bottom = min(max(state.y + size, 0), height)
    if left < right and top < bottom:
        pixels[top:bottom, left:right] = BOX_COLOR


class World:
    """Mutable owner of the box state for one surface."""

    def __init__(
        self,
        state: BoxState = INITIAL_STATE,
        *,
        width: int = WIDTH,
        height: int = HEIGHT,
        box_size: int = BOX_SIZE,
    ) -> None:
        self._state = state
        self._width = int(width)
        self._height = int(height)
        self._box_size = int(box_size)

    @property
    def state(self) -> BoxState:
        return self._state

    @property
    def size(self) -> tuple[int, int]:
        return (self._width, self._height)

    @property
    def box_size(self) -> int:
        return self._box_size

    def update(self) -> None:
        """Bounce the box around the surface by one tick."""
        self._state = advance(
            self._state,
            width=self._width,
            height=self._height,
            size=self._box_size,
        )

    def draw(self, frame: bytearray | memoryview) -> None:
        """Draw the current state into ``frame``."""
        draw(self._state, self._width, self._height, frame, size=self._box_size)
