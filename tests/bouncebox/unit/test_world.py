from __future__ import annotations

import numpy as np
import pytest

from bouncebox.world import (
    BACKGROUND_COLOR,
    BOX_COLOR,
    BOX_SIZE,
    HEIGHT,
    INITIAL_STATE,
    WIDTH,
    BoxState,
    World,
    advance,
    draw,
)


def _pixel(frame: bytearray, width: int, x: int, y: int) -> tuple[int, ...]:
    offset = (y * width + x) * 4
    return tuple(frame[offset : offset + 4])


def test_initial_state_matches_startup_position() -> None:
    assert INITIAL_STATE == BoxState(x=24, y=16, velocity_x=1, velocity_y=1)
    world = World()
    assert world.state == INITIAL_STATE
    assert world.size == (320, 240)
    assert world.box_size == 64


def test_advance_moves_by_velocity_inside_bounds() -> None:
    state = advance(INITIAL_STATE, width=WIDTH, height=HEIGHT, size=BOX_SIZE)
    assert state == BoxState(x=25, y=17, velocity_x=1, velocity_y=1)


def test_advance_reflects_at_left_edge() -> None:
    state = BoxState(x=0, y=100, velocity_x=-1, velocity_y=1)
    out = advance(state, width=WIDTH, height=HEIGHT, size=BOX_SIZE)
    assert out.velocity_x == 1
    assert out.x == 1
    assert out.velocity_y == 1
    assert out.y == 101


def test_advance_reflects_at_right_edge() -> None:
    state = BoxState(x=WIDTH - BOX_SIZE, y=100, velocity_x=1, velocity_y=1)
    out = advance(state, width=WIDTH, height=HEIGHT, size=BOX_SIZE)
    assert out.velocity_x == -1
    assert out.x == WIDTH - BOX_SIZE - 1


def test_advance_reflects_at_top_and_bottom_edges() -> None:
    top = advance(BoxState(x=50, y=0, velocity_x=1, velocity_y=-1), width=WIDTH, height=HEIGHT, size=BOX_SIZE)
    assert (top.y, top.velocity_y) == (1, 1)
    bottom = advance(
        BoxState(x=50, y=HEIGHT - BOX_SIZE, velocity_x=1, velocity_y=1),
        width=WIDTH,
        height=HEIGHT,
        size=BOX_SIZE,
    )
    assert (bottom.y, bottom.velocity_y) == (HEIGHT - BOX_SIZE - 1, -1)


def test_advance_uses_pre_move_position_and_allows_one_tick_overshoot() -> None:
    # One pixel past the right edge: reflects and steps back inside.
    state = BoxState(x=WIDTH - BOX_SIZE + 1, y=100, velocity_x=1, velocity_y=1)
    out = advance(state, width=WIDTH, height=HEIGHT, size=BOX_SIZE)
    assert out.velocity_x == -1
    assert out.x == WIDTH - BOX_SIZE

    state = BoxState(x=1, y=100, velocity_x=-1, velocity_y=1)
    out = advance(state, width=WIDTH, height=HEIGHT, size=BOX_SIZE)
    assert (out.x, out.velocity_x) == (0, -1)
    out = advance(out, width=WIDTH, height=HEIGHT, size=BOX_SIZE)
    assert (out.x, out.velocity_x) == (1, 1)


def test_advance_is_pure() -> None:
    state = BoxState(x=10, y=10, velocity_x=1, velocity_y=-1)
    _ = advance(state, width=WIDTH, height=HEIGHT, size=BOX_SIZE)
    assert state == BoxState(x=10, y=10, velocity_x=1, velocity_y=-1)


@pytest.mark.parametrize(
    ("width", "height", "size"),
    [(320, 240, 64), (100, 80, 10), (64, 48, 47), (17, 300, 3)],
)
def test_advance_keeps_box_bounded_over_many_ticks(width: int, height: int, size: int) -> None:
    state = BoxState(x=1, y=1, velocity_x=1, velocity_y=1)
    for _ in range(10_000):
        state = advance(state, width=width, height=height, size=size)
        assert -1 <= state.x <= width
        assert -1 <= state.y <= height
        assert state.x + size <= width + 1
        assert state.y + size <= height + 1
        assert abs(state.velocity_x) == 1
        assert abs(state.velocity_y) == 1


def test_draw_coverage_for_initial_state() -> None:
    frame = bytearray(WIDTH * HEIGHT * 4)
    assert len(frame) == 307200

    draw(INITIAL_STATE, WIDTH, HEIGHT, frame, size=BOX_SIZE)

    assert _pixel(frame, WIDTH, 24, 16) == (0x5E, 0x48, 0xE8, 0xFF)
    assert _pixel(frame, WIDTH, 87, 79) == (0x5E, 0x48, 0xE8, 0xFF)
    assert _pixel(frame, WIDTH, 0, 0) == (0x48, 0xB2, 0xE8, 0xFF)
    assert _pixel(frame, WIDTH, 319, 239) == (0x48, 0xB2, 0xE8, 0xFF)
    assert _pixel(frame, WIDTH, 23, 16) == BACKGROUND_COLOR
    assert _pixel(frame, WIDTH, 88, 79) == BACKGROUND_COLOR
    assert _pixel(frame, WIDTH, 87, 80) == BACKGROUND_COLOR


def test_draw_writes_only_the_two_colors_everywhere() -> None:
    frame = bytearray(b"\x01" * (WIDTH * HEIGHT * 4))

    draw(INITIAL_STATE, WIDTH, HEIGHT, frame, size=BOX_SIZE)

    pixels = np.frombuffer(bytes(frame), dtype=np.uint8).reshape(-1, 4)
    is_box = np.all(pixels == np.array(BOX_COLOR, dtype=np.uint8), axis=1)
    is_background = np.all(pixels == np.array(BACKGROUND_COLOR, dtype=np.uint8), axis=1)
    assert bool(np.all(is_box | is_background))
    assert int(is_box.sum()) == BOX_SIZE * BOX_SIZE


def test_draw_matches_per_pixel_membership_rule() -> None:
    width, height, size = 13, 9, 4
    state = BoxState(x=10, y=-1, velocity_x=1, velocity_y=1)
    frame = bytearray(width * height * 4)

    draw(state, width, height, frame, size=size)

    for i in range(width * height):
        x = i % width
        y = i // width
        inside = state.x <= x < state.x + size and state.y <= y < state.y + size
        expected = BOX_COLOR if inside else BACKGROUND_COLOR
        assert tuple(frame[i * 4 : i * 4 + 4]) == expected


def test_draw_handles_box_partially_outside_surface() -> None:
    frame = bytearray(WIDTH * HEIGHT * 4)
    draw(BoxState(x=-1, y=HEIGHT - BOX_SIZE + 1, velocity_x=1, velocity_y=-1), WIDTH, HEIGHT, frame, size=BOX_SIZE)

    assert _pixel(frame, WIDTH, 0, HEIGHT - 1) == BOX_COLOR
    assert _pixel(frame, WIDTH, BOX_SIZE - 2, HEIGHT - 1) == BOX_COLOR
    assert _pixel(frame, WIDTH, BOX_SIZE - 1, HEIGHT - 1) == BACKGROUND_COLOR
    assert _pixel(frame, WIDTH, 0, HEIGHT - BOX_SIZE) == BACKGROUND_COLOR


def test_draw_is_idempotent() -> None:
    first = bytearray(WIDTH * HEIGHT * 4)
    second = bytearray(WIDTH * HEIGHT * 4)
    state = BoxState(x=200, y=100, velocity_x=-1, velocity_y=1)

    draw(state, WIDTH, HEIGHT, first, size=BOX_SIZE)
    draw(state, WIDTH, HEIGHT, second, size=BOX_SIZE)
    snapshot = bytes(first)
    draw(state, WIDTH, HEIGHT, first, size=BOX_SIZE)

    assert first == second
    assert bytes(first) == snapshot


def test_draw_overwrites_previous_frame_contents() -> None:
    frame = bytearray(WIDTH * HEIGHT * 4)
    draw(BoxState(x=0, y=0, velocity_x=1, velocity_y=1), WIDTH, HEIGHT, frame, size=BOX_SIZE)
    draw(BoxState(x=200, y=150, velocity_x=1, velocity_y=1), WIDTH, HEIGHT, frame, size=BOX_SIZE)

    assert _pixel(frame, WIDTH, 0, 0) == BACKGROUND_COLOR
    assert _pixel(frame, WIDTH, 200, 150) == BOX_COLOR


def test_world_update_and_draw_follow_module_functions() -> None:
    world = World(BoxState(x=0, y=0, velocity_x=-1, velocity_y=-1), width=100, height=50, box_size=10)
    world.update()
    assert world.state == BoxState(x=1, y=1, velocity_x=1, velocity_y=1)

    frame = bytearray(100 * 50 * 4)
    world.draw(frame)
    assert _pixel(frame, 100, 1, 1) == BOX_COLOR
    assert _pixel(frame, 100, 0, 0) == BACKGROUND_COLOR
    assert _pixel(frame, 100, 10, 10) == BOX_COLOR
    assert _pixel(frame, 100, 11, 11) == BACKGROUND_COLOR
