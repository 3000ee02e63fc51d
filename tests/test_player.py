import math

import pytest

from raycub.player import Camera, KeyCode, Keys


def open_room(size=5):
    return [
        [1 if x in (0, size - 1) or y in (0, size - 1) else 0 for y in range(size)]
        for x in range(size)
    ]


@pytest.mark.parametrize(
    "code, attr",
    [
        (13, "w"),
        (0, "a"),
        (1, "s"),
        (2, "d"),
        (123, "left"),
        (124, "right"),
        (257, "run"),
        (53, "esc"),
    ],
)
def test_press_and_release(code, attr):
    keys = Keys()
    keys.press(code)
    assert getattr(keys, attr) is True
    keys.release(code)
    assert getattr(keys, attr) is False


def test_keycode_enum_is_accepted():
    keys = Keys()
    keys.press(KeyCode.W)
    assert keys.w is True
    assert keys.a is False


def test_unknown_code_is_ignored():
    keys = Keys()
    keys.press(999)
    assert keys == Keys()


def test_update_speed_follows_run_key():
    keys = Keys()
    assert keys.movespeed == 0.1
    keys.update_speed()
    assert keys.movespeed == 0.06
    keys.press(KeyCode.RUN)
    keys.update_speed()
    assert keys.movespeed == 0.1


@pytest.mark.parametrize(
    "heading, expected",
    [
        ("N", (-1.0, 0.0, 0.0, 0.66)),
        ("S", (1.0, 0.0, 0.0, -0.66)),
        ("E", (0.0, 1.0, 0.66, 0.0)),
        ("W", (0.0, -1.0, -0.66, 0.0)),
    ],
)
def test_facing_sets_direction_and_plane(heading, expected):
    cam = Camera.facing(heading, 3, 7)
    assert (cam.dir_x, cam.dir_y, cam.plane_x, cam.plane_y) == expected


def test_facing_centres_in_cell():
    cam = Camera.facing("N", 3, 7)
    assert math.floor(cam.x) == 3
    assert math.floor(cam.y) == 7
    assert cam.x - 3 == 0.5
    assert cam.y - 7 == 0.5


def test_facing_rejects_unknown_heading():
    with pytest.raises(ValueError):
        Camera.facing("Q", 1, 1)


def test_forward_then_back_returns():
    world = open_room()
    cam = Camera.facing("N", 2, 2)
    start = (cam.x, cam.y)
    keys = Keys()
    keys.press(KeyCode.W)
    cam.move(keys, world)
    assert cam.x == pytest.approx(start[0] - keys.movespeed)
    assert cam.y == start[1]
    keys.release(KeyCode.W)
    keys.press(KeyCode.S)
    cam.move(keys, world)
    assert cam.x == pytest.approx(start[0])
    assert cam.y == start[1]


def test_wall_blocks_movement():
    world = open_room()
    cam = Camera.facing("N", 1, 2)
    start = (cam.x, cam.y)
    keys = Keys(movespeed=0.6)
    keys.press(KeyCode.W)
    cam.move(keys, world)
    assert (cam.x, cam.y) == start


def test_strafe_left_and_right():
    world = open_room()
    cam = Camera.facing("N", 2, 2)
    start = (cam.x, cam.y)
    keys = Keys()
    keys.press(KeyCode.A)
    cam.move(keys, world)
    assert cam.x == start[0]
    assert cam.y < start[1]
    keys.release(KeyCode.A)
    keys.press(KeyCode.D)
    cam.move(keys, world)
    assert cam.y == pytest.approx(start[1])


def test_opposite_keys_cancel():
    world = open_room()
    cam = Camera.facing("E", 2, 2)
    start = (cam.x, cam.y)
    keys = Keys()
    keys.press(KeyCode.W)
    keys.press(KeyCode.S)
    cam.move(keys, world)
    assert cam.x == pytest.approx(start[0])
    assert cam.y == pytest.approx(start[1])


def test_rotation_preserves_lengths_and_orthogonality():
    cam = Camera.facing("W", 2, 2)
    keys = Keys()
    keys.press(KeyCode.LEFT)
    for _ in range(37):
        cam.rotate(keys)
    assert math.hypot(cam.dir_x, cam.dir_y) == pytest.approx(1.0)
    assert math.hypot(cam.plane_x, cam.plane_y) == pytest.approx(0.66)
    assert cam.dir_x * cam.plane_x + cam.dir_y * cam.plane_y == pytest.approx(0.0, abs=1e-12)


def test_left_turn_angle_equals_rots():
    cam = Camera.facing("S", 2, 2)
    before = math.atan2(cam.dir_y, cam.dir_x)
    keys = Keys()
    keys.press(KeyCode.LEFT)
    cam.rotate(keys)
    after = math.atan2(cam.dir_y, cam.dir_x)
    assert after - before == pytest.approx(keys.rots)


def test_left_then_right_restores():
    cam = Camera.facing("N", 2, 2)
    original = Camera.facing("N", 2, 2)
    keys = Keys()
    keys.press(KeyCode.LEFT)
    cam.rotate(keys)
    keys.release(KeyCode.LEFT)
    keys.press(KeyCode.RIGHT)
    cam.rotate(keys)
    assert cam.dir_x == pytest.approx(original.dir_x)
    assert cam.dir_y == pytest.approx(original.dir_y, abs=1e-12)
    assert cam.plane_y == pytest.approx(original.plane_y)