"""Keyboard state and the player's camera."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Sequence

__all__ = ["KeyCode", "Keys", "Camera"]

WALK_SPEED = 0.06
RUN_SPEED = 0.1
TURN_SPEED = 0.05
PLANE = 0.66


class KeyCode(IntEnum):
    """Key codes delivered by the window system for the keys the game uses."""

    A = 0
    S = 1
    D = 2
    W = 13
    ESC = 53
    LEFT = 123
    RIGHT = 124
    RUN = 257


_KEY_FIELDS = {
    KeyCode.A: "a",
    KeyCode.S: "s",
    KeyCode.D: "d",
    KeyCode.W: "w",
    KeyCode.ESC: "esc",
    KeyCode.LEFT: "left",
    KeyCode.RIGHT: "right",
    KeyCode.RUN: "run",
}


@dataclass
class Keys:
    """Which keys are held, with the current movement and turning speeds."""

    w: bool = False
    a: bool = False
    s: bool = False
    d: bool = False
    left: bool = False
    right: bool = False
    run: bool = False
    esc: bool = False
    movespeed: float = RUN_SPEED
    rots: float = TURN_SPEED

    def _set(self, code: int, state: bool) -> None:
        try:
            key = KeyCode(code)
        except ValueError:
            return
        setattr(self, _KEY_FIELDS[key], state)

    def press(self, code: int) -> None:
        """Mark the key with this code as held; unknown codes are ignored."""
        self._set(code, True)

    def release(self, code: int) -> None:
        """Mark the key with this code as released; unknown codes are ignored."""
        self._set(code, False)

    def update_speed(self) -> None:
        """Pick the running or walking speed from the run key."""
        self.movespeed = RUN_SPEED if self.run else WALK_SPEED


@dataclass
class Camera:
    """Player position, viewing direction and camera plane."""

    x: float = 0.0
    y: float = 0.0
    dir_x: float = 0.0
    dir_y: float = 0.0
    plane_x: float = 0.0
    plane_y: float = 0.0

    @classmethod
    def facing(cls, heading: str, x: int, y: int) -> "Camera":
        """Create a camera in the middle of map cell (x, y) facing N, S, E or W."""
        camera = cls(x=x + 0.5, y=y + 0.5)
        if heading == "N":
            camera.dir_x, camera.plane_y = -1.0, PLANE
        elif heading == "S":
            camera.dir_x, camera.plane_y = 1.0, -PLANE
        elif heading == "E":
            camera.dir_y, camera.plane_x = 1.0, PLANE
        elif heading == "W":
            camera.dir_y, camera.plane_x = -1.0, -PLANE
        else:
            raise ValueError(f"Init zone does not match: {heading!r}")
        return camera

    def _step(self, world: Sequence[Sequence[int]], dx: float, dy: float) -> None:
        if world[int(self.x + dx)][int(self.y)] == 0:
            self.x += dx
        if world[int(self.x)][int(self.y + dy)] == 0:
            self.y += dy

    def move(self, keys: Keys, world: Sequence[Sequence[int]]) -> None:
        """Walk and strafe for the held keys, sliding along walls."""
        speed = keys.movespeed
        if keys.w:
            self._step(world, self.dir_x * speed, self.dir_y * speed)
        if keys.s:
            self._step(world, -self.dir_x * speed, -self.dir_y * speed)
        if keys.a:
            self._step(world, -self.dir_y * speed, self.dir_x * speed)
        if keys.d:
            self._step(world, self.dir_y * speed, -self.dir_x * speed)

    def _turn(self, angle: float) -> None:
        cos_a, sin_a = math.cos(angle), math.sin(angle)
        self.dir_x, self.dir_y = (
            self.dir_x * cos_a - self.dir_y * sin_a,
            self.dir_x * sin_a + self.dir_y * cos_a,
        )
        self.plane_x, self.plane_y = (
            self.plane_x * cos_a - self.plane_y * sin_a,
            self.plane_x * sin_a + self.plane_y * cos_a,
        )

    def rotate(self, keys: Keys) -> None:
        """Turn right and/or left by the turning speed for the held keys."""
        if keys.right:
            self._turn(-keys.rots)
        if keys.left:
            self._turn(keys.rots)