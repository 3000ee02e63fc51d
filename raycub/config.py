"""Reading of .cub scene descriptions: resolution, textures, colours and map."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from os import PathLike

from raycub.player import Camera

__all__ = [
    "ConfigError",
    "Sprite",
    "CubConfig",
    "atoi",
    "CubParser",
    "parse_cub",
    "check_extension",
    "load_cub",
]

MIN_WIDTH, MAX_WIDTH = 200, 1280
MIN_HEIGHT, MAX_HEIGHT = 200, 720
FALLBACK_WIDTH, FALLBACK_HEIGHT = 2560, 1440
MAX_SPRITES = 200

FLOOR = 0
WALL = 1
SPRITE = 2
VOID = 3

_DIGITS = "0123456789"
_HEADINGS = "NWES"
_ATOI_SPACE = "\t\n\v\f\r "


class ConfigError(ValueError):
    """Raised when a scene description is invalid."""


@dataclass(frozen=True)
class Sprite:
    """A sprite standing in the middle of a map cell."""

    x: float
    y: float


@dataclass
class CubConfig:
    """A fully read and checked scene."""

    width: int
    height: int
    north: str | None
    south: str | None
    west: str | None
    east: str | None
    sprite: str | None
    floor_texture: str | None
    floor_color: int
    ceiling_color: int
    world: list[list[int]]
    sprites: list[Sprite]
    camera: Camera

    @property
    def rows(self) -> int:
        return len(self.world)

    @property
    def cols(self) -> int:
        return len(self.world[0]) if self.world else 0

    @property
    def floor_textured(self) -> bool:
        return self.floor_texture is not None


def atoi(text: str) -> int:
    """Read a leading decimal integer after optional whitespace and sign.

    Returns 0 when there is none; the result wraps to a signed 32-bit value.
    """
    i, n = 0, len(text)
    while i < n and text[i] in _ATOI_SPACE:
        i += 1
    negative = False
    if i < n and text[i] in "+-":
        negative = text[i] == "-"
        i += 1
    start = i
    while i < n and text[i] in _DIGITS:
        i += 1
    value = int(text[start:i]) if i > start else 0
    if negative:
        value = -value
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


def _char(line: str, index: int) -> str:
    return line[index] if 0 <= index < len(line) else ""


def _isdigit(char: str) -> bool:
    return char != "" and char in _DIGITS


def _path_from_dot(line: str) -> str:
    index = line.find(".")
    if index == -1:
        raise ConfigError(f"No path in line {line!r}")
    return line[index:]


def _read_rgb(line: str, start: int) -> int:
    i = start
    while _char(line, i) == " ":
        i += 1
    channels = []
    for _ in range(3):
        channels.append(atoi(line[i:]))
        while _isdigit(_char(line, i)):
            i += 1
        i += 1
    if any(not 0 <= channel <= 255 for channel in channels):
        raise ConfigError("Color out of RGB range.")
    red, green, blue = channels
    return red * 65536 + green * 256 + blue


class CubParser:
    """Accumulates the lines of a scene description and builds the scene."""

    def __init__(self) -> None:
        self.width = 0
        self.height = 0
        self.north: str | None = None
        self.south: str | None = None
        self.west: str | None = None
        self.east: str | None = None
        self.sprite: str | None = None
        self.floor_texture: str | None = None
        self.floor_color = 0
        self.ceiling_color = 0
        self._rows: list[str] = []
        self._cols = 0
        self._in_map = False

    def feed(self, line: str) -> None:
        """Take one line of the description, without its newline."""
        first, second = line[:1], line[1:2]
        if first == "R":
            self._resolution(line)
        elif first == "S":
            self._s_line(line)
        elif first in ("N", "W", "E") or (first == "F" and second == "T"):
            self._texture_line(line)
        elif first in ("F", "C"):
            self._color_line(line)
        elif _isdigit(first) or first == " ":
            self._map_line(line)
        elif self._in_map and line:
            raise ConfigError("Map incorrect or items after map.")

    def _resolution(self, line: str) -> None:
        if self.width != 0 or self.height != 0:
            raise ConfigError("R rule duplicated.")
        i = 1
        while _char(line, i) == " ":
            i += 1
        self.width = atoi(line[i:])
        while _isdigit(_char(line, i)):
            i += 1
        self.height = atoi(line[i:])
        if not (MIN_WIDTH <= self.width <= MAX_WIDTH and MIN_HEIGHT <= self.height <= MAX_HEIGHT):
            sys.stdout.write(
                f"Resolution not valid. Setting {FALLBACK_WIDTH} x {FALLBACK_HEIGHT}\n"
            )
            self.width, self.height = FALLBACK_WIDTH, FALLBACK_HEIGHT

    def _s_line(self, line: str) -> None:
        second = line[1:2]
        if second == "O":
            self.south = _path_from_dot(line)
        elif second == " ":
            self.sprite = _path_from_dot(line)

    def _texture_line(self, line: str) -> None:
        first = line[:1]
        if first == "N":
            if self.north is not None:
                raise ConfigError("N path duplicated.")
            self.north = _path_from_dot(line)
        elif first == "W":
            if self.west is not None:
                raise ConfigError("W path duplicated.")
            self.west = _path_from_dot(line)
        elif first == "E":
            if self.east is not None:
                raise ConfigError("E path duplicated.")
            self.east = _path_from_dot(line)
        else:
            if self.floor_texture is not None:
                raise ConfigError("FT path duplicated.")
            self.floor_texture = _path_from_dot(line)

    def _color_line(self, line: str) -> None:
        if line[:1] == "F":
            color = _read_rgb(line, 1)
            if self.floor_color != 0:
                raise ConfigError("F color duplicated.")
            self.floor_color = color
        else:
            color = _read_rgb(line, 2)
            if self.ceiling_color != 0:
                raise ConfigError("C color duplicated.")
            self.ceiling_color = color

    def _map_line(self, line: str) -> None:
        self._cols = max(self._cols, len(line))
        self._rows.append(line)
        self._in_map = True

    def _build_world(self) -> tuple[list[list[int]], list[Sprite], Camera | None]:
        world: list[list[int]] = []
        sprites: list[Sprite] = []
        camera: Camera | None = None
        for x, row in enumerate(self._rows):
            cells: list[int] = []
            for y in range(self._cols):
                char = _char(row, y)
                if _isdigit(char):
                    cells.append(ord(char) - ord("0"))
                    if char == "2":
                        if len(sprites) >= MAX_SPRITES:
                            raise ConfigError(f"Too many sprites (at most {MAX_SPRITES}).")
                        sprites.append(Sprite(x + 0.5, y + 0.5))
                elif char != "" and char in _HEADINGS:
                    if camera is not None:
                        raise ConfigError("Init position duplicated.")
                    camera = Camera.facing(char, x, y)
                    cells.append(FLOOR)
                else:
                    cells.append(VOID)
            world.append(cells)
        return world, sprites, camera

    @staticmethod
    def _check_closed(world: list[list[int]]) -> None:
        rows = len(world)
        cols = len(world[0]) if world else 0

        def cell(x: int, y: int) -> int:
            if 0 <= x < rows and 0 <= y < cols:
                return world[x][y]
            return VOID

        for x in range(rows):
            for y in range(cols):
                value = world[x][y]
                if value == FLOOR:
                    if x == 0 or y == 0:
                        raise ConfigError("Map invalid, borders")
                    neighbours = (cell(x - 1, y), cell(x, y - 1), cell(x, y + 1), cell(x + 1, y))
                    if VOID in neighbours:
                        raise ConfigError("Map invalid, check")
                elif value == VOID:
                    below = min(x + 1, rows - 1)
                    if 0 < x < cols - 1 and (world[x - 1][y] == FLOOR or world[below][y] == FLOOR):
                        raise ConfigError("Map invalid, check x")
                    if 0 < y < rows - 1 and world[x][y - 1] == FLOOR:
                        raise ConfigError("Map invalid, check y")

    def finish(self) -> CubConfig:
        """Build the map and check the whole scene."""
        world, sprites, camera = self._build_world()
        if self.width == 0:
            raise ConfigError("Screen resolution not assigned.")
        if not self.floor_color:
            raise ConfigError("Floor color not assigned.")
        if not self.ceiling_color and self.floor_texture is None:
            raise ConfigError("Ceiling color not assigned.")
        self._check_closed(world)
        if camera is None:
            raise ConfigError("Start player not initialised.")
        return CubConfig(
            width=self.width,
            height=self.height,
            north=self.north,
            south=self.south,
            west=self.west,
            east=self.east,
            sprite=self.sprite,
            floor_texture=self.floor_texture,
            floor_color=self.floor_color,
            ceiling_color=self.ceiling_color,
            world=world,
            sprites=sprites,
            camera=camera,
        )


def parse_cub(text: str) -> CubConfig:
    """Parse the full text of a scene description."""
    parser = CubParser()
    for line in text.split("\n"):
        parser.feed(line)
    return parser.finish()


def check_extension(path: str | PathLike[str]) -> None:
    """Require the text from the first '.' of the path to start with '.cub'."""
    name = os.fspath(path)
    dot = name.find(".")
    if dot == -1:
        raise ConfigError("No extension assigned.")
    if not name[dot:].startswith(".cub"):
        raise ConfigError("Extension .cub wrong.")


def load_cub(path: str | PathLike[str]) -> CubConfig:
    """Check the file name, read the file and parse it."""
    check_extension(path)
    try:
        with open(path, "rb") as handle:
            raw = handle.read()
    except OSError as exc:
        raise ConfigError("File doesn't exist.") from exc
    return parse_cub(raw.decode("latin-1"))