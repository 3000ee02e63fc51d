"""Ray casting of walls, textured floor and sprites into a pixel buffer."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from raycub.config import SPRITE, WALL, CubConfig, Sprite
from raycub.player import Camera
from raycub.xpm import XpmImage

__all__ = [
    "Texture",
    "TextureSet",
    "wall_texture_index",
    "sort_sprites",
    "Renderer",
]

_INT_MIN = -(1 << 31)
# Halves each colour channel of a pixel already shifted right by one.
_SHADE_MASK = 8355711


def _trunc(value: float) -> int:
    """Convert to int by truncation; non-finite values give INT_MIN."""
    return int(value) if math.isfinite(value) else _INT_MIN


def _cdiv(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


def _fdiv(a: float, b: float) -> float:
    """Floating division giving infinities or NaN instead of raising."""
    if b:
        return a / b
    if a == 0 or math.isnan(a):
        return math.nan
    return math.copysign(math.inf, a) * math.copysign(1.0, b)


def _frac(value: float) -> float:
    return value - math.floor(value) if math.isfinite(value) else math.nan


@dataclass(frozen=True)
class Texture:
    """A texture as row-major 32-bit pixels."""

    width: int
    height: int
    pixels: tuple[int, ...]

    @classmethod
    def from_image(cls, image: XpmImage) -> "Texture":
        """Wrap a decoded XPM image."""
        return cls(image.width, image.height, tuple(image.pixels))

    def sample(self, index: int) -> int:
        """Return the pixel at a flat index, or 0 outside the texture."""
        if 0 <= index < len(self.pixels):
            return self.pixels[index]
        return 0


@dataclass(frozen=True)
class TextureSet:
    """The textures a scene uses."""

    north: Texture
    south: Texture
    west: Texture
    east: Texture
    floor: Texture | None = None
    sprite: Texture | None = None

    @property
    def walls(self) -> tuple[Texture, Texture, Texture, Texture]:
        """Wall textures in index order: north, south, west, east."""
        return (self.north, self.south, self.west, self.east)


def wall_texture_index(camera: Camera, mapx: int, mapy: int, side: int) -> int:
    """Choose the wall texture (0 north, 1 south, 2 west, 3 east) for a hit."""
    if side == 1 and camera.y > mapy:
        return 2
    if side == 1 and camera.y < mapy:
        return 3
    return 0 if camera.x > mapx else 1


def sort_sprites(sprites: Sequence[Sprite], x: float, y: float) -> list[Sprite]:
    """Order sprites for drawing, farthest first.

    The first sprite keeps its place; the others are sorted by distance
    from (x, y), ties keeping their order.
    """
    if not sprites:
        return []

    def distance(sprite: Sprite) -> float:
        return (x - sprite.x) ** 2 + (y - sprite.y) ** 2

    head, *rest = sprites
    return [head, *sorted(rest, key=distance, reverse=True)]


@dataclass
class _Hit:
    map_x: int
    map_y: int
    side: int
    step_x: int
    step_y: int
    ray_x: float
    ray_y: float


class Renderer:
    """Draws frames of a scene into a flat, row-major pixel buffer."""

    def __init__(
        self, config: CubConfig, textures: TextureSet, camera: Camera | None = None
    ) -> None:
        if config.floor_textured and textures.floor is None:
            raise ValueError("a floor texture is required for a textured floor")
        self.config = config
        self.textures = textures
        self.camera = camera if camera is not None else config.camera
        self.width = config.width
        self.height = config.height
        self.pixels: list[int] = [0] * (self.width * self.height)
        self.zbuffer: list[float] = [0.0] * (self.width + 1)
        self.sprites: list[Sprite] = list(config.sprites)
        # The wall texture of a column follows the previous ray's hit.
        self._last_hit = (0, 0, 0)

    def render(self) -> list[int]:
        """Draw one frame and return the pixel buffer."""
        if self.config.floor_textured:
            self._draw_floor()
        for x in range(1, self.width + 1):
            self._column(x, watch_sprites=False)
        self.sprites = sort_sprites(self.sprites, self.camera.x, self.camera.y)
        if self.textures.sprite is not None:
            self._draw_sprites(self.textures.sprite)
        # Walls are painted again except where a ray crosses a sprite cell.
        for x in range(1, self.width + 1):
            self._column(x, watch_sprites=True)
        return self.pixels

    def _cast(self, x: int, watch_sprites: bool) -> _Hit | None:
        cam = self.camera
        world = self.config.world
        camera_x = 2 * x / self.width - 1
        ray_x = cam.dir_x + cam.plane_x * camera_x
        ray_y = cam.dir_y + cam.plane_y * camera_x
        map_x, map_y = int(cam.x), int(cam.y)
        delta_x = abs(_fdiv(1.0, ray_x))
        delta_y = abs(_fdiv(1.0, ray_y))
        if ray_x < 0:
            step_x, side_x = -1, (cam.x - map_x) * delta_x
        else:
            step_x, side_x = 1, (map_x + 1.0 - cam.x) * delta_x
        if ray_y < 0:
            step_y, side_y = -1, (cam.y - map_y) * delta_y
        else:
            step_y, side_y = 1, (map_y + 1.0 - cam.y) * delta_y

        crossed = False
        while True:
            if side_x < side_y:
                side_x += delta_x
                map_x += step_x
                side = 0
            else:
                side_y += delta_y
                map_y += step_y
                side = 1
            cell = world[map_x][map_y]
            if cell == SPRITE and watch_sprites:
                crossed = True
            if cell == WALL:
                break
        self._last_hit = (map_x, map_y, side)
        if crossed:
            return None
        return _Hit(map_x, map_y, side, step_x, step_y, ray_x, ray_y)

    def _column(self, x: int, watch_sprites: bool) -> None:
        cam = self.camera
        width, height = self.width, self.height
        tex_index = wall_texture_index(cam, *self._last_hit)
        hit = self._cast(x, watch_sprites)
        if hit is None:
            return

        if hit.side == 0:
            perp = _fdiv(hit.map_x - cam.x + (1 - hit.step_x) // 2, hit.ray_x)
        else:
            perp = _fdiv(hit.map_y - cam.y + (1 - hit.step_y) // 2, hit.ray_y)
        line_height = _trunc(_fdiv(height, perp))
        draw_start = max(_cdiv(-line_height, 2) + height // 2, 0)
        draw_end = _cdiv(line_height, 2) + height // 2
        if draw_end >= height:
            draw_end = height - 1
        if hit.side == 0:
            wall_x = _frac(cam.y + perp * hit.ray_y)
        else:
            wall_x = _frac(cam.x + perp * hit.ray_x)

        texture = self.textures.walls[tex_index]
        tex_x = _trunc(wall_x * texture.width)
        if (hit.side == 0 and hit.ray_x > 0) or (hit.side == 1 and hit.ray_y < 0):
            tex_x = texture.width - tex_x - 1
        step = _fdiv(1.0 * texture.width, line_height)
        tex_pos = (draw_start - height // 2 + _cdiv(line_height, 2)) * step

        pixels = self.pixels
        ceiling = self.config.ceiling_color
        floor = self.config.floor_color
        paint_floor = not self.config.floor_textured
        mask = texture.height - 1
        for y in range(1, height - 1):
            index = y * width + x
            if y < draw_start:
                pixels[index] = ceiling
            elif y <= draw_end:
                tex_y = _trunc(tex_pos) & mask
                tex_pos += step
                color = texture.sample(texture.height * tex_y + tex_x)
                if hit.side == 1:
                    color = (color >> 1) & _SHADE_MASK
                pixels[index] = color
            elif paint_floor:
                pixels[index] = floor
        self.zbuffer[x] = perp

    def _draw_floor(self) -> None:
        cam = self.camera
        texture = self.textures.floor
        assert texture is not None
        width, height = self.width, self.height
        tw, th = texture.width, texture.height
        pixels = self.pixels
        pos_z = 0.5 * height
        for i in range(height):
            ray0_x, ray0_y = cam.dir_x - cam.plane_x, cam.dir_y - cam.plane_y
            ray1_x, ray1_y = cam.dir_x + cam.plane_x, cam.dir_y + cam.plane_y
            row_distance = _fdiv(pos_z, i - height // 2)
            step_x = row_distance * (ray1_x - ray0_x) / width
            step_y = row_distance * (ray1_y - ray0_y) / width
            floor_x = cam.x + row_distance * ray0_x
            floor_y = cam.y + row_distance * ray0_y
            for x in range(width):
                cell_x, cell_y = _trunc(floor_x), _trunc(floor_y)
                tx = _trunc(tw * (floor_x - cell_x)) & (tw - 1)
                ty = _trunc(th * (floor_y - cell_y)) & (th - 1)
                floor_x += step_x
                floor_y += step_y
                pixels[i * width + x] = texture.sample(tw * ty + tx)

    def _draw_sprites(self, texture: Texture) -> None:
        cam = self.camera
        width, height = self.width, self.height
        pixels = self.pixels
        inv_det = _fdiv(1.0, cam.plane_x * cam.dir_y - cam.dir_x * cam.plane_y)
        for sprite in self.sprites:
            rel_x = sprite.x - cam.x
            rel_y = sprite.y - cam.y
            transform_x = inv_det * (cam.dir_y * rel_x - cam.dir_x * rel_y)
            transform_y = inv_det * (-cam.plane_y * rel_x + cam.plane_x * rel_y)
            screen_x = _trunc((width // 2) * (1 + _fdiv(transform_x, transform_y)))
            size = abs(_trunc(_fdiv(height, transform_y)))
            start_y = max(_cdiv(-size, 2) + height // 2, 0)
            end_y = min(_cdiv(size, 2) + height // 2, height - 1)
            left = _cdiv(-size, 2) + screen_x
            start_x = max(left, 0)
            end_x = min(_cdiv(size, 2) + screen_x, width - 1)
            for stripe in range(start_x, end_x):
                tex_x = _cdiv(_cdiv(256 * (stripe - left) * texture.width, size), 256)
                if not (
                    transform_y > 0
                    and 0 < stripe < width
                    and transform_y < self.zbuffer[stripe]
                ):
                    continue
                for y in range(start_y + 1, end_y + 1):
                    d = y * 256 - height * 128 + size * 128
                    tex_y = _cdiv(_cdiv(d * texture.height, size), 256)
                    color = texture.sample(texture.width * tex_y + tex_x)
                    if color != 0:
                        pixels[y * width + stripe] = color