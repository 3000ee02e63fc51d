"""Game window, frame loop, screenshots and the command-line entry point."""

from __future__ import annotations

import subprocess
import sys
from array import array
from os import PathLike
from typing import Sequence

from raycub.bmp import write_bmp
from raycub.config import ConfigError, CubConfig, load_cub
from raycub.player import Camera, KeyCode, Keys
from raycub.render import Renderer, Texture, TextureSet
from raycub.xpm import XpmError, load_xpm

__all__ = ["load_textures", "take_screenshot", "Game", "main"]

TITLE = "cub3d"
SCREENSHOT_NAME = "screenshot.bmp"
SAVE_FLAG = "--save"
MUSIC_PATH = "music/music1.mp3"
EXIT_FAILURE = 255
_ERROR_COLOR = "\033[1;31m"


def _load_texture(path: str | None, message: str) -> Texture:
    if path is None:
        raise ConfigError(message)
    try:
        return Texture.from_image(load_xpm(path))
    except XpmError as exc:
        raise ConfigError(message) from exc


def load_textures(config: CubConfig) -> TextureSet:
    """Load the wall, floor and sprite textures named by the scene."""
    north = _load_texture(config.north, "N path wrong.")
    south = _load_texture(config.south, "SO path wrong.")
    west = _load_texture(config.west, "W path wrong.")
    east = _load_texture(config.east, "E path wrong.")
    floor = None
    if config.floor_texture is not None:
        floor = _load_texture(config.floor_texture, "Wrong floor path.")
    sprite = None
    if config.sprite is not None:
        sprite = _load_texture(config.sprite, "Wrong sprite path.")
    return TextureSet(north, south, west, east, floor=floor, sprite=sprite)


class Game:
    """One running scene: held keys, the camera and the renderer."""

    def __init__(self, config: CubConfig, textures: TextureSet) -> None:
        self.config = config
        self.textures = textures
        self.keys = Keys()
        self.camera: Camera = config.camera
        self.renderer = Renderer(config, textures, self.camera)
        self.running = True
        self._music: subprocess.Popen | None = None

    @property
    def pixels(self) -> list[int]:
        """The last drawn frame as row-major 0xRRGGBB pixels."""
        return self.renderer.pixels

    def tick(self) -> bool:
        """Apply the held keys and draw a frame.

        Returns False, without drawing, once escape has been pressed.
        """
        self.camera.move(self.keys, self.config.world)
        self.camera.rotate(self.keys)
        self.keys.update_speed()
        if self.keys.esc:
            self.running = False
            return False
        self.renderer.render()
        return True

    def _start_music(self) -> None:
        try:
            self._music = subprocess.Popen(
                ["afplay", MUSIC_PATH],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError:
            self._music = None

    def _stop_music(self) -> None:
        if self._music is not None:
            self._music.terminate()
            self._music = None

    def _frame_bytes(self) -> bytes:
        data = array("I", (0xFF000000 | (p & 0xFFFFFF) for p in self.pixels))
        if sys.byteorder == "little":
            data.byteswap()
        return data.tobytes()

    def run(self) -> None:
        """Open a window and run the game until it is closed."""
        import pygame

        key_map = {
            pygame.K_a: KeyCode.A,
            pygame.K_s: KeyCode.S,
            pygame.K_d: KeyCode.D,
            pygame.K_w: KeyCode.W,
            pygame.K_ESCAPE: KeyCode.ESC,
            pygame.K_LEFT: KeyCode.LEFT,
            pygame.K_RIGHT: KeyCode.RIGHT,
            pygame.K_LSHIFT: KeyCode.RUN,
        }
        size = (self.config.width, self.config.height)
        pygame.init()
        try:
            screen = pygame.display.set_mode(size)
            pygame.display.set_caption(TITLE)
            self._start_music()
            while self.running:
                for event in pygame.event.get():
                    if event.type == pygame.QUIT:
                        self.running = False
                    elif event.type == pygame.KEYDOWN and event.key in key_map:
                        self.keys.press(key_map[event.key])
                    elif event.type == pygame.KEYUP and event.key in key_map:
                        self.keys.release(key_map[event.key])
                if not self.running or not self.tick():
                    break
                frame = pygame.image.frombuffer(self._frame_bytes(), size, "ARGB")
                screen.blit(frame, (0, 0))
                pygame.display.flip()
        finally:
            self._stop_music()
            pygame.quit()


def take_screenshot(
    config: CubConfig, textures: TextureSet, path: str | PathLike[str]
) -> None:
    """Draw the first frame of the scene and save it as a BMP file."""
    game = Game(config, textures)
    game.tick()
    write_bmp(path, game.pixels, config.width, config.height)


def _fail(message: str) -> int:
    sys.stderr.write(f"{_ERROR_COLOR}Error\n{message}\n")
    return EXIT_FAILURE


def main(argv: Sequence[str] | None = None) -> int:
    """Play a .cub scene, or with --save write its first frame to a BMP file."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) not in (1, 2):
        return _fail("NUMBER OF ARGUMENTS INVALID")
    try:
        config = load_cub(args[0])
        textures = load_textures(config)
    except ConfigError as exc:
        return _fail(str(exc))
    if len(args) == 2:
        if args[1] != SAVE_FLAG:
            return _fail(f"Second argument wrong. Try {SAVE_FLAG}")
        try:
            take_screenshot(config, textures, SCREENSHOT_NAME)
        except OSError:
            return _fail("Couldn't take screenshot.")
        return 0
    Game(config, textures).run()
    return 0