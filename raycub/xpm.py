"""Loading of XPM images into flat pixel arrays."""

from __future__ import annotations

import re
from dataclasses import dataclass
from os import PathLike
from typing import Iterable, Iterator

from raycub.colors import text_to_rgb

__all__ = [
    "XpmError",
    "XpmImage",
    "strip_comments",
    "quoted_lines",
    "parse_xpm",
    "load_xpm",
]

# Pixel value stored for the transparent colour "None".
TRANSPARENT = 0xFF000000

_WORD_SPLIT = re.compile(r"[ \t]+")
_LEADING_INT = re.compile(r"[\t\n\v\f\r ]*([+-]?\d+)")


class XpmError(ValueError):
    """Raised when XPM data cannot be read."""


@dataclass(frozen=True)
class XpmImage:
    """A decoded image: row-major 32-bit pixels, 0xRRGGBB in the low bytes."""

    width: int
    height: int
    pixels: tuple[int, ...]

    def pixel(self, x: int, y: int) -> int:
        """Return the pixel at column ``x`` and row ``y``."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height} image")
        return self.pixels[y * self.width + x]


def _words(line: str) -> list[str]:
    return [word for word in _WORD_SPLIT.split(line) if word]


def _atoi(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def _find_unquoted(text: str, token: str) -> int:
    quoted = False
    for pos, char in enumerate(text):
        if char == '"':
            quoted = not quoted
        if not quoted and text.startswith(token, pos):
            return pos
    return -1


def _blank(text: str, begin: int, stop: int) -> str:
    return text[:begin] + " " * (stop - begin) + text[stop:]


def strip_comments(text: str) -> str:
    """Replace C-style comments outside string literals with spaces.

    The length of the text is kept, so positions stay valid.
    """
    while (begin := _find_unquoted(text, "/*")) != -1:
        end = text.find("*/", begin + 2)
        stop = len(text) if end == -1 else end + 2
        text = _blank(text, begin, stop)
    while (begin := _find_unquoted(text, "//")) != -1:
        end = text.find("\n", begin + 2)
        stop = len(text) if end == -1 else end + 1
        text = _blank(text, begin, stop)
    return text


def quoted_lines(text: str) -> Iterator[str]:
    """Yield the contents of successive double-quoted strings in ``text``."""
    pos = 0
    while True:
        start = text.find('"', pos)
        if start == -1:
            return
        end = text.find('"', start + 1)
        if end == -1:
            return
        yield text[start + 1 : end]
        pos = end + 1


def parse_xpm(lines: Iterable[str]) -> XpmImage:
    """Decode XPM data given as its string lines: header, colours, pixel rows."""
    rows = iter(lines)

    def next_line() -> str:
        try:
            return next(rows)
        except StopIteration:
            raise XpmError("unexpected end of XPM data") from None

    header = _words(next_line())
    if len(header) < 4:
        raise XpmError("XPM header needs width, height, colours and characters per pixel")
    width, height, ncolors, cpp = (_atoi(word) for word in header[:4])
    if min(width, height, ncolors, cpp) <= 0:
        raise XpmError("XPM header values must be positive")

    # Short keys go into a direct table where later entries win; longer
    # keys go into a list searched so that the first entry wins.
    direct = cpp <= 2
    palette: dict[str, int] = {}
    for _ in range(ncolors):
        line = next_line()
        words = _words(line[cpp:])
        try:
            index = words.index("c")
        except ValueError:
            raise XpmError(f"colour line without a 'c' key: {line!r}") from None
        if index + 1 >= len(words):
            raise XpmError(f"colour line without a colour: {line!r}")
        extra = words[index + 2] if index + 2 < len(words) else None
        rgb = text_to_rgb(words[index + 1], extra)
        key = line[:cpp]
        if direct:
            palette[key] = rgb
        else:
            palette.setdefault(key, rgb)

    pixels: list[int] = []
    for _ in range(height):
        line = next_line()
        if len(line) < width * cpp:
            raise XpmError(f"pixel row too short: {line!r}")
        for start in range(0, width * cpp, cpp):
            colour = palette.get(line[start : start + cpp], 0)
            if colour == -1:
                colour = TRANSPARENT
            pixels.append(colour & 0xFFFFFFFF)
    return XpmImage(width, height, tuple(pixels))


def load_xpm(path: str | PathLike[str]) -> XpmImage:
    """Read and decode an XPM file."""
    try:
        with open(path, "rb") as handle:
            raw = handle.read()
    except OSError as exc:
        raise XpmError(f"cannot read {path}: {exc}") from exc
    text = strip_comments(raw.decode("latin-1"))
    return parse_xpm(quoted_lines(text))