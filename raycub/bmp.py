"""Writing of 24-bit uncompressed BMP screenshots."""

from __future__ import annotations

import struct
from os import PathLike
from typing import Sequence

__all__ = ["row_padding", "bmp_header", "bmp_data", "write_bmp"]

HEADER_SIZE = 54
INFO_HEADER_SIZE = 40
BITS_PER_PIXEL = 24


def row_padding(width: int) -> int:
    """Return the zero bytes needed to end a row of ``width`` pixels on 4 bytes."""
    return (4 - (width * 3) % 4) % 4


def _u32(value: int) -> int:
    return value & 0xFFFFFFFF


def bmp_header(width: int, height: int, padsize: int) -> bytes:
    """Build the 54-byte file and info header."""
    filesize = HEADER_SIZE + width * 3 * height + padsize * height
    header = bytearray(HEADER_SIZE)
    header[0:2] = b"BM"
    struct.pack_into("<I", header, 2, _u32(filesize))
    header[10] = HEADER_SIZE
    header[14] = INFO_HEADER_SIZE
    struct.pack_into("<I", header, 18, _u32(width))
    struct.pack_into("<I", header, 22, _u32(height))
    header[26] = 1
    header[28] = BITS_PER_PIXEL
    return bytes(header)


def bmp_data(pixels: Sequence[int], width: int, height: int, padsize: int) -> bytes:
    """Encode row-major pixels bottom-up as little-endian BGR triples."""
    if len(pixels) < width * height:
        raise ValueError("not enough pixels for the image size")
    padding = bytes(padsize)
    out = bytearray()
    for y in reversed(range(height)):
        row = pixels[y * width : (y + 1) * width]
        for pixel in row:
            out += _u32(pixel).to_bytes(4, "little")[:3]
        out += padding
    return bytes(out)


def write_bmp(
    path: str | PathLike[str], pixels: Sequence[int], width: int, height: int
) -> None:
    """Write the pixels as a BMP file at ``path``, replacing any existing file."""
    padsize = row_padding(width)
    data = bmp_data(pixels, width, height, padsize)
    with open(path, "wb") as handle:
        handle.write(bmp_header(width, height, padsize))
        handle.write(data)