import struct

import pytest

from raycub.bmp import bmp_data, bmp_header, row_padding, write_bmp


@pytest.mark.parametrize("width", range(1, 12))
def test_row_padding_aligns_rows(width):
    pad = row_padding(width)
    assert 0 <= pad < 4
    assert (width * 3 + pad) % 4 == 0


def test_header_fields():
    header = bmp_header(200, 100, 0)
    assert len(header) == 54
    assert header[:2] == b"BM"
    (filesize,) = struct.unpack_from("<I", header, 2)
    assert filesize == 54 + 200 * 3 * 100
    assert header[10] == 54
    assert header[14] == 40
    assert struct.unpack_from("<ii", header, 18) == (200, 100)
    assert header[26] == 1
    assert header[28] == 24


def test_header_counts_padding():
    plain = struct.unpack_from("<I", bmp_header(3, 5, 0), 2)[0]
    padded = struct.unpack_from("<I", bmp_header(3, 5, row_padding(3)), 2)[0]
    assert padded - plain == row_padding(3) * 5


def test_data_pixel_byte_order():
    assert bmp_data([0x112233], 1, 1, 0) == bytes([0x33, 0x22, 0x11])


def test_data_rows_bottom_up():
    data = bmp_data([0x000001, 0x000002], 1, 2, 0)
    assert data[:3] == (0x000002).to_bytes(3, "little")
    assert data[3:] == (0x000001).to_bytes(3, "little")


def test_data_length_with_padding():
    width, height = 5, 3
    pad = row_padding(width)
    data = bmp_data([0] * (width * height), width, height, pad)
    assert len(data) == (width * 3 + pad) * height


def test_data_drops_high_byte():
    assert bmp_data([0xFF000000 | 0xABCDEF], 1, 1, 0) == bytes([0xEF, 0xCD, 0xAB])


def test_data_needs_enough_pixels():
    with pytest.raises(ValueError):
        bmp_data([0, 0], 2, 2, 0)


def test_write_bmp_file_size_matches_header(tmp_path):
    width, height = 7, 4
    path = tmp_path / "screenshot.bmp"
    write_bmp(path, list(range(width * height)), width, height)
    content = path.read_bytes()
    (filesize,) = struct.unpack_from("<I", content, 2)
    assert filesize == len(content)
    assert content[:54] == bmp_header(width, height, row_padding(width))


def test_write_bmp_replaces_existing(tmp_path):
    path = tmp_path / "screenshot.bmp"
    path.write_bytes(b"x" * 1000)
    write_bmp(path, [0x010203] * 4, 4, 1)
    content = path.read_bytes()
    assert len(content) == 54 + 12
    assert content[54:57] == bytes([0x03, 0x02, 0x01])