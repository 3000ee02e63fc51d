import pytest

from raycub.config import (
    ConfigError,
    CubParser,
    Sprite,
    atoi,
    check_extension,
    load_cub,
    parse_cub,
)

HEADER = [
    "R 640 480",
    "NO ./textures/north.xpm",
    "SO ./textures/south.xpm",
    "WE ./textures/west.xpm",
    "EA ./textures/east.xpm",
    "S ./textures/sprite.xpm",
    "F 220,100,0",
    "C 225,30,0",
    "",
]

MAP = [
    "111111",
    "100201",
    "10N001",
    "111111",
]


def make(header=HEADER, rows=MAP, tail=()):
    return "\n".join([*header, *rows, *tail]) + "\n"


def without(prefix):
    return [line for line in HEADER if not line.startswith(prefix)]


def test_parse_valid_scene():
    cfg = parse_cub(make())
    assert (cfg.width, cfg.height) == (640, 480)
    assert cfg.north == "./textures/north.xpm"
    assert cfg.south == "./textures/south.xpm"
    assert cfg.west == "./textures/west.xpm"
    assert cfg.east == "./textures/east.xpm"
    assert cfg.sprite == "./textures/sprite.xpm"
    assert cfg.floor_texture is None
    assert cfg.floor_textured is False
    assert (cfg.rows, cfg.cols) == (4, 6)


def test_colors_pack_channels():
    cfg = parse_cub(make())
    assert (cfg.floor_color >> 16, (cfg.floor_color >> 8) & 0xFF, cfg.floor_color & 0xFF) == (220, 100, 0)
    assert (cfg.ceiling_color >> 16, (cfg.ceiling_color >> 8) & 0xFF, cfg.ceiling_color & 0xFF) == (225, 30, 0)


def test_world_cells_and_start():
    cfg = parse_cub(make())
    assert cfg.world[0] == [1] * 6
    assert cfg.world[1][3] == 2
    assert cfg.world[2][2] == 0
    assert int(cfg.camera.x) == 2 and int(cfg.camera.y) == 2
    assert cfg.camera.dir_x == -1


def test_sprites_found_in_map():
    cfg = parse_cub(make())
    assert len(cfg.sprites) == 1
    sprite = cfg.sprites[0]
    assert (int(sprite.x), int(sprite.y)) == (1, 3)
    assert sprite == Sprite(sprite.x, sprite.y)


def test_sprites_in_reading_order():
    rows = ["111111", "122221", "1N0001", "111111"]
    cfg = parse_cub(make(rows=rows))
    ys = [s.y for s in cfg.sprites]
    assert len(cfg.sprites) == 4
    assert ys == sorted(ys)


def test_invalid_resolution_falls_back(capsys):
    header = ["R 1920 1080", *without("R")]
    cfg = parse_cub(make(header=header))
    assert (cfg.width, cfg.height) == (2560, 1440)
    assert "Resolution not valid" in capsys.readouterr().out


def test_duplicate_resolution():
    with pytest.raises(ConfigError, match="R rule duplicated"):
        parse_cub(make(header=[*HEADER, "R 640 480"]))


def test_missing_resolution():
    with pytest.raises(ConfigError, match="resolution"):
        parse_cub(make(header=without("R")))


def test_duplicate_texture_path():
    with pytest.raises(ConfigError, match="N path duplicated"):
        parse_cub(make(header=[*HEADER, "NO ./other.xpm"]))


def test_south_path_may_repeat():
    cfg = parse_cub(make(header=[*HEADER, "SO ./again.xpm"]))
    assert cfg.south == "./again.xpm"


def test_duplicate_floor_color():
    with pytest.raises(ConfigError, match="F color duplicated"):
        parse_cub(make(header=[*HEADER, "F 1,2,3"]))


def test_color_out_of_range():
    header = [*without("F"), "F 300,0,0"]
    with pytest.raises(ConfigError, match="RGB"):
        parse_cub(make(header=header))


def test_missing_floor_color():
    with pytest.raises(ConfigError, match="Floor color"):
        parse_cub(make(header=without("F")))


def test_missing_ceiling_color():
    with pytest.raises(ConfigError, match="Ceiling color"):
        parse_cub(make(header=without("C")))


def test_floor_texture_replaces_ceiling_requirement():
    header = [*without("C"), "FT ./textures/floor.xpm"]
    cfg = parse_cub(make(header=header))
    assert cfg.floor_texture == "./textures/floor.xpm"
    assert cfg.floor_textured is True
    assert cfg.ceiling_color == 0


def test_duplicate_floor_texture():
    header = [*HEADER, "FT ./a.xpm", "FT ./b.xpm"]
    with pytest.raises(ConfigError, match="FT path duplicated"):
        parse_cub(make(header=header))


def test_short_rows_are_padded_with_void():
    rows = ["1111", "1N01", "111"]
    cfg = parse_cub(make(rows=rows))
    assert cfg.cols == 4
    assert cfg.world[2][3] == 3


def test_open_border_on_first_column():
    with pytest.raises(ConfigError, match="borders"):
        parse_cub(make(rows=["111", "0N1", "111"]))


def test_open_last_row():
    with pytest.raises(ConfigError, match="check"):
        parse_cub(make(rows=["111", "1N1", "101"]))


def test_floor_next_to_void():
    rows = ["111111", "100001", "1N01", "111111"]
    with pytest.raises(ConfigError, match="check"):
        parse_cub(make(rows=rows))


def test_missing_start():
    with pytest.raises(ConfigError, match="Start player"):
        parse_cub(make(rows=["111", "121", "111"]))


def test_duplicate_start():
    with pytest.raises(ConfigError, match="Init position duplicated"):
        parse_cub(make(rows=["1111", "1NS1", "1111"]))


def test_items_after_map():
    with pytest.raises(ConfigError, match="items after map"):
        parse_cub(make(tail=["X garbage"]))


def test_unknown_lines_before_map_are_ignored():
    cfg = parse_cub(make(header=["X garbage", *HEADER]))
    assert cfg.rows == len(MAP)


def test_empty_lines_inside_map_are_skipped():
    rows = [MAP[0], "", MAP[1], "", MAP[2], MAP[3]]
    cfg = parse_cub(make(rows=rows))
    assert cfg.rows == len(MAP)
    assert cfg.world == parse_cub(make()).world


def test_too_many_sprites():
    size = 17
    rows = ["1" * size]
    for x in range(1, size - 1):
        inner = "2" * (size - 2)
        if x == 1:
            inner = "N" + inner[1:]
        rows.append("1" + inner + "1")
    rows.append("1" * size)
    with pytest.raises(ConfigError, match="sprites"):
        parse_cub(make(rows=rows))


def test_parser_feed_and_finish_match_parse_cub():
    parser = CubParser()
    for line in make().split("\n"):
        parser.feed(line)
    assert parser.finish() == parse_cub(make())


@pytest.mark.parametrize(
    "text, expected",
    [
        ("42", 42),
        ("  42abc", 42),
        ("-17", -17),
        ("+5", 5),
        ("abc", 0),
        ("", 0),
        ("\t\n 9", 9),
        ("- 3", 0),
    ],
)
def test_atoi(text, expected):
    assert atoi(text) == expected


def test_atoi_wraps_to_32_bits():
    assert atoi("2147483648") == -2147483648


def test_check_extension_accepts_cub():
    check_extension("map.cub")
    with pytest.raises(ConfigError, match="Extension"):
        check_extension("map.txt")


def test_check_extension_uses_first_dot():
    with pytest.raises(ConfigError, match="Extension"):
        check_extension("./maps/map.cub")


def test_check_extension_requires_dot():
    with pytest.raises(ConfigError, match="No extension"):
        check_extension("map")


def test_load_cub_reads_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "map.cub").write_text(make())
    cfg = load_cub("map.cub")
    assert cfg == parse_cub(make())


def test_load_cub_missing_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ConfigError, match="doesn't exist"):
        load_cub("missing.cub")


def test_load_cub_wrong_extension(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "map.txt").write_text(make())
    with pytest.raises(ConfigError, match="Extension"):
        load_cub("map.txt")