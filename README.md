# raycub

A first-person maze explorer drawn with classic grid raycasting. A scene is
described in a plain-text `.cub` file: screen resolution, wall textures in XPM
format, floor and ceiling colours (or a floor texture), a sprite texture and a
map made of digits. `raycub` opens a pygame window and lets you walk through
the map. It can also render one frame to a BMP file and exit.

## Installing

```
pip install .
```

This installs `pygame`, which is used for the window and the keyboard.

## Running

Play a scene:

```
raycub maps/level.cub
```

Render the first frame to `screenshot.bmp` in the current directory and exit:

```
raycub maps/level.cub --save
```

Any second argument other than `--save` is an error. When playing, the game
also tries to start `afplay music/music1.mp3` in the background and stops it
on exit; if `afplay` is not available the game simply runs without music.

Controls:

| Key         | Action              |
|-------------|---------------------|
| W / S       | move forward / back |
| A / D       | strafe left / right |
| ← / →       | turn left / right   |
| Left Shift  | run                 |
| Esc         | quit                |

Closing the window also quits.

## The `.cub` format

Each setting sits on its own line and is recognised by its first characters:

```
R 640 480
NO ./textures/north.xpm
SO ./textures/south.xpm
WE ./textures/west.xpm
EA ./textures/east.xpm
S ./textures/sprite.xpm
F 120,90,60
C 30,30,80

111111
100201
10N001
111111
```

- `R width height`: window size. Anything outside 200–1280 by 200–720 prints
  a notice and falls back to 2560 × 1440. A second `R` line is an error.
- Lines starting with `N`, `SO`, `W`, `E`: north, south, west and east wall
  textures. The path is taken from the first `.` on the line to its end.
- `S ` (S followed by a space): the sprite texture.
- `F r,g,b` / `C r,g,b`: floor and ceiling colours, each part 0–255. A colour
  of `0,0,0` counts as not set, and the floor colour is always required.
- `FT path`: a textured floor instead of a flat one; the ceiling colour is then
  optional.
- The map comes last; its lines start with a digit or a space. `1` is a wall,
  `0` open floor, `2` a sprite (at most 200), and one of `N`, `S`, `E`, `W`
  marks where the player starts and which way they face. Any other character
  is empty space. The map must be closed by walls and hold exactly one start.

The file name must carry a `.cub` extension. Textures are sampled with a bit
mask, so texture sizes that are powers of two give correct results.

Any error in the file or its textures stops the program with a red `Error`
message on standard error and exit status 255.

## Using it from Python

```python
from raycub.config import load_cub
from raycub.app import load_textures, take_screenshot

config = load_cub("maps/level.cub")
textures = load_textures(config)
take_screenshot(config, textures, "frame.bmp")
```

Errors in a scene raise `raycub.config.ConfigError`. `raycub.config.parse_cub`
parses scene text directly, and `raycub.app.Game` holds a running scene: its
`tick()` applies the held keys and draws a frame into `game.pixels`, and
`run()` opens the window.

Parts can be used on their own too:

- `raycub.xpm.load_xpm` / `parse_xpm` read XPM images into an `XpmImage`
  (raising `XpmError` on bad data);
- `raycub.bmp.write_bmp` writes 24-bit uncompressed BMP files;
- `raycub.colors.color_by_name` looks up X11 colour names;
- `raycub.render.Renderer` draws walls, a textured floor and sprites into a
  flat list of `0xRRGGBB` pixels.

## Tests

```
pip install .[test]
pytest
```