# coinrungen

A procedurally generated side-scrolling platformer environment for
reinforcement-learning experiments. Each episode builds a fresh 64 x 64 tile
level of platforms, pits, lava, crates, saws and walking enemies; the agent
has to reach the gold coin at the end of the level without touching a hazard.

## Installing

```
pip install .
```

The package needs `numpy` and `pillow`. The tests run with `pytest`
(`pip install .[test]`).

## The environment

`coinrungen.coinrun.CoinRunEnv` is the game:

```python
from coinrungen.coinrun import CoinRunEnv

with CoinRunEnv(asset_root="path/to/game") as env:
    spaces = env.make("rgb_array", {"seed": 7, "width": 256, "height": 256})
    observations, infos = env.reset({"seed": 7})
    observations, reward, terminated, truncated, infos = env.step({"action": 7})
    frame = env.render()
```

- `make(render_mode=None, options=None)` builds the game and returns the
  spaces as a dictionary:
  `{"observation_spaces": {"screen": {"type": "box", "low": 0.0, "high": 255.0}},
  "action_spaces": {"action": {"type": "multi_discrete", "nvec": [15]}}}`.
  Options: `"seed"` (an int; the current time when not given), `"width"` and
  `"height"` (ints, the size of the rendered window, 512 x 512 by default).
  A non-int option value raises `TypeError`; a width or height that is not
  positive raises `ValueError`. `make` also starts the first episode.
- `reset(options=None)` starts a new episode and returns
  `(observations, infos)`. The option `"seed"` reseeds the level generator.
- `step(actions=None)` takes the action under the key `"action"`, either an
  int or a one-element sequence, and returns
  `(observations, reward, terminated, truncated, infos)`. Actions 0-2 move
  left, 6-8 move right; 2, 5 and 8 jump; 0, 3 and 6 drop through crates. A
  step runs four physics sub-steps and stops early when the episode ends.
  Reaching the coin gives a reward of 10.0 and ends the episode; touching a
  saw, an enemy or lava ends it with 0.0. `truncated` is always `False` and
  `infos` is empty.
- Observations are `{"screen": array}` with a `(64, 64, 3)` `uint8` RGB image.
- `render()` returns the full-size frame as a `(height, width, 3)` `uint8`
  array.
- `close()` releases the game; `make` has to be called again before further
  use. Calling `reset`, `step` or `render` before `make` raises `RuntimeError`.
  The environment is a context manager that closes on exit.
- `get_env_version()` returns `100`.

The level generator can be shaped by passing a
`coinrungen.tilemap.TilemapConfig` as `CoinRunEnv(config=...)`, with the
switches `allow_pit`, `allow_crate`, `allow_dy` and `allow_mobs`.

## Assets

The package does not ship any images. The game draws its backgrounds, tiles,
enemies, player and particle sprites from files under `assets/`, looked up
relative to `asset_root` (or to the working directory when it is `None`).
`coinrungen.coinrun.required_assets()` lists every path that has to be
present before `make` is called; a missing or unreadable file raises
`coinrungen.assets.AssetError`.

## Determinism

Levels, themes and backgrounds are drawn from a `random.Random` seeded with
the `"seed"` option, so the same seed produces the same level.

## The building blocks

The pieces the game is built from can be used on their own:

- `coinrungen.helpers`: `Vector2`, `Rectangle` and `Color`, with
  `check_collision`, `get_collision_overlap`, `rotated_scaled_aabb` and
  `to_lower`.
- `coinrungen.ecs`: a small entity-component-system (`EntityManager`,
  `ComponentArray`, `ComponentManager`, `System`, `SystemManager`,
  `Coordinator`) for up to 1000 entities and 16 component types, raising
  `ECSError` on misuse.
- `coinrungen.cenv`: a generic environment interface: the abstract
  `Environment` class, `ValueType`, `KeyValue`, `Option`, `MakeData`,
  `ResetData`, `StepData`, `RenderData`, and the helpers `find_value` and
  `option_values`. `CoinRunEnv` does not derive from it; its methods take and
  return plain dictionaries and tuples as described above.
- `coinrungen.assets`: `Texture` (an RGBA image as a numpy array, loaded with
  `Texture.load`) and `AssetManager`, which loads each named asset once.
- `coinrungen.renderer`: `Renderer`, a software renderer with a camera that
  draws textures, optionally flipped, faded or rotated, into RGBA pixel
  arrays.
- `coinrungen.components`, `coinrungen.tilemap` and `coinrungen.systems`:
  the game's components, the `Tilemap` with its level generator and collision
  resolution, and the systems that draw sprites and move mobs, the agent and
  particles.

## What it does not do

There is no command to run and no window: the game cannot be played
interactively, and frames come back only as arrays from `step`, `reset` and
`render`.