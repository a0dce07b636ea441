import configparser
from pathlib import Path

from engine.Session import GameConfig
from solver.autocomplete import MIN_ITERATIONS

SETTINGS_PATH = Path(__file__).with_name("settings.ini")
SECTION = "game"

DIFFICULTY_ORDER = (1, 2, 4)
MIN_LOOP_LIMIT = 2

DEFAULT_SETTINGS = {
    "difficulty": "2",
    "seed": "",
    "loop_limit": "3",
    "autocomplete_limit": str(MIN_ITERATIONS),
}


def parse_difficulty(value) -> int:
    """Validate a suit count coming from outside the engine."""
    try:
        difficulty = int(str(value).strip())
    except ValueError:
        raise ValueError(f"difficulty must be one of {DIFFICULTY_ORDER}, got {value!r}") from None
    if difficulty not in DIFFICULTY_ORDER:
        raise ValueError(f"difficulty must be one of {DIFFICULTY_ORDER}, got {value!r}")
    return difficulty


def _as_int(value, default: int) -> int:
    try:
        return int(str(value).strip())
    except ValueError:
        return int(default)


def _sanitize(settings):
    data = dict(DEFAULT_SETTINGS)
    data.update({k: str(v) for k, v in settings.items() if k in DEFAULT_SETTINGS and v is not None})

    try:
        data["difficulty"] = str(parse_difficulty(data["difficulty"]))
    except ValueError:
        data["difficulty"] = DEFAULT_SETTINGS["difficulty"]

    seed = data["seed"].strip()
    if seed:
        try:
            seed = str(int(seed))
        except ValueError:
            seed = ""
    data["seed"] = seed

    loop_limit = _as_int(data["loop_limit"], int(DEFAULT_SETTINGS["loop_limit"]))
    data["loop_limit"] = str(max(MIN_LOOP_LIMIT, loop_limit))

    limit = _as_int(data["autocomplete_limit"], MIN_ITERATIONS)
    data["autocomplete_limit"] = str(max(MIN_ITERATIONS, limit))
    return data


def load_settings(path=None):
    path = Path(path) if path is not None else SETTINGS_PATH
    if not path.exists():
        return dict(DEFAULT_SETTINGS)
    parser = configparser.ConfigParser()
    try:
        parser.read(path, encoding="utf-8")
    except (configparser.Error, OSError, UnicodeDecodeError):
        return dict(DEFAULT_SETTINGS)
    if SECTION not in parser:
        return dict(DEFAULT_SETTINGS)
    raw = {key: parser[SECTION].get(key, default) for key, default in DEFAULT_SETTINGS.items()}
    return _sanitize(raw)


def save_settings(settings, path=None):
    path = Path(path) if path is not None else SETTINGS_PATH
    parser = configparser.ConfigParser()
    parser[SECTION] = _sanitize(settings)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        parser.write(f)


def build_config(settings) -> GameConfig:
    data = _sanitize(settings)
    return GameConfig(
        difficulty=int(data["difficulty"]),
        seed=int(data["seed"]) if data["seed"] else None,
        loopLimit=int(data["loop_limit"]),
        autoCompleteLimit=int(data["autocomplete_limit"]),
    )
