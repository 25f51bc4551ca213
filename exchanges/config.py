"""Configuration helpers: dataset path discovery and flat settings files."""

import os
import pathlib
import sys

DATA_FILENAME = "email-exchanges.json"

DEFAULT_SETTINGS = {
    "host": "127.0.0.1",
    "port": 8793,
    "page_size": 30,
    "debounce_ms": 200,
    "highlight_max": 50,
    "copy_feedback_ms": 2000,
    "attribution": "— Ray Peat",
}


def get_data_path() -> pathlib.Path:
    env = os.environ.get("EXCHANGES_DATA")
    if env:
        print(f"Warning: using dataset from EXCHANGES_DATA={env}", file=sys.stderr)
        return pathlib.Path(env)
    config_path = pathlib.Path.home() / ".config" / "exchanges" / "config"
    if config_path.exists():
        for line in config_path.read_text().splitlines():
            line = line.strip()
            if line.startswith("DATA="):
                return pathlib.Path(line[5:].strip())
    return pathlib.Path.cwd() / DATA_FILENAME


def load_settings(directory: pathlib.Path) -> dict:
    settings_path = directory / "settings.toml"
    settings = dict(DEFAULT_SETTINGS)
    if settings_path.exists():
        settings.update(parse_settings(settings_path.read_text()))
    return settings


def parse_settings(text: str) -> dict:
    """Read `key = value` lines, keeping only known settings.

    Values are coerced to the type of the default. Unknown keys and values
    that do not coerce are reported on stderr and skipped.
    """
    result = {}
    for lineno, line in enumerate(text.splitlines(), 1):
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, raw = (part.strip() for part in line.split("=", 1))
        if key not in DEFAULT_SETTINGS:
            print(f"Warning: settings.toml:{lineno}: unknown setting {key!r}", file=sys.stderr)
            continue
        value = _coerce(raw, DEFAULT_SETTINGS[key])
        if value is None:
            print(f"Warning: settings.toml:{lineno}: bad value for {key}: {raw}", file=sys.stderr)
            continue
        result[key] = value
    return result


def _coerce(raw: str, default):
    if raw[:1] in ('"', "'"):
        end = raw.find(raw[0], 1)
        text = raw[1:end] if end > 0 else None
    else:
        text = raw.split("#", 1)[0].strip()
    if text is None:
        return None
    if isinstance(default, int):
        return int(text) if text.isdigit() else None
    return text
