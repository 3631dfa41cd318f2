from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from typing import Mapping, Optional

import yaml

DEFAULT_CONFIG_PATH = os.path.expanduser("~/.config/linear-tui/config.json")
API_KEY_ENV = "LINEAR_API_KEY"


@dataclass
class Theme:
    primary_color: str = "205"
    secondary_color: str = "135"
    background_color: str = "235"
    text_color: str = "252"


@dataclass
class Config:
    api_key: str = ""
    theme: Theme = field(default_factory=Theme)
    debug_mode: bool = False


def _theme_from_raw(raw: object) -> Theme:
    theme = Theme()
    if not isinstance(raw, dict):
        return theme
    for key in ("primary_color", "secondary_color", "background_color", "text_color"):
        val = raw.get(key)
        if isinstance(val, (str, int)) and str(val).strip():
            setattr(theme, key, str(val).strip())
    return theme


def load_dotenv_key(directory: Optional[str] = None) -> Optional[str]:
    """Read LINEAR_API_KEY from a .env file in ``directory`` (cwd by default)."""
    path = os.path.join(directory or os.getcwd(), ".env")
    if not os.path.isfile(path):
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith('#') or '=' not in line:
                    continue
                k, v = line.split('=', 1)
                if k.strip().removeprefix('export ').strip() == API_KEY_ENV:
                    v = v.strip().strip('"').strip("'")
                    if v:
                        return v
    except OSError:
        logging.getLogger('linear_tui').warning("Unable to read %s", path, exc_info=True)
    return None


def load_config(path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> Config:
    """Load the on-disk config (JSON or YAML); a missing file means defaults.

    The LINEAR_API_KEY environment variable wins over the file; a .env file
    in the working directory is used only when neither provides a key.
    """
    env = os.environ if environ is None else environ
    path = path or DEFAULT_CONFIG_PATH
    cfg = Config()
    if os.path.isfile(path):
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ValueError(f"Config: {path} must contain a mapping")
        cfg.api_key = str(raw.get("linear_api_key") or "").strip()
        cfg.theme = _theme_from_raw(raw.get("theme"))
        cfg.debug_mode = bool(raw.get("debug_mode", False))

    env_key = (env.get(API_KEY_ENV) or "").strip()
    if env_key:
        cfg.api_key = env_key
    elif not cfg.api_key:
        cfg.api_key = load_dotenv_key() or ""
    if env.get("DEBUG"):
        cfg.debug_mode = True
    return cfg


def save_config(cfg: Config, path: Optional[str] = None) -> None:
    path = path or DEFAULT_CONFIG_PATH
    d = os.path.dirname(path)
    if d and not os.path.isdir(d):
        os.makedirs(d, exist_ok=True)
    data = {
        "linear_api_key": cfg.api_key,
        "theme": asdict(cfg.theme),
        "debug_mode": cfg.debug_mode,
    }
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
