"""
Configuration management for ffbar.

Handles:
- XDG Base Directory compliance
- TOML/INI configuration file loading
- Config dataclass with all options
- Configuration merging (system -> user -> CLI)
"""

import configparser
import datetime
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

# Try TOML support (Python 3.11+ or tomli package)
try:
    import tomllib  # Python 3.11+

    TOML_AVAILABLE = True
except ImportError:
    try:
        import tomli as tomllib  # pip install tomli

        TOML_AVAILABLE = True
    except ImportError:
        TOML_AVAILABLE = False


def is_script_mode() -> bool:
    """
    Detect if output should stay plain.

    Returns True if the NO_COLOR or FFBAR_SCRIPT_MODE environment variable
    is set.
    """
    return bool(os.getenv("NO_COLOR") or os.getenv("FFBAR_SCRIPT_MODE"))


# -------------------- XDG DIRECTORIES --------------------


def get_xdg_config_home() -> Path:
    """Get XDG config home directory."""
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def get_xdg_state_home() -> Path:
    """Get XDG state home directory."""
    return Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state"))


def get_app_dirs() -> Dict[str, Path]:
    """Return all application directories, creating them if needed."""
    dirs = {
        "config": get_xdg_config_home() / "ffbar",
        "state": get_xdg_state_home() / "ffbar",
        "logs": get_xdg_state_home() / "ffbar" / "logs",
    }
    for d in dirs.values():
        d.mkdir(parents=True, exist_ok=True)
    return dirs


def get_log_path(logs_dir: Path) -> Path:
    """Generate a per-run log path for the raw ffmpeg output."""
    logs_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.datetime.now().strftime("%Y-%m-%d_%H%M%S")
    return logs_dir / f"{stamp}_{os.getpid()}.log"


# -------------------- CONFIGURATION DATACLASS --------------------

# Level tags such as "[info]" delimit progress units
LOGLEVEL_ARGS = ("-loglevel", "level")


@dataclass
class Config:
    """All configuration options for ffbar."""

    # Display
    bar_width: int = 20
    stats: bool = True
    json_progress: bool = False

    # ffmpeg
    ffmpeg_bin: str = "ffmpeg"
    segmenter: str = "bracket"

    # Diagnostics
    save_log: bool = False
    debug: bool = False

    # Internationalization
    lang: Optional[str] = None

    def __post_init__(self):
        """Let FFBAR_BIN point at a specific ffmpeg build."""
        env_bin = os.getenv("FFBAR_BIN")
        if env_bin and self.ffmpeg_bin == "ffmpeg":
            self.ffmpeg_bin = env_bin

    def ffmpeg_command(self, args) -> list:
        """Full command line: binary, the fixed log level pair, then user args."""
        return [self.ffmpeg_bin, *LOGLEVEL_ARGS, *args]


# -------------------- CONFIG FILE LOADING --------------------


def _parse_ini_value(value: str):
    """Parse INI value: bool, int, float or string."""
    v = value.strip()
    if not v:
        return ""
    if v.lower() in ("true", "yes", "on"):
        return True
    if v.lower() in ("false", "no", "off"):
        return False
    try:
        return int(v)
    except ValueError:
        pass
    try:
        return float(v)
    except ValueError:
        pass
    return v


def _load_ini_config(path: Path) -> Dict[str, Any]:
    """Load INI file and convert to nested dict."""
    cp = configparser.ConfigParser()
    cp.read(path)
    result: Dict[str, Any] = {}
    for section in cp.sections():
        result[section] = {}
        for key, value in cp.items(section):
            result[section][key] = _parse_ini_value(value)
    return result


def _load_single_config(config_dir: Path) -> Dict[str, Any]:
    """Load config from a single directory (TOML or INI file)."""
    toml_path = config_dir / "config.toml"
    ini_path = config_dir / "config.ini"

    if TOML_AVAILABLE and toml_path.exists():
        try:
            with toml_path.open("rb") as f:
                return dict(tomllib.load(f))
        except Exception as e:
            print(f"Warning: Failed to load {toml_path}: {e}", file=sys.stderr)
            return {}
    elif ini_path.exists():
        try:
            return _load_ini_config(ini_path)
        except Exception as e:
            print(f"Warning: Failed to load {ini_path}: {e}", file=sys.stderr)
            return {}
    return {}


def _deep_merge_dicts(base: dict, override: dict) -> dict:
    """Deep merge two dicts, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge_dicts(result[key], value)
        else:
            result[key] = value
    return result


def load_config_file(config_dir: Path, system_config_dir: Path = Path("/etc/ffbar")) -> dict:
    """
    Load config with priority:
    1. User config: ~/.config/ffbar/config.toml (highest priority)
    2. System config: /etc/ffbar/config.toml (lowest priority, optional)
    """
    system_config = {}
    if system_config_dir.exists():
        system_config = _load_single_config(system_config_dir)

    user_config = _load_single_config(config_dir)

    if system_config and user_config:
        return _deep_merge_dicts(system_config, user_config)
    return user_config or system_config or {}


def _get_default_config_toml() -> str:
    """Return default config as TOML string."""
    return """# ffbar configuration file
# This file is auto-generated on first run

[display]
bar_width = 20
stats = true

[ffmpeg]
# binary = "ffmpeg"
# bracket: split on the closing bracket of log level tags
# line: split on line breaks
segmenter = "bracket"

[output]
json = false
save_log = false

[i18n]
# lang = "fr"
"""


def _get_default_config_ini() -> str:
    """Return default config as INI string."""
    return """# ffbar configuration file
# This file is auto-generated on first run

[display]
bar_width = 20
stats = true

[ffmpeg]
# binary = ffmpeg
segmenter = bracket

[output]
json = false
save_log = false

[i18n]
# lang = fr
"""


def save_default_config(config_dir: Path) -> Path:
    """Create default config file (TOML if available, else INI). Returns path."""
    config_dir.mkdir(parents=True, exist_ok=True)

    if TOML_AVAILABLE:
        path = config_dir / "config.toml"
        if not path.exists():
            path.write_text(_get_default_config_toml())
        return path
    path = config_dir / "config.ini"
    if not path.exists():
        path.write_text(_get_default_config_ini())
    return path


CONFIG_MAPPINGS = {
    ("display", "bar_width"): "bar_width",
    ("display", "stats"): "stats",
    ("ffmpeg", "binary"): "ffmpeg_bin",
    ("ffmpeg", "segmenter"): "segmenter",
    ("output", "json"): "json_progress",
    ("output", "save_log"): "save_log",
    ("i18n", "lang"): "lang",
}


def apply_config_to_args(file_config: dict, cfg: Config, cli_explicit: Optional[set] = None) -> None:
    """
    Apply file config values to Config instance.

    Only applies values from file config if they weren't explicitly set on CLI.

    Args:
        file_config: Dict from config file (TOML or INI)
        cfg: Config instance with CLI-parsed values
        cli_explicit: Optional set of attribute names explicitly set on CLI
    """
    default_cfg = Config()
    cli_explicit = set(cli_explicit or ())
    if os.getenv("FFBAR_BIN"):
        cli_explicit.add("ffmpeg_bin")

    for (section, key), attr_name in CONFIG_MAPPINGS.items():
        if section not in file_config or key not in file_config[section]:
            continue
        if attr_name in cli_explicit:
            continue
        # A value already moved off its default came from the CLI or env
        if getattr(cfg, attr_name) != getattr(default_cfg, attr_name):
            continue
        setattr(cfg, attr_name, file_config[section][key])
