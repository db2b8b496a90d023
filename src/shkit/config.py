"""Configuration management for shkit.

Layered config resolution (highest priority wins):
  1. CLI flags — explicit on the command line
  2. Environment — SHKIT_LOG_LEVEL, SHKIT_LOG_TIMESTAMP,
     SHKIT_FORCE_COLOR, SHKIT_DRY_RUN, SHKIT_LOG_FILES (";"-separated specs)
  3. Project config — .shkit.json in the working directory or a parent
  4. Global config — ~/.shkit/config.json

Output files are the exception: every layer contributes, in the order
global, project, environment, CLI.
"""

import json
import os
from pathlib import Path

from shkit.lib.log_lib import LogSettings, parse_output_spec
from shkit.lib.log_lib.levels import DEFAULT_MIN_LEVEL


PROJECT_CONFIG_NAME = ".shkit.json"

# setting key -> environment variable
ENV_KEYS = {
    "log_level": "SHKIT_LOG_LEVEL",
    "timestamp": "SHKIT_LOG_TIMESTAMP",
    "force_color": "SHKIT_FORCE_COLOR",
    "dry_run": "SHKIT_DRY_RUN",
}
ENV_LOG_FILES = "SHKIT_LOG_FILES"
# Output specs contain ":" themselves, so the list separator is ";" everywhere
ENV_LOG_FILES_SEP = ";"

_TRUE = {"1", "true", "yes", "on"}


# ---------------------------------------------------------------------------
# Config file locations
# ---------------------------------------------------------------------------
def get_global_config_dir():
    """Return the global config directory (~/.shkit/)."""
    return Path.home() / ".shkit"


def get_global_config_path():
    """Return path to the global config file."""
    return get_global_config_dir() / "config.json"


def find_project_config(start_dir=None):
    """Walk up from start_dir looking for .shkit.json.

    Returns the path if found, None otherwise.
    """
    current = Path(start_dir or os.getcwd()).resolve()
    for _ in range(20):  # safety limit
        candidate = current / PROJECT_CONFIG_NAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


# ---------------------------------------------------------------------------
# Config loading
# ---------------------------------------------------------------------------
def load_json(path):
    """Load a JSON object from a file, returning empty dict on error."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError):
        return {}
    return data if isinstance(data, dict) else {}


def load_global_config():
    """Load the global config file."""
    return load_json(get_global_config_path())


def load_project_config(start_dir=None):
    """Load the nearest .shkit.json walking upward from start_dir."""
    path = find_project_config(start_dir)
    if path:
        return load_json(path), path
    return {}, None


def parse_bool(value):
    """Interpret config/environment booleans (1/true/yes/on)."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUE


def load_env_config(environ=None):
    """Collect settings from SHKIT_* environment variables."""
    environ = os.environ if environ is None else environ
    data = {}
    for key, var in ENV_KEYS.items():
        value = environ.get(var)
        if value not in (None, ""):
            data[key] = value
    files = environ.get(ENV_LOG_FILES)
    if files:
        data["log_files"] = [s.strip() for s in files.split(ENV_LOG_FILES_SEP)
                             if s.strip()]
    return data


# ---------------------------------------------------------------------------
# Config resolution
# ---------------------------------------------------------------------------
def resolve_settings(args=None, environ=None, start_dir=None):
    """Resolve LogSettings using layered precedence.

    Args:
        args: argparse namespace (or None). Recognized attributes:
              log_level, timestamp, force_color, dry_run, log_file, config
        environ: Environment mapping (default: os.environ)
        start_dir: Where to start looking for .shkit.json

    Returns:
        LogSettings
    """
    config_path = getattr(args, "config", None)
    if config_path:
        project_cfg = load_json(config_path)
    else:
        project_cfg, _ = load_project_config(start_dir)
    layers = [
        {
            "log_level": getattr(args, "log_level", None),
            "timestamp": getattr(args, "timestamp", None),
            "force_color": getattr(args, "force_color", None),
            "dry_run": getattr(args, "dry_run", None) or None,
        },
        load_env_config(environ),
        project_cfg,
        load_global_config(),
    ]

    resolved = {}
    for key in ("log_level", "timestamp", "force_color", "dry_run"):
        for layer in layers:
            value = layer.get(key)
            if value is not None:
                resolved[key] = value
                break

    # Output files accumulate from the lowest layer up
    log_files = []
    for layer in reversed(layers[1:]):
        specs = layer.get("log_files") or []
        if isinstance(specs, str):
            specs = [specs]
        log_files.extend(specs)
    log_files.extend(getattr(args, "log_file", None) or [])

    return LogSettings(
        log_level=str(resolved.get("log_level") or DEFAULT_MIN_LEVEL).upper(),
        timestamp=resolved.get("timestamp") or None,
        force_color=parse_bool(resolved.get("force_color")),
        dry_run=parse_bool(resolved.get("dry_run")),
        log_files=[parse_output_spec(s) for s in log_files],
    )

