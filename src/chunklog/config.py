"""Configuration management for chunklog.

Three-layer config resolution (highest priority wins):
  1. CLI flags — explicit on the command line
  2. Project config — .chunklog.json in the working directory or a parent
  3. Global config — ~/.chunklog/config.json (or the --config path)

A resolved config is a flat dict; ``build_logger()`` turns it into a
Logger wired to a console engine and, when ``log_folder`` is set, a file
storage engine.

Example .chunklog.json::

    {
      "prefixes": ["api", {"content": "db", "color": "#00aaff"}],
      "default_level": "info",
      "redacted_content": ["password=\\\\S+"],
      "log_folder": "logs",
      "html": false,
      "defaults": {"level_main_colors": {"info": "#00ffaa"}}
    }
"""

import json
import os
from pathlib import Path

from chunklog.engines import (
    ConsoleEngine, EngineSettings, FileStorageEngine, FileStorageSettings,
)
from chunklog.engines.console import make_console
from chunklog.errors import ConfigError
from chunklog.lib.compile_lib import STANDARD, Defaults, Level, Prefix
from chunklog.logger import Logger

PROJECT_CONFIG_NAME = ".chunklog.json"

CONFIG_KEYS = [
    "prefixes",
    "default_level",
    "redacted_content",
    "colored_background",
    "all_line_colored",
    "disable_fatal_crash",
    "debug",
    "log_folder",
    "html",
    "compress",
    "error_log",
    "no_color",
    "defaults",
]


# ---------------------------------------------------------------------------
# Config file locations
# ---------------------------------------------------------------------------
def get_global_config_dir():
    """Return the global config directory (~/.chunklog/)."""
    return Path.home() / ".chunklog"


def get_global_config_path():
    """Return path to the global config file."""
    return get_global_config_dir() / "config.json"


def find_project_config(start_dir=None):
    """Walk up from start_dir looking for .chunklog.json.

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
    """Load a JSON object file, returning empty dict on error."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (FileNotFoundError, IsADirectoryError, json.JSONDecodeError):
        return {}
    return data if isinstance(data, dict) else {}


def load_global_config(path=None):
    """Load the global config file, or ``path`` when given."""
    return load_json(path or get_global_config_path())


def load_project_config(start_dir=None):
    """Load the nearest .chunklog.json walking upward from start_dir."""
    path = find_project_config(start_dir)
    if path:
        return load_json(path), path
    return {}, None


# ---------------------------------------------------------------------------
# Config resolution
# ---------------------------------------------------------------------------
def _lookup(config, key):
    """Find ``key`` in a JSON config, accepting dashes or underscores."""
    for candidate in (key, key.replace("_", "-")):
        if config.get(candidate) is not None:
            return config[candidate]
    return None


def resolve_config(args=None, keys=None, start_dir=None):
    """Resolve config values using three-layer precedence.

    For each key in `keys`, checks (in order):
      1. CLI args (from argparse namespace; None means "not given")
      2. Project .chunklog.json
      3. Global ~/.chunklog/config.json, or the file named by args.config

    Returns a dict with every key; unresolved keys map to None.
    """
    if keys is None:
        keys = CONFIG_KEYS

    project_cfg, _ = load_project_config(start_dir)
    global_cfg = load_global_config(getattr(args, "config", None))

    resolved = {}
    for key in keys:
        arg_key = key.replace("-", "_")

        # Layer 1: CLI
        cli_val = getattr(args, arg_key, None)
        if cli_val is not None:
            resolved[arg_key] = cli_val
            continue

        # Layer 2: Project config
        proj_val = _lookup(project_cfg, arg_key)
        if proj_val is not None:
            resolved[arg_key] = proj_val
            continue

        # Layer 3: Global config
        resolved[arg_key] = _lookup(global_cfg, arg_key)

    return resolved


# ---------------------------------------------------------------------------
# Logger construction
# ---------------------------------------------------------------------------
def parse_prefix(entry):
    """A prefix entry is a plain string or {"content", "color", "background_color"}."""
    if isinstance(entry, dict):
        if "content" not in entry:
            raise ConfigError(f"Prefix entry without 'content': {entry!r}")
        if not entry.get("color") and not entry.get("background_color"):
            return str(entry["content"])
        return Prefix.create(
            str(entry["content"]),
            entry.get("color"),
            entry.get("background_color") or entry.get("background-color"),
        )
    return str(entry)


def build_defaults(overrides):
    """Apply a JSON ``defaults`` section on top of the stock palette."""
    if not overrides:
        return STANDARD
    if not isinstance(overrides, dict):
        raise ConfigError(f"'defaults' must be an object, got {type(overrides).__name__}")
    try:
        return Defaults.from_dict(overrides, STANDARD)
    except (ValueError, TypeError, AttributeError) as e:
        raise ConfigError(f"Invalid defaults: {e}") from e


def build_logger(config, lifecycle=None, console=None, error_console=None):
    """Create a Logger and its engines from a resolved config dict.

    Args:
        config: Output of resolve_config() (missing keys use defaults)
        lifecycle: LifecycleManager the logger and file engine register with
        console: rich Console for INFO/DEBUG (default: stdout)
        error_console: rich Console for WARN/ERROR/FATAL (default: stderr)

    Raises:
        ConfigError: for unknown level or style names, bad prefixes,
            invalid redaction patterns or an unusable log folder.
    """
    config = config or {}
    try:
        level = Level.coerce(config.get("default_level") or Level.INFO)
    except ValueError as e:
        raise ConfigError(str(e)) from e

    logger = Logger(
        prefixes=[parse_prefix(entry) for entry in config.get("prefixes") or []],
        default_level=level,
        disable_fatal_crash=bool(config.get("disable_fatal_crash")),
        redacted_content=config.get("redacted_content") or [],
        all_line_colored=bool(config.get("all_line_colored")),
        colored_background=bool(config.get("colored_background")),
        defaults=build_defaults(config.get("defaults")),
        lifecycle=lifecycle,
    )

    debug = bool(config.get("debug"))
    no_color = bool(config.get("no_color"))
    if console is None:
        console = make_console(no_color=no_color)
        if error_console is None:
            error_console = make_console(stderr=True, no_color=no_color)
    ConsoleEngine(EngineSettings(debug=debug), logger,
                  console=console, error_console=error_console)

    if config.get("log_folder"):
        compress = config.get("compress")
        FileStorageEngine(
            FileStorageSettings(
                debug=debug,
                log_folder_path=str(config["log_folder"]),
                enable_error_log=bool(config.get("error_log")),
                generate_html_log=bool(config.get("html")),
                compress_log_files_after_new_execution=True if compress is None else bool(compress),
            ),
            logger,
            lifecycle=lifecycle,
        )
    return logger
