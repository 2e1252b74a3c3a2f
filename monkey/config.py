"""Monkey Configuration — per-user/per-project .monkeyrc.yml support.

Loads configuration from .monkeyrc.yml (or .monkeyrc.yaml, .monkeyrc.json)
found by walking up from the working directory. Settings:
  - REPL prompt and banner
  - Evaluation limits (call depth, host recursion limit)
  - Log level and default output format

Example .monkeyrc.yml:
    prompt: "monkey> "
    banner: false
    max_call_depth: 500
    log_level: DEBUG
    format: json
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import yaml

from monkey.errors import ConfigError

logger = logging.getLogger(__name__)

_FORMATS = ("text", "json")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class MonkeyConfig:
    """Interpreter and REPL settings."""
    prompt: str = ">> "
    banner: bool = True
    # Monkey-level call depth; deeper calls evaluate to an Error
    max_call_depth: int = 1000
    # Host recursion limit applied by the CLI and REPL session
    recursion_limit: int = 20000
    log_level: str = "WARNING"
    # Output: "text" or "json"
    format: str = "text"


# ---------------------------------------------------------------------------
# Config file names (in priority order)
# ---------------------------------------------------------------------------

_CONFIG_FILES = [
    ".monkeyrc.yml",
    ".monkeyrc.yaml",
    ".monkeyrc.json",
]


def find_config(start_dir: str = ".") -> Optional[str]:
    """Find the nearest config file by walking up from start_dir."""
    current = os.path.abspath(start_dir)
    while True:
        for name in _CONFIG_FILES:
            path = os.path.join(current, name)
            if os.path.isfile(path):
                return path
        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent
    return None


def load_config(path: Optional[str] = None, start_dir: str = ".") -> MonkeyConfig:
    """Load configuration from a file.

    If no path is given, searches for a config file starting from start_dir.
    If no config file is found, returns defaults. A file that exists but
    cannot be read or parsed raises ConfigError.
    """
    if path is None:
        path = find_config(start_dir)

    if path is None:
        return MonkeyConfig()

    try:
        with open(path, "r") as f:
            content = f.read()
    except (IOError, OSError) as e:
        raise ConfigError(path, f"cannot read config: {e}") from e

    if path.endswith(".json"):
        try:
            data = json.loads(content or "{}")
        except json.JSONDecodeError as e:
            raise ConfigError(path, f"invalid JSON: {e}") from e
    else:
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(path, f"invalid YAML: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(path, "top level must be a mapping")

    logger.debug("loaded config from %s", path)
    return _dict_to_config(data, path)


def _dict_to_config(data: Dict[str, Any], path: str = "<config>") -> MonkeyConfig:
    """Convert a parsed dict to MonkeyConfig. Unknown keys are ignored."""
    config = MonkeyConfig()

    try:
        if "prompt" in data:
            config.prompt = str(data["prompt"])
        if "banner" in data:
            config.banner = bool(data["banner"])
        if "max_call_depth" in data:
            config.max_call_depth = int(data["max_call_depth"])
        if "recursion_limit" in data:
            config.recursion_limit = int(data["recursion_limit"])
    except (TypeError, ValueError) as e:
        raise ConfigError(path, f"bad value: {e}") from e

    if "log_level" in data:
        level = str(data["log_level"]).upper()
        if level not in _LOG_LEVELS:
            raise ConfigError(path, f"unknown log_level {data['log_level']!r}")
        config.log_level = level
    if "format" in data:
        fmt = str(data["format"])
        if fmt not in _FORMATS:
            raise ConfigError(path, f"unknown format {fmt!r}")
        config.format = fmt

    if config.max_call_depth < 1:
        raise ConfigError(path, "max_call_depth must be positive")

    return config
