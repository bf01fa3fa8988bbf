"""
policy_export.config — Configuration singleton and export defaults.

Provides thread-safe lazy loading of config.json and typed accessors for the
export settings. A missing config file is not an error: every key has a
default that reproduces the classic download-policies behavior.

Zero dependency on the rest of the package — uses only stdlib.
"""

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

CONFIG_ENV_VAR = "POLICY_EXPORT_CONFIG"

DEFAULT_POLICIES_DIR = "policies"
DEFAULT_ARCHIVE_FILE = "policies.zip"
DEFAULT_SCOPE = "All"
DEFAULT_MAX_WORKERS = 1
VALID_SCOPES = ("All", "AWS", "Local")

# ---------------------------------------------------------------------------
# Module-level state (config singleton)
# ---------------------------------------------------------------------------

CONFIG_DATA: Dict[str, Any] = {}
_CONFIG_LOADED: bool = False
_CONFIG_PATH: Optional[Path] = None
_CONFIG_LOCK: threading.Lock = threading.Lock()


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _config_path() -> Path:
    """Return the path to config.json (explicit override, env var, then cwd)."""
    if _CONFIG_PATH is not None:
        return _CONFIG_PATH

    env_path = os.environ.get(CONFIG_ENV_VAR, "")
    if env_path:
        return Path(env_path)

    return Path.cwd() / "config.json"


# ---------------------------------------------------------------------------
# Config loading
# ---------------------------------------------------------------------------


def set_config_path(path: Optional[Path]) -> None:
    """
    Point the singleton at a specific config file and force a reload.

    Args:
        path: Path to a JSON config file, or None to restore the default lookup
    """
    global _CONFIG_PATH, _CONFIG_LOADED, CONFIG_DATA

    with _CONFIG_LOCK:
        _CONFIG_PATH = Path(path) if path is not None else None
        _CONFIG_LOADED = False
        CONFIG_DATA = {}


def load_config() -> Dict[str, Any]:
    """
    Load configuration from config.json.

    Returns:
        dict: Parsed configuration, or an empty dict if the file is absent or unreadable
    """
    global CONFIG_DATA

    config_file = _config_path()

    if not config_file.exists():
        logger.debug("No config file at %s, using defaults", config_file)
        CONFIG_DATA = {}
        return CONFIG_DATA

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Could not read config file %s: %s. Using defaults.", config_file, e)
        CONFIG_DATA = {}
        return CONFIG_DATA

    if not isinstance(data, dict):
        logger.warning("Config file %s does not contain a JSON object. Using defaults.", config_file)
        data = {}

    CONFIG_DATA = data
    logger.debug("Configuration loaded from %s", config_file)
    return CONFIG_DATA


def get_config() -> Dict[str, Any]:
    """
    Lazy-load configuration. First call loads from disk; subsequent calls return cached values.
    Thread-safe: uses _CONFIG_LOCK to prevent concurrent initialization.

    Returns:
        dict: CONFIG_DATA
    """
    global _CONFIG_LOADED, CONFIG_DATA
    with _CONFIG_LOCK:
        if not _CONFIG_LOADED:
            CONFIG_DATA = load_config()
            _CONFIG_LOADED = True
    return CONFIG_DATA


# ---------------------------------------------------------------------------
# Config value accessors
# ---------------------------------------------------------------------------


def config_value(key: str, default: Any = None, section: Optional[str] = None) -> Any:
    """
    Get a value from the configuration.

    Args:
        key: Configuration key
        default: Default value if key is not found
        section: Optional section in the configuration

    Returns:
        The configuration value or default
    """
    cfg = get_config()
    if not cfg:
        return default

    if section:
        section_data = cfg.get(section)
        if isinstance(section_data, dict) and key in section_data:
            return section_data[key]
    elif key in cfg:
        return cfg[key]

    return default


def get_scope() -> str:
    """Return the configured list_policies scope, falling back to 'All' on bad values."""
    scope = config_value("scope", default=DEFAULT_SCOPE)
    if scope not in VALID_SCOPES:
        logger.warning("Invalid scope '%s' in config, using '%s'", scope, DEFAULT_SCOPE)
        return DEFAULT_SCOPE
    return scope


def get_max_workers() -> int:
    """Return the configured worker count (1 = sequential)."""
    value = config_value("max_workers", default=DEFAULT_MAX_WORKERS)
    try:
        workers = int(value)
    except (TypeError, ValueError):
        logger.warning("Invalid max_workers '%s' in config, using %d", value, DEFAULT_MAX_WORKERS)
        return DEFAULT_MAX_WORKERS
    return max(1, workers)
