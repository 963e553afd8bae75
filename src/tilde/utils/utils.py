# tilde/utils/utils.py
"""
tilde.utils.utils
=================

Configuration helpers for the tilde editor.

Key functionalities include:
- Automatic User Configuration: creates `~/.config/tilde/config.toml` from the
  bundled template on first run so the user has something to edit.
- Robust Configuration Loading: the hardcoded `DEFAULT_CONFIG` is always loaded
  first, then recursively merged with the user's TOML file. A missing or broken
  user file never prevents the editor from starting.
- Small typed accessors used by the editor core (`get_int_setting`).
"""

import copy
import logging
import shutil
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import toml

logger = logging.getLogger("tilde")

VERSION = "0.1.0"
CONFIG_DIR_NAME = "tilde"
CONFIG_FILE_NAME = "config.toml"

# Direct, hardcoded representation of the bundled `config.toml`.
# It is the ultimate fallback, so the editor can ALWAYS start.
DEFAULT_CONFIG: Dict[str, Any] = {
    "editor": {
        "tab_stop": 2,
        "quit_times": 3,
        "message_timeout": 5,
    },
    "colors": {
        "comment": 36,
        "block_comment": 36,
        "keyword1": 33,
        "keyword2": 32,
        "string": 35,
        "number": 31,
        "match": 34,
    },
    "logging": {
        "log_file": "~/.cache/tilde/editor.log",
        "file_level": "DEBUG",
        "console_level": "WARNING",
        "log_to_console": False,
        "separate_error_log": False,
    },
    "syntax": [
        {
            "filetype": "c",
            "filematch": [".c", ".h", ".cpp"],
            "keywords": [
                "switch", "if", "while", "for", "break", "continue", "return",
                "else", "struct", "union", "typedef", "static", "enum", "class",
                "case",
                "int|", "long|", "double|", "float|", "char|", "unsigned|",
                "signed|", "void|",
            ],
            "singleline_comment": "//",
            "multiline_comment_start": "/*",
            "multiline_comment_end": "*/",
            "highlight_numbers": True,
            "highlight_strings": True,
        },
    ],
}


# --- Helper Functions ---

def get_package_root() -> Path:
    """Directory holding the bundled `config.toml` template (shipped as package data)."""
    if getattr(sys, "frozen", False) and hasattr(sys, "_MEIPASS"):
        return Path(sys._MEIPASS)
    return Path(__file__).resolve().parents[1]


def get_user_config_path() -> Path:
    """Returns the location of the user's configuration file."""
    return Path.home() / ".config" / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def ensure_user_config_exists() -> None:
    """Checks for the user config file and copies the bundled template if missing."""
    try:
        user_config_path = get_user_config_path()
        user_config_path.parent.mkdir(parents=True, exist_ok=True)

        if not user_config_path.exists():
            source_config_path = get_package_root() / CONFIG_FILE_NAME
            if source_config_path.exists():
                shutil.copy(source_config_path, user_config_path)
                logger.info(f"Created user config template at: {user_config_path}")

    except Exception as e:
        logger.critical(f"Could not create user configuration files: {e}", exc_info=True)


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Loads and merges configurations, ensuring the application can always run.

    Args:
        config_path: Explicit TOML file to merge over the defaults. When omitted,
            the user file in `~/.config/tilde` is used (and created if missing).

    Returns:
        The merged configuration dictionary.
    """
    final_config = copy.deepcopy(DEFAULT_CONFIG)
    logger.debug("Loaded embedded default configuration.")

    if config_path is None:
        ensure_user_config_exists()
        config_path = get_user_config_path()

    if config_path.is_file():
        try:
            user_config = toml.load(config_path)
            final_config = deep_merge(final_config, user_config)
            logger.info(f"Successfully loaded and merged user config from {config_path}")
        except Exception as e:
            logger.error(f"Could not parse user config '{config_path}': {e}. Using defaults.")

    return final_config


def deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Recursively merges the `override` dictionary into the `base` dictionary.
    Lists are replaced, not concatenated.
    """
    result = base.copy()
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def get_int_setting(
    config: Dict[str, Any], section: str, key: str, minimum: int = 0
) -> int:
    """
    Reads an integer from `config[section][key]`, falling back to the built-in
    default when the value is missing, malformed or below `minimum`.
    """
    default = DEFAULT_CONFIG[section][key]
    raw = config.get(section, {}).get(key, default)
    try:
        value = int(raw)
    except (TypeError, ValueError):
        logger.warning(f"Invalid value for [{section}].{key}: {raw!r}; using {default}")
        return default
    if value < minimum:
        logger.warning(f"[{section}].{key}={value} is below {minimum}; using {default}")
        return default
    return value
