# a11y_crawler/config.py
"""
Centralized configuration management.

Handles loading defaults, merging in settings from pyproject.toml,
and applying runtime overrides.
"""
from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, MutableMapping

import tomli

log = logging.getLogger(__name__)

# This is the baseline configuration dictionary.
DEFAULT_CONFIG: dict[str, Any] = {
    "max_pages": 10,
    "timeout": 30.0,  # seconds, per page navigation
    "wait_until": "networkidle",
    "headless": True,
    "user_agent": None,  # None keeps Playwright's default
    "report_dir": "reports",
    "axe": {
        # axe rule tags to run, e.g. ["wcag2a", "wcag2aa"]. Empty runs every rule.
        "tags": [],
    },
    "lighthouse": {
        "enabled": False,
        "command": "lighthouse",
        "debug_port": 9222,
        "timeout": 120.0,  # seconds, per page audit
    },
}


def _deep_merge_dict(
    base: MutableMapping[str, Any], overrides: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Recursively merge dicts."""
    for key, value in overrides.items():
        if isinstance(value, MutableMapping) and isinstance(
            base.get(key), MutableMapping
        ):
            base[key] = _deep_merge_dict(base[key], value)
        else:
            base[key] = value
    return base


def load_config(pyproject_path: Path | None = None) -> dict[str, Any]:
    """
    Loads configuration from defaults and merges settings from pyproject.toml.

    1. Starts with DEFAULT_CONFIG.
    2. Looks for `pyproject.toml` (current directory unless a path is given).
    3. If found, merges settings from `[tool.a11y_crawler]` over the defaults.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if pyproject_path is None:
        pyproject_path = Path.cwd() / "pyproject.toml"

    if not pyproject_path.exists():
        log.debug(
            "No pyproject.toml found at %s. Using default config.", pyproject_path
        )
        return config

    try:
        with pyproject_path.open("rb") as f:
            toml_data = tomli.load(f)
    except (OSError, tomli.TOMLDecodeError) as e:
        log.warning(
            "Failed to load or parse %s: %s. Using default config.",
            pyproject_path,
            e,
            exc_info=True,
        )
        return config

    project_config = toml_data.get("tool", {}).get("a11y_crawler", {})
    if project_config:
        log.info("Loading config from %s", pyproject_path)
        config = _deep_merge_dict(config, project_config)  # type: ignore
    else:
        log.debug("No [tool.a11y_crawler] section in %s.", pyproject_path)

    return config


def with_defaults(config: MutableMapping[str, Any]) -> dict[str, Any]:
    """Return a copy of `config` with any missing keys filled from DEFAULT_CONFIG."""
    return _deep_merge_dict(copy.deepcopy(DEFAULT_CONFIG), copy.deepcopy(config))  # type: ignore
