"""
YAML → config dict loader.

Loads tunable thresholds from coach.yaml (bundled with the package) and
optionally merges user overrides from ~/.strength-coach/coach.yaml.

Usage:
    from strength_coach.core.engine.config_loader import load_model_config
    cfg = load_model_config()
    min_sessions = cfg.get("stall_detection", {}).get("MIN_SESSIONS", 3)

If the bundled YAML cannot be read, lookups fall back to the Python
defaults in config.py.  If the user override file exists but cannot be
parsed, a warning is emitted and the file is ignored.
"""

from __future__ import annotations

import os
import warnings
from pathlib import Path
from typing import Any

import yaml

CONFIG_FILENAME = "coach.yaml"
USER_DIRNAME = ".strength-coach"

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML mapping.

    Returns {} (with a warning) when the file cannot be read or parsed,
    and {} silently when it holds something other than a mapping.
    """
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"strength-coach: ignoring {path} ({exc})", stacklevel=2)
        return {}
    return data if isinstance(data, dict) else {}


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = deep_merge(result[k], v)
        else:
            result[k] = v
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_bundled_yaml_path() -> Path | None:
    """Return the path to the bundled coach.yaml, or None if not found."""
    # config_loader.py lives at src/strength_coach/core/engine/
    candidate = Path(__file__).parent.parent.parent / CONFIG_FILENAME
    return candidate if candidate.exists() else None


def get_user_dir() -> Path:
    """Return ~/.strength-coach (may not exist)."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    return home / USER_DIRNAME


def get_user_yaml_path() -> Path | None:
    """Return ~/.strength-coach/coach.yaml if it exists, else None."""
    p = get_user_dir() / CONFIG_FILENAME
    return p if p.exists() else None


def load_model_config() -> dict[str, Any]:
    """
    Load and merge model configuration from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/strength_coach/coach.yaml
    2. User override at ~/.strength-coach/coach.yaml

    Returns:
        Merged dict of config sections.  Empty dict if no YAML available.
    """
    config: dict[str, Any] = {}

    bundled = get_bundled_yaml_path()
    if bundled is not None:
        config = deep_merge(config, load_yaml_file(bundled))

    user = get_user_yaml_path()
    if user is not None:
        user_cfg = load_yaml_file(user)
        if user_cfg:
            config = deep_merge(config, user_cfg)

    return config
