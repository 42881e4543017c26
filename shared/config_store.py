"""Configuration store for the tenant forms tools.

Reads and writes per-tool JSON config files in data/config/ (or the
directory named by the ``TENANT_FORMS_CONFIG_DIR`` environment variable).
Each tool gets a single JSON file keyed by tool name (e.g. "tenant-forms.json").
Callers always pass their hardcoded default, so a missing or corrupt file
never stops a form from working.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

CONFIG_DIR = Path(
    os.environ.get(
        "TENANT_FORMS_CONFIG_DIR",
        Path(__file__).resolve().parent.parent / "data" / "config",
    )
)


def load_config(tool_name: str) -> dict | None:
    """Load a tool's JSON config. Returns None if the file is missing or unreadable."""
    path = CONFIG_DIR / f"{tool_name}.json"
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text())
    except (json.JSONDecodeError, OSError):
        return None
    return data if isinstance(data, dict) else None


def save_config(tool_name: str, config: dict) -> None:
    """Write a tool's config to JSON. Creates dir if needed."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    path = CONFIG_DIR / f"{tool_name}.json"
    path.write_text(json.dumps(config, indent=2, ensure_ascii=False))


def get_config_value(tool_name: str, key: str, default: Any) -> Any:
    """Get a single key from a tool's config, with fallback to default.

    A stored value whose type does not match a numeric default (for
    example a threshold saved as ``"sixty"``) is ignored in favour of the
    default.
    """
    config = load_config(tool_name)
    if config is None or key not in config:
        return default
    value = config[key]
    if isinstance(default, (int, float)) and not isinstance(default, bool):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return default
    return value


def set_config_value(tool_name: str, key: str, value: Any) -> None:
    """Set a single key in a tool's config, preserving other keys."""
    config = load_config(tool_name) or {}
    config[key] = value
    save_config(tool_name, config)
