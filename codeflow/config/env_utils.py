"""
Environment helpers for config sections.
"""

from __future__ import annotations

import os
from dataclasses import MISSING, Field
from typing import Any, Dict, Mapping

from dotenv import load_dotenv

_TRUE_VALUES = {"1", "true", "yes", "on"}

_dotenv_loaded = False


def _ensure_dotenv() -> None:
    # Secrets may live in a local `.env`; real environment variables win.
    global _dotenv_loaded
    if not _dotenv_loaded:
        load_dotenv(override=False)
        _dotenv_loaded = True


def getenv(key: str, default: str | None = None) -> str | None:
    """Read an env var, treating empty strings as unset."""
    _ensure_dotenv()
    value = os.getenv(key)
    if value is None or value == "":
        return default
    return value


def coerce_value(raw: str, type_name: str) -> Any:
    """Convert an env string to the dataclass field's declared type."""
    type_name = type_name.replace("Optional[", "").rstrip("]").strip()
    if type_name == "bool":
        return raw.strip().lower() in _TRUE_VALUES
    if type_name == "int":
        return int(raw)
    if type_name == "float":
        return float(raw)
    return raw


def read_env_defaults(
    env_map: Mapping[str, str],
    dataclass_fields: Mapping[str, Field],
) -> Dict[str, Any]:
    """Build constructor kwargs from environment variables.

    Fields whose variable is unset keep their dataclass default.
    """
    values: Dict[str, Any] = {}
    for field_name, env_key in env_map.items():
        f = dataclass_fields.get(field_name)
        if f is None:
            continue
        raw = getenv(env_key)
        if raw is None:
            continue
        type_name = f.type if isinstance(f.type, str) else getattr(f.type, "__name__", "str")
        try:
            values[field_name] = coerce_value(raw, type_name)
        except ValueError:
            # Bad value: fall back to the declared default.
            if f.default is not MISSING:
                values[field_name] = f.default
    return values
