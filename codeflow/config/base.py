"""
Config Base — dataclass-backed configuration sections.

Each section is a ``@dataclass`` subclass of ``BaseConfig`` registered
with ``@register_config``. Defaults come from environment variables
(optionally loaded from a local ``.env``) through ``_ENV_MAP``.
Field metadata (``ConfigField``) describes each value for a settings UI.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from logging import getLogger
from typing import Any, Dict, List, Optional, Type

logger = getLogger(__name__)


class FieldType(str, Enum):
    """Input widget type for a config field."""
    STRING = "string"
    PASSWORD = "password"
    NUMBER = "number"
    BOOLEAN = "boolean"
    SELECT = "select"
    TEXTAREA = "textarea"


@dataclass
class ConfigField:
    """Metadata for a single configuration value."""
    name: str
    field_type: FieldType
    label: str
    description: str = ""
    default: Any = None
    required: bool = False
    placeholder: str = ""
    options: List[Dict[str, Any]] = field(default_factory=list)
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    group: str = "general"
    secure: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["field_type"] = self.field_type.value
        return data


class BaseConfig:
    """Base class for configuration sections.

    Subclasses are dataclasses. ``_ENV_MAP`` maps field name to the
    environment variable that supplies its default.
    """

    _ENV_MAP: Dict[str, str] = {}

    @classmethod
    def get_default_instance(cls) -> "BaseConfig":
        from codeflow.config.env_utils import read_env_defaults

        defaults = read_env_defaults(cls._ENV_MAP, cls.__dataclass_fields__)
        return cls(**defaults)

    @classmethod
    def get_config_name(cls) -> str:
        raise NotImplementedError

    @classmethod
    def get_display_name(cls) -> str:
        return cls.get_config_name().replace("_", " ").title()

    @classmethod
    def get_description(cls) -> str:
        return ""

    @classmethod
    def get_category(cls) -> str:
        return "general"

    @classmethod
    def get_fields_metadata(cls) -> List[ConfigField]:
        return []

    def validate(self) -> List[str]:
        """Check field values against their metadata.

        Returns a list of error messages (empty = valid).
        """
        errors: List[str] = []
        for meta in self.get_fields_metadata():
            value = getattr(self, meta.name, None)
            if meta.required and (value is None or value == ""):
                errors.append(f"{meta.label} is required.")
                continue
            if meta.field_type == FieldType.NUMBER and value is not None:
                if meta.min_value is not None and value < meta.min_value:
                    errors.append(f"{meta.label} must be >= {meta.min_value}.")
                if meta.max_value is not None and value > meta.max_value:
                    errors.append(f"{meta.label} must be <= {meta.max_value}.")
            if meta.field_type == FieldType.SELECT and meta.options and value:
                allowed = {o["value"] for o in meta.options}
                if value not in allowed:
                    errors.append(f"{meta.label} must be one of: {', '.join(sorted(allowed))}.")
        return errors

    def to_dict(self, mask_secure: bool = True) -> Dict[str, Any]:
        """Serialize field values, masking secrets by default."""
        data = asdict(self)
        if mask_secure:
            for meta in self.get_fields_metadata():
                if meta.secure and data.get(meta.name):
                    data[meta.name] = "********"
        return data


# ============================================================================
# Registry
# ============================================================================

_CONFIG_CLASSES: Dict[str, Type[BaseConfig]] = {}
_CONFIG_INSTANCES: Dict[str, BaseConfig] = {}


def register_config(cls: Type[BaseConfig]) -> Type[BaseConfig]:
    """Class decorator: register a config section by its name."""
    name = cls.get_config_name()
    if name in _CONFIG_CLASSES and _CONFIG_CLASSES[name] is not cls:
        logger.warning(f"Config section '{name}' re-registered by {cls.__name__}")
    _CONFIG_CLASSES[name] = cls
    return cls


def get_config_registry() -> Dict[str, Type[BaseConfig]]:
    """Return a copy of the registered config classes."""
    return dict(_CONFIG_CLASSES)


def get_config(name: str) -> BaseConfig:
    """Return the cached default instance of a registered config section."""
    if name not in _CONFIG_CLASSES:
        raise KeyError(f"Unknown config section: {name}")
    if name not in _CONFIG_INSTANCES:
        _CONFIG_INSTANCES[name] = _CONFIG_CLASSES[name].get_default_instance()
    return _CONFIG_INSTANCES[name]


def reset_config_cache() -> None:
    """Drop cached instances so the next ``get_config`` re-reads the env."""
    _CONFIG_INSTANCES.clear()
