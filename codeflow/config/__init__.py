"""
Configuration — registered, env-backed config sections.

    api     — model backend, credential, default model, endpoint
    engine  — LLM node defaults, terminal marker, routing mode, log level
"""

from codeflow.config.base import (
    BaseConfig,
    ConfigField,
    FieldType,
    get_config,
    get_config_registry,
    register_config,
    reset_config_cache,
)
from codeflow.config.sub_config.general import APIConfig, EngineConfig

__all__ = [
    "BaseConfig",
    "ConfigField",
    "FieldType",
    "get_config",
    "get_config_registry",
    "register_config",
    "reset_config_cache",
    "APIConfig",
    "EngineConfig",
]
