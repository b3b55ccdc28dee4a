"""
Workflow Engine Configuration.

Defaults applied by LLM nodes, the terminal marker, routing mode
and log level.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from codeflow.config.base import BaseConfig, ConfigField, FieldType, register_config

DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant."
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_OUTPUT_TOKENS = 4000
TERMINAL_MARKER = "END"


@register_config
@dataclass
class EngineConfig(BaseConfig):
    """Workflow engine behaviour."""

    default_system_prompt: str = DEFAULT_SYSTEM_PROMPT
    default_temperature: float = DEFAULT_TEMPERATURE
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS
    terminal_marker: str = TERMINAL_MARKER
    legacy_routing: bool = False
    log_level: str = "INFO"

    _ENV_MAP = {
        "default_system_prompt": "CODEFLOW_SYSTEM_PROMPT",
        "default_temperature": "CODEFLOW_TEMPERATURE",
        "max_output_tokens": "CODEFLOW_MAX_OUTPUT_TOKENS",
        "legacy_routing": "CODEFLOW_LEGACY_ROUTING",
        "log_level": "CODEFLOW_LOG_LEVEL",
    }

    @classmethod
    def get_config_name(cls) -> str:
        return "engine"

    @classmethod
    def get_display_name(cls) -> str:
        return "Workflow Engine"

    @classmethod
    def get_description(cls) -> str:
        return "LLM node defaults, terminal marker, edge routing mode and log level."

    @classmethod
    def get_fields_metadata(cls) -> List[ConfigField]:
        return [
            ConfigField(
                name="default_system_prompt",
                field_type=FieldType.TEXTAREA,
                label="Default System Prompt",
                description="System prompt for LLM nodes without systemPrompt",
                default=DEFAULT_SYSTEM_PROMPT,
                group="llm",
            ),
            ConfigField(
                name="default_temperature",
                field_type=FieldType.NUMBER,
                label="Default Temperature",
                default=DEFAULT_TEMPERATURE,
                min_value=0.0,
                max_value=1.0,
                group="llm",
            ),
            ConfigField(
                name="max_output_tokens",
                field_type=FieldType.NUMBER,
                label="Max Output Tokens",
                default=DEFAULT_MAX_OUTPUT_TOKENS,
                min_value=1,
                max_value=64000,
                group="llm",
            ),
            ConfigField(
                name="legacy_routing",
                field_type=FieldType.BOOLEAN,
                label="Legacy Edge Routing",
                description="Always follow the first declared edge, ignoring conditional outcomes",
                default=False,
                group="routing",
            ),
            ConfigField(
                name="log_level",
                field_type=FieldType.SELECT,
                label="Log Level",
                default="INFO",
                options=[{"value": v, "label": v} for v in ("DEBUG", "INFO", "WARNING", "ERROR")],
                group="logging",
            ),
        ]
