"""
Model API Configuration.

Controls which model backend the engine talks to, the Anthropic
credential, default model, endpoint, and request timeout.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from codeflow.config.base import BaseConfig, ConfigField, FieldType, register_config

DEFAULT_MODEL = "claude-3-5-sonnet-20241022"
DEFAULT_BASE_URL = "https://api.anthropic.com/v1"
DEFAULT_API_VERSION = "2023-06-01"

MODEL_OPTIONS = [
    {"value": "claude-3-5-sonnet-20241022", "label": "Claude 3.5 Sonnet"},
    {"value": "claude-3-5-haiku-20241022", "label": "Claude 3.5 Haiku"},
    {"value": "claude-sonnet-4-5-20250929", "label": "Claude Sonnet 4.5"},
    {"value": "claude-opus-4-20250514", "label": "Claude Opus 4"},
]

BACKEND_OPTIONS = [
    {"value": "anthropic", "label": "Anthropic Messages API"},
    {"value": "mock", "label": "Mock (offline, deterministic)"},
]


@register_config
@dataclass
class APIConfig(BaseConfig):
    """Model backend and Anthropic API settings."""

    llm_backend: str = "anthropic"
    anthropic_api_key: str = ""
    anthropic_model: str = DEFAULT_MODEL
    anthropic_base_url: str = DEFAULT_BASE_URL
    anthropic_version: str = DEFAULT_API_VERSION
    request_timeout: float = 120.0

    _ENV_MAP = {
        "llm_backend": "CODEFLOW_LLM_BACKEND",
        "anthropic_api_key": "ANTHROPIC_API_KEY",
        "anthropic_model": "CODEFLOW_MODEL",
        "anthropic_base_url": "CODEFLOW_ANTHROPIC_BASE_URL",
        "request_timeout": "CODEFLOW_REQUEST_TIMEOUT",
    }

    @classmethod
    def get_config_name(cls) -> str:
        return "api"

    @classmethod
    def get_display_name(cls) -> str:
        return "Model API"

    @classmethod
    def get_description(cls) -> str:
        return "Model backend, Anthropic API key, default model, endpoint and timeout."

    @classmethod
    def get_fields_metadata(cls) -> List[ConfigField]:
        return [
            ConfigField(
                name="llm_backend",
                field_type=FieldType.SELECT,
                label="Model Backend",
                description="Backend used by LLM nodes",
                default="anthropic",
                options=BACKEND_OPTIONS,
                group="api",
            ),
            ConfigField(
                name="anthropic_api_key",
                field_type=FieldType.PASSWORD,
                label="Anthropic API Key",
                description="API key for Anthropic Claude models",
                placeholder="sk-ant-…",
                group="api",
                secure=True,
            ),
            ConfigField(
                name="anthropic_model",
                field_type=FieldType.SELECT,
                label="Default Model",
                description="Model used by LLM nodes that do not set one",
                default=DEFAULT_MODEL,
                options=MODEL_OPTIONS,
                group="api",
            ),
            ConfigField(
                name="anthropic_base_url",
                field_type=FieldType.STRING,
                label="API Base URL",
                default=DEFAULT_BASE_URL,
                group="api",
            ),
            ConfigField(
                name="request_timeout",
                field_type=FieldType.NUMBER,
                label="Request Timeout (s)",
                description="HTTP timeout for a single model request",
                default=120.0,
                min_value=1,
                max_value=600,
                group="api",
            ),
        ]
