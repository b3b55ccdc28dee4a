from __future__ import annotations

from typing import Optional

from codeflow.config.sub_config.general.api_config import APIConfig
from codeflow.errors import ConfigurationError

from .anthropic import AnthropicClient
from .base import ModelClient
from .mock import MockModelClient


def build_model_client(settings: APIConfig, api_key: Optional[str] = None) -> ModelClient:
    """Build the model client selected by ``settings.llm_backend``.

    An explicit ``api_key`` takes precedence over the configured one.
    """
    backend = (settings.llm_backend or "anthropic").strip().lower()
    if backend == "mock":
        return MockModelClient()
    if backend == "anthropic":
        key = api_key or settings.anthropic_api_key
        if not key:
            raise ConfigurationError(
                "Anthropic API key is not configured (pass api_key or set ANTHROPIC_API_KEY)"
            )
        return AnthropicClient(
            api_key=key,
            base_url=settings.anthropic_base_url,
            anthropic_version=settings.anthropic_version,
            timeout_s=settings.request_timeout,
        )
    raise ConfigurationError(f"Unknown llm_backend={backend!r}, expected: anthropic|mock")
