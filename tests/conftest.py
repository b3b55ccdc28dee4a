"""Shared fixtures: isolated config, mock model client, engine factory."""

from typing import Any, Optional

import pytest

from codeflow.config import APIConfig, EngineConfig, reset_config_cache
from codeflow.llm import MockModelClient
from codeflow.tools import ToolRegistry, create_default_registry
from codeflow.workflow import WorkflowEngine

_ENV_VARS = (
    "ANTHROPIC_API_KEY",
    "CODEFLOW_LLM_BACKEND",
    "CODEFLOW_MODEL",
    "CODEFLOW_ANTHROPIC_BASE_URL",
    "CODEFLOW_REQUEST_TIMEOUT",
    "CODEFLOW_SYSTEM_PROMPT",
    "CODEFLOW_TEMPERATURE",
    "CODEFLOW_MAX_OUTPUT_TOKENS",
    "CODEFLOW_LEGACY_ROUTING",
    "CODEFLOW_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Every test starts from built-in defaults, not the developer's env."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    reset_config_cache()
    yield
    reset_config_cache()


@pytest.fixture
def mock_client():
    return MockModelClient()


@pytest.fixture
def make_engine(mock_client):
    """Build an engine on the mock client; keyword overrides pass through."""

    def _make(
        tool_registry: Optional[ToolRegistry] = None,
        legacy_routing: Optional[bool] = None,
        **kwargs: Any,
    ) -> WorkflowEngine:
        kwargs.setdefault("model_client", mock_client)
        kwargs.setdefault("api_config", APIConfig(anthropic_model="test-model"))
        kwargs.setdefault("engine_config", EngineConfig())
        return WorkflowEngine(
            tool_registry=tool_registry if tool_registry is not None else create_default_registry(),
            legacy_routing=legacy_routing,
            **kwargs,
        )

    return _make

