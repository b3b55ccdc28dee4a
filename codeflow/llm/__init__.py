from .anthropic import AnthropicClient
from .base import ChatTurn, ModelClient, ModelRequest, ModelResponse, to_provider_turns
from .factory import build_model_client
from .mock import MockModelClient

__all__ = [
    "AnthropicClient",
    "ChatTurn",
    "MockModelClient",
    "ModelClient",
    "ModelRequest",
    "ModelResponse",
    "build_model_client",
    "to_provider_turns",
]
