"""
Model Nodes — LLM invocation nodes for workflow graphs.

The LLM node sends the whole transcript to the model with a
configurable system prompt and appends the reply as one
assistant message.
"""

from __future__ import annotations

from logging import getLogger
from typing import Optional

from pydantic import Field

from codeflow.config.sub_config.general.api_config import MODEL_OPTIONS
from codeflow.config.sub_config.general.engine_config import (
    DEFAULT_MAX_OUTPUT_TOKENS,
    DEFAULT_SYSTEM_PROMPT,
    DEFAULT_TEMPERATURE,
)
from codeflow.llm.base import ModelRequest, to_provider_turns
from codeflow.workflow.nodes.base import (
    BaseNode,
    ExecutionContext,
    NodeConfig,
    NodeParameter,
    register_node,
)
from codeflow.workflow.workflow_model import NodeType, WorkflowNode
from codeflow.workflow.workflow_state import AgentState, Message

logger = getLogger(__name__)


class LLMNodeConfig(NodeConfig):
    """Unset fields fall back to the engine defaults."""

    system_prompt: Optional[str] = None
    model: Optional[str] = None
    temperature: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    max_tokens: Optional[int] = Field(default=None, gt=0)


# ============================================================================
# LLM Call
# ============================================================================


@register_node
class LLMNode(BaseNode):
    """Invoke the language model on the current transcript."""

    node_type = NodeType.LLM
    label = "LLM Call"
    description = "Send the conversation to the language model and append its reply"
    category = "model"
    config_model = LLMNodeConfig

    parameters = [
        NodeParameter(
            name="systemPrompt",
            label="System Prompt",
            type="prompt_template",
            default=DEFAULT_SYSTEM_PROMPT,
            description="Top-level system prompt sent with the conversation.",
            group="prompt",
        ),
        NodeParameter(
            name="model",
            label="Model",
            type="select",
            options=MODEL_OPTIONS,
            description="Model id. Empty = engine default model.",
            group="model",
        ),
        NodeParameter(
            name="temperature",
            label="Temperature",
            type="number",
            default=DEFAULT_TEMPERATURE,
            min=0.0,
            max=1.0,
            group="model",
        ),
        NodeParameter(
            name="maxTokens",
            label="Max Output Tokens",
            type="number",
            default=DEFAULT_MAX_OUTPUT_TOKENS,
            min=1,
            group="model",
        ),
    ]

    def build_request(
        self,
        config: LLMNodeConfig,
        state: AgentState,
        context: ExecutionContext,
    ) -> ModelRequest:
        defaults = context.engine_config
        return ModelRequest(
            model=config.model or context.default_model,
            messages=to_provider_turns(state.messages),
            system=config.system_prompt or defaults.default_system_prompt,
            temperature=(
                config.temperature
                if config.temperature is not None
                else defaults.default_temperature
            ),
            max_tokens=config.max_tokens or defaults.max_output_tokens,
        )

    async def execute(
        self,
        node: WorkflowNode,
        state: AgentState,
        context: ExecutionContext,
    ) -> AgentState:
        config = self.parse_config(node.config)
        request = self.build_request(config, state, context)

        logger.info(
            f"[{context.session_id}] llm '{node.display_name}': "
            f"{request.model}, {len(request.messages)} turns"
        )
        response = await context.model_client.create_message(request)

        return state.with_message(Message(role="assistant", content=response.text))
