"""General config sections."""

from codeflow.config.sub_config.general.api_config import APIConfig
from codeflow.config.sub_config.general.engine_config import EngineConfig

__all__ = ["APIConfig", "EngineConfig"]
