"""
Configuration for the workflow engine.
"""

from agentflow.config.engine_config import EngineConfig
from agentflow.config.env_utils import read_env_defaults

__all__ = ["EngineConfig", "read_env_defaults"]
