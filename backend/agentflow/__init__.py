"""
AgentFlow — workflow engine for visual AI-agent builders.
"""

from agentflow.engine import WorkflowEngine, create_engine

__version__ = "0.1.0"

__all__ = ["WorkflowEngine", "create_engine"]
