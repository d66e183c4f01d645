"""
Workflow Nodes Package.

Node type definitions, the registries, port generation, and the
built-in executors that ship with the engine.
"""

from logging import getLogger

from agentflow.workflow.nodes.base import (
    CancellationToken,
    ConfigField,
    ExecutionContext,
    NodeCategory,
    NodeDefinition,
    NodeExecutor,
    NodeOutput,
)
from agentflow.workflow.nodes.logic_nodes import ConditionExecutor
from agentflow.workflow.nodes.ports import generate_ports
from agentflow.workflow.nodes.registry import (
    DEFAULT_CATALOG_PATH,
    ExecutorRegistry,
    NodeRegistry,
)
from agentflow.workflow.nodes.trigger_nodes import (
    MessageTriggerExecutor,
    ScheduleTriggerExecutor,
    WebhookTriggerExecutor,
)


def register_builtin_executors(executors: ExecutorRegistry) -> ExecutorRegistry:
    """Install the trigger and pure-logic executors shipped with the engine.

    AI, channel-delivery and lookup node types are registered by the
    application against the same ``ExecutorRegistry``.
    """
    executors.register("message_trigger", MessageTriggerExecutor())
    executors.register("webhook_trigger", WebhookTriggerExecutor())
    executors.register("schedule_trigger", ScheduleTriggerExecutor())
    executors.register("condition", ConditionExecutor())
    getLogger(__name__).info(
        f"Built-in executors registered: {len(executors.registered_types())} node types"
    )
    return executors


__all__ = [
    "CancellationToken",
    "ConfigField",
    "ExecutionContext",
    "NodeCategory",
    "NodeDefinition",
    "NodeExecutor",
    "NodeOutput",
    "generate_ports",
    "DEFAULT_CATALOG_PATH",
    "ExecutorRegistry",
    "NodeRegistry",
    "register_builtin_executors",
]
