"""
Engine assembly — wire the registries, builder, executor and store
from an ``EngineConfig``.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import Optional

from agentflow.config import EngineConfig
from agentflow.logging import configure_logging
from agentflow.workflow.nodes import ExecutorRegistry, NodeRegistry, register_builtin_executors
from agentflow.workflow.workflow_builder import WorkflowBuilder
from agentflow.workflow.workflow_executor import WorkflowExecutor
from agentflow.workflow.workflow_store import WorkflowStore
from agentflow.workflow.workflow_validator import WorkflowValidator

logger = getLogger(__name__)


@dataclass
class WorkflowEngine:
    config: EngineConfig
    registry: NodeRegistry
    executors: ExecutorRegistry
    validator: WorkflowValidator
    builder: WorkflowBuilder
    executor: WorkflowExecutor
    store: WorkflowStore


def create_engine(
    config: Optional[EngineConfig] = None,
    setup_logging: bool = False,
) -> WorkflowEngine:
    """Build a ready-to-use engine.

    Loads ``config.catalog_path`` (or the bundled catalog), registers the
    built-in executors and opens the JSON store at ``config.storage_dir``.
    An unreadable catalog leaves the registry empty.
    """
    config = config or EngineConfig.get_default_instance()
    if setup_logging:
        configure_logging(config.log_level, config.log_format)

    registry = NodeRegistry()
    if config.catalog_path:
        registry.load(config.catalog_path)
    else:
        registry.load_default_catalog()

    executors = register_builtin_executors(ExecutorRegistry())
    validator = WorkflowValidator(registry)

    engine = WorkflowEngine(
        config=config,
        registry=registry,
        executors=executors,
        validator=validator,
        builder=WorkflowBuilder(registry, validator),
        executor=WorkflowExecutor(registry, executors, config, validator),
        store=WorkflowStore(config.storage_dir),
    )
    logger.info(
        f"Workflow engine ready: {len(registry)} node types, "
        f"{len(executors.registered_types())} executors"
    )
    return engine
