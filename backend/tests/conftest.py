"""
Shared fixtures for the workflow engine tests.
"""

import pytest

from agentflow.config import EngineConfig
from agentflow.workflow.nodes import ExecutorRegistry, NodeRegistry, register_builtin_executors
from agentflow.workflow.workflow_builder import WorkflowBuilder
from agentflow.workflow.workflow_executor import WorkflowExecutor
from agentflow.workflow.workflow_validator import WorkflowValidator


@pytest.fixture
def registry():
    """Registry loaded with the bundled catalog"""
    reg = NodeRegistry()
    reg.load_default_catalog()
    return reg


@pytest.fixture
def executors():
    """Executor table with the built-in trigger and condition executors"""
    return register_builtin_executors(ExecutorRegistry())


@pytest.fixture
def validator(registry):
    return WorkflowValidator(registry)


@pytest.fixture
def builder(registry, validator):
    return WorkflowBuilder(registry, validator)


@pytest.fixture
def config():
    """Default config with the validation gate off"""
    return EngineConfig(validate_before_execute=False, node_timeout_seconds=5.0)


@pytest.fixture
def engine(registry, executors, config, validator):
    return WorkflowExecutor(registry, executors, config, validator)


@pytest.fixture
def graph(builder):
    return builder.create_workflow("Test", owner="user-1")
