"""
Workflow Engine — visual agent workflow builder and runner.

Provides the infrastructure for defining, validating, storing and
executing user-designed agent workflows built from catalog node types
joined by port-to-port connections.

Architecture:
    nodes/             — node definitions, registries, built-in executors
    workflow_model     — data models for workflow graphs
    workflow_builder   — node / connection editing operations
    workflow_validator — connection and whole-graph validation
    workflow_executor  — runs a graph from its trigger node via LangGraph
    workflow_store     — persistence layer for workflow graphs
    workflow_io        — export / import documents
    templates          — pre-built workflow templates
"""

from agentflow.workflow.workflow_model import (
    NodeCategory,
    Port,
    WorkflowConnection,
    WorkflowGraph,
    WorkflowMetadata,
    WorkflowNode,
    WorkflowTrigger,
    WorkflowVariable,
)
from agentflow.workflow.exceptions import (
    CircularDependency,
    ExecutionCancelled,
    ExecutorNotFound,
    InvalidConnection,
    NodeExecutionError,
    NodeNotFound,
    NodeTimeoutError,
    NoTriggerNode,
    UnknownNodeType,
    WorkflowError,
    WorkflowImportError,
    WorkflowNotFound,
    WorkflowValidationFailed,
)
from agentflow.workflow.nodes import (
    CancellationToken,
    ExecutionContext,
    ExecutorRegistry,
    NodeDefinition,
    NodeExecutor,
    NodeOutput,
    NodeRegistry,
    register_builtin_executors,
)
from agentflow.workflow.workflow_validator import (
    ErrorKind,
    ValidationError,
    ValidationResult,
    ValidationWarning,
    WarningKind,
    WorkflowValidator,
)
from agentflow.workflow.workflow_builder import WorkflowBuilder
from agentflow.workflow.workflow_store import (
    InMemoryWorkflowStore,
    WorkflowRepository,
    WorkflowStore,
)
from agentflow.workflow.workflow_executor import ExecutionResult, WorkflowExecutor
from agentflow.workflow.workflow_io import (
    export_workflow,
    export_workflow_json,
    import_workflow,
)
from agentflow.workflow.templates import create_customer_support_template, get_template

__all__ = [
    "NodeCategory",
    "Port",
    "WorkflowConnection",
    "WorkflowGraph",
    "WorkflowMetadata",
    "WorkflowNode",
    "WorkflowTrigger",
    "WorkflowVariable",
    "CircularDependency",
    "ExecutionCancelled",
    "ExecutorNotFound",
    "InvalidConnection",
    "NodeExecutionError",
    "NodeNotFound",
    "NodeTimeoutError",
    "NoTriggerNode",
    "UnknownNodeType",
    "WorkflowError",
    "WorkflowImportError",
    "WorkflowNotFound",
    "WorkflowValidationFailed",
    "CancellationToken",
    "ExecutionContext",
    "ExecutorRegistry",
    "NodeDefinition",
    "NodeExecutor",
    "NodeOutput",
    "NodeRegistry",
    "register_builtin_executors",
    "ErrorKind",
    "ValidationError",
    "ValidationResult",
    "ValidationWarning",
    "WarningKind",
    "WorkflowValidator",
    "WorkflowBuilder",
    "InMemoryWorkflowStore",
    "WorkflowRepository",
    "WorkflowStore",
    "ExecutionResult",
    "WorkflowExecutor",
    "export_workflow",
    "export_workflow_json",
    "import_workflow",
    "create_customer_support_template",
    "get_template",
]
