"""
Workflow Exceptions

Errors raised by the graph editing operations and the execution engine.
Whole-graph validation never raises; it reports through ValidationResult.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from agentflow.workflow.workflow_validator import ValidationError


class WorkflowError(Exception):
    """Base exception for the workflow engine."""
    pass


class UnknownNodeType(WorkflowError):
    """A node type key is not present in the NodeRegistry."""

    def __init__(self, type_key: str):
        self.type_key = type_key
        super().__init__(f"Unknown node type: {type_key}")


class NodeNotFound(WorkflowError):
    """A node id is not present in the graph."""

    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f"Node not found: {node_id}")


class InvalidConnection(WorkflowError):
    """Connection creation rejected; carries the first validation error."""

    def __init__(self, error: "ValidationError"):
        self.error = error
        super().__init__(f"Invalid connection: {error.message}")

    @property
    def kind(self):
        return self.error.kind


class NoTriggerNode(WorkflowError):
    def __init__(self, workflow_id: Optional[str] = None):
        self.workflow_id = workflow_id
        super().__init__("No trigger nodes found in workflow")


class ExecutorNotFound(WorkflowError):
    def __init__(self, type_key: str):
        self.type_key = type_key
        super().__init__(f"No executor registered for node type: {type_key}")


class NodeExecutionError(WorkflowError):
    """A node executor failed."""

    def __init__(self, node_id: str, type_key: str, message: str):
        self.node_id = node_id
        self.type_key = type_key
        super().__init__(f"Node '{node_id}' ({type_key}) failed: {message}")


class NodeTimeoutError(NodeExecutionError):
    def __init__(self, node_id: str, type_key: str, timeout: float):
        super().__init__(node_id, type_key, f"Execution exceeded timeout ({timeout}s)")
        self.timeout = timeout


class ExecutionCancelled(WorkflowError):
    def __init__(self, node_id: Optional[str] = None):
        self.node_id = node_id
        super().__init__("Execution cancelled")


class WorkflowNotFound(WorkflowError):
    def __init__(self, workflow_id: str):
        self.workflow_id = workflow_id
        super().__init__(f"Workflow not found: {workflow_id}")


class WorkflowImportError(WorkflowError):
    """An exported workflow document could not be parsed."""
    pass


class CircularDependency(WorkflowError):
    """The nodes downstream of the entry node contain a cycle."""

    def __init__(self, node_ids):
        self.node_ids = list(node_ids)
        super().__init__(
            f"Circular dependency detected involving nodes: {sorted(self.node_ids)}"
        )


class WorkflowValidationFailed(WorkflowError):
    """Whole-graph validation reported blocking errors before execution."""

    def __init__(self, result):
        self.result = result
        first = result.errors[0].message if result.errors else "unknown error"
        super().__init__(
            f"Workflow validation failed ({len(result.errors)} errors): {first}"
        )
