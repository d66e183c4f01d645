"""
Node Base — node type definitions, executor contract, and execution context.

A ``NodeDefinition`` is the immutable template for a node type, loaded
from the catalog into the ``NodeRegistry``. Runtime behaviour is not
attached to the definition: it is provided by a ``NodeExecutor``
registered against the same type key in the ``ExecutorRegistry``.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Dict,
    List,
    Optional,
    Protocol,
    Union,
    runtime_checkable,
)

from pydantic import BaseModel, ConfigDict, Field, field_validator

from agentflow.workflow.exceptions import ExecutionCancelled
from agentflow.workflow.workflow_model import (
    NodeCategory,
    WorkflowNode,
    normalize_category,
)

if TYPE_CHECKING:
    from agentflow.logging.execution_logger import ExecutionLogger


# ============================================================================
# Node Definition
# ============================================================================


class ConfigField(BaseModel):
    """One entry of a node type's configuration schema."""

    model_config = ConfigDict(extra="allow")

    type: str = "any"
    required: bool = False
    description: str = ""
    default: Any = None


class NodeDefinition(BaseModel):
    """Template for a node type. Identified by ``type``.

    ``input_schema`` / ``output_schema`` are kept as raw mappings;
    port generation tolerates malformed entries.
    """

    model_config = ConfigDict(frozen=True)

    type: str
    name: str
    description: str = ""
    category: NodeCategory
    icon: str = "Circle"
    input_schema: Dict[str, Any] = Field(default_factory=dict)
    output_schema: Dict[str, Any] = Field(default_factory=dict)
    configuration_schema: Dict[str, ConfigField] = Field(default_factory=dict)
    is_system: bool = True

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, value: Any) -> NodeCategory:
        return normalize_category(value)

    @field_validator("input_schema", "output_schema", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("configuration_schema", mode="before")
    @classmethod
    def _coerce_config_schema(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, dict):
            # Bare type strings: {"model": "string"}
            return {
                k: ({"type": v} if isinstance(v, str) else v)
                for k, v in value.items()
            }
        return value

    def required_fields(self) -> List[str]:
        return [k for k, f in self.configuration_schema.items() if f.required]


# ============================================================================
# Executor contract
# ============================================================================


class NodeOutput(BaseModel):
    """What a node executor returns: the output value plus metadata."""

    output: Any = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def coerce(cls, value: Any) -> "NodeOutput":
        """Accept a NodeOutput or an ``{"output", "metadata"}`` mapping."""
        if isinstance(value, NodeOutput):
            return value
        if isinstance(value, dict) and "output" in value:
            return cls(output=value["output"], metadata=value.get("metadata") or {})
        return cls(output=value)


@runtime_checkable
class NodeExecutor(Protocol):
    """Runtime behaviour for one node type.

    ``execute`` may be a coroutine function or a plain function.
    """

    def execute(
        self,
        node: WorkflowNode,
        input_data: Dict[str, Any],
        context: "ExecutionContext",
    ) -> Union[NodeOutput, Dict[str, Any], Awaitable[Any]]:
        ...


# ============================================================================
# Execution context
# ============================================================================


class CancellationToken:
    """Cooperative cancellation flag, safe to set from another thread."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self.reason: Optional[str] = None

    def cancel(self, reason: Optional[str] = None) -> None:
        self.reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, node_id: Optional[str] = None) -> None:
        if self._event.is_set():
            raise ExecutionCancelled(node_id)


@dataclass
class ExecutionContext:
    """Per-call execution context shared by every node of one run.

    ``input_data`` is the triggering payload. ``execution_id`` and
    ``logger`` are filled in by the ``WorkflowExecutor``.
    """

    input_data: Dict[str, Any] = field(default_factory=dict)
    workflow_id: Optional[str] = None
    user_id: Optional[str] = None
    channel: Optional[str] = None
    conversation_id: Optional[str] = None
    deployment_id: Optional[str] = None
    variables: Dict[str, Any] = field(default_factory=dict)
    cancel_token: CancellationToken = field(default_factory=CancellationToken)
    execution_id: Optional[str] = None
    logger: Optional["ExecutionLogger"] = None

    def set_variable(self, name: str, value: Any) -> None:
        self.variables[name] = value

    def get_variable(self, name: str, default: Any = None) -> Any:
        return self.variables.get(name, default)
