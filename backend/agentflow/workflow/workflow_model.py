"""
Workflow Data Models — graphs, node instances, ports, and connections.

These are the serializable data structures that describe a
user-designed workflow graph. They are edited through
``WorkflowBuilder``, checked by ``WorkflowValidator``, persisted by a
``WorkflowRepository`` and run by ``WorkflowExecutor``.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field


# ============================================================================
# Categories
# ============================================================================


class NodeCategory(str, Enum):
    TRIGGER = "trigger"
    ACTION = "action"
    LOGIC = "logic"
    INTEGRATION = "integration"


# Plural / legacy catalog spellings
_CATEGORY_ALIASES: Dict[str, NodeCategory] = {
    "triggers": NodeCategory.TRIGGER,
    "actions": NodeCategory.ACTION,
    "responses": NodeCategory.ACTION,
    "response": NodeCategory.ACTION,
    "conditions": NodeCategory.LOGIC,
    "condition": NodeCategory.LOGIC,
    "integrations": NodeCategory.INTEGRATION,
}


def normalize_category(value: Union[str, NodeCategory]) -> NodeCategory:
    """Map a catalog category string onto ``NodeCategory``.

    Raises:
        ValueError: If the category is not recognised.
    """
    if isinstance(value, NodeCategory):
        return value
    key = str(value).strip().lower()
    if key in _CATEGORY_ALIASES:
        return _CATEGORY_ALIASES[key]
    return NodeCategory(key)


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_node_id() -> str:
    return f"node_{uuid.uuid4().hex[:12]}"


def new_connection_id() -> str:
    return f"conn_{uuid.uuid4().hex[:12]}"


class Port(BaseModel):
    """A typed attachment point on one node.

    Direction is implied by whether the port sits in the node's
    ``inputs`` or ``outputs`` list. Identity is ``(node_id, port.id)``.
    """

    id: str
    name: str
    data_type: str = "any"
    required: bool = False
    description: str = ""


class WorkflowNode(BaseModel):
    """A node type instance placed in a graph.

    ``type`` references a ``NodeDefinition.type``. ``name`` and
    ``description`` are copied from the definition at creation and
    can be edited independently afterwards.
    """

    id: str = Field(default_factory=new_node_id)
    type: str
    name: str = ""
    description: str = ""
    icon: str = "Circle"
    category: str = NodeCategory.ACTION.value
    inputs: List[Port] = Field(default_factory=list)
    outputs: List[Port] = Field(default_factory=list)
    configuration: Dict[str, Any] = Field(default_factory=dict)
    position: Dict[str, float] = Field(
        default_factory=lambda: {"x": 0, "y": 0}
    )
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def is_trigger(self) -> bool:
        return self.category == NodeCategory.TRIGGER.value

    def get_input(self, port_id: str) -> Optional[Port]:
        return next((p for p in self.inputs if p.id == port_id), None)

    def get_output(self, port_id: str) -> Optional[Port]:
        return next((p for p in self.outputs if p.id == port_id), None)


class WorkflowConnection(BaseModel):
    """A directed edge from an output port to an input port."""

    id: str = Field(default_factory=new_connection_id)
    source_node_id: str
    source_port_id: str
    target_node_id: str
    target_port_id: str
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def key(self) -> tuple:
        return (
            self.source_node_id,
            self.source_port_id,
            self.target_node_id,
            self.target_port_id,
        )


class WorkflowVariable(BaseModel):
    id: str = Field(default_factory=lambda: f"var_{uuid.uuid4().hex[:8]}")
    name: str
    type: str = "string"  # string | number | boolean | object | array
    default_value: Any = None
    description: str = ""
    scope: str = "global"  # global | local


class WorkflowTrigger(BaseModel):
    id: str = Field(default_factory=lambda: f"trg_{uuid.uuid4().hex[:8]}")
    type: str  # message | webhook | schedule | event
    configuration: Dict[str, Any] = Field(default_factory=dict)
    enabled: bool = True


class WorkflowMetadata(BaseModel):
    created_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)
    created_by: Optional[str] = None
    template_id: Optional[str] = None
    is_template: bool = False
    tags: List[str] = Field(default_factory=list)


class WorkflowGraph(BaseModel):
    """A complete workflow graph.

    Invariant: every connection endpoint references a node in
    ``nodes``. ``version`` is incremented by the store on each save
    that changes the graph structure.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = "Untitled Workflow"
    description: str = ""
    version: int = 1
    nodes: List[WorkflowNode] = Field(default_factory=list)
    connections: List[WorkflowConnection] = Field(default_factory=list)
    variables: List[WorkflowVariable] = Field(default_factory=list)
    triggers: List[WorkflowTrigger] = Field(default_factory=list)
    metadata: WorkflowMetadata = Field(default_factory=WorkflowMetadata)

    def touch(self) -> None:
        """Update the ``updated_at`` timestamp."""
        self.metadata.updated_at = utc_now()

    def get_node(self, node_id: str) -> Optional[WorkflowNode]:
        """Find a node by ID."""
        for n in self.nodes:
            if n.id == node_id:
                return n
        return None

    def get_connection(self, connection_id: str) -> Optional[WorkflowConnection]:
        for c in self.connections:
            if c.id == connection_id:
                return c
        return None

    def connections_from(self, node_id: str) -> List[WorkflowConnection]:
        """Get all connections originating from a node."""
        return [c for c in self.connections if c.source_node_id == node_id]

    def connections_to(self, node_id: str) -> List[WorkflowConnection]:
        """Get all connections pointing to a node."""
        return [c for c in self.connections if c.target_node_id == node_id]

    def trigger_nodes(self) -> List[WorkflowNode]:
        """Trigger nodes in node order."""
        return [n for n in self.nodes if n.is_trigger]

    def structure(self) -> Dict[str, Any]:
        """The structural content compared across saves and exports."""
        return self.model_dump(
            include={"nodes", "connections", "variables", "triggers"},
            mode="json",
        )
