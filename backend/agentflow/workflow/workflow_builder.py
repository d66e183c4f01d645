"""
Workflow Builder — editing operations over a WorkflowGraph.

All operations mutate the graph in place. Structural mistakes made by
the editor (unknown node type, unknown node id) raise immediately;
rejected connections raise ``InvalidConnection`` carrying the first
validation error.
"""

from __future__ import annotations

from logging import getLogger
from typing import Any, Dict, Optional

from agentflow.workflow.exceptions import InvalidConnection, NodeNotFound, UnknownNodeType
from agentflow.workflow.nodes.ports import INPUT, OUTPUT, generate_ports
from agentflow.workflow.nodes.registry import NodeRegistry
from agentflow.workflow.workflow_model import (
    WorkflowConnection,
    WorkflowGraph,
    WorkflowMetadata,
    WorkflowNode,
    new_node_id,
    utc_now,
)
from agentflow.workflow.workflow_validator import WorkflowValidator

logger = getLogger(__name__)

# Fields that identify a node's shape; changing them means remove + add.
_IMMUTABLE_NODE_FIELDS = frozenset({"id", "type", "inputs", "outputs"})


class WorkflowBuilder:
    """Create workflows and edit their nodes and connections.

    Usage::

        builder = WorkflowBuilder(registry)
        graph = builder.create_workflow("Support bot", owner="u1")
        trigger = builder.add_node(graph, "message_trigger", {"x": 0, "y": 0})
    """

    def __init__(
        self,
        registry: NodeRegistry,
        validator: Optional[WorkflowValidator] = None,
    ) -> None:
        self._registry = registry
        self._validator = validator or WorkflowValidator(registry)

    @property
    def validator(self) -> WorkflowValidator:
        return self._validator

    # ========================================================================
    # Graphs
    # ========================================================================

    def create_workflow(
        self,
        name: str,
        description: str = "",
        owner: Optional[str] = None,
        template: Optional[WorkflowGraph] = None,
    ) -> WorkflowGraph:
        """Create an empty workflow, or a deep clone of ``template``."""
        if template is None:
            graph = WorkflowGraph(
                name=name,
                description=description,
                metadata=WorkflowMetadata(created_by=owner),
            )
        else:
            graph = WorkflowGraph(
                name=name,
                description=description or template.description,
                nodes=[n.model_copy(deep=True) for n in template.nodes],
                connections=[c.model_copy(deep=True) for c in template.connections],
                variables=[v.model_copy(deep=True) for v in template.variables],
                triggers=[t.model_copy(deep=True) for t in template.triggers],
                metadata=WorkflowMetadata(
                    created_by=owner,
                    template_id=template.id,
                    tags=list(template.metadata.tags),
                ),
            )

        logger.info(
            f"Workflow created: {graph.name} ({graph.id})"
            + (f" from template {template.id}" if template is not None else "")
        )
        return graph

    # ========================================================================
    # Nodes
    # ========================================================================

    def add_node(
        self,
        graph: WorkflowGraph,
        type_key: str,
        position: Optional[Dict[str, float]] = None,
        configuration: Optional[Dict[str, Any]] = None,
    ) -> WorkflowNode:
        """Instantiate a registered node type and append it to the graph.

        Raises:
            UnknownNodeType: If ``type_key`` is not in the registry.
        """
        definition = self._registry.get(type_key)
        if definition is None:
            raise UnknownNodeType(type_key)

        node = WorkflowNode(
            id=new_node_id(),
            type=type_key,
            name=definition.name,
            description=definition.description,
            icon=definition.icon,
            category=definition.category.value,
            inputs=generate_ports(definition.input_schema, INPUT),
            outputs=generate_ports(definition.output_schema, OUTPUT),
            configuration=dict(configuration or {}),
            position=dict(position or {"x": 0, "y": 0}),
            metadata={"created_at": utc_now()},
        )
        graph.nodes.append(node)
        graph.touch()
        logger.debug(f"Node added to {graph.id}: {node.id} ({type_key})")
        return node

    def remove_node(self, graph: WorkflowGraph, node_id: str) -> None:
        """Remove a node and every connection touching it. Idempotent."""
        before = len(graph.nodes)
        graph.nodes = [n for n in graph.nodes if n.id != node_id]
        graph.connections = [
            c for c in graph.connections
            if c.source_node_id != node_id and c.target_node_id != node_id
        ]
        if len(graph.nodes) != before:
            graph.touch()
            logger.debug(f"Node removed from {graph.id}: {node_id}")

    def update_node(
        self,
        graph: WorkflowGraph,
        node_id: str,
        updates: Dict[str, Any],
    ) -> WorkflowNode:
        """Merge ``updates`` into an existing node.

        ``id``, ``type`` and the port lists are not changed through
        this path and are ignored if present.

        Raises:
            NodeNotFound: If ``node_id`` is not in the graph.
        """
        for index, node in enumerate(graph.nodes):
            if node.id == node_id:
                break
        else:
            raise NodeNotFound(node_id)

        ignored = _IMMUTABLE_NODE_FIELDS.intersection(updates)
        if ignored:
            logger.warning(
                f"update_node({node_id}) ignores fields {sorted(ignored)}; "
                f"remove and re-add the node to change them"
            )

        merged = node.model_dump()
        merged.update({k: v for k, v in updates.items() if k not in _IMMUTABLE_NODE_FIELDS})
        updated = WorkflowNode.model_validate(merged)
        graph.nodes[index] = updated
        graph.touch()
        return updated

    # ========================================================================
    # Connections
    # ========================================================================

    def create_connection(
        self,
        graph: WorkflowGraph,
        source_node_id: str,
        source_port_id: str,
        target_node_id: str,
        target_port_id: str,
    ) -> WorkflowConnection:
        """Validate and insert a connection.

        Raises:
            InvalidConnection: With the first validation error; the
                graph is left unchanged.
        """
        result = self._validator.validate_connection(
            graph, source_node_id, source_port_id, target_node_id, target_port_id,
        )
        if not result.valid:
            raise InvalidConnection(result.errors[0])

        connection = WorkflowConnection(
            source_node_id=source_node_id,
            source_port_id=source_port_id,
            target_node_id=target_node_id,
            target_port_id=target_port_id,
            metadata={"created_at": utc_now()},
        )
        graph.connections.append(connection)
        graph.touch()
        return connection

    def remove_connection(self, graph: WorkflowGraph, connection_id: str) -> None:
        """Remove a connection by id. Idempotent."""
        before = len(graph.connections)
        graph.connections = [c for c in graph.connections if c.id != connection_id]
        if len(graph.connections) != before:
            graph.touch()
