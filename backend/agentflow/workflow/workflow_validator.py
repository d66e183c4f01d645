"""
Workflow Validator — connection-level and whole-graph checks.

Connection checks run before a connection is inserted and reject the
request as a whole. Whole-graph validation enumerates every error and
warning it finds and never raises, so the editor can show all problems
at once.
"""

from __future__ import annotations

import heapq
from collections import deque
from enum import Enum
from logging import getLogger
from typing import Any, Dict, List, Optional, Set

from pydantic import BaseModel, Field

from agentflow.workflow.nodes.registry import NodeRegistry
from agentflow.workflow.workflow_model import WorkflowGraph

logger = getLogger(__name__)


# ============================================================================
# Result models
# ============================================================================


class ErrorKind(str, Enum):
    MISSING_NODE = "missing_node"
    SELF_CONNECTION = "self_connection"
    DUPLICATE_CONNECTION = "duplicate_connection"
    CIRCULAR_DEPENDENCY = "circular_dependency"
    INVALID_CONFIGURATION = "invalid_configuration"
    DANGLING_CONNECTION = "dangling_connection"


class WarningKind(str, Enum):
    ORPHAN_NODE = "orphan_node"
    UNKNOWN_NODE_TYPE = "unknown_node_type"
    BEST_PRACTICE = "best_practice"


class ValidationError(BaseModel):
    """A blocking problem."""

    kind: ErrorKind
    message: str
    node_id: Optional[str] = None
    connection_id: Optional[str] = None
    field: Optional[str] = None
    severity: str = "error"


class ValidationWarning(BaseModel):
    """A non-blocking notice."""

    kind: WarningKind
    message: str
    node_id: Optional[str] = None


class ValidationResult(BaseModel):
    valid: bool = True
    errors: List[ValidationError] = Field(default_factory=list)
    warnings: List[ValidationWarning] = Field(default_factory=list)

    def errors_of(self, kind: ErrorKind) -> List[ValidationError]:
        return [e for e in self.errors if e.kind == kind]

    def warnings_of(self, kind: WarningKind) -> List[ValidationWarning]:
        return [w for w in self.warnings if w.kind == kind]


# ============================================================================
# Validator
# ============================================================================


# DFS marks
_UNVISITED, _IN_STACK, _DONE = 0, 1, 2


def is_empty_value(value: Any) -> bool:
    """``None``, blank strings and empty collections count as missing.

    ``0`` and ``False`` are real values.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False


class WorkflowValidator:
    """Structural and configuration checks over a ``WorkflowGraph``."""

    def __init__(self, registry: NodeRegistry) -> None:
        self._registry = registry

    # ── Connection-level ──

    def validate_connection(
        self,
        graph: WorkflowGraph,
        source_node_id: str,
        source_port_id: str,
        target_node_id: str,
        target_port_id: str,
    ) -> ValidationResult:
        """Check a prospective connection before it is inserted."""
        errors: List[ValidationError] = []

        if graph.get_node(source_node_id) is None:
            errors.append(ValidationError(
                kind=ErrorKind.MISSING_NODE,
                message=f"Source node not found: {source_node_id}",
                node_id=source_node_id,
            ))
        if graph.get_node(target_node_id) is None:
            errors.append(ValidationError(
                kind=ErrorKind.MISSING_NODE,
                message=f"Target node not found: {target_node_id}",
                node_id=target_node_id,
            ))

        if source_node_id == target_node_id:
            errors.append(ValidationError(
                kind=ErrorKind.SELF_CONNECTION,
                message="Cannot connect node to itself",
                node_id=source_node_id,
            ))

        key = (source_node_id, source_port_id, target_node_id, target_port_id)
        existing = next((c for c in graph.connections if c.key == key), None)
        if existing is not None:
            errors.append(ValidationError(
                kind=ErrorKind.DUPLICATE_CONNECTION,
                message="Connection already exists",
                connection_id=existing.id,
            ))

        return ValidationResult(valid=not errors, errors=errors)

    # ── Whole graph ──

    def validate(self, graph: WorkflowGraph) -> ValidationResult:
        """Run every whole-graph check and collect the report."""
        result = ValidationResult()

        self._check_dangling_connections(graph, result)
        self._check_orphans(graph, result)
        self._check_cycles(graph, result)
        self._check_configuration(graph, result)

        result.valid = not result.errors
        logger.debug(
            f"Workflow '{graph.name}' ({graph.id}) validated: "
            f"{len(result.errors)} errors, {len(result.warnings)} warnings"
        )
        return result

    def find_cycle_nodes(self, graph: WorkflowGraph) -> List[str]:
        """Node ids revisited while still on the DFS stack.

        Iterative three-colour traversal over source → target
        adjacency; O(nodes + connections). Roots are visited in node
        order so the report is deterministic.
        """
        adjacency = self._adjacency(graph)
        state: Dict[str, int] = {n.id: _UNVISITED for n in graph.nodes}
        flagged: List[str] = []
        seen: Set[str] = set()

        for root in graph.nodes:
            if state[root.id] != _UNVISITED:
                continue
            state[root.id] = _IN_STACK
            stack = [(root.id, iter(adjacency[root.id]))]
            while stack:
                node_id, children = stack[-1]
                child = next(children, None)
                if child is None:
                    state[node_id] = _DONE
                    stack.pop()
                    continue
                if state[child] == _IN_STACK:
                    if child not in seen:
                        seen.add(child)
                        flagged.append(child)
                elif state[child] == _UNVISITED:
                    state[child] = _IN_STACK
                    stack.append((child, iter(adjacency[child])))

        return flagged

    def reachable_from(self, graph: WorkflowGraph, start_node_id: str) -> Set[str]:
        """Ids of ``start_node_id`` and every node downstream of it."""
        adjacency = self._adjacency(graph)
        members: Set[str] = set()
        frontier = deque([start_node_id] if start_node_id in adjacency else [])
        while frontier:
            node_id = frontier.popleft()
            if node_id in members:
                continue
            members.add(node_id)
            frontier.extend(adjacency[node_id])
        return members

    def topological_order(
        self,
        graph: WorkflowGraph,
        start_node_id: Optional[str] = None,
    ) -> List[str]:
        """Kahn's ordering of the graph, ties broken by node order.

        With ``start_node_id`` only nodes reachable from it are
        ordered. Nodes on or behind a cycle never reach in-degree zero
        and are left out, so a short result means a cycle.
        """
        adjacency = self._adjacency(graph)
        index = {n.id: i for i, n in enumerate(graph.nodes)}

        members = (
            set(adjacency) if start_node_id is None
            else self.reachable_from(graph, start_node_id)
        )

        in_degree = {nid: 0 for nid in members}
        for nid in members:
            for child in adjacency[nid]:
                in_degree[child] += 1

        ready = [(index[nid], nid) for nid, deg in in_degree.items() if deg == 0]
        heapq.heapify(ready)
        order: List[str] = []
        while ready:
            _, node_id = heapq.heappop(ready)
            order.append(node_id)
            for child in adjacency[node_id]:
                in_degree[child] -= 1
                if in_degree[child] == 0:
                    heapq.heappush(ready, (index[child], child))
        return order

    # ── Checks ──

    @staticmethod
    def _check_dangling_connections(graph: WorkflowGraph, result: ValidationResult) -> None:
        node_ids = {n.id for n in graph.nodes}
        for conn in graph.connections:
            missing = [
                nid for nid in (conn.source_node_id, conn.target_node_id)
                if nid not in node_ids
            ]
            for nid in missing:
                result.errors.append(ValidationError(
                    kind=ErrorKind.DANGLING_CONNECTION,
                    message=f"Connection references unknown node: {nid}",
                    connection_id=conn.id,
                    node_id=nid,
                ))

    @staticmethod
    def _check_orphans(graph: WorkflowGraph, result: ValidationResult) -> None:
        connected: Set[str] = set()
        for conn in graph.connections:
            connected.add(conn.source_node_id)
            connected.add(conn.target_node_id)

        for node in graph.nodes:
            if node.id in connected or node.is_trigger:
                continue
            result.warnings.append(ValidationWarning(
                kind=WarningKind.ORPHAN_NODE,
                message=f'Node "{node.name or node.type}" is not connected to any other nodes',
                node_id=node.id,
            ))

    def _check_cycles(self, graph: WorkflowGraph, result: ValidationResult) -> None:
        for node_id in self.find_cycle_nodes(graph):
            result.errors.append(ValidationError(
                kind=ErrorKind.CIRCULAR_DEPENDENCY,
                message="Circular dependency detected in workflow",
                node_id=node_id,
            ))

    def _check_configuration(self, graph: WorkflowGraph, result: ValidationResult) -> None:
        for node in graph.nodes:
            definition = self._registry.get(node.type)
            if definition is None:
                result.warnings.append(ValidationWarning(
                    kind=WarningKind.UNKNOWN_NODE_TYPE,
                    message=f'Node "{node.name or node.id}" has unknown type "{node.type}"',
                    node_id=node.id,
                ))
                continue

            for key in definition.required_fields():
                if is_empty_value(node.configuration.get(key)):
                    result.errors.append(ValidationError(
                        kind=ErrorKind.INVALID_CONFIGURATION,
                        message=(
                            f'Required configuration "{key}" is missing '
                            f'for node "{node.name or node.id}"'
                        ),
                        node_id=node.id,
                        field=key,
                    ))

            if node.type == "message_trigger" and is_empty_value(node.configuration.get("channels")):
                result.warnings.append(ValidationWarning(
                    kind=WarningKind.BEST_PRACTICE,
                    message="No specific channels configured. Will accept messages from all channels.",
                    node_id=node.id,
                ))

    @staticmethod
    def _adjacency(graph: WorkflowGraph) -> Dict[str, List[str]]:
        """source → targets, ignoring connections with unknown endpoints."""
        adjacency: Dict[str, List[str]] = {n.id: [] for n in graph.nodes}
        for conn in graph.connections:
            if conn.source_node_id in adjacency and conn.target_node_id in adjacency:
                adjacency[conn.source_node_id].append(conn.target_node_id)
        return adjacency
