"""
Workflow Executor — run a WorkflowGraph by dispatching node executors.

The first trigger node (in node order) is the entry point. Every node
reachable from it along connections is placed in topological order and
compiled into a LangGraph ``StateGraph`` chain; each graph node calls
the ``NodeExecutor`` registered for its type key with inputs assembled
from upstream outputs.

Execution never raises past ``execute``: every failure is reported as
an ``ExecutionResult`` with ``success=False``.
"""

from __future__ import annotations

import asyncio
import inspect
import re
import time
import uuid
from datetime import datetime, timezone
from logging import getLogger
from typing import Any, Dict, List, Mapping, Optional

from langgraph.graph import END, START, StateGraph
from langgraph.graph.state import CompiledStateGraph
from pydantic import BaseModel, Field

from agentflow.config import EngineConfig
from agentflow.logging import ExecutionLogger
from agentflow.workflow.exceptions import (
    CircularDependency,
    ExecutorNotFound,
    NodeTimeoutError,
    NoTriggerNode,
    WorkflowNotFound,
    WorkflowValidationFailed,
)
from agentflow.workflow.nodes.base import ExecutionContext, NodeOutput
from agentflow.workflow.nodes.ports import INPUT, OUTPUT, port_key
from agentflow.workflow.nodes.registry import ExecutorRegistry, FunctionExecutor, NodeRegistry
from agentflow.workflow.workflow_model import (
    WorkflowConnection,
    WorkflowGraph,
    WorkflowNode,
)
from agentflow.workflow.workflow_state import WorkflowRunState, make_initial_run_state
from agentflow.workflow.workflow_store import WorkflowRepository
from agentflow.workflow.workflow_validator import WorkflowValidator

logger = getLogger(__name__)

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9_\-]")


class ExecutionResult(BaseModel):
    """Outcome of one ``WorkflowExecutor.execute`` call."""

    success: bool
    result: Any = None
    error: Optional[str] = None
    execution_time_ms: int = 0
    node_results: Dict[str, Any] = Field(default_factory=dict)
    metadata: Dict[str, Any] = Field(default_factory=dict)


def new_execution_id() -> str:
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    return f"exec_{stamp}_{uuid.uuid4().hex[:8]}"


class WorkflowExecutor:
    """Execute workflow graphs against a table of node executors.

    Holds no per-run state, so one instance can serve concurrent
    executions over different graphs.

    Usage::

        executor = WorkflowExecutor(registry, executors)
        result = await executor.execute(graph, ExecutionContext(input_data={...}))
    """

    def __init__(
        self,
        registry: NodeRegistry,
        executors: ExecutorRegistry,
        config: Optional[EngineConfig] = None,
        validator: Optional[WorkflowValidator] = None,
    ) -> None:
        self._registry = registry
        self._executors = executors
        self._config = config or EngineConfig()
        self._validator = validator or WorkflowValidator(registry)

    # ========================================================================
    # Execution
    # ========================================================================

    async def execute(
        self,
        graph: WorkflowGraph,
        context: Optional[ExecutionContext] = None,
    ) -> ExecutionResult:
        """Run ``graph`` with ``context.input_data`` as the trigger payload."""
        start = time.time()
        context = context or ExecutionContext()
        context.execution_id = new_execution_id()
        context.workflow_id = context.workflow_id or graph.id
        exec_logger = ExecutionLogger(context.execution_id, graph.id)
        context.logger = exec_logger

        state: WorkflowRunState = make_initial_run_state()
        metadata: Dict[str, Any] = {
            "workflow_id": graph.id,
            "execution_id": context.execution_id,
        }

        try:
            entry = self._select_entry_node(graph)
            metadata["entry_node_id"] = entry.id

            if self._config.validate_before_execute:
                report = self._validator.validate(graph)
                if not report.valid:
                    raise WorkflowValidationFailed(report)

            order = self.plan(graph, entry)
            exec_logger.log_execution_start(entry.id, len(order))

            compiled = self.compile(graph, order, entry, context)
            state = await compiled.ainvoke(
                state,
                config={"recursion_limit": len(order) + 10},
            )
            if state.get("error"):
                metadata["failed_node_id"] = state.get("failed_node")
                raise _NodeFailure(state["error"])

        except Exception as e:
            duration_ms = int((time.time() - start) * 1000)
            error = str(e)
            if not isinstance(e, _NodeFailure):
                logger.warning(
                    f"[{context.execution_id}] Workflow '{graph.name}' failed: {error}"
                )
            exec_logger.log_execution_complete(False, duration_ms, error)
            return ExecutionResult(
                success=False,
                error=error,
                execution_time_ms=duration_ms,
                node_results=dict(state.get("node_results") or {}),
                metadata=self._finish_metadata(metadata, state, exec_logger),
            )

        duration_ms = int((time.time() - start) * 1000)
        executed: List[str] = state.get("executed") or []
        node_results = dict(state.get("node_results") or {})
        final = node_results[executed[-1]]["output"] if executed else None

        exec_logger.log_execution_complete(True, duration_ms)
        logger.info(
            f"[{context.execution_id}] Workflow '{graph.name}' completed: "
            f"{len(executed)} nodes in {duration_ms}ms"
        )
        return ExecutionResult(
            success=True,
            result=final,
            execution_time_ms=duration_ms,
            node_results=node_results,
            metadata=self._finish_metadata(metadata, state, exec_logger),
        )

    async def execute_by_id(
        self,
        repository: WorkflowRepository,
        workflow_id: str,
        context: Optional[ExecutionContext] = None,
    ) -> ExecutionResult:
        """Load a workflow through ``repository`` and execute it."""
        try:
            graph = repository.load(workflow_id)
        except Exception as e:
            logger.error(f"Failed to load workflow {workflow_id}: {e}")
            graph = None
        if graph is None:
            return ExecutionResult(
                success=False,
                error=str(WorkflowNotFound(workflow_id)),
                metadata={"workflow_id": workflow_id},
            )
        return await self.execute(graph, context)

    # ========================================================================
    # Planning & compilation
    # ========================================================================

    def plan(self, graph: WorkflowGraph, entry: WorkflowNode) -> List[str]:
        """Topological order of the nodes reachable from ``entry``.

        Raises:
            CircularDependency: If the reachable part contains a cycle.
        """
        reachable = self._validator.reachable_from(graph, entry.id)
        order = self._validator.topological_order(graph, entry.id)
        if len(order) < len(reachable):
            raise CircularDependency(reachable.difference(order))
        return order

    def compile(
        self,
        graph: WorkflowGraph,
        order: List[str],
        entry: WorkflowNode,
        context: ExecutionContext,
    ) -> CompiledStateGraph:
        """Chain the planned nodes into a LangGraph ``StateGraph``."""
        graph_builder = StateGraph(WorkflowRunState)

        names: List[str] = []
        for index, node_id in enumerate(order):
            node = graph.get_node(node_id)
            name = f"{index:03d}_{_UNSAFE_NAME_CHARS.sub('_', node_id)}"
            graph_builder.add_node(
                name,
                self._make_node_function(graph, node, node.id == entry.id, context),
            )
            names.append(name)

        graph_builder.add_edge(START, names[0])
        for prev, nxt in zip(names, names[1:]):
            graph_builder.add_edge(prev, nxt)
        graph_builder.add_edge(names[-1], END)

        logger.debug(
            f"[{context.execution_id}] Workflow '{graph.name}' compiled: "
            f"{len(names)} steps"
        )
        return graph_builder.compile()

    # ========================================================================
    # Internal helpers
    # ========================================================================

    @staticmethod
    def _select_entry_node(graph: WorkflowGraph) -> WorkflowNode:
        triggers = graph.trigger_nodes()
        if not triggers:
            raise NoTriggerNode(graph.id)
        # First trigger in node order; the others are not run.
        return triggers[0]

    def _make_node_function(
        self,
        graph: WorkflowGraph,
        node: WorkflowNode,
        is_entry: bool,
        context: ExecutionContext,
    ):
        """Create the LangGraph node function for one workflow node."""
        incoming = graph.connections_to(node.id)
        assemble = self._assemble_input
        dispatch = self._dispatch

        async def _node_fn(state: WorkflowRunState) -> Dict[str, Any]:
            exec_logger = context.logger

            if state.get("error"):
                exec_logger.log_node_skipped(node.id, "previous node failed")
                return {}

            results = state.get("node_results") or {}
            if is_entry:
                input_data = dict(context.input_data or {})
            else:
                live = [
                    c for c in incoming
                    if c.source_node_id in results
                    and "error" not in results[c.source_node_id]
                ]
                if not live:
                    exec_logger.log_node_skipped(node.id, "no upstream output")
                    return {}
                input_data = assemble(node, live, results)

            exec_logger.log_node_enter(node.id, node.type)
            started = time.time()
            try:
                context.cancel_token.raise_if_cancelled(node.id)
                output = await dispatch(node, input_data, context)
            except Exception as e:
                duration_ms = int((time.time() - started) * 1000)
                exec_logger.log_node_error(
                    node.id, node.type, str(e), type(e).__name__, duration_ms,
                )
                if _continues_on_error(node):
                    logger.info(
                        f"[{context.execution_id}] Continuing despite error in "
                        f"'{node.name or node.id}'"
                    )
                    return {
                        "node_results": {
                            node.id: {"output": None, "metadata": {}, "error": str(e)},
                        },
                    }
                return {"error": str(e), "failed_node": node.id}

            duration_ms = int((time.time() - started) * 1000)
            exec_logger.log_node_exit(
                node.id, node.type, duration_ms, _output_preview(output.output),
            )
            return {
                "node_results": {node.id: output.model_dump()},
                "executed": [node.id],
            }

        _node_fn.__name__ = f"node_{node.id}_{node.type}"
        _node_fn.__qualname__ = _node_fn.__name__
        return _node_fn

    async def _dispatch(
        self,
        node: WorkflowNode,
        input_data: Dict[str, Any],
        context: ExecutionContext,
    ) -> NodeOutput:
        """Call the executor registered for ``node.type``.

        Raises:
            ExecutorNotFound: If no executor is registered.
            NodeTimeoutError: If the executor exceeds the node timeout.
        """
        executor = self._executors.get(node.type)
        if executor is None:
            raise ExecutorNotFound(node.type)

        timeout = self._config.node_timeout
        if _is_async_executor(executor):
            call = executor.execute(node, input_data, context)
        else:
            # Blocking executors run in a worker thread; on timeout the
            # thread is abandoned, not interrupted.
            call = asyncio.to_thread(executor.execute, node, input_data, context)

        try:
            result = await asyncio.wait_for(call, timeout=timeout)
            if inspect.isawaitable(result):
                result = await asyncio.wait_for(result, timeout=timeout)
        except asyncio.TimeoutError:
            raise NodeTimeoutError(node.id, node.type, timeout)
        return NodeOutput.coerce(result)

    @staticmethod
    def _assemble_input(
        node: WorkflowNode,
        connections: List[WorkflowConnection],
        results: Mapping[str, Any],
    ) -> Dict[str, Any]:
        """Build a node's input from its upstream outputs.

        ``output_<key>`` selects ``output[key]`` when the upstream
        output is a mapping holding that key, otherwise the whole
        output. The value is stored under the target input port's
        name. Later connections win on the same input port.
        """
        input_data: Dict[str, Any] = {}
        for conn in connections:
            upstream = results[conn.source_node_id].get("output")
            key = port_key(conn.source_port_id, OUTPUT)
            if isinstance(upstream, Mapping) and key in upstream:
                value = upstream[key]
            else:
                value = upstream

            port = node.get_input(conn.target_port_id)
            name = port.name if port else port_key(conn.target_port_id, INPUT)
            input_data[name] = value
        return input_data

    def _finish_metadata(
        self,
        metadata: Dict[str, Any],
        state: Mapping[str, Any],
        exec_logger: ExecutionLogger,
    ) -> Dict[str, Any]:
        metadata["nodes_executed"] = list(state.get("executed") or [])
        if self._config.record_events:
            metadata["events"] = exec_logger.events
        return metadata


class _NodeFailure(Exception):
    """Internal marker: a node failed and was already logged."""


def _is_async_executor(executor: Any) -> bool:
    if isinstance(executor, FunctionExecutor):
        return inspect.iscoroutinefunction(executor.fn)
    return inspect.iscoroutinefunction(executor.execute)


def _continues_on_error(node: WorkflowNode) -> bool:
    # camelCase key comes from editor exports
    flag = node.metadata.get("continue_on_error", node.metadata.get("continueOnError"))
    return bool(flag)


def _output_preview(output: Any) -> Optional[str]:
    if output is None:
        return None
    if isinstance(output, str):
        return output[:200]
    if isinstance(output, dict):
        return f"keys: {', '.join(map(str, list(output)[:10]))}"
    return str(output)[:200]
