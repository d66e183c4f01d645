"""
Pre-built Workflow Templates.

Factory functions returning ready-made ``WorkflowGraph`` objects with
``is_template=True``. Users clone them via
``WorkflowBuilder.create_workflow(..., template=...)``.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional

from agentflow.workflow.nodes.registry import NodeRegistry
from agentflow.workflow.workflow_builder import WorkflowBuilder
from agentflow.workflow.workflow_model import WorkflowGraph


# ============================================================================
# Customer Support Template
# ============================================================================


def create_customer_support_template(
    registry: Optional[NodeRegistry] = None,
) -> WorkflowGraph:
    """Message in, AI reply out.

    Topology::
        message_trigger ─message→ ai_response ─response→ send_message
    """
    if registry is None:
        registry = NodeRegistry()
        registry.load_default_catalog()

    builder = WorkflowBuilder(registry)
    graph = builder.create_workflow(
        "Customer Support",
        "Answers incoming customer messages with an AI-generated reply.",
    )
    graph.metadata.is_template = True
    graph.metadata.tags = ["customer-support", "starter"]

    ids: Dict[str, str] = {}

    def _add(ntype: str, key: str, x: float, y: float, cfg=None):
        ids[key] = builder.add_node(graph, ntype, {"x": x, "y": y}, cfg).id

    def _edge(src: str, out_key: str, tgt: str, in_key: str):
        builder.create_connection(
            graph, ids[src], f"output_{out_key}", ids[tgt], f"input_{in_key}",
        )

    _add("message_trigger", "trigger", 100, 100)
    _add("ai_response",     "reply",   100, 250,
         {"model": "gpt-4o-mini", "temperature": 0.3})
    _add("send_message",    "send",    100, 400)

    _edge("trigger", "message",  "reply", "message")
    _edge("reply",   "response", "send",  "message")

    return graph


TEMPLATES: Dict[str, Callable[..., WorkflowGraph]] = {
    "customer_support": create_customer_support_template,
}


def get_template(name: str, registry: Optional[NodeRegistry] = None) -> Optional[WorkflowGraph]:
    factory = TEMPLATES.get(name)
    return factory(registry) if factory is not None else None
