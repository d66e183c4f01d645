"""
Workflow Run State — the LangGraph state threaded through one execution.

``node_results`` is merged across steps; each node contributes its own
entry. ``executed`` accumulates node ids in run order. ``error`` and
``failed_node`` are written once, by the node that fails; every later
node sees them and skips itself.
"""

import operator
from typing import Annotated, Any, Dict, List, Optional, TypedDict


def merge_node_results(
    left: Optional[Dict[str, Any]],
    right: Optional[Dict[str, Any]],
) -> Dict[str, Any]:
    merged = dict(left or {})
    merged.update(right or {})
    return merged


class WorkflowRunState(TypedDict):
    node_results: Annotated[Dict[str, Any], merge_node_results]
    executed: Annotated[List[str], operator.add]
    error: Optional[str]
    failed_node: Optional[str]


def make_initial_run_state() -> WorkflowRunState:
    return {
        "node_results": {},
        "executed": [],
        "error": None,
        "failed_node": None,
    }
