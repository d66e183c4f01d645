"""
Logic Nodes — pure comparisons that do not call any external service.
"""

from __future__ import annotations

import re
from logging import getLogger
from typing import Any, Callable, Dict

from agentflow.workflow.exceptions import NodeExecutionError
from agentflow.workflow.nodes.base import ExecutionContext, NodeOutput
from agentflow.workflow.workflow_model import WorkflowNode

logger = getLogger(__name__)


# ============================================================================
# Condition
# ============================================================================


def _as_number(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Value is not numeric: {value!r}")


def _is_empty(value: Any) -> bool:
    return value is None or str(value).strip() == "" or value == [] or value == {}


def evaluate_condition(
    value: Any,
    operator: str,
    compare_value: Any,
    case_sensitive: bool = True,
) -> bool:
    """Evaluate ``value <operator> compare_value``.

    Raises:
        ValueError: On an unknown operator, a non-list operand for the
            list operators, an invalid regex, or non-numeric values for
            the ordering operators.
    """

    def _norm(v: Any) -> str:
        s = "" if v is None else str(v)
        return s if case_sensitive else s.lower()

    val = _norm(value)
    comp = _norm(compare_value)

    string_ops: Dict[str, Callable[[], bool]] = {
        "equals": lambda: val == comp,
        "not_equals": lambda: val != comp,
        "contains": lambda: comp in val,
        "not_contains": lambda: comp not in val,
        "starts_with": lambda: val.startswith(comp),
        "ends_with": lambda: val.endswith(comp),
    }
    if operator in string_ops:
        return string_ops[operator]()

    if operator == "greater_than":
        return _as_number(value) > _as_number(compare_value)
    if operator == "less_than":
        return _as_number(value) < _as_number(compare_value)
    if operator == "greater_equal":
        return _as_number(value) >= _as_number(compare_value)
    if operator == "less_equal":
        return _as_number(value) <= _as_number(compare_value)

    if operator == "is_empty":
        return _is_empty(value)
    if operator == "is_not_empty":
        return not _is_empty(value)

    if operator == "regex_match":
        flags = 0 if case_sensitive else re.IGNORECASE
        try:
            return re.search(str(compare_value), "" if value is None else str(value), flags) is not None
        except re.error:
            raise ValueError(f"Invalid regex pattern: {compare_value}")

    if operator in ("in_list", "not_in_list"):
        if not isinstance(compare_value, (list, tuple)):
            raise ValueError(f'Compare value must be a list for "{operator}" operator')
        found = any(_norm(item) == val for item in compare_value)
        return found if operator == "in_list" else not found

    raise ValueError(f"Unknown operator: {operator}")


class ConditionExecutor:
    """Compare the ``value`` input against the configured operand."""

    async def execute(
        self,
        node: WorkflowNode,
        input_data: Dict[str, Any],
        context: ExecutionContext,
    ) -> NodeOutput:
        config = node.configuration
        operator = config.get("operator", "equals")
        compare_value = config.get("compare_value")
        case_sensitive = config.get("case_sensitive", True) is not False
        value = (input_data or {}).get("value")

        try:
            result = evaluate_condition(value, operator, compare_value, case_sensitive)
        except ValueError as e:
            raise NodeExecutionError(node.id, node.type, str(e)) from e

        context.set_variable("condition_result", result)
        context.set_variable("condition_value", value)

        return NodeOutput(
            output={
                "result": result,
                "value": value,
                "operator": operator,
                "compare_value": compare_value,
            },
            metadata={"node_type": node.type},
        )
