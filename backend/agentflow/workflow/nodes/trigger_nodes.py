"""
Trigger Nodes — workflow entry points.

Each trigger normalizes the incoming payload into the shape its output
ports describe and publishes the key values as context variables.
"""

from __future__ import annotations

from datetime import datetime, timezone
from logging import getLogger
from typing import Any, Dict

from agentflow.workflow.nodes.base import ExecutionContext, NodeOutput
from agentflow.workflow.workflow_model import WorkflowNode

logger = getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# ============================================================================
# Message Trigger
# ============================================================================


class MessageTriggerExecutor:
    """Inbound chat message from any channel."""

    async def execute(
        self,
        node: WorkflowNode,
        input_data: Dict[str, Any],
        context: ExecutionContext,
    ) -> NodeOutput:
        data = input_data or {}
        message = {
            "message": data.get("message") or data.get("text") or "",
            "sender": data.get("sender") or data.get("from") or context.user_id or "unknown",
            "channel": data.get("channel") or context.channel or "default",
            "timestamp": data.get("timestamp") or _now(),
            "metadata": data.get("metadata") or {},
        }

        context.set_variable("trigger_message", message["message"])
        context.set_variable("trigger_sender", message["sender"])
        context.set_variable("trigger_channel", message["channel"])

        return NodeOutput(output=message, metadata={"node_type": node.type})


# ============================================================================
# Webhook Trigger
# ============================================================================


class WebhookTriggerExecutor:
    async def execute(
        self,
        node: WorkflowNode,
        input_data: Dict[str, Any],
        context: ExecutionContext,
    ) -> NodeOutput:
        data = input_data or {}
        webhook = {
            "payload": data.get("body", data.get("payload", {})),
            "headers": data.get("headers", {}),
            "method": data.get("method", node.configuration.get("method", "POST")),
            "url": data.get("url", node.configuration.get("webhook_url", "")),
            "timestamp": _now(),
        }

        context.set_variable("webhook_payload", webhook["payload"])
        context.set_variable("webhook_headers", webhook["headers"])
        context.set_variable("webhook_method", webhook["method"])

        return NodeOutput(output=webhook, metadata={"node_type": node.type})


# ============================================================================
# Schedule Trigger
# ============================================================================


class ScheduleTriggerExecutor:
    async def execute(
        self,
        node: WorkflowNode,
        input_data: Dict[str, Any],
        context: ExecutionContext,
    ) -> NodeOutput:
        data = input_data or {}
        now = _now()
        schedule = {
            "scheduled_time": data.get("scheduled_time", now),
            "actual_time": now,
            "schedule_type": node.configuration.get("schedule_type", "once"),
            "timezone": node.configuration.get("timezone", "UTC"),
        }

        context.set_variable("scheduled_time", schedule["scheduled_time"])
        context.set_variable("actual_time", schedule["actual_time"])

        return NodeOutput(output=schedule, metadata={"node_type": node.type})
