"""
Execution Logger — structured per-run event log.

Records node enter/exit/error events for one workflow execution in
memory and mirrors each of them to the module logger. Logging failures
never interrupt the run.
"""

from __future__ import annotations

from datetime import datetime, timezone
from logging import getLogger
from typing import Any, Dict, List, Optional

logger = getLogger(__name__)


class ExecutionLogger:
    """Collects the event trail of a single execution."""

    def __init__(self, execution_id: str, workflow_id: Optional[str] = None) -> None:
        self.execution_id = execution_id
        self.workflow_id = workflow_id
        self._events: List[Dict[str, Any]] = []

    @property
    def events(self) -> List[Dict[str, Any]]:
        return list(self._events)

    def _record(self, event: str, level: str = "info", **fields: Any) -> None:
        entry = {
            "event": event,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **fields,
        }
        self._events.append(entry)
        try:
            detail = " ".join(f"{k}={v}" for k, v in fields.items() if v is not None)
            getattr(logger, level)(f"[{self.execution_id}] {event} {detail}".rstrip())
        except Exception:
            pass  # a broken handler must not fail the run

    # ── Execution ──

    def log_execution_start(self, entry_node_id: str, planned_nodes: int) -> None:
        self._record(
            "execution_start",
            workflow_id=self.workflow_id,
            entry_node_id=entry_node_id,
            planned_nodes=planned_nodes,
        )

    def log_execution_complete(
        self,
        success: bool,
        duration_ms: int,
        error: Optional[str] = None,
    ) -> None:
        self._record(
            "execution_complete",
            level="info" if success else "warning",
            success=success,
            duration_ms=duration_ms,
            error=error,
        )

    # ── Nodes ──

    def log_node_enter(self, node_id: str, node_type: str) -> None:
        self._record("node_enter", level="debug", node_id=node_id, node_type=node_type)

    def log_node_exit(
        self,
        node_id: str,
        node_type: str,
        duration_ms: int,
        output_preview: Optional[str] = None,
    ) -> None:
        self._record(
            "node_exit",
            level="debug",
            node_id=node_id,
            node_type=node_type,
            duration_ms=duration_ms,
            output_preview=output_preview,
        )

    def log_node_error(
        self,
        node_id: str,
        node_type: str,
        error_message: str,
        error_type: str,
        duration_ms: int,
    ) -> None:
        self._record(
            "node_error",
            level="error",
            node_id=node_id,
            node_type=node_type,
            error=error_message[:500],
            error_type=error_type,
            duration_ms=duration_ms,
        )

    def log_node_skipped(self, node_id: str, reason: str) -> None:
        self._record("node_skipped", level="debug", node_id=node_id, reason=reason)
