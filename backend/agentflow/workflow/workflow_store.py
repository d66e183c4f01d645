"""
Workflow Store — persistence for workflow graphs.

``WorkflowRepository`` is the load/save contract the engine depends
on. ``WorkflowStore`` keeps one JSON file per graph under a directory;
``InMemoryWorkflowStore`` keeps deep copies in a dict (tests, embedding).

Both bump ``WorkflowGraph.version`` only when a save changes the graph
structure, and refresh ``updated_at`` on every save.
"""

from __future__ import annotations

import json
import threading
from logging import getLogger
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Union, runtime_checkable

from agentflow.workflow.workflow_model import WorkflowGraph

logger = getLogger(__name__)


@runtime_checkable
class WorkflowRepository(Protocol):
    def load(self, workflow_id: str) -> Optional[WorkflowGraph]:
        ...

    def save(self, workflow: WorkflowGraph) -> None:
        ...


def _apply_version(workflow: WorkflowGraph, previous: Optional[WorkflowGraph]) -> None:
    if previous is not None:
        if previous.structure() != workflow.structure():
            workflow.version = previous.version + 1
        else:
            workflow.version = previous.version
    workflow.touch()


class WorkflowStore:
    """Persist and load WorkflowGraph objects as JSON files."""

    def __init__(self, storage_dir: Union[str, Path, None] = None) -> None:
        self._dir = Path(storage_dir or "./workflows")
        self._dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        logger.info(f"WorkflowStore initialized at {self._dir}")

    # ── CRUD ──

    def save(self, workflow: WorkflowGraph) -> None:
        """Save (create or update) a workflow graph."""
        with self._lock:
            _apply_version(workflow, self.load(workflow.id))
            path = self._path_for(workflow.id)
            path.write_text(
                workflow.model_dump_json(indent=2),
                encoding="utf-8",
            )
        logger.info(
            f"Workflow saved: {workflow.name} ({workflow.id}) v{workflow.version}"
        )

    def load(self, workflow_id: str) -> Optional[WorkflowGraph]:
        """Load a single workflow by ID."""
        path = self._path_for(workflow_id)
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return WorkflowGraph.model_validate(data)
        except Exception as e:
            logger.error(f"Failed to load workflow {workflow_id}: {e}")
            return None

    def delete(self, workflow_id: str) -> bool:
        """Delete a workflow graph."""
        path = self._path_for(workflow_id)
        if path.exists():
            path.unlink()
            logger.info(f"Workflow deleted: {workflow_id}")
            return True
        return False

    def list_all(self) -> List[WorkflowGraph]:
        """List all saved workflow graphs."""
        workflows: List[WorkflowGraph] = []
        for path in sorted(self._dir.glob("*.json")):
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
                workflows.append(WorkflowGraph.model_validate(data))
            except Exception as e:
                logger.warning(f"Skipping malformed workflow file {path.name}: {e}")
        return workflows

    def list_templates(self) -> List[WorkflowGraph]:
        """List only template workflows."""
        return [w for w in self.list_all() if w.metadata.is_template]

    def list_user_workflows(self, user_id: Optional[str] = None) -> List[WorkflowGraph]:
        """List non-template workflows, optionally for one owner."""
        return [
            w for w in self.list_all()
            if not w.metadata.is_template
            and (user_id is None or w.metadata.created_by == user_id)
        ]

    def exists(self, workflow_id: str) -> bool:
        return self._path_for(workflow_id).exists()

    # ── Internals ──

    def _path_for(self, workflow_id: str) -> Path:
        # Sanitize ID for filesystem
        safe_id = "".join(c for c in workflow_id if c.isalnum() or c in "-_")
        return self._dir / f"{safe_id}.json"


class InMemoryWorkflowStore:
    """Dict-backed repository. Stores and returns deep copies."""

    def __init__(self) -> None:
        self._workflows: Dict[str, WorkflowGraph] = {}
        self._lock = threading.Lock()

    def save(self, workflow: WorkflowGraph) -> None:
        with self._lock:
            _apply_version(workflow, self._workflows.get(workflow.id))
            self._workflows[workflow.id] = workflow.model_copy(deep=True)

    def load(self, workflow_id: str) -> Optional[WorkflowGraph]:
        stored = self._workflows.get(workflow_id)
        return stored.model_copy(deep=True) if stored is not None else None

    def delete(self, workflow_id: str) -> bool:
        with self._lock:
            return self._workflows.pop(workflow_id, None) is not None

    def exists(self, workflow_id: str) -> bool:
        return workflow_id in self._workflows

    def list_all(self) -> List[WorkflowGraph]:
        return [w.model_copy(deep=True) for w in self._workflows.values()]
