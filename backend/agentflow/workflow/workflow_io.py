"""
Workflow Export / Import.

A workflow exports to a plain document carrying its nodes, connections,
variables, triggers and metadata. Importing a document always creates
a new graph owned by the importing user; nothing is overwritten.
"""

from __future__ import annotations

import json
import uuid
from logging import getLogger
from typing import Any, Dict, Union

from pydantic import ValidationError as PydanticValidationError

from agentflow.workflow.exceptions import WorkflowImportError
from agentflow.workflow.workflow_model import WorkflowGraph, WorkflowMetadata

logger = getLogger(__name__)

IMPORTED_SUFFIX = " (Imported)"


def export_workflow(graph: WorkflowGraph) -> Dict[str, Any]:
    """Serialize ``graph`` to a JSON-compatible document."""
    return graph.model_dump(mode="json")


def export_workflow_json(graph: WorkflowGraph) -> str:
    return graph.model_dump_json(indent=2)


def import_workflow(
    document: Union[str, bytes, Dict[str, Any]],
    user_id: str,
) -> WorkflowGraph:
    """Rebuild a graph from an exported document as a new workflow.

    The result gets a fresh id, version 1, ``created_by=user_id``, new
    timestamps and ``is_template=False``; its name is suffixed with
    `` (Imported)``. Nodes, connections, variables and triggers are
    kept as exported.

    Raises:
        WorkflowImportError: If the document is not a valid export.
    """
    if isinstance(document, (str, bytes)):
        try:
            document = json.loads(document)
        except ValueError as e:
            raise WorkflowImportError(f"Failed to import workflow: {e}") from e

    if not isinstance(document, dict):
        raise WorkflowImportError(
            "Failed to import workflow: expected a JSON object"
        )

    try:
        source = WorkflowGraph.model_validate(document)
    except PydanticValidationError as e:
        raise WorkflowImportError(f"Failed to import workflow: {e}") from e

    imported = source.model_copy(
        update={
            "id": str(uuid.uuid4()),
            "name": f"{source.name}{IMPORTED_SUFFIX}",
            "version": 1,
            "metadata": WorkflowMetadata(
                created_by=user_id,
                template_id=source.metadata.template_id,
                tags=list(source.metadata.tags),
            ),
        },
        deep=True,
    )
    logger.info(
        f"Workflow imported: {imported.name} ({imported.id}) "
        f"from {source.id} for {user_id}"
    )
    return imported
