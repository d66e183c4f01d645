"""
Node Registry — the catalog of node types, and the executor table.

``NodeRegistry`` holds ``NodeDefinition``s keyed by type. It is filled
once at startup from a catalog source and only read afterwards.

``ExecutorRegistry`` maps a type key to the ``NodeExecutor`` that
produces that node type's output at run time.

Both are plain objects constructed by the application and passed to
the builder, validator and executor.
"""

from __future__ import annotations

import json
from logging import getLogger
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from agentflow.workflow.nodes.base import (
    NodeCategory,
    NodeDefinition,
    NodeExecutor,
    normalize_category,
)

logger = getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).parent / "catalog" / "default_nodes.json"

CatalogSource = Union[
    str,
    Path,
    Iterable[Any],
    Dict[str, Any],
    Callable[[], Any],
]


# ============================================================================
# Node definitions
# ============================================================================


class NodeRegistry:
    """Lookup table of node type definitions."""

    def __init__(self) -> None:
        self._definitions: Dict[str, NodeDefinition] = {}

    # ── Loading ──

    def load(self, source: CatalogSource) -> int:
        """Load definitions from a catalog source.

        ``source`` may be a JSON file path, a list of definition dicts
        (or ``NodeDefinition`` objects), a mapping with a ``nodes`` key,
        or a zero-argument callable returning one of those.

        Later loads overwrite identically-keyed entries. If the source
        cannot be read the registry keeps its current content.

        Returns:
            Number of definitions loaded from this source.
        """
        try:
            entries = self._read_source(source)
        except Exception as e:
            logger.error(f"Failed to load node definitions from {source!r}: {e}")
            return 0

        loaded = 0
        for entry in entries:
            try:
                definition = (
                    entry if isinstance(entry, NodeDefinition)
                    else NodeDefinition.model_validate(entry)
                )
            except (PydanticValidationError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed node definition {entry!r}: {e}")
                continue
            self._definitions[definition.type] = definition
            loaded += 1

        logger.info(f"Loaded {loaded} node definitions ({len(self)} total)")
        return loaded

    def load_default_catalog(self) -> int:
        """Load the node types bundled with the package."""
        return self.load(DEFAULT_CATALOG_PATH)

    def register(self, definition: NodeDefinition) -> None:
        self._definitions[definition.type] = definition

    def unregister(self, type_key: str) -> bool:
        return self._definitions.pop(type_key, None) is not None

    # ── Lookup ──

    def get(self, type_key: str) -> Optional[NodeDefinition]:
        return self._definitions.get(type_key)

    def list_all(self) -> List[NodeDefinition]:
        return list(self._definitions.values())

    def list_by_category(self, category: Union[str, NodeCategory]) -> List[NodeDefinition]:
        try:
            wanted = normalize_category(category)
        except ValueError:
            return []
        return [d for d in self._definitions.values() if d.category == wanted]

    def __contains__(self, type_key: object) -> bool:
        return type_key in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)

    # ── Internals ──

    @staticmethod
    def _read_source(source: CatalogSource) -> List[Any]:
        if callable(source) and not isinstance(source, (str, Path)):
            source = source()

        if isinstance(source, (str, Path)):
            data = json.loads(Path(source).read_text(encoding="utf-8"))
        else:
            data = source

        if isinstance(data, dict):
            data = data.get("nodes", [])
        if data is None:
            return []
        return list(data)


# ============================================================================
# Executors
# ============================================================================


class FunctionExecutor:
    """Adapt a bare ``fn(node, input_data, context)`` to ``NodeExecutor``."""

    def __init__(self, fn: Callable[..., Any]) -> None:
        self.fn = fn
        self.__name__ = getattr(fn, "__name__", type(self).__name__)

    def execute(self, node, input_data, context):
        return self.fn(node, input_data, context)

    def __repr__(self) -> str:
        return f"FunctionExecutor({self.__name__})"


class ExecutorRegistry:
    """Map of node type key → ``NodeExecutor``."""

    def __init__(self) -> None:
        self._executors: Dict[str, NodeExecutor] = {}

    def register(self, type_key: str, executor: Any) -> None:
        """Register an executor object or a bare (async) function."""
        if not callable(getattr(executor, "execute", None)):
            if not callable(executor):
                raise TypeError(
                    f"Executor for '{type_key}' must define execute() or be callable"
                )
            executor = FunctionExecutor(executor)
        if type_key in self._executors:
            logger.debug(f"Replacing executor for node type '{type_key}'")
        self._executors[type_key] = executor

    def executor(self, type_key: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator form of ``register`` for functions."""

        def _decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
            self.register(type_key, fn)
            return fn

        return _decorator

    def unregister(self, type_key: str) -> bool:
        return self._executors.pop(type_key, None) is not None

    def get(self, type_key: str) -> Optional[NodeExecutor]:
        return self._executors.get(type_key)

    def registered_types(self) -> List[str]:
        return list(self._executors.keys())

    def __contains__(self, type_key: object) -> bool:
        return type_key in self._executors
