"""
Port generation — derive concrete ports from a node type's schema.
"""

from __future__ import annotations

from typing import Any, List, Mapping

from agentflow.workflow.workflow_model import Port

INPUT = "input"
OUTPUT = "output"


def generate_ports(schema: Any, direction: str) -> List[Port]:
    """Build the port list for one direction of a node type.

    Port ids are ``<direction>_<fieldKey>``. Entries whose value is not
    a mapping are treated as bare field declarations. A schema that is
    not a mapping yields no ports.
    """
    if not isinstance(schema, Mapping):
        return []

    ports: List[Port] = []
    for key, entry in schema.items():
        if not isinstance(entry, Mapping):
            entry = {}
        ports.append(Port(
            id=f"{direction}_{key}",
            name=str(key),
            data_type=str(entry.get("type") or "any"),
            required=bool(entry.get("required", False)),
            description=str(entry.get("description") or f"{key} {direction}"),
        ))
    return ports


def port_key(port_id: str, direction: str) -> str:
    """Strip the ``<direction>_`` prefix from a generated port id."""
    prefix = f"{direction}_"
    return port_id[len(prefix):] if port_id.startswith(prefix) else port_id
