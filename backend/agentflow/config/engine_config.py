"""
Engine Configuration.

Catalog location, workflow storage directory, execution limits and
logging options. Every field can be overridden from the environment.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from agentflow.config.env_utils import read_env_defaults


@dataclass
class EngineConfig:
    """Workflow engine settings."""

    catalog_path: str = ""  # empty = bundled catalog
    storage_dir: str = "./workflows"
    validate_before_execute: bool = True
    node_timeout_seconds: float = 30.0  # 0 disables the per-node timeout
    record_events: bool = True
    log_level: str = "INFO"
    log_format: str = "text"  # text | json

    _ENV_MAP = {
        "catalog_path": "AGENTFLOW_CATALOG_PATH",
        "storage_dir": "AGENTFLOW_STORAGE_DIR",
        "validate_before_execute": "AGENTFLOW_VALIDATE_BEFORE_EXECUTE",
        "node_timeout_seconds": "AGENTFLOW_NODE_TIMEOUT",
        "record_events": "AGENTFLOW_RECORD_EVENTS",
        "log_level": "AGENTFLOW_LOG_LEVEL",
        "log_format": "AGENTFLOW_LOG_FORMAT",
    }

    @classmethod
    def get_default_instance(
        cls, environ: Optional[Mapping[str, str]] = None,
    ) -> "EngineConfig":
        defaults = read_env_defaults(cls._ENV_MAP, cls.__dataclass_fields__, environ)
        return cls(**defaults)

    @property
    def node_timeout(self) -> Optional[float]:
        return self.node_timeout_seconds if self.node_timeout_seconds > 0 else None
