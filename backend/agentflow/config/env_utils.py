"""
Environment helpers for config dataclasses.
"""

from __future__ import annotations

import os
from dataclasses import MISSING, Field
from logging import getLogger
from typing import Any, Dict, Mapping, Optional

logger = getLogger(__name__)

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def coerce_env_value(raw: str, target: Any) -> Any:
    """Convert an environment string to the type of ``target``.

    Raises:
        ValueError: If the value cannot be converted.
    """
    if isinstance(target, bool):
        value = raw.strip().lower()
        if value in _TRUE:
            return True
        if value in _FALSE:
            return False
        raise ValueError(f"Not a boolean: {raw!r}")
    if isinstance(target, int):
        return int(raw)
    if isinstance(target, float):
        return float(raw)
    return raw


def read_env_defaults(
    env_map: Mapping[str, str],
    fields: Mapping[str, Field],
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """Read dataclass field values from environment variables.

    Only variables that are set are returned; invalid values are
    logged and fall back to the field default.
    """
    environ = os.environ if environ is None else environ
    values: Dict[str, Any] = {}
    for field_name, env_name in env_map.items():
        raw = environ.get(env_name)
        if raw is None:
            continue
        f = fields.get(field_name)
        default = f.default if f is not None and f.default is not MISSING else ""
        try:
            values[field_name] = coerce_env_value(raw, default)
        except ValueError as e:
            logger.warning(f"Ignoring {env_name}={raw!r}: {e}")
    return values
