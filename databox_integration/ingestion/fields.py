"""Field extraction helpers shared by the upstream parsers.

Required lookups raise :class:`PayloadError`; optional lookups fall back to the
per-source default table when the upstream value is JSON null or absent.
"""

from __future__ import annotations

import math
from typing import Any, Mapping

from ..errors import PayloadError


def require(obj: Any, key: str, *, path: str, service: str = "") -> Any:
    """Return ``obj[key]``; raise when ``obj`` is not an object or lacks ``key``."""
    if not isinstance(obj, Mapping) or key not in obj:
        raise PayloadError(f"missing required field '{path}'", service, field=path)
    return obj[key]


def optional(obj: Any, key: str, defaults: Mapping[str, Any]) -> Any:
    """Return ``obj[key]`` or ``defaults[key]`` when null, absent or ``obj`` is not an object."""
    if not isinstance(obj, Mapping):
        return defaults[key]
    value = obj.get(key)
    return defaults[key] if value is None else value


def is_number(value: Any) -> bool:
    # bool is an int subclass but never a JSON number
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def as_int(value: Any, *, path: str, service: str = "") -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise PayloadError(f"field '{path}' must be an integer, got {value!r}", service, field=path)


def as_float(value: Any, *, path: str, service: str = "") -> float:
    if is_number(value) and math.isfinite(value):
        return float(value)
    raise PayloadError(f"field '{path}' must be a finite number, got {value!r}", service, field=path)


def as_str(value: Any, *, path: str, service: str = "") -> str:
    if isinstance(value, str):
        return value
    raise PayloadError(f"field '{path}' must be a string, got {value!r}", service, field=path)
