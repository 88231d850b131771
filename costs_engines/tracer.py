"""
costs_engines.tracer -- ``@traced_engine`` decorator.

Each decorated calculator call logs one ``COSTS_ENGINE_TRACE`` record with
the engine name and version, a fingerprint of the keyword inputs named in
``fingerprint_fields`` and the call duration.  Two calls over the same
month inputs produce the same fingerprint, which makes a preview and the
close that followed it easy to match up in the logs.

The decorator only reads keyword arguments and never touches the result.
"""

from __future__ import annotations

import functools
import hashlib
import time
from collections.abc import Callable, Mapping
from dataclasses import fields, is_dataclass
from typing import Any

from costs_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")

FINGERPRINT_LENGTH = 16


def _canonical(value: Any) -> str:
    if value is None:
        return "null"
    if is_dataclass(value) and not isinstance(value, type):
        return _canonical({f.name: getattr(value, f.name) for f in fields(value)})
    if isinstance(value, Mapping):
        pairs = sorted((str(k), _canonical(v)) for k, v in value.items())
        return "{" + ",".join(f"{k}:{v}" for k, v in pairs) + "}"
    if isinstance(value, (set, frozenset)):
        return "{" + ",".join(sorted(_canonical(v) for v in value)) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_canonical(v) for v in value) + "]"
    return str(value)


def input_fingerprint(names: tuple[str, ...], kwargs: Mapping[str, Any]) -> str:
    """SHA-256 over the canonical form of the named kwargs, truncated."""
    canonical = "|".join(f"{name}={_canonical(kwargs.get(name))}" for name in names)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            started = time.perf_counter()
            result = func(*args, **kwargs)
            _logger.info(
                "COSTS_ENGINE_TRACE",
                extra={
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "function": func.__qualname__,
                    "input_fingerprint": (
                        input_fingerprint(fingerprint_fields, kwargs) if fingerprint_fields else ""
                    ),
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )
            return result

        return wrapper

    return decorator
