"""Call instrumentation for stores and providers."""

from __future__ import annotations

import logging
import time
from functools import wraps
from typing import Any, Callable, Dict, ParamSpec, TypeVar

from mirror_app.logging_config import ensure_correlation_id, get_logger, log_event
from tools.errors import ConnectivityError

LOGGER = get_logger(__name__)
P = ParamSpec("P")
R = TypeVar("R")

MAX_PREVIEW_KEYS = 6


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


def _call_fields(tool_name: str, args: tuple, kwargs: Dict[str, Any]) -> Dict[str, Any]:
    """Loggable summary of a call: the collaborator class and a bounded kwargs preview."""

    fields: Dict[str, Any] = {"tool": tool_name}
    if args and not isinstance(args[0], (str, int, float)):
        fields["component"] = type(args[0]).__name__
    preview = dict(list(kwargs.items())[:MAX_PREVIEW_KEYS])
    if len(kwargs) > MAX_PREVIEW_KEYS:
        preview["truncated"] = True
    if preview:
        fields["call_kwargs"] = preview
    return fields


def instrument_tool(tool_name: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Log start, completion and failure of a collaborator call with its duration.

    A :class:`ConnectivityError` is an expected degradation and logs at
    WARNING; anything else logs at ERROR. Both are re-raised unchanged.
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            correlation_id = ensure_correlation_id()
            fields = _call_fields(tool_name, args, kwargs)
            log_event(LOGGER, logging.DEBUG, "tool_call_started", correlation_id=correlation_id, **fields)
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except ConnectivityError as exc:
                log_event(
                    LOGGER,
                    logging.WARNING,
                    "tool_call_unavailable",
                    correlation_id=correlation_id,
                    duration_ms=_elapsed_ms(start),
                    operation=exc.operation,
                    **fields,
                )
                raise
            except Exception as exc:
                log_event(
                    LOGGER,
                    logging.ERROR,
                    "tool_call_failed",
                    correlation_id=correlation_id,
                    duration_ms=_elapsed_ms(start),
                    error_type=type(exc).__name__,
                    **fields,
                )
                raise
            log_event(
                LOGGER,
                logging.INFO,
                "tool_call_completed",
                correlation_id=correlation_id,
                duration_ms=_elapsed_ms(start),
                **fields,
            )
            return result

        return wrapper

    return decorator


__all__ = ["instrument_tool"]
