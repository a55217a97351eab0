"""Utilities for tracing reconciliations in debug logs."""

import contextvars
from contextlib import contextmanager
import logging
from time import perf_counter
from typing import Generator


_LOGGER = logging.getLogger(__name__)

# No public API
__all__: list[str] = []


trace: contextvars.ContextVar[tuple[str, ...]] = contextvars.ContextVar(
    "trace", default=()
)


def current_trace() -> str:
    """Return the label of the innermost traced block, if any."""
    return " > ".join(trace.get())


@contextmanager
def trace_context(name: str) -> Generator[str, None, None]:
    """Log entry, exit and duration of a block nested under enclosing blocks."""
    token = trace.set(trace.get() + (name,))
    label = current_trace()
    t1 = perf_counter()
    _LOGGER.debug("[Trace] > %s", label)
    try:
        yield label
    except BaseException:
        _LOGGER.debug("[Trace] ! %s (%0.2fs)", label, perf_counter() - t1)
        raise
    else:
        _LOGGER.debug("[Trace] < %s (%0.2fs)", label, perf_counter() - t1)
    finally:
        trace.reset(token)
