"""Request-scoped logging context.

Fields pushed here (request_id in particular) are merged into every log
record emitted inside the scope. Storage is a ContextVar, so concurrent
requests served by different threads or tasks never see each other's
fields.
"""

from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Any, Dict, Iterator

_LOG_CONTEXT: ContextVar[Dict[str, Any]] = ContextVar("browse_stats_log_context", default={})


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the fields active in the current scope."""
    return dict(_LOG_CONTEXT.get())


def push_log_context(**fields: Any) -> Token:
    """Add fields to the current context.

    Returns:
        Token to pass to pop_log_context() to restore the previous fields
    """
    return _LOG_CONTEXT.set({**_LOG_CONTEXT.get(), **fields})


def pop_log_context(token: Token) -> None:
    """Restore the fields that were active before push_log_context()."""
    _LOG_CONTEXT.reset(token)


def clear_log_context() -> None:
    """Drop every context field (used by tests)."""
    _LOG_CONTEXT.set({})


@contextmanager
def log_context(**fields: Any) -> Iterator[Dict[str, Any]]:
    """Scope fields to a block, restoring the previous context on exit.

    Example:
        >>> with log_context(request_id="5f1c2a9e0b7d"):
        ...     logger.info("Facet aggregation started")  # carries request_id
    """
    token = push_log_context(**fields)
    try:
        yield get_log_context()
    finally:
        pop_log_context(token)
