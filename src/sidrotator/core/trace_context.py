"""Per-request trace id shared between the middleware and the log filter."""

import contextvars

trace_id_context: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "trace_id", default=None
)


def current_trace_id() -> str:
    """Return the trace id of the request being served, or "N/A" outside one."""
    return trace_id_context.get() or "N/A"
