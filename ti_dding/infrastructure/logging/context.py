"""Command context binding for structured logging.

Every CLI invocation runs exactly one command; binding the command name and
a run id lets the log lines of one run be grouped together.

Usage:
    from ti_dding.infrastructure.logging import bind_command_context

    with bind_command_context(command="create", csv_file="groups.csv"):
        logger.info("command_started")

Dependencies:
    - structlog.contextvars
"""

import uuid
from contextlib import contextmanager
from typing import Optional, Any, Generator
import structlog


@contextmanager
def bind_command_context(
    command: str,
    run_id: Optional[str] = None,
    **extra_context: Any,
) -> Generator[None, None, None]:
    """Bind command-scoped context to all logs within the context manager.

    Args:
        command: CLI command name (e.g., "create", "add-member").
        run_id: Unique invocation identifier. Auto-generated if not provided.
        **extra_context: Additional key-value pairs to include in logs.

    Yields:
        None - context is bound to structlog's context vars.
    """
    context: dict[str, Any] = {
        "command": command,
        "run_id": run_id or str(uuid.uuid4()),
    }
    context.update(extra_context)

    structlog.contextvars.bind_contextvars(**context)
    try:
        yield
    finally:
        structlog.contextvars.unbind_contextvars(*context.keys())

