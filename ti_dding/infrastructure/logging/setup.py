"""structlog configuration for the ti-dding CLI.

The processor chain is installed once at import, so module-level loggers can
be created before any settings are loaded. Rendering happens in the stdlib
handler that ``configure_logging`` installs on stderr, which keeps stdout
free for command output and lets each command pick the level and renderer
from its settings.

Usage:
    from ti_dding.infrastructure.logging import configure_logging, get_module_logger

    configure_logging(log_level=settings.app.log_level, debug=settings.app.debug)

    logger = get_module_logger()
    logger.info("event_name", key="value")
"""

import inspect
import logging
import sys
from typing import Optional

import structlog
from structlog.stdlib import BoundLogger

from ti_dding import __version__
from ti_dding.infrastructure.logging.formatters import (
    add_app_info,
    mask_sensitive_data,
    truncate_large_values,
)

SHARED_PROCESSORS = [
    # command name and run id
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    add_app_info("ti-dding", __version__),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.CallsiteParameterAdder(
        parameters=[
            structlog.processors.CallsiteParameter.FILENAME,
            structlog.processors.CallsiteParameter.LINENO,
            structlog.processors.CallsiteParameter.FUNC_NAME,
        ]
    ),
    mask_sensitive_data(),
    truncate_large_values(),
    structlog.processors.StackInfoRenderer(),
]


def _is_test_environment() -> bool:
    return "pytest" in sys.modules


structlog.configure(
    processors=[
        *SHARED_PROCESSORS,
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ],
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)


def _build_formatter(debug: bool) -> structlog.stdlib.ProcessorFormatter:
    if debug:
        # ConsoleRenderer pretty-prints exc_info itself
        renderers = [structlog.dev.ConsoleRenderer()]
    else:
        renderers = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *renderers,
        ],
    )


def configure_logging(
    log_level: Optional[str] = None,
    debug: bool = False,
) -> BoundLogger:
    """Route log events to stderr at ``log_level``.

    JSON lines by default, human-readable console output when ``debug`` is
    set. Under pytest every record is dropped instead.

    Args:
        log_level: Level name (DEBUG, INFO, WARNING, ...). Defaults to INFO.
        debug: Render with ConsoleRenderer instead of JSONRenderer.

    Returns:
        A logger for the caller's convenience.
    """
    root = logging.getLogger()

    if _is_test_environment():
        root.setLevel(logging.CRITICAL + 1)
        return structlog.stdlib.get_logger()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_build_formatter(debug))
    root.handlers = [handler]
    root.setLevel(getattr(logging, (log_level or "INFO").upper(), logging.INFO))

    # urllib3 logs full request URLs, access_token included, at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    return structlog.stdlib.get_logger()


# Until a command loads its settings only warnings reach stderr.
logger: BoundLogger = configure_logging(log_level="WARNING")


def get_logger(name: Optional[str] = None) -> BoundLogger:
    """Logger bound to ``name``, or to the calling module when omitted."""
    if name is None:
        name = _caller_module_name()
    return logger.bind(logger_name=name)


def get_module_logger() -> BoundLogger:
    """Logger bound to the calling module.

    In ``ti_dding/modules/groups/service.py`` the bound context is
    ``component="service"`` and ``module_path="ti_dding.modules.groups.service"``.
    """
    module_name = _caller_module_name()
    return logger.bind(
        component=module_name.rsplit(".", 1)[-1], module_path=module_name
    )


def _caller_module_name() -> str:
    # two frames up: the get_*logger function, then its caller
    frame = inspect.currentframe()
    caller = frame.f_back.f_back if frame and frame.f_back else None
    module = inspect.getmodule(caller) if caller else None
    return module.__name__ if module else "unknown"
