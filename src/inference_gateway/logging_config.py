"""structlog setup for applications and scripts using the client.

The library itself only calls ``structlog.get_logger``; it never configures
logging on import.  Call :func:`configure_logging` once at startup to get JSON
log lines filtered at the requested level.
"""

import structlog


def configure_logging(level: str = "INFO", *, json: bool = True) -> None:
    """Configure structlog processors and the minimum log level.

    Args:
        level: Standard level name (``"DEBUG"``, ``"INFO"``, ...).  Unknown
            names fall back to ``INFO``.
        json: Render JSON lines; ``False`` uses the human-friendly console
            renderer.
    """
    renderer = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            structlog.stdlib.NAME_TO_LEVEL.get(level.lower(), 20)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
