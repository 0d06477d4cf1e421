"""structlog configuration for subrules.

Two output modes, both on stderr so rule payloads on stdout stay pipeable:
- Human (default): colored console renderer
- JSON (--log-json): structured JSON lines

Library modules log through stdlib ``logging.getLogger(__name__)``; the
ProcessorFormatter gives those records the same structured rendering.
"""

from __future__ import annotations

import logging
import sys

import structlog

LOGGER_NAME = "subrules"


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
) -> None:
    """Configure structlog processors and output routing.

    Args:
        verbose: Enable DEBUG-level output for ``subrules``. When False,
            only WARNING+ (which still includes version-regression skips).
        log_json: Use JSON renderer instead of console renderer.
    """
    level = logging.DEBUG if verbose else logging.WARNING

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger(LOGGER_NAME).setLevel(level)


def bind_subscriber(subscriber: str, handler: str | None = None) -> None:
    """Attach the subscriber (and handler) to every log line in this context."""
    structlog.contextvars.clear_contextvars()
    fields = {"subscriber": subscriber}
    if handler is not None:
        fields["handler"] = handler
    structlog.contextvars.bind_contextvars(**fields)
