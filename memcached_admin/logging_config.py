# ─────────────────────────────────────────────────────────────────────────────
# Logging Configuration — structlog over the stdlib handler chain
# ─────────────────────────────────────────────────────────────────────────────
# Two consumers: the HTTP service (JSON lines on stdout) and the CLI (console
# renderer on stderr, so log lines never land inside a rendered table).
# Records from plain stdlib loggers (uvicorn, pymemcache) go through the same
# pre-chain, so every line carries level, logger and timestamp.
# ─────────────────────────────────────────────────────────────────────────────


import logging
import sys
from typing import TextIO

import structlog

SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
]


def resolve_level(log_level: str) -> int:
    """Level name → stdlib level number; unknown names raise ValueError."""
    levels = logging.getLevelNamesMapping()
    try:
        return levels[log_level.upper()]
    except KeyError:
        raise ValueError(f"Unknown log level {log_level!r}") from None


def build_formatter(json_output: bool) -> structlog.stdlib.ProcessorFormatter:
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    )
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=SHARED_PROCESSORS,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = True,
    stream: TextIO | None = None,
) -> None:
    """Route structlog and stdlib logging through one handler on ``stream``.

    Safe to call again: the root handler is replaced, not stacked.
    """
    structlog.configure(
        processors=[
            *SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(build_formatter(json_output))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(resolve_level(log_level))
