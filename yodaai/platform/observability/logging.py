"""Logging setup for the chat client.

Application modules log through the standard library (`logging.getLogger`);
structlog renders every record, ours and third-party alike, either as JSON
lines or as a console view. Records emitted while a chat thread is being
answered carry that thread's ID.

Logs always go to stderr, keeping stdout for the conversation itself.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TextIO

import structlog

# Chat thread being answered; set by the session for the duration of a reply
thread_id_ctx: ContextVar[str | None] = ContextVar("thread_id", default=None)

# Libraries that log every request at INFO; capped at WARNING
NOISY_LOGGERS = ("httpx", "httpcore", "mcp")


@contextmanager
def bound_thread(thread_id: str) -> Iterator[None]:
    """Tag log records emitted inside the block with `thread_id`."""
    token = thread_id_ctx.set(thread_id)
    try:
        yield
    finally:
        thread_id_ctx.reset(token)


def add_thread_id(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    """Copy the active chat thread ID onto the event, when there is one."""
    if (thread_id := thread_id_ctx.get()) is not None:
        event_dict.setdefault("thread_id", thread_id)
    return event_dict


def _pre_chain() -> list[structlog.types.Processor]:
    # Applied to structlog events and to foreign stdlib records alike
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        add_thread_id,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(json_output: bool, stream: TextIO) -> structlog.types.Processor:
    if json_output:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=stream.isatty())


def configure_logging(log_level: str, json_output: bool = False, stream: TextIO | None = None) -> None:
    """Route all logging through a single structlog-formatted handler.

    Replaces any handlers already on the root logger, so calling it twice
    does not duplicate output.

    Args:
        log_level: Root level name, e.g. "INFO" or "DEBUG"
        json_output: Emit JSON lines instead of the console view
        stream: Destination, stderr unless given
    """
    stream = stream or sys.stderr
    pre_chain = _pre_chain()

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(json_output, stream),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(log_level.upper())

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
