"""Observability infrastructure module.

This module provides logging and error tracking:
- Structured logging with chat thread IDs
- Bugsnag error reporting
"""

from yodaai.platform.observability.errors import initialize_bugsnag
from yodaai.platform.observability.logging import (
    bound_thread,
    configure_logging,
    thread_id_ctx,
)

__all__ = [
    "bound_thread",
    "configure_logging",
    "initialize_bugsnag",
    "thread_id_ctx",
]
