"""Bugsnag error reporting integration.

This module provides initialization for Bugsnag error tracking,
reporting ERROR-level log entries from the chat client.
"""

import logging

import bugsnag
from bugsnag.handlers import BugsnagHandler


def initialize_bugsnag(api_key: str | None, release_stage: str) -> bool:
    """Initialize Bugsnag error reporting.

    Configures Bugsnag with the provided API key and attaches a handler
    to the root logger to automatically report ERROR-level log entries.

    Args:
        api_key: Bugsnag project API key, None when reporting is not configured
        release_stage: Environment identifier ("production", "development", "local")

    Returns:
        True if reporting was enabled.

    Note:
        No-op when release_stage is "local" or no API key is set.
    """
    if release_stage == "local" or not api_key:
        return False
    logger = logging.getLogger()
    bugsnag.configure(
        api_key=api_key,
        release_stage=release_stage,
        auto_notify=True,
    )
    handler = BugsnagHandler()
    handler.setLevel(logging.ERROR)
    logger.addHandler(handler)
    return True
