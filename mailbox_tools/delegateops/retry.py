"""Bounded, operator-abortable connection retry."""

from __future__ import annotations
import logging
from typing import Callable

from mailbox_tools.common.powershell import PowerShellError
from mailbox_tools.delegateops.errors import ConnectionAbortedByUser, ConnectionAttemptsExhausted

LOG = logging.getLogger("delegateops")

DEFAULT_MAX_ATTEMPTS = 5


def connect_with_retry(
    connect: Callable[[], None],
    service: str,
    ask_retry: Callable[[str], bool],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> int:
    """Call *connect* until it succeeds; return the number of attempts used.

    *max_attempts* of 0 means no bound: only the operator can stop the loop.
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            connect()
            return attempt
        except PowerShellError as exc:
            LOG.error("Connecting to %s failed (attempt %d): %s", service, attempt, exc)
            if max_attempts and attempt >= max_attempts:
                raise ConnectionAttemptsExhausted(
                    f"Could not connect to {service} after {attempt} attempt(s): {exc}"
                ) from exc
            if not ask_retry(f"Connecting to {service} failed: {exc}\nRetry?"):
                raise ConnectionAbortedByUser(f"Connection to {service} aborted") from exc
