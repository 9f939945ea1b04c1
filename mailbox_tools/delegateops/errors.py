"""Exceptions raised by DelegateOps."""

from __future__ import annotations
from typing import Sequence


class DelegateOpsError(Exception):
    """Base class for fatal DelegateOps conditions."""


class MailboxNotFoundError(DelegateOpsError):
    def __init__(self, identity: str, detail: str = ""):
        msg = f"Mailbox '{identity}' not found"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)
        self.identity = identity


class MissingColumnsError(DelegateOpsError):
    def __init__(self, missing: Sequence[str], found: Sequence[str]):
        super().__init__(
            f"CSV missing required column(s): {', '.join(missing)} "
            f"(found: {', '.join(found) or 'none'})"
        )
        self.missing = list(missing)
        self.found = list(found)


class ConnectionAbortedByUser(DelegateOpsError):
    """The operator declined to retry a failed connection."""


class ConnectionAttemptsExhausted(DelegateOpsError):
    """Connection still failing after the configured number of attempts."""


class InvalidCsvError(DelegateOpsError):
    """The delegate CSV could not be decoded or parsed."""

    def __init__(self, path: str, detail: str):
        super().__init__(f"Cannot read CSV {path}: {detail}")
        self.path = path
