"""Per-row grant loop.

Best effort: each row is independent, failures are logged to the warning log
and the loop moves on. Grants already applied are never rolled back.
"""

from __future__ import annotations
import logging
from typing import Callable, Iterable, Optional

from mailbox_tools.common.powershell import PowerShellError
from mailbox_tools.delegateops.models import (
    AccessRight,
    DelegateRow,
    Mailbox,
    RowOutcome,
    RowResult,
    RunConfig,
    RunSummary,
)
from mailbox_tools.delegateops.services import DirectoryClient, ExchangeClient
from mailbox_tools.delegateops.warnlog import WarningLog

LOG = logging.getLogger("delegateops")


def _check_enabled(row: DelegateRow, directory: DirectoryClient, warnings: WarningLog) -> Optional[RowResult]:
    """Return a skip result for unknown/disabled accounts, ``None`` to proceed."""
    email = row.delegate_email
    try:
        user = directory.lookup_user(email)
    except PowerShellError as exc:
        msg = f"Could not look up {email} (line {row.line}): {exc}. Skipping."
        warnings.warn(msg)
        return RowResult(row, RowOutcome.FAILED, msg)
    if user is None:
        msg = f"User {email} not found in directory (line {row.line}). Skipping."
        warnings.warn(msg)
        return RowResult(row, RowOutcome.SKIPPED_NOT_FOUND, msg)
    if not user.account_enabled:
        msg = f"User {email} is disabled (line {row.line}). Skipping."
        warnings.warn(msg)
        return RowResult(row, RowOutcome.SKIPPED_DISABLED, msg)
    return None


def process_row(
    row: DelegateRow,
    mailbox: Mailbox,
    exchange: ExchangeClient,
    directory: Optional[DirectoryClient],
    config: RunConfig,
    warnings: WarningLog,
) -> RowResult:
    email = row.delegate_email
    if not email:
        msg = f"Missing DelegateEmail on line {row.line}. Skipping."
        warnings.warn(msg)
        return RowResult(row, RowOutcome.INVALID, msg)

    if config.exclude_disabled_users:
        if directory is None:
            raise ValueError("exclude_disabled_users requires a directory client")
        skipped = _check_enabled(row, directory, warnings)
        if skipped is not None:
            return skipped

    right = row.access_right
    if right is None:
        msg = f"Invalid AccessRights value '{row.access_rights}' for {email} (line {row.line}). Skipping."
        warnings.warn(msg)
        return RowResult(row, RowOutcome.INVALID, msg)

    if config.dry_run:
        LOG.info("[dry-run] Would grant %s to %s on %s", right.value, email, mailbox)
        return RowResult(row, RowOutcome.DRY_RUN, f"would grant {right.value}")

    grant: Callable[[], str]
    if right is AccessRight.FULL_ACCESS:
        grant = lambda: exchange.grant_full_access(mailbox, email, config.auto_mapping)  # noqa: E731
    else:
        grant = lambda: exchange.grant_send_as(mailbox, email)  # noqa: E731

    try:
        grant()
    except PowerShellError as exc:
        msg = f"Failed to grant {right.value} to {email} on {mailbox}: {exc}"
        warnings.warn(msg)
        return RowResult(row, RowOutcome.FAILED, msg)
    LOG.info("Granted %s to %s on %s", right.value, email, mailbox)
    return RowResult(row, RowOutcome.GRANTED, f"granted {right.value}")


def process_delegates(
    rows: Iterable[DelegateRow],
    mailbox: Mailbox,
    exchange: ExchangeClient,
    directory: Optional[DirectoryClient],
    config: RunConfig,
    warnings: WarningLog,
    on_result: Optional[Callable[[RowResult], None]] = None,
) -> RunSummary:
    """Process *rows* in input order and return the per-row results."""
    summary = RunSummary()
    for row in rows:
        result = summary.add(process_row(row, mailbox, exchange, directory, config, warnings))
        if on_result is not None:
            on_result(result)
    return summary
