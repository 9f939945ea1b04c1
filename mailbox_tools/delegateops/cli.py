"""DelegateOps — bulk mailbox delegate permissions
================================================
Part of *MailboxTools* suite

Grants FullAccess / SendAs on one target mailbox to every delegate listed in a
CSV file, optionally skipping accounts that are disabled (or missing) in the
directory.

Flow
----
1. Connect to Exchange Online (retry until success or the operator gives up).
2. Prompt for the target mailbox and resolve it.
3. Load the CSV (`DelegateEmail`, `AccessRights` = FullAccess | SendAs).
4. Optionally connect to Microsoft Graph to check `AccountEnabled`.
5. Grant per row; problems go to the warning log and the run continues.

Prerequisites
-------------
* PowerShell 7 with the **ExchangeOnlineManagement** module, plus
  **Microsoft.Graph.Users** when excluding disabled users.
* Defaults may be set in the environment or a `.env` file:
  `DELEGATEOPS_ADMIN_UPN`, `DELEGATEOPS_TENANT`, `DELEGATEOPS_LOG`,
  `DELEGATEOPS_PWSH`.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import NoReturn, Optional
import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from mailbox_tools.common.env import env
from mailbox_tools.common.powershell import PowerShellError
from mailbox_tools.delegateops.csv_input import load_delegates
from mailbox_tools.delegateops.errors import DelegateOpsError, MailboxNotFoundError
from mailbox_tools.delegateops.models import RowOutcome, RowResult, RunConfig, RunSummary
from mailbox_tools.delegateops.processor import process_delegates
from mailbox_tools.delegateops.retry import DEFAULT_MAX_ATTEMPTS, connect_with_retry
from mailbox_tools.delegateops.services import DirectoryClient, ExchangeClient
from mailbox_tools.delegateops.warnlog import WarningLog

APP_VERSION = "0.1.0"
app = typer.Typer(add_completion=False, help="DelegateOps - bulk mailbox delegate permissions")
LOG = logging.getLogger("delegateops")
console = Console()

DEFAULT_LOG = "delegateops.log"

_STYLES = {
    RowOutcome.GRANTED: "green",
    RowOutcome.DRY_RUN: "cyan",
    RowOutcome.SKIPPED_NOT_FOUND: "yellow",
    RowOutcome.SKIPPED_DISABLED: "yellow",
    RowOutcome.INVALID: "red",
    RowOutcome.FAILED: "red",
}

# ----------------------------- helpers --------------------------------------


def fail(message: str) -> NoReturn:
    typer.secho(message, fg=typer.colors.RED)
    raise typer.Exit(1)


def ask_retry(message: str) -> bool:
    return typer.confirm(message, default=True)


def prompt_blank_ok(text: str) -> str:
    return typer.prompt(text, default="", show_default=False).strip()


def echo_result(result: RowResult) -> None:
    row = result.row
    if result.ok:
        typer.secho(f"✓ {row.delegate_email} ({row.access_rights})", fg=typer.colors.GREEN)
    else:
        typer.secho(f"✗ {row.delegate_email or '<blank>'} — {result.message}", fg=typer.colors.RED)


def summary_table(summary: RunSummary, title: str) -> Table:
    table = Table(title=Text(title))
    for col in ("Line", "Delegate", "AccessRights", "Outcome"):
        table.add_column(col)
    for res in summary.results:
        style = _STYLES.get(res.outcome, "")
        table.add_row(
            str(res.row.line),
            Text(res.row.delegate_email),
            Text(res.row.access_rights),
            Text(res.outcome.value, style=style),
        )
    return table


# ----------------------------- CLI commands ---------------------------------


@app.command()
def grant(
    mailbox: Optional[str] = typer.Option(None, "--mailbox", "-m", help="Target mailbox (UPN/primary SMTP). Prompted if omitted."),
    csv_path: Optional[str] = typer.Option(None, "--csv", "-c", help="CSV with DelegateEmail, AccessRights columns. Prompted if omitted."),
    exclude_disabled: Optional[bool] = typer.Option(None, "--exclude-disabled/--include-disabled", help="Skip delegates disabled or missing in the directory. Prompted if omitted."),
    log_file: Optional[Path] = typer.Option(None, "--log", help="Append-only warning log (default $DELEGATEOPS_LOG or delegateops.log)."),
    auto_mapping: bool = typer.Option(True, "--auto-mapping/--no-auto-mapping", help="Outlook auto-mapping for FullAccess grants."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Validate and look up everything but grant nothing."),
    max_attempts: int = typer.Option(DEFAULT_MAX_ATTEMPTS, "--max-attempts", min=0, help="Connection attempts before giving up (0 = until declined)."),
    admin: Optional[str] = typer.Option(None, "--admin", help="Admin UPN for Connect-ExchangeOnline (default $DELEGATEOPS_ADMIN_UPN)."),
    tenant: Optional[str] = typer.Option(None, "--tenant", help="Tenant domain / ID (default $DELEGATEOPS_TENANT)."),
):
    """Grant delegate permissions on a mailbox from a CSV list."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    tenant = tenant or env("DELEGATEOPS_TENANT")
    exchange = ExchangeClient(admin_upn=admin or env("DELEGATEOPS_ADMIN_UPN"), organization=tenant)

    typer.echo("Connecting to Exchange Online …")
    try:
        connect_with_retry(exchange.connect, "Exchange Online", ask_retry, max_attempts)
    except DelegateOpsError as exc:
        fail(str(exc))

    email = (mailbox or "").strip() or prompt_blank_ok("Target mailbox email")
    if not email:
        fail("No mailbox email given. Exiting.")
    try:
        target = exchange.resolve_mailbox(email)
    except (MailboxNotFoundError, PowerShellError) as exc:
        fail(f"Could not resolve mailbox {email}: {exc}")
    typer.echo(f"Target mailbox: {target.display_name or target} <{target}>")

    path_text = (csv_path or "").strip() or prompt_blank_ok("Path to delegate CSV")
    if not path_text:
        fail("No CSV path given. Exiting.")
    path = Path(path_text.strip('"'))
    if not path.is_file():
        fail(f"CSV file not found: {path}")
    try:
        rows = load_delegates(path)
    except DelegateOpsError as exc:
        fail(str(exc))
    typer.echo(f"Loaded {len(rows)} row(s) from {path}")

    if exclude_disabled is None:
        exclude_disabled = typer.confirm("Exclude disabled users?", default=False)
    config = RunConfig(
        exclude_disabled_users=exclude_disabled,
        log_path=log_file or Path(env("DELEGATEOPS_LOG", DEFAULT_LOG)),
        auto_mapping=auto_mapping,
        dry_run=dry_run,
    )

    directory = None
    if config.exclude_disabled_users:
        directory = DirectoryClient(tenant=tenant)
        typer.echo("Connecting to Microsoft Graph …")
        try:
            connect_with_retry(directory.connect, "Microsoft Graph", ask_retry, max_attempts)
        except DelegateOpsError as exc:
            fail(str(exc))

    warnings = WarningLog(config.log_path)
    summary = process_delegates(rows, target, exchange, directory, config, warnings, on_result=echo_result)

    console.print(summary_table(summary, f"Delegates on {target}"))
    typer.echo(
        f"Done. Granted: {summary.granted}, Warnings: {summary.warnings}."
        + (f" Log → {config.log_path}" if summary.warnings else "")
    )


@app.command()
def check(
    csv_path: Path = typer.Argument(..., exists=True, readable=True, dir_okay=False, help="Delegate CSV to validate."),
):
    """Validate a delegate CSV without connecting to anything."""
    try:
        rows = load_delegates(csv_path)
    except DelegateOpsError as exc:
        fail(str(exc))
    table = Table(title=Text(f"{csv_path} ({len(rows)} rows)"))
    for col in ("Line", "DelegateEmail", "AccessRights", "Status"):
        table.add_column(col)
    bad = 0
    for row in rows:
        ok = bool(row.delegate_email) and row.access_right is not None
        bad += not ok
        table.add_row(
            str(row.line),
            Text(row.delegate_email),
            Text(row.access_rights),
            "[green]ok[/]" if ok else "[red]invalid[/]",
        )
    console.print(table)
    typer.echo(f"{len(rows) - bad} valid, {bad} invalid.")


@app.command()
def version():
    """Print DelegateOps version."""
    typer.echo(APP_VERSION)


def main() -> None:  # entry-point for `python -m mailbox_tools.delegateops`
    app()


if __name__ == "__main__":
    main()
