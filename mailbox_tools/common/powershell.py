"""PowerShell helpers shared by the MailboxTools CLIs."""

from __future__ import annotations
import json
import logging
import subprocess
from typing import Any, Optional

from mailbox_tools.common.env import env

LOG = logging.getLogger("mailbox_tools.powershell")


class PowerShellError(RuntimeError):
    """A PowerShell command exited non-zero (or could not be started)."""

    def __init__(self, message: str, command: str = ""):
        super().__init__(message)
        self.command = command


def ps_quote(value: str) -> str:
    """Quote *value* as a single-quoted PowerShell string literal."""
    return "'" + value.replace("'", "''") + "'"


def run_ps(cmd: str, shell: Optional[str] = None) -> str:
    """Invoke a PowerShell command and capture stdout (raise on error)."""
    exe = shell or env("DELEGATEOPS_PWSH", "pwsh")
    full = "$ErrorActionPreference='Stop'; $PSStyle.OutputRendering='PlainText'; " + cmd
    LOG.debug("Executing: %s", cmd)
    try:
        proc = subprocess.run([
            exe,
            "-NoLogo",
            "-NoProfile",
            "-Command",
            full,
        ], capture_output=True, text=True)
    except FileNotFoundError as exc:
        raise PowerShellError(f"PowerShell executable '{exe}' not found", cmd) from exc
    if proc.returncode != 0:
        raise PowerShellError(proc.stderr.strip() or proc.stdout.strip(), cmd)
    return proc.stdout.strip()


def parse_json(output: str) -> Any:
    """Decode ``ConvertTo-Json`` output; blank output is ``None``."""
    if not output:
        return None
    try:
        return json.loads(output)
    except json.JSONDecodeError as exc:
        raise PowerShellError(f"Unexpected PowerShell output: {output[:200]}") from exc
