"""Exchange Online and Microsoft Graph clients used by DelegateOps.

Both clients drive the official PowerShell modules (ExchangeOnlineManagement
and Microsoft.Graph.Users) through ``pwsh``. Every call runs in a fresh
process, so each command carries its own import/connect prelude; the modules
cache the admin token between processes.
"""

from __future__ import annotations
import logging
import re
from typing import Callable, Optional

from mailbox_tools.common.powershell import PowerShellError, parse_json, ps_quote, run_ps
from mailbox_tools.delegateops.errors import MailboxNotFoundError
from mailbox_tools.delegateops.models import DirectoryUser, Mailbox

LOG = logging.getLogger("delegateops")

Runner = Callable[[str], str]

_MAILBOX_MISSING = re.compile(r"couldn't be found|could not be found|ManagementObjectNotFound", re.IGNORECASE)
_USER_MISSING = re.compile(r"Request_ResourceNotFound|does not exist", re.IGNORECASE)


def _ps_bool(value: bool) -> str:
    return "$true" if value else "$false"


class ExchangeClient:
    """Mailbox lookups and permission grants via Exchange Online PowerShell."""

    def __init__(self, admin_upn: Optional[str] = None, organization: Optional[str] = None, runner: Runner = run_ps):
        self.admin_upn = admin_upn
        self.organization = organization
        self._run = runner

    def _prelude(self) -> str:
        connect = "Connect-ExchangeOnline -ShowBanner:$false"
        if self.admin_upn:
            connect += f" -UserPrincipalName {ps_quote(self.admin_upn)}"
        if self.organization:
            connect += f" -Organization {ps_quote(self.organization)}"
        return (
            "Import-Module ExchangeOnlineManagement; "
            f"if (-not (Get-ConnectionInformation)) {{ {connect} }}; "
        )

    def run(self, cmd: str) -> str:
        return self._run(self._prelude() + cmd)

    def connect(self) -> None:
        """Open (or confirm) the Exchange Online session."""
        out = self.run("(Get-ConnectionInformation | Select-Object -First 1).State")
        LOG.info("Exchange Online connection state: %s", out or "unknown")

    def resolve_mailbox(self, email: str) -> Mailbox:
        cmd = (
            f"Get-EXOMailbox -Identity {ps_quote(email)} "
            "| Select-Object DisplayName,PrimarySmtpAddress,UserPrincipalName "
            "| ConvertTo-Json -Compress"
        )
        try:
            data = parse_json(self.run(cmd))
        except PowerShellError as exc:
            if _MAILBOX_MISSING.search(str(exc)):
                raise MailboxNotFoundError(email) from exc
            raise
        if not data:
            raise MailboxNotFoundError(email, "no data returned")
        if isinstance(data, list):
            data = data[0]
        return Mailbox(
            identity=data.get("UserPrincipalName") or email,
            display_name=data.get("DisplayName") or "",
            primary_smtp=data.get("PrimarySmtpAddress") or email,
        )

    def grant_full_access(self, mailbox: Mailbox, delegate: str, auto_mapping: bool = True) -> str:
        cmd = (
            f"Add-MailboxPermission -Identity {ps_quote(mailbox.identity)} "
            f"-User {ps_quote(delegate)} -AccessRights FullAccess -InheritanceType All "
            f"-AutoMapping:{_ps_bool(auto_mapping)} -Confirm:$false"
        )
        return self.run(cmd)

    def grant_send_as(self, mailbox: Mailbox, delegate: str) -> str:
        cmd = (
            f"Add-RecipientPermission -Identity {ps_quote(mailbox.identity)} "
            f"-Trustee {ps_quote(delegate)} -AccessRights SendAs -Confirm:$false"
        )
        return self.run(cmd)


class DirectoryClient:
    """Account lookups via the Microsoft Graph PowerShell SDK."""

    SCOPES = ("User.Read.All",)

    def __init__(self, tenant: Optional[str] = None, runner: Runner = run_ps):
        self.tenant = tenant
        self._run = runner

    def _prelude(self) -> str:
        scopes = ",".join(ps_quote(s) for s in self.SCOPES)
        connect = f"Connect-MgGraph -Scopes {scopes} -NoWelcome"
        if self.tenant:
            connect += f" -TenantId {ps_quote(self.tenant)}"
        return (
            "Import-Module Microsoft.Graph.Users; "
            f"if (-not (Get-MgContext)) {{ {connect} }}; "
        )

    def run(self, cmd: str) -> str:
        return self._run(self._prelude() + cmd)

    def connect(self) -> None:
        out = self.run("(Get-MgContext).Account")
        LOG.info("Microsoft Graph connected as %s", out or "unknown")

    def lookup_user(self, upn: str) -> Optional[DirectoryUser]:
        """Return the account, or ``None`` when the directory has no such user."""
        cmd = (
            f"Get-MgUser -UserId {ps_quote(upn)} -Property UserPrincipalName,DisplayName,AccountEnabled "
            "| Select-Object UserPrincipalName,DisplayName,AccountEnabled "
            "| ConvertTo-Json -Compress"
        )
        try:
            data = parse_json(self.run(cmd))
        except PowerShellError as exc:
            if _USER_MISSING.search(str(exc)):
                return None
            raise
        if not data:
            return None
        if isinstance(data, list):
            data = data[0]
        return DirectoryUser(
            upn=data.get("UserPrincipalName") or upn,
            account_enabled=bool(data.get("AccountEnabled")),
            display_name=data.get("DisplayName") or "",
        )
