"""
Pytest configuration and shared fixtures for DelegateOps tests
"""

from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from mailbox_tools.delegateops.models import DirectoryUser, Mailbox
from mailbox_tools.delegateops.warnlog import WarningLog


@pytest.fixture
def mailbox():
    return Mailbox(identity="shared@x.com", display_name="Shared", primary_smtp="shared@x.com")


@pytest.fixture
def mock_exchange(mailbox):
    """Mock Exchange Online client; every grant succeeds."""
    client = MagicMock()
    client.resolve_mailbox.return_value = mailbox
    client.grant_full_access.return_value = ""
    client.grant_send_as.return_value = ""
    return client


@pytest.fixture
def mock_directory():
    """Mock directory client; every user exists and is enabled."""
    client = MagicMock()
    client.lookup_user.side_effect = lambda upn: DirectoryUser(upn=upn, account_enabled=True)
    return client


@pytest.fixture
def warn_log(tmp_path):
    return WarningLog(tmp_path / "warn.log", clock=lambda: datetime(2024, 5, 1, 9, 30, 0))


@pytest.fixture
def write_csv(tmp_path):
    """Write *text* to a CSV file under tmp_path and return its path."""

    def _write(text: str, name: str = "delegates.csv", encoding: str = "utf-8") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding=encoding)
        return path

    return _write
