"""Data model for DelegateOps runs."""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional


class AccessRight(str, Enum):
    FULL_ACCESS = "FullAccess"
    SEND_AS = "SendAs"

    @classmethod
    def parse(cls, value: str) -> Optional["AccessRight"]:
        """Exact (case-sensitive) match after trimming; ``None`` if unknown."""
        value = (value or "").strip()
        for member in cls:
            if member.value == value:
                return member
        return None


@dataclass(frozen=True)
class Mailbox:
    identity: str
    display_name: str = ""
    primary_smtp: str = ""

    def __str__(self) -> str:
        return self.primary_smtp or self.identity


@dataclass(frozen=True)
class DirectoryUser:
    upn: str
    account_enabled: bool
    display_name: str = ""


@dataclass(frozen=True)
class DelegateRow:
    line: int
    delegate_email: str
    access_rights: str

    @property
    def access_right(self) -> Optional[AccessRight]:
        return AccessRight.parse(self.access_rights)


@dataclass
class RunConfig:
    exclude_disabled_users: bool = False
    log_path: Path = Path("delegateops.log")
    auto_mapping: bool = True
    dry_run: bool = False


class RowOutcome(str, Enum):
    GRANTED = "granted"
    SKIPPED_NOT_FOUND = "skipped_not_found"
    SKIPPED_DISABLED = "skipped_disabled"
    INVALID = "invalid"
    FAILED = "failed"
    DRY_RUN = "dry_run"


@dataclass
class RowResult:
    row: DelegateRow
    outcome: RowOutcome
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.outcome in (RowOutcome.GRANTED, RowOutcome.DRY_RUN)


@dataclass
class RunSummary:
    results: List[RowResult] = field(default_factory=list)

    def add(self, result: RowResult) -> RowResult:
        self.results.append(result)
        return result

    def counts(self) -> Counter:
        return Counter(r.outcome for r in self.results)

    @property
    def granted(self) -> int:
        return self.counts()[RowOutcome.GRANTED]

    @property
    def warnings(self) -> int:
        return sum(1 for r in self.results if not r.ok)
