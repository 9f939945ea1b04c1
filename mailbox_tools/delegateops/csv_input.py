"""CSV loading for delegate lists."""

from __future__ import annotations
import csv
from pathlib import Path
from typing import List

from mailbox_tools.delegateops.errors import InvalidCsvError, MissingColumnsError
from mailbox_tools.delegateops.models import DelegateRow

EMAIL_COLUMN = "DelegateEmail"
RIGHTS_COLUMN = "AccessRights"
REQUIRED_COLUMNS = (EMAIL_COLUMN, RIGHTS_COLUMN)


def load_delegates(csv_path: Path) -> List[DelegateRow]:
    """Read *csv_path* into trimmed rows, raising if a required column is absent."""
    rows: List[DelegateRow] = []
    try:
        # utf-8-sig: Export-Csv and Excel both write a BOM
        with Path(csv_path).open(newline="", encoding="utf-8-sig") as fh:
            reader = csv.DictReader(fh)
            headers = [(name or "").strip() for name in (reader.fieldnames or [])]
            missing = [col for col in REQUIRED_COLUMNS if col not in headers]
            if missing:
                raise MissingColumnsError(missing, headers)
            reader.fieldnames = headers
            for record in reader:
                email = (record.get(EMAIL_COLUMN) or "").strip()
                rights = (record.get(RIGHTS_COLUMN) or "").strip()
                if not email and not rights:
                    continue
                rows.append(DelegateRow(line=reader.line_num, delegate_email=email, access_rights=rights))
    except UnicodeDecodeError as exc:
        raise InvalidCsvError(str(csv_path), f"not UTF-8 encoded ({exc.reason} at byte {exc.start}); save it as UTF-8") from exc
    except csv.Error as exc:
        raise InvalidCsvError(str(csv_path), str(exc)) from exc
    return rows
