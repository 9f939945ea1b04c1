"""Tests for delegate CSV loading."""

import pytest

from mailbox_tools.delegateops.csv_input import load_delegates
from mailbox_tools.delegateops.errors import DelegateOpsError, InvalidCsvError, MissingColumnsError
from mailbox_tools.delegateops.models import AccessRight


def test_loads_rows_in_order_and_trims(write_csv):
    path = write_csv(
        "DelegateEmail,AccessRights\n"
        "  a@x.com , FullAccess \n"
        "b@x.com,SendAs\n"
    )
    rows = load_delegates(path)
    assert [r.delegate_email for r in rows] == ["a@x.com", "b@x.com"]
    assert rows[0].access_rights == "FullAccess"
    assert rows[0].access_right is AccessRight.FULL_ACCESS
    assert rows[1].access_right is AccessRight.SEND_AS
    assert [r.line for r in rows] == [2, 3]


def test_header_names_are_trimmed(write_csv):
    path = write_csv(" DelegateEmail , AccessRights \na@x.com,SendAs\n")
    rows = load_delegates(path)
    assert rows[0].delegate_email == "a@x.com"
    assert rows[0].access_right is AccessRight.SEND_AS


def test_bom_is_tolerated(write_csv):
    path = write_csv("DelegateEmail,AccessRights\na@x.com,FullAccess\n", encoding="utf-8-sig")
    assert len(load_delegates(path)) == 1


def test_extra_columns_are_ignored(write_csv):
    path = write_csv("Name,DelegateEmail,AccessRights\nAnn,a@x.com,FullAccess\n")
    assert load_delegates(path)[0].delegate_email == "a@x.com"


def test_missing_access_rights_column(write_csv):
    path = write_csv("DelegateEmail,FullAccess\na@x.com,yes\n")
    with pytest.raises(MissingColumnsError) as exc:
        load_delegates(path)
    assert exc.value.missing == ["AccessRights"]
    assert "AccessRights" in str(exc.value)


def test_empty_file_reports_both_columns(write_csv):
    path = write_csv("")
    with pytest.raises(MissingColumnsError) as exc:
        load_delegates(path)
    assert exc.value.missing == ["DelegateEmail", "AccessRights"]


def test_blank_lines_are_skipped(write_csv):
    path = write_csv("DelegateEmail,AccessRights\n,\na@x.com,FullAccess\n\n")
    rows = load_delegates(path)
    assert [r.delegate_email for r in rows] == ["a@x.com"]


def test_unknown_access_rights_kept_as_invalid(write_csv):
    path = write_csv("DelegateEmail,AccessRights\nc@x.com,Nope\nd@x.com,fullaccess\n")
    rows = load_delegates(path)
    assert len(rows) == 2
    assert all(r.access_right is None for r in rows)


def test_non_utf8_file_is_a_clean_error(write_csv):
    path = write_csv("DelegateEmail,AccessRights\njörg@x.com,FullAccess\n", encoding="cp1252")
    with pytest.raises(InvalidCsvError) as exc:
        load_delegates(path)
    assert isinstance(exc.value, DelegateOpsError)
    assert str(path) in str(exc.value)
    assert "UTF-8" in str(exc.value)


def test_unparseable_csv_is_a_clean_error(write_csv):
    path = write_csv("DelegateEmail,AccessRights\na@x.com,\"" + "x" * 200000 + "\"\n")
    with pytest.raises(InvalidCsvError):
        load_delegates(path)
