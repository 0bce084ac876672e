"""
test_csv_output.py - Unit tests for the snapshot writer
"""

import io

import pytest
from decimal import Decimal

from payledger import Account, format_amount, write_snapshot
from payledger.csv_output import FIELDNAMES, snapshot_row


@pytest.mark.parametrize("value,text", [
    (Decimal("0"), "0"),
    (Decimal("1.5"), "1.5"),
    (Decimal("0.0000"), "0.0000"),
    (Decimal("-22.2"), "-22.2"),
    (Decimal("1E+2"), "100"),
    (Decimal("1E-7"), "0.0000001"),
])
def test_format_amount(value, text):
    assert format_amount(value) == text


def test_scale_follows_arithmetic():
    assert format_amount(Decimal("300.3456") - Decimal("300.3456")) == "0.0000"
    assert format_amount(Decimal("1.50") + Decimal("2.5")) == "4.00"


def test_snapshot_row():
    account = Account(7, test_mode=True)
    account.set_balances(Decimal("1.25"), Decimal("0.75"))
    assert snapshot_row(7, account) == [7, "1.25", "0.75", "2.00", "false"]


def test_write_snapshot():
    first = Account(2, test_mode=True)
    first.set_balances(Decimal("1.5"))
    second = Account(1)
    out = io.StringIO()

    rows = write_snapshot([(2, first), (1, second)], out)

    assert rows == 2
    assert out.getvalue() == (
        "client,available,held,total,locked\n"
        "2,1.5,0,1.5,false\n"
        "1,0,0,0,false\n"
    )


def test_write_snapshot_empty_has_header():
    out = io.StringIO()
    assert write_snapshot([], out) == 0
    assert out.getvalue() == ",".join(FIELDNAMES) + "\n"


def test_write_snapshot_defaults_to_stdout(capsys):
    write_snapshot([(1, Account(1))])
    assert capsys.readouterr().out.splitlines() == [
        "client,available,held,total,locked",
        "1,0,0,0,false",
    ]
