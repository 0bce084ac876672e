"""
csv_output.py - Snapshot writer

Writes one row per account:

    client,available,held,total,locked
    1,1.5,0,1.5,false

Amounts keep the scale the arithmetic produced (a difference of two
4-decimal operands prints with 4 decimals, even when it is a whole number).
"""

from __future__ import annotations
import csv
import sys
from decimal import Decimal
from typing import Iterable, Optional, TextIO, Tuple

from .account import Account

FIELDNAMES = ["client", "available", "held", "total", "locked"]


def format_amount(value: Decimal) -> str:
    """Fixed-point text for a Decimal, scale preserved, never scientific notation."""
    return format(value, "f")


def snapshot_row(client: int, account: Account) -> list:
    return [
        client,
        format_amount(account.available),
        format_amount(account.held),
        format_amount(account.total),
        str(account.locked).lower(),
    ]


def write_snapshot(accounts: Iterable[Tuple[int, Account]], stream: Optional[TextIO] = None) -> int:
    """
    Write the header and one row per (client, account) pair.

    Args:
        accounts: Snapshot iterator, e.g. LedgerRouter.snapshot()
        stream: Destination (default: sys.stdout)

    Returns:
        Number of account rows written
    """
    csvwriter = csv.writer(stream or sys.stdout, lineterminator="\n")
    csvwriter.writerow(FIELDNAMES)
    rows = 0
    for client, account in accounts:
        csvwriter.writerow(snapshot_row(client, account))
        rows += 1
    return rows
