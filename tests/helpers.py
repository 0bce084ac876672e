"""
helpers.py - Shared helpers and reference scenarios for payledger tests
"""

from decimal import Decimal
from typing import List, Tuple

from payledger import (
    Account, LedgerRouter, Instruction,
    deposit, withdrawal, dispute, chargeback,
)


def balances(account: Account) -> Tuple[Decimal, Decimal, Decimal, bool]:
    """(available, held, total, locked) of an account."""
    return account.available, account.held, account.total, account.locked


def run(instructions: List[Instruction]) -> LedgerRouter:
    """Apply instructions to a fresh router and return it."""
    router = LedgerRouter(check_invariants=True)
    router.process(instructions)
    return router


def deposits_and_withdrawals() -> List[Instruction]:
    """Three clients, deposits then withdrawals; every withdrawal succeeds."""
    return [
        deposit(1, 1, "11.1"),
        deposit(2, 2, "22.2"),
        deposit(1, 3, "33.3"),
        deposit(2, 4, "44.4"),
        deposit(3, 5, "55.5"),
        withdrawal(2, 6, "11.1"),
        withdrawal(3, 7, "22.2"),
        withdrawal(1, 8, "33.3"),
    ]


def with_disputes() -> List[Instruction]:
    """deposits_and_withdrawals() plus disputes on tx 2 (client 2) and tx 5 (client 3)."""
    return deposits_and_withdrawals() + [
        dispute(2, 2),
        dispute(3, 5),
    ]


def with_chargeback() -> List[Instruction]:
    """One client: two 4-decimal deposits, a withdrawal, then a disputed and charged back deposit."""
    return [
        deposit(1, 1, "100.1234"),
        deposit(1, 3, "300.3456"),
        withdrawal(1, 8, "99.9999"),
        dispute(1, 3),
        chargeback(1, 3),
    ]


DEPOSITS_AND_WITHDRAWALS_CSV = """\
type,       client, tx, amount
deposit,         1,  1,   11.1
deposit,         2,  2,   22.2
deposit,         1,  3,   33.3
deposit,         2,  4,   44.4
deposit,         3,  5,   55.5
withdrawal,      2,  6,   11.1
withdrawal,      3,  7,   22.2
withdrawal,      1,  8,   33.3
"""

DISPUTES_CSV = DEPOSITS_AND_WITHDRAWALS_CSV + """\
dispute,         2,  2,
dispute,         3,  5,
"""

CHARGEBACK_CSV = """\
type,       client, tx, amount
deposit,         1,  1, 100.1234
deposit,         1,  3, 300.3456
withdrawal,      1,  8,  99.9999
dispute,         1,  3,
chargeback,      1,  3,
"""
