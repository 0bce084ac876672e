"""
account.py - Per-client balance ledger

The Account class owns one client's balances and transaction history and is
the only place balances are mutated.

Key responsibilities:
    - Applies exactly one instruction at a time (deposit, withdrawal, dispute,
      resolve, chargeback)
    - Keeps total == available + held after every applied instruction
    - Rejects an instruction by raising a DomainError, leaving the account
      untouched
    - Records deposits and successful withdrawals in history, keyed by tx
"""

from __future__ import annotations
from decimal import Decimal
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from .core import (
    # Types
    Transaction, Operation, TransactionState,
    Deposit, Withdrawal, Dispute, Resolve, Chargeback, Instruction,
    # Constants
    ZERO,
    # Exceptions
    LedgerError, InsufficientFunds, UnknownTransaction,
)
from .logging_config import get_logger
from .state_machine import advance

logger = get_logger("account")


class Account:
    """
    One client's funds.

    Balances:
        available: funds the client can withdraw now (may go negative while
                   a deposit is disputed)
        held: funds frozen by open disputes
        total: available + held
        locked: set permanently by the first chargeback; informational only,
                a locked account still accepts instructions

    Thread Safety:
        Not thread-safe. An account is mutated by one instruction at a time.

    Example:
        account = Account(client=1)
        account.deposit(Transaction(1, 1, Decimal("10.0")))
        account.dispute(Operation(1, 1))
        assert account.held == Decimal("10.0")
    """

    def __init__(self, client: int, test_mode: bool = False):
        """
        Create an empty, unlocked account.

        Args:
            client: Client id this account belongs to
            test_mode: Enable test mode to allow set_balances() calls (default: False)
        """
        self.client = client
        self._available: Decimal = ZERO
        self._held: Decimal = ZERO
        self._total: Decimal = ZERO
        self._locked: bool = False
        self._history: Dict[int, Transaction] = {}
        self._test_mode = test_mode

    # ========================================================================
    # READ ACCESSORS
    # ========================================================================

    @property
    def available(self) -> Decimal:
        return self._available

    @property
    def held(self) -> Decimal:
        return self._held

    @property
    def total(self) -> Decimal:
        return self._total

    @property
    def locked(self) -> bool:
        return self._locked

    @property
    def transactions(self) -> Mapping[int, Transaction]:
        """Read-only view of the history, keyed by tx id."""
        return MappingProxyType(self._history)

    def get_transaction(self, tx: int) -> Optional[Transaction]:
        """Return the recorded transaction for tx, or None."""
        return self._history.get(tx)

    def verify_invariant(self) -> bool:
        """Return True if total == available + held holds exactly."""
        return self._total == self._available + self._held

    def set_balances(self, available: Decimal, held: Decimal = ZERO) -> None:
        """
        Set balances directly; total becomes available + held.

        WARNING: This bypasses the instruction rules and is only available in
        test mode.

        Raises:
            LedgerError: If called when test_mode is False
        """
        if not self._test_mode:
            raise LedgerError(
                "set_balances() is disabled in production mode. "
                "Apply instructions to modify balances. "
                "Set test_mode=True when creating Account for testing."
            )
        self._available = Decimal(available)
        self._held = Decimal(held)
        self._total = self._available + self._held

    # ========================================================================
    # OPERATIONS (Mutating)
    # ========================================================================

    def deposit(self, data: Transaction) -> None:
        """
        Credit available and total by the deposited amount.

        A deposit reusing an existing tx id replaces the earlier history
        entry (last write wins).
        """
        logger.debug("client %s tx %s deposits %s", data.client, data.tx, data.amount)
        self._available += data.amount
        self._total += data.amount
        self._history[data.tx] = Transaction(data.client, data.tx, data.amount)

    def withdraw(self, data: Transaction) -> None:
        """
        Debit available and total, if available funds cover the amount.

        The history entry stores the negated amount so that disputing a
        withdrawal moves funds with the right sign.

        Raises:
            InsufficientFunds: available - amount would be negative
        """
        logger.debug("client %s tx %s attempts withdraw %s", data.client, data.tx, data.amount)
        available = self._available - data.amount
        if available < ZERO:
            raise InsufficientFunds(
                f"attempt to withdraw {data.amount} with {self._available} available",
                client=data.client,
                tx=data.tx,
            )
        self._available = available
        self._total -= data.amount
        self._history[data.tx] = data.negated()

    def dispute(self, data: Operation) -> None:
        """
        Move the disputed transaction's amount from available to held.

        Raises:
            UnknownTransaction: tx is not in this account's history
            IllegalStateTransition: the transaction is already disputed or charged back
        """
        logger.debug("client %s tx %s receives dispute", data.client, data.tx)
        entry = self._lookup(data, "dispute")
        advance(entry, TransactionState.DISPUTED)
        self._available -= entry.amount
        self._held += entry.amount

    def resolve(self, data: Operation) -> None:
        """
        Release a disputed transaction's amount from held back to available.

        Raises:
            UnknownTransaction: tx is not in this account's history
            IllegalStateTransition: the transaction is not disputed
        """
        logger.debug("client %s tx %s resolves dispute", data.client, data.tx)
        entry = self._lookup(data, "resolve")
        advance(entry, TransactionState.RESOLVED)
        self._available += entry.amount
        self._held -= entry.amount

    def chargeback(self, data: Operation) -> None:
        """
        Reverse a disputed transaction: drop its amount from held and total, lock the account.

        Raises:
            UnknownTransaction: tx is not in this account's history
            IllegalStateTransition: the transaction is not disputed
        """
        logger.debug("client %s tx %s charges back", data.client, data.tx)
        entry = self._lookup(data, "chargeback")
        advance(entry, TransactionState.CHARGEDBACK)
        self._locked = True
        self._total -= entry.amount
        self._held -= entry.amount

    def apply(self, instruction: Instruction) -> None:
        """Dispatch one instruction to the matching operation."""
        match instruction:
            case Deposit(transaction=data):
                self.deposit(data)
            case Withdrawal(transaction=data):
                self.withdraw(data)
            case Dispute(operation=data):
                self.dispute(data)
            case Resolve(operation=data):
                self.resolve(data)
            case Chargeback(operation=data):
                self.chargeback(data)
            case _:
                raise TypeError(f"Not an instruction: {instruction!r}")

    def _lookup(self, data: Operation, action: str) -> Transaction:
        entry = self._history.get(data.tx)
        if entry is None:
            raise UnknownTransaction(
                f"attempt to {action} non-existing transaction",
                client=data.client,
                tx=data.tx,
            )
        return entry

    def __repr__(self) -> str:
        return (
            f"Account(client={self.client}, available={self._available}, held={self._held}, "
            f"total={self._total}, locked={self._locked})"
        )
