"""
Core types for the payment ledger engine.

This module provides the foundational data structures shared by every layer:
1. Decimal context and identifier limits
2. Exceptions: LedgerError and the domain / fatal error families
3. Enums: ExecuteResult, TransactionState
4. Data structures: Transaction (record), Operation (reference)
5. Instructions: the closed set Deposit, Withdrawal, Dispute, Resolve, Chargeback

Nothing in this module mutates account balances. The only mutable field is
Transaction.state, which is changed exclusively through the state machine.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_EVEN, getcontext
from enum import Enum
from typing import ClassVar, Optional, Union


# ============================================================================
# DECIMAL CONTEXT CONFIGURATION
# ============================================================================
#
# Balances must be exact and must keep the scale of their operands
# (Decimal("1.50") - Decimal("0.50") == Decimal("1.00"), printed as "1.00").
# The global context is configured once at import time.
#
# PRECONDITION: No other code should modify the global Decimal context.
#
_LEDGER_DECIMAL_CONTEXT = getcontext()
_LEDGER_DECIMAL_CONTEXT.prec = 50
_LEDGER_DECIMAL_CONTEXT.rounding = ROUND_HALF_EVEN


# ============================================================================
# CONSTANTS
# ============================================================================

ZERO = Decimal("0")

# Client ids fit an unsigned 16-bit integer, tx ids an unsigned 32-bit one.
CLIENT_ID_MAX = 2 ** 16 - 1
TX_ID_MAX = 2 ** 32 - 1


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerError(Exception):
    """Base exception for all ledger-related errors."""
    pass


class DomainError(LedgerError):
    """
    A valid instruction that cannot be applied to the account it targets.

    Domain errors are non-fatal: the router reports them and moves on to the
    next instruction. The account is left exactly as it was.
    """

    def __init__(self, message: str, client: Optional[int] = None, tx: Optional[int] = None):
        super().__init__(message)
        self.client = client
        self.tx = tx


class InsufficientFunds(DomainError):
    """Raised when a withdrawal would make available funds negative."""
    pass


class UnknownTransaction(DomainError):
    """Raised when a dispute, resolve or chargeback references a tx absent from the account history."""
    pass


class IllegalStateTransition(DomainError):
    """Raised when a transaction is asked to move between two states that are not linked."""

    def __init__(
        self,
        old_state: 'TransactionState',
        new_state: 'TransactionState',
        client: Optional[int] = None,
        tx: Optional[int] = None,
    ):
        super().__init__(
            f"illegal attempt to change state: {old_state.value} => {new_state.value}",
            client=client,
            tx=tx,
        )
        self.old_state = old_state
        self.new_state = new_state


class InstructionFormatError(LedgerError):
    """
    Raised when an input record cannot be turned into an Instruction.

    Format errors are fatal: a malformed stream invalidates the whole run.
    """

    def __init__(self, message: str, line: Optional[int] = None):
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
        self.line = line


class InvariantViolation(LedgerError):
    """Raised when an account no longer satisfies total == available + held."""
    pass


# ============================================================================
# ENUMS
# ============================================================================

class ExecuteResult(Enum):
    """
    Outcome of routing one instruction to its account.

    APPLIED: The instruction mutated the account.
    REJECTED: The instruction raised a DomainError and had no effect.
    """
    APPLIED = "applied"
    REJECTED = "rejected"


class TransactionState(Enum):
    """Dispute lifecycle of a recorded transaction."""
    UNDISPUTED = "undisputed"
    DISPUTED = "disputed"
    RESOLVED = "resolved"
    CHARGEDBACK = "chargedback"


# ============================================================================
# CORE DATA STRUCTURES
# ============================================================================

@dataclass(slots=True)
class Transaction:
    """
    A deposit or withdrawal, as carried by an instruction and kept in history.

    Attributes:
        client: Client the funds belong to.
        tx: Transaction identifier, unique across the run.
        amount: Signed exact amount. Withdrawals are stored negated.
        state: Dispute state. Starts UNDISPUTED.

    client, tx and amount are fixed once constructed; state moves only
    through payledger.state_machine.transition().
    """
    client: int
    tx: int
    amount: Decimal
    state: TransactionState = TransactionState.UNDISPUTED

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            raise ValueError(f"Transaction amount must be Decimal, got {type(self.amount)}")
        if not self.amount.is_finite():
            raise ValueError(f"Transaction amount must be finite, got {self.amount}")

    def negated(self) -> 'Transaction':
        """Return a fresh, undisputed copy carrying the opposite amount."""
        return Transaction(self.client, self.tx, self.amount.copy_negate())

    def __repr__(self) -> str:
        return f"Transaction(client={self.client}, tx={self.tx}, amount={self.amount}, {self.state.value})"


@dataclass(frozen=True, slots=True)
class Operation:
    """A reference to a previously recorded transaction (no amount)."""
    client: int
    tx: int


# ============================================================================
# INSTRUCTIONS
# ============================================================================
#
# Instruction is a closed sum type. Every dispatch site matches on all five
# classes and falls through to a TypeError for anything else.
#

@dataclass(frozen=True, slots=True)
class Deposit:
    """Credit: increases available and total funds."""
    transaction: Transaction
    kind: ClassVar[str] = "deposit"


@dataclass(frozen=True, slots=True)
class Withdrawal:
    """Debit: decreases available and total funds, if enough is available."""
    transaction: Transaction
    kind: ClassVar[str] = "withdrawal"


@dataclass(frozen=True, slots=True)
class Dispute:
    """Claim that a transaction was erroneous: its funds move to held."""
    operation: Operation
    kind: ClassVar[str] = "dispute"


@dataclass(frozen=True, slots=True)
class Resolve:
    """End of a dispute in the client's favour: held funds are released."""
    operation: Operation
    kind: ClassVar[str] = "resolve"


@dataclass(frozen=True, slots=True)
class Chargeback:
    """End of a dispute by reversal: held funds are withdrawn and the account is locked."""
    operation: Operation
    kind: ClassVar[str] = "chargeback"


Instruction = Union[Deposit, Withdrawal, Dispute, Resolve, Chargeback]

INSTRUCTION_TYPES = {
    cls.kind: cls for cls in (Deposit, Withdrawal, Dispute, Resolve, Chargeback)
}


def instruction_client(instruction: Instruction) -> int:
    """Return the client id an instruction is addressed to."""
    match instruction:
        case Deposit(transaction=data) | Withdrawal(transaction=data):
            return data.client
        case Dispute(operation=data) | Resolve(operation=data) | Chargeback(operation=data):
            return data.client
        case _:
            raise TypeError(f"Not an instruction: {instruction!r}")


def instruction_tx(instruction: Instruction) -> int:
    """Return the tx id an instruction carries or references."""
    match instruction:
        case Deposit(transaction=data) | Withdrawal(transaction=data):
            return data.tx
        case Dispute(operation=data) | Resolve(operation=data) | Chargeback(operation=data):
            return data.tx
        case _:
            raise TypeError(f"Not an instruction: {instruction!r}")


def instruction_amount(instruction: Instruction) -> Optional[Decimal]:
    """Return the amount an instruction carries, or None for dispute-family instructions."""
    match instruction:
        case Deposit(transaction=data) | Withdrawal(transaction=data):
            return data.amount
        case Dispute() | Resolve() | Chargeback():
            return None
        case _:
            raise TypeError(f"Not an instruction: {instruction!r}")


# ============================================================================
# INSTRUCTION FACTORIES
# ============================================================================

def deposit(client: int, tx: int, amount: Union[Decimal, str]) -> Deposit:
    """Build a Deposit instruction. String amounts are parsed as Decimal."""
    return Deposit(Transaction(client, tx, Decimal(amount)))


def withdrawal(client: int, tx: int, amount: Union[Decimal, str]) -> Withdrawal:
    """Build a Withdrawal instruction. String amounts are parsed as Decimal."""
    return Withdrawal(Transaction(client, tx, Decimal(amount)))


def dispute(client: int, tx: int) -> Dispute:
    return Dispute(Operation(client, tx))


def resolve(client: int, tx: int) -> Resolve:
    return Resolve(Operation(client, tx))


def chargeback(client: int, tx: int) -> Chargeback:
    return Chargeback(Operation(client, tx))
