"""
payledger - Client Account Ledger Engine

Replays a stream of deposits, withdrawals, disputes, resolves and chargebacks
against per-client accounts and reports the final balances.

Usage:
    from payledger import LedgerRouter, deposit, withdrawal, dispute, chargeback

    router = LedgerRouter()
    router.process([
        deposit(1, 1, "100.1234"),
        deposit(1, 3, "300.3456"),
        withdrawal(1, 8, "99.9999"),
        dispute(1, 3),
        chargeback(1, 3),
    ])

    for client, account in router.snapshot(sort=True):
        print(client, account.available, account.held, account.total, account.locked)
        # 1 0.1235 0.0000 0.1235 True

Reading and writing CSV:
    from payledger import open_instructions, write_snapshot

    with open_instructions("transactions.csv") as instructions:
        router.process(instructions)
    write_snapshot(router.snapshot())
"""

# Core types
from .core import (
    Transaction,
    Operation,
    TransactionState,
    ExecuteResult,
    Instruction,
    Deposit,
    Withdrawal,
    Dispute,
    Resolve,
    Chargeback,
    instruction_client,
    instruction_tx,
    instruction_amount,
    deposit,
    withdrawal,
    dispute,
    resolve,
    chargeback,
    LedgerError,
    DomainError,
    InsufficientFunds,
    UnknownTransaction,
    IllegalStateTransition,
    InstructionFormatError,
    InvariantViolation,
    CLIENT_ID_MAX,
    TX_ID_MAX,
)

# State machine
from .state_machine import (
    LEGAL_TRANSITIONS,
    can_transition,
    transition,
    advance,
)

# Accounts and routing
from .account import Account
from .router import LedgerRouter, ShardedRouter, ProcessingSummary

# CSV adapters
from .csv_input import (
    RawInstruction,
    read_raw_records,
    read_instructions,
    open_instructions,
)
from .csv_output import format_amount, write_snapshot

# Logging
from .logging_config import configure_logging, get_logger

__all__ = [
    # Core
    'Transaction', 'Operation', 'TransactionState', 'ExecuteResult',
    'Instruction', 'Deposit', 'Withdrawal', 'Dispute', 'Resolve', 'Chargeback',
    'instruction_client', 'instruction_tx', 'instruction_amount',
    'deposit', 'withdrawal', 'dispute', 'resolve', 'chargeback',
    'LedgerError', 'DomainError', 'InsufficientFunds', 'UnknownTransaction',
    'IllegalStateTransition', 'InstructionFormatError', 'InvariantViolation',
    'CLIENT_ID_MAX', 'TX_ID_MAX',
    # State machine
    'LEGAL_TRANSITIONS', 'can_transition', 'transition', 'advance',
    # Accounts and routing
    'Account', 'LedgerRouter', 'ShardedRouter', 'ProcessingSummary',
    # CSV
    'RawInstruction', 'read_raw_records', 'read_instructions', 'open_instructions',
    'format_amount', 'write_snapshot',
    # Logging
    'configure_logging', 'get_logger',
]
