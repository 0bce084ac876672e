"""
router.py - Client-keyed dispatch of instructions to accounts

LedgerRouter owns the client id -> Account mapping. It creates accounts on
first sight, applies instructions strictly in arrival order, and reports
(without stopping) every instruction an account rejects.

ShardedRouter is the parallel variant: since every invariant is per account,
instructions can be split by client id across independent routers as long
as each client's instructions keep their relative order.
"""

from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from itertools import chain
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .account import Account
from .core import (
    Instruction, ExecuteResult,
    DomainError, InvariantViolation,
    instruction_client, instruction_tx, instruction_amount,
)
from .logging_config import get_logger

logger = get_logger("router")


@dataclass
class ProcessingSummary:
    """
    Counts of what happened to the instructions a router has seen.

    Attributes:
        applied: Instructions that mutated an account
        rejected: Instructions an account refused (no effect)
        rejections: Rejected count per error class name
    """
    applied: int = 0
    rejected: int = 0
    rejections: Dict[str, int] = field(default_factory=dict)

    @property
    def processed(self) -> int:
        return self.applied + self.rejected

    def record(self, result: ExecuteResult, error: Optional[DomainError] = None) -> None:
        if result == ExecuteResult.APPLIED:
            self.applied += 1
            return
        self.rejected += 1
        name = type(error).__name__
        self.rejections[name] = self.rejections.get(name, 0) + 1

    @classmethod
    def merge(cls, summaries: Iterable['ProcessingSummary']) -> 'ProcessingSummary':
        merged = cls()
        for summary in summaries:
            merged.applied += summary.applied
            merged.rejected += summary.rejected
            for name, count in summary.rejections.items():
                merged.rejections[name] = merged.rejections.get(name, 0) + count
        return merged


class LedgerRouter:
    """
    Sequential instruction router.

    Thread Safety:
        Not thread-safe. Each thread should maintain its own LedgerRouter.

    Example:
        router = LedgerRouter()
        router.process([deposit(1, 1, "10.0"), dispute(1, 1)])
        for client, account in router.snapshot(sort=True):
            print(client, account.available, account.held)
    """

    def __init__(self, check_invariants: bool = False):
        """
        Create a router with no accounts.

        Args:
            check_invariants: Verify total == available + held after every
                applied instruction and raise InvariantViolation if broken
                (default: False)
        """
        self.accounts: Dict[int, Account] = {}
        self.summary = ProcessingSummary()
        self.check_invariants = check_invariants

    def get_account(self, client: int) -> Account:
        """Return the account for client, creating an empty one on first sight."""
        account = self.accounts.get(client)
        if account is None:
            account = self.accounts[client] = Account(client)
        return account

    def execute(self, instruction: Instruction) -> ExecuteResult:
        """
        Apply one instruction to its client's account.

        Domain errors are logged with the instruction's details and turned
        into ExecuteResult.REJECTED. Anything else propagates.

        Returns:
            ExecuteResult.APPLIED if the account accepted the instruction
            ExecuteResult.REJECTED if it raised a DomainError
        """
        account = self.get_account(instruction_client(instruction))
        try:
            account.apply(instruction)
        except DomainError as error:
            self._report_rejection(instruction, error)
            self.summary.record(ExecuteResult.REJECTED, error)
            return ExecuteResult.REJECTED

        if self.check_invariants and not account.verify_invariant():
            raise InvariantViolation(f"{account!r} broke total == available + held after {instruction!r}")

        self.summary.record(ExecuteResult.APPLIED)
        return ExecuteResult.APPLIED

    def process(self, instructions: Iterable[Instruction]) -> ProcessingSummary:
        """
        Apply instructions in order until the iterable is exhausted.

        The iterable may be lazy; errors it raises (malformed input, I/O
        failures) are fatal and propagate to the caller.

        Returns:
            The router's cumulative ProcessingSummary
        """
        for instruction in instructions:
            self.execute(instruction)
        return self.summary

    def snapshot(self, sort: bool = False) -> Iterator[Tuple[int, Account]]:
        """
        Iterate over (client, account) pairs.

        Args:
            sort: Order by client id. Unsorted iteration follows first-seen
                order and avoids the sort.
        """
        if sort:
            return iter(sorted(self.accounts.items()))
        return iter(self.accounts.items())

    def _report_rejection(self, instruction: Instruction, error: DomainError) -> None:
        client = instruction_client(instruction)
        tx = instruction_tx(instruction)
        amount = instruction_amount(instruction)
        amount_detail = f" of {amount}" if amount is not None else ""
        logger.warning(
            "tx %s, client %s, failed to apply %s%s: %s",
            tx, client, instruction.kind, amount_detail, error,
            extra={
                "client": client,
                "tx": tx,
                "instruction": instruction.kind,
                "amount": amount,
                "reason": type(error).__name__,
            },
        )


class ShardedRouter:
    """
    Client-sharded router running one LedgerRouter per worker.

    Instructions are assigned to shard client % workers. Each shard keeps the
    input order of its instructions, so every account sees exactly
    the sequence it would see from a single LedgerRouter. Shards share no
    state; the snapshot is the union of their accounts.

    The instruction stream is fully consumed (and therefore fully validated)
    before any shard starts applying instructions.
    """

    def __init__(self, workers: int, check_invariants: bool = False):
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")
        self.workers = workers
        self.routers: List[LedgerRouter] = [
            LedgerRouter(check_invariants=check_invariants) for _ in range(workers)
        ]

    def shard_of(self, instruction: Instruction) -> int:
        return instruction_client(instruction) % self.workers

    def partition(self, instructions: Iterable[Instruction]) -> List[List[Instruction]]:
        """Split instructions into per-shard lists, preserving order within each."""
        shards: List[List[Instruction]] = [[] for _ in range(self.workers)]
        for instruction in instructions:
            shards[self.shard_of(instruction)].append(instruction)
        return shards

    def process(self, instructions: Iterable[Instruction]) -> ProcessingSummary:
        """Partition the stream, apply every shard concurrently, merge the summaries."""
        shards = self.partition(instructions)
        logger.debug("partitioned into %s shards of sizes %s", self.workers, [len(s) for s in shards])

        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            futures = [
                executor.submit(router.process, shard)
                for router, shard in zip(self.routers, shards)
            ]
            # result() re-raises fatal errors from a shard
            summaries = [f.result() for f in futures]

        return ProcessingSummary.merge(summaries)

    @property
    def accounts(self) -> Dict[int, Account]:
        merged: Dict[int, Account] = {}
        for router in self.routers:
            merged.update(router.accounts)
        return merged

    @property
    def summary(self) -> ProcessingSummary:
        return ProcessingSummary.merge(router.summary for router in self.routers)

    def snapshot(self, sort: bool = False) -> Iterator[Tuple[int, Account]]:
        """Iterate over (client, account) pairs from every shard."""
        pairs = chain.from_iterable(router.accounts.items() for router in self.routers)
        if sort:
            return iter(sorted(pairs))
        return pairs
