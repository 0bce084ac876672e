"""
csv_input.py - Instruction stream reader

Turns a CSV stream such as

    type,       client, tx, amount
    deposit,         1,  1,    1.0
    withdrawal,      1,  2,    0.5
    dispute,         1,  1,

into Instructions, lazily and in order. Parsing happens in two stages:

1. Each row becomes a RawInstruction: type, client, tx and an optional
   amount, all still text.
2. RawInstruction.to_instruction() validates the record and builds the
   typed instruction. Every structural problem (unknown type, bad integer,
   out-of-range id, missing or unexpected amount) raises
   InstructionFormatError, which is fatal for the run.

Headers and fields are whitespace-trimmed, columns are located by header
name, and rows may omit the trailing amount column.
"""

from __future__ import annotations
import csv
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from os import PathLike
from typing import Dict, Iterator, List, Optional, TextIO, Union

from .core import (
    Instruction, Transaction, Operation,
    Deposit, Withdrawal,
    INSTRUCTION_TYPES,
    CLIENT_ID_MAX, TX_ID_MAX,
    InstructionFormatError,
)

REQUIRED_COLUMNS = ("type", "client", "tx")
AMOUNT_COLUMN = "amount"

# Instruction types that carry an amount
_AMOUNT_TYPES = frozenset({Deposit.kind, Withdrawal.kind})


@dataclass(frozen=True, slots=True)
class RawInstruction:
    """
    One input row before validation.

    Attributes:
        type: Instruction type tag as written in the input
        client: Client id text
        tx: Transaction id text
        amount: Amount text, or None when the column is empty or missing
        line: 1-based line number in the source, for error messages
    """
    type: str
    client: str
    tx: str
    amount: Optional[str] = None
    line: Optional[int] = None

    @classmethod
    def from_row(cls, columns: Dict[str, int], row: List[str], line: Optional[int] = None) -> 'RawInstruction':
        """
        Build a RawInstruction from a CSV row.

        Args:
            columns: Mapping of column name to index, taken from the header
            row: Field values (already whitespace-trimmed)
            line: Line number of the row

        Raises:
            InstructionFormatError: If a required field is missing
        """
        def cell(name: str) -> Optional[str]:
            index = columns.get(name)
            if index is None or index >= len(row) or row[index] == "":
                return None
            return row[index]

        values = {}
        for name in REQUIRED_COLUMNS:
            value = cell(name)
            if value is None:
                raise InstructionFormatError(f"missing required field '{name}'", line)
            values[name] = value

        return cls(
            type=values["type"],
            client=values["client"],
            tx=values["tx"],
            amount=cell(AMOUNT_COLUMN),
            line=line,
        )

    def to_instruction(self) -> Instruction:
        """
        Validate this record and convert it to a typed Instruction.

        Raises:
            InstructionFormatError: On any structural problem
        """
        cls = INSTRUCTION_TYPES.get(self.type)
        if cls is None:
            raise InstructionFormatError(f"unknown instruction type '{self.type}'", self.line)

        client = self._parse_int("client", self.client, CLIENT_ID_MAX)
        tx = self._parse_int("tx", self.tx, TX_ID_MAX)

        if cls.kind in _AMOUNT_TYPES:
            if self.amount is None:
                raise InstructionFormatError(f"{cls.kind} requires an amount", self.line)
            return cls(Transaction(client, tx, self._parse_amount(self.amount)))

        if self.amount is not None:
            raise InstructionFormatError(
                f"{cls.kind} does not take an amount, got '{self.amount}'", self.line
            )
        return cls(Operation(client, tx))

    def _parse_int(self, name: str, text: str, maximum: int) -> int:
        try:
            value = int(text)
        except ValueError:
            raise InstructionFormatError(f"{name} is not an integer: '{text}'", self.line) from None
        if not (0 <= value <= maximum):
            raise InstructionFormatError(f"{name} {value} out of range 0..{maximum}", self.line)
        return value

    def _parse_amount(self, text: str) -> Decimal:
        try:
            amount = Decimal(text)
        except InvalidOperation:
            raise InstructionFormatError(f"amount is not a decimal number: '{text}'", self.line) from None
        if not amount.is_finite():
            raise InstructionFormatError(f"amount must be finite, got '{text}'", self.line)
        return amount


def _read_header(reader) -> Optional[Dict[str, int]]:
    for row in reader:
        names = [name.strip().lstrip("\ufeff") for name in row]
        if not any(names):
            continue
        columns = {name: index for index, name in enumerate(names) if name}
        missing = [name for name in REQUIRED_COLUMNS if name not in columns]
        if missing:
            raise InstructionFormatError(
                f"header is missing column(s): {', '.join(missing)}", reader.line_num
            )
        return columns
    return None


def read_raw_records(stream: TextIO) -> Iterator[RawInstruction]:
    """Lazily yield RawInstructions from a CSV stream with a header row."""
    reader = csv.reader(stream)
    try:
        columns = _read_header(reader)
        if columns is None:
            return
        for row in reader:
            fields = [value.strip() for value in row]
            if not any(fields):
                continue
            yield RawInstruction.from_row(columns, fields, reader.line_num)
    except csv.Error as exc:
        raise InstructionFormatError(str(exc), reader.line_num) from exc
    except UnicodeDecodeError as exc:
        raise InstructionFormatError(f"input is not valid UTF-8: {exc.reason}") from exc


def read_instructions(stream: TextIO) -> Iterator[Instruction]:
    """Lazily yield validated Instructions from a CSV stream."""
    for raw in read_raw_records(stream):
        yield raw.to_instruction()


@contextmanager
def open_instructions(path: Union[str, PathLike]) -> Iterator[Iterator[Instruction]]:
    """
    Open a CSV file and yield its lazy instruction stream.

    Example:
        with open_instructions("transactions.csv") as instructions:
            router.process(instructions)

    Raises:
        OSError: If the file cannot be opened
        InstructionFormatError: While iterating, if the file is not valid UTF-8
    """
    with open(path, newline="", encoding="utf-8-sig") as stream:
        yield read_instructions(stream)
