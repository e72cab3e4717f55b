"""
Data models for moneypenny.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from .errors import MoneypennyError

DEFAULT_CURRENCY = "EUR"


@dataclass
class Transaction:
    """A normalized statement transaction, independent of the source bank."""

    date: date
    posting_date: date
    payee: str
    amount: Decimal
    memo: str = ""
    currency: str = DEFAULT_CURRENCY
    foreign_amount: Decimal = Decimal(0)
    foreign_currency: str = ""
    exchange_rate: Decimal = Decimal(0)
    import_id: str = ""
    source_file: str = ""
    source_line: int = 0

    @property
    def has_foreign_currency(self) -> bool:
        """Whether the transaction was converted from a foreign currency."""
        return bool(self.foreign_currency) and self.foreign_amount != 0


@dataclass
class RowError:
    """A non-fatal problem with a single statement row."""

    line: int
    row: list[str]
    error: MoneypennyError

    def __str__(self) -> str:
        return f"line {self.line}: {self.error}"


@dataclass
class ParseResult:
    """Result of parsing a statement."""

    transactions: list[Transaction] = field(default_factory=list)
    errors: list[RowError] = field(default_factory=list)
    total_rows: int = 0
    successful_rows: int = 0

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


@dataclass
class TransformResult:
    """Result of writing transactions to a YNAB import file."""

    output_path: str
    transaction_count: int
