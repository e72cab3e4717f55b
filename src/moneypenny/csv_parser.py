"""
CSV parsing functionality for Miles & More credit card statements.

The statement export looks like this::

    Miles & More Gold Credit Card;
    Card number;Card holder;
    5310XXXXXXXX1234;MAX MUSTERMANN;
    Billing period:;12/15/2025 - 1/14/2026;
    Voucher date;Date of receipt;Reason for payment;Foreign currency;Amount;Exchange rate;Amount;Currency
    1/28/2026;1/29/2026;RECALL, 19709 MIDDLETOWN, DE, USA;USD;-10;1.18483;-8.44;EUR
    Balance:;;;;;-8.44;EUR

Parsing is lenient: rows that cannot be parsed are collected as ``RowError``
values and parsing carries on with the next row. Deciding whether those errors
are acceptable is left to the caller.
"""

import csv
import io
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import IO, Protocol

from .errors import (
    ErrorKind,
    ParseCancelledError,
    ParseFieldError,
    StatementReadError,
)
from .models import DEFAULT_CURRENCY, ParseResult, RowError, Transaction
from .ynab_models import amount_to_milliunits, format_import_id

# Column positions in a transaction row
COL_VOUCHER_DATE = 0
COL_RECEIPT_DATE = 1
COL_PAYEE = 2
COL_FOREIGN_CURRENCY = 3
COL_FOREIGN_AMOUNT = 4
COL_EXCHANGE_RATE = 5
COL_AMOUNT = 6
COL_CURRENCY = 7
EXPECTED_COLUMN_COUNT = 8

DATE_FORMAT = "%m/%d/%Y"
HEADER_MARKER = "Voucher date"
BALANCE_PREFIX = "Balance:"
FEE_IDENTIFIER = "AUSLANDSEINSATZENTGELT"
FEE_MEMO_TEMPLATE = "Fee for transaction: {payee}"

_NUMBER_PATTERN = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")

# Largest accepted decimal exponent, i.e. magnitudes below 10**16
MAX_NUMBER_EXPONENT = 15


class CancelSignal(Protocol):
    """Anything that can report a cancellation request, e.g. ``threading.Event``."""

    def is_set(self) -> bool: ...


def parse_date(date_str: str) -> date:
    """Parse a statement date in ``M/D/YYYY`` format."""
    if not date_str:
        raise ParseFieldError("date is empty", ErrorKind.INVALID_DATE)

    try:
        return datetime.strptime(date_str, DATE_FORMAT).date()
    except ValueError as e:
        raise ParseFieldError(
            f"invalid date format (expected M/D/YYYY): {date_str!r}",
            ErrorKind.INVALID_DATE,
        ) from e


def _parse_number(text: str, kind: ErrorKind, label: str) -> Decimal:
    if not _NUMBER_PATTERN.fullmatch(text):
        raise ParseFieldError(f"invalid {label}: {text!r}", kind)
    try:
        number = Decimal(text)
    except InvalidOperation as e:
        raise ParseFieldError(f"invalid {label}: {text!r}", kind) from e
    if number != 0 and number.adjusted() > MAX_NUMBER_EXPONENT:
        raise ParseFieldError(f"{label} out of range: {text!r}", kind)
    return number


def parse_amount(amount_str: str) -> Decimal:
    """
    Parse an amount such as ``-330``, ``-8.44`` or ``-0.16``.

    Args:
        amount_str: Amount text using ``.`` as decimal point

    Returns:
        The amount as Decimal

    Raises:
        ParseFieldError: If the text is empty, not a number or out of range
    """
    amount_str = amount_str.strip()
    if not amount_str:
        raise ParseFieldError("amount is empty", ErrorKind.INVALID_AMOUNT)
    return _parse_number(amount_str, ErrorKind.INVALID_AMOUNT, "amount")


def parse_exchange_rate(rate_str: str) -> Decimal:
    """Parse an exchange rate. A missing rate is not an error and yields 0."""
    rate_str = rate_str.strip()
    if not rate_str:
        return Decimal(0)
    return _parse_number(rate_str, ErrorKind.INVALID_EXCHANGE_RATE, "exchange rate")


def generate_import_id(transaction: Transaction, occurrences: dict[str, int]) -> str:
    """
    Generate a YNAB import ID for duplicate detection.

    Format: ``YNAB:[milliunit_amount]:[iso_date]:[occurrence]``, for example
    ``YNAB:-294230:2015-12-30:1``. ``occurrences`` counts how often each
    amount/date pair has been seen and is updated in place.

    Raises:
        ParseFieldError: If the amount cannot be expressed in milliunits
    """
    try:
        milliunits = amount_to_milliunits(transaction.amount)
        key = f"{milliunits}:{transaction.date.isoformat()}"
    except (ArithmeticError, ValueError) as e:
        raise ParseFieldError(
            f"cannot build import ID for amount {transaction.amount}: {e}",
            ErrorKind.INVALID_AMOUNT,
        ) from e

    occurrences[key] = occurrences.get(key, 0) + 1

    return format_import_id(milliunits, transaction.date, occurrences[key])


def _is_blank(record: list[str]) -> bool:
    return len(record) == 0 or (len(record) == 1 and not record[0].strip())


class MilesMoreCSVParser:
    """Parser for Miles & More credit card CSV statements."""

    def __init__(
        self,
        encoding: str = "utf-8-sig",
        delimiter: str = ";",
        metadata_rows: int = 4,
    ):
        self.encoding = encoding
        self.delimiter = delimiter
        self.metadata_rows = metadata_rows

    def parse_file(
        self,
        file_path: str | Path,
        cancel_event: CancelSignal | None = None,
    ) -> ParseResult:
        """
        Parse a statement file.

        Args:
            file_path: Path to the CSV file
            cancel_event: Optional cancellation signal checked before each row

        Returns:
            ParseResult with transactions and row errors
        """
        path = Path(file_path)
        with open(path, encoding=self.encoding, newline="") as f:
            return self.parse(f, path.name, cancel_event)

    def parse(
        self,
        stream: IO,
        source_file: str,
        cancel_event: CancelSignal | None = None,
    ) -> ParseResult:
        """
        Parse a statement from an open text or binary stream.

        Args:
            stream: Stream with the CSV content; binary streams are decoded
            source_file: Label stored on each transaction for diagnostics
            cancel_event: Optional cancellation signal checked before each row

        Returns:
            ParseResult with transactions and row errors

        Raises:
            ParseCancelledError: If cancellation was requested
            StatementReadError: If the stream itself cannot be read
        """
        if not isinstance(stream, (io.RawIOBase, io.BufferedIOBase)):
            return self._parse_records(stream, source_file, cancel_event)

        # The binary stream stays open for the caller
        wrapper = io.TextIOWrapper(stream, encoding=self.encoding, newline="")
        try:
            return self._parse_records(wrapper, source_file, cancel_event)
        finally:
            wrapper.detach()

    def _parse_records(
        self,
        stream: IO[str],
        source_file: str,
        cancel_event: CancelSignal | None,
    ) -> ParseResult:
        reader = csv.reader(
            stream,
            delimiter=self.delimiter,
            skipinitialspace=True,
            strict=False,
        )

        result = ParseResult()
        occurrences: dict[str, int] = {}
        previous: Transaction | None = None
        header_done = False
        line_number = 0

        while True:
            if cancel_event is not None and cancel_event.is_set():
                raise ParseCancelledError(
                    f"parsing cancelled at line {line_number + 1} of {source_file}",
                )

            line_number += 1
            try:
                record = next(reader)
            except StopIteration:
                break
            except csv.Error as e:
                error = ParseFieldError(f"csv read error: {e}", ErrorKind.CSV_READ)
                error.__cause__ = e
                result.errors.append(RowError(line_number, [], error))
                result.total_rows += 1
                continue
            except (OSError, UnicodeDecodeError) as e:
                raise StatementReadError(
                    f"reading {source_file} failed at line {line_number}: {e}",
                ) from e

            if not header_done:
                if line_number <= self.metadata_rows:
                    continue
                header_done = True
                if record and HEADER_MARKER in record[0]:
                    continue

            if _is_blank(record):
                continue

            if record[0].strip().startswith(BALANCE_PREFIX):
                continue

            if len(record) < EXPECTED_COLUMN_COUNT:
                error = ParseFieldError(
                    f"expected {EXPECTED_COLUMN_COUNT} columns, got {len(record)}",
                    ErrorKind.COLUMN_COUNT,
                )
                result.errors.append(RowError(line_number, record, error))
                result.total_rows += 1
                continue

            try:
                transaction = self._parse_transaction(record, line_number, source_file)
            except ParseFieldError as e:
                result.errors.append(RowError(line_number, record, e))
                result.total_rows += 1
                continue

            if FEE_IDENTIFIER in transaction.payee and previous is not None:
                if previous.has_foreign_currency:
                    transaction.memo = FEE_MEMO_TEMPLATE.format(payee=previous.payee)

            try:
                transaction.import_id = generate_import_id(transaction, occurrences)
            except ParseFieldError as e:
                result.errors.append(RowError(line_number, record, e))
                result.total_rows += 1
                continue

            result.transactions.append(transaction)
            result.total_rows += 1
            result.successful_rows += 1
            previous = transaction

        return result

    def _parse_transaction(
        self,
        record: list[str],
        line_number: int,
        source_file: str,
    ) -> Transaction:
        """Build a Transaction from the fixed columns of a row."""
        try:
            voucher_date = parse_date(record[COL_VOUCHER_DATE].strip())
        except ParseFieldError as e:
            raise ParseFieldError(f"invalid voucher date: {e}", e.kind) from e

        try:
            receipt_date = parse_date(record[COL_RECEIPT_DATE].strip())
        except ParseFieldError as e:
            raise ParseFieldError(f"invalid receipt date: {e}", e.kind) from e

        payee = record[COL_PAYEE].strip()
        if not payee:
            raise ParseFieldError("payee is required", ErrorKind.MISSING_PAYEE)

        try:
            amount = parse_amount(record[COL_AMOUNT])
        except ParseFieldError as e:
            raise ParseFieldError(f"invalid amount: {e}", e.kind) from e

        transaction = Transaction(
            date=voucher_date,
            posting_date=receipt_date,
            payee=payee,
            amount=amount,
            currency=record[COL_CURRENCY].strip() or DEFAULT_CURRENCY,
            source_file=source_file,
            source_line=line_number,
        )

        foreign_currency = record[COL_FOREIGN_CURRENCY].strip()
        if foreign_currency and foreign_currency != transaction.currency:
            transaction.foreign_currency = foreign_currency

            # Foreign amount and rate are informational, a bad value leaves them at 0
            try:
                transaction.foreign_amount = parse_amount(record[COL_FOREIGN_AMOUNT])
            except ParseFieldError:
                transaction.foreign_amount = Decimal(0)

            try:
                rate = parse_exchange_rate(record[COL_EXCHANGE_RATE])
            except ParseFieldError:
                rate = Decimal(0)
            if rate > 0:
                transaction.exchange_rate = rate

        return transaction

