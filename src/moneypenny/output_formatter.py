"""
Output formatting: YNAB import files and console reports.
"""

import logging
from decimal import Decimal
from pathlib import Path

import pandas as pd

from .csv_parser import CancelSignal
from .errors import TransformCancelledError, TransformError
from .models import ParseResult, Transaction, TransformResult

logger = logging.getLogger(__name__)

YNAB_DATE_FORMAT = "%d-%m-%Y"
YNAB_CSV_HEADERS = ["Date", "Payee", "Memo", "Amount"]
OUTPUT_SUFFIX = "_ynab"
OUTPUT_EXTENSION = ".csv"

PAYEE_WIDTH = 45


def format_amount(amount) -> str:
    """Format an amount with exactly two decimal places."""
    return f"{amount:.2f}"


def truncate_string(text: str, max_len: int) -> str:
    """Shorten text to ``max_len`` characters, marking the cut with ``...``."""
    if len(text) <= max_len:
        return text
    if max_len <= 3:
        return text[:max_len]
    return text[: max_len - 3] + "..."


def generate_output_path(input_path: str | Path) -> str:
    """
    Derive the YNAB output file path from the input path.

    Examples:
        ``statement.csv`` -> ``statement_ynab.csv``
        ``/path/to/file.txt`` -> ``/path/to/file_ynab.csv``
    """
    path = Path(input_path)
    return str(path.with_name(path.stem + OUTPUT_SUFFIX + OUTPUT_EXTENSION))


class YNABCSVWriter:
    """Writes transactions in YNAB's CSV import format."""

    def write(
        self,
        transactions: list[Transaction],
        output_path: str | Path,
        cancel_event: CancelSignal | None = None,
    ) -> TransformResult:
        """
        Write transactions to a YNAB import file.

        The file has the header ``Date,Payee,Memo,Amount``, dates as
        DD-MM-YYYY and amounts with two decimals, negative for outflows.

        Args:
            transactions: Transactions to write
            output_path: Destination file
            cancel_event: Optional cancellation signal checked before each row

        Returns:
            TransformResult with the path and number of rows written

        Raises:
            TransformCancelledError: If cancellation was requested
            TransformError: If the file cannot be created or written
        """
        if cancel_event is not None and cancel_event.is_set():
            raise TransformCancelledError("transform cancelled")

        rows = []
        for index, transaction in enumerate(transactions, start=1):
            if cancel_event is not None and cancel_event.is_set():
                raise TransformCancelledError(f"transform cancelled at row {index}")
            rows.append(self._to_row(transaction))

        df = pd.DataFrame(rows, columns=YNAB_CSV_HEADERS)
        try:
            df.to_csv(output_path, index=False, encoding="utf-8", lineterminator="\n")
        except OSError as e:
            raise TransformError(f"writing output file {output_path}: {e}") from e

        logger.debug(f"Wrote {len(rows)} rows to {output_path}")
        return TransformResult(
            output_path=str(output_path),
            transaction_count=len(rows),
        )

    @staticmethod
    def _to_row(transaction: Transaction) -> list[str]:
        return [
            transaction.date.strftime(YNAB_DATE_FORMAT),
            transaction.payee,
            transaction.memo,
            format_amount(transaction.amount),
        ]


class TransactionTableFormatter:
    """Formats parse results for display on the console."""

    def __init__(self, payee_width: int = PAYEE_WIDTH):
        self.payee_width = payee_width

    def format_table(self, result: ParseResult, verbose: bool = False) -> str:
        """
        Format transactions as a table followed by a summary.

        Args:
            result: ParseResult to display
            verbose: Also list every field of every transaction

        Returns:
            Formatted text, empty if there are no transactions
        """
        if not result.transactions:
            return ""

        df = pd.DataFrame(
            {
                "DATE": [t.date.isoformat() for t in result.transactions],
                "PAYEE": [
                    truncate_string(t.payee, self.payee_width)
                    for t in result.transactions
                ],
                "AMOUNT (EUR)": [format_amount(t.amount) for t in result.transactions],
            },
        )

        lines = [df.to_string(index=False, justify="left"), ""]
        lines.extend(self.format_summary(result))

        if verbose:
            lines.append("")
            lines.extend(self._format_details(result.transactions))

        return "\n".join(lines)

    @staticmethod
    def format_summary(result: ParseResult) -> list[str]:
        """Summary lines: count, total, date range and error count."""
        total = sum((t.amount for t in result.transactions), Decimal(0))
        lines = [
            "Summary:",
            f"  Total Transactions: {len(result.transactions)}",
            f"  Total Amount: {format_amount(total)} EUR",
        ]
        if result.transactions:
            dates = [t.date for t in result.transactions]
            lines.append(
                f"  Date Range: {min(dates).isoformat()} to {max(dates).isoformat()}",
            )
        lines.append(f"  Parsing Errors: {len(result.errors)}")
        return lines

    @staticmethod
    def _format_details(transactions: list[Transaction]) -> list[str]:
        lines = ["=" * 80, "VERBOSE TRANSACTION DETAILS", "=" * 80]
        for index, t in enumerate(transactions, start=1):
            lines.append("")
            lines.append(f"Transaction #{index}:")
            lines.append(f"  Date:           {t.date.isoformat()}")
            lines.append(f"  Posting Date:   {t.posting_date.isoformat()}")
            lines.append(f"  Payee:          {t.payee}")
            lines.append(f"  Amount:         {format_amount(t.amount)} {t.currency}")
            if t.foreign_currency:
                lines.append(
                    f"  Foreign Amount: {format_amount(t.foreign_amount)} {t.foreign_currency}",
                )
                lines.append(f"  Exchange Rate:  {t.exchange_rate:.5f}")
            if t.memo:
                lines.append(f"  Memo:           {t.memo}")
            lines.append(f"  Import ID:      {t.import_id}")
        return lines

    @staticmethod
    def format_errors(result: ParseResult) -> str:
        """Format the row errors of a parse result."""
        if not result.errors:
            return ""

        lines = ["=" * 80, f"PARSING ERRORS ({len(result.errors)})", "=" * 80]
        for index, row_error in enumerate(result.errors, start=1):
            lines.append("")
            lines.append(f"Error #{index} (Line {row_error.line}):")
            lines.append(f"  Error:   {row_error.error}")
            if row_error.row:
                lines.append(f"  Raw Row: {' | '.join(row_error.row)}")
        return "\n".join(lines)
