"""
Main orchestration of parsing, transforming and uploading statements.

The statement parser is always lenient. The methods here decide how strict to
be with its row errors: ``parse_file`` hands them back for display, while
``transform_to_ynab`` and ``upload_to_ynab`` refuse to continue if there are any.
"""

import logging
from pathlib import Path

from .csv_parser import CancelSignal, MilesMoreCSVParser
from .errors import EmptyStatementError, StrictParseError
from .logging_setup import Logger
from .models import ParseResult, TransformResult
from .output_formatter import (
    TransactionTableFormatter,
    YNABCSVWriter,
    generate_output_path,
)
from .ynab_client import YNABClient
from .ynab_models import SaveTransaction, SaveTransactionsResponse


class MoneyPenny:
    """Entry point tying the statement parser to its consumers."""

    def __init__(self, logger: Logger | None = None):
        self.logger = logger or logging.getLogger(__name__)
        self.csv_parser = MilesMoreCSVParser()
        self.csv_writer = YNABCSVWriter()
        self.table_formatter = TransactionTableFormatter()

    def parse_file(
        self,
        file_path: str | Path,
        cancel_event: CancelSignal | None = None,
    ) -> ParseResult:
        """Parse a statement, returning transactions and row errors side by side."""
        self.logger.info(f"Parsing Miles & More statement: {file_path}")
        result = self.csv_parser.parse_file(file_path, cancel_event)
        self.logger.debug(
            f"Parsed {result.successful_rows} of {result.total_rows} rows "
            f"with {len(result.errors)} errors",
        )
        return result

    def parse_strict(
        self,
        file_path: str | Path,
        cancel_event: CancelSignal | None = None,
    ) -> ParseResult:
        """
        Parse a statement and reject it if any row failed or nothing was found.

        Raises:
            StrictParseError: If at least one row could not be parsed
            EmptyStatementError: If the statement holds no transactions
        """
        result = self.parse_file(file_path, cancel_event)

        if result.errors:
            self.logger.error(
                f"Parsing encountered {len(result.errors)} errors (strict mode - aborting):",
            )
            for row_error in result.errors:
                self.logger.error(f"  Line {row_error.line}: {row_error.error}")
            raise StrictParseError(
                f"parsing failed with {len(result.errors)} errors, aborting",
            )

        self.logger.info(
            f"Successfully parsed {result.successful_rows} transactions "
            f"from {result.total_rows} rows",
        )

        if not result.transactions:
            self.logger.warning("No transactions found in input file")
            raise EmptyStatementError("no transactions to transform")

        return result

    def transform_to_ynab(
        self,
        input_path: str | Path,
        output_path: str | Path | None = None,
        cancel_event: CancelSignal | None = None,
    ) -> TransformResult:
        """
        Convert a statement into a YNAB import CSV.

        Args:
            input_path: Miles & More statement
            output_path: Destination, defaults to ``<input>_ynab.csv``
            cancel_event: Optional cancellation signal

        Returns:
            TransformResult of the written file
        """
        result = self.parse_strict(input_path, cancel_event)

        output_path = output_path or generate_output_path(input_path)
        self.logger.debug(f"Output file: {output_path}")

        self.logger.info("Transforming to YNAB format...")
        transform_result = self.csv_writer.write(
            result.transactions,
            output_path,
            cancel_event,
        )

        self.logger.info("Transformation complete!")
        self.logger.info(f"  Transactions written: {transform_result.transaction_count}")
        self.logger.info(f"  Output file: {transform_result.output_path}")
        return transform_result

    def upload_to_ynab(
        self,
        client: YNABClient,
        account_id: str,
        input_path: str | Path,
        cancel_event: CancelSignal | None = None,
    ) -> SaveTransactionsResponse:
        """
        Upload the transactions of a statement to a YNAB account.

        Import IDs are sent along, so YNAB skips transactions that were
        uploaded before and reports them as duplicates.
        """
        result = self.parse_strict(input_path, cancel_event)

        to_save = [
            SaveTransaction.from_transaction(t, account_id)
            for t in result.transactions
        ]
        self.logger.info(f"Uploading {len(to_save)} transactions to account {account_id}")
        response = client.create_transactions(to_save)

        self.logger.info(f"Created {len(response.transaction_ids)} transactions")
        if response.duplicate_import_ids:
            self.logger.warning(
                f"Skipped {len(response.duplicate_import_ids)} already imported transactions",
            )
            for import_id in response.duplicate_import_ids:
                self.logger.debug(f"  Duplicate import ID: {import_id}")
        return response

    def format_table(self, result: ParseResult, verbose: bool = False) -> str:
        """Format transactions and a summary for display."""
        return self.table_formatter.format_table(result, verbose)

    def format_errors(self, result: ParseResult) -> str:
        """Format row errors for display."""
        return self.table_formatter.format_errors(result)
