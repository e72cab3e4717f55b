"""Unit tests for parser.py."""

import threading
from unittest.mock import Mock

import pytest

from moneypenny.errors import (
    EmptyStatementError,
    ErrorKind,
    ParseCancelledError,
    StrictParseError,
)
from moneypenny.parser import MoneyPenny
from moneypenny.ynab_models import SaveTransactionsResponse

BAD_ROW = "1/5/2026;1/6/2026;Only three\n"


@pytest.fixture
def logger():
    return Mock()


@pytest.fixture
def bad_statement_file(tmp_path, sample_statement):
    path = tmp_path / "bad.csv"
    path.write_text(sample_statement + BAD_ROW, encoding="utf-8")
    return path


@pytest.fixture
def empty_statement_file(tmp_path, statement_prefix):
    path = tmp_path / "empty.csv"
    path.write_text(statement_prefix, encoding="utf-8")
    return path


class TestMoneyPennyParse:
    """Tests for lenient and strict parsing."""

    def test_parse_file_is_lenient(self, logger, bad_statement_file):
        result = MoneyPenny(logger).parse_file(bad_statement_file)

        assert len(result.transactions) == 6
        assert len(result.errors) == 1
        assert result.errors[0].error.kind is ErrorKind.COLUMN_COUNT

    def test_parse_strict_success(self, logger, statement_file):
        result = MoneyPenny(logger).parse_strict(statement_file)

        assert result.successful_rows == 6
        assert result.total_rows == 6

    def test_parse_strict_rejects_row_errors(self, logger, bad_statement_file):
        """Test that every row error is logged before aborting."""
        with pytest.raises(StrictParseError, match="parsing failed with 1 errors") as exc_info:
            MoneyPenny(logger).parse_strict(bad_statement_file)

        assert exc_info.value.kind is ErrorKind.STRICT_PARSE
        logged = [call.args[0] for call in logger.error.call_args_list]
        assert any("Line 13: expected 8 columns, got 3" in line for line in logged)

    def test_parse_strict_rejects_empty_statement(self, logger, empty_statement_file):
        with pytest.raises(EmptyStatementError, match="no transactions to transform"):
            MoneyPenny(logger).parse_strict(empty_statement_file)

        logger.warning.assert_called_with("No transactions found in input file")

    def test_parse_cancelled(self, logger, statement_file):
        cancel_event = threading.Event()
        cancel_event.set()

        with pytest.raises(ParseCancelledError):
            MoneyPenny(logger).parse_file(statement_file, cancel_event)


class TestMoneyPennyTransform:
    """Tests for transform_to_ynab."""

    def test_transform_default_output_path(self, logger, statement_file):
        result = MoneyPenny(logger).transform_to_ynab(statement_file)

        expected = statement_file.with_name("statement_ynab.csv")
        assert result.output_path == str(expected)
        assert result.transaction_count == 6
        lines = expected.read_text(encoding="utf-8").splitlines()
        assert lines[0] == "Date,Payee,Memo,Amount"
        assert lines[1] == "29-01-2026,AUSLANDSEINSATZENTGELT,,-0.16"
        assert lines[3] == '27-01-2026,"PAYPAL *rafaublacha, 10715 35314369001, DEU, DEU",,-330.00'

    def test_transform_explicit_output_path(self, logger, statement_file, tmp_path):
        output_path = tmp_path / "custom.csv"

        result = MoneyPenny(logger).transform_to_ynab(statement_file, output_path)

        assert result.output_path == str(output_path)
        assert output_path.exists()
        assert not statement_file.with_name("statement_ynab.csv").exists()

    def test_transform_writes_nothing_on_row_errors(self, logger, bad_statement_file):
        with pytest.raises(StrictParseError):
            MoneyPenny(logger).transform_to_ynab(bad_statement_file)

        assert not bad_statement_file.with_name("bad_ynab.csv").exists()

    def test_transform_writes_nothing_for_empty_statement(
        self,
        logger,
        empty_statement_file,
    ):
        with pytest.raises(EmptyStatementError):
            MoneyPenny(logger).transform_to_ynab(empty_statement_file)

        assert not empty_statement_file.with_name("empty_ynab.csv").exists()


class TestMoneyPennyUpload:
    """Tests for upload_to_ynab."""

    def test_upload_sends_all_transactions(self, logger, statement_file):
        client = Mock()
        client.create_transactions.return_value = SaveTransactionsResponse(
            transaction_ids=["t1", "t2", "t3", "t4", "t5"],
            duplicate_import_ids=["YNAB:-8440:2026-01-28:1"],
        )

        response = MoneyPenny(logger).upload_to_ynab(client, "account-1", statement_file)

        assert response.duplicate_import_ids == ["YNAB:-8440:2026-01-28:1"]
        sent = client.create_transactions.call_args.args[0]
        assert len(sent) == 6
        assert {t.account_id for t in sent} == {"account-1"}
        recall = sent[1]
        assert recall.date == "2026-01-28"
        assert recall.amount == -8440
        assert recall.import_id == "YNAB:-8440:2026-01-28:1"
        fee = sent[4]
        assert fee.memo == "Fee for transaction: AMAZON.COM, 98109 SEATTLE, WA, USA"
        logger.warning.assert_called_with("Skipped 1 already imported transactions")

    def test_upload_aborts_before_calling_api(self, logger, bad_statement_file):
        client = Mock()

        with pytest.raises(StrictParseError):
            MoneyPenny(logger).upload_to_ynab(client, "account-1", bad_statement_file)

        client.create_transactions.assert_not_called()


class TestMoneyPennyFormatting:
    """Tests for the display helpers."""

    def test_format_table_and_errors(self, logger, bad_statement_file):
        money_penny = MoneyPenny(logger)
        result = money_penny.parse_file(bad_statement_file)

        table = money_penny.format_table(result)
        errors = money_penny.format_errors(result)

        assert "Total Transactions: 6" in table
        assert "Total Amount: -370.78 EUR" in table
        assert "Date Range: 2026-01-20 to 2026-01-29" in table
        assert "Error #1 (Line 13):" in errors
