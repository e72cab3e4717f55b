"""Unit tests for models.py and errors.py."""

from datetime import date
from decimal import Decimal

from moneypenny.errors import (
    ConfigError,
    ErrorKind,
    MoneypennyError,
    ParseCancelledError,
    ParseFieldError,
    TransformCancelledError,
    TransformError,
)
from moneypenny.models import ParseResult, RowError, Transaction


class TestTransaction:
    """Tests for Transaction dataclass."""

    def test_transaction_defaults(self):
        """Test default values of optional fields."""
        transaction = Transaction(
            date=date(2026, 1, 5),
            posting_date=date(2026, 1, 6),
            payee="Test",
            amount=Decimal("-10.00"),
        )

        assert transaction.memo == ""
        assert transaction.currency == "EUR"
        assert transaction.foreign_amount == 0
        assert transaction.foreign_currency == ""
        assert transaction.exchange_rate == 0
        assert transaction.import_id == ""
        assert transaction.source_file == ""
        assert transaction.source_line == 0

    def test_has_foreign_currency(self):
        """Test that both currency and amount are needed for a foreign transaction."""
        transaction = Transaction(
            date=date(2026, 1, 5),
            posting_date=date(2026, 1, 6),
            payee="Test",
            amount=Decimal("-8.44"),
            foreign_currency="USD",
            foreign_amount=Decimal("-10"),
        )
        assert transaction.has_foreign_currency

        transaction.foreign_amount = Decimal(0)
        assert not transaction.has_foreign_currency

        transaction.foreign_amount = Decimal("-10")
        transaction.foreign_currency = ""
        assert not transaction.has_foreign_currency


class TestParseResult:
    """Tests for ParseResult and RowError."""

    def test_parse_result_starts_empty(self):
        result = ParseResult()

        assert result.transactions == []
        assert result.errors == []
        assert result.total_rows == 0
        assert result.successful_rows == 0
        assert not result.has_errors

    def test_parse_result_instances_do_not_share_lists(self):
        first = ParseResult()
        second = ParseResult()
        first.errors.append(RowError(1, [], ParseFieldError("x")))

        assert second.errors == []
        assert first.has_errors

    def test_row_error_str(self):
        row_error = RowError(
            line=12,
            row=["a", "b"],
            error=ParseFieldError("expected 8 columns, got 2", ErrorKind.COLUMN_COUNT),
        )

        assert str(row_error) == "line 12: expected 8 columns, got 2"


class TestErrors:
    """Tests for the error hierarchy."""

    def test_default_kinds(self):
        assert ParseCancelledError("x").kind is ErrorKind.CANCELLED
        assert TransformCancelledError("x").kind is ErrorKind.CANCELLED
        assert TransformError("x").kind is ErrorKind.IO
        assert ConfigError("x").kind is ErrorKind.CONFIG

    def test_explicit_kind_overrides_default(self):
        error = ParseFieldError("bad", ErrorKind.INVALID_AMOUNT)

        assert error.is_kind(ErrorKind.INVALID_AMOUNT)
        assert not error.is_kind(ErrorKind.IO)

    def test_cancelled_transform_is_a_transform_error(self):
        assert isinstance(TransformCancelledError("x"), TransformError)
        assert isinstance(TransformCancelledError("x"), MoneypennyError)

    def test_message_and_cause(self):
        try:
            try:
                raise OSError("disk full")
            except OSError as e:
                raise TransformError("writing output file out.csv: disk full") from e
        except TransformError as error:
            assert error.message == "writing output file out.csv: disk full"
            assert str(error) == error.message
            assert isinstance(error.__cause__, OSError)
