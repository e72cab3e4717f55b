"""
Error types shared across moneypenny.

Every error carries an ``ErrorKind`` so callers can branch on the category of a
failure without inspecting messages. Underlying exceptions are chained with
``raise ... from`` and stay reachable through ``__cause__``.
"""

from enum import Enum


class ErrorKind(Enum):
    """Category of a moneypenny failure."""

    CANCELLED = "cancelled"
    IO = "io"

    # Row-level statement problems
    CSV_READ = "csv_read"
    COLUMN_COUNT = "column_count"
    INVALID_DATE = "invalid_date"
    MISSING_PAYEE = "missing_payee"
    INVALID_AMOUNT = "invalid_amount"
    INVALID_EXCHANGE_RATE = "invalid_exchange_rate"

    STRICT_PARSE = "strict_parse"
    EMPTY_STATEMENT = "empty_statement"
    CONFIG = "config"

    # YNAB API
    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    RATE_LIMITED = "rate_limited"
    API = "api"
    NETWORK = "network"


class MoneypennyError(Exception):
    """Base exception for all moneypenny failures."""

    default_kind = ErrorKind.IO

    def __init__(self, message: str, kind: ErrorKind | None = None):
        super().__init__(message)
        self.message = message
        self.kind = kind or self.default_kind

    def is_kind(self, kind: ErrorKind) -> bool:
        """Return True if this error belongs to the given category."""
        return self.kind is kind


class ParseFieldError(MoneypennyError):
    """Exception raised when a single statement field cannot be parsed."""


class ParseCancelledError(MoneypennyError):
    """Exception raised when parsing is cancelled by the caller."""

    default_kind = ErrorKind.CANCELLED


class StatementReadError(MoneypennyError):
    """Exception raised when the statement stream itself cannot be read."""


class StrictParseError(MoneypennyError):
    """Exception raised when a strict consumer receives row errors."""

    default_kind = ErrorKind.STRICT_PARSE


class EmptyStatementError(MoneypennyError):
    """Exception raised when a statement contains no transactions."""

    default_kind = ErrorKind.EMPTY_STATEMENT


class TransformError(MoneypennyError):
    """Exception raised when the YNAB CSV file cannot be written."""


class TransformCancelledError(TransformError):
    """Exception raised when the transformation is cancelled by the caller."""

    default_kind = ErrorKind.CANCELLED


class ConfigError(MoneypennyError):
    """Exception raised for missing or invalid configuration."""

    default_kind = ErrorKind.CONFIG
