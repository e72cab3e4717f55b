"""
MoneyPenny - a personal finance assistant.

This package parses Miles & More credit card CSV statements into normalized
transactions and moves them to YNAB, either as a CSV import file or through
the YNAB API.
"""

from .csv_parser import MilesMoreCSVParser
from .errors import ErrorKind, MoneypennyError
from .models import ParseResult, RowError, Transaction, TransformResult
from .output_formatter import TransactionTableFormatter, YNABCSVWriter
from .parser import MoneyPenny
from .ynab_client import YNABClient

__version__ = "0.1.0"
__all__ = [
    "ErrorKind",
    "MilesMoreCSVParser",
    "MoneyPenny",
    "MoneypennyError",
    "ParseResult",
    "RowError",
    "TransactionTableFormatter",
    "Transaction",
    "TransformResult",
    "YNABCSVWriter",
    "YNABClient",
]
