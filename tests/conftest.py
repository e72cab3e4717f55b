"""Shared fixtures for moneypenny tests."""

import logging

import pytest

from moneypenny.logging_setup import PACKAGE_LOGGER_NAME

METADATA = """Miles & More Gold Credit Card;
Card number;Card holder;
5310XXXXXXXX1234;MAX MUSTERMANN;
Billing period:;12/15/2025 - 1/14/2026;
"""

HEADER = (
    "Voucher date;Date of receipt;Reason for payment;Foreign currency;"
    "Amount;Exchange rate;Amount;Currency\n"
)

ROWS = """1/29/2026;1/30/2026;AUSLANDSEINSATZENTGELT;;;;-0.16;EUR
1/28/2026;1/29/2026;RECALL, 19709 MIDDLETOWN, DE, USA;USD;-10;1.18483;-8.44;EUR
1/27/2026;1/28/2026;PAYPAL *rafaublacha, 10715 35314369001, DEU, DEU;;;;-330;EUR
1/26/2026;1/27/2026;AMAZON.COM, 98109 SEATTLE, WA, USA;USD;-25.00;1.17647;-21.25;EUR
1/26/2026;1/27/2026;AUSLANDSEINSATZENTGELT;;;;-0.43;EUR
1/20/2026;1/21/2026;REWE MARKT GMBH, 10115 BERLIN, DEU;;;;-10.50;EUR
Balance:;;;;;-370.78;EUR
"""


@pytest.fixture
def statement_prefix():
    """Metadata block and column header of a Miles & More statement."""
    return METADATA + HEADER


@pytest.fixture
def sample_statement():
    """A complete statement with six valid transactions."""
    return METADATA + HEADER + ROWS


@pytest.fixture
def statement_file(tmp_path, sample_statement):
    """The sample statement written to a CSV file."""
    path = tmp_path / "statement.csv"
    path.write_text(sample_statement, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo handlers installed by configure_logging."""
    yield
    logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
