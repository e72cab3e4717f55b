"""
Command-line interface for moneypenny.

Commands::

    mp parser milesmore -f statement.csv [-v]
    mp ynab -f config.json budgets fetch [-a] [-v]
    mp ynab -f config.json transactions fetch -a ACCOUNT_ID [-n 10] [-s 2026-01-01]
    mp ynab -f config.json transactions upload -a ACCOUNT_ID -i statement.csv
    mp ynab transform milesmore -i statement.csv [-o output.csv]
"""

import argparse
import sys
from pathlib import Path

from .config import YNABConfig, load_config
from .errors import ConfigError, MoneypennyError
from .logging_setup import Logger, configure_logging
from .output_formatter import truncate_string
from .parser import MoneyPenny
from .ynab_client import YNABClient
from .ynab_models import (
    Account,
    BudgetSummary,
    TransactionOptions,
    limit_transactions,
    milliunits_to_amount,
)


class InvalidInputFileError(MoneypennyError):
    """Exception raised when the statement path is not a usable CSV file."""


def validate_file_path(path: str) -> None:
    """Check that ``path`` names an existing, non-empty ``.csv`` file."""
    if not path:
        raise InvalidInputFileError("file path is required")

    file_path = Path(path)
    if not file_path.exists():
        raise InvalidInputFileError(f"file does not exist: {path}")
    if file_path.is_dir():
        raise InvalidInputFileError(f"path is a directory, not a file: {path}")
    if file_path.suffix.lower() != ".csv":
        raise InvalidInputFileError(
            f"file must have .csv extension, got: {file_path.suffix}",
        )
    if file_path.stat().st_size == 0:
        raise InvalidInputFileError(f"file is empty: {path}")


def _load_ynab_config(args: argparse.Namespace, require_budget: bool) -> YNABConfig:
    if not args.config:
        raise ConfigError("--config is required for YNAB commands")

    config = load_config(args.config)
    try:
        config.ynab.validate(require_budget=require_budget)
    except ConfigError as e:
        raise ConfigError(f"invalid config: {e}") from e
    return config.ynab


def _create_client(
    args: argparse.Namespace,
    logger: Logger,
    require_budget: bool = True,
) -> YNABClient:
    ynab_config = _load_ynab_config(args, require_budget)
    return YNABClient(
        api_key=ynab_config.api_key,
        budget_id=ynab_config.budget_id,
        logger=logger,
    )


def run_parse_milesmore(args: argparse.Namespace, logger: Logger) -> None:
    """Parse a statement and show transactions and errors."""
    validate_file_path(args.file)

    money_penny = MoneyPenny(logger)
    result = money_penny.parse_file(args.file)

    if not result.transactions:
        logger.warning("No transactions found in CSV")
    else:
        logger.info(money_penny.format_table(result, verbose=args.verbose))

    if result.errors:
        logger.info(money_penny.format_errors(result))
        logger.warning(
            f"Found {len(result.errors)} parsing errors. Please review the CSV file.",
        )


def run_transform_milesmore(args: argparse.Namespace, logger: Logger) -> None:
    """Transform a statement into a YNAB import file."""
    logger.info("Starting Miles & More to YNAB transformation")
    logger.debug(f"Input file: {args.input}")

    if not Path(args.input).exists():
        raise InvalidInputFileError(f"input file not found: {args.input}")

    MoneyPenny(logger).transform_to_ynab(args.input, args.output)


def run_budgets_fetch(args: argparse.Namespace, logger: Logger) -> None:
    """Fetch and list budgets."""
    client = _create_client(args, logger, require_budget=False)
    budgets = client.get_budgets(include_accounts=args.include_accounts)

    logger.info(f"Fetched {len(budgets)} budgets")
    for budget in budgets:
        if args.verbose:
            _log_budget_verbose(logger, budget, args.include_accounts)
        else:
            _log_budget_short(logger, budget, args.include_accounts)


def _log_budget_short(logger: Logger, budget: BudgetSummary, show_accounts: bool) -> None:
    logger.info(
        f"  Budget: {budget.id} | {budget.name} | Last Modified: {budget.last_modified_on}",
    )
    if show_accounts:
        for account in budget.accounts:
            logger.info(f"    Account: {account.id} | {account.name}")


def _log_budget_verbose(
    logger: Logger,
    budget: BudgetSummary,
    show_accounts: bool,
) -> None:
    logger.info("  Budget:")
    logger.info(f"    ID:            {budget.id}")
    logger.info(f"    Name:          {budget.name}")
    logger.info(f"    Last Modified: {budget.last_modified_on}")
    logger.info(f"    First Month:   {budget.first_month}")
    logger.info(f"    Last Month:    {budget.last_month}")
    if budget.date_format:
        logger.info(f"    Date Format:   {budget.date_format.format}")
    if budget.currency_format:
        logger.info(
            f"    Currency:      {budget.currency_format.currency_symbol} "
            f"({budget.currency_format.iso_code})",
        )
    if show_accounts and budget.accounts:
        logger.info(f"    Accounts ({len(budget.accounts)}):")
        for account in budget.accounts:
            _log_account_verbose(logger, account)


def _log_account_verbose(logger: Logger, account: Account) -> None:
    logger.info("      Account:")
    logger.info(f"        ID:        {account.id}")
    logger.info(f"        Name:      {account.name}")
    logger.info(f"        Type:      {account.type}")
    logger.info(f"        On Budget: {account.on_budget}")
    logger.info(f"        Closed:    {account.closed}")
    logger.info(f"        Balance:   {milliunits_to_amount(account.balance):.2f}")
    if account.note:
        logger.info(f"        Note:      {account.note}")


def run_transactions_fetch(args: argparse.Namespace, logger: Logger) -> None:
    """Fetch and list the latest transactions of an account."""
    client = _create_client(args, logger)
    transactions = client.get_transactions_by_account(
        args.account_id,
        TransactionOptions(since_date=args.since_date or ""),
    )
    transactions = limit_transactions(transactions, args.limit)

    logger.info(
        f"Fetched {len(transactions)} transactions from account {args.account_id}",
    )
    for t in transactions:
        logger.info(
            f"  {t.date} | {t.amount_value:10.2f} | "
            f"{truncate_string(t.payee_name, 30):<30} | {truncate_string(t.memo, 40)}",
        )


def run_transactions_upload(args: argparse.Namespace, logger: Logger) -> None:
    """Upload the transactions of a statement to an account."""
    validate_file_path(args.input)
    client = _create_client(args, logger)
    MoneyPenny(logger).upload_to_ynab(client, args.account_id, args.input)


def build_parser() -> argparse.ArgumentParser:
    """Build the ``mp`` argument parser."""
    parser = argparse.ArgumentParser(
        prog="mp",
        description="MoneyPenny is my finance assistant",
    )
    parser.add_argument(
        "--log-level",
        default="info",
        help="Log level: debug, info, warn, error (default: info)",
    )
    parser.add_argument(
        "--log-format",
        default="console",
        help="Log format: console or json (default: console)",
    )
    commands = parser.add_subparsers(dest="command")

    # mp parser ...
    parser_cmd = commands.add_parser("parser", help="Parse bank statements")
    parser_sub = parser_cmd.add_subparsers(dest="parser_command")

    milesmore = parser_sub.add_parser(
        "milesmore",
        help="Parse Miles & More credit card CSV statement",
    )
    milesmore.add_argument("-f", "--file", required=True, help="path to CSV file")
    milesmore.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="show detailed output",
    )
    milesmore.set_defaults(func=run_parse_milesmore)

    # mp ynab ...
    ynab_cmd = commands.add_parser("ynab", help="YNAB budget management commands")
    ynab_cmd.add_argument("-f", "--config", help="path to config file (JSON)")
    ynab_sub = ynab_cmd.add_subparsers(dest="ynab_command")

    budgets = ynab_sub.add_parser("budgets", help="Budget commands")
    budgets_sub = budgets.add_subparsers(dest="budgets_command")
    budgets_fetch = budgets_sub.add_parser("fetch", help="Fetch budgets from YNAB")
    budgets_fetch.add_argument(
        "-a",
        "--include-accounts",
        action="store_true",
        help="include accounts in output",
    )
    budgets_fetch.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="display all details (default: short format)",
    )
    budgets_fetch.set_defaults(func=run_budgets_fetch)

    transactions = ynab_sub.add_parser("transactions", help="Transaction commands")
    transactions_sub = transactions.add_subparsers(dest="transactions_command")
    transactions_fetch = transactions_sub.add_parser(
        "fetch",
        help="Fetch transactions from YNAB",
    )
    transactions_fetch.add_argument(
        "-a",
        "--account-id",
        required=True,
        help="account ID to fetch transactions from",
    )
    transactions_fetch.add_argument(
        "-n",
        "--limit",
        type=int,
        default=10,
        help="number of transactions to show",
    )
    transactions_fetch.add_argument(
        "-s",
        "--since-date",
        help="fetch transactions since date (ISO format: YYYY-MM-DD)",
    )
    transactions_fetch.set_defaults(func=run_transactions_fetch)

    transactions_upload = transactions_sub.add_parser(
        "upload",
        help="Upload a Miles & More statement to a YNAB account",
    )
    transactions_upload.add_argument(
        "-a",
        "--account-id",
        required=True,
        help="account ID to upload transactions to",
    )
    transactions_upload.add_argument(
        "-i",
        "--input",
        required=True,
        help="path to Miles & More CSV statement file",
    )
    transactions_upload.set_defaults(func=run_transactions_upload)

    transform = ynab_sub.add_parser("transform", help="Transform statements to YNAB CSV")
    transform_sub = transform.add_subparsers(dest="transform_command")
    transform_milesmore = transform_sub.add_parser(
        "milesmore",
        help="Transform Miles & More statement to YNAB format",
    )
    transform_milesmore.add_argument(
        "-i",
        "--input",
        required=True,
        help="path to Miles & More CSV statement file",
    )
    transform_milesmore.add_argument(
        "-o",
        "--output",
        help="output path (default: <input>_ynab.csv next to the input)",
    )
    transform_milesmore.set_defaults(func=run_transform_milesmore)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logger = configure_logging(args.log_level, args.log_format)

    if not hasattr(args, "func"):
        parser.print_help()
        return

    try:
        args.func(args, logger)
    except (MoneypennyError, OSError) as e:
        logger.error(f"error while executing command: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
