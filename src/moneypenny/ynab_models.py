"""
Record types for the YNAB API.

YNAB stores amounts as milliunits, thousandths of the currency unit:
123930 milliunits are 123.93.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from .models import Transaction


class ClearedStatus(Enum):
    """Cleared state of a YNAB transaction."""

    CLEARED = "cleared"
    UNCLEARED = "uncleared"
    RECONCILED = "reconciled"


def milliunits_to_amount(milliunits: int) -> Decimal:
    """Convert YNAB milliunits to a currency amount."""
    return Decimal(milliunits) / 1000


def amount_to_milliunits(amount: Decimal) -> int:
    """Convert a currency amount to YNAB milliunits, truncating toward zero."""
    return int(Decimal(amount) * 1000)


def format_import_id(milliunits: int, day: date, occurrence: int) -> str:
    """Build an import ID: ``YNAB:[milliunit_amount]:[iso_date]:[occurrence]``."""
    return f"YNAB:{milliunits}:{day.isoformat()}:{occurrence}"


@dataclass
class Account:
    """A YNAB account."""

    id: str
    name: str
    type: str = ""
    on_budget: bool = False
    closed: bool = False
    note: str = ""
    balance: int = 0
    cleared_balance: int = 0
    uncleared_balance: int = 0
    transfer_payee_id: str = ""
    direct_import_linked: bool = False
    direct_import_in_error: bool = False
    deleted: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Account":
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            type=data.get("type", ""),
            on_budget=bool(data.get("on_budget", False)),
            closed=bool(data.get("closed", False)),
            note=data.get("note") or "",
            balance=data.get("balance", 0),
            cleared_balance=data.get("cleared_balance", 0),
            uncleared_balance=data.get("uncleared_balance", 0),
            transfer_payee_id=data.get("transfer_payee_id") or "",
            direct_import_linked=bool(data.get("direct_import_linked", False)),
            direct_import_in_error=bool(data.get("direct_import_in_error", False)),
            deleted=bool(data.get("deleted", False)),
        )


@dataclass
class SubTransaction:
    """A component of a split transaction."""

    id: str
    transaction_id: str
    amount: int
    memo: str = ""
    payee_id: str = ""
    payee_name: str = ""
    category_id: str = ""
    category_name: str = ""
    deleted: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SubTransaction":
        return cls(
            id=data.get("id", ""),
            transaction_id=data.get("transaction_id", ""),
            amount=data.get("amount", 0),
            memo=data.get("memo") or "",
            payee_id=data.get("payee_id") or "",
            payee_name=data.get("payee_name") or "",
            category_id=data.get("category_id") or "",
            category_name=data.get("category_name") or "",
            deleted=bool(data.get("deleted", False)),
        )


@dataclass
class YNABTransaction:
    """A transaction as returned by the YNAB API."""

    id: str
    date: str
    amount: int
    memo: str = ""
    cleared: str = ""
    approved: bool = False
    flag_color: str = ""
    account_id: str = ""
    account_name: str = ""
    payee_id: str = ""
    payee_name: str = ""
    category_id: str = ""
    category_name: str = ""
    transfer_account_id: str = ""
    import_id: str = ""
    import_payee_name: str = ""
    deleted: bool = False
    subtransactions: list[SubTransaction] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "YNABTransaction":
        return cls(
            id=data.get("id", ""),
            date=data.get("date", ""),
            amount=data.get("amount", 0),
            memo=data.get("memo") or "",
            cleared=data.get("cleared") or "",
            approved=bool(data.get("approved", False)),
            flag_color=data.get("flag_color") or "",
            account_id=data.get("account_id") or "",
            account_name=data.get("account_name") or "",
            payee_id=data.get("payee_id") or "",
            payee_name=data.get("payee_name") or "",
            category_id=data.get("category_id") or "",
            category_name=data.get("category_name") or "",
            transfer_account_id=data.get("transfer_account_id") or "",
            import_id=data.get("import_id") or "",
            import_payee_name=data.get("import_payee_name") or "",
            deleted=bool(data.get("deleted", False)),
            subtransactions=[
                SubTransaction.from_dict(s) for s in data.get("subtransactions") or []
            ],
        )

    @property
    def amount_value(self) -> Decimal:
        return milliunits_to_amount(self.amount)


@dataclass
class SaveTransaction:
    """A transaction to be created in YNAB."""

    account_id: str
    date: str
    amount: int
    payee_name: str = ""
    payee_id: str = ""
    category_id: str = ""
    memo: str = ""
    cleared: ClearedStatus | None = None
    approved: bool = False
    flag_color: str = ""
    import_id: str = ""

    @classmethod
    def from_transaction(
        cls,
        transaction: Transaction,
        account_id: str,
        cleared: ClearedStatus = ClearedStatus.CLEARED,
    ) -> "SaveTransaction":
        """Map a parsed statement transaction to a YNAB create request."""
        return cls(
            account_id=account_id,
            date=transaction.date.isoformat(),
            amount=amount_to_milliunits(transaction.amount),
            payee_name=transaction.payee,
            memo=transaction.memo,
            cleared=cleared,
            import_id=transaction.import_id,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the API, leaving out empty optional fields."""
        data: dict[str, Any] = {
            "account_id": self.account_id,
            "date": self.date,
            "amount": self.amount,
        }
        optional = {
            "payee_name": self.payee_name,
            "payee_id": self.payee_id,
            "category_id": self.category_id,
            "memo": self.memo,
            "flag_color": self.flag_color,
            "import_id": self.import_id,
        }
        data.update({key: value for key, value in optional.items() if value})
        if self.cleared is not None:
            data["cleared"] = self.cleared.value
        if self.approved:
            data["approved"] = True
        return data


@dataclass
class SaveTransactionsResponse:
    """Response of a create transactions request."""

    transaction_ids: list[str] = field(default_factory=list)
    transactions: list[YNABTransaction] = field(default_factory=list)
    duplicate_import_ids: list[str] = field(default_factory=list)
    server_knowledge: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SaveTransactionsResponse":
        payload = data.get("data") or {}
        transactions = [
            YNABTransaction.from_dict(t) for t in payload.get("transactions") or []
        ]
        if payload.get("transaction"):
            transactions.append(YNABTransaction.from_dict(payload["transaction"]))
        return cls(
            transaction_ids=list(payload.get("transaction_ids") or []),
            transactions=transactions,
            duplicate_import_ids=list(payload.get("duplicate_import_ids") or []),
            server_knowledge=payload.get("server_knowledge", 0),
        )


@dataclass
class DateFormat:
    format: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DateFormat":
        return cls(format=data.get("format", ""))


@dataclass
class CurrencyFormat:
    iso_code: str
    currency_symbol: str = ""
    decimal_digits: int = 2
    decimal_separator: str = "."
    group_separator: str = ","
    symbol_first: bool = False
    display_symbol: bool = True
    example_format: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CurrencyFormat":
        return cls(
            iso_code=data.get("iso_code", ""),
            currency_symbol=data.get("currency_symbol", ""),
            decimal_digits=data.get("decimal_digits", 2),
            decimal_separator=data.get("decimal_separator", "."),
            group_separator=data.get("group_separator", ","),
            symbol_first=bool(data.get("symbol_first", False)),
            display_symbol=bool(data.get("display_symbol", True)),
            example_format=data.get("example_format", ""),
        )


@dataclass
class BudgetSummary:
    """Summary of a YNAB budget."""

    id: str
    name: str
    last_modified_on: str = ""
    first_month: str = ""
    last_month: str = ""
    date_format: DateFormat | None = None
    currency_format: CurrencyFormat | None = None
    accounts: list[Account] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BudgetSummary":
        date_format = data.get("date_format")
        currency_format = data.get("currency_format")
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            last_modified_on=data.get("last_modified_on") or "",
            first_month=data.get("first_month") or "",
            last_month=data.get("last_month") or "",
            date_format=DateFormat.from_dict(date_format) if date_format else None,
            currency_format=(
                CurrencyFormat.from_dict(currency_format) if currency_format else None
            ),
            accounts=[Account.from_dict(a) for a in data.get("accounts") or []],
        )


@dataclass
class TransactionOptions:
    """Optional filters for fetching transactions."""

    since_date: str = ""
    type: str = ""
    last_knowledge_of_server: int = 0

    def to_params(self) -> dict[str, str]:
        params = {}
        if self.since_date:
            params["since_date"] = self.since_date
        if self.type:
            params["type"] = self.type
        if self.last_knowledge_of_server > 0:
            params["last_knowledge_of_server"] = str(self.last_knowledge_of_server)
        return params


def limit_transactions(
    transactions: list[YNABTransaction],
    n: int,
) -> list[YNABTransaction]:
    """Return the last ``n`` (most recent) transactions, or all if n is out of range."""
    if n <= 0 or n >= len(transactions):
        return transactions
    return transactions[len(transactions) - n :]
