"""
Client for the YNAB (You Need A Budget) REST API.

The client is reusable across many calls. It holds a ``requests.Session`` with
the bearer token and JSON headers set once, and leaves retries of rate-limited
or failed requests to urllib3's ``Retry``.

Example::

    client = YNABClient(api_key="...", budget_id="...", logger=logger)
    transactions = client.get_transactions_by_account("account-id")
"""

import logging
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .errors import ConfigError, ErrorKind, MoneypennyError
from .logging_setup import Logger
from .ynab_models import (
    Account,
    BudgetSummary,
    SaveTransaction,
    SaveTransactionsResponse,
    TransactionOptions,
    YNABTransaction,
)

DEFAULT_BASE_URL = "https://api.ynab.com/v1"
DEFAULT_TIMEOUT = 30.0
DEFAULT_RETRY_COUNT = 3
DEFAULT_RETRY_BACKOFF = 1.0
RETRY_STATUS_CODES = (429, 500, 502, 503, 504)


class YNABAPIError(MoneypennyError):
    """Exception raised when a YNAB API call fails."""

    default_kind = ErrorKind.API

    def __init__(
        self,
        message: str,
        kind: ErrorKind | None = None,
        status_code: int | None = None,
        error_id: str = "",
        error_name: str = "",
        detail: str = "",
    ):
        super().__init__(message, kind)
        self.status_code = status_code
        self.error_id = error_id
        self.error_name = error_name
        self.detail = detail


class BadRequestError(YNABAPIError):
    default_kind = ErrorKind.BAD_REQUEST


class UnauthorizedError(YNABAPIError):
    default_kind = ErrorKind.UNAUTHORIZED


class NotFoundError(YNABAPIError):
    default_kind = ErrorKind.NOT_FOUND


class ConflictError(YNABAPIError):
    """Raised on 409, e.g. when an import ID already exists."""

    default_kind = ErrorKind.CONFLICT


class RateLimitedError(YNABAPIError):
    default_kind = ErrorKind.RATE_LIMITED


_STATUS_ERRORS: dict[int, type[YNABAPIError]] = {
    400: BadRequestError,
    401: UnauthorizedError,
    # 403 covers subscription_lapsed, trial_expired and unauthorized_scope
    403: UnauthorizedError,
    404: NotFoundError,
    409: ConflictError,
    429: RateLimitedError,
}


def map_http_error(status_code: int, body: Any) -> YNABAPIError:
    """Build the exception for an error response of any JSON shape."""
    error = body.get("error") if isinstance(body, dict) else None
    if not isinstance(error, dict):
        error = {}
    error_id = str(error.get("id", ""))
    error_name = error.get("name", "")
    detail = error.get("detail", "")

    error_class = _STATUS_ERRORS.get(status_code, YNABAPIError)
    if error:
        message = f"ynab api error [{error_id}]: {error_name} - {detail}"
    else:
        message = f"unexpected status code: {status_code}"

    return error_class(
        message,
        status_code=status_code,
        error_id=error_id,
        error_name=error_name,
        detail=detail,
    )


class YNABClient:
    """Reusable YNAB API client. Budget-scoped calls need a budget ID."""

    def __init__(
        self,
        api_key: str,
        budget_id: str = "",
        logger: Logger | None = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ):
        if not api_key:
            raise ConfigError("api key is required")

        self.budget_id = budget_id
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self.session = session or self._create_session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
        )

        self.logger.debug(f"YNAB client initialized with base URL: {self.base_url}")

    def _budget_path(self, suffix: str) -> str:
        if not self.budget_id:
            raise ConfigError("budget id is required")
        return f"/budgets/{self.budget_id}{suffix}"

    @staticmethod
    def _create_session() -> requests.Session:
        retry = Retry(
            total=DEFAULT_RETRY_COUNT,
            backoff_factor=DEFAULT_RETRY_BACKOFF,
            status_forcelist=RETRY_STATUS_CODES,
            allowed_methods=frozenset({"GET", "POST"}),
            raise_on_status=False,
        )
        session = requests.Session()
        adapter = HTTPAdapter(max_retries=retry)
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    def _request(
        self,
        method: str,
        path: str,
        action: str,
        params: dict[str, str] | None = None,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send a request and return the decoded JSON body."""
        try:
            response = self.session.request(
                method,
                f"{self.base_url}{path}",
                params=params or None,
                json=body,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise YNABAPIError(f"{action}: {e}", ErrorKind.NETWORK) from e

        if response.status_code >= 400:
            try:
                error_body = response.json()
            except ValueError:
                error_body = None
            raise map_http_error(response.status_code, error_body)

        try:
            data = response.json()
        except ValueError as e:
            raise YNABAPIError(f"{action}: invalid JSON response: {e}") from e
        if not isinstance(data, dict):
            raise YNABAPIError(f"{action}: unexpected response body")
        return data

    def get_budgets(self, include_accounts: bool = False) -> list[BudgetSummary]:
        """Fetch all budgets of the authenticated user."""
        self.logger.debug(f"Fetching budgets (include_accounts={include_accounts})")

        params = {"include_accounts": "true"} if include_accounts else None
        data = self._request("GET", "/budgets", "fetching budgets", params=params)
        budgets = [
            BudgetSummary.from_dict(b) for b in data.get("data", {}).get("budgets", [])
        ]

        self.logger.debug(f"Fetched {len(budgets)} budgets")
        return budgets

    def get_accounts(self) -> list[Account]:
        """Fetch all accounts of the configured budget."""
        self.logger.debug(f"Fetching accounts for budget: {self.budget_id}")

        data = self._request(
            "GET",
            self._budget_path("/accounts"),
            "fetching accounts",
        )
        accounts = [
            Account.from_dict(a) for a in data.get("data", {}).get("accounts", [])
        ]

        self.logger.debug(f"Fetched {len(accounts)} accounts")
        return accounts

    def get_transactions(
        self,
        options: TransactionOptions | None = None,
    ) -> list[YNABTransaction]:
        """Fetch all transactions of the configured budget."""
        self.logger.debug(f"Fetching transactions for budget: {self.budget_id}")

        data = self._request(
            "GET",
            self._budget_path("/transactions"),
            "fetching transactions",
            params=(options or TransactionOptions()).to_params(),
        )
        transactions = self._transactions_from(data)

        self.logger.debug(f"Fetched {len(transactions)} transactions")
        return transactions

    def get_transactions_by_account(
        self,
        account_id: str,
        options: TransactionOptions | None = None,
    ) -> list[YNABTransaction]:
        """Fetch the transactions of a single account."""
        self.logger.debug(
            f"Fetching transactions for account: {account_id} in budget: {self.budget_id}",
        )

        data = self._request(
            "GET",
            self._budget_path(f"/accounts/{account_id}/transactions"),
            "fetching account transactions",
            params=(options or TransactionOptions()).to_params(),
        )
        transactions = self._transactions_from(data)

        self.logger.debug(
            f"Fetched {len(transactions)} transactions for account {account_id}",
        )
        return transactions

    def create_transaction(self, transaction: SaveTransaction) -> SaveTransactionsResponse:
        """Create a single transaction."""
        return self._create({"transaction": transaction.to_dict()})

    def create_transactions(
        self,
        transactions: list[SaveTransaction],
    ) -> SaveTransactionsResponse:
        """Create several transactions in one request."""
        if not transactions:
            raise ValueError("at least one transaction is required")
        return self._create({"transactions": [t.to_dict() for t in transactions]})

    def _create(self, body: dict[str, Any]) -> SaveTransactionsResponse:
        self.logger.debug(f"Creating transactions in budget: {self.budget_id}")

        data = self._request(
            "POST",
            self._budget_path("/transactions"),
            "creating transactions",
            body=body,
        )
        result = SaveTransactionsResponse.from_dict(data)

        self.logger.debug(f"Created {len(result.transaction_ids)} transactions")
        if result.duplicate_import_ids:
            self.logger.debug(
                f"Skipped {len(result.duplicate_import_ids)} duplicate transactions",
            )
        return result

    @staticmethod
    def _transactions_from(data: dict[str, Any]) -> list[YNABTransaction]:
        return [
            YNABTransaction.from_dict(t)
            for t in data.get("data", {}).get("transactions", [])
        ]
