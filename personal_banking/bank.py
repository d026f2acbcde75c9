"""
Bank Ledger Module

Owns every account, hands out account numbers, and persists the whole
ledger as one JSON document after each mutating operation. Loading never
fails: a missing store yields an empty bank, a corrupt one yields an empty
bank plus a PersistenceCorrupt kept on ``load_error``.
"""

import json
from datetime import date, datetime
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .accounts import Account, AccountType, make_policy
from .config import BankConfig, get_config
from .exceptions import AccountNotFound, PersistenceCorrupt
from .logging_config import get_logger, log_action
from .storage import StoreAdapter, AccountNumberSequence
from .transactions import Transaction


@dataclass
class Passbook:
    """Result of a passbook query; ``is_empty`` when nothing matched"""
    account_number: int
    from_date: Optional[date]
    to_date: Optional[date]
    entries: List[Transaction] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def to_list(self) -> List[Dict[str, str]]:
        return [t.to_dict() for t in self.entries]

    def lines(self) -> List[str]:
        """Printable passbook lines"""
        if self.is_empty:
            return ["-- no transactions --"]
        return [str(t) for t in self.entries]


def _as_date(value: Union[datetime, date, str, None]) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


class Bank:
    """
    Ledger of accounts backed by a key-value store
    """

    def __init__(
        self,
        store: StoreAdapter,
        name: Optional[str] = None,
        config: Optional[BankConfig] = None
    ):
        self.config = config or get_config()
        self.store = store
        self.default_name = name or self.config.bank_name
        self.name = self.default_name
        self.accounts: Dict[int, Account] = {}
        self.sequence = AccountNumberSequence(
            store, key=self.config.sequence_key, seed=self.config.sequence_seed
        )
        self.load_error: Optional[PersistenceCorrupt] = None
        self.logger = get_logger("bank.ledger")

        self.load()

    @property
    def next_account_number(self) -> int:
        """Number the next created account will receive"""
        return max(self.sequence.peek(), self._number_floor())

    def _number_floor(self) -> int:
        return max(self.accounts, default=-1) + 1

    def create_account(
        self,
        account_type: Union[AccountType, str],
        holder_name: str,
        initial_deposit: Any,
        daily_limit: Optional[Any] = None
    ) -> Account:
        """
        Open a new account and persist the ledger.

        Args:
            account_type: ``savings`` or ``current``
            holder_name: Account holder
            initial_deposit: Opening balance, zero or more
            daily_limit: Savings daily withdrawal cap (config default if omitted)

        Returns:
            Created Account
        """
        account_type = AccountType.parse(account_type)
        if account_type == AccountType.SAVINGS and daily_limit is None:
            daily_limit = self.config.default_daily_limit
        policy = make_policy(account_type, daily_limit)

        # Validate before consuming a number from the sequence
        account = Account.open(0, holder_name, initial_deposit, policy)
        account.account_number = self.sequence.allocate(floor=self._number_floor())
        self.accounts[account.account_number] = account

        log_action(
            self.logger, "info",
            f"{account_type.value} account {account.account_number} created",
            action="account_created",
            resource=str(account.account_number),
            extra={"holder": holder_name, "balance": str(account.balance)}
        )

        self.save()
        return account

    def get_account(self, account_number: Union[int, str]) -> Optional[Account]:
        """Get account by number, or None"""
        try:
            return self.accounts.get(int(account_number))
        except (TypeError, ValueError):
            return None

    def require_account(self, account_number: Union[int, str]) -> Account:
        """Get account by number or raise AccountNotFound"""
        account = self.get_account(account_number)
        if account is None:
            raise AccountNotFound(account_number)
        return account

    def deposit(self, account_number: Union[int, str], amount: Any) -> Account:
        """Deposit into an account and persist"""
        account = self.require_account(account_number)
        account.deposit(amount)
        log_action(
            self.logger, "info", f"Deposit to {account.account_number}",
            action="deposit", resource=str(account.account_number),
            extra={"amount": str(account.transactions[-1].amount), "balance": str(account.balance)}
        )
        self.save()
        return account

    def withdraw(self, account_number: Union[int, str], amount: Any) -> Account:
        """Withdraw from an account and persist"""
        account = self.require_account(account_number)
        account.withdraw(amount)
        log_action(
            self.logger, "info", f"Withdrawal from {account.account_number}",
            action="withdraw", resource=str(account.account_number),
            extra={"amount": str(account.transactions[-1].amount), "balance": str(account.balance)}
        )
        self.save()
        return account

    def list_transactions(
        self,
        account_number: Union[int, str],
        from_date: Union[date, str, None] = None,
        to_date: Union[date, str, None] = None
    ) -> Passbook:
        """
        Passbook for an account between two calendar dates, both inclusive.

        Either bound may be omitted. Dates are compared on the local calendar
        day of each record, so ``to_date`` covers that whole day.
        """
        account = self.require_account(account_number)
        start = _as_date(from_date)
        end = _as_date(to_date)

        entries = [
            t for t in account.transactions
            if (start is None or t.local_date >= start)
            and (end is None or t.local_date <= end)
        ]
        return Passbook(account.account_number, start, end, entries)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "accounts": [account.to_dict() for account in self.accounts.values()],
        }

    def save(self) -> bool:
        """Write the whole ledger to the store; failures are logged, not raised"""
        payload = json.dumps(self.to_dict())
        if not self.store.write(self.config.storage_key, payload):
            self.logger.error(f"Saving ledger {self.name!r} failed")
            return False
        return True

    def load(self) -> None:
        """Replace in-memory state with the stored ledger"""
        self.load_error = None
        self.name = self.default_name
        self.accounts = {}

        raw = self.store.read(self.config.storage_key)
        if raw is None:
            return

        try:
            name, accounts = self._parse(raw)
        except PersistenceCorrupt as e:
            self.load_error = e
            self.logger.error(f"Load failed, starting with an empty ledger: {e}")
            return

        self.name = name
        self.accounts = accounts
        self.logger.info(f"Loaded {len(accounts)} accounts for {name!r}")

    def _parse(self, raw: str):
        try:
            document = json.loads(raw)
            if not isinstance(document, dict):
                raise TypeError("ledger document is not an object")
            name = document.get("name") or self.default_name
            accounts: Dict[int, Account] = {}
            for record in document.get("accounts") or []:
                account = Account.from_dict(record)
                if account.account_number in accounts:
                    raise ValueError(f"duplicate account number {account.account_number}")
                accounts[account.account_number] = account
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            raise PersistenceCorrupt(f"Stored ledger is unreadable: {e}") from e
        return str(name), accounts
