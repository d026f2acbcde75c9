"""
Account Management Module

An account is one deposit/history base composed with a withdrawal policy.
The policy decides whether a withdrawal may proceed:

- CurrentPolicy: bounded only by the balance.
- SavingsPolicy: bounded by the balance and by a cumulative daily cap that
  resets lazily the first time a withdrawal is attempted on a new calendar day.

The account type is derived from the policy. In storage the presence of
``dailyLimit`` marks a savings account.
"""

from abc import ABC, abstractmethod
from decimal import Decimal, ROUND_HALF_UP
from datetime import date
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional
from enum import Enum

from .exceptions import InvalidAmount, InsufficientBalance, DailyLimitExceeded
from .transactions import Transaction, TransactionKind, to_decimal


DEFAULT_DAILY_LIMIT = Decimal("20000")

CURRENCY_PLACES = 2
CENT = Decimal(1).scaleb(-CURRENCY_PLACES)
MAX_AMOUNT = Decimal("1000000000000")


class AccountType(Enum):
    """Account variants"""
    SAVINGS = "savings"
    CURRENT = "current"

    @classmethod
    def parse(cls, value: Any) -> 'AccountType':
        """Parse a variant name such as ``"Savings"`` or ``AccountType.CURRENT``"""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown account type: {value!r} (expected savings or current)") from None


def local_today() -> date:
    """Current calendar date in local time"""
    return date.today()


def coerce_amount(amount: Any) -> Decimal:
    """
    Convert a caller-supplied amount, mapping garbage to InvalidAmount.

    Amounts are limited to whole cents and to MAX_AMOUNT in magnitude so
    that balance arithmetic stays exact within the decimal context.
    """
    try:
        value = to_decimal(amount)
    except ValueError:
        raise InvalidAmount(f"Invalid amount: {amount!r}") from None

    if abs(value) > MAX_AMOUNT:
        raise InvalidAmount(f"Amount cannot exceed {MAX_AMOUNT}")
    if value != value.quantize(CENT, rounding=ROUND_HALF_UP):
        raise InvalidAmount(f"Amount cannot have more than {CURRENCY_PLACES} decimal places")
    return value


class WithdrawalPolicy(ABC):
    """Decides whether a withdrawal may proceed"""

    account_type: ClassVar[AccountType]

    @abstractmethod
    def authorize(self, balance: Decimal, amount: Decimal) -> None:
        """Raise a BankingError if ``amount`` may not be withdrawn"""

    def record(self, amount: Decimal) -> None:
        """Note a successful withdrawal"""

    def to_dict(self) -> Dict[str, str]:
        """Variant-specific fields for storage"""
        return {}


@dataclass
class CurrentPolicy(WithdrawalPolicy):
    """Unlimited withdrawals up to the balance"""

    account_type: ClassVar[AccountType] = AccountType.CURRENT

    def authorize(self, balance: Decimal, amount: Decimal) -> None:
        if amount > balance:
            raise InsufficientBalance()


@dataclass
class SavingsPolicy(WithdrawalPolicy):
    """Withdrawals capped per calendar day"""

    account_type: ClassVar[AccountType] = AccountType.SAVINGS

    daily_limit: Decimal = DEFAULT_DAILY_LIMIT
    withdrawn_today: Decimal = Decimal("0")
    today: Optional[date] = None

    def __post_init__(self):
        if self.today is None:
            self.today = local_today()
        self.daily_limit = to_decimal(self.daily_limit)
        self.withdrawn_today = to_decimal(self.withdrawn_today)
        if self.daily_limit <= 0:
            raise InvalidAmount("Daily limit must be positive")
        if self.withdrawn_today < 0:
            raise ValueError("Withdrawn-today total cannot be negative")

    @property
    def remaining_today(self) -> Decimal:
        """Amount still withdrawable on ``today``, ignoring the balance"""
        return max(self.daily_limit - self.withdrawn_today, Decimal("0"))

    def roll_over(self, current: date) -> None:
        """Reset the running total when the calendar day has changed"""
        if current != self.today:
            self.withdrawn_today = Decimal("0")
            self.today = current

    def authorize(self, balance: Decimal, amount: Decimal) -> None:
        self.roll_over(local_today())
        # Balance failure takes precedence over the daily cap
        if amount > balance:
            raise InsufficientBalance()
        if self.withdrawn_today + amount > self.daily_limit:
            raise DailyLimitExceeded()

    def record(self, amount: Decimal) -> None:
        self.withdrawn_today += amount

    def to_dict(self) -> Dict[str, str]:
        return {
            "dailyLimit": str(self.daily_limit),
            "withdrawnToday": str(self.withdrawn_today),
            "today": self.today.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SavingsPolicy':
        today = data.get("today")
        daily_limit = data["dailyLimit"]
        return cls(
            # A null limit still marks a savings account
            daily_limit=DEFAULT_DAILY_LIMIT if daily_limit is None else to_decimal(daily_limit),
            withdrawn_today=to_decimal(data.get("withdrawnToday", "0")),
            # Older documents may hold a full timestamp here
            today=date.fromisoformat(str(today)[:10]) if today else None,
        )


def make_policy(account_type: AccountType, daily_limit: Optional[Any] = None) -> WithdrawalPolicy:
    """Build the withdrawal policy for a variant"""
    if account_type == AccountType.SAVINGS:
        if daily_limit is None:
            return SavingsPolicy()
        return SavingsPolicy(daily_limit=coerce_amount(daily_limit))
    if daily_limit is not None:
        raise ValueError("Daily limit applies to savings accounts only")
    return CurrentPolicy()


@dataclass
class Account:
    """
    Bank account owning its balance and passbook.

    Balance only moves through ``deposit`` and ``withdraw``; both append a
    Transaction whose ``balance`` equals the new account balance. A failed
    operation leaves balance and history untouched.
    """
    account_number: int
    holder_name: str
    policy: WithdrawalPolicy
    balance: Decimal = Decimal("0")
    transactions: List[Transaction] = field(default_factory=list)

    @classmethod
    def open(
        cls,
        account_number: int,
        holder_name: str,
        initial_deposit: Any,
        policy: Optional[WithdrawalPolicy] = None
    ) -> 'Account':
        """
        Open an account with an OPEN record for the initial deposit.

        A zero initial deposit is allowed; a negative one is rejected.
        """
        amount = coerce_amount(initial_deposit)
        if amount < 0:
            raise InvalidAmount("Initial deposit cannot be negative")

        account = cls(
            account_number=account_number,
            holder_name=holder_name,
            policy=policy if policy is not None else CurrentPolicy(),
            balance=amount,
        )
        account._log(TransactionKind.OPEN, amount)
        return account

    @property
    def account_type(self) -> AccountType:
        return self.policy.account_type

    @property
    def is_savings(self) -> bool:
        return self.account_type == AccountType.SAVINGS

    def _log(self, kind: TransactionKind, amount: Decimal) -> Transaction:
        transaction = Transaction(kind=kind, amount=amount, balance=self.balance)
        self.transactions.append(transaction)
        return transaction

    def deposit(self, amount: Any) -> Transaction:
        """Add funds; amount must be positive"""
        amount = coerce_amount(amount)
        if amount <= 0:
            raise InvalidAmount()

        self.balance += amount
        return self._log(TransactionKind.DEPOSIT, amount)

    def withdraw(self, amount: Any) -> Transaction:
        """Remove funds subject to the account's withdrawal policy"""
        amount = coerce_amount(amount)
        if amount <= 0:
            raise InvalidAmount()

        self.policy.authorize(self.balance, amount)
        self.balance -= amount
        self.policy.record(amount)
        return self._log(TransactionKind.WITHDRAW, amount)

    def summary(self) -> Dict[str, Any]:
        """Account information as shown to the holder"""
        return {
            "accountNumber": self.account_number,
            "holderName": self.holder_name,
            "balance": str(self.balance),
            "type": self.account_type.value,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert Account to dictionary for storage"""
        result = {
            "accountNumber": self.account_number,
            "holderName": self.holder_name,
            "balance": str(self.balance),
            "transactions": [t.to_dict() for t in self.transactions],
        }
        result.update(self.policy.to_dict())
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Account':
        """Convert dictionary to Account, picking the variant by ``dailyLimit``"""
        if "dailyLimit" in data:
            policy = SavingsPolicy.from_dict(data)
        else:
            policy = CurrentPolicy()

        balance = to_decimal(data["balance"])
        if balance < 0:
            raise ValueError(f"Negative balance stored for account {data['accountNumber']}")

        return cls(
            account_number=int(data["accountNumber"]),
            holder_name=str(data["holderName"]),
            policy=policy,
            balance=balance,
            transactions=[Transaction.from_dict(t) for t in data.get("transactions") or []],
        )
