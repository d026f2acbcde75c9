"""
Transaction Record Module

Immutable passbook entries. One record is written for every
balance-affecting event on an account, including the opening deposit.
"""

from decimal import Decimal, InvalidOperation
from datetime import datetime, date
from dataclasses import dataclass, field
from typing import Any, Dict
from enum import Enum


class TransactionKind(Enum):
    """Balance-affecting events"""
    OPEN = "OPEN"
    DEPOSIT = "DEPOSIT"
    WITHDRAW = "WITHDRAW"


def local_now() -> datetime:
    """Current wall-clock time as a timezone-aware local datetime"""
    return datetime.now().astimezone()


def to_decimal(value: Any) -> Decimal:
    """Convert stored or user-supplied numbers to Decimal without float noise"""
    if isinstance(value, bool):
        raise ValueError(f"Cannot convert {value!r} to Decimal")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f"Cannot convert {value!r} to Decimal") from None
    if not result.is_finite():
        raise ValueError(f"Amount must be a finite number, got {value!r}")
    return result


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, treating naive values as local time"""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed


@dataclass(frozen=True)
class Transaction:
    """
    One passbook line.

    ``balance`` is the account balance right after the event was applied.
    """
    kind: TransactionKind
    amount: Decimal
    balance: Decimal
    timestamp: datetime = field(default_factory=local_now)

    @property
    def local_date(self) -> date:
        """Calendar date of the event in local time"""
        return self.timestamp.astimezone().date()

    def to_dict(self) -> Dict[str, str]:
        """Convert to the stored ``{date, type, amount, balance}`` shape"""
        return {
            "date": self.timestamp.isoformat(),
            "type": self.kind.value,
            "amount": str(self.amount),
            "balance": str(self.balance),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Transaction':
        """Rebuild a record from its stored shape"""
        return cls(
            kind=TransactionKind(data["type"]),
            amount=to_decimal(data["amount"]),
            balance=to_decimal(data["balance"]),
            timestamp=parse_timestamp(data["date"]),
        )

    def __str__(self) -> str:
        return f"{self.timestamp.isoformat()} | {self.kind.value} | {self.amount} | Balance: {self.balance}"
