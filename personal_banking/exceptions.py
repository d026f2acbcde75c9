"""
Domain errors for banking operations.

All errors derive from ValueError so callers validating input with
``except ValueError`` keep working.
"""

from typing import Optional


class BankingError(ValueError):
    """Base class for every caller-recoverable banking error"""


class InvalidAmount(BankingError):
    """Raised for non-positive deposit or withdrawal amounts"""

    def __init__(self, message: str = "Amount must be positive"):
        super().__init__(message)


class InsufficientBalance(BankingError):
    """Raised when a withdrawal exceeds the current balance"""

    def __init__(self, message: str = "Insufficient balance"):
        super().__init__(message)


class DailyLimitExceeded(BankingError):
    """Raised when a savings withdrawal would break the daily cap"""

    def __init__(self, message: str = "Daily limit exceeded"):
        super().__init__(message)


class AccountNotFound(BankingError):
    """Raised when an account number is not known to the bank"""

    def __init__(self, account_number=None):
        self.account_number = account_number
        if account_number is None:
            super().__init__("Account not found")
        else:
            super().__init__(f"Account {account_number} not found")


class PersistenceCorrupt(BankingError):
    """
    Stored state could not be parsed.

    Never raised out of Bank.load(); the bank keeps it on ``load_error``
    and logs it instead.
    """


class RemoteError(BankingError):
    """
    The remote banking service rejected a request or could not be reached.

    ``message`` is the service's plain-text error body when there was one.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)
