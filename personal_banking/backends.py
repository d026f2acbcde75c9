"""
Execution backends

Callers pick one backend per session: the remote service when it answers
``/ping``, otherwise the local bank. Both expose the same operations and
return plain dicts/strings so the caller renders them the same way.
"""

from datetime import date
from typing import Any, Dict, List, Optional, Union

from .bank import Bank
from .config import BankConfig, get_config
from .logging_config import get_logger
from .remote import RemoteBankClient
from .storage import SQLiteStore


logger = get_logger("bank.backends")


class LocalBackend:
    """Runs every operation against an in-process Bank"""

    mode = "local"

    def __init__(self, bank: Bank):
        self.bank = bank

    def create_account(self, account_type: str, holder_name: str, initial_deposit: Any,
                       daily_limit: Optional[Any] = None) -> Dict[str, Any]:
        return self.bank.create_account(account_type, holder_name, initial_deposit, daily_limit).summary()

    def get_account(self, account_number: Union[int, str]) -> Dict[str, Any]:
        return self.bank.require_account(account_number).summary()

    def deposit(self, account_number: Union[int, str], amount: Any) -> str:
        account = self.bank.deposit(account_number, amount)
        return f"Deposited {account.transactions[-1].amount}. Balance: {account.balance}"

    def withdraw(self, account_number: Union[int, str], amount: Any) -> str:
        account = self.bank.withdraw(account_number, amount)
        return f"Withdrawn {account.transactions[-1].amount}. Balance: {account.balance}"

    def list_transactions(self, account_number: Union[int, str],
                          from_date: Union[date, str, None] = None,
                          to_date: Union[date, str, None] = None) -> List[Dict[str, Any]]:
        return self.bank.list_transactions(account_number, from_date, to_date).to_list()

    def close(self) -> None:
        self.bank.store.close()


class RemoteBackend(RemoteBankClient):
    """Runs every operation against the remote service"""

    mode = "remote"


def select_backend(config: Optional[BankConfig] = None, prefer_remote: bool = True):
    """
    Use the remote service if enabled and reachable, else the local bank.

    Returns:
        RemoteBackend or LocalBackend
    """
    config = config or get_config()

    if prefer_remote and config.remote_enabled:
        remote = RemoteBackend(config.remote_url, timeout=config.remote_timeout)
        if remote.ping():
            logger.info(f"Backend available at {config.remote_url}, using server")
            return remote
        remote.close()
        logger.info("No backend detected, using local store")

    bank = Bank(SQLiteStore(config.database_path), config=config)
    if bank.load_error:
        logger.warning(f"Started with an empty ledger: {bank.load_error}")
    return LocalBackend(bank)
