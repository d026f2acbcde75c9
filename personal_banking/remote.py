"""
Remote Banking Client Module

REST client for a remote banking service that mirrors the ledger's rules.
When the service answers ``/ping`` callers may route operations to it
instead of the local bank; the two paths are never mixed in one operation.
"""

import httpx
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Union

from .exceptions import RemoteError

logger = logging.getLogger("bank.remote")


class RemoteBankClient:
    """REST client for the remote banking service"""
    
    def __init__(
        self,
        base_url: str = "http://localhost:8001",
        timeout: float = 2.0,
        client: Optional[httpx.Client] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client or httpx.Client(timeout=timeout)
    
    def ping(self) -> bool:
        """Check whether the service is reachable"""
        try:
            r = self._client.get(f"{self.base_url}/ping")
            return r.status_code == 200
        except httpx.HTTPError as e:
            logger.info(f"Remote bank not reachable at {self.base_url}: {e}")
            return False
    
    def _get(self, path: str, params: Optional[Dict[str, str]] = None) -> httpx.Response:
        try:
            response = self._client.get(f"{self.base_url}{path}", params=params)
        except httpx.HTTPError as e:
            logger.error(f"Remote call {path} failed: {e}")
            raise RemoteError(f"Remote bank unavailable: {e}") from e
        
        if response.status_code >= 400:
            raise RemoteError(response.text or "Server error", status_code=response.status_code)
        return response
    
    def _post(self, path: str, form: Dict[str, Any]) -> httpx.Response:
        try:
            response = self._client.post(
                f"{self.base_url}{path}",
                data={k: str(v) for k, v in form.items()}
            )
        except httpx.HTTPError as e:
            logger.error(f"Remote call {path} failed: {e}")
            raise RemoteError(f"Remote bank unavailable: {e}") from e
        
        if response.status_code >= 400:
            raise RemoteError(response.text or "Server error", status_code=response.status_code)
        return response
    
    def create_account(
        self,
        account_type: str,
        holder_name: str,
        initial_deposit: Any,
        daily_limit: Optional[Any] = None
    ) -> Dict[str, Any]:
        """Open an account remotely; the reply carries ``accountNumber``"""
        form = {
            "type": account_type,
            "holder": holder_name,
            "deposit": initial_deposit,
        }
        if daily_limit is not None:
            form["dailyLimit"] = daily_limit
        return self._post("/create", form).json()
    
    def get_account(self, account_number: Union[int, str]) -> Dict[str, Any]:
        """Account summary: number, holder, balance and type"""
        return self._get(f"/account/{account_number}").json()
    
    def deposit(self, account_number: Union[int, str], amount: Any) -> str:
        """Deposit remotely, returning the service's text reply"""
        return self._post(f"/account/{account_number}/deposit", {"amount": amount}).text
    
    def withdraw(self, account_number: Union[int, str], amount: Any) -> str:
        """Withdraw remotely, returning the service's text reply"""
        return self._post(f"/account/{account_number}/withdraw", {"amount": amount}).text
    
    def list_transactions(
        self,
        account_number: Union[int, str],
        from_date: Union[date, str, None] = None,
        to_date: Union[date, str, None] = None
    ) -> List[Dict[str, Any]]:
        """Fetch passbook entries as ``{date, type, amount, balance}`` dicts"""
        params = {}
        if from_date:
            params["from"] = str(from_date)
        if to_date:
            params["to"] = str(to_date)
        return self._get(f"/account/{account_number}/passbook", params).json()
    
    def close(self):
        """Close the HTTP client"""
        self._client.close()
