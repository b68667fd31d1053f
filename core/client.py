from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from core.errors import BackendError
from core.models import Account, Transfer

logger = logging.getLogger(__name__)

TRANSFERS_PATH = "/api/transferfunds"
ACCOUNTS_PATH = "/api/account"


def _error_message(response: httpx.Response, default: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return default
    if isinstance(body, dict):
        for key in ("message", "error"):
            value = body.get(key)
            if value:
                return str(value)
    return default


class BackendClient:
    """Thin wrapper over the ERP REST endpoints used by the fund transfer page."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "BackendClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(self, method: str, path: str, *, default_error: str, json: Optional[dict] = None) -> Any:
        try:
            response = self._client.request(method, path, json=json)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise BackendError(default_error) from exc
        if not response.is_success:
            message = _error_message(response, default_error)
            logger.warning("%s %s returned %s: %s", method, path, response.status_code, message)
            raise BackendError(message, status_code=response.status_code)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            logger.warning("%s %s returned a non-JSON body", method, path)
            raise BackendError(default_error, status_code=response.status_code) from exc

    def _list(self, path: str, default_error: str) -> List[Dict[str, Any]]:
        data = self._request("GET", path, default_error=default_error)
        if not isinstance(data, list):
            return []
        return [item for item in data if isinstance(item, dict)]

    def list_transfers(self) -> List[Transfer]:
        return [Transfer.from_api(raw) for raw in self._list(TRANSFERS_PATH, "Error loading transfers")]

    def list_accounts(self) -> List[Account]:
        return [Account.from_api(raw) for raw in self._list(ACCOUNTS_PATH, "Error loading accounts")]

    def create_transfer(self, payload: Dict[str, Any]) -> Optional[Transfer]:
        data = self._request("POST", TRANSFERS_PATH, default_error="Error creating transfer", json=payload)
        if isinstance(data, dict):
            # Some deployments wrap the created record.
            raw = data.get("transfer") if isinstance(data.get("transfer"), dict) else data
            return Transfer.from_api(raw)
        return None

    def create_account(self, payload: Dict[str, Any]) -> Optional[Account]:
        data = self._request("POST", ACCOUNTS_PATH, default_error="Error adding account", json=payload)
        if isinstance(data, dict):
            raw = data.get("account") if isinstance(data.get("account"), dict) else data
            return Account.from_api(raw)
        return None
