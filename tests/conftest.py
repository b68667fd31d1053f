"""Shared fixtures: model factories and an in-memory fake of the ERP backend."""

from __future__ import annotations

import json
from typing import Any, Dict, List

import httpx
import pytest

from core.client import BackendClient
from core.models import Account, Transfer


def make_account(**raw: Any) -> Account:
    return Account.from_api(raw)


def make_transfer(**raw: Any) -> Transfer:
    return Transfer.from_api(raw)


class FakeBackend:
    """Serves /api/transferfunds and /api/account from lists, recording requests."""

    def __init__(self):
        self.transfers: List[Dict[str, Any]] = []
        self.accounts: List[Dict[str, Any]] = []
        self.requests: List[httpx.Request] = []
        self.fail_with: int | None = None
        self.fail_body: Dict[str, Any] = {}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, json=self.fail_body)
        path = request.url.path
        if path == "/api/transferfunds":
            if request.method == "GET":
                return httpx.Response(200, json=self.transfers)
            body = json.loads(request.content)
            created = {"_id": f"t{len(self.transfers) + 1}", "status": "Pending", **body}
            self.transfers.append(created)
            return httpx.Response(201, json=created)
        if path == "/api/account":
            if request.method == "GET":
                return httpx.Response(200, json=self.accounts)
            body = json.loads(request.content)
            created = {"_id": f"a{len(self.accounts) + 1}", **body}
            self.accounts.append(created)
            return httpx.Response(201, json=created)
        return httpx.Response(404, json={"error": "not found"})

    def posts(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def client(backend: FakeBackend):
    c = BackendClient("http://erp.test", transport=httpx.MockTransport(backend.handler))
    yield c
    c.close()
