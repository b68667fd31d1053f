from __future__ import annotations

import httpx
import pytest

from core.client import BackendClient
from core.errors import BackendError


def test_list_transfers_and_accounts(backend, client):
    backend.transfers = [{"transferId": "T1", "fromAccountId": "A1", "toAccount": "Ops", "amount": 10, "date": "2024-01-01"}]
    backend.accounts = [{"accountId": "A1", "name": "Main", "balance": "250.5"}]
    transfers = client.list_transfers()
    accounts = client.list_accounts()
    assert transfers[0].transfer_id == "T1"
    assert transfers[0].date.year == 2024
    assert accounts[0].balance == 250.5
    assert [r.url.path for r in backend.requests] == ["/api/transferfunds", "/api/account"]


def test_non_list_responses_are_treated_as_empty():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"unexpected": True}))
    with BackendClient("http://erp.test", transport=transport) as c:
        assert c.list_transfers() == []
        assert c.list_accounts() == []


def test_create_transfer_posts_payload(backend, client):
    created = client.create_transfer({"fromAccountId": "A1", "toAccount": "Ops", "amount": 5.0})
    assert created.oid == "t1"
    assert created.status == "Pending"
    assert backend.posts()[0].url.path == "/api/transferfunds"


def test_create_account_unwraps_envelope():
    transport = httpx.MockTransport(
        lambda request: httpx.Response(201, json={"account": {"accountId": "ACC-9", "name": "Main"}})
    )
    with BackendClient("http://erp.test", transport=transport) as c:
        assert c.create_account({"name": "Main"}).account_id == "ACC-9"


@pytest.mark.parametrize(
    "body, expected",
    [
        ({"message": "Insufficient balance"}, "Insufficient balance"),
        ({"error": "Account not found"}, "Account not found"),
        ({}, "Error creating transfer"),
    ],
)
def test_backend_error_messages(backend, client, body, expected):
    backend.fail_with = 400
    backend.fail_body = body
    with pytest.raises(BackendError) as excinfo:
        client.create_transfer({"amount": 1})
    assert excinfo.value.message == expected
    assert excinfo.value.status_code == 400


def test_transport_failure_becomes_backend_error():
    def boom(request):
        raise httpx.ConnectError("connection refused", request=request)

    with BackendClient("http://erp.test", transport=httpx.MockTransport(boom)) as c:
        with pytest.raises(BackendError) as excinfo:
            c.list_accounts()
    assert excinfo.value.message == "Error loading accounts"
    assert excinfo.value.status_code is None


def test_redirect_is_an_error_not_an_empty_list():
    transport = httpx.MockTransport(lambda request: httpx.Response(302, headers={"location": "/login"}))
    with BackendClient("http://erp.test", transport=transport) as c:
        with pytest.raises(BackendError) as excinfo:
            c.list_transfers()
    assert excinfo.value.status_code == 302
    assert excinfo.value.message == "Error loading transfers"
