from __future__ import annotations

import threading
import uuid
from datetime import date

import pytest
import requests

from split_ledger.remote import LedgerClient
from tests.helpers.http_stub import HttpStub, StubResponse

BASE = "http://ledger.test"


def _tx_wire(day: str, amount: float | None = 1.0, **extra) -> dict:
    return {
        "transactionId": str(uuid.uuid4()),
        "transactionDate": day,
        "amount": amount,
        "accountInId": None,
        "accountOutId": str(uuid.uuid4()),
        "isShared": False,
        "transactionPartyName": "Corner Market",
        "categoryName": "Groceries",
        **extra,
    }


def _client(routes) -> tuple[LedgerClient, HttpStub]:
    stub = HttpStub(routes)
    return LedgerClient(BASE + "/", session=stub), stub  # type: ignore[arg-type]


def test_list_transactions_sends_range_and_sorts_newest_first():
    client, stub = _client(
        {
            "/api/transactions": StubResponse(
                200,
                [
                    _tx_wire("2024-01-01"),
                    _tx_wire("2024-03-01T00:00:00"),
                    _tx_wire("2024-02-01"),
                ],
            )
        }
    )

    items = client.list_transactions(date(2024, 1, 1), date(2024, 3, 31), "tok-123")

    assert [t.transaction_date for t in items] == [
        date(2024, 3, 1),
        date(2024, 2, 1),
        date(2024, 1, 1),
    ]
    (call,) = stub.calls
    assert call["params"] == {"startDate": "2024-01-01", "endDate": "2024-03-31"}
    assert call["headers"]["Authorization"] == "Bearer tok-123"


def test_empty_token_is_sent_without_authorization_header():
    client, stub = _client({"/api/transactionparties": StubResponse(200, [])})

    assert client.list_parties("") == []
    assert "Authorization" not in stub.calls[0]["headers"]


def test_list_parties_sorted_case_insensitively():
    wire = [
        {"transactionPartyId": str(uuid.uuid4()), "transactionPartyName": name}
        for name in ("bob", "Alice", "alice")
    ]
    client, _ = _client({"/api/transactionparties": StubResponse(200, wire)})

    assert [p.transaction_party_name for p in client.list_parties("t")] == [
        "Alice",
        "alice",
        "bob",
    ]


def test_null_amount_is_tolerated():
    client, _ = _client({"/api/transactions": StubResponse(200, [_tx_wire("2024-01-01", None)])})

    (item,) = client.list_transactions(date(2024, 1, 1), date(2024, 1, 31))

    assert item.amount is None


@pytest.mark.parametrize(
    "route",
    [
        requests.ConnectionError("connection refused"),
        requests.Timeout("slow"),
        StubResponse(401, {"message": "Unauthorized"}),
        StubResponse(500, {"message": "boom"}),
        StubResponse(200, text="<html>not json</html>"),
        StubResponse(200, {"message": "not a list"}),
        StubResponse(200, [{"transactionDate": "garbage"}]),
    ],
)
def test_failures_yield_an_empty_list(route, caplog: pytest.LogCaptureFixture):
    client, _ = _client({"/api/transactions": route, "/api/transactionparties": route})

    with caplog.at_level("WARNING", logger="split_ledger.remote"):
        assert client.list_transactions(date(2024, 1, 1), date(2024, 1, 31), "t") == []
        assert client.list_parties("t") == []

    assert caplog.records


def test_each_call_returns_a_fresh_snapshot():
    client, _ = _client({"/api/transactions": StubResponse(200, [_tx_wire("2024-01-01")])})

    first = client.list_transactions(date(2024, 1, 1), date(2024, 1, 31))
    second = client.list_transactions(date(2024, 1, 1), date(2024, 1, 31))

    assert first is not second
    first.clear()
    assert len(second) == 1


def test_authenticate_returns_user_with_token():
    user_id = str(uuid.uuid4())
    body = {"userId": user_id, "email": "ana@example.com", "firstName": "Ana", "token": "jwt"}
    client, stub = _client({"/api/users/authenticate": StubResponse(200, body)})

    user = client.authenticate("ana@example.com", "pw")

    assert user is not None and user.token == "jwt" and str(user.user_id) == user_id
    assert stub.calls[0]["json"] == {"email": "ana@example.com", "password": "pw"}


@pytest.mark.parametrize(
    "route",
    [StubResponse(401, {"message": "Email or password is incorrect"}), requests.ConnectionError()],
)
def test_authenticate_failure_is_none(route):
    client, _ = _client({"/api/users/authenticate": route})

    assert client.authenticate("ana@example.com", "pw") is None


def test_submit_delivers_result_to_callback():
    client, _ = _client({"/api/transactions": StubResponse(200, [_tx_wire("2024-01-01")])})
    delivered = threading.Event()
    received: list = []

    def _on_result(items):
        received.append(items)
        delivered.set()

    fut = client.submit(
        client.list_transactions, date(2024, 1, 1), date(2024, 1, 31), "t", callback=_on_result
    )

    assert len(fut.result(timeout=5)) == 1
    assert delivered.wait(timeout=5)
    assert len(received[0]) == 1
    client.close()


def test_context_manager_closes_http_session():
    stub = HttpStub({})
    with LedgerClient(BASE, session=stub):  # type: ignore[arg-type]
        pass

    assert stub.closed
