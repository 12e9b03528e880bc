"""HTTP client for the ledger service boundary (used by display code and the CLI).

The client mirrors what a list screen needs: fetch a range of transactions or
the party list with a bearer token, then hand back a sorted snapshot. Network
failures never propagate out of the list calls; they are logged and the
caller gets an empty list.

An empty token is valid and means "anonymous": no ``Authorization`` header is
sent and the server decides what to do with the request.

Calls are synchronous. Display code that must not block can use
:meth:`LedgerClient.submit`, which runs a call on a small worker pool and
delivers the result to a callback. There is no deduplication or cancellation
of in-flight requests.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import date
from typing import Any, TypeVar

import requests
from pydantic import ValidationError

from .logging_setup import get_logger
from .models import TransactionDto, TransactionPartyDto, UserDto
from .transactions import format_day, sort_parties, sort_transactions

_logger = get_logger("split_ledger.remote")

T = TypeVar("T")

DEFAULT_TIMEOUT = 10.0


class LedgerClient:
    def __init__(
        self,
        base_url: str,
        *,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_workers: int = 2,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._http = session or requests.Session()
        self._timeout = timeout
        self._max_workers = max_workers
        self._pool: ThreadPoolExecutor | None = None

    # ---- Plumbing ------------------------------------------------------------

    def _headers(self, token: str | None) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def get_data(
        self, path: str, token: str | None = "", params: Mapping[str, str] | None = None
    ) -> Any:
        """GET ``path`` and return the decoded JSON body.

        Raises ``requests.RequestException`` on transport errors and non-2xx
        responses and ``ValueError`` on an undecodable body.
        """

        resp = self._http.get(
            f"{self.base_url}{path}",
            headers=self._headers(token),
            params=dict(params) if params else None,
            timeout=self._timeout,
        )
        resp.raise_for_status()
        return resp.json()

    def _get_list(self, path: str, token: str | None, params=None) -> list[Any]:
        try:
            body = self.get_data(path, token, params)
        except (requests.RequestException, ValueError) as e:
            _logger.warning("GET %s failed: %s", path, e)
            return []
        if not isinstance(body, list):
            _logger.warning("GET %s returned %s, expected a list", path, type(body).__name__)
            return []
        return body

    # ---- Queries -------------------------------------------------------------

    def list_transactions(
        self, start_date: date, end_date: date, token: str | None = ""
    ) -> list[TransactionDto]:
        """Return transactions dated within the inclusive range, newest first."""

        body = self._get_list(
            "/api/transactions",
            token,
            {"startDate": format_day(start_date), "endDate": format_day(end_date)},
        )
        try:
            items = [TransactionDto.model_validate(item) for item in body]
        except ValidationError as e:
            _logger.warning("discarding malformed transactions payload: %s", e)
            return []
        return sort_transactions(items)

    def list_parties(self, token: str | None = "") -> list[TransactionPartyDto]:
        """Return transaction parties ordered by name, case-insensitively."""

        body = self._get_list("/api/transactionparties", token)
        try:
            items = [TransactionPartyDto.model_validate(item) for item in body]
        except ValidationError as e:
            _logger.warning("discarding malformed parties payload: %s", e)
            return []
        return sort_parties(items)

    def authenticate(self, email: str, password: str) -> UserDto | None:
        """Exchange credentials for a :class:`UserDto` carrying a bearer token."""

        try:
            resp = self._http.post(
                f"{self.base_url}/api/users/authenticate",
                json={"email": email, "password": password},
                headers=self._headers(None),
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            _logger.warning("authenticate failed: %s", e)
            return None
        if resp.status_code != 200:
            return None
        try:
            return UserDto.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            _logger.warning("discarding malformed authenticate response: %s", e)
            return None

    # ---- Non-blocking use ----------------------------------------------------

    def submit(
        self,
        fn: Callable[..., T],
        *args: Any,
        callback: Callable[[T], None] | None = None,
    ) -> Future[T]:
        """Run ``fn(*args)`` on the worker pool; ``callback`` receives its result."""

        if self._pool is None:
            self._pool = ThreadPoolExecutor(
                max_workers=self._max_workers, thread_name_prefix="ledger-client"
            )
        fut = self._pool.submit(fn, *args)
        if callback is not None:

            def _deliver(done: Future[T]) -> None:
                if done.exception() is None:
                    callback(done.result())
                else:
                    _logger.error("background request failed: %s", done.exception())

            fut.add_done_callback(_deliver)
        return fut

    def close(self) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=True)
            self._pool = None
        self._http.close()

    def __enter__(self) -> LedgerClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


__all__ = ["DEFAULT_TIMEOUT", "LedgerClient"]
