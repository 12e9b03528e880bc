"""Test helper that stubs the ``requests.Session`` surface used by ``LedgerClient``.

Tests register canned responses per path; every call's arguments are recorded
so assertions can check query parameters and headers.
"""

from __future__ import annotations

import json
from typing import Any

import requests


class StubResponse:
    def __init__(self, status_code: int = 200, body: Any = None, text: str | None = None) -> None:
        self.status_code = status_code
        self._body = body
        self._text = text

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=None)

    def json(self) -> Any:
        if self._text is not None:
            return json.loads(self._text)
        return self._body


class HttpStub:
    """Minimal stub matching the ``requests.Session`` calls the client makes.

    Parameters
    ----------
    routes:
        Mapping of URL path (e.g. ``"/api/transactions"``) to either a
        :class:`StubResponse` or an exception instance to raise.
    """

    def __init__(self, routes: dict[str, StubResponse | Exception]) -> None:
        self._routes = routes
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def _dispatch(self, method: str, url: str, **kwargs: Any) -> StubResponse:
        path = url.split("://", 1)[-1]
        path = path[path.index("/") :] if "/" in path else "/"
        self.calls.append({"method": method, "path": path, **kwargs})
        result = self._routes.get(path, StubResponse(404, {"message": "not found"}))
        if isinstance(result, Exception):
            raise result
        return result

    def get(self, url: str, **kwargs: Any) -> StubResponse:
        return self._dispatch("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> StubResponse:
        return self._dispatch("POST", url, **kwargs)

    def close(self) -> None:
        self.closed = True
