from __future__ import annotations

from typing import Any, Callable, List, Optional

import httpx
import pytest

from pph_api.client import PPHApi


class RecordingTransport(httpx.MockTransport):
    """Mock transport that answers with a fixed response and records requests."""

    def __init__(
        self,
        body: str = "{}",
        status_code: int = 200,
        headers: Optional[dict] = None,
        handler: Optional[Callable[[httpx.Request], httpx.Response]] = None,
    ) -> None:
        self.requests: List[httpx.Request] = []

        def _handle(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            if handler is not None:
                return handler(request)
            return httpx.Response(
                status_code,
                headers={"Content-Type": "application/json", **(headers or {})},
                text=body,
            )

        super().__init__(_handle)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def make_api() -> Callable[..., Any]:
    clients: List[httpx.Client] = []

    def _make(transport: RecordingTransport, **kwargs: Any) -> PPHApi:
        http = httpx.Client(transport=transport)
        clients.append(http)
        return PPHApi("dummyID", "dummyKey", http, **kwargs)

    yield _make
    for http in clients:
        http.close()
