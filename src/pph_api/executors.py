"""HTTP dispatch for prepared requests."""

from __future__ import annotations

import logging

import httpx

from .errors import TransportError
from .logging import redact_payload
from .models import PreparedRequest

logger = logging.getLogger(__name__)


class HttpExecutor:
    def __init__(self, http: httpx.Client) -> None:
        self.http = http

    def send(self, prepared: PreparedRequest, base_url: str) -> httpx.Response:
        url = prepared.url(base_url)
        logger.debug(
            "Sending %s %s operation=%s query=%s",
            prepared.method,
            url,
            prepared.operation,
            redact_payload(dict(prepared.query)),
        )

        try:
            if prepared.body is not None:
                response = self.http.request(
                    prepared.method,
                    url,
                    params=list(prepared.query),
                    data={name: str(value) for name, value in prepared.body},
                )
            else:
                response = self.http.request(prepared.method, url, params=list(prepared.query))
        except httpx.TimeoutException as exc:
            raise TransportError(f"{prepared.operation} timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"{prepared.operation} failed: {exc}") from exc

        if not response.is_success:
            logger.warning(
                "Operation %s returned HTTP %s", prepared.operation, response.status_code
            )
            raise TransportError(
                f"{prepared.operation} returned HTTP {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )
        return response
