"""Shape raw HTTP responses into result models."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional, Union

from .errors import MalformedResponseError
from .models import ResponseModelDefinition

logger = logging.getLogger(__name__)


class JsonObject(dict):
    """Decoded JSON object that also allows attribute access to its keys.

    Keys that collide with ``dict`` methods (``items``, ``keys``, ``get``...)
    are only reachable with item access.
    """

    def __getattr__(self, name: str) -> Any:
        try:
            return self[name]
        except KeyError:
            raise AttributeError(name) from None


class ResultModel(JsonObject):
    status_code: int

    def __init__(self, status_code: int, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.__dict__["status_code"] = status_code


class ResponseShaper:
    def __init__(self, default_model: Optional[ResponseModelDefinition] = None) -> None:
        self.default_model = default_model or ResponseModelDefinition(name="getResponse")

    def shape(
        self,
        status_code: int,
        raw_body: Union[str, bytes, None],
        model: Optional[ResponseModelDefinition] = None,
    ) -> ResultModel:
        model = model or self.default_model
        raw_body = raw_body or ""

        if raw_body.strip():
            try:
                # json.loads detects the encoding of bytes; UnicodeDecodeError is a ValueError.
                decoded = json.loads(raw_body, object_hook=JsonObject)
            except ValueError as exc:
                raise MalformedResponseError(
                    f"Response body is not valid JSON: {exc}", _text(raw_body)
                ) from exc
            if not isinstance(decoded, dict):
                raise MalformedResponseError(
                    f"Expected a JSON object, got {type(decoded).__name__}", _text(raw_body)
                )
        else:
            decoded = {}

        result = ResultModel(status_code, {model.status_field: status_code})
        if model.status_field in decoded:
            # The body wins; result.status_code still holds the HTTP status.
            logger.debug(
                "Body field %r overrides HTTP status %s", model.status_field, status_code
            )
        result.update(decoded)
        return result


def _text(raw_body: Union[str, bytes]) -> str:
    if isinstance(raw_body, bytes):
        return raw_body.decode("utf-8", errors="replace")
    return raw_body
