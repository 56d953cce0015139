"""Argument validation and request serialization for described operations."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union
from urllib.parse import quote

from pydantic import ConfigDict, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError
from .models import OperationDescriptor, ParameterSchema, PreparedRequest

logger = logging.getLogger(__name__)

# Every PPH operation authenticates with these; values come from the client at call time.
AUTH_PARAMETERS: Tuple[ParameterSchema, ...] = (
    ParameterSchema(name="app_id", type="string", required=True, location="query"),
    ParameterSchema(name="app_key", type="string", required=True, location="query"),
)

_SCALARS = (str, int, float, bool)

_FINITE = ConfigDict(allow_inf_nan=False)

_ADAPTERS: Dict[str, TypeAdapter] = {
    "integer": TypeAdapter(int),
    "number": TypeAdapter(Union[int, float], config=_FINITE),
    "numeric": TypeAdapter(Union[int, float], config=_FINITE),
    "boolean": TypeAdapter(bool),
}


def comma_join(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return ",".join(str(item) for item in value)
    return value


FILTERS: Dict[str, Callable[[Any], Any]] = {
    "comma_join": comma_join,
}


class _TypeMismatch(Exception):
    pass


class RequestPreparer:
    def prepare(
        self,
        descriptor: OperationDescriptor,
        args: Optional[Mapping[str, Any]] = None,
        credentials: Optional[Mapping[str, Any]] = None,
    ) -> PreparedRequest:
        args = dict(args or {})
        credentials = credentials or {}
        errors: List[str] = []

        path = descriptor.uri
        query: List[Tuple[str, Any]] = []
        body: List[Tuple[str, Any]] = []

        schemas = [s for s in AUTH_PARAMETERS if s.name not in descriptor.parameters]
        schemas.extend(descriptor.parameters.values())

        for schema in schemas:
            value = args.get(schema.name)
            if value is None:
                value = schema.default
            if value is None:
                value = credentials.get(schema.name) or None
            if value is None:
                if schema.required:
                    errors.append(f"[{schema.name}] is required")
                elif schema.location == "uri":
                    path = path.replace(f"{{{schema.name}}}", "")
                continue

            try:
                value = self._coerce(schema, value)
            except _TypeMismatch:
                errors.append(f"[{schema.name}] must be of type {schema.type}")
                continue

            if schema.transform is not None:
                value = schema.transform(value)

            if schema.location == "uri":
                path = path.replace(f"{{{schema.name}}}", quote(str(value), safe=""))
            elif schema.location == "body":
                body.append((schema.name, value))
            else:
                query.append((schema.name, value))

        known = {schema.name for schema in schemas}
        for name in args:
            if name not in known:
                errors.append(f"[{name}] is not a defined parameter")

        if errors:
            logger.debug("Rejected arguments for operation=%s: %s", descriptor.name, errors)
            raise ValidationError(errors)

        return PreparedRequest(
            operation=descriptor.name,
            method=descriptor.http_method,
            path=path,
            query=tuple(query),
            body=tuple(body) if descriptor.http_method == "POST" else None,
            response_model=descriptor.response_model,
        )

    def _coerce(self, schema: ParameterSchema, value: Any) -> Any:
        if schema.type == "string":
            if not isinstance(value, _SCALARS):
                raise _TypeMismatch()
            return str(value)

        if schema.type == "array":
            if not isinstance(value, (list, tuple)):
                raise _TypeMismatch()
            if not all(isinstance(item, _SCALARS) for item in value):
                raise _TypeMismatch()
            return list(value)

        if schema.type != "boolean" and isinstance(value, bool):
            raise _TypeMismatch()
        if isinstance(value, str):
            value = value.strip()
        try:
            coerced = _ADAPTERS[schema.type].validate_python(value)
        except PydanticValidationError as exc:
            raise _TypeMismatch() from exc

        if schema.type == "boolean":
            return 1 if coerced else 0
        return coerced
