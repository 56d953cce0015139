"""Internal models for operation descriptions."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Tuple

PARAMETER_TYPES = frozenset({"string", "integer", "number", "numeric", "boolean", "array"})
PARAMETER_LOCATIONS = frozenset({"uri", "query", "body"})

_PLACEHOLDER = re.compile(r"{([^{}]+)}")


@dataclass(frozen=True)
class ParameterSchema:
    name: str
    type: str = "string"
    required: bool = False
    location: str = "query"
    default: Any = None
    transform: Optional[Callable[[Any], Any]] = None
    description: str = ""

    def __post_init__(self) -> None:
        if self.type not in PARAMETER_TYPES:
            raise ValueError(f"Unsupported parameter type for {self.name}: {self.type}")
        if self.location not in PARAMETER_LOCATIONS:
            raise ValueError(f"Unsupported parameter location for {self.name}: {self.location}")


@dataclass(frozen=True)
class ResponseModelDefinition:
    name: str
    status_field: str = "code"


@dataclass(frozen=True)
class OperationDescriptor:
    name: str
    http_method: str
    uri: str
    parameters: Mapping[str, ParameterSchema]
    response_model: ResponseModelDefinition
    description: str = ""

    def __post_init__(self) -> None:
        method = self.http_method.upper()
        object.__setattr__(self, "http_method", method)
        # Copy so later changes to the caller's dict cannot leak in.
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))

        placeholders = set(_PLACEHOLDER.findall(self.uri))
        for key, schema in self.parameters.items():
            if key != schema.name:
                raise ValueError(f"{self.name}: parameter key {key!r} does not match {schema.name!r}")
            if schema.location == "uri" and schema.name not in placeholders:
                raise ValueError(f"{self.name}: uri parameter {schema.name!r} missing from {self.uri}")
            if schema.location == "body" and method != "POST":
                raise ValueError(f"{self.name}: body parameter {schema.name!r} requires POST")

        unbound = placeholders - {
            name for name, schema in self.parameters.items() if schema.location == "uri"
        }
        if unbound:
            raise ValueError(f"{self.name}: no uri parameter for {', '.join(sorted(unbound))}")


@dataclass(frozen=True)
class PreparedRequest:
    operation: str
    method: str
    path: str
    query: Tuple[Tuple[str, Any], ...] = ()
    body: Optional[Tuple[Tuple[str, Any], ...]] = None
    response_model: ResponseModelDefinition = field(
        default_factory=lambda: ResponseModelDefinition(name="getResponse")
    )

    def url(self, base_url: str) -> str:
        return base_url.rstrip("/") + self.path
