"""PeoplePerHour service description and the loader that turns it into descriptors."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping

from .models import OperationDescriptor, ParameterSchema, ResponseModelDefinition
from .serialization import FILTERS

logger = logging.getLogger(__name__)


_RETURN_ATTRS: Dict[str, Any] = {
    "a": {
        "description": "Optional list of attributes to return",
        "type": "string",
        "location": "query",
    },
}

_PAGING: Dict[str, Any] = {
    "page": {
        "description": "The page # to request. Defaults to 1",
        "type": "integer",
        "location": "query",
    },
    "sort": {
        "description": "The attribute to use for sorting. Use .desc suffix to order descending",
        "type": "string",
        "location": "query",
    },
}


def _csv(description: str) -> Dict[str, Any]:
    return {"description": description, "type": "array", "location": "query", "filter": "comma_join"}


PPH_API_DESCRIPTION: Dict[str, Any] = {
    "api_version": "v1",
    "operations": {
        "User": {
            "http_method": "GET",
            "uri": "/v1/user/{id}",
            "response_model": "getResponse",
            "parameters": {
                **_RETURN_ATTRS,
                "id": {"description": "ID of member", "type": "numeric", "location": "uri"},
            },
        },
        "UserList": {
            "http_method": "GET",
            "uri": "/v1/user/list",
            "response_model": "getResponse",
            "parameters": {
                **_RETURN_ATTRS,
                **_PAGING,
                "f[mem_id]": {
                    "description": "Filter by member ID",
                    "type": "numeric",
                    "location": "query",
                },
            },
        },
        "UserLogin": {
            "description": "Log a member in; the session cookie is kept when cookies persist.",
            "http_method": "POST",
            "uri": "/v1/user/login",
            "response_model": "getResponse",
            "parameters": {
                "email": {"type": "string", "required": True, "location": "body"},
                "password": {"type": "string", "required": True, "location": "body"},
            },
        },
        "IsGuest": {
            "description": "Test whether the current session is logged in.",
            "http_method": "GET",
            "uri": "/v1/user/isguest",
            "response_model": "getResponse",
            "parameters": {},
        },
        "IsMember": {
            "description": "Test whether a PeoplePerHour member exists with a particular email address.",
            "http_method": "GET",
            "uri": "/v1/user/ismember",
            "response_model": "getResponse",
            "parameters": {
                "email": {
                    "description": "Encrypted email address",
                    "type": "string",
                    "required": True,
                    "location": "query",
                },
            },
        },
        "Hourlie": {
            "http_method": "GET",
            "uri": "/v1/hourlie/{id}",
            "response_model": "getResponse",
            "parameters": {
                **_RETURN_ATTRS,
                "id": {"description": "ID of hourlie", "type": "numeric", "location": "uri"},
            },
        },
        "HourlieList": {
            "http_method": "GET",
            "uri": "/v1/hourlie/list",
            "response_model": "getResponse",
            "parameters": {
                **_RETURN_ATTRS,
                **_PAGING,
                "page_size": {"type": "integer", "location": "query"},
                "attachment_sizes": _csv("Image sizes to return for attachments"),
                "currencies": _csv("Currencies to return prices in"),
                "f[q]": {"description": "Free text search", "type": "string", "location": "query"},
                "f[cat]": {"description": "Category ID", "type": "string", "location": "query"},
                "f[min_price]": {"type": "numeric", "location": "query"},
                "f[max_price]": {"type": "numeric", "location": "query"},
                "f[ids]": _csv("Only return these hourlie IDs"),
                "f[featured]": {"type": "boolean", "location": "query"},
                "f[exclude_hourlies]": _csv("Hourlie IDs to leave out"),
                "f[exclude_owners]": _csv("Member IDs whose hourlies are left out"),
                "f[has_cover_image]": {"type": "boolean", "location": "query"},
                "f[unique_owner]": {"type": "boolean", "location": "query"},
            },
        },
    },
    "models": {
        "getResponse": {"status_field": "code"},
    },
}


def load_operations(description: Mapping[str, Any]) -> List[OperationDescriptor]:
    models = {
        name: ResponseModelDefinition(name=name, status_field=spec.get("status_field", "code"))
        for name, spec in (description.get("models") or {}).items()
    }

    operations: List[OperationDescriptor] = []
    for name, spec in (description.get("operations") or {}).items():
        model_name = spec.get("response_model", "getResponse")
        if model_name not in models:
            raise ValueError(f"{name}: unknown response model {model_name!r}")

        parameters = {
            param_name: _build_parameter(name, param_name, param_spec)
            for param_name, param_spec in (spec.get("parameters") or {}).items()
        }
        operations.append(
            OperationDescriptor(
                name=name,
                http_method=spec.get("http_method", "GET"),
                uri=spec["uri"],
                parameters=parameters,
                response_model=models[model_name],
                description=spec.get("description", ""),
            )
        )
        logger.debug("Loaded operation %s (%d parameters)", name, len(parameters))

    return operations


def _build_parameter(operation: str, name: str, spec: Mapping[str, Any]) -> ParameterSchema:
    transform = None
    filter_name = spec.get("filter")
    if filter_name:
        try:
            transform = FILTERS[filter_name]
        except KeyError:
            raise ValueError(f"{operation}: unknown filter {filter_name!r} on {name}") from None

    return ParameterSchema(
        name=name,
        type=spec.get("type", "string"),
        required=bool(spec.get("required", False)),
        location=spec.get("location", "query"),
        default=spec.get("default"),
        transform=transform,
        description=spec.get("description", ""),
    )
