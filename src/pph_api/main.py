"""CLI entry point for the PeoplePerHour API client."""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Dict, List, Optional, Sequence

from .client import PPHApi
from .config import get_settings
from .errors import (
    MalformedResponseError,
    TransportError,
    UnknownOperationError,
    ValidationError,
)
from .logging import configure_logging
from .models import OperationDescriptor


def _parse_arguments(
    pairs: Sequence[str], descriptor: Optional[OperationDescriptor] = None
) -> Dict[str, Any]:
    """Turn ``name=value`` pairs into call arguments.

    Repeated names build a list, and so does a single value for an ``array``
    parameter of ``descriptor``.
    """
    arguments: Dict[str, Any] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise SystemExit(f"Invalid argument {pair!r}, expected name=value")
        if name in arguments:
            existing = arguments[name]
            arguments[name] = [*existing, value] if isinstance(existing, list) else [existing, value]
        else:
            arguments[name] = value

    if descriptor is not None:
        for name, schema in descriptor.parameters.items():
            if schema.type == "array" and isinstance(arguments.get(name), str):
                arguments[name] = [arguments[name]]
    return arguments


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Call the PeoplePerHour API")
    parser.add_argument("operation", nargs="?", help="Operation name, e.g. UserList")
    parser.add_argument("arguments", nargs="*", help="Operation arguments as name=value")
    parser.add_argument(
        "--app-id",
        default=None,
        help="Application ID (default: PPH_API_ID)",
    )
    parser.add_argument(
        "--app-key",
        default=None,
        help="Application key (default: PPH_API_KEY)",
    )
    parser.add_argument("--base-url", default=None, help="Override the API base URL")
    parser.add_argument(
        "--list",
        action="store_true",
        help="List the available operations and exit",
    )
    return parser


def _describe(api: PPHApi) -> List[str]:
    lines: List[str] = []
    for descriptor in api.operations():
        lines.append(f"{descriptor.name}  {descriptor.http_method} {descriptor.uri}")
        for schema in descriptor.parameters.values():
            flag = "required" if schema.required else "optional"
            lines.append(f"    {schema.name} ({schema.type}, {schema.location}, {flag})")
    return lines


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level)

    api = PPHApi(
        args.app_id or settings.api_id,
        args.app_key or settings.api_key,
        base_url=args.base_url or settings.api_base_url,
        timeout=settings.api_timeout_seconds,
        verify_ssl=settings.api_verify_ssl,
        persist_cookies=settings.persist_cookies,
        user_agent=settings.user_agent,
    )
    with api:
        if args.list or not args.operation:
            print("\n".join(_describe(api)))
            return 0

        try:
            descriptor = api.registry.resolve(args.operation)
            result = api.call(descriptor.name, _parse_arguments(args.arguments, descriptor))
        except (UnknownOperationError, ValidationError) as exc:
            print(str(exc), file=sys.stderr)
            return 2
        except (TransportError, MalformedResponseError) as exc:
            print(str(exc), file=sys.stderr)
            return 1

    print(json.dumps(result, indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":
    sys.exit(main())
