"""Exception taxonomy for the PeoplePerHour API client."""

from __future__ import annotations

from typing import List, Optional


class PPHApiError(Exception):
    pass


class UnknownOperationError(PPHApiError, LookupError):
    def __init__(self, name: str) -> None:
        super().__init__(f"No operation found named {name}")
        self.name = name


class DuplicateOperationError(PPHApiError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Operation already registered: {name}")
        self.name = name


class ValidationError(PPHApiError):
    """One or more call arguments failed their parameter schema.

    ``errors`` keeps every failure in the order it was found, formatted as
    ``[<parameter>] <reason>``.
    """

    def __init__(self, errors: List[str]) -> None:
        super().__init__("Validation errors: " + "; ".join(errors))
        self.errors = list(errors)


class TransportError(PPHApiError):
    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class MalformedResponseError(PPHApiError):
    def __init__(self, message: str, body: Optional[str] = None) -> None:
        super().__init__(message)
        self.body = body
