"""Operation registry for the PeoplePerHour API client."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Mapping

from .description import load_operations
from .errors import DuplicateOperationError, UnknownOperationError
from .models import OperationDescriptor

logger = logging.getLogger(__name__)


class OperationRegistry:
    def __init__(self) -> None:
        self._operations: Dict[str, OperationDescriptor] = {}
        self._frozen = False

    @classmethod
    def from_description(cls, description: Mapping[str, Any]) -> "OperationRegistry":
        registry = cls()
        for descriptor in load_operations(description):
            registry.register(descriptor)
        registry.freeze()
        logger.debug("Operation registry built: %s", ", ".join(registry.names()))
        return registry

    def register(self, descriptor: OperationDescriptor) -> None:
        if self._frozen:
            raise RuntimeError("Operation registry is frozen")
        key = descriptor.name.lower()
        if key in self._operations:
            raise DuplicateOperationError(descriptor.name)
        self._operations[key] = descriptor

    def freeze(self) -> None:
        self._frozen = True

    def resolve(self, name: str) -> OperationDescriptor:
        try:
            return self._operations[name.lower()]
        except KeyError:
            raise UnknownOperationError(name) from None

    def names(self) -> List[str]:
        return [descriptor.name for descriptor in self._operations.values()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._operations

    def __iter__(self) -> Iterator[OperationDescriptor]:
        return iter(self._operations.values())

    def __len__(self) -> int:
        return len(self._operations)
