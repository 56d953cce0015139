"""PeoplePerHour API client facade."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

import httpx

from .config import DEFAULT_BASE_URL, Settings, get_settings
from .description import PPH_API_DESCRIPTION
from .executors import HttpExecutor
from .logging import redact_payload
from .models import OperationDescriptor
from .operation_registry import OperationRegistry
from .response import ResponseShaper, ResultModel
from .serialization import RequestPreparer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Command:
    name: str
    args: Dict[str, Any] = field(default_factory=dict)


class PPHApi:
    """
    Client for the PeoplePerHour REST API.

    Every operation is described as data in ``PPH_API_DESCRIPTION`` and sent
    through one generic path: the registry resolves the operation, the
    request preparer validates and places the arguments, the executor sends
    the request and the shaper builds a ``ResultModel``::

        api = PPHApi("my-app-id", "my-app-key")
        api.user(id=12345)["data"]["job_title"]
        api.hourlie_list({"f[q]": "php", "f[min_price]": 10})

    ``app_id`` and ``app_key`` are read from the client on every call, so
    changing them after construction affects the next request.
    """

    def __init__(
        self,
        api_id: Optional[str],
        api_key: Optional[str],
        client: Optional[httpx.Client] = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 20.0,
        verify_ssl: bool = True,
        persist_cookies: bool = False,
        user_agent: Optional[str] = None,
        description: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.api_id = api_id
        self.api_key = api_key
        self.base_url = base_url
        self.persist_cookies = persist_cookies

        self._owns_client = client is None
        if client is None:
            headers = {"Accept": "application/json"}
            if user_agent:
                headers["User-Agent"] = user_agent
            client = httpx.Client(
                timeout=timeout,
                verify=verify_ssl,
                follow_redirects=True,
                headers=headers,
            )
        self.http = client

        self.registry = OperationRegistry.from_description(description or PPH_API_DESCRIPTION)
        self.preparer = RequestPreparer()
        self.executor = HttpExecutor(self.http)
        self.shaper = ResponseShaper()

    @classmethod
    def from_settings(
        cls, settings: Optional[Settings] = None, client: Optional[httpx.Client] = None
    ) -> "PPHApi":
        settings = settings or get_settings()
        return cls(
            settings.api_id,
            settings.api_key,
            client,
            base_url=settings.api_base_url,
            timeout=settings.api_timeout_seconds,
            verify_ssl=settings.api_verify_ssl,
            persist_cookies=settings.persist_cookies,
            user_agent=settings.user_agent,
        )

    def credentials(self) -> Dict[str, Optional[str]]:
        return {"app_id": self.api_id, "app_key": self.api_key}

    def operations(self) -> List[OperationDescriptor]:
        return list(self.registry)

    def call(
        self, operation_name: str, args: Optional[Mapping[str, Any]] = None, **kwargs: Any
    ) -> ResultModel:
        arguments = {**(args or {}), **kwargs}
        descriptor = self.registry.resolve(operation_name)
        prepared = self.preparer.prepare(descriptor, arguments, self.credentials())

        logger.info("Calling operation=%s args=%s", descriptor.name, redact_payload(arguments))
        saved_cookies = None if self.persist_cookies else httpx.Cookies(self.http.cookies)
        try:
            response = self.executor.send(prepared, self.base_url)
        finally:
            if saved_cookies is not None:
                # Drop whatever this call set; the jar goes back to what the caller had.
                self.http.cookies = saved_cookies
        return self.shaper.shape(response.status_code, response.content, prepared.response_model)

    def get_command(self, name: str, args: Optional[Mapping[str, Any]] = None) -> Command:
        descriptor = self.registry.resolve(name)
        return Command(name=descriptor.name, args=dict(args or {}))

    def execute(self, command: Command) -> ResultModel:
        return self.call(command.name, command.args)

    def user(self, args: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> ResultModel:
        return self.call("User", args, **kwargs)

    def user_list(self, args: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> ResultModel:
        return self.call("UserList", args, **kwargs)

    def user_login(self, args: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> ResultModel:
        return self.call("UserLogin", args, **kwargs)

    def is_guest(self) -> ResultModel:
        return self.call("IsGuest")

    def is_member(self, args: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> ResultModel:
        return self.call("IsMember", args, **kwargs)

    def hourlie(self, args: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> ResultModel:
        return self.call("Hourlie", args, **kwargs)

    def hourlie_list(self, args: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> ResultModel:
        return self.call("HourlieList", args, **kwargs)

    def close(self) -> None:
        if self._owns_client:
            self.http.close()

    def __enter__(self) -> "PPHApi":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
