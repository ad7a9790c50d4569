"""Shared behaviour for resource handlers."""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from typing import Any, ClassVar, TypeVar

from pizzamock.exceptions import BadRequestError, MethodNotAllowedError
from pizzamock.fixtures import ResourceFixtures, User
from pizzamock.routing import MockRequest, MockResponse
from pizzamock.session import SessionState

T = TypeVar("T")


class ResourceHandler:
    """One resource's CRUD surface, callable as a dispatcher handler.

    Subclasses list the verbs they answer in ``methods`` and implement a
    lower-case method per verb taking ``(request, **params)``. Any other verb
    is answered with 405 by the handler itself.
    """

    methods: ClassVar[tuple[str, ...]] = ()

    def __init__(self, fixtures: ResourceFixtures, session: SessionState) -> None:
        self.fixtures = fixtures
        self.session = session

    def __call__(self, request: MockRequest, params: dict[str, Any]) -> MockResponse:
        if request.method not in self.methods:
            raise MethodNotAllowedError(request.method)
        method: Callable[..., MockResponse] = getattr(self, request.method.lower())
        return method(request, **params)

    def authorize(self, request: MockRequest) -> User | None:
        """Require the current session's bearer token. Call before anything else."""
        return self.session.require(request.bearer_token())


def ok(body: Any = None, status: int = 200) -> MockResponse:
    return MockResponse(status=status, body=body)


def required_str(payload: dict[str, Any], key: str, message: str | None = None) -> str:
    """Return a non-blank string field from *payload*.

    Raises:
        BadRequestError: The field is missing, blank or not a string.
    """
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise BadRequestError(message or f"{key} is required")
    return value


def optional_str(payload: dict[str, Any], key: str) -> str | None:
    """Return a string field from *payload*, or None when it is absent or null.

    Raises:
        BadRequestError: The field is present but not a string.
    """
    value = payload.get(key)
    if value is not None and not isinstance(value, str):
        raise BadRequestError(f"{key} must be a string")
    return value


def optional_list(payload: dict[str, Any], key: str) -> list[Any]:
    """Return a list field from *payload*, or an empty list when it is absent or null.

    Raises:
        BadRequestError: The field is present but not a list.
    """
    value = payload.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise BadRequestError(f"{key} must be a list")
    return value


def name_filter(pattern: str | None) -> Callable[[str], bool]:
    """Build a case-insensitive substring predicate where ``*`` matches anything.

    A missing, blank or ``*`` pattern accepts every name.
    """
    pattern = (pattern or "").strip()
    if pattern.strip("*") == "":
        return lambda _name: True
    regex = re.compile(".*".join(re.escape(part) for part in pattern.split("*")), re.IGNORECASE)
    return lambda name: regex.search(name) is not None


def paginate(items: Sequence[T], query: dict[str, str]) -> tuple[list[T], bool]:
    """Slice *items* by the zero-based ``page`` and ``limit`` query parameters.

    Without ``limit`` everything is returned.

    Returns:
        The page of items and whether more remain after it.

    Raises:
        BadRequestError: page or limit is not a non-negative integer.
    """
    if not query.get("limit"):
        return list(items), False
    try:
        page = int(query.get("page") or 0)
        limit = int(query["limit"])
    except ValueError as exc:
        raise BadRequestError("page and limit must be integers") from exc
    if page < 0 or limit < 1:
        raise BadRequestError("page must be >= 0 and limit >= 1")
    start = page * limit
    return list(items[start : start + limit]), len(items) > start + limit
