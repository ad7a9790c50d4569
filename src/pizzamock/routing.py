"""Request/response descriptors and the ordered route table.

Routes are evaluated in registration order and the first pattern whose path
matches wins, whatever the request method. A handler that does not support
the method answers 405 itself; the dispatcher never tries a later route.
A path that matches nothing is not mocked: ``dispatch()`` returns ``None``
and the interception layer lets the request through.

Pattern grammar::

    /api/order/menu                      exact path
    /api/franchise/{id:int}              typed capture (int or str)
    /api/user/{name}                     untyped capture, same as {name:str}
    /api/*/menu                          one arbitrary segment
    /static/**                           any remaining segments (last only)

Matching ignores the query string and a trailing slash.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Final
from urllib.parse import parse_qsl, urlsplit

from pizzamock.exceptions import BadRequestError, ConfigurationError, PizzamockError
from pizzamock.logging import get_logger

LOG = get_logger(__name__)

_CAPTURE_RE: Final[re.Pattern[str]] = re.compile(r"^\{(?P<name>[A-Za-z_]\w*)(?::(?P<kind>\w+))?\}$")
_INT_SEGMENT_RE: Final[re.Pattern[str]] = re.compile(r"^\d+$")

JSON_CONTENT_TYPE: Final[str] = "application/json"


def _normalize_path(path: str) -> str:
    if len(path) > 1 and path.endswith("/"):
        return path[:-1]
    return path or "/"


@dataclass
class MockRequest:
    """Transport-neutral view of an intercepted request."""

    method: str
    path: str
    query: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    body: str | None = None

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        self.path = _normalize_path(self.path)

    @classmethod
    def from_url(
        cls,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        body: str | None = None,
    ) -> MockRequest:
        """Build a request from a full URL (scheme and host are discarded)."""
        parts = urlsplit(url)
        return cls(
            method=method,
            path=parts.path,
            query=dict(parse_qsl(parts.query, keep_blank_values=True)),
            headers=dict(headers or {}),
            body=body,
        )

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None

    def bearer_token(self) -> str | None:
        """Return the token from ``Authorization: Bearer <token>``, if any."""
        value = self.header("authorization")
        if not value:
            return None
        scheme, _, token = value.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            return None
        return token.strip()

    def json(self) -> dict[str, Any]:
        """Parse the body as a JSON object.

        An empty body parses as ``{}``.

        Raises:
            BadRequestError: If the body is not valid JSON or not an object.
        """
        if not self.body:
            return {}
        try:
            data = json.loads(self.body)
        except json.JSONDecodeError as exc:
            raise BadRequestError(f"Malformed JSON body: {exc.msg}") from exc
        if not isinstance(data, dict):
            raise BadRequestError("Request body must be a JSON object")
        return data


@dataclass
class MockResponse:
    """Synthetic response. ``body=None`` means an empty body."""

    status: int = 200
    body: Any = None
    headers: dict[str, str] = field(default_factory=dict)

    def to_json(self) -> str:
        return "" if self.body is None else json.dumps(self.body)

    def transport_headers(self) -> dict[str, str]:
        """Headers to send on the wire, with a JSON content type when there is a body."""
        headers = dict(self.headers)
        if self.body is not None:
            headers.setdefault("content-type", JSON_CONTENT_TYPE)
        return headers

    @classmethod
    def error(cls, exc: PizzamockError) -> MockResponse:
        return cls(status=exc.status, body={"error": exc.message})


@dataclass(frozen=True)
class _Segment:
    kind: str  # "literal", "capture", "wildcard", "tail"
    value: str = ""
    converter: str = "str"


class PathPattern:
    """Compiled path template. See the module docstring for the grammar."""

    _CONVERTERS: Final[frozenset[str]] = frozenset({"int", "str"})

    def __init__(self, template: str, segments: list[_Segment]) -> None:
        self.template = template
        self._segments = segments

    def __repr__(self) -> str:
        return f"PathPattern({self.template!r})"

    @classmethod
    def parse(cls, template: str) -> PathPattern:
        """Compile *template*.

        Raises:
            ConfigurationError: Unknown converter, repeated capture name, or a
                ``**`` that is not the last segment.
        """
        if not template.startswith("/"):
            raise ConfigurationError(f"Route template must start with '/': {template}")
        parts = [p for p in _normalize_path(template).split("/")[1:] if p]
        segments: list[_Segment] = []
        seen: set[str] = set()
        for index, part in enumerate(parts):
            if part == "**":
                if index != len(parts) - 1:
                    raise ConfigurationError(f"'**' must be the last segment: {template}")
                segments.append(_Segment("tail"))
                continue
            if part == "*":
                segments.append(_Segment("wildcard"))
                continue
            capture = _CAPTURE_RE.match(part)
            if capture is None:
                segments.append(_Segment("literal", part))
                continue
            name, kind = capture.group("name"), capture.group("kind") or "str"
            if kind not in cls._CONVERTERS:
                raise ConfigurationError(f"Unknown converter '{kind}' in {template}")
            if name in seen:
                raise ConfigurationError(f"Capture '{name}' repeated in {template}")
            seen.add(name)
            segments.append(_Segment("capture", name, kind))
        return cls(template, segments)

    def match(self, path: str) -> dict[str, Any] | None:
        """Return the converted captures if *path* matches, else None."""
        parts = [p for p in _normalize_path(urlsplit(path).path).split("/")[1:] if p]
        captures: dict[str, Any] = {}
        for index, segment in enumerate(self._segments):
            if segment.kind == "tail":
                return captures
            if index >= len(parts):
                return None
            part = parts[index]
            if segment.kind == "literal" and part != segment.value:
                return None
            if segment.kind == "capture":
                if segment.converter == "int":
                    if not _INT_SEGMENT_RE.match(part):
                        return None
                    captures[segment.value] = int(part)
                else:
                    captures[segment.value] = part
        if len(parts) != len(self._segments):
            return None
        return captures


Handler = Callable[[MockRequest, dict[str, Any]], MockResponse]


@dataclass(frozen=True)
class Route:
    pattern: PathPattern
    handler: Handler
    name: str


@dataclass(frozen=True)
class RouteMatch:
    route: Route
    params: dict[str, Any]


class Dispatcher:
    """Ordered (pattern, handler) table with first-match-wins lookup."""

    def __init__(self) -> None:
        self._routes: list[Route] = []

    def __len__(self) -> int:
        return len(self._routes)

    @property
    def routes(self) -> list[Route]:
        return list(self._routes)

    def register(self, template: str, handler: Handler, name: str | None = None) -> Route:
        """Append a route. Earlier registrations take precedence."""
        route = Route(PathPattern.parse(template), handler, name or template)
        self._routes.append(route)
        LOG.debug("route_registered", template=template, name=route.name, position=len(self._routes))
        return route

    def match(self, path: str) -> RouteMatch | None:
        for route in self._routes:
            params = route.pattern.match(path)
            if params is not None:
                return RouteMatch(route, params)
        return None

    def invoke(self, match: RouteMatch, request: MockRequest) -> MockResponse:
        """Run the matched handler, turning PizzamockError into an error response."""
        try:
            return match.route.handler(request, match.params)
        except PizzamockError as exc:
            LOG.info(
                "handler_error",
                route=match.route.name,
                method=request.method,
                path=request.path,
                status=exc.status,
                error=exc.message,
            )
            return MockResponse.error(exc)

    def dispatch(self, request: MockRequest) -> MockResponse | None:
        """Answer *request*, or return None when no route matches its path."""
        match = self.match(request.path)
        if match is None:
            return None
        return self.invoke(match, request)
