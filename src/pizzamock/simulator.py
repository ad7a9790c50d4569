"""The mock backend: fixtures, session and route table for one test run."""

from __future__ import annotations

import datetime
import json as jsonlib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final

from pizzamock.config import PizzamockSettings, get_settings
from pizzamock.fixtures import IdAllocator, ResourceFixtures, UserSeed
from pizzamock.handlers import (
    AuthHandler,
    CurrentUserHandler,
    FranchiseCollectionHandler,
    FranchiseeHandler,
    FranchiseHandler,
    LegacyLogoutHandler,
    MenuHandler,
    OrderHandler,
    ResourceHandler,
    StoreCollectionHandler,
    StoreHandler,
    UserHandler,
    UserListHandler,
)
from pizzamock.logging import get_logger
from pizzamock.routing import Dispatcher, MockRequest, MockResponse
from pizzamock.session import SessionState, make_token_factory

LOG = get_logger(__name__)

# Registration order is precedence order: the first path match wins.
DEFAULT_ROUTES: Final[tuple[tuple[str, type[ResourceHandler], str], ...]] = (
    ("/api/auth", AuthHandler, "auth"),
    ("/api/user/me", CurrentUserHandler, "current_user"),
    ("/api/user/logout", LegacyLogoutHandler, "legacy_logout"),
    ("/api/order/menu", MenuHandler, "menu"),
    ("/api/franchisee", FranchiseeHandler, "franchisee"),
    ("/api/franchise", FranchiseCollectionHandler, "franchises"),
    ("/api/franchise/{franchise_id:int}", FranchiseHandler, "franchise"),
    ("/api/franchise/{franchise_id:int}/store", StoreCollectionHandler, "stores"),
    ("/api/franchise/{franchise_id:int}/store/{store_id:int}", StoreHandler, "store"),
    ("/api/order", OrderHandler, "orders"),
    ("/api/user/{user_id:int}", UserHandler, "user"),
    ("/api/user", UserListHandler, "users"),
)


@dataclass
class Exchange:
    """One intercepted request and what the simulator did with it.

    ``response`` and ``route`` are None for passthrough requests.
    """

    request: MockRequest
    response: MockResponse | None
    route: str | None
    timestamp: datetime.datetime = field(
        default_factory=lambda: datetime.datetime.now(datetime.UTC)
    )

    @property
    def mocked(self) -> bool:
        return self.response is not None


def _build_har_entry(exchange: Exchange) -> dict[str, Any]:
    """Build a HAR 1.2 entry dict from a journal exchange."""
    request = exchange.request
    query = "&".join(f"{k}={v}" for k, v in request.query.items())
    entry: dict[str, Any] = {
        "startedDateTime": exchange.timestamp.isoformat(),
        "time": 0,
        "request": {
            "method": request.method,
            "url": request.path + (f"?{query}" if query else ""),
            "headers": [{"name": k, "value": v} for k, v in request.headers.items()],
            "cookies": [],
            "queryString": [{"name": k, "value": v} for k, v in request.query.items()],
        },
        "response": {
            "status": 0,
            "statusText": "",
            "headers": [],
            "cookies": [],
            "content": {"mimeType": "", "size": 0},
        },
        "comment": f"route={exchange.route}" if exchange.route else "passthrough",
    }
    if request.body:
        entry["request"]["postData"] = {
            "mimeType": request.header("content-type") or "",
            "text": request.body,
        }
    response = exchange.response
    if response is not None:
        body = response.to_json()
        headers = response.transport_headers()
        entry["response"] = {
            "status": response.status,
            "statusText": "",
            "headers": [{"name": k, "value": v} for k, v in headers.items()],
            "cookies": [],
            "content": {
                "mimeType": headers.get("content-type", ""),
                "size": len(body.encode("utf-8")),
                "text": body,
            },
        }
    return entry


class BackendSimulator:
    """Deterministic stand-in for the storefront's backend.

    Each instance owns its own fixtures, session and route table, so tests
    running side by side never share state. Requests are answered one at a
    time and every handler runs to completion before ``handle()`` returns.

    Args:
        users: Valid accounts for this run (see ``ResourceFixtures``).
        settings: Token and id allocation settings. Defaults to ``get_settings()``.
        register_defaults: Install ``DEFAULT_ROUTES``. Pass False to build a
            custom route table with ``dispatcher.register()``.

    Example:
        >>> sim = BackendSimulator()
        >>> sim.request("PUT", "/api/auth", json={"email": "d@jwt.com", "password": "a"}).status
        200
    """

    def __init__(
        self,
        users: UserSeed | None = None,
        settings: PizzamockSettings | None = None,
        register_defaults: bool = True,
    ) -> None:
        self.settings = settings or get_settings()
        self.fixtures = ResourceFixtures(
            users,
            IdAllocator(self.settings.id_strategy, self.settings.id_seed),
        )
        self.session = SessionState(
            self.fixtures,
            make_token_factory(self.settings.token_strategy, self.settings.fixed_token),
        )
        self.dispatcher = Dispatcher()
        self.journal: list[Exchange] = []
        if register_defaults:
            for template, handler_cls, name in DEFAULT_ROUTES:
                self.dispatcher.register(template, handler_cls(self.fixtures, self.session), name)

    def handle(self, request: MockRequest) -> MockResponse | None:
        """Answer *request*, or return None when it should pass through unmocked."""
        match = self.dispatcher.match(request.path)
        if match is None:
            LOG.debug("request_passthrough", method=request.method, path=request.path)
            self.journal.append(Exchange(request, None, None))
            return None

        response = self.dispatcher.invoke(match, request)
        LOG.info(
            "request_mocked",
            method=request.method,
            path=request.path,
            route=match.route.name,
            status=response.status,
        )
        self.journal.append(Exchange(request, response, match.route.name))
        return response

    def request(
        self,
        method: str,
        url: str,
        json: Any = None,
        token: str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> MockResponse | None:
        """Build and handle a request in one call (for tests and the CLI).

        Args:
            method: HTTP method.
            url: Path or full URL, optionally with a query string.
            json: Body to serialize as JSON.
            token: Bearer token for the Authorization header.
            headers: Extra request headers.
        """
        all_headers = dict(headers or {})
        body = None
        if json is not None:
            all_headers.setdefault("content-type", "application/json")
            body = jsonlib.dumps(json)
        if token is not None:
            all_headers["authorization"] = f"Bearer {token}"
        return self.handle(MockRequest.from_url(method, url, all_headers, body))

    def reset(self) -> None:
        """Restore seed fixtures and empty the session and journal."""
        self.fixtures.reset()
        self.session.clear()
        self.journal.clear()
        LOG.debug("simulator_reset")

    def mocked_exchanges(self) -> list[Exchange]:
        return [e for e in self.journal if e.mocked]

    def to_har(self) -> dict[str, Any]:
        """Return the journal as a HAR 1.2 document."""
        from pizzamock import __version__

        return {
            "log": {
                "version": "1.2",
                "creator": {"name": "pizzamock", "version": __version__},
                "entries": [_build_har_entry(e) for e in self.journal],
            }
        }

    def export_har(self, path: Path | str) -> Path:
        """Write the journal as HAR to *path* and return the path."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(jsonlib.dumps(self.to_har(), indent=2), encoding="utf-8")
        LOG.info("har_exported", path=str(path), entries=len(self.journal))
        return path
