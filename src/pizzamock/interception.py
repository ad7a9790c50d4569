"""Playwright adapters that route a page's API calls through a simulator.

Each adapter turns Playwright's request into a ``MockRequest`` and asks the
simulator for an answer. It fulfills the route with that answer, or falls
back to the network when no route matched.

Both the sync and async flavours dispatch synchronously. A handler never
yields to the event loop while it mutates the fixtures.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pizzamock.config import PizzamockSettings, get_settings
from pizzamock.fixtures import UserSeed
from pizzamock.logging import get_logger
from pizzamock.routing import MockRequest, MockResponse
from pizzamock.simulator import BackendSimulator

if TYPE_CHECKING:
    from playwright.async_api import Route as AsyncRoute
    from playwright.sync_api import Route

LOG = get_logger(__name__)


def to_mock_request(request: Any) -> MockRequest:
    """Convert a Playwright ``Request`` (sync or async API) into a MockRequest."""
    return MockRequest.from_url(
        request.method,
        request.url,
        headers=dict(request.headers),
        body=request.post_data,
    )


def _fulfill_kwargs(response: MockResponse) -> dict[str, Any]:
    return {
        "status": response.status,
        "headers": response.transport_headers(),
        "body": response.to_json(),
    }


class PlaywrightInterceptor:
    """Installs a simulator on a sync-API ``Page`` or ``BrowserContext``.

    Args:
        simulator: Backend answering intercepted requests.
        url_pattern: Playwright URL glob to intercept. Defaults to the
            ``intercept_pattern`` setting.
    """

    def __init__(self, simulator: BackendSimulator, url_pattern: str | None = None) -> None:
        self.simulator = simulator
        self.url_pattern = url_pattern or simulator.settings.intercept_pattern
        self._targets: list[Any] = []

    def _on_route(self, route: Route) -> None:
        request = to_mock_request(route.request)
        response = self.simulator.handle(request)
        if response is None:
            route.fallback()
            return
        route.fulfill(**_fulfill_kwargs(response))

    def install(self, target: Any) -> PlaywrightInterceptor:
        """Start routing *target*'s matching requests through the simulator."""
        target.route(self.url_pattern, self._on_route)
        self._targets.append(target)
        LOG.debug("interceptor_installed", pattern=self.url_pattern)
        return self

    def uninstall(self) -> None:
        """Remove the route from every target it was installed on."""
        while self._targets:
            self._targets.pop().unroute(self.url_pattern, self._on_route)
        LOG.debug("interceptor_uninstalled", pattern=self.url_pattern)


class AsyncPlaywrightInterceptor:
    """Async-API counterpart of PlaywrightInterceptor."""

    def __init__(self, simulator: BackendSimulator, url_pattern: str | None = None) -> None:
        self.simulator = simulator
        self.url_pattern = url_pattern or simulator.settings.intercept_pattern
        self._targets: list[Any] = []

    async def _on_route(self, route: AsyncRoute) -> None:
        request = to_mock_request(route.request)
        response = self.simulator.handle(request)
        if response is None:
            await route.fallback()
            return
        await route.fulfill(**_fulfill_kwargs(response))

    async def install(self, target: Any) -> AsyncPlaywrightInterceptor:
        await target.route(self.url_pattern, self._on_route)
        self._targets.append(target)
        LOG.debug("interceptor_installed", pattern=self.url_pattern, mode="async")
        return self

    async def uninstall(self) -> None:
        while self._targets:
            await self._targets.pop().unroute(self.url_pattern, self._on_route)
        LOG.debug("interceptor_uninstalled", pattern=self.url_pattern, mode="async")


def install_mock_backend(
    page: Any,
    users: UserSeed | None = None,
    settings: PizzamockSettings | None = None,
) -> BackendSimulator:
    """Create a fresh simulator and route *page*'s API calls through it.

    Args:
        page: Sync-API Playwright ``Page`` or ``BrowserContext``.
        users: Valid accounts for this run. Defaults to the demo accounts.
        settings: Simulator settings. Defaults to ``get_settings()``.

    Returns:
        The simulator, for inspecting state or the journal afterwards.
    """
    simulator = BackendSimulator(users=users, settings=settings or get_settings())
    PlaywrightInterceptor(simulator).install(page)
    return simulator


async def install_mock_backend_async(
    page: Any,
    users: UserSeed | None = None,
    settings: PizzamockSettings | None = None,
) -> BackendSimulator:
    """Async-API counterpart of install_mock_backend()."""
    simulator = BackendSimulator(users=users, settings=settings or get_settings())
    await AsyncPlaywrightInterceptor(simulator).install(page)
    return simulator
