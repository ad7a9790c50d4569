"""pytest fixtures for browser tests against the mock backend.

Registered through the ``pytest11`` entry point, so installing pizzamock is
enough. ``mocked_page`` needs the ``page`` fixture from pytest-playwright.

Override ``pizzamock_users`` in a test module or conftest to change the
accounts a run accepts::

    @pytest.fixture
    def pizzamock_users():
        return [{"id": "3", "name": "Kai Chen", "email": "d@jwt.com",
                 "password": "a", "roles": [{"role": "diner"}]}]
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from typing import Any

import pytest

from pizzamock.config import PizzamockSettings, get_settings
from pizzamock.fixtures import UserSeed
from pizzamock.interception import PlaywrightInterceptor
from pizzamock.logging import bind_test_context, clear_test_context, configure_logging, get_logger
from pizzamock.simulator import BackendSimulator

LOG = get_logger(__name__)


def pytest_configure(config: pytest.Config) -> None:
    """Apply the PIZZAMOCK_LOG_LEVEL and PIZZAMOCK_LOG_FORMAT settings to the test run."""
    settings = get_settings()
    configure_logging(level=settings.log_level, json_output=settings.log_format == "json")


def _har_filename(nodeid: str) -> str:
    return re.sub(r"[^A-Za-z0-9_.-]+", "_", nodeid).strip("_") + ".har"


@pytest.fixture
def pizzamock_settings() -> PizzamockSettings:
    """Settings used by pizza_backend. Override to pin tokens or id allocation."""
    return get_settings()


@pytest.fixture
def pizzamock_users() -> UserSeed | None:
    """Accounts accepted by pizza_backend. None means the demo accounts."""
    return None


@pytest.fixture
def pizza_backend(
    request: pytest.FixtureRequest,
    pizzamock_users: UserSeed | None,
    pizzamock_settings: PizzamockSettings,
) -> Iterator[BackendSimulator]:
    """A fresh simulator per test, discarded afterwards."""
    bind_test_context(request.node.nodeid)
    simulator = BackendSimulator(users=pizzamock_users, settings=pizzamock_settings)
    try:
        yield simulator
    finally:
        har_dir = pizzamock_settings.har_dir
        if har_dir is not None and simulator.journal:
            simulator.export_har(har_dir / _har_filename(request.node.nodeid))
        clear_test_context()


@pytest.fixture
def mocked_page(page: Any, pizza_backend: BackendSimulator) -> Iterator[Any]:
    """Playwright page whose API calls are answered by pizza_backend.

    The page is opened on the ``base_url`` setting before the test runs.
    """
    interceptor = PlaywrightInterceptor(pizza_backend).install(page)
    page.goto(pizza_backend.settings.base_url)
    try:
        yield page
    finally:
        interceptor.uninstall()
