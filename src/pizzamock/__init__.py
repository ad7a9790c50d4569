"""pizzamock - a deterministic mock backend for storefront browser tests.

Intercepts the pizza storefront's ``/api`` calls in Playwright and answers
them from a small in-memory model of users, sessions, franchises, stores
and orders.

This package provides:
- A route dispatcher with ordered, typed path patterns
- A single-session auth model with bearer-token checks
- Resource handlers for auth, users, menu, franchises, stores and orders
- Sync and async Playwright interceptors
- pytest fixtures (``pizza_backend``, ``mocked_page``)

Example:
    >>> from pizzamock import install_mock_backend
    >>> backend = install_mock_backend(page)
    >>> page.goto("http://localhost:5173/")
    >>> # ...drive the UI...
    >>> backend.session.current_user
"""

__version__ = "0.3.0"

from pizzamock.config import PizzamockSettings, get_settings
from pizzamock.exceptions import (
    BadRequestError,
    ConfigurationError,
    ConflictError,
    ForbiddenError,
    MethodNotAllowedError,
    NotFoundError,
    PizzamockError,
    UnauthorizedError,
)
from pizzamock.fixtures import (
    DEFAULT_USERS,
    DEMO_FRANCHISEE_ID,
    Franchise,
    MenuItem,
    Order,
    ResourceFixtures,
    Role,
    Store,
    User,
)
from pizzamock.interception import (
    AsyncPlaywrightInterceptor,
    PlaywrightInterceptor,
    install_mock_backend,
    install_mock_backend_async,
)
from pizzamock.routing import Dispatcher, MockRequest, MockResponse, PathPattern
from pizzamock.session import SessionState
from pizzamock.simulator import BackendSimulator, Exchange

__all__ = [
    # Version
    "__version__",
    # Simulator
    "BackendSimulator",
    "Exchange",
    "SessionState",
    "ResourceFixtures",
    # Routing
    "Dispatcher",
    "PathPattern",
    "MockRequest",
    "MockResponse",
    # Interception
    "PlaywrightInterceptor",
    "AsyncPlaywrightInterceptor",
    "install_mock_backend",
    "install_mock_backend_async",
    # Data model
    "Role",
    "User",
    "Franchise",
    "Store",
    "MenuItem",
    "Order",
    "DEFAULT_USERS",
    "DEMO_FRANCHISEE_ID",
    # Configuration
    "PizzamockSettings",
    "get_settings",
    # Exceptions
    "PizzamockError",
    "ConfigurationError",
    "BadRequestError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "MethodNotAllowedError",
    "ConflictError",
]
