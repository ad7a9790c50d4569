"""Pytest configuration for pizzamock tests."""

import sys
from pathlib import Path

import pytest
import structlog
from structlog._config import BoundLoggerLazyProxy

# Add src directory to sys.path for test imports
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))

pytest_plugins = ["pytester"]


def pytest_configure(config: pytest.Config) -> None:
    """Load the fixture plugin when running from a checkout without the entry point."""
    import pizzamock.pytest_plugin

    if not config.pluginmanager.is_registered(pizzamock.pytest_plugin):
        config.pluginmanager.register(pizzamock.pytest_plugin, "pizzamock")


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Give each test default settings, unaffected by the caller's environment."""
    import os

    for key in list(os.environ):
        if key.startswith("PIZZAMOCK_"):
            monkeypatch.delenv(key)

    from pizzamock.config import reset_settings

    reset_settings()


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Reset structlog after each test to prevent closed file handle errors.

    CliRunner captures stderr with a temporary file. When configure_logging()
    runs inside CliRunner, structlog binds loggers to that temp file. After
    the test, CliRunner closes the file.
    """
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    for module in list(sys.modules.values()):
        for attr in getattr(module, "__dict__", {}).values():
            if isinstance(attr, BoundLoggerLazyProxy):
                attr.__dict__.pop("bind", None)
