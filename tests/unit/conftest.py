"""Shared fixtures for unit tests."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from pizzamock.config import PizzamockSettings
from pizzamock.simulator import BackendSimulator


@pytest.fixture
def settings() -> PizzamockSettings:
    """Fixed tokens and sequential ids so expected values are predictable."""
    return PizzamockSettings(token_strategy="fixed", id_strategy="sequential")


@pytest.fixture
def sim(settings: PizzamockSettings) -> BackendSimulator:
    return BackendSimulator(settings=settings)


@pytest.fixture
def login_as(sim: BackendSimulator) -> Callable[[str], str]:
    """Log a seeded account in through the wire and return the issued token.

    All seeded accounts use the password ``a``.
    """

    def _login(email: str, password: str = "a") -> str:
        response = sim.request("PUT", "/api/auth", json={"email": email, "password": password})
        assert response is not None
        assert response.status == 200
        return response.body["token"]

    return _login
