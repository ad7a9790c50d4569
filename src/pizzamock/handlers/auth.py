"""Authentication: login, registration and logout."""

from __future__ import annotations

from pizzamock.handlers.base import ResourceHandler, ok, optional_str, required_str
from pizzamock.routing import MockRequest, MockResponse


class AuthHandler(ResourceHandler):
    """``/api/auth``: PUT logs in, POST registers, DELETE logs out."""

    methods = ("PUT", "POST", "DELETE")

    def put(self, request: MockRequest) -> MockResponse:
        payload = request.json()
        user, token = self.session.login(
            optional_str(payload, "email") or "",
            optional_str(payload, "password") or "",
        )
        return ok({"user": user.to_dict(), "token": token})

    def post(self, request: MockRequest) -> MockResponse:
        payload = request.json()
        message = "name, email, and password are required"
        name = required_str(payload, "name", message)
        email = required_str(payload, "email", message)
        password = required_str(payload, "password", message)
        user, token = self.session.register(name, email, password)
        return ok({"user": user.public_dict(), "token": token})

    def delete(self, request: MockRequest) -> MockResponse:
        self.session.logout(request.bearer_token())
        return ok()


class LegacyLogoutHandler(ResourceHandler):
    """``/api/user/logout``: older logout endpoint, no token required."""

    methods = ("POST",)

    def post(self, request: MockRequest) -> MockResponse:
        self.session.clear()
        return ok()
