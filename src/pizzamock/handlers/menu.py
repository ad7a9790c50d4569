"""Static pizza menu."""

from __future__ import annotations

from pizzamock.handlers.base import ResourceHandler, ok
from pizzamock.routing import MockRequest, MockResponse


class MenuHandler(ResourceHandler):
    methods = ("GET",)

    def get(self, request: MockRequest) -> MockResponse:
        return ok([item.to_dict() for item in self.fixtures.menu])
