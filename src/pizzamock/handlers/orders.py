"""Order placement and the diner's order history."""

from __future__ import annotations

import copy

from pizzamock.fixtures import SETTLEMENT_TOKEN
from pizzamock.handlers.base import ResourceHandler, ok
from pizzamock.routing import MockRequest, MockResponse


class OrderHandler(ResourceHandler):
    """``/api/order``.

    POST echoes the submitted order with a fresh id and the placeholder
    settlement token; franchise and store ids are not checked. GET returns
    the canned history page, not the orders placed during the run.
    """

    methods = ("GET", "POST")

    def get(self, request: MockRequest) -> MockResponse:
        return ok(copy.deepcopy(self.fixtures.order_history))

    def post(self, request: MockRequest) -> MockResponse:
        self.authorize(request)
        order = self.fixtures.record_order(request.json())
        return ok({"order": order, "jwt": SETTLEMENT_TOKEN})
