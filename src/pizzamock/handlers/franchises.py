"""Franchises, their stores and franchisee contacts.

Deleting a franchise or store that does not exist still succeeds: the
record is removed when present and the confirmation message is returned
either way.
"""

from __future__ import annotations

from typing import Any

from pizzamock.exceptions import BadRequestError, ForbiddenError, NotFoundError
from pizzamock.fixtures import FranchiseAdmin, Role, wire_id
from pizzamock.handlers.base import (
    ResourceHandler,
    name_filter,
    ok,
    optional_list,
    paginate,
    required_str,
)
from pizzamock.routing import MockRequest, MockResponse


class FranchiseCollectionHandler(ResourceHandler):
    """``/api/franchise``: GET lists (optionally filtered), POST creates (admins only)."""

    methods = ("GET", "POST")

    def get(self, request: MockRequest) -> MockResponse:
        accept = name_filter(request.query.get("name"))
        matching = [f for f in self.fixtures.franchises if accept(f.name)]
        page, more = paginate(matching, request.query)
        return ok({"franchises": [f.to_dict() for f in page], "more": more})

    def post(self, request: MockRequest) -> MockResponse:
        user = self.authorize(request)
        if user is None or not user.has_role(Role.ADMIN):
            raise ForbiddenError("unable to create a franchise")
        payload = request.json()
        name = required_str(payload, "name", "franchise name is required")
        admins = [self._resolve_admin(entry) for entry in optional_list(payload, "admins")]
        franchise = self.fixtures.add_franchise(name, admins)
        return ok(franchise.to_dict())

    def _resolve_admin(self, entry: Any) -> FranchiseAdmin:
        if not isinstance(entry, dict):
            raise BadRequestError("franchise admins must have an email")
        email = required_str(entry, "email", "franchise admins must have an email")
        admin = self.fixtures.find_user(email)
        if admin is None:
            raise NotFoundError(f"unknown user for franchise admin {email} provided")
        return FranchiseAdmin(wire_id(admin.id), admin.name, admin.email)


class FranchiseHandler(ResourceHandler):
    """``/api/franchise/{franchise_id}``.

    GET treats the capture as a *user* id and returns the franchises that
    user administers (only the seeded demo franchisee has any). DELETE
    treats it as a franchise id.
    """

    methods = ("GET", "DELETE")

    def get(self, request: MockRequest, franchise_id: int) -> MockResponse:
        franchises = self.fixtures.franchises_administered_by(str(franchise_id))
        return ok([f.to_dict() for f in franchises])

    def delete(self, request: MockRequest, franchise_id: int) -> MockResponse:
        self.authorize(request)
        self.fixtures.remove_franchise(franchise_id)
        return ok({"message": f"franchise {franchise_id} deleted"})


class StoreCollectionHandler(ResourceHandler):
    """``/api/franchise/{franchise_id}/store``: POST opens a store."""

    methods = ("POST",)

    def post(self, request: MockRequest, franchise_id: int) -> MockResponse:
        self.authorize(request)
        name = required_str(request.json(), "name", "store name is required")
        store = self.fixtures.add_store(franchise_id, name)
        return ok(store.to_dict())


class StoreHandler(ResourceHandler):
    """``/api/franchise/{franchise_id}/store/{store_id}``: DELETE closes a store."""

    methods = ("DELETE",)

    def delete(self, request: MockRequest, franchise_id: int, store_id: int) -> MockResponse:
        self.authorize(request)
        self.fixtures.remove_store(franchise_id, store_id)
        return ok({"message": f"store {store_id} deleted from franchise {franchise_id}"})


class FranchiseeHandler(ResourceHandler):
    """``/api/franchisee``: POST echoes the new franchisee contact."""

    methods = ("POST",)

    def post(self, request: MockRequest) -> MockResponse:
        self.authorize(request)
        payload = request.json()
        return ok({"name": payload.get("name"), "email": payload.get("email")})
