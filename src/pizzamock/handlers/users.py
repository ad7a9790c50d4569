"""Current-user lookup, profile updates, listing and deletion."""

from __future__ import annotations

from pizzamock.exceptions import ConflictError, UnauthorizedError
from pizzamock.handlers.base import ResourceHandler, name_filter, ok, optional_str, paginate
from pizzamock.routing import MockRequest, MockResponse


class CurrentUserHandler(ResourceHandler):
    """``/api/user/me``: the session user, or an empty body when logged out."""

    methods = ("GET",)

    def get(self, request: MockRequest) -> MockResponse:
        user = self.session.current_user
        return ok(user.to_dict() if user is not None else None)


class UserHandler(ResourceHandler):
    """``/api/user/{user_id}``.

    PUT updates the *session* user whatever id is in the path; fields that
    are missing or empty keep their old value.
    """

    methods = ("PUT", "DELETE")

    def put(self, request: MockRequest, user_id: int) -> MockResponse:
        user = self.authorize(request)
        if user is None:
            raise UnauthorizedError()
        payload = request.json()
        name = optional_str(payload, "name")
        email = optional_str(payload, "email")
        password = optional_str(payload, "password")

        new_email = email or user.email
        if new_email != user.email and self.fixtures.find_user(new_email) is not None:
            raise ConflictError()

        old_email = user.email
        user.name = name or user.name
        user.email = new_email
        if password:
            user.password = password
        self.fixtures.rekey_user(user, old_email)
        return ok({"user": user.to_dict(), "token": self.session.current_token})

    def delete(self, request: MockRequest, user_id: int) -> MockResponse:
        self.authorize(request)
        removed = self.fixtures.remove_user(user_id)
        if removed is not None and removed is self.session.current_user:
            self.session.clear()
        return ok({"message": "User deleted successfully"})


class UserListHandler(ResourceHandler):
    """``/api/user[?page=&limit=&name=]``: registered users, paginated."""

    methods = ("GET",)

    def get(self, request: MockRequest) -> MockResponse:
        self.authorize(request)
        accept = name_filter(request.query.get("name"))
        users = [u for u in self.fixtures.users.values() if accept(u.name)]
        page, more = paginate(users, request.query)
        return ok({"users": [u.public_dict() for u in page], "more": more})
