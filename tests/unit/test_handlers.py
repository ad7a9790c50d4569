"""Wire-level tests for each resource handler, driven through the simulator."""

from __future__ import annotations

import pytest

from pizzamock.fixtures import SETTLEMENT_TOKEN
from pizzamock.routing import MockRequest
from pizzamock.simulator import BackendSimulator

UNAUTHORIZED = {"error": "Unauthorized"}
NOT_ALLOWED = {"error": "Method Not Allowed"}


class TestAuthHandler:
    """Tests for /api/auth."""

    def test_login(self, sim: BackendSimulator) -> None:
        response = sim.request("PUT", "/api/auth", json={"email": "d@jwt.com", "password": "a"})
        assert response.status == 200
        assert response.body == {
            "user": {
                "id": "3",
                "name": "Kai Chen",
                "email": "d@jwt.com",
                "password": "a",
                "roles": [{"role": "diner"}],
            },
            "token": "abcdef",
        }

    def test_login_bad_password(self, sim: BackendSimulator) -> None:
        response = sim.request("PUT", "/api/auth", json={"email": "d@jwt.com", "password": "b"})
        assert response.status == 401
        assert response.body == UNAUTHORIZED

    def test_login_empty_body(self, sim: BackendSimulator) -> None:
        response = sim.request("PUT", "/api/auth", headers={"content-type": "application/json"})
        assert response.status == 401

    def test_register(self, sim: BackendSimulator) -> None:
        response = sim.request(
            "POST",
            "/api/auth",
            json={"name": "New User", "email": "test@jwt.click", "password": "mypassword"},
        )
        assert response.status == 200
        assert response.body == {
            "user": {"id": 6, "name": "New User", "email": "test@jwt.click", "roles": [{"role": "diner"}]},
            "token": "abcdef",
        }
        assert sim.session.current_user.email == "test@jwt.click"

    def test_register_conflict(self, sim: BackendSimulator) -> None:
        response = sim.request("POST", "/api/auth", json={"name": "X", "email": "a@jwt.com", "password": "x"})
        assert response.status == 409
        assert response.body == {"error": "User already exists"}

    def test_register_missing_fields(self, sim: BackendSimulator) -> None:
        response = sim.request("POST", "/api/auth", json={"email": "n@jwt.com"})
        assert response.status == 400
        assert response.body == {"error": "name, email, and password are required"}

    def test_logout(self, sim: BackendSimulator, login_as) -> None:
        token = login_as("d@jwt.com")
        response = sim.request("DELETE", "/api/auth", token=token)
        assert response.status == 200
        assert response.body is None
        assert sim.session.current_user is None

    def test_logout_wrong_token(self, sim: BackendSimulator, login_as) -> None:
        login_as("d@jwt.com")
        response = sim.request("DELETE", "/api/auth", token="nope")
        assert response.status == 401
        assert response.body == UNAUTHORIZED
        assert sim.session.active

    def test_unsupported_method(self, sim: BackendSimulator) -> None:
        response = sim.request("GET", "/api/auth")
        assert response.status == 405
        assert response.body == NOT_ALLOWED

    def test_legacy_logout(self, sim: BackendSimulator, login_as) -> None:
        login_as("d@jwt.com")
        response = sim.request("POST", "/api/user/logout")
        assert response.status == 200
        assert not sim.session.active


class TestUserHandlers:
    """Tests for /api/user, /api/user/me and /api/user/{id}."""

    def test_me_logged_out(self, sim: BackendSimulator) -> None:
        response = sim.request("GET", "/api/user/me")
        assert response.status == 200
        assert response.body is None

    def test_me_logged_in(self, sim: BackendSimulator, login_as) -> None:
        login_as("f@jwt.com")
        assert sim.request("GET", "/api/user/me").body["roles"] == [{"role": "franchisee"}]

    def test_me_rejects_other_methods(self, sim: BackendSimulator) -> None:
        assert sim.request("POST", "/api/user/me").status == 405

    def test_update_name_only(self, sim: BackendSimulator, login_as) -> None:
        token = login_as("d@jwt.com")
        response = sim.request("PUT", "/api/user/3", json={"name": "pizza dinerx"}, token=token)
        assert response.status == 200
        assert response.body["token"] == token
        assert response.body["user"]["name"] == "pizza dinerx"
        assert response.body["user"]["email"] == "d@jwt.com"
        assert response.body["user"]["password"] == "a"

    def test_update_email_and_password(self, sim: BackendSimulator, login_as) -> None:
        token = login_as("d@jwt.com")
        sim.request(
            "PUT",
            "/api/user/3",
            json={"name": "", "email": "new@jwt.com", "password": "pw"},
            token=token,
        )
        user = sim.fixtures.find_user("new@jwt.com")
        assert user is not None and user.name == "Kai Chen" and user.password == "pw"
        assert sim.fixtures.find_user("d@jwt.com") is None

    def test_update_email_taken(self, sim: BackendSimulator, login_as) -> None:
        token = login_as("d@jwt.com")
        response = sim.request("PUT", "/api/user/3", json={"email": "a@jwt.com"}, token=token)
        assert response.status == 409

    def test_update_requires_token_before_body(self, sim: BackendSimulator, login_as) -> None:
        """A bad token wins over a malformed body."""
        login_as("d@jwt.com")
        response = sim.handle(
            MockRequest(
                "PUT", "/api/user/3", headers={"authorization": "Bearer wrong"}, body="{broken"
            )
        )
        assert response.status == 401

    def test_update_malformed_body(self, sim: BackendSimulator, login_as) -> None:
        token = login_as("d@jwt.com")
        response = sim.handle(
            MockRequest(
                "PUT", "/api/user/3", headers={"authorization": f"Bearer {token}"}, body="{broken"
            )
        )
        assert response.status == 400

    def test_delete_user(self, sim: BackendSimulator, login_as) -> None:
        token = login_as("a@jwt.com")
        response = sim.request("DELETE", "/api/user/3", token=token)
        assert response.body == {"message": "User deleted successfully"}
        assert sim.fixtures.find_user("d@jwt.com") is None
        assert sim.session.active

    def test_delete_self_ends_session(self, sim: BackendSimulator, login_as) -> None:
        token = login_as("d@jwt.com")
        sim.request("DELETE", "/api/user/3", token=token)
        assert not sim.session.active

    def test_list_users(self, sim: BackendSimulator, login_as) -> None:
        token = login_as("a@jwt.com")
        response = sim.request("GET", "/api/user", token=token)
        assert response.body["more"] is False
        assert [u["email"] for u in response.body["users"]] == ["d@jwt.com", "f@jwt.com", "a@jwt.com"]
        assert all("password" not in u for u in response.body["users"])

    def test_list_users_paginated(self, sim: BackendSimulator, login_as) -> None:
        token = login_as("a@jwt.com")
        response = sim.request("GET", "/api/user?page=0&limit=2", token=token)
        assert len(response.body["users"]) == 2
        assert response.body["more"] is True

    def test_list_users_requires_token(self, sim: BackendSimulator) -> None:
        assert sim.request("GET", "/api/user").status == 401


class TestMenuHandler:
    def test_menu(self, sim: BackendSimulator) -> None:
        response = sim.request("GET", "/api/order/menu")
        assert response.status == 200
        assert [item["title"] for item in response.body] == ["Veggie", "Pepperoni"]
        assert response.body[0] == {
            "id": 1,
            "title": "Veggie",
            "price": 0.0038,
            "description": "A garden of delight",
            "image": "pizza1.png",
        }

    def test_menu_read_only(self, sim: BackendSimulator) -> None:
        assert sim.request("POST", "/api/order/menu", json={}).status == 405


class TestFranchiseHandlers:
    """Tests for /api/franchise and its sub-resources."""

    def test_list(self, sim: BackendSimulator) -> None:
        body = sim.request("GET", "/api/franchise").body
        assert [f["name"] for f in body["franchises"]] == ["LotaPizza", "PizzaCorp", "topSpot"]
        assert body["more"] is False
        assert body["franchises"][0]["admins"] == [{"id": 4, "name": "Kai Chen", "email": "f@jwt.com"}]

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("LotaPizza", ["LotaPizza"]),
            ("lota", ["LotaPizza"]),
            ("pizza", ["LotaPizza", "PizzaCorp"]),
            ("*", ["LotaPizza", "PizzaCorp", "topSpot"]),
            ("", ["LotaPizza", "PizzaCorp", "topSpot"]),
            ("t*t", ["topSpot"]),
            ("zzz", []),
        ],
    )
    def test_name_filter(self, sim: BackendSimulator, name: str, expected: list[str]) -> None:
        body = sim.request("GET", f"/api/franchise?name={name}").body
        assert [f["name"] for f in body["franchises"]] == expected

    def test_pagination(self, sim: BackendSimulator) -> None:
        body = sim.request("GET", "/api/franchise?page=1&limit=2&name=*").body
        assert [f["name"] for f in body["franchises"]] == ["topSpot"]
        assert body["more"] is False

    def test_bad_pagination(self, sim: BackendSimulator) -> None:
        assert sim.request("GET", "/api/franchise?limit=ten").status == 400

    def test_franchises_for_demo_franchisee(self, sim: BackendSimulator) -> None:
        body = sim.request("GET", "/api/franchise/4").body
        assert len(body) == 1
        assert body[0]["name"] == "LotaPizza"
        assert body[0]["stores"][0] == {"id": 4, "name": "Lehi", "totalRevenue": 0}

    def test_franchises_for_other_user(self, sim: BackendSimulator) -> None:
        assert sim.request("GET", "/api/franchise/3").body == []

    def test_create_as_admin(self, sim: BackendSimulator, login_as) -> None:
        token = login_as("a@jwt.com")
        response = sim.request(
            "POST",
            "/api/franchise",
            json={"name": "Pizza Planet", "admins": [{"email": "f@jwt.com"}]},
            token=token,
        )
        assert response.status == 200
        assert response.body == {
            "id": 5,
            "name": "Pizza Planet",
            "admins": [{"id": 4, "name": "Kai Chen", "email": "f@jwt.com"}],
            "stores": [],
        }
        assert len(sim.fixtures.franchises) == 4

    def test_create_as_franchisee_forbidden(self, sim: BackendSimulator, login_as) -> None:
        token = login_as("f@jwt.com")
        response = sim.request("POST", "/api/franchise", json={"name": "Mine"}, token=token)
        assert response.status == 403
        assert response.body == {"error": "unable to create a franchise"}
        assert len(sim.fixtures.franchises) == 3

    def test_create_without_token(self, sim: BackendSimulator) -> None:
        response = sim.request("POST", "/api/franchise", json={"name": "Mine"})
        assert response.status == 401

    def test_create_unknown_admin(self, sim: BackendSimulator, login_as) -> None:
        token = login_as("a@jwt.com")
        response = sim.request(
            "POST",
            "/api/franchise",
            json={"name": "Pizza Planet", "admins": [{"email": "pizzaPlanet@jwt.com"}]},
            token=token,
        )
        assert response.status == 404
        assert "pizzaPlanet@jwt.com" in response.body["error"]

    def test_create_missing_name(self, sim: BackendSimulator, login_as) -> None:
        token = login_as("a@jwt.com")
        assert sim.request("POST", "/api/franchise", json={}, token=token).status == 400

    def test_delete(self, sim: BackendSimulator, login_as) -> None:
        token = login_as("a@jwt.com")
        response = sim.request("DELETE", "/api/franchise/4", token=token)
        assert response.body == {"message": "franchise 4 deleted"}
        assert sim.fixtures.find_franchise(4) is None

    def test_delete_nonexistent_succeeds(self, sim: BackendSimulator, login_as) -> None:
        token = login_as("a@jwt.com")
        response = sim.request("DELETE", "/api/franchise/77", token=token)
        assert response.status == 200
        assert response.body == {"message": "franchise 77 deleted"}

    def test_delete_wrong_token(self, sim: BackendSimulator, login_as) -> None:
        login_as("a@jwt.com")
        assert sim.request("DELETE", "/api/franchise/4", token="x").status == 401
        assert sim.fixtures.find_franchise(4) is not None

    def test_create_store(self, sim: BackendSimulator, login_as) -> None:
        token = login_as("f@jwt.com")
        response = sim.request("POST", "/api/franchise/2/store", json={"name": "Provo"}, token=token)
        assert response.status == 200
        assert response.body == {"id": 8, "name": "Provo", "totalRevenue": 0}

    def test_create_store_blank_name(self, sim: BackendSimulator, login_as) -> None:
        token = login_as("f@jwt.com")
        response = sim.request("POST", "/api/franchise/2/store", json={"name": " "}, token=token)
        assert response.status == 400
        assert response.body == {"error": "store name is required"}

    def test_create_store_token_checked_first(self, sim: BackendSimulator) -> None:
        response = sim.request("POST", "/api/franchise/2/store", json={})
        assert response.status == 401

    def test_delete_store(self, sim: BackendSimulator, login_as) -> None:
        token = login_as("a@jwt.com")
        response = sim.request("DELETE", "/api/franchise/2/store/4", token=token)
        assert response.body == {"message": "store 4 deleted from franchise 2"}
        assert [s.name for s in sim.fixtures.find_franchise(2).stores] == ["Springville", "American Fork"]

    def test_store_routes_reject_other_methods(self, sim: BackendSimulator, login_as) -> None:
        token = login_as("a@jwt.com")
        assert sim.request("GET", "/api/franchise/2/store", token=token).status == 405
        assert sim.request("PUT", "/api/franchise/2/store/4", token=token).status == 405

    def test_franchisee_contact(self, sim: BackendSimulator, login_as) -> None:
        token = login_as("a@jwt.com")
        response = sim.request(
            "POST", "/api/franchisee", json={"name": "P", "email": "p@jwt.com", "extra": 1}, token=token
        )
        assert response.body == {"name": "P", "email": "p@jwt.com"}

    def test_franchisee_contact_get_not_allowed(self, sim: BackendSimulator) -> None:
        assert sim.request("GET", "/api/franchisee").status == 405


class TestOrderHandler:
    """Tests for /api/order."""

    def test_place_order(self, sim: BackendSimulator, login_as) -> None:
        token = login_as("d@jwt.com")
        order = {"franchiseId": 2, "storeId": 4, "items": [{"menuId": 1, "description": "Veggie", "price": 0.0038}]}
        response = sim.request("POST", "/api/order", json=order, token=token)
        assert response.status == 200
        assert response.body == {"order": {**order, "id": 16}, "jwt": SETTLEMENT_TOKEN}
        assert sim.fixtures.placed_orders == [response.body["order"]]

    def test_place_order_requires_token(self, sim: BackendSimulator) -> None:
        assert sim.request("POST", "/api/order", json={"items": []}).status == 401

    def test_history_is_canned(self, sim: BackendSimulator, login_as) -> None:
        token = login_as("d@jwt.com")
        sim.request("POST", "/api/order", json={"items": []}, token=token)
        body = sim.request("GET", "/api/order").body
        assert body["dinerId"] == 416
        assert body["page"] == 1
        assert [o["id"] for o in body["orders"]] == [15]
        assert len(body["orders"][0]["items"]) == 3

    def test_history_response_is_a_copy(self, sim: BackendSimulator) -> None:
        sim.request("GET", "/api/order").body["orders"].clear()
        assert len(sim.request("GET", "/api/order").body["orders"]) == 1

    def test_unsupported_method(self, sim: BackendSimulator) -> None:
        assert sim.request("DELETE", "/api/order").body == NOT_ALLOWED


class TestBodyFieldTypes:
    """Well-formed JSON with wrongly typed fields is answered with 400."""

    @pytest.mark.parametrize(
        ("login", "method", "path", "body", "error"),
        [
            (None, "PUT", "/api/auth", {"email": ["d@jwt.com"], "password": "a"}, "email must be a string"),
            (None, "PUT", "/api/auth", {"email": "d@jwt.com", "password": 1}, "password must be a string"),
            (
                None,
                "POST",
                "/api/auth",
                {"name": "n", "email": 5, "password": "p"},
                "name, email, and password are required",
            ),
            ("d@jwt.com", "PUT", "/api/user/3", {"email": ["x"]}, "email must be a string"),
            ("d@jwt.com", "PUT", "/api/user/3", {"name": {"first": "Kai"}}, "name must be a string"),
            ("d@jwt.com", "PUT", "/api/user/3", {"password": 7}, "password must be a string"),
            ("a@jwt.com", "POST", "/api/franchise", {"name": 7}, "franchise name is required"),
            ("a@jwt.com", "POST", "/api/franchise", {"name": "x", "admins": 5}, "admins must be a list"),
            (
                "a@jwt.com",
                "POST",
                "/api/franchise",
                {"name": "x", "admins": [{"email": ["f@jwt.com"]}]},
                "franchise admins must have an email",
            ),
            (
                "a@jwt.com",
                "POST",
                "/api/franchise",
                {"name": "x", "admins": ["f@jwt.com"]},
                "franchise admins must have an email",
            ),
            ("f@jwt.com", "POST", "/api/franchise/2/store", {"name": ["Provo"]}, "store name is required"),
        ],
    )
    def test_rejected(
        self, sim: BackendSimulator, login_as, login: str | None, method: str, path: str, body, error: str
    ) -> None:
        token = login_as(login) if login else None
        franchises_before = len(sim.fixtures.franchises)

        response = sim.request(method, path, json=body, token=token)

        assert response.status == 400
        assert response.body == {"error": error}
        assert len(sim.fixtures.franchises) == franchises_before
        assert sim.fixtures.find_user("d@jwt.com").password == "a"

    def test_null_fields_are_ignored_on_update(self, sim: BackendSimulator, login_as) -> None:
        token = login_as("d@jwt.com")
        response = sim.request(
            "PUT", "/api/user/3", json={"name": None, "email": None, "password": None}, token=token
        )
        assert response.status == 200
        assert response.body["user"]["email"] == "d@jwt.com"

    def test_null_admins_means_none(self, sim: BackendSimulator, login_as) -> None:
        token = login_as("a@jwt.com")
        response = sim.request("POST", "/api/franchise", json={"name": "x", "admins": None}, token=token)
        assert response.status == 200
        assert response.body["admins"] == []


class TestNonNumericUserIds:
    """Seeded accounts may use ids that are not numbers."""

    @pytest.fixture
    def sim(self, settings) -> BackendSimulator:
        return BackendSimulator(
            users=[
                {"id": "admin-1", "name": "Ada", "email": "a@jwt.com", "password": "a", "roles": ["admin"]},
                {"id": "3", "name": "Kai Chen", "email": "d@jwt.com", "password": "a", "roles": ["diner"]},
            ],
            settings=settings,
        )

    def test_franchise_admin_keeps_string_id(self, sim: BackendSimulator, login_as) -> None:
        token = login_as("a@jwt.com")
        response = sim.request(
            "POST", "/api/franchise", json={"name": "x", "admins": [{"email": "a@jwt.com"}]}, token=token
        )
        assert response.status == 200
        assert response.body["admins"] == [{"id": "admin-1", "name": "Ada", "email": "a@jwt.com"}]

    def test_user_listing(self, sim: BackendSimulator, login_as) -> None:
        token = login_as("a@jwt.com")
        response = sim.request("GET", "/api/user", token=token)
        assert [u["id"] for u in response.body["users"]] == ["admin-1", 3]

    def test_register_next_to_string_ids(self, sim: BackendSimulator) -> None:
        response = sim.request("POST", "/api/auth", json={"name": "n", "email": "n@jwt.com", "password": "p"})
        assert response.status == 200
        assert response.body["user"]["id"] == 4
